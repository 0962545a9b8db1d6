import base64
import io

import pandas as pd
import pytest

from perfchart_dashboard.normalizer import Dataset


def xlsx_bytes(df: pd.DataFrame) -> bytes:
    buf = io.BytesIO()
    df.to_excel(buf, index=False, engine="openpyxl")
    return buf.getvalue()


def upload_contents(content: bytes) -> str:
    mime = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    return f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"


@pytest.fixture
def file_a() -> Dataset:
    return Dataset(
        name="A",
        columns=("Indicateur1", "Indicateur1_Tache1"),
        rows=({"Temps": 0.0, "Indicateur1": 10.0, "Indicateur1_Tache1": 5.0},),
    )


@pytest.fixture
def file_b() -> Dataset:
    return Dataset(
        name="B",
        columns=("CHARGE_TOTALE",),
        rows=({"Temps": 0.0, "CHARGE_TOTALE": 80.0},),
    )


@pytest.fixture
def timeline() -> Dataset:
    return Dataset(
        name="run.xlsx",
        columns=("Indicateur1", "Pression"),
        rows=tuple(
            {"Temps": float(t), "Indicateur1": float(t * 2), "Pression": 1.0}
            for t in range(0, 31, 5)
        ),
    )
