from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from . import config
from .errors import DecodeError, EmptySheet, ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dataset:
    """
    One uploaded file after normalization.

    - name: file name, unique among the loaded datasets
    - columns: chartable headers in sheet order (bookkeeping columns removed)
    - rows: one dict per kept sheet row, always holding config.TIME_FIELD;
      data cells that did not parse are simply absent
    - dropped_rows: sheet rows discarded because their time cell was unusable
    """

    name: str
    columns: Tuple[str, ...]
    rows: Tuple[Dict[str, float], ...]
    dropped_rows: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": list(self.columns),
            "rows": [dict(r) for r in self.rows],
            "dropped_rows": self.dropped_rows,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Dataset":
        return cls(
            name=data["name"],
            columns=tuple(data.get("columns", [])),
            rows=tuple(dict(r) for r in data.get("rows", [])),
            dropped_rows=int(data.get("dropped_rows", 0)),
        )


# -----------------------------
# Cell parsing
# -----------------------------
def clean_numeric(series: pd.Series) -> pd.Series:
    """
    Coerce one column to floats; anything that is not a finite number becomes NaN.

    Text cells use the French convention "12,5": the first comma is read
    as the decimal point. Booleans are not numbers here.
    """
    s = series
    if is_bool_dtype(s) or not is_numeric_dtype(s):
        s = s.astype(str).str.strip().str.replace(",", ".", n=1, regex=False)
    s = pd.to_numeric(s, errors="coerce")
    return s.replace([np.inf, -np.inf], np.nan).astype(float)


def parse_number(value: Any, column: str = "") -> float:
    """Parse one cell as a finite float, or raise ParseError."""
    parsed = clean_numeric(pd.Series([value]))
    if pd.isna(parsed.iloc[0]):
        raise ParseError(column, value)
    return float(parsed.iloc[0])


# -----------------------------
# Row normalization
# -----------------------------
def chart_columns(headers: Sequence[Any]) -> List[str]:
    return [str(h) for h in headers if str(h) not in config.EXCLUDED_COLUMNS]


def normalize_frame(name: str, frame: pd.DataFrame) -> Dataset:
    """
    Turn a decoded sheet into a Dataset.

    Rows whose time cell does not parse are dropped; other cells that do
    not parse are left out of their row.
    """
    frame = frame.copy()
    frame.columns = [str(c) for c in frame.columns]
    columns = chart_columns(frame.columns)

    if config.TIME_SOURCE_COLUMN in frame.columns:
        times = clean_numeric(frame[config.TIME_SOURCE_COLUMN])
    else:
        times = pd.Series(np.nan, index=frame.index, dtype=float)

    values = pd.DataFrame(
        {config.TIME_FIELD: times, **{col: clean_numeric(frame[col]) for col in columns}},
        index=frame.index,
    )

    keep = times.notna()
    dropped = int((~keep).sum())
    if dropped:
        logger.warning("%s: dropped %d row(s) without a usable '%s' value",
                       name, dropped, config.TIME_SOURCE_COLUMN)

    rows = tuple(
        {k: float(v) for k, v in record.items() if pd.notna(v)}
        for record in values[keep].to_dict(orient="records")
    )
    return Dataset(name=name, columns=tuple(columns), rows=rows, dropped_rows=dropped)


def normalize_records(
    name: str,
    records: Sequence[Mapping[str, Any]],
    headers: Optional[Sequence[Any]] = None,
) -> Dataset:
    """
    Same as normalize_frame for rows given as dicts. The column set comes
    from `headers` when given, otherwise from the keys of the first record.
    """
    if headers is None:
        headers = list(records[0].keys()) if records else []
    frame = pd.DataFrame(list(records), columns=[str(h) for h in headers])
    return normalize_frame(name, frame)


# -----------------------------
# Spreadsheet decoding
# -----------------------------
def _engine_for(filename: str) -> str:
    lower = filename.lower()
    if lower.endswith(".xlsx"):
        return "openpyxl"
    if lower.endswith(".xls"):
        return "xlrd"
    raise DecodeError(filename, f"unsupported file type (expected {', '.join(config.ACCEPTED_EXTENSIONS)})")


def read_workbook(filename: str, content: bytes) -> pd.DataFrame:
    """Decode the first sheet of a workbook; the header row gives the columns."""
    engine = _engine_for(filename)
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, engine=engine)
    except Exception as exc:
        raise DecodeError(filename, str(exc) or type(exc).__name__) from exc

    if len(df.columns) == 0:
        raise EmptySheet(filename)
    return df


def load_dataset(filename: str, content: bytes) -> Dataset:
    dataset = normalize_frame(filename, read_workbook(filename, content))
    logger.info("Loaded %s: %d column(s), %d row(s)", filename, len(dataset.columns), len(dataset.rows))
    return dataset
