from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import plotly.graph_objs as go

from . import config
from . import zoom
from .merger import MergedRow, merged_frame, short_name
from .session import SessionState, selected_series


@dataclass(frozen=True)
class SeriesTrace:
    key: str
    name: str
    color: str


@dataclass(frozen=True)
class ChartProjection:
    rows: List[MergedRow]
    series: List[SeriesTrace]
    band: Optional[Tuple[float, float]] = None

    @property
    def empty(self) -> bool:
        return not self.series


def series_traces(keys: Sequence[str]) -> List[SeriesTrace]:
    palette = config.SERIES_COLORS
    return [
        SeriesTrace(key=k, name=short_name(k), color=palette[i % len(palette)])
        for i, k in enumerate(keys)
    ]


def project(state: SessionState) -> ChartProjection:
    """Rows inside the zoom window plus the selected series, in selection order."""
    return ChartProjection(
        rows=zoom.apply_window(state.merged, state.zoom),
        series=series_traces(selected_series(state)),
        band=zoom.draft_band(state.zoom),
    )


def build_figure(projection: ChartProjection) -> go.Figure:
    frame = merged_frame(list(projection.rows))
    x = frame.index.tolist()

    data = []
    for trace in projection.series:
        column = frame[trace.key] if trace.key in frame.columns else pd.Series(index=frame.index, dtype=float)
        y = [None if pd.isna(v) else float(v) for v in column]
        data.append(
            go.Scatter(
                x=x,
                y=y,
                mode="lines",
                name=trace.name,
                line={"color": trace.color, "width": 2},
                connectgaps=True,
                hovertemplate=f"{trace.name}: %{{y}}<extra></extra>",
            )
        )

    fig = go.Figure(
        data=data,
        layout=go.Layout(
            xaxis={"title": config.X_AXIS_TITLE},
            yaxis={"title": config.Y_AXIS_TITLE},
            hovermode="x unified",
            dragmode="select",
            selectdirection="h",
            margin={"l": 50, "r": 20, "t": 20, "b": 50},
            legend={"orientation": "h"},
        ),
    )

    # plotly draws its own selection box while dragging, so a band only
    # shows when press/move events reach the session one at a time.
    if projection.band is not None:
        x0, x1 = projection.band
        fig.add_vrect(x0=x0, x1=x1, fillcolor="rgba(59,130,246,0.15)", line_width=0)

    return fig


def _seconds(value: float) -> str:
    return np.format_float_positional(value, trim="-")


def window_label(state: SessionState) -> Optional[str]:
    window = state.zoom.window
    if window is None:
        return None
    return f"{_seconds(window.left)}s → {_seconds(window.right)}s"


def summary_text(state: SessionState) -> str:
    n_files = len(state.datasets)
    n_series = len(selected_series(state))
    files = f"{n_files} fichier{'s' if n_files > 1 else ''} chargé{'s' if n_files > 1 else ''}"
    series = f"{n_series} courbe{'s' if n_series > 1 else ''} affichée{'s' if n_series > 1 else ''}"
    return f"{files} — {series}"
