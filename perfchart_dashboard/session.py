from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from . import selection as sel
from . import zoom as zoom_controller
from .zoom import ZoomState
from .grouping import group_columns, main_indicators
from .merger import MergedRow, merge_datasets, series_key
from .normalizer import Dataset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    """
    Everything the performance page knows about: the loaded datasets,
    their merged table, the series selection and the zoom state.

    Each event function below takes a snapshot and returns a new one.
    """

    datasets: Tuple[Dataset, ...] = ()
    merged: Tuple[MergedRow, ...] = ()
    selection: Dict[str, bool] = field(default_factory=dict)
    zoom: ZoomState = ZoomState()

    def dataset(self, name: str) -> Optional[Dataset]:
        for ds in self.datasets:
            if ds.name == name:
                return ds
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "datasets": [ds.to_dict() for ds in self.datasets],
            "merged": [dict(r) for r in self.merged],
            "selection": dict(self.selection),
            "zoom": self.zoom.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "SessionState":
        if not data:
            return cls()
        return cls(
            datasets=tuple(Dataset.from_dict(d) for d in data.get("datasets", [])),
            merged=tuple(dict(r) for r in data.get("merged", [])),
            selection={k: bool(v) for k, v in (data.get("selection") or {}).items()},
            zoom=ZoomState.from_dict(data.get("zoom")),
        )


# -----------------------------
# Key lists
# -----------------------------
def file_keys(dataset: Dataset) -> List[str]:
    return [series_key(dataset.name, c) for c in dataset.columns]


def group_keys(dataset: Dataset, index: int) -> List[str]:
    """Keys of the index-th group of a dataset. Labels can repeat, positions cannot."""
    groups = group_columns(dataset.columns)
    if not 0 <= index < len(groups):
        return []
    return [series_key(dataset.name, c) for c in groups[index].columns]


def main_indicator_keys(dataset: Dataset) -> List[str]:
    return [series_key(dataset.name, c) for c in main_indicators(dataset.columns)]


def all_keys(state: SessionState) -> List[str]:
    return [k for ds in state.datasets for k in file_keys(ds)]


# -----------------------------
# Dataset events
# -----------------------------
def add_dataset(state: SessionState, dataset: Dataset) -> SessionState:
    """
    Register a dataset and rebuild the merged table. A dataset with the
    same name replaces the previous one at its position. The zoom window
    is kept as is.
    """
    datasets = list(state.datasets)
    for i, ds in enumerate(datasets):
        if ds.name == dataset.name:
            datasets[i] = dataset
            logger.info("Replaced dataset %s", dataset.name)
            break
    else:
        datasets.append(dataset)
        logger.info("Added dataset %s", dataset.name)

    return replace(state, datasets=tuple(datasets), merged=tuple(merge_datasets(datasets)))


def remove_dataset(state: SessionState, name: str) -> SessionState:
    datasets = tuple(ds for ds in state.datasets if ds.name != name)
    if len(datasets) == len(state.datasets):
        return state
    pruned = replace(state, datasets=datasets, merged=tuple(merge_datasets(datasets)))
    logger.info("Removed dataset %s", name)
    return replace(pruned, selection=sel.prune(state.selection, all_keys(pruned)))


# -----------------------------
# Selection events
# -----------------------------
def toggle_series(state: SessionState, key: str) -> SessionState:
    return replace(state, selection=sel.toggle_one(state.selection, key))


def toggle_keys(state: SessionState, keys: List[str]) -> SessionState:
    return replace(state, selection=sel.toggle_group(state.selection, keys))


def toggle_group(state: SessionState, dataset_name: str, index: int) -> SessionState:
    ds = state.dataset(dataset_name)
    if ds is None:
        return state
    return toggle_keys(state, group_keys(ds, index))


def toggle_file(state: SessionState, dataset_name: str) -> SessionState:
    ds = state.dataset(dataset_name)
    if ds is None:
        return state
    return toggle_keys(state, file_keys(ds))


def toggle_main_indicators(state: SessionState, dataset_name: str) -> SessionState:
    ds = state.dataset(dataset_name)
    if ds is None:
        return state
    return toggle_keys(state, main_indicator_keys(ds))


def toggle_all(state: SessionState) -> SessionState:
    return replace(state, selection=sel.toggle_all(state.selection, all_keys(state)))


def selected_series(state: SessionState) -> List[str]:
    return sel.selected_keys(state.selection, all_keys(state))


# -----------------------------
# Zoom events
# -----------------------------
def zoom_press(state: SessionState, position: Any) -> SessionState:
    return replace(state, zoom=zoom_controller.press(state.zoom, position))


def zoom_move(state: SessionState, position: Any) -> SessionState:
    return replace(state, zoom=zoom_controller.move(state.zoom, position))


def zoom_release(state: SessionState) -> SessionState:
    return replace(state, zoom=zoom_controller.release(state.zoom))


def zoom_select(state: SessionState, start: Any, end: Any) -> SessionState:
    return replace(state, zoom=zoom_controller.select_range(state.zoom, start, end))


def zoom_reset(state: SessionState) -> SessionState:
    return replace(state, zoom=zoom_controller.reset(state.zoom))


# -----------------------------
# UI actions
# -----------------------------
def apply_toggle(state: SessionState, action: List[str]) -> SessionState:
    """
    Apply one checkbox action as encoded by the selection panel:
    ["all"], ["file", name], ["main", name], ["group", name, index]
    or ["one", key].
    """
    kind, args = action[0], action[1:]
    if kind == "all":
        return toggle_all(state)
    if kind == "file":
        return toggle_file(state, args[0])
    if kind == "main":
        return toggle_main_indicators(state, args[0])
    if kind == "group":
        return toggle_group(state, args[0], int(args[1]))
    if kind == "one":
        return toggle_series(state, args[0])
    raise ValueError(f"unknown selection action: {action!r}")
