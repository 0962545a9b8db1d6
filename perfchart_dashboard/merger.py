from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

import pandas as pd

from . import config
from .normalizer import Dataset

MergedRow = Dict[str, float]


def series_key(dataset_name: str, column: str) -> str:
    return f"{dataset_name}{config.KEY_SEPARATOR}{column}"


def split_key(key: str) -> Tuple[str, str]:
    """Return (dataset name, column) for a namespaced key."""
    name, sep, column = key.partition(config.KEY_SEPARATOR)
    if not sep:
        return "", key
    return name, column


def short_name(key: str) -> str:
    return split_key(key)[1]


def merge_datasets(datasets: Iterable[Dataset]) -> List[MergedRow]:
    """
    Align all datasets on one ascending time axis.

    Rows sharing the exact same time value (no tolerance) end up in one
    merged row; a series has no entry in rows its dataset never sampled.
    """
    buckets: Dict[float, MergedRow] = {}
    for ds in datasets:
        keys = [(col, series_key(ds.name, col)) for col in ds.columns]
        for row in ds.rows:
            t = row[config.TIME_FIELD]
            bucket = buckets.get(t)
            if bucket is None:
                bucket = {config.TIME_FIELD: t}
                buckets[t] = bucket
            for col, key in keys:
                if col in row:
                    bucket[key] = row[col]

    return [buckets[t] for t in sorted(buckets)]


def merged_frame(merged: List[MergedRow]) -> pd.DataFrame:
    """Merged table as a DataFrame indexed by time; absent values are NaN."""
    if not merged:
        return pd.DataFrame(columns=[config.TIME_FIELD]).set_index(config.TIME_FIELD)
    return pd.DataFrame(merged).set_index(config.TIME_FIELD)
