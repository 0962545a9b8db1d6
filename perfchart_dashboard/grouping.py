from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from . import config

_MAIN_RE = re.compile(config.MAIN_INDICATOR_PATTERN, re.IGNORECASE)


@dataclass(frozen=True)
class Group:
    label: str
    columns: Tuple[str, ...]


def is_main_indicator(col: str) -> bool:
    return bool(_MAIN_RE.match(col)) or col == config.TOTAL_LOAD_COLUMN


def is_task_of(col: str, indicator: str) -> bool:
    c = col.lower()
    return col != indicator and indicator.lower() in c and config.TASK_MARKER.lower() in c


def main_indicators(columns: Sequence[str]) -> List[str]:
    return [c for c in columns if is_main_indicator(c)]


def group_columns(columns: Sequence[str]) -> List[Group]:
    """
    Split a file's columns into navigation groups.

    - "Général": every column that is neither a main indicator nor a task
      column of one (omitted when empty)
    - one group per main indicator, in column order, labelled with the
      upper-cased name and holding the indicator followed by its task columns

    A task column whose name contains several indicator names (e.g.
    "Indicateur10_Tache1" also contains "Indicateur1") is attached to the
    first indicator in column order that matches it.
    """
    indicators = main_indicators(columns)

    claimed = set()
    tasks_by_indicator = {}
    for ind in indicators:
        tasks = []
        for col in columns:
            if col in claimed or is_main_indicator(col):
                continue
            if is_task_of(col, ind):
                tasks.append(col)
                claimed.add(col)
        tasks_by_indicator[ind] = tasks

    groups: List[Group] = []

    general = [c for c in columns if not is_main_indicator(c) and c not in claimed]
    if general:
        groups.append(Group(label=config.GENERAL_GROUP_LABEL, columns=tuple(general)))

    for ind in indicators:
        groups.append(Group(label=ind.upper(), columns=(ind, *tasks_by_indicator[ind])))

    return groups
