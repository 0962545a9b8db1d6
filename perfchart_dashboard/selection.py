from __future__ import annotations

from typing import Dict, Iterable, Mapping, Sequence

Selection = Mapping[str, bool]

CHECKED = "checked"
INDETERMINATE = "indeterminate"
UNCHECKED = "unchecked"


def is_selected(selection: Selection, key: str) -> bool:
    return bool(selection.get(key, False))


def toggle_one(selection: Selection, key: str) -> Dict[str, bool]:
    updated = dict(selection)
    updated[key] = not is_selected(selection, key)
    return updated


def set_many(selection: Selection, keys: Iterable[str], value: bool) -> Dict[str, bool]:
    updated = dict(selection)
    for k in keys:
        updated[k] = value
    return updated


def toggle_group(selection: Selection, keys: Sequence[str]) -> Dict[str, bool]:
    """
    Select every key unless all of them are already selected, in which
    case deselect them all. An empty key list leaves the selection as is.
    """
    if not keys:
        return dict(selection)
    return set_many(selection, keys, not is_all_checked(selection, keys))


def toggle_all(selection: Selection, all_keys: Sequence[str]) -> Dict[str, bool]:
    return toggle_group(selection, all_keys)


def is_all_checked(selection: Selection, keys: Sequence[str]) -> bool:
    return len(keys) > 0 and all(is_selected(selection, k) for k in keys)


def is_some_checked(selection: Selection, keys: Sequence[str]) -> bool:
    return any(is_selected(selection, k) for k in keys)


def tri_state(selection: Selection, keys: Sequence[str]) -> str:
    if is_all_checked(selection, keys):
        return CHECKED
    if is_some_checked(selection, keys):
        return INDETERMINATE
    return UNCHECKED


def selected_keys(selection: Selection, known_keys: Sequence[str]) -> list[str]:
    """
    Selected keys in selection order, limited to `known_keys` so entries
    left over from removed datasets are ignored.
    """
    known = set(known_keys)
    return [k for k, v in selection.items() if v and k in known]


def prune(selection: Selection, known_keys: Sequence[str]) -> Dict[str, bool]:
    known = set(known_keys)
    return {k: v for k, v in selection.items() if k in known}
