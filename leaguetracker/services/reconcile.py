"""
Completion reconciliation.

The current fixture set is the allow-list for a league's completion state.
It is applied in two places: pruning local state after a pair count change,
and filtering remote rows and change events before they are merged.
"""

from typing import AbstractSet, Dict, Iterable, Optional

from ..models import ChangeEvent, MatchRow


def prune_completed(
    completed_map: Dict[str, bool],
    valid_keys: AbstractSet[str]
) -> Dict[str, bool]:
    """Drop stale keys, keeping every valid entry as is."""
    return {key: done for key, done in completed_map.items() if key in valid_keys}


def rows_to_completed(
    rows: Iterable[MatchRow],
    valid_keys: AbstractSet[str]
) -> Dict[str, bool]:
    """Build a completion map from a bulk remote read."""
    completed: Dict[str, bool] = {}
    for row in rows:
        if row.match_key not in valid_keys:
            continue
        completed[row.match_key] = bool(row.completed)
    return completed


def apply_change_event(
    completed_map: Dict[str, bool],
    event: ChangeEvent,
    valid_keys: AbstractSet[str]
) -> Optional[Dict[str, bool]]:
    """
    Merge one remote change into a completion map.

    Returns:
        The updated map, or None when the event carries no usable key or
        targets a match outside the current fixture set
    """
    key = event.row.get('match_key')
    if not key or key not in valid_keys:
        return None

    updated = dict(completed_map)
    if event.is_delete:
        updated.pop(key, None)
    else:
        updated[key] = bool(event.row.get('completed'))
    return updated
