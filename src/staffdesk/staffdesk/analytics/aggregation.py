"""Group-and-count helpers behind the dashboard statistic tiles."""
from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Union

KeySpec = Union[str, Callable[[Any], Any]]


def _key_getter(group_by: KeySpec) -> Callable[[Any], Any]:
    if callable(group_by):
        return group_by

    def getter(record: Any) -> Any:
        if isinstance(record, Mapping):
            return record.get(group_by)
        return getattr(record, group_by, None)

    return getter


def _normalize(key: Any) -> Any:
    # Enum members and their raw values land in the same bucket
    return key.value if isinstance(key, Enum) else key


def aggregate_group_counts(records: Iterable[Any], group_by: KeySpec) -> dict:
    """Count records per group key.

    ``group_by`` is a callable, or the name of an attribute / mapping key.
    The counts always sum to the number of records; records without a key
    are counted under ``None``.
    """
    getter = _key_getter(group_by)
    return dict(Counter(_normalize(getter(r)) for r in records))


def count_for(counts: Mapping[Any, int], *keys: Any) -> int:
    return sum(int(counts.get(_normalize(k), 0)) for k in keys)


def percentage(part: int, whole: int) -> float:
    return round(part * 100.0 / whole, 1) if whole else 0.0
