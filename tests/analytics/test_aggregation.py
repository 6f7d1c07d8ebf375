from __future__ import annotations

from dataclasses import dataclass

from src.staffdesk.staffdesk.analytics.aggregation import aggregate_group_counts, count_for, percentage
from src.staffdesk.staffdesk.core.enums import TaskStatus


@dataclass
class Row:
    status: TaskStatus
    department: str | None = None


def test_empty_input_gives_empty_mapping():
    assert aggregate_group_counts([], "status") == {}
    assert aggregate_group_counts(iter(()), lambda r: r) == {}


def test_group_by_attribute_normalizes_enums():
    rows = [Row(TaskStatus.PENDING), Row(TaskStatus.COMPLETED), Row(TaskStatus.PENDING)]
    counts = aggregate_group_counts(rows, "status")

    assert counts == {"PENDING": 2, "COMPLETED": 1}
    assert count_for(counts, TaskStatus.PENDING) == 2
    assert count_for(counts, TaskStatus.CANCELLED) == 0


def test_group_by_mapping_key_and_callable():
    records = [{"role": "STAFF"}, {"role": "ADMIN"}, {"role": "STAFF"}, {}]

    assert aggregate_group_counts(records, "role") == {"STAFF": 2, "ADMIN": 1, None: 1}
    assert aggregate_group_counts([1, 2, 3, 4, 5], lambda n: n % 2 == 0) == {False: 3, True: 2}


def test_counts_sum_to_input_length():
    rows = [Row(TaskStatus.PENDING, d) for d in ["Dev", "Dev", None, "Ops", "HR", "Dev"]]
    counts = aggregate_group_counts(rows, "department")

    assert sum(counts.values()) == len(rows)
    assert counts["Dev"] == 3


def test_percentage_handles_zero_total():
    assert percentage(0, 0) == 0.0
    assert percentage(1, 3) == 33.3
