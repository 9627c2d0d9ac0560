"""Tests for the column registry and sorter."""

import random

import pytest

from proctop.columns import (
    COLUMNS,
    CPU_PERCENT_COLUMN,
    DEFAULT_SORT_COLUMN,
    PID_COLUMN,
    USER_COLUMN,
    get_column,
    next_column,
    sort_records,
)


class TestRegistry:
    """Tests for the fixed column registry."""

    def test_column_titles(self):
        assert list(COLUMNS) == ["PID", "USER", "CPU%", "MEM%", "RSS", "COMMAND"]

    def test_default_sort_is_cpu(self):
        assert DEFAULT_SORT_COLUMN == "CPU%"

    def test_unknown_column(self):
        with pytest.raises(KeyError):
            get_column("NOPE")

    def test_next_column_wraps(self):
        assert next_column("PID") == "USER"
        assert next_column("COMMAND") == "PID"


def pids(records):
    return [record.pid for record in records]


def test_sort_by_pid(make_record):
    """Test PID sort of [300, 50, 200] gives [50, 200, 300]."""
    records = [make_record(300), make_record(50), make_record(200)]
    assert pids(sort_records(records, PID_COLUMN)) == [50, 200, 300]


def test_cpu_sorts_descending_with_pid_tie_break(make_record):
    records = [
        make_record(9, cpu_percent=1.0),
        make_record(4, cpu_percent=5.0),
        make_record(7, cpu_percent=1.0),
        make_record(2, cpu_percent=1.0),
        make_record(3, cpu_percent=9.5),
    ]
    assert pids(sort_records(records, CPU_PERCENT_COLUMN)) == [3, 4, 2, 7, 9]


def test_text_column_lexical_with_pid_tie_break(make_record):
    records = [
        make_record(5, owner="zed"),
        make_record(4, owner="amy"),
        make_record(1, owner="zed"),
        make_record(3, owner=None),
    ]
    assert pids(sort_records(records, USER_COLUMN)) == [3, 4, 1, 5]


@pytest.mark.parametrize("title", list(COLUMNS))
def test_total_order_and_idempotent(make_record, title):
    """Test equal keys fall back to PID and re-sorting changes nothing."""
    rng = random.Random(title)
    records = [
        make_record(
            pid,
            command=rng.choice(["/bin/a", "/bin/b"]),
            owner=rng.choice(["root", "daemon"]),
            cpu_percent=rng.choice([0.0, 1.5, 3.0]),
            memory_percent=rng.choice([0.0, 2.0]),
            rss=rng.choice([0, 4096]),
        )
        for pid in rng.sample(range(1, 500), 60)
    ]
    column = get_column(title)

    once = sort_records(records, column)
    twice = sort_records(once, column)
    shuffled = sort_records(rng.sample(records, len(records)), column)

    assert once == twice == shuffled
    for first, second in zip(once, once[1:]):
        if column.key(first) == column.key(second):
            assert first.pid < second.pid
