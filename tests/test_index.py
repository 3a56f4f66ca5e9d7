from datetime import date, datetime, timezone as dt_timezone

from apps.payroll.index import RecordIndex, build_index, dedup_key
from apps.payroll.types import ExistingRecord


def test_dedup_key_ignores_time_of_day():
    moment = datetime(2026, 1, 20, 15, 0, tzinfo=dt_timezone.utc)
    assert dedup_key("emp-1", moment) == "emp-1|2026-01-20"
    assert dedup_key("emp-1", date(2026, 1, 20)) == "emp-1|2026-01-20"


def test_build_index_tracks_max_index_and_min_date():
    index = build_index(
        [
            ExistingRecord(id=1, group_key="g", due_date=date(2026, 3, 20), recurrence_index=3),
            ExistingRecord(id=2, group_key="g", due_date=date(2026, 1, 20), recurrence_index=1),
            ExistingRecord(id=3, group_key="h", due_date=date(2026, 2, 1)),
        ]
    )
    assert index.has("g", date(2026, 1, 20))
    assert not index.has("g", date(2026, 2, 20))
    assert index.max_index("g") == 3
    assert index.min_date("g") == date(2026, 1, 20)
    assert index.max_index("h") == 0
    assert len(index) == 3


def test_next_index_never_reuses_numbers():
    index = RecordIndex()
    index.add("g", date(2026, 1, 1), 7)
    assert index.next_index("g") == 8

    unnumbered = RecordIndex()
    unnumbered.add("g", date(2026, 1, 1))
    unnumbered.add("g", date(2026, 2, 1))
    assert unnumbered.next_index("g") == 3


def test_reserve_raises_next_index_without_adding_dates():
    index = RecordIndex()
    index.add("g", date(2026, 1, 1), 2)

    index.reserve("g", 12)
    index.reserve("g", 5)

    assert index.next_index("g") == 13
    assert len(index) == 1
    assert not index.has("g", date(2026, 2, 1))


def test_discard_frees_date_but_keeps_index_reserved():
    index = RecordIndex()
    index.add("g", date(2026, 1, 1), 1)
    index.add("g", date(2026, 2, 1), 2)
    index.discard("g", date(2026, 2, 1))
    assert not index.has("g", date(2026, 2, 1))
    assert index.next_index("g") == 3


def test_groups_are_independent():
    index = RecordIndex()
    index.add("a", date(2026, 1, 1), 5)
    assert index.next_index("b") == 1
    assert not index.has("b", date(2026, 1, 1))
