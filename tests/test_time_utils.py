from datetime import UTC, datetime, timedelta, timezone

from backend.app.core.time import ensure_utc, utc_now


def test_utc_now_is_timezone_aware_utc():
    value = utc_now()
    assert value.tzinfo is UTC


def test_ensure_utc_marks_naive_values_as_utc():
    naive = datetime(2025, 3, 1, 9, 30)
    assert ensure_utc(naive) == datetime(2025, 3, 1, 9, 30, tzinfo=UTC)


def test_ensure_utc_converts_other_offsets():
    dubai = timezone(timedelta(hours=4))
    value = ensure_utc(datetime(2025, 3, 1, 13, 30, tzinfo=dubai))
    assert value == datetime(2025, 3, 1, 9, 30, tzinfo=UTC)
    assert value.utcoffset() == timedelta(0)
