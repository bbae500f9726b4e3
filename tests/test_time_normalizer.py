from datetime import date, datetime, time, timedelta

import pytest

from clinic_api.domain.appointments.time_normalizer import (
    InvalidFormat,
    normalize_date,
    normalize_time,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-03-10", "2025-03-10"),
        ("2025-03-10T00:00:00.000Z", "2025-03-10"),
        ("2025-03-10T23:30:00+05:00", "2025-03-10"),
        (date(2025, 3, 10), "2025-03-10"),
        (datetime(2025, 3, 10, 23, 59), "2025-03-10"),
    ],
)
def test_normalize_date(value, expected):
    assert normalize_date(value) == expected


def test_timestamp_keeps_written_calendar_day():
    # Late-evening UTC timestamps must not roll over to the next day
    assert normalize_date("2025-12-31T23:59:59.999Z") == "2025-12-31"


@pytest.mark.parametrize("value", ["10/03/2025", "2025-3-10", "", "tomorrow", 20250310])
def test_normalize_date_rejects_garbage(value):
    with pytest.raises(InvalidFormat):
        normalize_date(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("09:00", "09:00:00"),
        ("09:15:30", "09:15:30"),
        (time(14, 5), "14:05:00"),
        (datetime(2025, 3, 10, 8, 45, 10), "08:45:10"),
        (timedelta(hours=9, minutes=30), "09:30:00"),
    ],
)
def test_normalize_time(value, expected):
    assert normalize_time(value) == expected


@pytest.mark.parametrize("value", ["9:00", "24:00", "09:60", "09:00:00.000", "noon", timedelta(days=1)])
def test_normalize_time_rejects_garbage(value):
    with pytest.raises(InvalidFormat):
        normalize_time(value)


def test_normalization_is_idempotent():
    for raw in ["2025-03-10T00:00:00.000Z", date(2024, 2, 29)]:
        once = normalize_date(raw)
        assert normalize_date(once) == once
    for raw in ["07:30", time(23, 59, 59), timedelta(seconds=45)]:
        once = normalize_time(raw)
        assert normalize_time(once) == once
