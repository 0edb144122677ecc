import pytest
from pydantic import ValidationError

from app.schemas.event import DateRange, TimeRange
from app.services.time_grid import (
    TIME_LABELS,
    get_dates_in_range,
    get_times_in_range,
    time_index,
)


def test_vocabulary_covers_whole_day_in_half_hours():
    assert len(TIME_LABELS) == 48
    assert TIME_LABELS[0] == "12:00 AM"
    assert TIME_LABELS[-1] == "11:30 PM"
    assert TIME_LABELS[TIME_LABELS.index("12:00 PM") + 1] == "12:30 PM"
    assert len(set(TIME_LABELS)) == 48


def test_time_order_is_positional_not_lexical():
    assert time_index("01:00 PM") > time_index("11:00 AM")
    assert time_index("12:00 AM") < time_index("01:00 AM")
    assert time_index("25:00 PM") is None


def test_dates_in_range_includes_both_ends():
    assert get_dates_in_range("2024-05-01", "2024-05-03") == [
        "2024-05-01",
        "2024-05-02",
        "2024-05-03",
    ]


def test_dates_in_range_crosses_month_and_leap_day():
    assert get_dates_in_range("2024-02-28", "2024-03-01") == [
        "2024-02-28",
        "2024-02-29",
        "2024-03-01",
    ]


def test_single_day_and_inverted_range():
    assert get_dates_in_range("2024-05-01", "2024-05-01") == ["2024-05-01"]
    assert get_dates_in_range("2024-05-03", "2024-05-01") == []


def test_times_in_range_is_closed_interval():
    assert get_times_in_range("09:00 AM", "10:00 AM") == [
        "09:00 AM",
        "09:30 AM",
        "10:00 AM",
    ]


def test_unknown_time_label_falls_back_to_full_vocabulary():
    assert get_times_in_range("9am", "10:00 AM") == TIME_LABELS
    assert get_times_in_range("09:00 AM", "") == TIME_LABELS


def test_fallback_returns_a_copy():
    axis = get_times_in_range("nope", "nope")
    axis.clear()
    assert len(TIME_LABELS) == 48


def test_inverted_time_range_is_rejected():
    with pytest.raises(ValueError):
        get_times_in_range("10:00 AM", "09:00 AM")


def test_time_range_schema_validation():
    with pytest.raises(ValidationError):
        TimeRange(startTime="10:00 AM", endTime="10:00 AM")
    with pytest.raises(ValidationError):
        TimeRange(startTime="05:00 PM", endTime="11:00 AM")
    with pytest.raises(ValidationError):
        TimeRange(startTime="5pm", endTime="11:00 PM")

    default = TimeRange()
    assert (default.startTime, default.endTime) == ("12:00 AM", "11:30 PM")


def test_date_range_schema_validation():
    with pytest.raises(ValidationError):
        DateRange(startDate="2024-05-03", endDate="2024-05-01")
    with pytest.raises(ValidationError):
        DateRange(startDate="2024-5-1", endDate="2024-05-03")
    with pytest.raises(ValidationError):
        DateRange(startDate="not-a-date", endDate="2024-05-03")

    assert DateRange(startDate="2024-05-01", endDate="2024-05-01").endDate == "2024-05-01"


def test_date_range_span_is_capped():
    month = DateRange(startDate="2024-05-01", endDate="2024-05-31")
    assert month.endDate == "2024-05-31"

    with pytest.raises(ValidationError, match="at most 31"):
        DateRange(startDate="2024-01-01", endDate="2024-05-31")
