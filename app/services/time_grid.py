"""Time and date axes of the availability grid.

The time axis is a fixed vocabulary of half-hour labels covering a whole day.
Labels are ordered by their position in that vocabulary, never lexically.
"""

from datetime import date, timedelta
from typing import List, Optional

SLOT_MINUTES = 30


def _build_time_labels() -> List[str]:
    labels = []
    for minutes in range(0, 24 * 60, SLOT_MINUTES):
        hour, minute = divmod(minutes, 60)
        suffix = "AM" if hour < 12 else "PM"
        display_hour = hour % 12 or 12
        labels.append(f"{display_hour:02d}:{minute:02d} {suffix}")
    return labels


TIME_LABELS: List[str] = _build_time_labels()
_TIME_POSITIONS = {label: index for index, label in enumerate(TIME_LABELS)}

FIRST_TIME_LABEL = TIME_LABELS[0]
LAST_TIME_LABEL = TIME_LABELS[-1]


def time_index(label: str) -> Optional[int]:
    """Position of a label in the vocabulary, or None if it is not a known label"""
    return _TIME_POSITIONS.get(label)


def get_dates_in_range(start_date: str, end_date: str) -> List[str]:
    """Every ISO date from start_date to end_date, both ends included.

    Walks plain calendar days, so no time zone can shift the boundaries.
    An inverted range yields an empty list.
    """
    current = date.fromisoformat(start_date)
    end = date.fromisoformat(end_date)
    dates = []
    while current <= end:
        dates.append(current.isoformat())
        current += timedelta(days=1)
    return dates


def full_time_axis() -> List[str]:
    """Fallback axis used whenever a requested range cannot be resolved"""
    return list(TIME_LABELS)


def get_times_in_range(start_time: str, end_time: str) -> List[str]:
    """Closed sub-list of the vocabulary between start_time and end_time.

    Unknown labels fail open to the full vocabulary so callers never get an
    empty time axis. An inverted range of known labels is a caller error.
    """
    start = time_index(start_time)
    end = time_index(end_time)
    if start is None or end is None:
        return full_time_axis()
    if start >= end:
        raise ValueError(f"Time range is inverted: {start_time} - {end_time}")
    return TIME_LABELS[start : end + 1]
