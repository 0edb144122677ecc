import logging
from typing import Callable, Iterable, List, Optional

from app.schemas.availability import CalendarBusyEvent

logger = logging.getLogger(__name__)

BusyFetcher = Callable[[], Iterable[CalendarBusyEvent]]

DEMO_BUSY_EVENTS = [
    CalendarBusyEvent(id="demo-1", title="Team Standup", startTime="10:00 AM", durationMinutes=30),
    CalendarBusyEvent(id="demo-2", title="Lunch with Sam", startTime="12:30 PM", durationMinutes=60),
    CalendarBusyEvent(id="demo-3", title="Rehearsal", startTime="06:00 PM", durationMinutes=90),
]


class CalendarService:
    """Source of a user's busy times.

    fetcher talks to the real calendar provider; without one, or when
    use_real is off, demo data is served. A failing provider never raises
    to the caller: the failure is logged and an empty list comes back.
    """

    def __init__(self, fetcher: Optional[BusyFetcher] = None):
        self.fetcher = fetcher

    def fetch_busy_events(self, use_real: bool = False) -> List[CalendarBusyEvent]:
        if not use_real or self.fetcher is None:
            return [event.model_copy() for event in DEMO_BUSY_EVENTS]
        try:
            return list(self.fetcher())
        except Exception as e:
            logger.warning("Calendar fetch failed, continuing without busy times: %s", e)
            return []


def merge_busy_events(
    existing: Iterable[CalendarBusyEvent], incoming: Iterable[CalendarBusyEvent]
) -> List[CalendarBusyEvent]:
    """Keep existing events and add incoming ones at start times not yet taken"""
    merged = list(existing)
    taken = {event.startTime for event in merged}
    for event in incoming:
        if event.startTime not in taken:
            merged.append(event)
            taken.add(event.startTime)
    return merged
