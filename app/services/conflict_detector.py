"""Calendar conflict checks for availability selection.

A busy event blocks a grid slot only when its startTime equals the slot's
time label exactly. durationMinutes is not consulted, so a 10:00-11:30 event
does not block the 10:30 slot.
"""

from typing import Iterable, List, Optional, Tuple

from app.schemas.availability import CalendarBusyEvent, SlotUpdate


def has_conflict(
    time: str, busy_events: Iterable[CalendarBusyEvent]
) -> Optional[CalendarBusyEvent]:
    for busy in busy_events:
        if busy.startTime == time:
            return busy
    return None


def conflict_message(busy: CalendarBusyEvent) -> str:
    return f'Conflict detected: "{busy.title}"'


def drop_conflicting(
    updates: Iterable[SlotUpdate], busy_events: Iterable[CalendarBusyEvent]
) -> Tuple[List[SlotUpdate], List[SlotUpdate]]:
    """Split a batch into (kept, dropped).

    Only select updates can be dropped; deselecting is always allowed.
    """
    busy_events = list(busy_events)
    kept, dropped = [], []
    for update in updates:
        if update.makeAvailable and has_conflict(update.time, busy_events):
            dropped.append(update)
        else:
            kept.append(update)
    return kept, dropped
