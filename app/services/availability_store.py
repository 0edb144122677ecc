import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from app.schemas.availability import (
    BatchToggleResult,
    CalendarBusyEvent,
    SlotUpdate,
    ToggleResult,
    ToggleStatus,
)
from app.schemas.event import EventAggregate, Slot
from app.services.conflict_detector import (
    conflict_message,
    drop_conflicting,
    has_conflict,
)

logger = logging.getLogger(__name__)

SlotKey = Tuple[str, str]


def _with_user(slot: Slot, user_id: str, make_available: bool) -> Optional[Slot]:
    """Copy of slot with the user's membership set, or None if nothing changes"""
    present = user_id in slot.availableUsers
    if make_available == present:
        return None
    if make_available:
        users = slot.availableUsers + [user_id]
    else:
        users = [uid for uid in slot.availableUsers if uid != user_id]
    return slot.model_copy(update={"availableUsers": users})


class AvailabilityStore:
    """Per-user availability mutations over one event's slots.

    The store itself refuses every mutation while the event is locked.
    Slots are never edited in place: changed slots are copied and the slot
    list is swapped in one assignment, so no observer sees half a batch.
    """

    def __init__(self, aggregate: EventAggregate):
        self.aggregate = aggregate

    def _index(self) -> Dict[SlotKey, int]:
        return {(s.date, s.time): i for i, s in enumerate(self.aggregate.slots)}

    def find_slot(self, date: str, time: str) -> Optional[Slot]:
        for slot in self.aggregate.slots:
            if slot.date == date and slot.time == time:
                return slot
        return None

    def available_users(self, date: str, time: str) -> List[str]:
        slot = self.find_slot(date, time)
        return list(slot.availableUsers) if slot else []

    def is_available(self, date: str, time: str, user_id: str) -> bool:
        return user_id in self.available_users(date, time)

    def toggle(
        self,
        date: str,
        time: str,
        user_id: str,
        make_available: bool,
        busy_events: Sequence[CalendarBusyEvent] = (),
    ) -> ToggleResult:
        if self.aggregate.isLocked:
            logger.info("Rejected toggle on locked event %s", self.aggregate.id)
            return ToggleResult(status=ToggleStatus.LOCKED, date=date, time=time)

        if make_available:
            conflict = has_conflict(time, busy_events)
            if conflict:
                return ToggleResult(
                    status=ToggleStatus.CONFLICT,
                    date=date,
                    time=time,
                    conflict=conflict,
                    message=conflict_message(conflict),
                )

        index = self._index().get((date, time))
        if index is None:
            return ToggleResult(status=ToggleStatus.SLOT_NOT_FOUND, date=date, time=time)

        changed = _with_user(self.aggregate.slots[index], user_id, make_available)
        if changed is None:
            return ToggleResult(status=ToggleStatus.UNCHANGED, date=date, time=time)

        slots = list(self.aggregate.slots)
        slots[index] = changed
        self.aggregate.slots = slots
        return ToggleResult(status=ToggleStatus.APPLIED, date=date, time=time)

    def batch_toggle(
        self,
        user_id: str,
        updates: Iterable[SlotUpdate],
        busy_events: Sequence[CalendarBusyEvent] = (),
    ) -> BatchToggleResult:
        if self.aggregate.isLocked:
            logger.info("Rejected batch toggle on locked event %s", self.aggregate.id)
            return BatchToggleResult(status=ToggleStatus.LOCKED)

        # Conflicting selects leave the batch before the last update for a
        # slot wins, so an earlier deselect of a busy slot still applies
        remaining, dropped = drop_conflicting(updates, busy_events)

        latest: Dict[SlotKey, SlotUpdate] = {}
        for update in remaining:
            key = (update.date, update.time)
            latest.pop(key, None)
            latest[key] = update

        index = self._index()
        slots = list(self.aggregate.slots)
        missing = []
        applied = 0
        for update in latest.values():
            position = index.get((update.date, update.time))
            if position is None:
                missing.append(update)
                continue
            changed = _with_user(slots[position], user_id, update.makeAvailable)
            if changed is not None:
                slots[position] = changed
                applied += 1

        if applied:
            self.aggregate.slots = slots
        if dropped:
            logger.debug(
                "Dropped %d conflicting updates for user %s", len(dropped), user_id
            )

        return BatchToggleResult(
            status=ToggleStatus.APPLIED if applied else ToggleStatus.UNCHANGED,
            applied=applied,
            dropped=dropped,
            missing=missing,
        )

    def purge_user(self, user_id: str) -> int:
        """Remove user_id from every slot; returns the number of slots touched"""
        touched = 0
        slots = []
        for slot in self.aggregate.slots:
            changed = _with_user(slot, user_id, False)
            if changed is None:
                slots.append(slot)
            else:
                slots.append(changed)
                touched += 1
        self.aggregate.slots = slots
        return touched
