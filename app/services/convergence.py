"""Client-side reconciliation of local edits with remote event snapshots.

Local edits are applied to the in-memory aggregate at once and written to the
store only after SAVE_DEBOUNCE seconds without another edit. While an edit
burst is in flight, and for EDIT_SUPPRESSION_WINDOW seconds after the last
edit, snapshots pushed by the store are dropped so they cannot roll back
what the user just did. Outside that window the latest snapshot replaces the
local aggregate wholesale: the store is last-writer-wins on the whole
document, and so is this controller.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Iterable, List, Optional

from app import config
from app.database.event_store import EventStore, Unsubscribe
from app.schemas.availability import (
    BatchToggleResult,
    CalendarBusyEvent,
    ProposedTimeSlot,
    SlotUpdate,
    ToggleResult,
    ToggleStatus,
)
from app.schemas.event import EventAggregate, EventCreate, Message
from app.schemas.member import Member
from app.services import event_aggregate
from app.services.availability_analyzer import analyze
from app.services.availability_store import AvailabilityStore
from app.services.calendar_service import CalendarService, merge_busy_events
from app.services.errors import EventNotFoundError

logger = logging.getLogger(__name__)


class ConvergenceController:
    """Owns the active event for one user session.

    Mutating methods are synchronous but must be called from a running event
    loop, which hosts the debounced save task. Only on_remote_snapshot
    decides whether a remote document is taken or dropped.
    """

    def __init__(
        self,
        store: EventStore,
        user_id: str,
        clock: Callable[[], float] = time.monotonic,
        suppression_window: float = config.EDIT_SUPPRESSION_WINDOW,
        save_debounce: float = config.SAVE_DEBOUNCE,
        on_change: Optional[Callable[[Optional[EventAggregate]], None]] = None,
    ):
        self.store = store
        self.user_id = user_id
        self.clock = clock
        self.suppression_window = suppression_window
        self.save_debounce = save_debounce
        self.on_change = on_change

        self.event_id: Optional[str] = None
        self.aggregate: Optional[EventAggregate] = None
        self.not_found = False
        self.busy_events: List[CalendarBusyEvent] = []

        self.is_locally_editing = False
        self.last_local_edit: Optional[float] = None
        self.discarded_snapshots = 0
        self.failed_saves = 0

        self._unsubscribe: Optional[Unsubscribe] = None
        self._save_task: Optional[asyncio.Task] = None

    async def __aenter__(self) -> "ConvergenceController":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Session lifecycle

    async def open(self, event_id: str) -> Optional[EventAggregate]:
        """Switch to event_id; returns None when the event does not exist"""
        if self.event_id is not None:
            await self.close()
        aggregate = self.store.load(event_id)
        self.event_id = event_id
        self.aggregate = aggregate
        self.not_found = aggregate is None
        self._unsubscribe = self.store.subscribe(event_id, self.on_remote_snapshot)
        return self.aggregate

    async def create(self, event_data: EventCreate) -> EventAggregate:
        """Start a brand new event with this session's user as creator"""
        if self.event_id is not None:
            await self.close()
        data = event_data.model_copy(update={"creatorId": self.user_id})
        aggregate = event_aggregate.new_event(data)
        self.store.save(aggregate)
        await self.open(aggregate.id)
        return self.aggregate

    async def flush(self) -> None:
        """Write pending local edits now instead of waiting for the debounce"""
        if self._save_task is not None and not self._save_task.done():
            self._save_task.cancel()
            self._save_task = None
            self._persist()

    async def close(self, flush: bool = True) -> None:
        try:
            if flush:
                await self.flush()
            elif self._save_task is not None:
                self._save_task.cancel()
                self._save_task = None
        finally:
            if self._unsubscribe is not None:
                self._unsubscribe()
                self._unsubscribe = None
            self.event_id = None
            self.aggregate = None
            self.is_locally_editing = False
            self.last_local_edit = None

    # Remote side

    def is_suppressing(self) -> bool:
        if self.is_locally_editing:
            return True
        if self.last_local_edit is None:
            return False
        return self.clock() - self.last_local_edit < self.suppression_window

    def on_remote_snapshot(self, snapshot: Optional[EventAggregate]) -> bool:
        """Apply a snapshot pushed by the store; returns whether it was taken"""
        if self.event_id is None:
            return False
        if snapshot is not None and snapshot.id != self.event_id:
            logger.warning(
                "Ignoring snapshot for %s while %s is active", snapshot.id, self.event_id
            )
            return False
        if self.is_suppressing():
            self.discarded_snapshots += 1
            logger.debug(
                "Discarded remote snapshot for %s during local edit", self.event_id
            )
            return False

        self.aggregate = snapshot
        self.not_found = snapshot is None
        if self.on_change is not None:
            self.on_change(snapshot)
        return True

    # Local side

    def _require_aggregate(self) -> EventAggregate:
        if self.aggregate is None:
            raise EventNotFoundError(self.event_id or "<none>")
        return self.aggregate

    def _local_edit(self) -> None:
        self.last_local_edit = self.clock()
        self.is_locally_editing = True
        if self._save_task is not None and not self._save_task.done():
            self._save_task.cancel()
        self._save_task = asyncio.get_running_loop().create_task(self._debounced_save())

    async def _debounced_save(self) -> None:
        await asyncio.sleep(self.save_debounce)
        self._save_task = None
        self._persist()

    def _persist(self) -> None:
        try:
            if self.aggregate is None:
                return
            self.aggregate.updatedAt = event_aggregate.now_ms()
            self.store.save(self.aggregate.model_copy(deep=True))
        except Exception:
            # Not retried: the in-memory aggregate stays authoritative
            self.failed_saves += 1
            logger.exception("Failed to save event %s", self.event_id)
        finally:
            self.is_locally_editing = False

    @property
    def current_member(self) -> Member:
        return event_aggregate.find_member(self._require_aggregate(), self.user_id)

    def toggle(self, date: str, time: str, make_available: bool) -> ToggleResult:
        result = AvailabilityStore(self._require_aggregate()).toggle(
            date, time, self.user_id, make_available, self.busy_events
        )
        if result.status == ToggleStatus.APPLIED:
            self._local_edit()
        return result

    def batch_toggle(self, updates: Iterable[SlotUpdate]) -> BatchToggleResult:
        result = AvailabilityStore(self._require_aggregate()).batch_toggle(
            self.user_id, updates, self.busy_events
        )
        if result.status == ToggleStatus.APPLIED:
            self._local_edit()
        return result

    def lock(self, date: str, time: str) -> None:
        aggregate = self._require_aggregate()
        event_aggregate.authorize(
            aggregate, self.user_id, "can_lock_slot", "lock the event"
        )
        event_aggregate.lock_slot(aggregate, date, time)
        self._local_edit()

    def unlock(self) -> None:
        aggregate = self._require_aggregate()
        actor = event_aggregate.authorize(
            aggregate, self.user_id, "can_lock_slot", "unlock the event"
        )
        event_aggregate.unlock(aggregate, actor.name)
        self._local_edit()

    def remove_member(self, member_id: str) -> Member:
        aggregate = self._require_aggregate()
        event_aggregate.authorize(
            aggregate, self.user_id, "can_manage_members", "remove members"
        )
        removed = event_aggregate.remove_member(aggregate, member_id)
        self._local_edit()
        return removed

    def update_logistics(self, changes: Dict[str, Optional[str]]) -> None:
        aggregate = self._require_aggregate()
        actor = event_aggregate.authorize(
            aggregate, self.user_id, "can_edit_logistics", "edit logistics"
        )
        event_aggregate.update_logistics(aggregate, changes, actor.name)
        self._local_edit()

    def send_message(self, text: str) -> Message:
        aggregate = self._require_aggregate()
        message = event_aggregate.append_message(aggregate, self.current_member, text)
        self._local_edit()
        return message

    def analyze(self) -> List[ProposedTimeSlot]:
        aggregate = self._require_aggregate()
        return analyze(aggregate.slots, aggregate.members, aggregate.dateRange)

    # Calendar busy times for this user; never persisted

    def sync_calendar(
        self, calendar: CalendarService, use_real: bool = False
    ) -> List[CalendarBusyEvent]:
        fetched = calendar.fetch_busy_events(use_real)
        self.busy_events = merge_busy_events(self.busy_events, fetched)
        return self.busy_events

    def add_busy_event(
        self, title: str, start_time: str, duration_minutes: int = 60
    ) -> CalendarBusyEvent:
        busy = CalendarBusyEvent(
            title=title, startTime=start_time, durationMinutes=duration_minutes
        )
        self.busy_events = self.busy_events + [busy]
        return busy

    def remove_busy_event(self, busy_id: str) -> None:
        self.busy_events = [b for b in self.busy_events if b.id != busy_id]

    def clear_busy_events(self) -> None:
        self.busy_events = []
