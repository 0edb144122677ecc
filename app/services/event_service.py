import logging
from typing import List, Optional

from app.database.event_store import EventStore
from app.schemas.availability import (
    BatchToggleRequest,
    BatchToggleResult,
    ProposedTimeSlot,
    ToggleRequest,
    ToggleResult,
    ToggleStatus,
)
from app.schemas.event import (
    EventAggregate,
    EventCreate,
    InviteDetails,
    LockRequest,
    Logistics,
    LogisticsUpdate,
    Message,
    MessageCreate,
    ProposeSlotRequest,
)
from app.schemas.member import (
    Member,
    MemberCreate,
    MemberRoleUpdate,
    MemberSeed,
)
from app.services import event_aggregate
from app.services.availability_analyzer import analyze, interesting_slots
from app.services.availability_store import AvailabilityStore
from app.services.errors import EventNotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)


class EventService:
    """Load, mutate and save event documents on behalf of an acting member.

    Role permissions are checked here, before the aggregate is touched; the
    lock rule is enforced again by the AvailabilityStore itself.
    """

    def __init__(self, store: EventStore):
        self.store = store

    def _load(self, event_id: str) -> EventAggregate:
        aggregate = self.store.load(event_id)
        if aggregate is None:
            raise EventNotFoundError(event_id)
        return aggregate

    def _save(self, aggregate: EventAggregate) -> EventAggregate:
        aggregate.updatedAt = event_aggregate.now_ms()
        self.store.save(aggregate)
        return aggregate

    def create_event(self, event_data: EventCreate) -> EventAggregate:
        aggregate = event_aggregate.new_event(event_data)
        self._save(aggregate)
        logger.info(
            "Created event %s with %d slots", aggregate.id, len(aggregate.slots)
        )
        return aggregate

    def get_event(self, event_id: str) -> EventAggregate:
        return self._load(event_id)

    def list_user_events(self, user_id: str) -> List[EventAggregate]:
        """Events the user belongs to, most recently updated first"""
        events = self.store.list_for_member(user_id)
        return sorted(events, key=lambda e: e.updatedAt, reverse=True)

    def delete_event(self, event_id: str, actor_id: str) -> None:
        aggregate = self._load(event_id)
        if actor_id != aggregate.creatorId:
            raise PermissionDeniedError(actor_id, "delete the event")
        self.store.delete(event_id)
        logger.info("Deleted event %s", event_id)

    def invite_details(self, event_id: str) -> InviteDetails:
        return event_aggregate.invite_details(self._load(event_id))

    def join_event(self, event_id: str, seed: MemberSeed) -> Member:
        """Add the signed-in user behind an invite link as a plain member"""
        aggregate = self._load(event_id)
        member = event_aggregate.add_member(aggregate, seed.to_member())
        self._save(aggregate)
        return member

    def add_member(self, event_id: str, member_data: MemberCreate) -> Member:
        aggregate = self._load(event_id)
        event_aggregate.authorize(
            aggregate, member_data.actorId, "can_manage_members", "add members"
        )
        member = Member(
            id=event_aggregate.new_id(),
            name=member_data.name,
            role=member_data.role,
            badge=member_data.badge,
            email=member_data.email,
            photoURL=member_data.photoURL,
        )
        event_aggregate.add_member(aggregate, member)
        self._save(aggregate)
        return member

    def remove_member(self, event_id: str, member_id: str, actor_id: str) -> Member:
        aggregate = self._load(event_id)
        event_aggregate.authorize(
            aggregate, actor_id, "can_manage_members", "remove members"
        )
        removed = event_aggregate.remove_member(aggregate, member_id)
        self._save(aggregate)
        logger.info("Removed member %s from event %s", member_id, event_id)
        return removed

    def update_member_role(
        self, event_id: str, member_id: str, update: MemberRoleUpdate
    ) -> Member:
        aggregate = self._load(event_id)
        event_aggregate.authorize(
            aggregate, update.actorId, "can_manage_members", "change roles"
        )
        member = event_aggregate.update_member_role(aggregate, member_id, update.role)
        self._save(aggregate)
        return member

    def toggle(self, event_id: str, request: ToggleRequest) -> ToggleResult:
        aggregate = self._load(event_id)
        event_aggregate.find_member(aggregate, request.userId)
        result = AvailabilityStore(aggregate).toggle(
            request.date,
            request.time,
            request.userId,
            request.makeAvailable,
            request.busyEvents,
        )
        if result.status == ToggleStatus.APPLIED:
            self._save(aggregate)
        return result

    def batch_toggle(
        self, event_id: str, request: BatchToggleRequest
    ) -> BatchToggleResult:
        aggregate = self._load(event_id)
        event_aggregate.find_member(aggregate, request.userId)
        result = AvailabilityStore(aggregate).batch_toggle(
            request.userId, request.updates, request.busyEvents
        )
        if result.status == ToggleStatus.APPLIED:
            self._save(aggregate)
        return result

    def lock(self, event_id: str, request: LockRequest) -> EventAggregate:
        aggregate = self._load(event_id)
        event_aggregate.authorize(
            aggregate, request.actorId, "can_lock_slot", "lock the event"
        )
        event_aggregate.lock_slot(aggregate, request.date, request.time)
        logger.info("Event %s locked at %s %s", event_id, request.date, request.time)
        return self._save(aggregate)

    def unlock(self, event_id: str, actor_id: str) -> EventAggregate:
        aggregate = self._load(event_id)
        actor = event_aggregate.authorize(
            aggregate, actor_id, "can_lock_slot", "unlock the event"
        )
        event_aggregate.unlock(aggregate, actor.name)
        logger.info("Event %s unlocked", event_id)
        return self._save(aggregate)

    def analyze(
        self, event_id: str, limit: Optional[int] = None
    ) -> List[ProposedTimeSlot]:
        aggregate = self._load(event_id)
        proposed = analyze(aggregate.slots, aggregate.members, aggregate.dateRange)
        if limit is not None:
            return interesting_slots(proposed, limit)
        return proposed

    def propose_slot(
        self, event_id: str, request: ProposeSlotRequest
    ) -> ProposedTimeSlot:
        aggregate = self._load(event_id)
        actor = event_aggregate.authorize(
            aggregate, request.actorId, "can_propose_slot", "propose a time"
        )
        proposed = event_aggregate.propose_slot(
            aggregate, actor, request.date, request.time
        )
        self._save(aggregate)
        return proposed

    def update_logistics(self, event_id: str, update: LogisticsUpdate) -> Logistics:
        aggregate = self._load(event_id)
        actor = event_aggregate.authorize(
            aggregate, update.actorId, "can_edit_logistics", "edit logistics"
        )
        event_aggregate.update_logistics(
            aggregate, update.model_dump(exclude={"actorId"}), actor.name
        )
        self._save(aggregate)
        return aggregate.logistics

    def post_message(self, event_id: str, message_data: MessageCreate) -> Message:
        aggregate = self._load(event_id)
        author = event_aggregate.find_member(aggregate, message_data.userId)
        message = event_aggregate.append_message(aggregate, author, message_data.text)
        self._save(aggregate)
        return message
