"""Operations on a whole EventAggregate document.

These are shared by the server-side EventService and the client-side
ConvergenceController; nothing here persists. The mutating functions do not
check roles; callers go through authorize() first.
"""

import time
import uuid
from typing import Dict, List, Optional

from app import config
from app.schemas.availability import ProposedTimeSlot
from app.schemas.event import (
    DateRange,
    EventAggregate,
    EventCreate,
    InviteDetails,
    LockedSlot,
    Message,
    Slot,
    TimeRange,
)
from app.schemas.member import Member, Role
from app.services.availability_analyzer import analyze, format_date_short
from app.services.availability_store import AvailabilityStore
from app.services.errors import (
    CreatorProtectedError,
    MemberNotFoundError,
    PermissionDeniedError,
    SlotNotFoundError,
)
from app.services.time_grid import get_dates_in_range, get_times_in_range

SYSTEM_USER_ID = "system"
SYSTEM_USER_NAME = "SyncUp"

LOGISTICS_FIELDS = ("venue", "wardrobe", "materials", "notes")


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    return uuid.uuid4().hex[:9]


def build_slots(date_range: DateRange, time_range: TimeRange) -> List[Slot]:
    """One empty slot per (date, time) pair, dates outer and times inner"""
    times = get_times_in_range(time_range.startTime, time_range.endTime)
    return [
        Slot(date=day, time=label)
        for day in get_dates_in_range(date_range.startDate, date_range.endDate)
        for label in times
    ]


def system_message(text: str) -> Message:
    return Message(
        id=f"sys-{new_id()}",
        userId=SYSTEM_USER_ID,
        userName=SYSTEM_USER_NAME,
        text=text,
        timestamp=now_ms(),
        isSystem=True,
    )


def record_message(aggregate: EventAggregate, message: Message) -> Message:
    """Append to the chat log, keeping only the newest MAX_MESSAGES entries"""
    aggregate.messages = (aggregate.messages + [message])[-config.MAX_MESSAGES :]
    return message


def new_event(data: EventCreate, event_id: Optional[str] = None) -> EventAggregate:
    creator = Member(
        id=data.creatorId or new_id(),
        name=data.creatorName,
        role=data.creatorRole,
    )
    return EventAggregate(
        id=event_id or str(uuid.uuid4()),
        title=data.title,
        description=data.description,
        creatorId=creator.id,
        dateRange=data.dateRange,
        timeRange=data.timeRange,
        slots=build_slots(data.dateRange, data.timeRange),
        members=[creator],
        messages=[
            system_message(
                f"{creator.name} created the event "
                f"({data.dateRange.startDate} to {data.dateRange.endDate})"
            )
        ],
        updatedAt=now_ms(),
    )


def find_member(aggregate: EventAggregate, member_id: str) -> Member:
    for member in aggregate.members:
        if member.id == member_id:
            return member
    raise MemberNotFoundError(member_id)


def authorize(
    aggregate: EventAggregate, actor_id: str, permission: str, action: str
) -> Member:
    """Return the acting member if their role grants permission (a Role predicate)"""
    actor = find_member(aggregate, actor_id)
    if not getattr(actor.role, permission):
        raise PermissionDeniedError(actor_id, action)
    return actor


def add_member(aggregate: EventAggregate, member: Member) -> Member:
    """Add a member; adding an id that is already present returns the existing one"""
    for existing in aggregate.members:
        if existing.id == member.id:
            return existing
    aggregate.members = aggregate.members + [member]
    record_message(aggregate, system_message(f"{member.name} joined the event"))
    return member


def remove_member(aggregate: EventAggregate, member_id: str) -> Member:
    if member_id == aggregate.creatorId:
        raise CreatorProtectedError(member_id)
    member = find_member(aggregate, member_id)
    aggregate.members = [m for m in aggregate.members if m.id != member_id]
    AvailabilityStore(aggregate).purge_user(member_id)
    record_message(aggregate, system_message(f"{member.name} left the event"))
    return member


def update_member_role(aggregate: EventAggregate, member_id: str, role: Role) -> Member:
    # The creator is only protected from removal; a role change goes through.
    member = find_member(aggregate, member_id)
    updated = member.model_copy(update={"role": role})
    aggregate.members = [updated if m.id == member_id else m for m in aggregate.members]
    return updated


def lock_slot(aggregate: EventAggregate, date: str, time: str) -> None:
    """Finalize (date, time). Locking an empty slot, or re-locking, is allowed."""
    if AvailabilityStore(aggregate).find_slot(date, time) is None:
        raise SlotNotFoundError(date, time)
    aggregate.isLocked = True
    aggregate.lockedSlot = LockedSlot(date=date, time=time)
    record_message(aggregate, system_message(f"Event locked for {date} at {time}"))


def unlock(aggregate: EventAggregate, actor_name: str) -> None:
    aggregate.isLocked = False
    aggregate.lockedSlot = None
    record_message(aggregate, system_message(f"Event unlocked by {actor_name}"))


def update_logistics(
    aggregate: EventAggregate, changes: Dict[str, Optional[str]], actor_name: str
) -> None:
    """Merge the non-None fields of changes into the logistics board"""
    update = {
        field: value
        for field, value in changes.items()
        if field in LOGISTICS_FIELDS and value is not None
    }
    update["lastUpdatedBy"] = actor_name
    aggregate.logistics = aggregate.logistics.model_copy(update=update)


def append_message(aggregate: EventAggregate, member: Member, text: str) -> Message:
    message = Message(
        id=new_id(),
        userId=member.id,
        userName=member.name,
        text=text,
        timestamp=now_ms(),
    )
    return record_message(aggregate, message)


def proposal_for(aggregate: EventAggregate, date: str, time: str) -> ProposedTimeSlot:
    for proposed in analyze(aggregate.slots, aggregate.members):
        if proposed.date == date and proposed.time == time:
            return proposed
    return ProposedTimeSlot(
        date=date,
        time=time,
        availableCount=0,
        totalMembers=len(aggregate.members),
        isAllAvailable=False,
    )


def propose_slot(
    aggregate: EventAggregate, actor: Member, date: str, time: str
) -> ProposedTimeSlot:
    """Record the chosen candidate and ask the group to confirm it in chat"""
    proposed = proposal_for(aggregate, date, time)
    aggregate.approvedTimeSlot = proposed
    append_message(
        aggregate,
        actor,
        f"📅 Proposed Time: {format_date_short(date)} at {time}\n\n"
        "Please confirm if this time works for you! 👍",
    )
    return proposed


def invite_details(aggregate: EventAggregate) -> InviteDetails:
    return InviteDetails(
        id=aggregate.id,
        title=aggregate.title,
        description=aggregate.description,
        dateRange=aggregate.dateRange,
        timeRange=aggregate.timeRange,
        creatorId=aggregate.creatorId,
    )
