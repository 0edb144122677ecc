from .member import Role, Member, MemberCreate, MemberRoleUpdate, MemberSeed
from .availability import (
    CalendarBusyEvent,
    ProposedTimeSlot,
    SlotUpdate,
    ToggleRequest,
    BatchToggleRequest,
    ToggleStatus,
    ToggleResult,
    BatchToggleResult,
)
from .event import (
    DateRange,
    TimeRange,
    Slot,
    LockedSlot,
    Logistics,
    Message,
    EventAggregate,
    EventCreate,
    LockRequest,
    ActorRequest,
    ProposeSlotRequest,
    LogisticsUpdate,
    MessageCreate,
    InviteDetails,
)

__all__ = [
    "Role",
    "Member",
    "MemberCreate",
    "MemberRoleUpdate",
    "MemberSeed",
    "CalendarBusyEvent",
    "ProposedTimeSlot",
    "SlotUpdate",
    "ToggleRequest",
    "BatchToggleRequest",
    "ToggleStatus",
    "ToggleResult",
    "BatchToggleResult",
    "DateRange",
    "TimeRange",
    "Slot",
    "LockedSlot",
    "Logistics",
    "Message",
    "EventAggregate",
    "EventCreate",
    "LockRequest",
    "ActorRequest",
    "ProposeSlotRequest",
    "LogisticsUpdate",
    "MessageCreate",
    "InviteDetails",
]
