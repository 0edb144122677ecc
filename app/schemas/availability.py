import uuid
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class CalendarBusyEvent(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:9])
    title: str
    startTime: str  # e.g. "10:00 AM", matched against the grid labels
    durationMinutes: int = Field(default=60, ge=0)


class ProposedTimeSlot(BaseModel):
    date: str
    time: str
    availableCount: int
    totalMembers: int
    isAllAvailable: bool


class SlotUpdate(BaseModel):
    date: str
    time: str
    makeAvailable: bool


class ToggleRequest(SlotUpdate):
    userId: str
    busyEvents: List[CalendarBusyEvent] = []


class BatchToggleRequest(BaseModel):
    userId: str
    updates: List[SlotUpdate]
    busyEvents: List[CalendarBusyEvent] = []


class ToggleStatus(str, Enum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    LOCKED = "locked"
    CONFLICT = "conflict"
    SLOT_NOT_FOUND = "slot_not_found"


class ToggleResult(BaseModel):
    status: ToggleStatus
    date: str
    time: str
    conflict: Optional[CalendarBusyEvent] = None
    message: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.status in (ToggleStatus.APPLIED, ToggleStatus.UNCHANGED)


class BatchToggleResult(BaseModel):
    status: ToggleStatus
    applied: int = 0
    dropped: List[SlotUpdate] = []  # select updates blocked by a calendar conflict
    missing: List[SlotUpdate] = []  # updates naming a slot the event does not have
