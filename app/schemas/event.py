from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app import config
from app.schemas.availability import ProposedTimeSlot
from app.schemas.member import Member, Role
from app.services.time_grid import FIRST_TIME_LABEL, LAST_TIME_LABEL, time_index


class DateRange(BaseModel):
    startDate: str
    endDate: str

    @field_validator("startDate", "endDate")
    @classmethod
    def iso_date(cls, value: str) -> str:
        if date.fromisoformat(value).isoformat() != value:
            raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}")
        return value

    @model_validator(mode="after")
    def ordered(self) -> "DateRange":
        # ISO dates order lexically the same as chronologically
        if self.endDate < self.startDate:
            raise ValueError("endDate must not be before startDate")
        start, end = date.fromisoformat(self.startDate), date.fromisoformat(self.endDate)
        days = (end - start).days + 1
        if days > config.MAX_EVENT_DAYS:
            raise ValueError(
                f"Date range spans {days} days, at most {config.MAX_EVENT_DAYS} allowed"
            )
        return self


class TimeRange(BaseModel):
    startTime: str = FIRST_TIME_LABEL
    endTime: str = LAST_TIME_LABEL

    @model_validator(mode="after")
    def ordered(self) -> "TimeRange":
        start = time_index(self.startTime)
        end = time_index(self.endTime)
        if start is None or end is None:
            raise ValueError("startTime and endTime must be grid time labels")
        if start >= end:
            raise ValueError("startTime must be before endTime")
        return self


class Slot(BaseModel):
    date: str
    time: str
    availableUsers: List[str] = []


class LockedSlot(BaseModel):
    date: str
    time: str


class Logistics(BaseModel):
    venue: str = ""
    wardrobe: str = ""
    materials: str = ""
    notes: str = ""
    lastUpdatedBy: Optional[str] = None


class Message(BaseModel):
    id: str
    userId: str
    userName: str
    text: str
    timestamp: int  # epoch milliseconds
    isSystem: bool = False


class EventAggregate(BaseModel):
    id: str
    title: str
    description: str = ""
    creatorId: str
    dateRange: DateRange
    timeRange: TimeRange = Field(default_factory=TimeRange)
    slots: List[Slot] = []
    members: List[Member] = []
    logistics: Logistics = Field(default_factory=Logistics)
    messages: List[Message] = []
    isLocked: bool = False
    lockedSlot: Optional[LockedSlot] = None
    approvedTimeSlot: Optional[ProposedTimeSlot] = None
    updatedAt: int = 0


class EventCreate(BaseModel):
    title: str
    description: str = ""
    creatorName: str
    creatorRole: Role = Role.DIRECTOR
    creatorId: Optional[str] = None
    dateRange: DateRange
    timeRange: TimeRange = Field(default_factory=TimeRange)

    @field_validator("title", "creatorName")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Must not be empty")
        return value


class LockRequest(BaseModel):
    actorId: str
    date: str
    time: str


class ActorRequest(BaseModel):
    actorId: str


class ProposeSlotRequest(LockRequest):
    pass


class LogisticsUpdate(BaseModel):
    actorId: str
    venue: Optional[str] = None
    wardrobe: Optional[str] = None
    materials: Optional[str] = None
    notes: Optional[str] = None


class MessageCreate(BaseModel):
    userId: str
    text: str

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message must not be empty")
        return value


class InviteDetails(BaseModel):
    id: str
    title: str
    description: str
    dateRange: DateRange
    timeRange: TimeRange
    creatorId: str
