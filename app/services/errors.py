"""Domain errors raised by the event services."""


class DomainError(Exception):
    """Base class for errors the HTTP layer maps to a response"""


class EventNotFoundError(DomainError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class MemberNotFoundError(DomainError):
    def __init__(self, member_id: str) -> None:
        super().__init__(f"Member not found: {member_id}")
        self.member_id = member_id


class PermissionDeniedError(DomainError):
    def __init__(self, member_id: str, action: str) -> None:
        super().__init__(f"Member {member_id} is not allowed to {action}")
        self.member_id = member_id
        self.action = action


class CreatorProtectedError(DomainError):
    def __init__(self, member_id: str) -> None:
        super().__init__("The event creator cannot be removed")
        self.member_id = member_id


class PersistenceError(DomainError):
    """Raised when the backing store rejects a read or write"""


class DocumentTooLargeError(PersistenceError):
    def __init__(self, event_id: str, size: int, limit: int) -> None:
        super().__init__(
            f"Event {event_id} is {size} bytes, over the {limit} byte item limit"
        )
        self.event_id = event_id
        self.size = size


class SlotNotFoundError(DomainError, ValueError):
    def __init__(self, date: str, time: str) -> None:
        super().__init__(f"No slot at {date} {time} in this event")
        self.date = date
        self.time = time
