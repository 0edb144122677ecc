"""Persistence for whole event documents.

Every save replaces the stored document entirely (last writer wins); there is
no field-level merge. Subscribers of an event id are called with the new
document after each save, or with None once the document is gone.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from app import config
from app.schemas.event import EventAggregate
from app.services.errors import DocumentTooLargeError, PersistenceError

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[Optional[EventAggregate]], None]
Unsubscribe = Callable[[], None]


class EventStore(ABC):
    def __init__(self) -> None:
        self._subscribers: Dict[str, List[SnapshotCallback]] = defaultdict(list)

    @abstractmethod
    def save(self, aggregate: EventAggregate) -> None:
        """Replace the stored document for aggregate.id"""

    @abstractmethod
    def load(self, event_id: str) -> Optional[EventAggregate]:
        """Return the stored document, or None when there is none"""

    @abstractmethod
    def delete(self, event_id: str) -> None:
        ...

    @abstractmethod
    def list_for_member(self, member_id: str) -> List[EventAggregate]:
        """Every stored event that has member_id among its members"""

    def subscribe(self, event_id: str, callback: SnapshotCallback) -> Unsubscribe:
        self._subscribers[event_id].append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(event_id, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(event_id, None)

        return unsubscribe

    def subscriber_count(self, event_id: str) -> int:
        return len(self._subscribers.get(event_id, []))

    def _notify(self, event_id: str, snapshot: Optional[EventAggregate]) -> None:
        for callback in list(self._subscribers.get(event_id, [])):
            delivered = snapshot.model_copy(deep=True) if snapshot else None
            try:
                callback(delivered)
            except Exception:
                logger.exception("Snapshot subscriber failed for event %s", event_id)


class InMemoryEventStore(EventStore):
    """Process-local store; documents are copied in and out"""

    def __init__(self) -> None:
        super().__init__()
        self._documents: Dict[str, EventAggregate] = {}

    def save(self, aggregate: EventAggregate) -> None:
        stored = aggregate.model_copy(deep=True)
        self._documents[aggregate.id] = stored
        self._notify(aggregate.id, stored)

    def load(self, event_id: str) -> Optional[EventAggregate]:
        stored = self._documents.get(event_id)
        return stored.model_copy(deep=True) if stored else None

    def delete(self, event_id: str) -> None:
        if self._documents.pop(event_id, None) is not None:
            self._notify(event_id, None)

    def list_for_member(self, member_id: str) -> List[EventAggregate]:
        return [
            stored.model_copy(deep=True)
            for stored in self._documents.values()
            if any(m.id == member_id for m in stored.members)
        ]


class DynamoEventStore(EventStore):
    """One DynamoDB item per event, keyed EVENT#<id> / DETAIL.

    The aggregate is kept as a JSON document attribute so a put_item always
    swaps the whole thing. DynamoDB has no push channel, so subscribers are
    told about saves made through this store and about whatever refresh()
    finds on re-reading.
    """

    def __init__(self, dynamodb_resource, table_name=config.EVENTS_TABLE_NAME):
        super().__init__()
        self.dynamodb = dynamodb_resource
        self.table = dynamodb_resource.Table(table_name)

    @staticmethod
    def _key(event_id: str) -> Dict[str, str]:
        return {"PK": f"EVENT#{event_id}", "SK": "DETAIL"}

    def save(self, aggregate: EventAggregate) -> None:
        document = aggregate.model_dump_json()
        size = len(document.encode("utf-8"))
        if size > config.MAX_DOCUMENT_BYTES:
            raise DocumentTooLargeError(aggregate.id, size, config.MAX_DOCUMENT_BYTES)
        item = {
            **self._key(aggregate.id),
            "id": aggregate.id,
            "title": aggregate.title,
            "creatorId": aggregate.creatorId,
            "memberIds": [m.id for m in aggregate.members],
            "updatedAt": aggregate.updatedAt,
            "document": document,
        }
        try:
            self.table.put_item(Item=item)
        except ClientError as e:
            raise PersistenceError(f"Failed to save event {aggregate.id}: {e}") from e
        logger.debug("Saved event %s", aggregate.id)
        self._notify(aggregate.id, aggregate)

    def load(self, event_id: str) -> Optional[EventAggregate]:
        try:
            response = self.table.get_item(Key=self._key(event_id))
        except ClientError as e:
            raise PersistenceError(f"Failed to load event {event_id}: {e}") from e
        item = response.get("Item")
        if not item:
            return None
        return EventAggregate.model_validate_json(item["document"])

    def delete(self, event_id: str) -> None:
        try:
            self.table.delete_item(Key=self._key(event_id))
        except ClientError as e:
            raise PersistenceError(f"Failed to delete event {event_id}: {e}") from e
        self._notify(event_id, None)

    def refresh(self, event_id: str) -> Optional[EventAggregate]:
        """Re-read the event and push the result to its subscribers"""
        snapshot = self.load(event_id)
        self._notify(event_id, snapshot)
        return snapshot

    def list_for_member(self, member_id: str) -> List[EventAggregate]:
        """Scan for events whose memberIds contain member_id"""
        events = []
        scan_params = {
            "FilterExpression": Attr("SK").eq("DETAIL")
            & Attr("memberIds").contains(member_id),
        }
        while True:
            try:
                response = self.table.scan(**scan_params)
            except ClientError as e:
                raise PersistenceError(
                    f"Failed to list events for {member_id}: {e}"
                ) from e
            for item in response.get("Items", []):
                events.append(EventAggregate.model_validate_json(item["document"]))

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            scan_params["ExclusiveStartKey"] = last_key
        return events
