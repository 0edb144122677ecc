from typing import List

from fastapi import APIRouter, HTTPException, Depends, Query

from app.database.dynamodb import get_db_connection
from app.database.event_store import DynamoEventStore
from app.schemas.event import (
    EventAggregate,
    EventCreate,
    InviteDetails,
    Logistics,
    LogisticsUpdate,
    Message,
    MessageCreate,
)
from app.schemas.member import Member, MemberSeed
from app.services.errors import (
    CreatorProtectedError,
    DocumentTooLargeError,
    DomainError,
    EventNotFoundError,
    MemberNotFoundError,
    PermissionDeniedError,
    SlotNotFoundError,
)
from app.services.event_service import EventService

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service():
    """Dependency to get EventService instance"""
    db = get_db_connection()
    return EventService(DynamoEventStore(db))


def to_http_exception(error: DomainError) -> HTTPException:
    if isinstance(error, (EventNotFoundError, MemberNotFoundError)):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, PermissionDeniedError):
        return HTTPException(status_code=403, detail=str(error))
    if isinstance(error, CreatorProtectedError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, SlotNotFoundError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, DocumentTooLargeError):
        return HTTPException(status_code=413, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


@router.post("/", response_model=EventAggregate, status_code=201)
async def create_event(
    event_data: EventCreate, event_service: EventService = Depends(get_event_service)
):
    """Create an event with an empty availability grid"""
    try:
        return event_service.create_event(event_data)
    except DomainError as e:
        raise to_http_exception(e)


@router.get("/", response_model=List[EventAggregate])
async def list_user_events(
    userId: str = Query(..., description="Member whose events are listed"),
    event_service: EventService = Depends(get_event_service),
):
    """Events the user is a member of, newest activity first"""
    try:
        return event_service.list_user_events(userId)
    except DomainError as e:
        raise to_http_exception(e)


@router.get("/{event_id}", response_model=EventAggregate)
async def get_event(
    event_id: str, event_service: EventService = Depends(get_event_service)
):
    try:
        return event_service.get_event(event_id)
    except DomainError as e:
        raise to_http_exception(e)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    actorId: str = Query(..., description="Creator deleting the event"),
    event_service: EventService = Depends(get_event_service),
):
    try:
        event_service.delete_event(event_id, actorId)
    except DomainError as e:
        raise to_http_exception(e)


@router.get("/{event_id}/invite", response_model=InviteDetails)
async def get_invite_details(
    event_id: str, event_service: EventService = Depends(get_event_service)
):
    """Fields needed to build a shareable invite link"""
    try:
        return event_service.invite_details(event_id)
    except DomainError as e:
        raise to_http_exception(e)


@router.post("/{event_id}/join", response_model=Member, status_code=201)
async def join_event(
    event_id: str,
    seed: MemberSeed,
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.join_event(event_id, seed)
    except DomainError as e:
        raise to_http_exception(e)


@router.patch("/{event_id}/logistics", response_model=Logistics)
async def update_logistics(
    event_id: str,
    update: LogisticsUpdate,
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.update_logistics(event_id, update)
    except DomainError as e:
        raise to_http_exception(e)


@router.post("/{event_id}/messages", response_model=Message, status_code=201)
async def post_message(
    event_id: str,
    message_data: MessageCreate,
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.post_message(event_id, message_data)
    except DomainError as e:
        raise to_http_exception(e)
