from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.routers.events import get_event_service, to_http_exception
from app.schemas.availability import (
    BatchToggleRequest,
    BatchToggleResult,
    ProposedTimeSlot,
    ToggleRequest,
    ToggleResult,
)
from app.schemas.event import (
    ActorRequest,
    EventAggregate,
    LockRequest,
    ProposeSlotRequest,
)
from app.services.errors import DomainError
from app.services.event_service import EventService

router = APIRouter(prefix="/events/{event_id}", tags=["availability"])


@router.post("/availability/toggle", response_model=ToggleResult)
async def toggle_availability(
    event_id: str,
    request: ToggleRequest,
    event_service: EventService = Depends(get_event_service),
):
    """Mark one slot. Conflicts and locks come back as the result status."""
    try:
        return event_service.toggle(event_id, request)
    except DomainError as e:
        raise to_http_exception(e)


@router.post("/availability/batch", response_model=BatchToggleResult)
async def batch_toggle_availability(
    event_id: str,
    request: BatchToggleRequest,
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.batch_toggle(event_id, request)
    except DomainError as e:
        raise to_http_exception(e)


@router.get("/analysis", response_model=List[ProposedTimeSlot])
async def analyze_availability(
    event_id: str,
    limit: Optional[int] = Query(
        None, ge=1, le=100, description="Only the top slots with any availability"
    ),
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.analyze(event_id, limit)
    except DomainError as e:
        raise to_http_exception(e)


@router.post("/lock", response_model=EventAggregate)
async def lock_event(
    event_id: str,
    request: LockRequest,
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.lock(event_id, request)
    except DomainError as e:
        raise to_http_exception(e)


@router.post("/unlock", response_model=EventAggregate)
async def unlock_event(
    event_id: str,
    request: ActorRequest,
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.unlock(event_id, request.actorId)
    except DomainError as e:
        raise to_http_exception(e)


@router.post("/proposal", response_model=ProposedTimeSlot)
async def propose_time_slot(
    event_id: str,
    request: ProposeSlotRequest,
    event_service: EventService = Depends(get_event_service),
):
    """Record a candidate time and ask the group to confirm it in chat"""
    try:
        return event_service.propose_slot(event_id, request)
    except DomainError as e:
        raise to_http_exception(e)
