from fastapi import APIRouter, Depends, Query

from app.routers.events import get_event_service, to_http_exception
from app.schemas.member import Member, MemberCreate, MemberRoleUpdate
from app.services.errors import DomainError
from app.services.event_service import EventService

router = APIRouter(prefix="/events/{event_id}/members", tags=["members"])


@router.post("/", response_model=Member, status_code=201)
async def add_member(
    event_id: str,
    member_data: MemberCreate,
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.add_member(event_id, member_data)
    except DomainError as e:
        raise to_http_exception(e)


@router.delete("/{member_id}", response_model=Member)
async def remove_member(
    event_id: str,
    member_id: str,
    actorId: str = Query(..., description="Member performing the removal"),
    event_service: EventService = Depends(get_event_service),
):
    """Remove a member and clear their availability from every slot"""
    try:
        return event_service.remove_member(event_id, member_id, actorId)
    except DomainError as e:
        raise to_http_exception(e)


@router.patch("/{member_id}/role", response_model=Member)
async def update_member_role(
    event_id: str,
    member_id: str,
    update: MemberRoleUpdate,
    event_service: EventService = Depends(get_event_service),
):
    try:
        return event_service.update_member_role(event_id, member_id, update)
    except DomainError as e:
        raise to_http_exception(e)
