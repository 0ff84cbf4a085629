from fastapi import APIRouter, Depends, Header, status, Path, Response, Query
from typing import Optional
from bson import ObjectId
from ..dependencies.auth import get_current_owner, get_event_service
from ..schemas.event import EventCreate, EventUpdate, EventResponse, EventMutationResponse
from ..services.event import EventService, CachedResult
from ..utils import create_response


router = APIRouter(
    prefix="/events",
    tags=["Events"],
)

def cached_response(result: CachedResult) -> Response:
    if result.not_modified:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=result.headers)
    return create_response(body=result.body, headers=result.headers)

@router.post("", response_model=EventMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    owner_id: ObjectId = Depends(get_current_owner),
    service: EventService = Depends(get_event_service)
):
    """
    Create a new event owned by the caller.

    The status always starts as ACTIVE.
    """
    event_id = await service.create_event(owner_id, event_data)
    headers = {"Location": f"{service.config.BASE_URL}/events/{event_id}"}
    return create_response(
        headers=headers,
        body={"id": event_id, "message": "event created"},
        status_code=status.HTTP_201_CREATED
    )

@router.get("", response_model=list[EventResponse])
async def list_events(
    q: Optional[str] = Query(None, description="Case-insensitive substring of the title"),
    if_none_match: Optional[str] = Header(None),
    owner_id: ObjectId = Depends(get_current_owner),
    service: EventService = Depends(get_event_service)
):
    """
    List the caller's events.

    Responds 304 when If-None-Match equals the ETag of the most recently
    updated event in the result.
    """
    result = await service.list_events(owner_id, q, if_none_match)
    return cached_response(result)

@router.get("/{event_id}", response_model=EventResponse)
async def get_event_by_id(
    event_id: str = Path(..., description="The ID of the event"),
    if_none_match: Optional[str] = Header(None),
    owner_id: ObjectId = Depends(get_current_owner),
    service: EventService = Depends(get_event_service)
):
    result = await service.get_event(owner_id, event_id, if_none_match)
    return cached_response(result)

@router.patch("/{event_id}", response_model=EventMutationResponse)
@router.put("/{event_id}", response_model=EventMutationResponse)
async def update_event(
    event_data: EventUpdate,
    event_id: str = Path(..., description="The ID of the event"),
    owner_id: ObjectId = Depends(get_current_owner),
    service: EventService = Depends(get_event_service)
):
    """
    Partially update an event.

    Only non-empty fields are written; an empty payload is rejected.
    """
    updated_id = await service.update_event(owner_id, event_id, event_data)
    return create_response(body={"id": updated_id, "message": "event updated"})

@router.delete("/{event_id}", response_model=EventMutationResponse)
async def delete_existing_event(
    event_id: str = Path(..., description="The ID of the event"),
    owner_id: ObjectId = Depends(get_current_owner),
    service: EventService = Depends(get_event_service)
):
    deleted_id = await service.delete_event(owner_id, event_id)
    return create_response(body={"id": deleted_id, "message": "event deleted"})
