from fastapi import APIRouter, Depends, Query, status
from app.api.deps import PageParams, get_event_service, get_page_params, respond
from app.core.constants import EventType
from app.core.security import require_read, require_write, require_delete
from app.schemas.common import ApiResponse
from app.schemas.event import EventCreate, EventUpdate, EventResponse
from app.services.events import EventService

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=ApiResponse[EventResponse], status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_write)])
async def create_event(
        event: EventCreate,
        service: EventService = Depends(get_event_service)
):
    """
    Create an event.

    - **name** + **type** must not already exist (409 otherwise)
    - **type**: one of track, identify, alias, screen, page
    """
    result = await service.create(event)
    return respond(result, status.HTTP_201_CREATED)


@router.get("", response_model=ApiResponse[list[EventResponse]], dependencies=[Depends(require_read)])
async def list_events(
        paging: PageParams = Depends(get_page_params),
        type: EventType | None = Query(default=None, description="Filter by event type"),
        search: str | None = Query(default=None, description="Match name or description"),
        service: EventService = Depends(get_event_service)
):
    """List events, newest first."""
    result = await service.list_all(page=paging.page, limit=paging.limit, type=type, search=search)
    return respond(result)


@router.get("/{id}", response_model=ApiResponse[EventResponse], dependencies=[Depends(require_read)])
async def get_event(id: int, service: EventService = Depends(get_event_service)):
    result = await service.get(id)
    return respond(result)


@router.put("/{id}", response_model=ApiResponse[EventResponse], dependencies=[Depends(require_write)])
async def update_event(
        id: int,
        event: EventUpdate,
        service: EventService = Depends(get_event_service)
):
    """
    Update an event. Only supplied fields change.

    Renaming or retyping onto another event's (name, type) returns 409.
    """
    result = await service.update(id, event)
    return respond(result)


@router.delete("/{id}", response_model=ApiResponse[None], dependencies=[Depends(require_delete)])
async def delete_event(id: int, service: EventService = Depends(get_event_service)):
    result = await service.delete(id)
    return respond(result)
