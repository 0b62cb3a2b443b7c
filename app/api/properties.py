from fastapi import APIRouter, Depends, Query, status
from app.api.deps import PageParams, get_property_service, get_page_params, respond
from app.core.constants import PropertyType
from app.core.security import require_read, require_write, require_delete
from app.schemas.common import ApiResponse
from app.schemas.property import PropertyCreate, PropertyUpdate, PropertyResponse
from app.services.properties import PropertyService

router = APIRouter(prefix="/properties", tags=["properties"])


@router.post("", response_model=ApiResponse[PropertyResponse], status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_write)])
async def create_property(
        prop: PropertyCreate,
        service: PropertyService = Depends(get_property_service)
):
    """
    Create a property.

    - **name** + **type** must not already exist (409 otherwise)
    - **type**: one of string, number, boolean
    - **validation_rules**: optional JSON object, stored as given
    """
    result = await service.create(prop)
    return respond(result, status.HTTP_201_CREATED)


@router.get("", response_model=ApiResponse[list[PropertyResponse]], dependencies=[Depends(require_read)])
async def list_properties(
        paging: PageParams = Depends(get_page_params),
        type: PropertyType | None = Query(default=None, description="Filter by property type"),
        search: str | None = Query(default=None, description="Match name or description"),
        service: PropertyService = Depends(get_property_service)
):
    result = await service.list_all(page=paging.page, limit=paging.limit, type=type, search=search)
    return respond(result)


@router.get("/{id}", response_model=ApiResponse[PropertyResponse], dependencies=[Depends(require_read)])
async def get_property(id: int, service: PropertyService = Depends(get_property_service)):
    result = await service.get(id)
    return respond(result)


@router.put("/{id}", response_model=ApiResponse[PropertyResponse], dependencies=[Depends(require_write)])
async def update_property(
        id: int,
        prop: PropertyUpdate,
        service: PropertyService = Depends(get_property_service)
):
    result = await service.update(id, prop)
    return respond(result)


@router.delete("/{id}", response_model=ApiResponse[None], dependencies=[Depends(require_delete)])
async def delete_property(id: int, service: PropertyService = Depends(get_property_service)):
    result = await service.delete(id)
    return respond(result)
