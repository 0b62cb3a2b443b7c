from fastapi import APIRouter, Depends, Query, status
from app.api.deps import PageParams, get_tracking_plan_service, get_page_params, respond
from app.core.security import require_read, require_write, require_delete
from app.schemas.common import ApiResponse
from app.schemas.tracking_plan import TrackingPlanCreate, TrackingPlanUpdate, TrackingPlanResponse
from app.services.tracking_plans import TrackingPlanService

router = APIRouter(prefix="/tracking-plans", tags=["tracking-plans"])


@router.post("", response_model=ApiResponse[TrackingPlanResponse], status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_write)])
async def create_tracking_plan(
        plan: TrackingPlanCreate,
        service: TrackingPlanService = Depends(get_tracking_plan_service)
):
    """
    Create a tracking plan.

    - **name**: must be unique across tracking plans
    - **events**: at least one; each event is reconciled as a `track` event
      and each of its properties by its own type

    Missing events and properties are created. One that already exists with a
    different description fails the whole request with 409 and nothing is
    written.
    """
    result = await service.create_tracking_plan(plan)
    return respond(result, status.HTTP_201_CREATED)


@router.get("", response_model=ApiResponse[list[TrackingPlanResponse]], dependencies=[Depends(require_read)])
async def list_tracking_plans(
        paging: PageParams = Depends(get_page_params),
        search: str | None = Query(default=None, description="Match name or description"),
        service: TrackingPlanService = Depends(get_tracking_plan_service)
):
    result = await service.list_tracking_plans(page=paging.page, limit=paging.limit, search=search)
    return respond(result)


@router.get("/{id}", response_model=ApiResponse[TrackingPlanResponse], dependencies=[Depends(require_read)])
async def get_tracking_plan(id: int, service: TrackingPlanService = Depends(get_tracking_plan_service)):
    result = await service.get_tracking_plan(id)
    return respond(result)


@router.put("/{id}", response_model=ApiResponse[TrackingPlanResponse], dependencies=[Depends(require_write)])
async def update_tracking_plan(
        id: int,
        plan: TrackingPlanUpdate,
        service: TrackingPlanService = Depends(get_tracking_plan_service)
):
    """
    Update a tracking plan. Only supplied fields change.

    A supplied **events** list replaces the old one and is reconciled in full.
    """
    result = await service.update_tracking_plan(id, plan)
    return respond(result)


@router.delete("/{id}", response_model=ApiResponse[None], dependencies=[Depends(require_delete)])
async def delete_tracking_plan(id: int, service: TrackingPlanService = Depends(get_tracking_plan_service)):
    """Delete a tracking plan. Its events and properties stay in the catalog."""
    result = await service.delete_tracking_plan(id)
    return respond(result)
