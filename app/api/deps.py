# Request-scoped dependencies

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from app.core.constants import ERROR_MESSAGES
from app.core.database import Database, get_database
from app.repositories.base import UnitOfWork
from app.repositories.sqlalchemy import SqlAlchemyUnitOfWork
from app.schemas.common import envelope_dict
from app.services.events import EventService
from app.services.properties import PropertyService
from app.services.result import ServiceResult
from app.services.tracking_plans import TrackingPlanService


def get_unit_of_work(database: Database = Depends(get_database)) -> UnitOfWork:
    """Dependency for a unit of work over the application's store"""
    return SqlAlchemyUnitOfWork(database.session_factory)


def get_event_service(uow: UnitOfWork = Depends(get_unit_of_work)) -> EventService:
    return EventService(uow)


def get_property_service(uow: UnitOfWork = Depends(get_unit_of_work)) -> PropertyService:
    return PropertyService(uow)


def get_tracking_plan_service(uow: UnitOfWork = Depends(get_unit_of_work)) -> TrackingPlanService:
    return TrackingPlanService(uow)


def respond(result: ServiceResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Render a service result as the JSON envelope with its HTTP status"""
    return JSONResponse(
        status_code=result.status_code(success_status),
        content=envelope_dict(result.envelope())
    )


@dataclass
class PageParams:
    page: int
    limit: int


def get_page_params(
        request: Request,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int | None = Query(default=None, ge=1, description="Items per page")
) -> PageParams:
    """Pagination query; default and maximum limit come from the app's settings"""
    settings = request.app.state.settings
    if limit is None:
        limit = settings.default_page_limit
    elif limit > settings.max_page_limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": ERROR_MESSAGES["VALIDATION_ERROR"],
                "message": f"limit: Input should be less than or equal to {settings.max_page_limit}"
            }
        )
    return PageParams(page=page, limit=limit)
