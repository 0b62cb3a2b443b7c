from typing import Any

import structlog

from app.core.constants import ERROR_MESSAGES
from app.core.errors import ErrorKind
from app.repositories.base import UnitOfWork
from app.schemas.common import Pagination
from app.schemas.tracking_plan import TrackingPlanCreate, TrackingPlanUpdate, dump_events
from app.services.reconciliation import ReconciliationEngine
from app.services.resolvers import ReconciliationError
from app.services.result import ServiceResult

logger = structlog.get_logger()


class TrackingPlanService:
    """Tracking plan CRUD with reconciliation of the embedded events and properties.

    Create and update run the reconciliation and the plan write in a single
    unit of work: events or properties created along the way are only kept if
    the plan itself is written.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def _not_found(self) -> ServiceResult:
        return ServiceResult.fail(ErrorKind.NOT_FOUND, ERROR_MESSAGES["TRACKING_PLAN_NOT_FOUND"])

    def _name_taken(self) -> ServiceResult:
        return ServiceResult.fail(ErrorKind.ALREADY_EXISTS, ERROR_MESSAGES["TRACKING_PLAN_ALREADY_EXISTS"])

    async def create_tracking_plan(self, data: TrackingPlanCreate) -> ServiceResult:
        try:
            async with self.uow:
                if await self.uow.tracking_plans.find_by_name(data.name) is not None:
                    return self._name_taken()

                events = await ReconciliationEngine.for_unit_of_work(self.uow).reconcile(data.events)
                if isinstance(events, ReconciliationError):
                    return events.to_result()

                plan = await self.uow.tracking_plans.create(data.model_copy(update={"events": events}))
                await self.uow.commit()
        except Exception as e:
            logger.error("tracking_plan_create_failed", name=data.name, error=str(e))
            return ServiceResult.internal(e)

        logger.info("tracking_plan_created", id=plan.id, name=plan.name, events=len(plan.events))
        return ServiceResult.ok(plan, "Tracking plan created successfully")

    async def get_tracking_plan(self, id: int) -> ServiceResult:
        try:
            async with self.uow:
                plan = await self.uow.tracking_plans.find_by_id(id)
        except Exception as e:
            logger.error("tracking_plan_get_failed", id=id, error=str(e))
            return ServiceResult.internal(e)

        if plan is None:
            return self._not_found()
        return ServiceResult.ok(plan)

    async def list_tracking_plans(self, page: int = 1, limit: int = 10,
                                  search: str | None = None) -> ServiceResult:
        try:
            async with self.uow:
                result = await self.uow.tracking_plans.find_all(page=page, limit=limit, search=search)
        except Exception as e:
            logger.error("tracking_plan_list_failed", error=str(e))
            return ServiceResult.internal(e)

        return ServiceResult.ok(result.items, pagination=Pagination.build(page, limit, result.total))

    async def update_tracking_plan(self, id: int, data: TrackingPlanUpdate) -> ServiceResult:
        """Partial update; a supplied events list is reconciled in full, not diffed"""
        supplied = {
            key for key, value in data.model_dump(exclude_unset=True).items() if value is not None
        }

        try:
            async with self.uow:
                existing = await self.uow.tracking_plans.find_by_id(id)
                if existing is None:
                    return self._not_found()

                fields: dict[str, Any] = {}
                if "events" in supplied:
                    events = await ReconciliationEngine.for_unit_of_work(self.uow).reconcile(data.events)
                    if isinstance(events, ReconciliationError):
                        return events.to_result()
                    fields["events"] = dump_events(events)

                if "name" in supplied:
                    if data.name != existing.name:
                        if await self.uow.tracking_plans.find_by_name(data.name) is not None:
                            return self._name_taken()
                    fields["name"] = data.name

                if "description" in supplied:
                    fields["description"] = data.description

                updated = await self.uow.tracking_plans.update(id, fields)
                if updated is None:
                    return self._not_found()
                await self.uow.commit()
        except Exception as e:
            logger.error("tracking_plan_update_failed", id=id, error=str(e))
            return ServiceResult.internal(e)

        logger.info("tracking_plan_updated", id=id, fields=sorted(fields))
        return ServiceResult.ok(updated, "Tracking plan updated successfully")

    async def delete_tracking_plan(self, id: int) -> ServiceResult:
        """Deletes the plan only; referenced events and properties stay in the catalog"""
        try:
            async with self.uow:
                if await self.uow.tracking_plans.find_by_id(id) is None:
                    return self._not_found()

                if not await self.uow.tracking_plans.delete(id):
                    return self._not_found()
                await self.uow.commit()
        except Exception as e:
            logger.error("tracking_plan_delete_failed", id=id, error=str(e))
            return ServiceResult.internal(e)

        logger.info("tracking_plan_deleted", id=id)
        return ServiceResult.ok(message="Tracking plan deleted successfully")
