from abc import ABC, abstractmethod
from typing import Any

import structlog

from app.core.constants import ERROR_MESSAGES
from app.core.errors import ErrorKind
from app.repositories.base import UnitOfWork
from app.schemas.common import Pagination
from app.services.result import ServiceResult

logger = structlog.get_logger()


class CatalogEntityService(ABC):
    """Guarded CRUD for entities that are unique by (name, type).

    Subclasses pick the repository and the entity label used in messages.
    Every operation runs in its own unit of work.
    """

    entity: str
    label: str

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    @abstractmethod
    def repository(self):
        ...

    def _message(self, key: str) -> str:
        return ERROR_MESSAGES[f"{self.entity.upper()}_{key}"]

    async def create(self, data) -> ServiceResult:
        try:
            async with self.uow:
                repository = self.repository()
                if await repository.find_by_name_and_type(data.name, data.type) is not None:
                    return ServiceResult.fail(ErrorKind.ALREADY_EXISTS, self._message("ALREADY_EXISTS"))

                created = await repository.create(data)
                await self.uow.commit()
        except Exception as e:
            logger.error(f"{self.entity}_create_failed", name=data.name, type=data.type, error=str(e))
            return ServiceResult.internal(e)

        logger.info(f"{self.entity}_created", id=created.id, name=created.name, type=created.type)
        return ServiceResult.ok(created, f"{self.label} created successfully")

    async def get(self, id: int) -> ServiceResult:
        try:
            async with self.uow:
                found = await self.repository().find_by_id(id)
        except Exception as e:
            logger.error(f"{self.entity}_get_failed", id=id, error=str(e))
            return ServiceResult.internal(e)

        if found is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, self._message("NOT_FOUND"))
        return ServiceResult.ok(found)

    async def list_all(self, page: int = 1, limit: int = 10, type: str | None = None,
                       search: str | None = None) -> ServiceResult:
        try:
            async with self.uow:
                result = await self.repository().find_all(page=page, limit=limit, type=type, search=search)
        except Exception as e:
            logger.error(f"{self.entity}_list_failed", error=str(e))
            return ServiceResult.internal(e)

        return ServiceResult.ok(result.items, pagination=Pagination.build(page, limit, result.total))

    async def update(self, id: int, data) -> ServiceResult:
        fields: dict[str, Any] = data.model_dump(exclude_unset=True)
        # name/type/description are NOT NULL; an explicit null means "leave as is"
        fields = {
            key: value for key, value in fields.items()
            if value is not None or key not in ("name", "type", "description")
        }

        try:
            async with self.uow:
                repository = self.repository()
                existing = await repository.find_by_id(id)
                if existing is None:
                    return ServiceResult.fail(ErrorKind.NOT_FOUND, self._message("NOT_FOUND"))

                new_name = fields.get("name", existing.name)
                new_type = fields.get("type", existing.type)
                if (new_name, new_type) != (existing.name, existing.type):
                    conflicting = await repository.find_by_name_and_type(new_name, new_type)
                    if conflicting is not None and conflicting.id != id:
                        return ServiceResult.fail(ErrorKind.ALREADY_EXISTS, self._message("ALREADY_EXISTS"))

                updated = await repository.update(id, fields)
                if updated is None:
                    return ServiceResult.fail(ErrorKind.NOT_FOUND, self._message("NOT_FOUND"))
                await self.uow.commit()
        except Exception as e:
            logger.error(f"{self.entity}_update_failed", id=id, error=str(e))
            return ServiceResult.internal(e)

        logger.info(f"{self.entity}_updated", id=id, fields=sorted(fields))
        return ServiceResult.ok(updated, f"{self.label} updated successfully")

    async def delete(self, id: int) -> ServiceResult:
        try:
            async with self.uow:
                repository = self.repository()
                if await repository.find_by_id(id) is None:
                    return ServiceResult.fail(ErrorKind.NOT_FOUND, self._message("NOT_FOUND"))

                if not await repository.delete(id):
                    return ServiceResult.fail(ErrorKind.NOT_FOUND, self._message("NOT_FOUND"))
                await self.uow.commit()
        except Exception as e:
            logger.error(f"{self.entity}_delete_failed", id=id, error=str(e))
            return ServiceResult.internal(e)

        logger.info(f"{self.entity}_deleted", id=id)
        return ServiceResult.ok(message=f"{self.label} deleted successfully")
