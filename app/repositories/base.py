"""Repository interfaces for the catalog store.

One interface per entity type plus a unit of work that groups them over a
single transaction. Implementations live in ``sqlalchemy.py`` (PostgreSQL /
SQLite through an ``AsyncSession``) and ``memory.py`` (dict-backed, for tests
and local experiments).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from app.schemas.event import EventCreate, EventResponse
from app.schemas.property import PropertyCreate, PropertyResponse
from app.schemas.tracking_plan import TrackingPlanCreate, TrackingPlanResponse

T = TypeVar("T")


class DuplicateKeyError(Exception):
    """Raised by a store when an insert or update violates a unique key"""


@dataclass
class Page(Generic[T]):
    """One page of rows plus the total row count matching the filters"""

    items: list[T]
    total: int


class EventRepository(ABC):
    @abstractmethod
    async def create(self, data: EventCreate) -> EventResponse:
        ...

    @abstractmethod
    async def find_by_id(self, id: int) -> EventResponse | None:
        ...

    @abstractmethod
    async def find_by_name_and_type(self, name: str, type: str) -> EventResponse | None:
        ...

    @abstractmethod
    async def find_all(
            self,
            page: int = 1,
            limit: int = 10,
            type: str | None = None,
            search: str | None = None
    ) -> Page[EventResponse]:
        """Newest first; search matches name or description, case-insensitive"""
        ...

    @abstractmethod
    async def update(self, id: int, fields: dict[str, Any]) -> EventResponse | None:
        ...

    @abstractmethod
    async def delete(self, id: int) -> bool:
        ...


class PropertyRepository(ABC):
    @abstractmethod
    async def create(self, data: PropertyCreate) -> PropertyResponse:
        ...

    @abstractmethod
    async def find_by_id(self, id: int) -> PropertyResponse | None:
        ...

    @abstractmethod
    async def find_by_name_and_type(self, name: str, type: str) -> PropertyResponse | None:
        ...

    @abstractmethod
    async def find_all(
            self,
            page: int = 1,
            limit: int = 10,
            type: str | None = None,
            search: str | None = None
    ) -> Page[PropertyResponse]:
        ...

    @abstractmethod
    async def update(self, id: int, fields: dict[str, Any]) -> PropertyResponse | None:
        ...

    @abstractmethod
    async def delete(self, id: int) -> bool:
        ...


class TrackingPlanRepository(ABC):
    @abstractmethod
    async def create(self, data: TrackingPlanCreate) -> TrackingPlanResponse:
        ...

    @abstractmethod
    async def find_by_id(self, id: int) -> TrackingPlanResponse | None:
        ...

    @abstractmethod
    async def find_by_name(self, name: str) -> TrackingPlanResponse | None:
        ...

    @abstractmethod
    async def find_all(
            self,
            page: int = 1,
            limit: int = 10,
            search: str | None = None
    ) -> Page[TrackingPlanResponse]:
        ...

    @abstractmethod
    async def update(self, id: int, fields: dict[str, Any]) -> TrackingPlanResponse | None:
        """``fields['events']``, when present, is the JSON document to store"""
        ...

    @abstractmethod
    async def delete(self, id: int) -> bool:
        ...


class UnitOfWork(ABC):
    """Groups the three repositories over one transaction.

    Usage::

        async with uow:
            await uow.events.create(...)
            await uow.commit()

    Anything not committed before the block exits is discarded.
    """

    events: EventRepository
    properties: PropertyRepository
    tracking_plans: TrackingPlanRepository

    @abstractmethod
    async def __aenter__(self) -> "UnitOfWork":
        ...

    @abstractmethod
    async def __aexit__(self, exc_type, exc_value, traceback) -> bool:
        ...

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...
