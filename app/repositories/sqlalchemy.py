import asyncio
from typing import Any

from sqlalchemy import select, delete, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.base import utcnow
from app.models.event import Event
from app.models.property import Property
from app.models.tracking_plan import TrackingPlan
from app.repositories.base import (
    DuplicateKeyError,
    EventRepository,
    Page,
    PropertyRepository,
    TrackingPlanRepository,
    UnitOfWork,
)
from app.schemas.event import EventCreate, EventResponse
from app.schemas.property import PropertyCreate, PropertyResponse
from app.schemas.tracking_plan import TrackingPlanCreate, TrackingPlanResponse, dump_events


class _SqlAlchemyRepository:
    """Shared plumbing for the ORM-backed repositories.

    An AsyncSession cannot run two statements at once, so every repository of
    a unit of work funnels its statements through the same lock.
    """

    model: Any
    schema: Any

    def __init__(self, session: AsyncSession, lock: asyncio.Lock):
        self.session = session
        self.lock = lock

    async def _insert(self, values: dict[str, Any]):
        async with self.lock:
            row = self.model(**values)
            self.session.add(row)
            try:
                await self.session.flush()
            except IntegrityError as e:
                raise DuplicateKeyError(str(e.orig)) from e
            return self.schema.model_validate(row)

    async def _first(self, *criteria):
        async with self.lock:
            result = await self.session.execute(select(self.model).where(*criteria).limit(1))
            row = result.scalars().first()
            return self.schema.model_validate(row) if row is not None else None

    async def find_by_id(self, id: int):
        return await self._first(self.model.id == id)

    async def _page(self, query, page: int, limit: int) -> Page:
        async with self.lock:
            total = await self.session.scalar(
                select(func.count()).select_from(query.subquery())
            )
            result = await self.session.execute(
                query
                .order_by(self.model.created_at.desc(), self.model.id.desc())
                .limit(limit)
                .offset((page - 1) * limit)
            )
            rows = result.scalars().all()
            return Page(items=[self.schema.model_validate(row) for row in rows], total=total or 0)

    def _filtered(self, type: str | None = None, search: str | None = None):
        query = select(self.model)
        if type:
            query = query.where(self.model.type == type)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                self.model.name.ilike(pattern),
                self.model.description.ilike(pattern)
            ))
        return query

    async def update(self, id: int, fields: dict[str, Any]):
        async with self.lock:
            row = await self.session.get(self.model, id)
            if row is None:
                return None
            for key, value in fields.items():
                setattr(row, key, value)
            row.updated_at = utcnow()
            try:
                await self.session.flush()
            except IntegrityError as e:
                raise DuplicateKeyError(str(e.orig)) from e
            return self.schema.model_validate(row)

    async def delete(self, id: int) -> bool:
        async with self.lock:
            result = await self.session.execute(delete(self.model).where(self.model.id == id))
            return result.rowcount > 0


class SqlAlchemyEventRepository(_SqlAlchemyRepository, EventRepository):
    model = Event
    schema = EventResponse

    async def create(self, data: EventCreate) -> EventResponse:
        return await self._insert(data.model_dump())

    async def find_by_name_and_type(self, name: str, type: str) -> EventResponse | None:
        return await self._first(Event.name == name, Event.type == type)

    async def find_all(self, page=1, limit=10, type=None, search=None) -> Page[EventResponse]:
        return await self._page(self._filtered(type, search), page, limit)


class SqlAlchemyPropertyRepository(_SqlAlchemyRepository, PropertyRepository):
    model = Property
    schema = PropertyResponse

    async def create(self, data: PropertyCreate) -> PropertyResponse:
        return await self._insert(data.model_dump())

    async def find_by_name_and_type(self, name: str, type: str) -> PropertyResponse | None:
        return await self._first(Property.name == name, Property.type == type)

    async def find_all(self, page=1, limit=10, type=None, search=None) -> Page[PropertyResponse]:
        return await self._page(self._filtered(type, search), page, limit)


class SqlAlchemyTrackingPlanRepository(_SqlAlchemyRepository, TrackingPlanRepository):
    model = TrackingPlan
    schema = TrackingPlanResponse

    async def create(self, data: TrackingPlanCreate) -> TrackingPlanResponse:
        return await self._insert({
            "name": data.name,
            "description": data.description,
            "events": dump_events(data.events),
        })

    async def find_by_name(self, name: str) -> TrackingPlanResponse | None:
        return await self._first(TrackingPlan.name == name)

    async def find_all(self, page=1, limit=10, search=None) -> Page[TrackingPlanResponse]:
        return await self._page(self._filtered(search=search), page, limit)


class SqlAlchemyUnitOfWork(UnitOfWork):
    """One AsyncSession (and so one transaction) per ``async with`` block"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self.session_factory()
        lock = asyncio.Lock()
        self.events = SqlAlchemyEventRepository(self.session, lock)
        self.properties = SqlAlchemyPropertyRepository(self.session, lock)
        self.tracking_plans = SqlAlchemyTrackingPlanRepository(self.session, lock)
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> bool:
        try:
            # Closing without a commit rolls back whatever is pending
            await self.session.close()
        finally:
            self.session = None
        return False

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
