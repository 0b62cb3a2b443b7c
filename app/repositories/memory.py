"""Dict-backed implementation of the repository interfaces.

Behaves like the relational store where the services can tell: unique keys
are enforced, lists are newest first, and a unit of work that exits without
committing undoes its own writes and nothing else. Writes are visible to other
units of work before commit; ids handed out are not reused after a rollback.
"""

import asyncio
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable

from app.models.base import utcnow
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


@dataclass
class _Table:
    rows: dict[int, dict[str, Any]] = field(default_factory=dict)
    next_id: int = 1


@dataclass
class InMemoryStore:
    """The shared state; several units of work may point at one store"""

    events: _Table = field(default_factory=_Table)
    properties: _Table = field(default_factory=_Table)
    tracking_plans: _Table = field(default_factory=_Table)


class _InMemoryRepository:
    table_name: str
    schema: Any
    unique_key: tuple[str, ...]

    def __init__(self, store: InMemoryStore, journal: list[Callable[[], Any]] | None = None):
        self.store = store
        # Undo steps for writes not yet committed, oldest first
        self.journal = journal if journal is not None else []

    @property
    def table(self) -> _Table:
        return getattr(self.store, self.table_name)

    def _key(self, row: dict[str, Any]) -> tuple:
        return tuple(row[column] for column in self.unique_key)

    def _check_unique(self, row: dict[str, Any]) -> None:
        key = self._key(row)
        for other in self.table.rows.values():
            if other["id"] != row.get("id") and self._key(other) == key:
                raise DuplicateKeyError(f"duplicate key {key!r} in {self.table_name}")

    async def _insert(self, values: dict[str, Any]):
        # Yield like a real store round trip would
        await asyncio.sleep(0)
        now = utcnow()
        row = {**values, "created_at": now, "updated_at": now}
        self._check_unique(row)
        row["id"] = self.table.next_id
        self.table.next_id += 1
        self.table.rows[row["id"]] = row
        self.journal.append(partial(self.table.rows.pop, row["id"], None))
        return self.schema.model_validate(row)

    async def _first(self, **criteria):
        await asyncio.sleep(0)
        for row in self.table.rows.values():
            if all(row[column] == value for column, value in criteria.items()):
                return self.schema.model_validate(row)
        return None

    async def find_by_id(self, id: int):
        return await self._first(id=id)

    async def _page(self, page: int, limit: int, type: str | None = None, search: str | None = None) -> Page:
        await asyncio.sleep(0)
        rows = list(self.table.rows.values())
        if type:
            rows = [row for row in rows if row["type"] == type]
        if search:
            needle = search.lower()
            rows = [
                row for row in rows
                if needle in row["name"].lower() or needle in row["description"].lower()
            ]
        rows.sort(key=lambda row: (row["created_at"], row["id"]), reverse=True)
        offset = (page - 1) * limit
        return Page(
            items=[self.schema.model_validate(row) for row in rows[offset:offset + limit]],
            total=len(rows)
        )

    async def update(self, id: int, fields: dict[str, Any]):
        await asyncio.sleep(0)
        row = self.table.rows.get(id)
        if row is None:
            return None
        updated = {**row, **fields, "updated_at": utcnow()}
        self._check_unique(updated)
        self.table.rows[id] = updated
        self.journal.append(partial(self.table.rows.__setitem__, id, row))
        return self.schema.model_validate(updated)

    async def delete(self, id: int) -> bool:
        await asyncio.sleep(0)
        row = self.table.rows.pop(id, None)
        if row is None:
            return False
        self.journal.append(partial(self.table.rows.__setitem__, id, row))
        return True


class InMemoryEventRepository(_InMemoryRepository, EventRepository):
    table_name = "events"
    schema = EventResponse
    unique_key = ("name", "type")

    async def create(self, data: EventCreate) -> EventResponse:
        return await self._insert(data.model_dump())

    async def find_by_name_and_type(self, name: str, type: str) -> EventResponse | None:
        return await self._first(name=name, type=type)

    async def find_all(self, page=1, limit=10, type=None, search=None) -> Page[EventResponse]:
        return await self._page(page, limit, type, search)


class InMemoryPropertyRepository(_InMemoryRepository, PropertyRepository):
    table_name = "properties"
    schema = PropertyResponse
    unique_key = ("name", "type")

    async def create(self, data: PropertyCreate) -> PropertyResponse:
        return await self._insert(data.model_dump())

    async def find_by_name_and_type(self, name: str, type: str) -> PropertyResponse | None:
        return await self._first(name=name, type=type)

    async def find_all(self, page=1, limit=10, type=None, search=None) -> Page[PropertyResponse]:
        return await self._page(page, limit, type, search)


class InMemoryTrackingPlanRepository(_InMemoryRepository, TrackingPlanRepository):
    table_name = "tracking_plans"
    schema = TrackingPlanResponse
    unique_key = ("name",)

    async def create(self, data: TrackingPlanCreate) -> TrackingPlanResponse:
        return await self._insert({
            "name": data.name,
            "description": data.description,
            "events": dump_events(data.events),
        })

    async def find_by_name(self, name: str) -> TrackingPlanResponse | None:
        return await self._first(name=name)

    async def find_all(self, page=1, limit=10, search=None) -> Page[TrackingPlanResponse]:
        return await self._page(page, limit, search=search)


class InMemoryUnitOfWork(UnitOfWork):
    def __init__(self, store: InMemoryStore | None = None):
        self.store = store if store is not None else InMemoryStore()
        self.journal: list[Callable[[], Any]] = []
        self.events = InMemoryEventRepository(self.store, self.journal)
        self.properties = InMemoryPropertyRepository(self.store, self.journal)
        self.tracking_plans = InMemoryTrackingPlanRepository(self.store, self.journal)
        self.commits = 0

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        self.journal.clear()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> bool:
        await self.rollback()
        return False

    async def commit(self) -> None:
        self.journal.clear()
        self.commits += 1

    async def rollback(self) -> None:
        while self.journal:
            undo = self.journal.pop()
            undo()
