"""Find-or-create resolution of catalog entities referenced by tracking plans.

A resolver looks an entity up by (name, type). A missing entity is created
with the candidate's description; an existing one is accepted only when its
description is exactly the candidate's. Existing rows are never modified.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

import structlog

from app.core.constants import ERROR_MESSAGES
from app.core.errors import ErrorKind
from app.repositories.base import EventRepository, PropertyRepository
from app.schemas.event import EventCreate, EventResponse
from app.schemas.property import PropertyCreate, PropertyResponse
from app.services.result import ServiceResult

logger = structlog.get_logger()

T = TypeVar("T")


class ReconciliationErrorKind(str, Enum):
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ReconciliationError:
    """Why an entity could not be reconciled"""

    kind: ReconciliationErrorKind
    entity: str
    name: str
    message: str

    @classmethod
    def conflict(cls, entity: str, name: str) -> "ReconciliationError":
        return cls(
            kind=ReconciliationErrorKind.CONFLICT,
            entity=entity,
            name=name,
            message=f"{entity.capitalize()} '{name}' already exists with a different description"
        )

    @classmethod
    def internal(cls, entity: str, name: str, exc: BaseException) -> "ReconciliationError":
        return cls(
            kind=ReconciliationErrorKind.INTERNAL,
            entity=entity,
            name=name,
            message=str(exc) or "Unknown error occurred"
        )

    @property
    def is_conflict(self) -> bool:
        return self.kind is ReconciliationErrorKind.CONFLICT

    def to_result(self) -> ServiceResult[Any]:
        if self.is_conflict:
            return ServiceResult.fail(
                ErrorKind.CONFLICT,
                ERROR_MESSAGES[f"{self.entity.upper()}_ALREADY_EXISTS"],
                self.message
            )
        return ServiceResult.fail(ErrorKind.INTERNAL, ERROR_MESSAGES["INTERNAL_ERROR"], self.message)


@dataclass(frozen=True)
class Candidate:
    """An entity as a tracking plan describes it"""

    name: str
    type: str
    description: str


@dataclass(frozen=True)
class Resolved(Generic[T]):
    entity: T
    created: bool = False


class EntityResolver(ABC, Generic[T]):
    entity: str

    def __init__(self, repository):
        self.repository = repository

    @abstractmethod
    def build_create(self, candidate: Candidate):
        ...

    async def resolve(self, candidate: Candidate) -> Resolved[T] | ReconciliationError:
        try:
            existing = await self.repository.find_by_name_and_type(candidate.name, candidate.type)
            if existing is None:
                created = await self.repository.create(self.build_create(candidate))
                logger.info(
                    "entity_created_by_reconciliation",
                    entity=self.entity,
                    id=created.id,
                    name=candidate.name,
                    type=candidate.type
                )
                return Resolved(created, created=True)
        except Exception as e:
            # Includes duplicate keys from a concurrent reconciliation; not retried
            logger.error(
                "entity_resolution_failed",
                entity=self.entity,
                name=candidate.name,
                type=candidate.type,
                error=str(e)
            )
            return ReconciliationError.internal(self.entity, candidate.name, e)

        if existing.description != candidate.description:
            return ReconciliationError.conflict(self.entity, candidate.name)
        return Resolved(existing)


class EventResolver(EntityResolver[EventResponse]):
    entity = "event"

    def __init__(self, repository: EventRepository):
        super().__init__(repository)

    def build_create(self, candidate: Candidate) -> EventCreate:
        return EventCreate(name=candidate.name, type=candidate.type, description=candidate.description)


class PropertyResolver(EntityResolver[PropertyResponse]):
    entity = "property"

    def __init__(self, repository: PropertyRepository):
        super().__init__(repository)

    def build_create(self, candidate: Candidate) -> PropertyCreate:
        return PropertyCreate(name=candidate.name, type=candidate.type, description=candidate.description)
