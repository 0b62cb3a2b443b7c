import asyncio

import structlog

from app.core.constants import TRACKING_PLAN_EVENT_TYPE
from app.repositories.base import UnitOfWork
from app.schemas.tracking_plan import TrackingPlanEvent
from app.services.resolvers import (
    Candidate,
    EntityResolver,
    EventResolver,
    PropertyResolver,
    ReconciliationError,
    Resolved,
)

logger = structlog.get_logger()


class ReconciliationEngine:
    """Ensure every event and property a tracking plan references exists and agrees.

    Each distinct (entity, name, type) is resolved once, and the resolutions
    run concurrently. The error reported is the first failing reference in
    document order: earlier events before later ones, an event before its own
    properties, properties in declared order. A repeated reference whose
    description differs from the first occurrence is a conflict as well.

    The engine writes through the repositories it was given and never
    commits; the caller decides whether the unit of work is kept.
    """

    def __init__(self, event_resolver: EventResolver, property_resolver: PropertyResolver):
        self.event_resolver = event_resolver
        self.property_resolver = property_resolver

    @classmethod
    def for_unit_of_work(cls, uow: UnitOfWork) -> "ReconciliationEngine":
        return cls(EventResolver(uow.events), PropertyResolver(uow.properties))

    def _references(self, events: list[TrackingPlanEvent]) -> list[tuple[EntityResolver, Candidate]]:
        references = []
        for event in events:
            references.append((
                self.event_resolver,
                Candidate(event.name, TRACKING_PLAN_EVENT_TYPE, event.description)
            ))
            for prop in event.properties:
                references.append((
                    self.property_resolver,
                    Candidate(prop.name, prop.type, prop.description)
                ))
        return references

    async def reconcile(
            self,
            events: list[TrackingPlanEvent]
    ) -> list[TrackingPlanEvent] | ReconciliationError:
        references = self._references(events)

        first_seen: dict[tuple[str, str, str], tuple[EntityResolver, Candidate]] = {}
        for resolver, candidate in references:
            first_seen.setdefault((resolver.entity, candidate.name, candidate.type), (resolver, candidate))

        outcomes = await asyncio.gather(*(
            resolver.resolve(candidate) for resolver, candidate in first_seen.values()
        ))
        resolved = dict(zip(first_seen, outcomes))

        for resolver, candidate in references:
            outcome = resolved[(resolver.entity, candidate.name, candidate.type)]
            if isinstance(outcome, ReconciliationError):
                error = outcome
            elif outcome.entity.description != candidate.description:
                error = ReconciliationError.conflict(resolver.entity, candidate.name)
            else:
                continue

            logger.warning(
                "tracking_plan_reconciliation_failed",
                kind=error.kind.value,
                entity=error.entity,
                name=error.name
            )
            return error

        created = sum(1 for outcome in outcomes if isinstance(outcome, Resolved) and outcome.created)
        logger.info(
            "tracking_plan_reconciled",
            events=len(events),
            references=len(first_seen),
            created=created
        )
        return events
