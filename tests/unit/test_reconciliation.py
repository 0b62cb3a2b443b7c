import asyncio
import pytest
from app.repositories.memory import InMemoryEventRepository, InMemoryUnitOfWork
from app.schemas.event import EventCreate
from app.schemas.property import PropertyCreate
from app.schemas.tracking_plan import TrackingPlanEvent
from app.services.reconciliation import ReconciliationEngine
from app.services.resolvers import EventResolver, PropertyResolver, ReconciliationError


def plan_event(name, description="d", properties=()):
    return TrackingPlanEvent(
        name=name,
        description=description,
        properties=[
            {"name": p[0], "type": p[1], "required": True, "description": p[2]}
            for p in properties
        ],
        additionalProperties=False
    )


async def reconcile(uow, events):
    async with uow:
        outcome = await ReconciliationEngine.for_unit_of_work(uow).reconcile(events)
        if not isinstance(outcome, ReconciliationError):
            await uow.commit()
        return outcome


@pytest.mark.asyncio
async def test_creates_missing_events_and_properties(store, uow):
    events = [
        plan_event("Signed Up", properties=[("user_id", "string", "pd"), ("plan", "string", "Plan")]),
        plan_event("Logged In", properties=[("user_id", "string", "pd")]),
    ]

    outcome = await reconcile(uow, events)

    assert outcome == events
    assert sorted(row["name"] for row in store.events.rows.values()) == ["Logged In", "Signed Up"]
    assert all(row["type"] == "track" for row in store.events.rows.values())
    assert sorted(row["name"] for row in store.properties.rows.values()) == ["plan", "user_id"]


@pytest.mark.asyncio
async def test_reconciling_twice_is_idempotent(store, uow):
    events = [plan_event("Signed Up", properties=[("user_id", "string", "pd")])]

    await reconcile(uow, events)
    first = (dict(store.events.rows), dict(store.properties.rows))
    outcome = await reconcile(uow, events)

    assert outcome == events
    assert (dict(store.events.rows), dict(store.properties.rows)) == first


@pytest.mark.asyncio
async def test_conflicting_event_fails_and_nothing_is_kept(store, uow):
    async with uow:
        await uow.events.create(EventCreate(name="Signed Up", type="track", description="d1"))
        await uow.commit()

    outcome = await reconcile(uow, [
        plan_event("Signed Up", description="d2", properties=[("user_id", "string", "pd")]),
        plan_event("Logged In"),
    ])

    assert isinstance(outcome, ReconciliationError)
    assert outcome.is_conflict
    assert outcome.entity == "event"
    assert outcome.name == "Signed Up"
    # Entities created alongside the conflict are rolled back with the unit of work
    assert [row["name"] for row in store.events.rows.values()] == ["Signed Up"]
    assert store.properties.rows == {}


@pytest.mark.asyncio
async def test_first_failure_follows_document_order(uow):
    async with uow:
        await uow.events.create(EventCreate(name="Checkout", type="track", description="old"))
        await uow.properties.create(PropertyCreate(name="sku", type="string", description="old sku"))
        await uow.commit()

    # The property of the first event comes before the second event
    outcome = await reconcile(uow, [
        plan_event("Cart Viewed", properties=[("sku", "string", "new sku")]),
        plan_event("Checkout", description="new"),
    ])

    assert isinstance(outcome, ReconciliationError)
    assert outcome.entity == "property"
    assert outcome.name == "sku"


@pytest.mark.asyncio
async def test_event_conflict_precedes_its_own_properties(uow):
    async with uow:
        await uow.events.create(EventCreate(name="Checkout", type="track", description="old"))
        await uow.properties.create(PropertyCreate(name="sku", type="string", description="old sku"))
        await uow.commit()

    outcome = await reconcile(uow, [
        plan_event("Checkout", description="new", properties=[("sku", "string", "new sku")]),
    ])

    assert outcome.entity == "event"
    assert outcome.name == "Checkout"


@pytest.mark.asyncio
async def test_shared_property_is_created_once(store, uow):
    events = [
        plan_event("Signed Up", properties=[("user_id", "string", "pd")]),
        plan_event("Logged In", properties=[("user_id", "string", "pd")]),
        plan_event("Logged Out", properties=[("user_id", "string", "pd")]),
    ]

    outcome = await reconcile(uow, events)

    assert outcome == events
    assert len(store.properties.rows) == 1


@pytest.mark.asyncio
async def test_repeated_reference_with_other_description_conflicts(store, uow):
    outcome = await reconcile(uow, [
        plan_event("Signed Up", properties=[("user_id", "string", "pd")]),
        plan_event("Logged In", properties=[("user_id", "string", "something else")]),
    ])

    assert isinstance(outcome, ReconciliationError)
    assert outcome.entity == "property"
    assert outcome.name == "user_id"
    assert store.properties.rows == {}


@pytest.mark.asyncio
async def test_resolutions_run_concurrently(uow):
    in_flight = 0
    peak = 0

    class SlowEventRepository(InMemoryEventRepository):
        async def find_by_name_and_type(self, name, type):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return await super().find_by_name_and_type(name, type)

    async with uow:
        engine = ReconciliationEngine(
            EventResolver(SlowEventRepository(uow.store, uow.journal)),
            PropertyResolver(uow.properties)
        )
        outcome = await engine.reconcile([plan_event("A"), plan_event("B"), plan_event("C")])

    assert not isinstance(outcome, ReconciliationError)
    assert peak == 3
