import pytest
from app.core.errors import ErrorKind
from app.repositories.memory import InMemoryUnitOfWork
from app.schemas.event import EventCreate, EventUpdate
from app.schemas.property import PropertyCreate, PropertyUpdate
from app.services.catalog import CatalogEntityService
from app.services.events import EventService
from app.services.properties import PropertyService


@pytest.fixture
def events(store):
    return EventService(InMemoryUnitOfWork(store))


@pytest.fixture
def properties(store):
    return PropertyService(InMemoryUnitOfWork(store))


@pytest.mark.asyncio
async def test_create_event(events):
    result = await events.create(EventCreate(name="Signed Up", type="track", description="d"))

    assert result.success is True
    assert result.status_code(201) == 201
    assert result.message == "Event created successfully"
    assert result.data.id == 1


@pytest.mark.asyncio
async def test_duplicate_name_and_type_is_rejected(store, events):
    await events.create(EventCreate(name="Signed Up", type="track", description="d"))

    result = await events.create(EventCreate(name="Signed Up", type="track", description="other"))

    assert result.success is False
    assert result.kind is ErrorKind.ALREADY_EXISTS
    assert result.status_code() == 409
    assert result.error == "Event with this name and type already exists"
    assert len(store.events.rows) == 1


@pytest.mark.asyncio
async def test_same_name_with_other_type_is_allowed(store, events):
    await events.create(EventCreate(name="Home", type="page", description="Home page"))

    result = await events.create(EventCreate(name="Home", type="screen", description="Home screen"))

    assert result.success is True
    assert len(store.events.rows) == 2


@pytest.mark.asyncio
async def test_get_missing_event(events):
    result = await events.get(7)

    assert result.kind is ErrorKind.NOT_FOUND
    assert result.error == "Event not found"


@pytest.mark.asyncio
async def test_update_collision_with_other_event(events):
    a = (await events.create(EventCreate(name="A", type="track", description="a"))).data
    await events.create(EventCreate(name="B", type="track", description="b"))

    result = await events.update(a.id, EventUpdate(name="B"))

    assert result.kind is ErrorKind.ALREADY_EXISTS
    assert (await events.get(a.id)).data.name == "A"


@pytest.mark.asyncio
async def test_update_to_own_key_is_not_a_collision(events):
    a = (await events.create(EventCreate(name="A", type="track", description="a"))).data

    result = await events.update(a.id, EventUpdate(name="A", type="track", description="new"))

    assert result.success is True
    assert result.data.description == "new"
    assert result.message == "Event updated successfully"


@pytest.mark.asyncio
async def test_retype_onto_taken_key(events):
    await events.create(EventCreate(name="Home", type="page", description="p"))
    screen = (await events.create(EventCreate(name="Home", type="screen", description="s"))).data

    result = await events.update(screen.id, EventUpdate(type="page"))

    assert result.kind is ErrorKind.ALREADY_EXISTS


@pytest.mark.asyncio
async def test_delete_event(store, events):
    a = (await events.create(EventCreate(name="A", type="track", description="a"))).data

    result = await events.delete(a.id)

    assert result.success is True
    assert result.message == "Event deleted successfully"
    assert store.events.rows == {}


@pytest.mark.asyncio
async def test_delete_missing_event_is_not_found(events):
    result = await events.delete(123)

    assert result.success is False
    assert result.kind is ErrorKind.NOT_FOUND
    assert result.status_code() == 404


@pytest.mark.asyncio
async def test_list_events_second_page(events):
    for name in ("First", "Second", "Third"):
        await events.create(EventCreate(name=name, type="track", description=name.lower()))

    result = await events.list_all(page=2, limit=1)

    assert len(result.data) == 1
    assert result.data[0].name == "Second"
    assert result.pagination.total == 3
    assert result.pagination.total_pages == 3


@pytest.mark.asyncio
async def test_list_events_filters_by_type(events):
    await events.create(EventCreate(name="Home", type="page", description="Home page"))
    await events.create(EventCreate(name="Signed Up", type="track", description="d"))

    result = await events.list_all(type="page")

    assert [e.name for e in result.data] == ["Home"]


@pytest.mark.asyncio
async def test_property_keeps_validation_rules(properties):
    created = await properties.create(PropertyCreate(
        name="age", type="number", description="User age", validation_rules={"min": 0, "max": 150}
    ))

    updated = await properties.update(created.data.id, PropertyUpdate(description="Age in years"))

    assert updated.data.validation_rules == {"min": 0, "max": 150}
    assert updated.data.description == "Age in years"


@pytest.mark.asyncio
async def test_property_validation_rules_can_be_cleared(properties):
    created = await properties.create(PropertyCreate(
        name="age", type="number", description="User age", validation_rules={"min": 0}
    ))

    updated = await properties.update(created.data.id, PropertyUpdate(validation_rules=None))

    assert updated.success is True
    assert updated.data.validation_rules is None


@pytest.mark.asyncio
async def test_duplicate_property_message(properties):
    await properties.create(PropertyCreate(name="age", type="number", description="User age"))

    result = await properties.create(PropertyCreate(name="age", type="number", description="User age"))

    assert result.error == "Property with this name and type already exists"


def test_catalog_service_needs_a_repository():
    with pytest.raises(TypeError):
        CatalogEntityService(InMemoryUnitOfWork())
