import pytest
from app.repositories.memory import InMemoryUnitOfWork
from app.schemas.event import EventCreate
from app.schemas.property import PropertyCreate


@pytest.mark.asyncio
async def test_rollback_keeps_commits_of_overlapping_unit_of_work(store):
    outer = InMemoryUnitOfWork(store)
    inner = InMemoryUnitOfWork(store)

    async with outer:
        async with inner:
            await inner.events.create(EventCreate(name="Signed Up", type="track", description="d"))
            await inner.commit()

    assert [row["name"] for row in store.events.rows.values()] == ["Signed Up"]


@pytest.mark.asyncio
async def test_rollback_only_undoes_own_writes(store):
    first = InMemoryUnitOfWork(store)
    second = InMemoryUnitOfWork(store)

    async with first:
        await first.events.create(EventCreate(name="Discarded", type="track", description="d"))
        async with second:
            await second.events.create(EventCreate(name="Kept", type="track", description="d"))
            await second.commit()

    assert [row["name"] for row in store.events.rows.values()] == ["Kept"]


@pytest.mark.asyncio
async def test_rollback_restores_updated_and_deleted_rows(store, uow):
    async with uow:
        age = await uow.properties.create(PropertyCreate(name="age", type="number", description="User age"))
        plan = await uow.properties.create(PropertyCreate(name="plan", type="string", description="Plan"))
        await uow.commit()

    async with uow:
        await uow.properties.update(age.id, {"description": "changed"})
        await uow.properties.delete(plan.id)

    assert store.properties.rows[age.id]["description"] == "User age"
    assert store.properties.rows[plan.id]["name"] == "plan"


@pytest.mark.asyncio
async def test_writes_after_commit_are_still_rolled_back(store, uow):
    async with uow:
        await uow.events.create(EventCreate(name="Committed", type="track", description="d"))
        await uow.commit()
        await uow.events.create(EventCreate(name="Pending", type="track", description="d"))

    assert [row["name"] for row in store.events.rows.values()] == ["Committed"]
