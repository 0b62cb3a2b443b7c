import pytest
from app.api.deps import get_unit_of_work
from app.core.config import Settings
from app.main import create_app
from app.repositories.memory import InMemoryStore, InMemoryUnitOfWork


API_KEYS = {
    "reader-key": ["read"],
    "writer-key": ["read", "write"],
    "admin-key": ["read", "write", "delete"],
}


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def uow(store):
    return InMemoryUnitOfWork(store)


def build_app(store: InMemoryStore, **overrides):
    settings = Settings(rate_limit_enabled=False, **overrides)
    app = create_app(settings)
    app.dependency_overrides[get_unit_of_work] = lambda: InMemoryUnitOfWork(store)
    return app


@pytest.fixture
def app(store):
    return build_app(store)


@pytest.fixture
def secured_app(store):
    return build_app(store, auth_enabled=True, api_keys=API_KEYS)
