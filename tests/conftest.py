import pytest

from bindery import CamelCaseStrategy, Context, EngineFactory, MemoryMetaCache


@pytest.fixture
def engine():
    """Fresh engine with an in-memory metadata cache, independent of the default engine."""
    return EngineFactory().with_meta_cache(MemoryMetaCache()).create()


@pytest.fixture
def ctx():
    return Context()


@pytest.fixture
def camel_ctx():
    return Context(naming_strategy=CamelCaseStrategy())


@pytest.fixture
def user_payload():
    return {
        "id": "u1",
        "email_address": "a@b.com",
        "name": "A",
        "createdAt": "2026-01-15T10:30:00+00:00",
        "address": {"street": "1 Main", "city": "NY", "country": "US"},
    }
