"""Shared pytest fixtures for lodgekeeper tests."""
import sys
sys.dont_write_bytecode = True

import pytest  # noqa: E402

from lodgekeeper.api.dependencies import build_core  # noqa: E402
from lodgekeeper.infra.memory_store import MemoryStore  # noqa: E402
from lodgekeeper.infra.settings import DEFAULT_CATALOG, Policy  # noqa: E402
from lodgekeeper.infra.time import FixedClock  # noqa: E402

from .helpers import NOW  # noqa: E402


@pytest.fixture(autouse=True)
def _token_hash_secret(monkeypatch):
    """Capability token hashing needs a secret."""
    monkeypatch.setenv("TOKEN_HASH_SECRET", "test-token-hash-secret")


@pytest.fixture(autouse=True)
def _reset_tasks_client():
    """Reset the module-level tasks client between tests."""
    from lodgekeeper.domain import holds

    holds._tasks_client.reset()
    yield
    holds._tasks_client.reset()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def policy():
    return Policy()


@pytest.fixture
def catalog():
    return DEFAULT_CATALOG


@pytest.fixture
def core(store, clock, policy, catalog):
    return build_core(store, clock=clock, policy=policy, catalog=catalog)
