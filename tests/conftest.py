"""
Global pytest fixtures for the TinyLink test suite.

Responsibilities:
    - Provide isolated in-memory and SQLite stores for direct testing
    - Provide a LinkManager fixture wired to the in-memory store
    - Provide a fresh FastAPI TestClient via the app factory, with an injected store

Why an app factory?
    Using `create_app(store=...)` ensures each test gets fresh state and never
    touches the default on-disk database.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from tinylink.manager.link_manager import LinkManager
from tinylink.storage.sqlite_storage import SQLiteStorage
from tinylink.storage.storage import Storage


@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def sqlite_storage(tmp_path) -> SQLiteStorage:
    """SQLite store on a per-test database file."""
    store = SQLiteStorage(str(tmp_path / "links.db"), timeout=5.0)
    yield store
    store.close()


@pytest.fixture
def manager(storage: Storage) -> LinkManager:
    """LinkManager wired to the in-memory storage fixture."""
    return LinkManager(storage=storage)


@pytest.fixture
def client(storage: Storage) -> TestClient:
    """
    Fresh TestClient over a new app serving the `storage` fixture.

    Tests can reach into `storage` directly to check side effects.
    """
    return TestClient(create_app(store=storage))
