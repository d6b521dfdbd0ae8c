# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import os

# Settings are read at import time; startup validation needs these
os.environ.setdefault("SHEETS_BRIDGE_URL", "https://script.example.com/exec")
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

import pytest
from fastapi.testclient import TestClient
from typing import Generator

from main import create_app
from tests.fakes import FakeSheetsBridge, seed_bridge
from core.field_mapping import FieldMappingEngine
from core.permission_helpers import PermissionModel
from core.store import AdminStore, get_store, reset_store
from dependencies.auth import CurrentUser, get_current_user


# ============================================================
# Core fixtures
# ============================================================
@pytest.fixture
def bridge() -> FakeSheetsBridge:
    return seed_bridge()


@pytest.fixture
def store(bridge) -> AdminStore:
    admin_store = AdminStore(bridge, max_age_seconds=300)
    admin_store.refresh()
    admin_store.refresh_schema()
    return admin_store


@pytest.fixture
def model(store) -> PermissionModel:
    return PermissionModel(store)


@pytest.fixture
def engine(store) -> FieldMappingEngine:
    return FieldMappingEngine(store)


# ============================================================
# App fixtures
# ============================================================
@pytest.fixture(scope="function")
def app(store):
    """Create a test FastAPI application instance bound to the seeded store."""
    application = create_app()
    application.dependency_overrides[get_store] = lambda: store
    return application


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(app, store):
    """Sign in as a seeded Users-sheet row for the rest of the test."""

    def _login(email: str) -> CurrentUser:
        user = store.find_user(email)
        assert user is not None, f"{email} is not a seeded user"
        current = CurrentUser(email=user.email, user=user)
        app.dependency_overrides[get_current_user] = lambda: current
        return current

    return _login


@pytest.fixture(autouse=True)
def reset_global_store():
    """Reset the process-wide store before each test."""
    reset_store()
    yield
    reset_store()
