"""
Placement Tracker - Test Configuration and Fixtures
"""
from typing import Callable

import httpx
import pytest
from faker import Faker
from rich.console import Console

from placement_tracker.api_client import PlacementAPIClient
from placement_tracker.config import TrackerConfig
from placement_tracker.models import UserSession
from placement_tracker.session import SessionContext
from placement_tracker.storage import LocalStore
from tests.factories import TEST_BASE_URL, mock_client

fake = Faker()


@pytest.fixture
def config(tmp_path) -> TrackerConfig:
    """Config rooted in a temporary directory"""
    return TrackerConfig(
        api_base_url=TEST_BASE_URL,
        config_dir=str(tmp_path / 'config'),
        export_dir=str(tmp_path / 'out'),
    )


@pytest.fixture
def store(config: TrackerConfig) -> LocalStore:
    return LocalStore.from_config(config)


@pytest.fixture
def reporter() -> UserSession:
    """Signed-in non-admin user"""
    return UserSession(id='7', username=fake.user_name(), email=fake.email(), role='user', token='user-token')


@pytest.fixture
def admin() -> UserSession:
    """Signed-in admin user"""
    return UserSession(id='1', username=fake.user_name(), email=fake.email(), role='admin', token='admin-token')


@pytest.fixture
def offline_client() -> PlacementAPIClient:
    """Client whose every request fails with a connection error"""
    def handler(request: httpx.Request):
        raise httpx.ConnectError('connection refused', request=request)

    return mock_client(handler)


@pytest.fixture
def console() -> Console:
    """Console that records output instead of printing"""
    return Console(record=True, width=160, force_terminal=False)


@pytest.fixture
def session_for(store: LocalStore) -> Callable[[UserSession, PlacementAPIClient], SessionContext]:
    """Build a SessionContext already signed in as ``user``"""
    def factory(user: UserSession, client: PlacementAPIClient) -> SessionContext:
        session = SessionContext(store, client)
        session.user = user
        return session

    return factory
