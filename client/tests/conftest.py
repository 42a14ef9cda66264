"""Pytest configuration and fixtures for the Nonplo client tests.

Provides an in-memory fake backend served over ``httpx.ASGITransport``,
access tokens, API clients and a wizard controller wired to them.
"""

import time
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from jose import jwt

from nonplo.api import AgentsApi, ApiClient, WizardApi
from nonplo.auth import StaticAuthProvider
from nonplo.notifications import Notification
from nonplo.utils.cache import invalidate_cache
from nonplo.wizard.controller import WizardController
from tests.fake_backend import FakeBackend

TEST_USER_ID = "user-1"


def make_token(user_id: str = TEST_USER_ID, email: str = "owner@example.com", expires_in: int = 3600) -> str:
    """Mint an HS256 access token with Supabase-style claims."""
    claims = {"sub": user_id, "email": email, "exp": int(time.time()) + expires_in}
    return jwt.encode(claims, "test-secret", algorithm="HS256")


# ── Cache ────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _clear_cache():
    """The forbidden-word cache is process-wide; isolate every test."""
    invalidate_cache("*")
    yield
    invalidate_cache("*")


# ── Backend & clients ────────────────────────────────────────────

@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def test_token() -> str:
    return make_token()


@pytest.fixture
def auth(test_token: str) -> StaticAuthProvider:
    return StaticAuthProvider(test_token)


@pytest_asyncio.fixture
async def api_client(backend: FakeBackend, auth: StaticAuthProvider) -> AsyncGenerator[ApiClient, None]:
    client = ApiClient(
        auth,
        base_url="http://test",
        transport=httpx.ASGITransport(app=backend.app),
    )
    yield client
    await client.aclose()


@pytest.fixture
def wizard_api(api_client: ApiClient) -> WizardApi:
    return WizardApi(api_client)


@pytest.fixture
def agents_api(api_client: ApiClient) -> AgentsApi:
    return AgentsApi(api_client)


# ── Wizard ───────────────────────────────────────────────────────

@pytest.fixture
def notifications() -> list[Notification]:
    return []


@pytest.fixture
def built_agents() -> list[str]:
    return []


@pytest.fixture
def controller(
    wizard_api: WizardApi,
    auth: StaticAuthProvider,
    notifications: list[Notification],
    built_agents: list[str],
) -> WizardController:
    return WizardController(
        wizard_api,
        auth,
        notifier=notifications.append,
        on_success=built_agents.append,
    )


@pytest_asyncio.fixture
async def opened(controller: WizardController) -> WizardController:
    """Controller with a freshly created wizard session."""
    await controller.open()
    return controller


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Tests against the fake backend")
    config.addinivalue_line("markers", "wizard: Wizard controller and steps")
    config.addinivalue_line("markers", "dashboard: Dashboard state")
    config.addinivalue_line("markers", "slow: Slow tests")
