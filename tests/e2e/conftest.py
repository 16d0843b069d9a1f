"""Browser fixtures for the end-to-end suite.

Needs a running server seeded with the demo data; point ``E2E_BASE_URL`` at it
(for example ``http://localhost:8000``).
"""

import os
from typing import Generator

import pytest
from playwright.sync_api import Page

from api_helper import TestApiClient
from auth_helper import AuthHelper

TEST_USERS = {
    "admin": {"email": "admin@sweetswirls.com", "password": "admin123", "name": "Admin User"},
    "production_lead": {"email": "production@sweetswirls.com", "password": "production123", "name": "Production Lead"},
    "shift_lead": {"email": "shift@sweetswirls.com", "password": "shift123", "name": "Shift Lead"},
    "team_member": {"email": "team@sweetswirls.com", "password": "team123", "name": "Team Member"},
}


@pytest.fixture(scope="session")
def app_url() -> str:
    return os.environ["E2E_BASE_URL"].rstrip("/")


@pytest.fixture(scope="session")
def test_users() -> dict:
    return TEST_USERS


@pytest.fixture
def api(app_url) -> Generator[TestApiClient, None, None]:
    """Backend client signed in as admin, for seeding and inspecting state."""
    client = TestApiClient(app_url)
    client.login(**{k: TEST_USERS["admin"][k] for k in ("email", "password")})
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def auth(page: Page, app_url) -> AuthHelper:
    helper = AuthHelper(page, app_url, TEST_USERS)
    helper.ensure_logged_out()
    return helper
