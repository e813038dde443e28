"""Shared fixtures: a temporary database file, a deterministic clock and an API client."""

import pytest
from fastapi.testclient import TestClient

from pet_registry_api.app.core.config import Settings
from pet_registry_api.app.core.db import open_database
from pet_registry_api.app.core.security import create_access_token
from pet_registry_api.app.main import create_app
from pet_registry_api.app.services.registry_service import PetRegistryService

TEST_SECRET = "test-secret"


class FakeClock:
    """Clock that advances by one second on every reading."""

    def __init__(self, start: int = 1_700_000_000_000_000_000, step: int = 1_000_000_000) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        database_url=str(tmp_path / "registry.db"),
        secret_key=TEST_SECRET,
        allow_anonymous=False,
        max_field_length=256,
        pet_record_max_bytes=4096,
        found_report_max_bytes=2048,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def database(app_settings):
    db = open_database(app_settings.database_url)
    yield db
    db.close()


@pytest.fixture
def registry(database, app_settings, clock):
    return PetRegistryService.from_database(database, app_settings, clock=clock)


@pytest.fixture
def client(app_settings, clock):
    app = create_app(app_settings, clock=clock)
    with TestClient(app) as test_client:
        yield test_client


def auth_header(subject: str) -> dict:
    """Authorization header for ``subject`` signed with the test secret."""
    token = create_access_token({"sub": subject}, secret_key=TEST_SECRET)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth():
    return auth_header
