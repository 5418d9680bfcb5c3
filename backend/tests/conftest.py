"""Pytest configuration and fixtures."""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from grinfood.core.config import Settings
from grinfood.core.rbac import Principal, Role
from grinfood.core.security import Subject
from grinfood.db.memory import MemoryDocumentStore
from grinfood.main import create_app
from grinfood.services.container import Services, assemble_services

from tests.fakes import (
    FakeIdentityProvider,
    FakePaymentGateway,
    FakeSmsVerifier,
    FrozenClock,
    RecordingEmailSender,
    seed,
)

MANAGER_UID = "manager-1"
USER_UID = "user-1"
OTHER_UID = "user-2"


def make_settings(**overrides) -> Settings:
    values = dict(
        debug=True,
        document_store="memory",
        rate_limit_enabled=False,
        read_retry_base_delay=0.0,
        sendgrid_api_key="test",
        sendgrid_from_email="noreply@grinfood.ua",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def principal(uid: str, role: Role = Role.USER) -> Principal:
    return Principal(subject=Subject(id=uid, email=f"{uid}@grinfood.ua"), role=role)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    provider = FakeIdentityProvider()
    provider.add_user(MANAGER_UID, "manager@grinfood.ua", "Manager", token="manager-token")
    provider.add_user(USER_UID, "user@grinfood.ua", "Olena", token="user-token")
    provider.add_user(OTHER_UID, "other@grinfood.ua", None, token="other-token")
    return provider


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def services(settings, store, identity, email_sender, clock) -> Services:
    seed(store, "roles", MANAGER_UID, {"role": "manager"})
    seed(store, "roles", USER_UID, {"role": "user"})
    return assemble_services(
        settings,
        store=store,
        identity=identity,
        payments=FakePaymentGateway(),
        sms=FakeSmsVerifier(),
        email_sender=email_sender,
        clock=clock,
    )


@pytest.fixture
def manager() -> Principal:
    return principal(MANAGER_UID, Role.MANAGER)


@pytest.fixture
def customer() -> Principal:
    return principal(USER_UID)


@pytest.fixture
def client(services: Services) -> Generator[TestClient, None, None]:
    """Create a test client on an app wired to the fake collaborators."""
    # Disable rate limiters during tests to avoid flaky failures
    from grinfood.core.rate_limit import limiter

    limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    with TestClient(create_app(services), raise_server_exceptions=False) as test_client:
        yield test_client
    limiter.enabled = True


@pytest.fixture
def manager_headers() -> dict:
    return {"Authorization": "Bearer manager-token"}


@pytest.fixture
def user_headers() -> dict:
    return {"Authorization": "Bearer user-token"}


@pytest.fixture
def other_headers() -> dict:
    return {"Authorization": "Bearer other-token"}
