"""Test configuration and fixtures."""

from __future__ import annotations

from typing import Any

import pytest
from joserfc.jwk import RSAKey

from platform_admin_auth import SessionState

from .fakes import HOST, FakeTransport


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests that require external services",
    )


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def state() -> SessionState:
    return SessionState(host=HOST, username="admin", password="secret123")


@pytest.fixture(scope="session")
def rsa_key() -> RSAKey:
    return RSAKey.generate_key(2048)


@pytest.fixture
def service_account_jwk(rsa_key: RSAKey) -> dict[str, Any]:
    return dict(rsa_key.as_dict(private=True))


@pytest.fixture
def service_account_state(service_account_jwk: dict[str, Any]) -> SessionState:
    return SessionState(
        host=HOST,
        service_account_id="sa-1234",
        service_account_jwk=service_account_jwk,
    )
