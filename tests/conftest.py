"""Shared pytest fixtures for the Asana MCP tests.

Provides a recording stand-in for ``AsanaClient`` so the core can be
exercised without reaching the Asana API.
"""

from __future__ import annotations

import pytest
from starlette.testclient import TestClient

from asana_mcp.backend import create_asana_catalog
from asana_mcp.core import CapabilityCatalog, create_http_app

from tests.factories import TEST_VERSION, ClientRecorder, FakeAsanaClient


@pytest.fixture
def catalog() -> CapabilityCatalog:
    return create_asana_catalog()


@pytest.fixture
def recorder() -> ClientRecorder:
    return ClientRecorder()


@pytest.fixture
def fake_client() -> FakeAsanaClient:
    return FakeAsanaClient(
        "test-token",
        responses={"list_workspaces": [{"gid": "1", "name": "Acme"}]},
    )


@pytest.fixture
def make_http_client(catalog: CapabilityCatalog, recorder: ClientRecorder):
    """Build a TestClient for the HTTP façade with a given default token."""

    def _make(default_token: str | None = None) -> TestClient:
        app = create_http_app(
            catalog,
            client_factory=recorder,
            name="asana",
            version=TEST_VERSION,
            default_token=default_token,
        )
        return TestClient(app, raise_server_exceptions=False)

    return _make


@pytest.fixture
def http_client(make_http_client) -> TestClient:
    """HTTP façade with no default token."""
    return make_http_client(None)
