"""Pytest configuration and fixtures for remote execution tests."""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from remote_execution import (  # noqa: E402
    Backend,
    BaseTransportAdapter,
    CredentialResolver,
    OperationDefinition,
    OperationRegistry,
    ParameterSpec,
)


class FakeAdapter(BaseTransportAdapter):
    """Adapter replaying scripted outcomes and recording every attempt.

    Each script item is either a raw outcome to return or an exception to
    raise. The last item repeats once the script runs out.
    """

    def __init__(self, backend, script):
        super().__init__()
        self.name = f"fake_{backend.value}"
        self.backend = backend
        self.script = list(script)
        self.calls = []

    async def execute(self, operation, timeout_seconds):
        self.calls.append((operation, timeout_seconds))
        item = self.script[min(len(self.calls) - 1, len(self.script) - 1)]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture(autouse=True)
def no_token_env(monkeypatch):
    """Keep a developer's real token out of every test."""
    monkeypatch.delenv("BNS_API_KEY", raising=False)


@pytest.fixture
def fake_adapter():
    """Factory for scripted adapters."""
    return FakeAdapter


@pytest.fixture
def resolver():
    """Fresh credential resolver with no session token."""
    return CredentialResolver()


@pytest.fixture
def recorded_sleeps():
    """Sleep replacement that records requested delays instead of waiting."""
    delays = []

    async def sleep(seconds):
        delays.append(seconds)

    return sleep, delays


@pytest.fixture
def http_definition():
    """REST operation with path, query and body parameters."""
    return OperationDefinition(
        name="update-thing",
        description="Update a thing",
        backend=Backend.HTTP,
        method="PUT",
        path="/things/{thing}",
        result="record",
        parameters=[
            ParameterSpec(name="thing", required=True, location="path"),
            ParameterSpec(name="verbose", type="boolean", location="query"),
            ParameterSpec(name="display_name", location="body", key="name"),
        ],
    )


@pytest.fixture
def cli_definition():
    """CLI operation with positional, flag and switch parameters."""
    return OperationDefinition(
        name="create-thing",
        description="Create a thing",
        backend=Backend.CLI,
        command=["things", "create"],
        parameters=[
            ParameterSpec(name="name", required=True, location="positional"),
            ParameterSpec(name="owner", location="flag"),
            ParameterSpec(name="is_secret", type="boolean", location="switch", key="secret"),
            ParameterSpec(name="labels", type="string_map", location="flag"),
            ParameterSpec(name="filter", type="text", location="flag", embeds_token=True),
        ],
    )


@pytest.fixture
def registry(http_definition, cli_definition):
    """Registry holding the two sample operations."""
    registry = OperationRegistry()
    registry.register(http_definition)
    registry.register(cli_definition)
    return registry
