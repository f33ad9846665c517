"""Shared pytest fixtures for all tests."""
import json
from typing import Any, Dict

import pytest

from registry_gate import GateConfig, RegistrySnapshot


def _record(username: str = "alice", **overrides: Any) -> str:
    """Serialize a valid registry record owned by ``username``.

    Callers override specific fields as needed; passing ``None`` for a
    field removes it.
    """
    payload: Dict[str, Any] = {
        "owner": {"username": username, "email": f"{username.lower()}@example.com"},
        "status": "active",
    }
    payload.update(overrides)
    payload = {k: v for k, v in payload.items() if v is not None}
    return json.dumps(payload, indent=2) + "\n"


@pytest.fixture
def config() -> GateConfig:
    return GateConfig()


@pytest.fixture
def acme_snapshot() -> RegistrySnapshot:
    """Registry holding 'acme' (owner alice, maintainer carol) and 'globex' (owner dave)."""
    return RegistrySnapshot({
        "whois/acme.json": _record("alice", name="acme", maintainers=["carol"]),
        "whois/globex.json": _record("dave", parent="acme"),
    })
