"""Conformance test suite for registry-gate.

Run: pytest --pyargs registry_gate.conformance
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest

from registry_gate.conformance.loader import load_fixtures, load_scenarios
from registry_gate.conformance.pytest_helpers import (
    assert_payload_conforms,
    assert_payload_fails,
    assert_scenario_verdict,
)
from registry_gate.schemas import list_schemas, load_schema

_PAYLOAD_CASES = load_fixtures("records") + load_fixtures("results")
_SCENARIOS = load_scenarios()


# --- Payload fixture conformance tests ---


@pytest.mark.parametrize("case", _PAYLOAD_CASES, ids=[c.id for c in _PAYLOAD_CASES])
def test_fixture_conformance(case: Any) -> None:
    """Both validation layers accept valid fixtures; at least one rejects invalid ones."""
    if case.expected_valid:
        assert_payload_conforms(case.payload, case.kind)
    else:
        assert_payload_fails(case.payload, case.kind)


# --- Proposal scenario tests ---


@pytest.mark.parametrize("scenario", _SCENARIOS, ids=[s.id for s in _SCENARIOS])
def test_scenario_verdict(scenario: Any) -> None:
    assert_scenario_verdict(scenario)


# --- Manifest integrity tests ---


def test_manifest_paths_exist(manifest: Dict[str, Any], fixtures_dir: Path) -> None:
    for entry in manifest["fixtures"]:
        assert (fixtures_dir / entry["path"]).is_file(), entry["id"]


def test_manifest_ids_unique(manifest: Dict[str, Any]) -> None:
    ids = [entry["id"] for entry in manifest["fixtures"]]
    assert len(ids) == len(set(ids))


# --- Schema integrity tests ---


def test_all_schemas_present() -> None:
    assert list_schemas() == ["record", "validation_result"]


@pytest.mark.parametrize("name", list_schemas())
def test_schema_is_valid_json_schema(name: str) -> None:
    """Each schema file is a valid JSON Schema document."""
    from jsonschema import Draft202012Validator

    schema = load_schema(name)
    assert "$schema" in schema
    assert "$id" in schema
    Draft202012Validator.check_schema(schema)
