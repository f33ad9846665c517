"""Reusable test helpers for registry-gate conformance testing.

Consumers can import these to write their own conformance assertions:
    from registry_gate.conformance.pytest_helpers import (
        assert_payload_conforms,
        assert_payload_fails,
        assert_scenario_verdict,
    )
"""
from __future__ import annotations

from typing import Any

from registry_gate.conformance.loader import ProposalScenario
from registry_gate.conformance.validators import (
    ConformanceResult,
    validate_payload,
)
from registry_gate.engine import validate_proposal
from registry_gate.models import ValidationResult


def assert_payload_conforms(payload: Any, kind: str) -> ConformanceResult:
    """Assert a payload conforms to the canonical contract."""
    result = validate_payload(payload, kind)
    if not result.valid:
        violations = []
        for mv in result.model_violations:
            violations.append(f"  Model: {mv.field}: {mv.message}")
        for sv in result.schema_violations:
            violations.append(f"  Schema: {sv.json_path}: {sv.message}")
        raise AssertionError(
            f"Payload for {kind!r} failed conformance:\n"
            + "\n".join(violations)
        )
    return result


def assert_payload_fails(payload: Any, kind: str) -> ConformanceResult:
    """Assert a payload DOES NOT conform (expected invalid)."""
    result = validate_payload(payload, kind)
    if result.valid:
        raise AssertionError(
            f"Payload for {kind!r} was expected to fail but passed conformance."
        )
    return result


def assert_scenario_verdict(scenario: ProposalScenario) -> ValidationResult:
    """Run the engine on a scenario and compare verdict and (file, code) pairs."""
    result = validate_proposal(scenario.context, scenario.snapshot())
    actual = tuple(
        (e.file_path, e.code.value) for e in result.errors if e.is_blocking
    )
    assert result.is_valid == scenario.expected_valid, (
        f"Scenario {scenario.id}: expected isValid={scenario.expected_valid}, "
        f"got {result.is_valid} with errors {actual}"
    )
    assert actual == scenario.expected_errors, (
        f"Scenario {scenario.id}: expected errors {scenario.expected_errors}, "
        f"got {actual}"
    )
    return result
