"""Conformance test suite for registry-gate.

Run: pytest --pyargs registry_gate.conformance
"""
from registry_gate.conformance.loader import (
    FixtureCase,
    ProposalScenario,
    load_fixtures,
    load_scenarios,
)
from registry_gate.conformance.pytest_helpers import (
    assert_payload_conforms,
    assert_payload_fails,
    assert_scenario_verdict,
)
from registry_gate.conformance.validators import (
    ConformanceResult,
    ModelViolation,
    SchemaViolation,
    validate_payload,
)

__all__ = [
    "ConformanceResult",
    "FixtureCase",
    "ModelViolation",
    "ProposalScenario",
    "SchemaViolation",
    "assert_payload_conforms",
    "assert_payload_fails",
    "assert_scenario_verdict",
    "load_fixtures",
    "load_scenarios",
    "validate_payload",
]
