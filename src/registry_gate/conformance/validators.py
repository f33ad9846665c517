"""Dual-layer validation for registry-gate contracts.

This module provides conformance validation combining:
1. Pydantic model validation (the layer the engine itself uses)
2. JSON Schema validation against the committed schema artifacts

External tooling (editors, other CI systems) only sees the JSON Schemas;
running both layers over the same payloads keeps the two in agreement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple, Type, Union

from jsonschema import Draft202012Validator
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from registry_gate.models import ValidationResult
from registry_gate.record import RegistryRecord
from registry_gate.schemas import schema_for_kind


@dataclass(frozen=True)
class ModelViolation:
    """A violation detected by Pydantic model validation."""

    field: str
    message: str
    violation_type: str
    input_value: object


@dataclass(frozen=True)
class SchemaViolation:
    """A violation detected by JSON Schema validation."""

    json_path: str
    message: str
    validator: str
    validator_value: object
    schema_path: Tuple[Union[str, int], ...]


@dataclass(frozen=True)
class ConformanceResult:
    """Result of dual-layer conformance validation."""

    valid: bool
    model_violations: Tuple[ModelViolation, ...]
    schema_violations: Tuple[SchemaViolation, ...]
    kind: str


# Contract kind to Pydantic model mapping
_KIND_TO_MODEL: Dict[str, Type[BaseModel]] = {
    "RegistryRecord": RegistryRecord,
    "ValidationResult": ValidationResult,
}


def _validate_with_model(
    payload: Any,
    model_class: Type[BaseModel],
) -> Tuple[ModelViolation, ...]:
    try:
        model_class.model_validate(payload)
        return ()
    except PydanticValidationError as e:
        violations = []
        for error in e.errors():
            field_path = ".".join(str(loc) for loc in error["loc"])
            violations.append(
                ModelViolation(
                    field=field_path,
                    message=error["msg"],
                    violation_type=error["type"],
                    input_value=error.get("input"),
                )
            )
        return tuple(violations)


def _validate_with_schema(payload: Any, kind: str) -> Tuple[SchemaViolation, ...]:
    validator = Draft202012Validator(schema_for_kind(kind))
    errors = sorted(validator.iter_errors(payload), key=lambda e: list(e.absolute_path))

    violations = []
    for error in errors:
        json_path = "$" + "".join(
            f"[{p}]" if isinstance(p, int) else f".{p}" for p in error.absolute_path
        )
        violations.append(
            SchemaViolation(
                json_path=json_path,
                message=error.message,
                validator=str(error.validator),
                validator_value=error.validator_value,
                schema_path=tuple(error.absolute_schema_path),
            )
        )
    return tuple(violations)


def validate_payload(payload: Any, kind: str) -> ConformanceResult:
    """Validate a payload against its contract.

    Args:
        payload: The decoded JSON payload to validate.
        kind: ``"RegistryRecord"`` or ``"ValidationResult"``.

    Returns:
        ConformanceResult with validation status and any violations found.
        ``valid`` requires both layers to accept the payload.

    Raises:
        ValueError: If kind is not recognized.
    """
    if kind not in _KIND_TO_MODEL:
        raise ValueError(
            f"Unknown contract kind: {kind!r}. "
            f"Known kinds: {list(_KIND_TO_MODEL.keys())}"
        )

    model_violations = _validate_with_model(payload, _KIND_TO_MODEL[kind])
    schema_violations = _validate_with_schema(payload, kind)

    return ConformanceResult(
        valid=not model_violations and not schema_violations,
        model_violations=model_violations,
        schema_violations=schema_violations,
        kind=kind,
    )
