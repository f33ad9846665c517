"""Result artifact exchanged between the engine and the orchestrator."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

from pydantic import ValidationError as PydanticValidationError

from registry_gate.aggregate import internal_error_result
from registry_gate.models import ArtifactError, ValidationResult

logger = logging.getLogger("registry_gate.artifact")

DEFAULT_ARTIFACT_NAME = "validation-result.json"


def result_to_json(result: ValidationResult) -> str:
    """Serialize a result to deterministic JSON with a trailing newline."""
    return json.dumps(result.to_artifact(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def write_result_artifact(result: ValidationResult, path: Union[str, Path]) -> Path:
    target = Path(path)
    target.write_text(result_to_json(result), encoding="utf-8")
    logger.info("Wrote validation result to %s (valid=%s)", target, result.is_valid)
    return target


def read_result_artifact(path: Union[str, Path]) -> ValidationResult:
    """Read and parse a result artifact.

    Raises:
        ArtifactError: If the file is missing, unreadable or malformed.
    """
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ArtifactError(f"Cannot read validation result {source}: {exc}") from exc
    try:
        return ValidationResult.model_validate_json(text)
    except PydanticValidationError as exc:
        raise ArtifactError(f"Malformed validation result {source}: {exc}") from exc


def load_result_artifact(path: Union[str, Path]) -> ValidationResult:
    """Read a result artifact, failing closed.

    A missing or malformed artifact yields a failing ``internal_error``
    result instead of being skipped.
    """
    try:
        return read_result_artifact(path)
    except ArtifactError as exc:
        logger.error("%s", exc)
        return internal_error_result("Failed to read validation results")


def exit_code_for(result: ValidationResult) -> int:
    """Non-zero exactly when the proposal is not admissible."""
    return 0 if result.is_valid else 1
