"""Rule Validator: structural and cross-record rules for registry records.

Structural rules look at one record in isolation. Cross-record rules look at
every in-scope record of the run together with the prior registry snapshot.
Neither ever raises for a rule violation; each violation becomes one
ValidationError and the remaining rules keep running.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from pydantic import ValidationError as PydanticValidationError

from registry_gate.config import GateConfig
from registry_gate.loader import LoadOutcome
from registry_gate.models import ChangeKind, ErrorCode, Severity, ValidationError
from registry_gate.record import (
    RegistryRecord,
    declared_key,
    is_valid_key,
    path_key,
)
from registry_gate.snapshot import RegistrySnapshot

# ---------------------------------------------------------------------------
# Structural rules
# ---------------------------------------------------------------------------


def _format_loc(loc: Tuple[Any, ...]) -> str:
    parts: List[str] = []
    for item in loc:
        if isinstance(item, int):
            parts.append(f"[{item}]")
        else:
            parts.append(f".{item}" if parts else str(item))
    return "".join(parts)


def _model_errors(path: str, payload: Mapping[str, Any]) -> Tuple[List[ValidationError], Optional[RegistryRecord]]:
    try:
        record = RegistryRecord.model_validate(payload)
    except PydanticValidationError as exc:
        errors: List[ValidationError] = []
        for error in exc.errors():
            field = _format_loc(tuple(error["loc"]))
            if error["type"] == "missing":
                errors.append(ValidationError(
                    file_path=path,
                    code=ErrorCode.MISSING_FIELD,
                    message=f"missing required field '{field}'",
                ))
            else:
                errors.append(ValidationError(
                    file_path=path,
                    code=ErrorCode.INVALID_FORMAT,
                    message=f"{field}: {error['msg']}",
                ))
        return errors, None
    return [], record


def check_structure(outcome: LoadOutcome) -> Tuple[ValidationError, ...]:
    """Apply per-record rules: file name, schema, and key/path consistency."""
    if outcome.payload is None:
        return ()
    path = outcome.file.path
    payload = outcome.payload
    key = path_key(path)
    errors: List[ValidationError] = []

    if not is_valid_key(key):
        errors.append(ValidationError(
            file_path=path,
            code=ErrorCode.INVALID_FORMAT,
            message=(
                f"file name {key!r} is not a valid key: use lowercase letters, "
                f"digits and inner hyphens (at most 63 characters)"
            ),
        ))

    model_errors, record = _model_errors(path, payload)
    errors.extend(model_errors)

    name = payload.get("name")
    if isinstance(name, str) and is_valid_key(name) and name != key:
        errors.append(ValidationError(
            file_path=path,
            code=ErrorCode.INVALID_FORMAT,
            message=f"name {name!r} does not match file name {key!r}",
        ))

    if record is not None:
        for field in record.unknown_fields:
            errors.append(ValidationError(
                file_path=path,
                code=ErrorCode.INVALID_FORMAT,
                message=f"unknown field {field!r} is ignored",
                severity=Severity.WARNING,
            ))

    return tuple(errors)


# ---------------------------------------------------------------------------
# Cross-record rules
# ---------------------------------------------------------------------------


def _replaced_paths(outcomes: Sequence[LoadOutcome]) -> Set[str]:
    paths: Set[str] = set()
    for outcome in outcomes:
        paths.add(outcome.file.path)
        if outcome.file.change_kind is ChangeKind.RENAMED and outcome.file.previous_path:
            paths.add(outcome.file.previous_path)
    return paths


def _prior_key(outcome: LoadOutcome, snapshot: RegistrySnapshot) -> Optional[str]:
    source = outcome.file.path
    if outcome.file.change_kind is ChangeKind.RENAMED and outcome.file.previous_path:
        source = outcome.file.previous_path
    prior = snapshot.prior(source)
    return prior.key if prior is not None else None


def check_cross_record(
    outcomes: Sequence[LoadOutcome],
    snapshot: RegistrySnapshot,
    config: GateConfig,
) -> Tuple[ValidationError, ...]:
    """Apply uniqueness, reserved-key and referential rules.

    Records claim keys in path order; the first claimant wins and every
    later one gets a ``duplicate_key`` error. Existing records that this
    proposal removes, or rewrites with parseable content, no longer hold
    their key.

    Raises:
        SnapshotError: If a prior record needed for the checks is unreadable.
    """
    replaced = _replaced_paths(outcomes)
    claimed: Dict[str, str] = {
        key: path
        for key, path in snapshot.key_index().items()
        if path not in replaced
    }
    errors: List[ValidationError] = []
    new_keys: Dict[str, str] = {}

    ordered = sorted(outcomes, key=lambda o: o.file.path)
    for outcome in ordered:
        if outcome.payload is None and outcome.file.change_kind is not ChangeKind.REMOVED:
            # Unparsed content keeps the key its prior record held.
            prior_key = _prior_key(outcome, snapshot)
            if prior_key is not None:
                claimed.setdefault(prior_key, outcome.file.path)

    for outcome in ordered:
        if outcome.payload is None:
            continue
        path = outcome.file.path
        key = declared_key(path, outcome.payload)
        if not is_valid_key(key):
            continue
        new_keys[path] = key

        if key in config.reserved_keys and key != _prior_key(outcome, snapshot):
            errors.append(ValidationError(
                file_path=path,
                code=ErrorCode.RESERVED_KEY,
                message=f"key {key!r} is reserved and cannot be registered",
            ))

        holder = claimed.get(key)
        if holder is not None:
            errors.append(ValidationError(
                file_path=path,
                code=ErrorCode.DUPLICATE_KEY,
                message=f"key {key!r} is already registered by {holder}",
            ))
        else:
            claimed[key] = path

    for outcome in ordered:
        if outcome.payload is None or outcome.file.path not in new_keys:
            continue
        parent = outcome.payload.get("parent")
        if not isinstance(parent, str) or not is_valid_key(parent):
            continue
        path = outcome.file.path
        if parent == new_keys[path]:
            errors.append(ValidationError(
                file_path=path,
                code=ErrorCode.INVALID_FORMAT,
                message="parent: a record cannot be its own parent",
            ))
        elif parent not in claimed:
            errors.append(ValidationError(
                file_path=path,
                code=ErrorCode.INVALID_FORMAT,
                message=f"parent: record {parent!r} does not exist in the registry",
            ))

    errors.extend(_dangling_references(ordered, snapshot, claimed, replaced))
    return tuple(errors)


def _dangling_references(
    ordered: Sequence[LoadOutcome],
    snapshot: RegistrySnapshot,
    claimed: Mapping[str, str],
    replaced: Set[str],
) -> List[ValidationError]:
    """Flag removals that would orphan surviving child records."""
    dropped: Dict[str, str] = {}
    for outcome in ordered:
        file = outcome.file
        if file.change_kind is ChangeKind.REMOVED:
            source = file.path
        elif file.change_kind is ChangeKind.RENAMED and file.previous_path:
            source = file.previous_path
        else:
            continue
        prior = snapshot.prior(source)
        if prior is not None and prior.key not in claimed:
            dropped[prior.key] = source

    errors: List[ValidationError] = []
    if not dropped:
        return errors
    for record in snapshot.records():
        if record.path in replaced or record.parent not in dropped:
            continue
        errors.append(ValidationError(
            file_path=dropped[record.parent],
            code=ErrorCode.INVALID_FORMAT,
            message=f"record {record.parent!r} is still the parent of {record.path}",
        ))
    return errors
