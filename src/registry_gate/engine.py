"""Record Validation Engine.

Pipeline: filter -> load -> per-file rules + authorization -> cross-record
rules -> merge -> freeze.

The engine is a pure function of (ProposalContext, RegistrySnapshot,
GateConfig): it performs no I/O and keeps no state between runs, so two
runs over identical input produce identical results.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from ulid import ULID

from registry_gate.aggregate import build_result, internal_error_result, no_changes_result
from registry_gate.authorization import check_authorization
from registry_gate.config import GateConfig
from registry_gate.diff_filter import filter_changed_files
from registry_gate.loader import LoadOutcome, load_changed_file
from registry_gate.models import ProposalContext, SnapshotError, ValidationError, ValidationResult
from registry_gate.rules import check_cross_record, check_structure
from registry_gate.snapshot import RegistrySnapshot

logger = logging.getLogger("registry_gate.engine")


def validate_file(
    outcome: LoadOutcome,
    snapshot: RegistrySnapshot,
    submitter: str,
) -> Tuple[ValidationError, ...]:
    """All single-file findings for one loaded change, in discovery order."""
    return (
        outcome.errors
        + check_structure(outcome)
        + check_authorization(outcome.file, outcome.payload, snapshot, submitter)
    )


def _run(
    context: ProposalContext,
    snapshot: RegistrySnapshot,
    config: GateConfig,
) -> ValidationResult:
    in_scope = filter_changed_files(context.changed_files, config)
    if not in_scope:
        return no_changes_result()

    outcomes = [load_changed_file(file) for file in in_scope]
    per_file = [validate_file(outcome, snapshot, context.submitter) for outcome in outcomes]
    cross_record = check_cross_record(outcomes, snapshot, config)
    return build_result(
        [error for group in per_file for error in group] + list(cross_record),
        files_checked=len(in_scope),
    )


def validate_proposal(
    context: ProposalContext,
    snapshot: RegistrySnapshot,
    config: Optional[GateConfig] = None,
) -> ValidationResult:
    """Decide whether a proposal's registry changes are admissible.

    This function NEVER raises. Rule violations are returned as errors;
    engine failures are converted into a failing ``internal_error``
    result, since a broken run must never read as a pass.

    Args:
        context: Proposal metadata and the changed files with new content.
        snapshot: Registry state before the proposal (read-only).
        config: Gate settings; defaults apply when omitted.

    Returns:
        The frozen ValidationResult for this run.
    """
    config = config or GateConfig()
    run_id = str(ULID())
    logger.info(
        "Validation run %s: proposal #%d by %s, %d changed file(s)",
        run_id,
        context.proposal_number,
        context.submitter,
        len(context.changed_files),
    )
    try:
        result = _run(context, snapshot, config)
    except SnapshotError as exc:
        logger.error("Validation run %s aborted: %s", run_id, exc)
        return internal_error_result(f"registry snapshot is unusable: {exc}")
    except Exception:
        logger.exception("Validation run %s failed unexpectedly", run_id)
        return internal_error_result("unexpected failure in the validation engine")

    logger.info(
        "Validation run %s finished: valid=%s, %d error(s), %d warning(s)",
        run_id,
        result.is_valid,
        len(result.blocking_errors),
        len(result.warnings),
    )
    return result
