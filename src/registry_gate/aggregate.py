"""Result Aggregator: merges per-file outcomes and renders the report."""
from __future__ import annotations

from itertools import groupby
from typing import Iterable, List, Sequence, Tuple

from registry_gate.models import ErrorCode, Severity, ValidationError, ValidationResult

REPORT_MARKER = "<!-- registry-gate:validation-report -->"
PASSED_BANNER = "PR Validation Passed"
FAILED_BANNER = "PR Validation Failed"

_SEVERITY_ICON = {
    Severity.ERROR: "❌",
    Severity.WARNING: "⚠️",
}


def merge_outcomes(
    outcomes: Iterable[Sequence[ValidationError]],
) -> Tuple[ValidationError, ...]:
    """Flatten per-file error groups into one deterministic sequence.

    Ordering is by file path; the sort is stable, so errors of one file
    keep the order in which they were discovered.
    """
    flat = [error for group in outcomes for error in group]
    return tuple(sorted(flat, key=lambda e: e.file_path))


def _banner(passed: bool) -> str:
    if passed:
        return f"## ✅ {PASSED_BANNER}"
    return f"## ❌ {FAILED_BANNER}"


def render_report(errors: Sequence[ValidationError], files_checked: int) -> str:
    """Render the fixed-format markdown report for a completed run."""
    blocking = sum(1 for e in errors if e.is_blocking)
    warnings = len(errors) - blocking
    lines: List[str] = [
        REPORT_MARKER,
        _banner(blocking == 0),
        "",
        f"Checked {files_checked} registry file(s): "
        f"{blocking} error(s), {warnings} warning(s).",
    ]
    for path, group in groupby(errors, key=lambda e: e.file_path):
        lines.append("")
        lines.append(f"### `{path}`")
        lines.append("")
        for error in group:
            lines.append(
                f"- {_SEVERITY_ICON[error.severity]} `{error.code.value}`: {error.message}"
            )
    return "\n".join(lines) + "\n"


def build_result(
    errors: Sequence[ValidationError],
    files_checked: int,
) -> ValidationResult:
    """Compute the verdict once, after every file has been processed."""
    ordered = merge_outcomes([errors])
    return ValidationResult(
        is_valid=not any(e.is_blocking for e in ordered),
        errors=ordered,
        report=render_report(ordered, files_checked),
    )


def no_changes_result() -> ValidationResult:
    """Passing result for a proposal that touches no registry record."""
    report = "\n".join([
        REPORT_MARKER,
        _banner(True),
        "",
        "No registry changes to validate.",
    ]) + "\n"
    return ValidationResult(is_valid=True, errors=(), report=report)


def internal_error_result(message: str, file_path: str = "") -> ValidationResult:
    """Conservative failing result for engine-level failures."""
    report = "\n".join([
        REPORT_MARKER,
        _banner(False),
        "",
        "Internal error occurred during validation.",
    ]) + "\n"
    return ValidationResult(
        is_valid=False,
        errors=(ValidationError(
            file_path=file_path,
            code=ErrorCode.INTERNAL_ERROR,
            message=message,
        ),),
        report=report,
    )
