"""
registry-gate: admission control for pull requests against a JSON record registry.

Each registry record is one JSON file (``whois/<key>.json``) that names its
own owner. The engine decides, deterministically and without a central ACL,
whether a proposed change set is admissible, and the feedback reconciler
keeps exactly one verdict comment and one commit status on the proposal.

Example:
    >>> from registry_gate import ChangedFile, ProposalContext, RegistrySnapshot, validate_proposal
    >>> context = ProposalContext(
    ...     submitter="alice",
    ...     proposal_number=1,
    ...     changed_files=(ChangedFile(path="README.md", change_kind="modified", new_content=""),),
    ... )
    >>> validate_proposal(context, RegistrySnapshot({})).is_valid
    True

Result artifact:
    ``registry-gate validate`` writes ``validation-result.json`` with the keys
    ``isValid``, ``errors`` (``{file, code, message, severity}``) and
    ``report``. The orchestrator posts ``report`` as the canonical comment,
    maps the verdict onto the ``validate-pr`` commit status, and fails the
    job exactly when ``isValid`` is false or the artifact cannot be read.
"""

__version__ = "1.0.0"

# Core data models
from registry_gate.models import (
    ChangedFile,
    ChangeKind,
    ErrorCode,
    ProposalContext,
    Severity,
    ValidationError,
    ValidationResult,
    RegistryGateError,
    SnapshotError,
    ArtifactError,
    ConfigError,
)

# Configuration
from registry_gate.config import DEFAULT_RESERVED_KEYS, GateConfig

# Record schema
from registry_gate.record import (
    KEY_PATTERN,
    OwnerContact,
    PriorRecord,
    RecordStatus,
    RegistryRecord,
    is_registry_path,
    is_valid_key,
    normalize_identity,
    path_key,
)

# Prior registry state
from registry_gate.snapshot import RegistrySnapshot

# Pipeline stages
from registry_gate.diff_filter import filter_changed_files
from registry_gate.loader import LoadOutcome, RecordParseError, load_changed_file, parse_record_json
from registry_gate.rules import check_cross_record, check_structure
from registry_gate.authorization import check_authorization
from registry_gate.aggregate import (
    REPORT_MARKER,
    build_result,
    internal_error_result,
    merge_outcomes,
    no_changes_result,
    render_report,
)
from registry_gate.engine import validate_file, validate_proposal

# Result artifact
from registry_gate.artifact import (
    DEFAULT_ARTIFACT_NAME,
    exit_code_for,
    load_result_artifact,
    read_result_artifact,
    result_to_json,
    write_result_artifact,
)

# Feedback reconciliation
from registry_gate.feedback import (
    CommitState,
    CommitStatusPayload,
    FeedbackSurface,
    InMemoryFeedbackSurface,
    Marker,
    MarkerNotFoundError,
    MarkerState,
    ReconcileOutcome,
    ReconcilePlan,
    apply_plan,
    is_canonical_marker,
    map_commit_status,
    plan_reconciliation,
    reconcile_feedback,
)

__all__ = [
    "__version__",
    # Core data models
    "ChangedFile",
    "ChangeKind",
    "ErrorCode",
    "ProposalContext",
    "Severity",
    "ValidationError",
    "ValidationResult",
    "RegistryGateError",
    "SnapshotError",
    "ArtifactError",
    "ConfigError",
    # Configuration
    "DEFAULT_RESERVED_KEYS",
    "GateConfig",
    # Record schema
    "KEY_PATTERN",
    "OwnerContact",
    "PriorRecord",
    "RecordStatus",
    "RegistryRecord",
    "is_registry_path",
    "is_valid_key",
    "normalize_identity",
    "path_key",
    # Prior registry state
    "RegistrySnapshot",
    # Pipeline stages
    "filter_changed_files",
    "LoadOutcome",
    "RecordParseError",
    "load_changed_file",
    "parse_record_json",
    "check_cross_record",
    "check_structure",
    "check_authorization",
    "REPORT_MARKER",
    "build_result",
    "internal_error_result",
    "merge_outcomes",
    "no_changes_result",
    "render_report",
    "validate_file",
    "validate_proposal",
    # Result artifact
    "DEFAULT_ARTIFACT_NAME",
    "exit_code_for",
    "load_result_artifact",
    "read_result_artifact",
    "result_to_json",
    "write_result_artifact",
    # Feedback reconciliation
    "CommitState",
    "CommitStatusPayload",
    "FeedbackSurface",
    "InMemoryFeedbackSurface",
    "Marker",
    "MarkerNotFoundError",
    "MarkerState",
    "ReconcileOutcome",
    "ReconcilePlan",
    "apply_plan",
    "is_canonical_marker",
    "map_commit_status",
    "plan_reconciliation",
    "reconcile_feedback",
]
