"""Feedback Reconciler: one canonical comment and one commit status per proposal.

Repeated runs converge: whatever markers a proposal carries, after one
reconciliation pass exactly one canonical comment remains and it holds the
latest report.

State machine over existing canonical markers:
    no-marker         -> create one
    one-marker        -> update it in place (skipped when unchanged)
    multiple-markers  -> update the most recently created one, then delete
                         the rest; the canonical marker is never deleted, so
                         an interrupted pass never leaves zero markers

Runs for the same proposal must be serialized by the orchestrator; this
module does not lock.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field
from ulid import ULID

from registry_gate.aggregate import FAILED_BANNER, PASSED_BANNER, REPORT_MARKER
from registry_gate.config import GateConfig
from registry_gate.models import RegistryGateError, ValidationResult

logger = logging.getLogger("registry_gate.feedback")


class MarkerState(str, Enum):
    NO_MARKER = "no-marker"
    ONE_MARKER = "one-marker"
    MULTIPLE_MARKERS = "multiple-markers"


class CommitState(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Marker:
    """A comment attached to a proposal."""

    marker_id: str
    body: str
    author: str
    created_at: datetime


class CommitStatusPayload(BaseModel):
    """Commit status entry keyed by the proposal's head revision."""

    model_config = ConfigDict(frozen=True)

    state: CommitState
    description: str = Field(..., min_length=1)
    context: str = Field(..., min_length=1)


@dataclass(frozen=True)
class ReconcilePlan:
    """What one reconciliation pass will do, computed without side effects."""

    state: MarkerState
    body: str
    canonical_id: Optional[str] = None
    needs_update: bool = False
    delete_ids: Tuple[str, ...] = ()

    @property
    def creates(self) -> bool:
        return self.canonical_id is None


@dataclass(frozen=True)
class ReconcileOutcome:
    plan: ReconcilePlan
    marker_id: str
    status: Optional[CommitStatusPayload]


class MarkerNotFoundError(RegistryGateError):
    """Raised by a feedback surface for an unknown marker id."""

    def __init__(self, marker_id: str) -> None:
        self.marker_id = marker_id
        super().__init__(f"Unknown marker: {marker_id!r}")


class FeedbackSurface(Protocol):
    """Comment and commit-status operations the orchestrator provides."""

    def list_comments(self, proposal_number: int) -> Sequence[Marker]: ...

    def create_comment(self, proposal_number: int, body: str) -> Marker: ...

    def update_comment(self, marker_id: str, body: str) -> Marker: ...

    def delete_comment(self, marker_id: str) -> None: ...

    def create_commit_status(self, sha: str, status: CommitStatusPayload) -> None: ...


def is_canonical_marker(marker: Marker, config: GateConfig) -> bool:
    """True for validation reports posted by the gate's bot identity.

    Reports from earlier releases carry only the banner, not the hidden
    marker, and are recognised too.
    """
    if marker.author != config.bot_login:
        return False
    return (
        REPORT_MARKER in marker.body
        or PASSED_BANNER in marker.body
        or FAILED_BANNER in marker.body
    )


def _marker_order(marker: Marker) -> Tuple[datetime, str]:
    return (marker.created_at, marker.marker_id)


def plan_reconciliation(
    comments: Iterable[Marker],
    body: str,
    config: Optional[GateConfig] = None,
) -> ReconcilePlan:
    """Decide create / update / prune for the given comments and new body."""
    config = config or GateConfig()
    markers = sorted(
        (c for c in comments if is_canonical_marker(c, config)),
        key=_marker_order,
    )
    if not markers:
        return ReconcilePlan(state=MarkerState.NO_MARKER, body=body)

    canonical = markers[-1]
    state = MarkerState.ONE_MARKER if len(markers) == 1 else MarkerState.MULTIPLE_MARKERS
    return ReconcilePlan(
        state=state,
        body=body,
        canonical_id=canonical.marker_id,
        needs_update=canonical.body != body,
        delete_ids=tuple(m.marker_id for m in markers[:-1]),
    )


def apply_plan(surface: FeedbackSurface, proposal_number: int, plan: ReconcilePlan) -> str:
    """Execute a plan against a surface and return the canonical marker id."""
    if plan.canonical_id is None:
        created = surface.create_comment(proposal_number, plan.body)
        logger.info("Created validation comment %s on #%d", created.marker_id, proposal_number)
        return created.marker_id

    if plan.needs_update:
        surface.update_comment(plan.canonical_id, plan.body)
        logger.info("Updated validation comment %s on #%d", plan.canonical_id, proposal_number)
    for marker_id in plan.delete_ids:
        surface.delete_comment(marker_id)
        logger.info("Deleted duplicate validation comment %s on #%d", marker_id, proposal_number)
    return plan.canonical_id


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def map_commit_status(
    result: ValidationResult,
    config: Optional[GateConfig] = None,
) -> CommitStatusPayload:
    """Map a verdict onto a commit status with a bounded description."""
    config = config or GateConfig()
    if result.is_valid:
        return CommitStatusPayload(
            state=CommitState.SUCCESS,
            description="All validation checks passed",
            context=config.status_context,
        )
    summary = ", ".join(
        f"{e.code.value} ({e.file_path})" if e.file_path else e.code.value
        for e in result.blocking_errors
    )
    return CommitStatusPayload(
        state=CommitState.FAILURE,
        description=_truncate(f"Validation failed: {summary}", config.status_description_limit),
        context=config.status_context,
    )


def reconcile_feedback(
    surface: FeedbackSurface,
    proposal_number: int,
    head_sha: str,
    result: ValidationResult,
    config: Optional[GateConfig] = None,
) -> ReconcileOutcome:
    """Bring the proposal's comment and commit status in line with ``result``."""
    config = config or GateConfig()
    plan = plan_reconciliation(surface.list_comments(proposal_number), result.report, config)
    logger.info("Feedback for #%d is in state %s", proposal_number, plan.state.value)
    marker_id = apply_plan(surface, proposal_number, plan)

    status: Optional[CommitStatusPayload] = None
    if head_sha:
        status = map_commit_status(result, config)
        surface.create_commit_status(head_sha, status)
    else:
        logger.warning("No head revision for #%d; commit status not set", proposal_number)
    return ReconcileOutcome(plan=plan, marker_id=marker_id, status=status)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class InMemoryFeedbackSurface:
    """Feedback surface held in memory, for tests and dry runs."""

    author: str = "github-actions[bot]"
    clock: Callable[[], datetime] = _utcnow
    comments: Dict[str, Tuple[int, Marker]] = field(default_factory=dict)
    statuses: Dict[str, List[CommitStatusPayload]] = field(default_factory=dict)
    operations: List[Tuple[str, str]] = field(default_factory=list)

    def seed(
        self,
        proposal_number: int,
        body: str,
        *,
        author: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Marker:
        """Insert a pre-existing comment without recording an operation."""
        marker = Marker(
            marker_id=str(ULID()),
            body=body,
            author=author or self.author,
            created_at=created_at or self.clock(),
        )
        self.comments[marker.marker_id] = (proposal_number, marker)
        return marker

    def list_comments(self, proposal_number: int) -> Sequence[Marker]:
        return [
            marker
            for number, marker in self.comments.values()
            if number == proposal_number
        ]

    def create_comment(self, proposal_number: int, body: str) -> Marker:
        marker = self.seed(proposal_number, body)
        self.operations.append(("create", marker.marker_id))
        return marker

    def update_comment(self, marker_id: str, body: str) -> Marker:
        if marker_id not in self.comments:
            raise MarkerNotFoundError(marker_id)
        number, marker = self.comments[marker_id]
        updated = Marker(
            marker_id=marker.marker_id,
            body=body,
            author=marker.author,
            created_at=marker.created_at,
        )
        self.comments[marker_id] = (number, updated)
        self.operations.append(("update", marker_id))
        return updated

    def delete_comment(self, marker_id: str) -> None:
        if marker_id not in self.comments:
            raise MarkerNotFoundError(marker_id)
        del self.comments[marker_id]
        self.operations.append(("delete", marker_id))

    def create_commit_status(self, sha: str, status: CommitStatusPayload) -> None:
        self.statuses.setdefault(sha, []).append(status)
        self.operations.append(("status", sha))

    def latest_status(self, sha: str) -> Optional[CommitStatusPayload]:
        entries = self.statuses.get(sha)
        return entries[-1] if entries else None
