"""Core data models for registry-gate."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ChangeKind(str, Enum):
    """How a proposal touches a file."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"


class Severity(str, Enum):
    """Only ERROR fails a validation run."""

    ERROR = "error"
    WARNING = "warning"


class ErrorCode(str, Enum):
    """Closed taxonomy of validation error codes."""

    PARSE_ERROR = "parse_error"
    MISSING_FIELD = "missing_field"
    INVALID_FORMAT = "invalid_format"
    DUPLICATE_KEY = "duplicate_key"
    RESERVED_KEY = "reserved_key"
    UNAUTHORIZED_CREATE = "unauthorized_create"
    UNAUTHORIZED_MODIFY = "unauthorized_modify"
    UNAUTHORIZED_DELETE = "unauthorized_delete"
    INTERNAL_ERROR = "internal_error"


class ChangedFile(BaseModel):
    """A single file touched by a proposal, with its resolved new content."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Repository-relative path after the change")
    change_kind: ChangeKind = Field(..., description="How the proposal touches the file")
    new_content: Optional[str] = Field(
        None, description="File content after the change (None when removed)"
    )
    previous_path: Optional[str] = Field(
        None, description="Path before the change (required for renamed files)"
    )

    @model_validator(mode="after")
    def _check_rename_source(self) -> "ChangedFile":
        if self.change_kind is ChangeKind.RENAMED and not self.previous_path:
            raise ValueError("change_kind='renamed' requires previous_path")
        return self


class ProposalContext(BaseModel):
    """Immutable input to a single validation run."""

    model_config = ConfigDict(frozen=True)

    submitter: str = Field(
        ..., min_length=1, description="Authenticated identity of the proposal author"
    )
    changed_files: Tuple[ChangedFile, ...] = Field(
        default=(), description="Files changed by the proposal, in platform order"
    )
    proposal_number: int = Field(..., gt=0, description="Pull request number")
    source_ref: str = Field("", description="Head branch of the proposal")
    head_sha: str = Field("", description="Head revision the commit status is keyed by")


class ValidationError(BaseModel):
    """One rule violation attributed to one file.

    Serialized as ``{file, code, message, severity}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_path: str = Field(..., alias="file")
    code: ErrorCode
    message: str = Field(..., min_length=1)
    severity: Severity = Severity.ERROR

    @property
    def is_blocking(self) -> bool:
        return self.severity is Severity.ERROR


class ValidationResult(BaseModel):
    """Verdict of one validation run. Never mutated after construction."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_valid: bool = Field(..., alias="isValid")
    errors: Tuple[ValidationError, ...] = ()
    report: str = ""

    @model_validator(mode="after")
    def _check_verdict_consistency(self) -> "ValidationResult":
        blocking = any(error.is_blocking for error in self.errors)
        if self.is_valid == blocking:
            raise ValueError(
                "isValid must be true exactly when no error-severity entry is present"
            )
        return self

    @property
    def blocking_errors(self) -> Tuple[ValidationError, ...]:
        return tuple(e for e in self.errors if e.is_blocking)

    @property
    def warnings(self) -> Tuple[ValidationError, ...]:
        return tuple(e for e in self.errors if not e.is_blocking)

    def to_artifact(self) -> Dict[str, Any]:
        """Serialize to the result artifact shape (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


# Custom Exceptions
class RegistryGateError(Exception):
    """Base exception for all library errors."""
    pass


class SnapshotError(RegistryGateError):
    """Existing registry state is unreadable or inconsistent."""
    pass


class ArtifactError(RegistryGateError):
    """Result artifact could not be read or parsed."""
    pass


class ConfigError(RegistryGateError):
    """Gate configuration is invalid."""
    pass
