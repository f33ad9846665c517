"""Authorization Checker: who may create, modify or delete which record.

Ownership is embedded in the records. Every decision about an existing
record is made against its *prior* version from the snapshot, never
against the content the proposal submits. The submitter identity is
assumed to be authenticated upstream.

Policy:
    added     submitter must be the new record's owner
    modified  submitter must be the prior owner or a prior maintainer;
              only the prior owner may change the owner
    removed   submitter must be the prior owner
    renamed   removal of the source plus addition of the target
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from registry_gate.models import ChangedFile, ChangeKind, ErrorCode, ValidationError
from registry_gate.record import PriorRecord, normalize_identity
from registry_gate.snapshot import RegistrySnapshot

logger = logging.getLogger("registry_gate.authorization")


def _new_owner(payload: Optional[Dict[str, Any]]) -> Optional[str]:
    if payload is None:
        return None
    owner = payload.get("owner")
    if not isinstance(owner, dict):
        return None
    username = owner.get("username")
    if not isinstance(username, str) or not username.strip():
        return None
    return normalize_identity(username)


def _check_create(
    path: str,
    payload: Optional[Dict[str, Any]],
    submitter: str,
) -> List[ValidationError]:
    owner = _new_owner(payload)
    if owner is None:
        # Unparseable or ownerless content is already a structural error.
        return []
    if owner != normalize_identity(submitter):
        return [ValidationError(
            file_path=path,
            code=ErrorCode.UNAUTHORIZED_CREATE,
            message=(
                f"new records must be owned by their submitter: "
                f"owner is {owner!r}, submitter is {submitter!r}"
            ),
        )]
    return []


def _check_modify(
    path: str,
    prior: PriorRecord,
    payload: Optional[Dict[str, Any]],
    submitter: str,
) -> List[ValidationError]:
    who = normalize_identity(submitter)
    if prior.owner is not None and who == prior.owner:
        return []
    if who in prior.maintainers:
        owner = _new_owner(payload)
        if owner is not None and owner != prior.owner:
            return [ValidationError(
                file_path=path,
                code=ErrorCode.UNAUTHORIZED_MODIFY,
                message=(
                    f"only the current owner {prior.owner!r} may transfer "
                    f"ownership of {prior.key!r}"
                ),
            )]
        return []
    if prior.owner is None:
        message = f"record {prior.key!r} has no owner and cannot be modified"
    else:
        message = (
            f"{submitter!r} is neither the owner ({prior.owner!r}) nor a "
            f"maintainer of {prior.key!r}"
        )
    return [ValidationError(
        file_path=path,
        code=ErrorCode.UNAUTHORIZED_MODIFY,
        message=message,
    )]


def _check_delete(path: str, prior: Optional[PriorRecord], submitter: str) -> List[ValidationError]:
    if prior is None:
        logger.warning("Removed file %s is not in the registry snapshot", path)
        return []
    if prior.owner is not None and normalize_identity(submitter) == prior.owner:
        return []
    return [ValidationError(
        file_path=path,
        code=ErrorCode.UNAUTHORIZED_DELETE,
        message=(
            f"only the owner ({prior.owner!r}) may delete {prior.key!r}; "
            f"submitter is {submitter!r}"
        ),
    )]


def _check_write(
    path: str,
    payload: Optional[Dict[str, Any]],
    snapshot: RegistrySnapshot,
    submitter: str,
) -> List[ValidationError]:
    prior = snapshot.prior(path)
    if prior is None:
        return _check_create(path, payload, submitter)
    return _check_modify(path, prior, payload, submitter)


def check_authorization(
    file: ChangedFile,
    payload: Optional[Dict[str, Any]],
    snapshot: RegistrySnapshot,
    submitter: str,
) -> Tuple[ValidationError, ...]:
    """Check that ``submitter`` may make the change ``file`` describes.

    An added file that already exists in the snapshot is checked as a
    modification, and a modified file missing from it as a creation, so
    a stale change kind can never bypass the owner check.

    Raises:
        SnapshotError: If a prior record needed for the decision is unreadable.
    """
    kind = file.change_kind
    if kind is ChangeKind.REMOVED:
        return tuple(_check_delete(file.path, snapshot.prior(file.path), submitter))

    if kind is ChangeKind.RENAMED and file.previous_path:
        errors = _check_delete(
            file.previous_path, snapshot.prior(file.previous_path), submitter
        )
        errors.extend(_check_write(file.path, payload, snapshot, submitter))
        return tuple(errors)

    if kind is ChangeKind.ADDED and file.path in snapshot:
        logger.warning("Added file %s already exists; checking as a modification", file.path)
    elif kind is ChangeKind.MODIFIED and file.path not in snapshot:
        logger.warning("Modified file %s is not in the registry snapshot; checking as a creation", file.path)
    return tuple(_check_write(file.path, payload, snapshot, submitter))
