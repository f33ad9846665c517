"""Registry record contracts.

A registry record is one JSON object stored at ``<registry_dir>/<key><extension>``.
Ownership lives inside the record itself: ``owner.username`` is the only
identity allowed to transfer or delete the record, ``maintainers`` lists
identities delegated to edit it.
"""
from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, FrozenSet, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from registry_gate.config import GateConfig

# DNS label: lowercase alphanumerics and inner hyphens, 1-63 chars
KEY_PATTERN = r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$"
# GitHub login: alphanumerics and hyphens, 1-39 chars, no leading/trailing hyphen
USERNAME_PATTERN = r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,37}[A-Za-z0-9])?$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
HOSTNAME_PATTERN = r"^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}\.?$"

_KEY_RE = re.compile(KEY_PATTERN)

MAX_MAINTAINERS = 10
MAX_NAMESERVERS = 8

Username = Annotated[str, Field(pattern=USERNAME_PATTERN)]
Hostname = Annotated[str, Field(pattern=HOSTNAME_PATTERN)]


class RecordStatus(str, Enum):
    """Lifecycle status of a registered name."""

    ACTIVE = "active"
    PARKED = "parked"
    DEPRECATED = "deprecated"


class OwnerContact(BaseModel):
    """Owner identity and contact address of a record."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    username: Username = Field(..., description="Hosting platform login of the owner")
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Owner contact address")


class RegistryRecord(BaseModel):
    """A registry entry as submitted in a proposal.

    Unknown top-level fields are tolerated by the model and surfaced as
    warnings by the rule validator.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: Optional[str] = Field(
        None,
        pattern=KEY_PATTERN,
        description="Registered name; must equal the file stem when present",
    )
    owner: OwnerContact = Field(..., description="Owner of the record")
    maintainers: List[Username] = Field(
        default_factory=list,
        max_length=MAX_MAINTAINERS,
        description="Identities delegated to modify the record",
    )
    status: RecordStatus = Field(..., description="Lifecycle status")
    description: Optional[str] = Field(
        None, min_length=1, max_length=280, description="Free-form description"
    )
    nameservers: List[Hostname] = Field(
        default_factory=list,
        max_length=MAX_NAMESERVERS,
        description="Authoritative nameservers",
    )
    parent: Optional[str] = Field(
        None,
        pattern=KEY_PATTERN,
        description="Key of the record this entry is delegated from",
    )

    @property
    def unknown_fields(self) -> Tuple[str, ...]:
        return tuple(sorted(self.model_extra or {}))


@dataclass(frozen=True)
class PriorRecord:
    """Lenient projection of a record as it exists before the proposal."""

    path: str
    key: str
    owner: Optional[str]
    maintainers: FrozenSet[str]
    parent: Optional[str]

    @classmethod
    def from_payload(cls, path: str, payload: Mapping[str, Any]) -> "PriorRecord":
        owner_block = payload.get("owner")
        owner = owner_block.get("username") if isinstance(owner_block, Mapping) else None
        raw_maintainers = payload.get("maintainers")
        maintainers = frozenset(
            normalize_identity(m)
            for m in (raw_maintainers if isinstance(raw_maintainers, list) else [])
            if isinstance(m, str) and m
        )
        name = payload.get("name")
        parent = payload.get("parent")
        return cls(
            path=path,
            key=name if isinstance(name, str) and name else path_key(path),
            owner=normalize_identity(owner) if isinstance(owner, str) and owner else None,
            maintainers=maintainers,
            parent=parent if isinstance(parent, str) and parent else None,
        )


def normalize_identity(identity: str) -> str:
    """Hosting platform logins compare case-insensitively."""
    return identity.strip().casefold()


def path_key(path: str) -> str:
    """Derive the record key (file stem) from a registry path."""
    stem, _ext = posixpath.splitext(posixpath.basename(path))
    return stem


def is_valid_key(key: str) -> bool:
    return bool(_KEY_RE.fullmatch(key))


def is_registry_path(path: Optional[str], config: GateConfig) -> bool:
    """True for direct children of the registry directory with its extension."""
    if not path:
        return False
    directory, basename = posixpath.split(path)
    stem, ext = posixpath.splitext(basename)
    return directory == config.registry_dir and ext == config.extension and bool(stem)


def declared_key(path: str, payload: Mapping[str, Any]) -> str:
    """Key a record claims: its ``name`` when present, else the path key."""
    name = payload.get("name")
    if isinstance(name, str) and name:
        return name
    return path_key(path)
