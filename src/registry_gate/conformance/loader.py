"""Canonical fixture loading for registry-gate conformance testing.

Provides FixtureCase and ProposalScenario (frozen dataclasses) plus loaders
for data-driven conformance tests. Reads from the bundled manifest.json and
fixture JSON files.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

from registry_gate.models import ChangedFile, ProposalContext
from registry_gate.snapshot import RegistrySnapshot

_FIXTURES_DIR = Path(__file__).parent / "fixtures"
_MANIFEST_PATH = _FIXTURES_DIR / "manifest.json"

_VALID_CATEGORIES = frozenset({"records", "results", "proposals"})

_SCENARIO_KIND = "ProposalScenario"


@dataclass(frozen=True)
class FixtureCase:
    """A single payload fixture loaded from the manifest."""

    id: str
    payload: Any
    expected_valid: bool
    kind: str
    notes: str


@dataclass(frozen=True)
class ProposalScenario:
    """An end-to-end engine case: proposal, prior registry, expected errors."""

    id: str
    context: ProposalContext
    snapshot_files: Dict[str, str]
    expected_valid: bool
    expected_errors: Tuple[Tuple[str, str], ...]
    notes: str

    def snapshot(self) -> RegistrySnapshot:
        return RegistrySnapshot(self.snapshot_files)


def _read_manifest() -> List[Dict[str, Any]]:
    with open(_MANIFEST_PATH, "r", encoding="utf-8") as fh:
        manifest: Dict[str, Any] = json.load(fh)
    entries: List[Dict[str, Any]] = manifest["fixtures"]
    return entries


def _read_fixture(relative: str) -> Any:
    full_path = _FIXTURES_DIR / relative
    if not full_path.exists():
        raise FileNotFoundError(
            f"Fixture file referenced in manifest does not exist: {full_path}"
        )
    with open(full_path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def _as_content(value: Any) -> str:
    # Objects are stored inline for readability; strings are raw file content.
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2) + "\n"


def load_fixtures(category: str) -> List[FixtureCase]:
    """Load payload fixture cases for a category.

    Args:
        category: ``"records"``, ``"results"`` or ``"proposals"``.

    Raises:
        ValueError: If *category* is not one of the recognised categories.
        FileNotFoundError: If a referenced fixture file is missing.
    """
    if category not in _VALID_CATEGORIES:
        raise ValueError(
            f"Unknown fixture category: {category!r}. "
            f"Valid categories: {sorted(_VALID_CATEGORIES)}"
        )

    fixtures: List[FixtureCase] = []
    for entry in _read_manifest():
        fixture_path: str = entry["path"]
        if not fixture_path.startswith(category + "/"):
            continue
        fixtures.append(
            FixtureCase(
                id=entry["id"],
                payload=_read_fixture(fixture_path),
                expected_valid=entry["expected_result"] == "valid",
                kind=entry["kind"],
                notes=entry["notes"],
            )
        )
    return fixtures


def load_scenarios() -> List[ProposalScenario]:
    """Load every proposal scenario as engine-ready inputs."""
    scenarios: List[ProposalScenario] = []
    for case in load_fixtures("proposals"):
        if case.kind != _SCENARIO_KIND:
            raise ValueError(
                f"Fixture {case.id!r} under proposals/ has kind {case.kind!r}, "
                f"expected {_SCENARIO_KIND!r}"
            )
        data: Dict[str, Any] = case.payload
        changed = tuple(
            ChangedFile(
                path=item["path"],
                change_kind=item["change_kind"],
                new_content=(
                    _as_content(item["new_content"]) if "new_content" in item else None
                ),
                previous_path=item.get("previous_path"),
            )
            for item in data["changed_files"]
        )
        scenarios.append(
            ProposalScenario(
                id=case.id,
                context=ProposalContext(
                    submitter=data["submitter"],
                    changed_files=changed,
                    proposal_number=data["proposal_number"],
                ),
                snapshot_files={
                    path: _as_content(content)
                    for path, content in data["snapshot"].items()
                },
                expected_valid=case.expected_valid,
                expected_errors=tuple(
                    (file, code) for file, code in data["expected_errors"]
                ),
                notes=case.notes,
            )
        )
    return scenarios
