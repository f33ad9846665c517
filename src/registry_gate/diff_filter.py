"""Diff Filter: selects the registry records a proposal touches."""
from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from registry_gate.config import GateConfig
from registry_gate.models import ChangedFile, ChangeKind
from registry_gate.record import is_registry_path

logger = logging.getLogger("registry_gate.diff_filter")


def _scoped(file: ChangedFile, config: GateConfig) -> List[ChangedFile]:
    in_scope = is_registry_path(file.path, config)
    if file.change_kind is not ChangeKind.RENAMED:
        return [file] if in_scope else []

    source = file.previous_path
    source_in_scope = source is not None and is_registry_path(source, config)
    if in_scope and source_in_scope:
        return [file]
    if in_scope:
        # Moved into the registry from elsewhere: a creation.
        return [file.model_copy(update={
            "change_kind": ChangeKind.ADDED,
            "previous_path": None,
        })]
    if source is not None and source_in_scope:
        # Moved out of the registry: a deletion of the source record.
        return [ChangedFile(path=source, change_kind=ChangeKind.REMOVED)]
    return []


def filter_changed_files(
    files: Iterable[ChangedFile],
    config: GateConfig,
) -> Tuple[ChangedFile, ...]:
    """Return the in-scope changes, sorted by path.

    Files outside the registry directory are ignored, never rejected.
    Renames crossing the registry boundary are reduced to the half that
    lies inside it.
    """
    selected: List[ChangedFile] = []
    ignored = 0
    for file in files:
        scoped = _scoped(file, config)
        if not scoped:
            ignored += 1
        selected.extend(scoped)
    if ignored:
        logger.info("Ignored %d changed file(s) outside %s/", ignored, config.registry_dir)
    return tuple(sorted(selected, key=lambda f: (f.path, f.change_kind.value)))
