"""Read-only view of the registry as it exists before a proposal."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from registry_gate.config import GateConfig
from registry_gate.loader import RecordParseError, parse_record_json
from registry_gate.models import SnapshotError
from registry_gate.record import PriorRecord, is_registry_path

logger = logging.getLogger("registry_gate.snapshot")


class RegistrySnapshot:
    """Prior registry content keyed by repository-relative path.

    Records are parsed lazily and cached. Any unparseable record raises
    :class:`SnapshotError`: the gate cannot make authorization decisions
    against state it cannot read.
    """

    def __init__(
        self,
        files: Mapping[str, str],
        config: Optional[GateConfig] = None,
    ) -> None:
        self._config = config or GateConfig()
        self._files: Dict[str, str] = {
            path: content
            for path, content in files.items()
            if is_registry_path(path, self._config)
        }
        self._cache: Dict[str, PriorRecord] = {}

    @classmethod
    def from_directory(
        cls, root: Path, config: Optional[GateConfig] = None
    ) -> "RegistrySnapshot":
        """Load every record under ``root/<registry_dir>``.

        Raises:
            SnapshotError: If a record file cannot be read.
        """
        config = config or GateConfig()
        registry_root = Path(root) / config.registry_dir
        files: Dict[str, str] = {}
        if not registry_root.is_dir():
            logger.warning("Registry directory %s does not exist; snapshot is empty", registry_root)
            return cls(files, config)
        for entry in sorted(registry_root.glob(f"*{config.extension}")):
            if not entry.is_file():
                continue
            rel = f"{config.registry_dir}/{entry.name}"
            try:
                files[rel] = entry.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise SnapshotError(f"Cannot read registry record {rel}: {exc}") from exc
        logger.info("Loaded registry snapshot with %d records", len(files))
        return cls(files, config)

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(sorted(self._files))

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __len__(self) -> int:
        return len(self._files)

    def prior(self, path: str) -> Optional[PriorRecord]:
        """Return the pre-change record at ``path``, or None if absent.

        Raises:
            SnapshotError: If the stored content is not a parseable record.
        """
        if path not in self._files:
            return None
        cached = self._cache.get(path)
        if cached is not None:
            return cached
        try:
            payload = parse_record_json(self._files[path])
        except RecordParseError as exc:
            raise SnapshotError(f"Existing record {path} is unreadable: {exc}") from exc
        record = PriorRecord.from_payload(path, payload)
        self._cache[path] = record
        return record

    def records(self) -> Tuple[PriorRecord, ...]:
        records = []
        for path in self.paths:
            record = self.prior(path)
            if record is not None:
                records.append(record)
        return tuple(records)

    def key_index(self) -> Dict[str, str]:
        """Map each existing key to the path that holds it.

        Pre-existing collisions are logged and resolved to the first path
        in sorted order.
        """
        index: Dict[str, str] = {}
        for record in self.records():
            holder = index.get(record.key)
            if holder is not None:
                logger.warning(
                    "Existing records %s and %s share key %r", holder, record.path, record.key
                )
                continue
            index[record.key] = record.path
        return index
