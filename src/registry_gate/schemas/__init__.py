"""Committed JSON Schemas for registry-gate contracts.

Each contract kind validated by the conformance suite has one
``<name>.schema.json`` file in this package, and that file's ``$id`` is
``registry-gate/<name>``. The schemas are maintained by hand next to the
pydantic models in :mod:`registry_gate.record` and
:mod:`registry_gate.models`.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

_SCHEMA_DIR = Path(__file__).parent

SCHEMA_ID_PREFIX = "registry-gate/"

# Contract kind to committed schema name
SCHEMA_FOR_KIND: Dict[str, str] = {
    "RegistryRecord": "record",
    "ValidationResult": "validation_result",
}


def list_schemas() -> List[str]:
    """List the names of all committed schemas."""
    return sorted(
        p.name[: -len(".schema.json")] for p in _SCHEMA_DIR.glob("*.schema.json")
    )


def schema_path(name: str) -> Path:
    """Return the path of the committed schema called ``name``."""
    path = _SCHEMA_DIR / f"{name}.schema.json"
    if not path.is_file():
        raise FileNotFoundError(
            f"No committed schema named {name!r} (looked for {path.name}). "
            f"Known schemas: {', '.join(list_schemas())}"
        )
    return path


def load_schema(name: str) -> Dict[str, Any]:
    """Load a committed schema and check that its ``$id`` matches its name.

    Raises:
        FileNotFoundError: If no schema file exists for ``name``.
        ValueError: If the file declares a different ``$id``.
    """
    path = schema_path(name)
    schema: Dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    expected = SCHEMA_ID_PREFIX + name
    if schema.get("$id") != expected:
        raise ValueError(
            f"{path.name} declares $id {schema.get('$id')!r}, expected {expected!r}"
        )
    return schema


def schema_for_kind(kind: str) -> Dict[str, Any]:
    """Load the schema that validates payloads of contract ``kind``."""
    try:
        name = SCHEMA_FOR_KIND[kind]
    except KeyError:
        raise ValueError(
            f"No schema for contract kind {kind!r}. "
            f"Known kinds: {sorted(SCHEMA_FOR_KIND)}"
        ) from None
    return load_schema(name)
