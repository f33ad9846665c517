"""Record Loader: turns changed file content into raw record payloads."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from registry_gate.models import ChangedFile, ChangeKind, ErrorCode, ValidationError


class RecordParseError(ValueError):
    """Content is not a single JSON object."""
    pass


def _reject_duplicate_keys(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise RecordParseError(f"duplicate object key {key!r}")
        result[key] = value
    return result


def _reject_constant(name: str) -> Any:
    raise RecordParseError(f"non-standard JSON constant {name}")


def parse_record_json(content: str) -> Dict[str, Any]:
    """Parse record content into a mapping.

    Raises:
        RecordParseError: On malformed JSON, duplicate object keys,
            NaN/Infinity constants, or a non-object top level.
    """
    try:
        payload = json.loads(
            content,
            object_pairs_hook=_reject_duplicate_keys,
            parse_constant=_reject_constant,
        )
    except json.JSONDecodeError as exc:
        raise RecordParseError(
            f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}"
        ) from exc
    except RecursionError as exc:
        raise RecordParseError("JSON nesting is too deep") from exc
    except RecordParseError:
        raise
    except ValueError as exc:
        # e.g. integer literals beyond the interpreter's digit limit
        raise RecordParseError(f"invalid JSON value: {exc}") from exc
    if not isinstance(payload, dict):
        raise RecordParseError(
            f"top-level value must be an object, got {type(payload).__name__}"
        )
    return payload


@dataclass(frozen=True)
class LoadOutcome:
    """Result of loading one in-scope changed file.

    ``payload`` is None for removed files and for files that failed to parse;
    in the latter case ``errors`` holds the parse error.
    """

    file: ChangedFile
    payload: Optional[Dict[str, Any]]
    errors: Tuple[ValidationError, ...] = ()

    @property
    def parsed(self) -> bool:
        return self.payload is not None


def load_changed_file(file: ChangedFile) -> LoadOutcome:
    """Parse a changed file's new content.

    Removed files are passed through unparsed; they only matter to the
    authorization checker.
    """
    if file.change_kind is ChangeKind.REMOVED:
        return LoadOutcome(file=file, payload=None)

    if file.new_content is None:
        return LoadOutcome(
            file=file,
            payload=None,
            errors=(ValidationError(
                file_path=file.path,
                code=ErrorCode.PARSE_ERROR,
                message="file content is unavailable",
            ),),
        )

    try:
        payload = parse_record_json(file.new_content)
    except RecordParseError as exc:
        return LoadOutcome(
            file=file,
            payload=None,
            errors=(ValidationError(
                file_path=file.path,
                code=ErrorCode.PARSE_ERROR,
                message=str(exc),
            ),),
        )
    return LoadOutcome(file=file, payload=payload)
