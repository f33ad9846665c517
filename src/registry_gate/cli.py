"""Command-line entry point used by the CI orchestrator.

Commands:
    validate   build a ProposalContext from a pull-request file listing and
               two checkouts, run the engine, write the result artifact
    feedback   print the comment body and commit status for an artifact
    check      exit non-zero unless the artifact holds a passing verdict
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from registry_gate.aggregate import internal_error_result
from registry_gate.artifact import (
    DEFAULT_ARTIFACT_NAME,
    exit_code_for,
    load_result_artifact,
    write_result_artifact,
)
from registry_gate.config import GateConfig
from registry_gate.engine import validate_proposal
from registry_gate.feedback import map_commit_status
from registry_gate.models import (
    ChangedFile,
    ChangeKind,
    ConfigError,
    ProposalContext,
    RegistryGateError,
    SnapshotError,
)
from registry_gate.snapshot import RegistrySnapshot

logger = logging.getLogger("registry_gate.cli")

_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Pull-request file listing status -> change kind
_LISTING_STATUS: Mapping[str, ChangeKind] = {
    "added": ChangeKind.ADDED,
    "modified": ChangeKind.MODIFIED,
    "changed": ChangeKind.MODIFIED,
    "removed": ChangeKind.REMOVED,
    "renamed": ChangeKind.RENAMED,
    "copied": ChangeKind.ADDED,
}


class InputError(RegistryGateError):
    """Orchestrator-supplied input is missing or malformed."""
    pass


def _read_head_file(head_dir: Path, path: str) -> Optional[str]:
    root = head_dir.resolve()
    target = (root / path).resolve()
    if root != target and root not in target.parents:
        logger.warning("Refusing to read %s outside the head checkout", path)
        return None
    try:
        return target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read %s from head checkout: %s", path, exc)
        return None


def changed_files_from_listing(
    listing: Sequence[Mapping[str, Any]],
    head_dir: Path,
) -> Tuple[ChangedFile, ...]:
    """Convert a pull-request file listing into ChangedFile entries.

    Content of non-removed files is read from the head checkout; a file
    that cannot be read is passed on without content and fails parsing.

    Raises:
        InputError: If an entry lacks a filename.
    """
    files: List[ChangedFile] = []
    for entry in listing:
        path = entry.get("filename")
        if not isinstance(path, str) or not path:
            raise InputError(f"File listing entry without filename: {entry!r}")
        status = entry.get("status")
        kind = _LISTING_STATUS.get(status) if isinstance(status, str) else None
        if kind is None:
            logger.info("Skipping %s with listing status %r", path, status)
            continue
        previous = entry.get("previous_filename") if kind is ChangeKind.RENAMED else None
        content = None if kind is ChangeKind.REMOVED else _read_head_file(head_dir, path)
        files.append(ChangedFile(
            path=path,
            change_kind=kind,
            new_content=content,
            previous_path=previous,
        ))
    return tuple(files)


def _load_listing(raw: str) -> List[Mapping[str, Any]]:
    try:
        listing = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InputError(f"File listing is not valid JSON: {exc}") from exc
    if not isinstance(listing, list) or not all(isinstance(e, dict) for e in listing):
        raise InputError("File listing must be a JSON array of objects")
    return listing


def _build_context(args: argparse.Namespace) -> ProposalContext:
    if args.files_path:
        try:
            raw = Path(args.files_path).read_text(encoding="utf-8")
        except OSError as exc:
            raise InputError(f"Cannot read file listing: {exc}") from exc
    else:
        raw = os.environ.get("PR_FILES", "[]")
    listing = _load_listing(raw)

    author = args.author or os.environ.get("PR_AUTHOR", "")
    number = args.number or os.environ.get("PR_NUMBER", "")
    try:
        return ProposalContext(
            submitter=author,
            changed_files=changed_files_from_listing(listing, Path(args.head_dir)),
            proposal_number=int(number),
            source_ref=args.source_ref or os.environ.get("PR_BRANCH", ""),
            head_sha=args.head_sha or os.environ.get("HEAD_SHA", ""),
        )
    except (ValueError, PydanticValidationError) as exc:
        raise InputError(f"Invalid proposal metadata: {exc}") from exc


def _cmd_validate(args: argparse.Namespace, config: GateConfig) -> int:
    output = Path(args.output)
    try:
        context = _build_context(args)
        snapshot = RegistrySnapshot.from_directory(Path(args.base_dir), config)
    except (InputError, SnapshotError) as exc:
        logger.error("Cannot run validation: %s", exc)
        result = internal_error_result(str(exc))
    else:
        result = validate_proposal(context, snapshot, config)
    write_result_artifact(result, output)
    sys.stdout.write(result.report)
    return exit_code_for(result)


def _cmd_feedback(args: argparse.Namespace, config: GateConfig) -> int:
    result = load_result_artifact(args.result)
    status = map_commit_status(result, config)
    document = {
        "comment": result.report,
        "status": status.model_dump(mode="json"),
    }
    sys.stdout.write(json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False) + "\n")
    return 0


def _cmd_check(args: argparse.Namespace, config: GateConfig) -> int:
    result = load_result_artifact(args.result)
    if result.is_valid:
        print("PR validation passed")
    else:
        print("PR validation failed", file=sys.stderr)
    return exit_code_for(result)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="registry-gate",
        description="Validate registry record changes proposed in a pull request",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("REGISTRY_GATE_LOG_LEVEL", "INFO"),
        help="Logging level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    validate = sub.add_parser("validate", help="Validate a pull request")
    validate.add_argument("--files", dest="files_path", help="JSON file listing (default: $PR_FILES)")
    validate.add_argument("--head-dir", required=True, help="Checkout of the pull request head")
    validate.add_argument("--base-dir", required=True, help="Checkout of the base branch")
    validate.add_argument("--author", help="Pull request author (default: $PR_AUTHOR)")
    validate.add_argument("--number", help="Pull request number (default: $PR_NUMBER)")
    validate.add_argument("--head-sha", help="Head revision (default: $HEAD_SHA)")
    validate.add_argument("--source-ref", help="Head branch (default: $PR_BRANCH)")
    validate.add_argument(
        "--output",
        default=DEFAULT_ARTIFACT_NAME,
        help=f"Result artifact path (default: {DEFAULT_ARTIFACT_NAME})",
    )
    validate.set_defaults(handler=_cmd_validate)

    feedback = sub.add_parser("feedback", help="Print comment body and commit status")
    feedback.add_argument("--result", default=DEFAULT_ARTIFACT_NAME, help="Result artifact path")
    feedback.set_defaults(handler=_cmd_feedback)

    check = sub.add_parser("check", help="Exit non-zero unless validation passed")
    check.add_argument("--result", default=DEFAULT_ARTIFACT_NAME, help="Result artifact path")
    check.set_defaults(handler=_cmd_check)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 when the proposal is admissible, 1 otherwise,
        2 for configuration errors such as an unknown log level)
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    level = logging.getLevelName(str(args.log_level).strip().upper())
    if not isinstance(level, int):
        logging.basicConfig(format=_LOG_FORMAT)
        logger.error(
            "Unknown log level %r; expected one of %s", args.log_level, ", ".join(_LOG_LEVELS)
        )
        return 2
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    try:
        config = GateConfig.from_env()
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2
    handler = args.handler
    return int(handler(args, config))


if __name__ == "__main__":
    sys.exit(main())
