"""Gate configuration."""
from __future__ import annotations

import os
from typing import FrozenSet, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from registry_gate.models import ConfigError

DEFAULT_RESERVED_KEYS: FrozenSet[str] = frozenset({
    "admin",
    "api",
    "example",
    "localhost",
    "mail",
    "ns",
    "root",
    "whois",
    "www",
})


class GateConfig(BaseModel):
    """Settings shared by the engine, the reconciler and the CLI."""

    model_config = ConfigDict(frozen=True)

    registry_dir: str = Field(
        "whois",
        min_length=1,
        pattern=r"^[^/\\]+(/[^/\\]+)*$",
        description="Repository-relative directory holding registry records",
    )
    extension: str = Field(
        ".json",
        pattern=r"^\.[A-Za-z0-9]+$",
        description="File extension of registry records",
    )
    reserved_keys: FrozenSet[str] = Field(
        DEFAULT_RESERVED_KEYS,
        description="Keys that may not be newly registered",
    )
    bot_login: str = Field(
        "github-actions[bot]",
        min_length=1,
        description="Identity that authors canonical feedback comments",
    )
    status_context: str = Field(
        "validate-pr",
        min_length=1,
        description="Commit status context name",
    )
    status_description_limit: int = Field(
        140,
        gt=1,
        description="Hosting platform limit on commit status descriptions",
    )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GateConfig":
        """Build a config from environment variables, falling back to defaults.

        Raises:
            ConfigError: If a variable holds a value the model rejects.
        """
        env = os.environ if environ is None else environ
        values: dict = {}
        if env.get("REGISTRY_DIR"):
            values["registry_dir"] = env["REGISTRY_DIR"].strip().strip("/")
        if env.get("REGISTRY_EXTENSION"):
            values["extension"] = env["REGISTRY_EXTENSION"].strip()
        if env.get("REGISTRY_RESERVED_KEYS") is not None:
            values["reserved_keys"] = frozenset(
                key.strip().lower()
                for key in env["REGISTRY_RESERVED_KEYS"].split(",")
                if key.strip()
            )
        if env.get("GATE_BOT_LOGIN"):
            values["bot_login"] = env["GATE_BOT_LOGIN"].strip()
        if env.get("GATE_STATUS_CONTEXT"):
            values["status_context"] = env["GATE_STATUS_CONTEXT"].strip()
        try:
            return cls(**values)
        except PydanticValidationError as exc:
            raise ConfigError(f"Invalid gate configuration: {exc}") from exc
