"""
Retainer kernel configuration (``retainer_kernel.config``).

Responsibility
--------------
Typed runtime settings for the storage engine and logging.  Values come
from defaults, the process environment, or a YAML file.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Out-of-range values  -> ``ValueError`` from ``__post_init__``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Self

import yaml

from retainer_kernel.logging_config import get_logger

logger = get_logger("config")

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class RetainerConfig:
    """Configuration schema for the retainer kernel."""

    database_url: str = DEFAULT_DATABASE_URL
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.database_url:
            raise ValueError("database_url cannot be empty")
        if self.pool_size < 1:
            raise ValueError("pool_size must be at least 1")
        if self.max_overflow < 0:
            raise ValueError("max_overflow cannot be negative")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log_level: {self.log_level}")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Self:
        """
        Build config from environment variables.

        ``RETAINER_DATABASE_URL`` wins over ``DATABASE_URL``.  Unset
        variables fall back to the dataclass defaults.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        url = env.get("RETAINER_DATABASE_URL") or env.get("DATABASE_URL")
        if url:
            values["database_url"] = url
        if "RETAINER_SQL_ECHO" in env:
            values["echo"] = env["RETAINER_SQL_ECHO"].strip().lower() in _TRUE_VALUES
        if "RETAINER_POOL_SIZE" in env:
            values["pool_size"] = int(env["RETAINER_POOL_SIZE"])
        if "RETAINER_MAX_OVERFLOW" in env:
            values["max_overflow"] = int(env["RETAINER_MAX_OVERFLOW"])
        if "RETAINER_LOG_LEVEL" in env:
            values["log_level"] = env["RETAINER_LOG_LEVEL"]

        config = cls(**values)
        logger.debug("config_loaded", extra={"source": "env", "sqlite": config.is_sqlite})
        return config

    @classmethod
    def from_yaml(cls, path: Path | str) -> Self:
        """
        Build config from a YAML mapping.

        The file may hold the settings at the top level or under a
        ``retainer`` key.  Unknown keys are rejected.
        """
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}

        if "retainer" in data:
            data = data["retainer"] or {}

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        config = cls(**data)
        logger.debug("config_loaded", extra={"source": str(path), "sqlite": config.is_sqlite})
        return config
