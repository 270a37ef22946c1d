"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from devcourses.capacity import DEFAULT_LOW_ENROLLMENT_THRESHOLD
from devcourses.entity_store import STORE_BACKENDS

DEFAULT_STORE = "memory"
DEFAULT_DB_PATH = "devcourses.db"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ConfigError(ValueError):
    """An environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    """Application settings.

    Attributes:
        store_backend: Entity Store backend, "memory" or "sql".
        db_path: SQLite database file for the "sql" backend.
        low_enrollment_threshold: Enrollment below which commissions are flagged.
        seed_demo_data: Whether to load the demo catalog into an empty store.
        host: Interface the HTTP server binds to.
        port: Port the HTTP server listens on.
    """

    store_backend: str = DEFAULT_STORE
    db_path: str = DEFAULT_DB_PATH
    low_enrollment_threshold: int = DEFAULT_LOW_ENROLLMENT_THRESHOLD
    seed_demo_data: bool = False
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def __post_init__(self) -> None:
        if self.store_backend not in STORE_BACKENDS:
            raise ConfigError(
                f"Unknown store backend '{self.store_backend}' (expected one of {STORE_BACKENDS})"
            )
        if self.low_enrollment_threshold < 0:
            raise ConfigError("Low enrollment threshold must not be negative")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from DEVCOURSES_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ (for tests).

        Raises:
            ConfigError: If a variable cannot be parsed.
        """
        env: Mapping[str, str] = os.environ if environ is None else environ

        raw_threshold = env.get(
            "DEVCOURSES_LOW_ENROLLMENT_THRESHOLD", str(DEFAULT_LOW_ENROLLMENT_THRESHOLD)
        )
        try:
            threshold = int(raw_threshold)
        except ValueError as e:
            raise ConfigError(
                f"DEVCOURSES_LOW_ENROLLMENT_THRESHOLD must be an integer, got {raw_threshold!r}"
            ) from e

        raw_port = env.get("DEVCOURSES_PORT", str(DEFAULT_PORT))
        try:
            port = int(raw_port)
        except ValueError as e:
            raise ConfigError(f"DEVCOURSES_PORT must be an integer, got {raw_port!r}") from e

        return cls(
            store_backend=env.get("DEVCOURSES_STORE", DEFAULT_STORE).strip().lower(),
            db_path=env.get("DEVCOURSES_DB_PATH", DEFAULT_DB_PATH),
            low_enrollment_threshold=threshold,
            seed_demo_data=_parse_bool(
                "DEVCOURSES_SEED_DEMO_DATA", env.get("DEVCOURSES_SEED_DEMO_DATA", "")
            ),
            host=env.get("DEVCOURSES_HOST", DEFAULT_HOST),
            port=port,
        )


def _parse_bool(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")
