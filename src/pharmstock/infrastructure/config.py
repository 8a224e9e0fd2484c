"""Runtime configuration, read from ``PHARMSTOCK_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from pharmstock.domain.model.value_objects import Actor

# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class ConfigurationError(Exception):
    """An environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    actor_id: str | None = None
    actor_name: str | None = None
    log_level: str = "WARNING"
    log_format: str = "console"
    max_commit_attempts: int = 5
    strict_delivery_validation: bool = False

    @property
    def actor(self) -> Actor | None:
        if not self.actor_id:
            return None
        return Actor(actor_id=self.actor_id, display_name=self.actor_name or self.actor_id)

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        log_format = env.get("PHARMSTOCK_LOG_FORMAT", "console").lower()
        if log_format not in ("console", "json"):
            raise ConfigurationError(
                f"PHARMSTOCK_LOG_FORMAT must be 'console' or 'json', got {log_format!r}"
            )

        return Settings(
            data_dir=Path(env["PHARMSTOCK_DATA_DIR"]) if env.get("PHARMSTOCK_DATA_DIR") else DEFAULT_DATA_DIR,
            actor_id=env.get("PHARMSTOCK_ACTOR_ID") or None,
            actor_name=env.get("PHARMSTOCK_ACTOR_NAME") or None,
            log_level=env.get("PHARMSTOCK_LOG_LEVEL", "WARNING").upper(),
            log_format=log_format,
            max_commit_attempts=_parse_int(env, "PHARMSTOCK_MAX_COMMIT_ATTEMPTS", 5, minimum=1),
            strict_delivery_validation=_parse_bool(env, "PHARMSTOCK_STRICT_DELIVERY", False),
        )


def _parse_int(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")
    return value


def _parse_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")
