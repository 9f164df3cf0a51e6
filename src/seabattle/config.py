"""Match configuration helpers."""

from __future__ import annotations

import os
from typing import Any, Dict

from pydantic import BaseModel, field_validator

_TRUTHY = {"1", "true", "yes", "on"}
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class MatchConfig(BaseModel):
    """How a match talks to its players.

    ``echo_commands`` repeats every consumed command and the debug detail of
    rejected ones. ``pause_between_turns`` consumes one line (the Enter press)
    each time the device is handed to the other player; scripted runs turn it
    off so the script holds nothing but commands.
    """

    echo_commands: bool = False
    pause_between_turns: bool = True
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def from_env(cls, **overrides: Any) -> "MatchConfig":
        """Construct config from `SEABATTLE_*` env vars; overrides win."""

        data: Dict[str, Any] = {}
        for field, env_name in (
            ("echo_commands", "SEABATTLE_ECHO_COMMANDS"),
            ("pause_between_turns", "SEABATTLE_PAUSE_BETWEEN_TURNS"),
        ):
            value = os.getenv(env_name)
            if value is not None:
                data[field] = value.strip().lower() in _TRUTHY

        log_level = os.getenv("SEABATTLE_LOG_LEVEL")
        if log_level:
            data["log_level"] = log_level

        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)
