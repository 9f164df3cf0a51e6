"""Tests for match configuration loading."""

import pytest
from pydantic import ValidationError

from seabattle.config import MatchConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SEABATTLE_ECHO_COMMANDS", "SEABATTLE_PAUSE_BETWEEN_TURNS", "SEABATTLE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = MatchConfig.from_env()
    assert config.echo_commands is False
    assert config.pause_between_turns is True
    assert config.log_level == "WARNING"


def test_env_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEABATTLE_ECHO_COMMANDS", "yes")
    monkeypatch.setenv("SEABATTLE_PAUSE_BETWEEN_TURNS", "0")
    monkeypatch.setenv("SEABATTLE_LOG_LEVEL", "debug")
    config = MatchConfig.from_env()
    assert config.echo_commands is True
    assert config.pause_between_turns is False
    assert config.log_level == "DEBUG"


def test_overrides_win_but_none_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEABATTLE_ECHO_COMMANDS", "true")
    config = MatchConfig.from_env(echo_commands=None, pause_between_turns=False)
    assert config.echo_commands is True
    assert config.pause_between_turns is False


def test_unknown_log_level_is_rejected() -> None:
    with pytest.raises(ValidationError):
        MatchConfig(log_level="chatty")
