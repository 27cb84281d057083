"""Tests for environment-driven settings."""

import pytest

from hybrid_coach.coach.config.models import COACH_CHAT_MODEL
from hybrid_coach.config.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LOG_LEVEL", "CHAT_HISTORY_WINDOW", "BUILDER_TRANSITION_DELAY", "COACH_CHAT_MODEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = Settings(_env_file=None)

    assert config.chat_history_window == 10
    assert config.builder_transition_delay == 1.0
    assert config.coach_chat_model == COACH_CHAT_MODEL
    assert config.log_level == "INFO"


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("CHAT_HISTORY_WINDOW", "4")
    monkeypatch.setenv("BUILDER_TRANSITION_DELAY", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = Settings(_env_file=None)

    assert config.chat_history_window == 4
    assert config.builder_transition_delay == 0
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(("name", "value", "attribute", "expected"), [
    ("LOG_LEVEL", "verbose", "log_level", "INFO"),
    ("CHAT_HISTORY_WINDOW", "-3", "chat_history_window", 10),
])
def test_invalid_values_fall_back_to_defaults(monkeypatch, name, value, attribute, expected):
    monkeypatch.setenv(name, value)

    assert getattr(Settings(_env_file=None), attribute) == expected
