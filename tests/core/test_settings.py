"""Unit tests for /src/core/config.py and /src/core/primitives.py"""

import logging

import pytest
from pydantic import ValidationError

from src.core.config import Settings, configure_logging
from src.core.exceptions import MalformedInputError
from src.core.primitives import clamp, new_rng, require_keys


def test_defaults() -> None:
    settings = Settings(_env_file=None)
    assert settings.random_seed is None
    assert settings.pong_tick_seconds == pytest.approx(0.016)
    assert settings.database_url.startswith("sqlite")


def test_environment_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MINIGAMES_RANDOM_SEED", "42")
    monkeypatch.setenv("MINIGAMES_UNO_BOT_DELAY_SECONDS", "0")
    monkeypatch.setenv("RANDOM_SEED", "7")
    settings = Settings(_env_file=None)
    assert settings.random_seed == 42
    assert settings.uno_bot_delay_seconds == 0


def test_negative_delays_are_refused() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, chess_bot_delay_seconds=-1)
    with pytest.raises(ValidationError):
        Settings(_env_file=None, pong_tick_seconds=0)


def test_seeded_rngs_agree() -> None:
    first, second = new_rng(3), new_rng(3)
    assert [first.random() for _ in range(5)] == [second.random() for _ in range(5)]


def test_clamp() -> None:
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert clamp(2, 0, 3) == 2


def test_require_keys() -> None:
    assert require_keys({"kind": "tick"}, "kind") == {"kind": "tick"}
    with pytest.raises(MalformedInputError):
        require_keys({"kind": "tick"}, "kind", "x")
    with pytest.raises(MalformedInputError):
        require_keys("tick", "kind")


def test_configure_logging_sets_the_package_level() -> None:
    package_logger = logging.getLogger("src")
    previous = package_logger.level
    try:
        configure_logging(Settings(_env_file=None, log_level="debug"))
        assert package_logger.level == logging.DEBUG
    finally:
        package_logger.setLevel(previous)
