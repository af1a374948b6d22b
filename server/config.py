"""
Server configuration.

Values come from the process environment, then from a `.env` file at the
repository root (python-dotenv never overrides variables that are already
set), then from the defaults below. See .env.example for every variable.

Usage:
    from config import config
    config.GAME_LOCK_TIMEOUT_SECONDS
    config.rules.cards_dealt
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, TypeVar

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

T = TypeVar("T")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def env_value(key: str, default: T, parse: Callable[[str], T]) -> T:
    """Parse an environment variable, keeping the default when unset or malformed."""
    raw = os.environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        return default


def parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


@dataclass
class RuleSettings:
    """Rules applied to every new game."""
    cards_dealt: int = 7


@dataclass
class ServerConfig:
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # Registry
    GAME_ID_LENGTH: int = 10
    MAX_PLAYERS_PER_GAME: int = 10
    GAME_LOCK_TIMEOUT_SECONDS: float = 0.5

    rules: RuleSettings = field(default_factory=RuleSettings)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        defaults = cls()
        return cls(
            DEBUG=env_value("DEBUG", defaults.DEBUG, parse_bool),
            LOG_LEVEL=env_value("LOG_LEVEL", defaults.LOG_LEVEL, str.upper),
            ENVIRONMENT=env_value("ENVIRONMENT", defaults.ENVIRONMENT, str.lower),
            GAME_ID_LENGTH=env_value("GAME_ID_LENGTH", defaults.GAME_ID_LENGTH, int),
            MAX_PLAYERS_PER_GAME=env_value("MAX_PLAYERS_PER_GAME", defaults.MAX_PLAYERS_PER_GAME, int),
            GAME_LOCK_TIMEOUT_SECONDS=env_value(
                "GAME_LOCK_TIMEOUT_SECONDS", defaults.GAME_LOCK_TIMEOUT_SECONDS, float
            ),
            rules=RuleSettings(
                cards_dealt=env_value("CARDS_DEALT_TO_PLAYERS", defaults.rules.cards_dealt, int),
            ),
        )


# Read once at import; constants.py derives the rule constants from it
config = ServerConfig.from_env()


def reload_config() -> ServerConfig:
    """Re-read the environment (tests). Already-imported constants keep their values."""
    global config
    config = ServerConfig.from_env()
    return config
