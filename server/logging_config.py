"""
Logging setup for the UNO game server.

Two output styles, picked by ENVIRONMENT:
- production: one JSON object per line, for log shipping
- anything else: colored single-line records for a terminal

Records carry the game and player they concern. Set them per call with
`get_logger(__name__).with_context(game_id=..., player_name=...)`, or for a
whole block with `bind_game_context(...)`; explicit context wins.

The rule engine itself (game.py) never logs; the registry, CPU players and
the simulation runner do.
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Optional, TextIO

game_id_var: ContextVar[Optional[str]] = ContextVar("game_id", default=None)
player_name_var: ContextVar[Optional[str]] = ContextVar("player_name", default=None)

_CONTEXT_VARS = {
    "game_id": game_id_var,
    "player_name": player_name_var,
}


@contextmanager
def bind_game_context(game_id: str, player_name: Optional[str] = None) -> Iterator[None]:
    """Tag every record logged inside the block with this game (and player)."""
    tokens = [game_id_var.set(game_id)]
    if player_name is not None:
        tokens.append(player_name_var.set(player_name))
    try:
        yield
    finally:
        for token in reversed(tokens):
            token.var.reset(token)


def record_context(record: logging.LogRecord) -> dict[str, str]:
    """Game context for a record: its own extras first, then the bound block."""
    context = {}
    for name, var in _CONTEXT_VARS.items():
        value = getattr(record, name, None) or var.get()
        if value:
            context[name] = value
    return context


class JSONFormatter(logging.Formatter):
    """Machine-readable records for production."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **record_context(record),
        }

        if record.levelno >= logging.ERROR:
            payload["at"] = f"{record.pathname}:{record.lineno} in {record.funcName}"

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Colored one-line records for a terminal."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m",      # Dim
        logging.INFO: "\033[32m",      # Green
        logging.WARNING: "\033[33m",   # Yellow
        logging.ERROR: "\033[31m",     # Red
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        level = f"{color}{record.levelname[0]}{self.RESET if color else ''}"
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        context = record_context(record)
        tags = "".join(
            f" {label}={context[name]}"
            for name, label in (("game_id", "game"), ("player_name", "player"))
            if name in context
        )

        line = f"{clock} {level} {record.name}{tags} | {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    level: str = "INFO",
    environment: str = "development",
    stream: Optional[TextIO] = None,
) -> None:
    """
    Install one root handler with the formatter for this environment.

    Args:
        level: Root log level name; unknown names fall back to INFO.
        environment: "production" selects JSON output.
        stream: Where records go (stdout by default).
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter() if environment == "production" else DevelopmentFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging ready ({environment}, {level})")


class ContextLogger(logging.LoggerAdapter):
    """
    LoggerAdapter that stamps game context onto every record.

    Usage:
        logger = get_logger(__name__)
        logger.with_context(game_id="V1StGXR8_Z", player_name="Alice").info("Player joined")
    """

    def __init__(self, logger: logging.Logger, extra: Optional[dict] = None):
        super().__init__(logger, extra or {})

    def with_context(self, **context) -> "ContextLogger":
        return ContextLogger(self.logger, {**self.extra, **context})

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    return ContextLogger(logging.getLogger(name))
