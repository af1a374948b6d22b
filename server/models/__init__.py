"""Models package for the UNO game server."""

from .events import EventType, GameEvent

__all__ = [
    "EventType",
    "GameEvent",
]
