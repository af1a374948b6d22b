"""
Notification events emitted by the UNO engine.

The engine never talks to a transport. Every state change appends GameEvent
values to the game's outbox; the registry (room.py) drains the outbox and
pushes each event to the seated players.

An event with a ``recipient`` is personal (status snapshots carry the
recipient's own hand) and must only reach that player. An event without one
is delivered to every seated player.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
import json


class EventType(str, Enum):
    """All notification types the engine emits."""

    STATUS = "status"
    PLAY_CARD = "play_card"
    DRAW = "draw"
    FINISH = "finish"


@dataclass
class GameEvent:
    """
    A single outbound notification.

    Attributes:
        event_type: The type of event (from EventType enum).
        game_id: ID of the game this event belongs to.
        sequence_num: Monotonically increasing sequence number within game.
        timestamp: When the event occurred (UTC).
        recipient: Player name for personal events, None for broadcasts.
        data: Event-specific payload data.
    """

    event_type: EventType
    game_id: str
    sequence_num: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    recipient: Optional[str] = None
    data: dict = field(default_factory=dict)

    @property
    def is_broadcast(self) -> bool:
        return self.recipient is None

    def to_dict(self) -> dict:
        """Serialize event to dictionary for JSON delivery."""
        return {
            "event_type": self.event_type.value,
            "game_id": self.game_id,
            "sequence_num": self.sequence_num,
            "timestamp": self.timestamp.isoformat(),
            "recipient": self.recipient,
            "data": self.data,
        }

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, d: dict) -> "GameEvent":
        """Deserialize event from dictionary."""
        timestamp = d["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return cls(
            event_type=EventType(d["event_type"]),
            game_id=d["game_id"],
            sequence_num=d["sequence_num"],
            timestamp=timestamp,
            recipient=d.get("recipient"),
            data=d.get("data", {}),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "GameEvent":
        """Deserialize event from JSON string."""
        return cls.from_dict(json.loads(json_str))


# =============================================================================
# Event Factory Functions
# =============================================================================


def status(
    game_id: str,
    sequence_num: int,
    recipient: str,
    snapshot: dict,
) -> GameEvent:
    """
    Create a personalized Status event.

    Emitted to each player when a game starts and when it finishes.

    Args:
        game_id: Game ID.
        sequence_num: Event sequence number.
        recipient: Name of the player this snapshot was built for.
        snapshot: Output of Game.get_state(recipient).
    """
    return GameEvent(
        event_type=EventType.STATUS,
        game_id=game_id,
        sequence_num=sequence_num,
        recipient=recipient,
        data=snapshot,
    )


def play_card(
    game_id: str,
    sequence_num: int,
    by: str,
    next_player: Optional[str],
    card: dict,
    said_uno: bool = False,
) -> GameEvent:
    """
    Create a PlayCard event.

    Args:
        game_id: Game ID.
        sequence_num: Event sequence number.
        by: Name of the player who played.
        next_player: Name of the player whose turn it is now.
        card: The played card as it landed on the discard pile.
        said_uno: Whether the player called UNO with this play.
    """
    return GameEvent(
        event_type=EventType.PLAY_CARD,
        game_id=game_id,
        sequence_num=sequence_num,
        data={
            "by": by,
            "next_player": next_player,
            "card": card,
            "said_uno": said_uno,
        },
    )


def draw(
    game_id: str,
    sequence_num: int,
    by: str,
    next_player: Optional[str],
    count: int,
) -> GameEvent:
    """
    Create a Draw event.

    Only the count is broadcast; the drawn cards go back to the drawer as the
    return value of Game.draw_cards.
    """
    return GameEvent(
        event_type=EventType.DRAW,
        game_id=game_id,
        sequence_num=sequence_num,
        data={
            "by": by,
            "next_player": next_player,
            "count": count,
        },
    )


def finish(
    game_id: str,
    sequence_num: int,
    player_name: str,
    position: int,
) -> GameEvent:
    """Create a Finish event for a player who emptied their hand."""
    return GameEvent(
        event_type=EventType.FINISH,
        game_id=game_id,
        sequence_num=sequence_num,
        data={
            "player": player_name,
            "position": position,
        },
    )
