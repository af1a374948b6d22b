"""CPU players for UNO."""

import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from exceptions import NoSuchPlayerError
from game import PLAYABLE_COLORS, Card, CardColor, CardSymbol, Game


# Debug logging configuration
# Set AI_DEBUG=1 environment variable to enable detailed AI decision logging
AI_DEBUG = os.environ.get("AI_DEBUG", "0") == "1"

ai_logger = logging.getLogger("uno.ai")
if AI_DEBUG:
    ai_logger.setLevel(logging.DEBUG)
    if not ai_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [AI] %(message)s", datefmt="%H:%M:%S"
        ))
        ai_logger.addHandler(handler)


def ai_log(message: str):
    """Log AI decision info when AI_DEBUG is enabled."""
    if AI_DEBUG:
        ai_logger.debug(message)


CPU_NAMES = ["Ada", "Bix", "Cleo", "Dash", "Echo", "Fizz", "Gus", "Hex", "Ivy"]

# Lower plays first. Same-color action cards hurt the next player and keep
# the color; wilds are held back since they are always playable later.
PRIORITY_SAME_COLOR_ACTION = 0
PRIORITY_SAME_COLOR_NUMBER = 1
PRIORITY_SYMBOL_MATCH = 2
PRIORITY_WILD = 3
PRIORITY_DRAW4 = 4


@dataclass
class CpuAction:
    """
    A decision made by a CPU player.

    Attributes:
        kind: "play" or "draw".
        card: Card to play (play only).
        new_color: Color for a black card (play only).
        said_uno: Whether the play leaves one card and UNO is called.
        drawn: Cards received (filled in by take_turn for draws).
    """

    kind: str
    card: Optional[Card] = None
    new_color: Optional[CardColor] = None
    said_uno: bool = False
    drawn: list[Card] = field(default_factory=list)


def choose_color(hand: list[Card], fallback: CardColor = PLAYABLE_COLORS[0]) -> CardColor:
    """Pick the color the CPU holds most of, or `fallback` if it holds none."""
    counts = Counter(card.color for card in hand if not card.is_black())
    if not counts:
        return fallback
    return counts.most_common(1)[0][0]


class UnoAI:
    """Greedy CPU strategy: dump action cards, keep wilds for emergencies."""

    @staticmethod
    def card_priority(card: Card, top_card: Card) -> int:
        if card.symbol == CardSymbol.DRAW4:
            return PRIORITY_DRAW4
        if card.is_black():
            return PRIORITY_WILD
        if card.color == top_card.color:
            if card.symbol == CardSymbol.VALUE:
                return PRIORITY_SAME_COLOR_NUMBER
            return PRIORITY_SAME_COLOR_ACTION
        return PRIORITY_SYMBOL_MATCH

    @classmethod
    def choose_action(cls, game: Game, player_name: str) -> CpuAction:
        """
        Decide what a CPU player does on its turn.

        Args:
            game: The running game.
            player_name: The CPU player's name (must be the current player).

        Returns:
            The chosen CpuAction; nothing is applied to the game.
        """
        player = game.find_player(player_name)
        if player is None:
            raise NoSuchPlayerError(player_name)

        playable = [card for card in player.cards if game.can_play_card(card)]
        if not playable:
            ai_log(f"{player_name}: nothing playable on {game.deck.top_discard_card()}, drawing")
            return CpuAction(kind="draw")

        top_card = game.deck.top_discard_card()
        card = min(playable, key=lambda c: cls.card_priority(c, top_card))

        remaining = list(player.cards)
        remaining.remove(card)
        fallback = PLAYABLE_COLORS[0] if top_card.is_black() else top_card.color
        new_color = choose_color(remaining, fallback) if card.is_black() else None

        ai_log(
            f"{player_name}: playing {card} on {top_card}"
            + (f" as {new_color.value}" if new_color else "")
            + f" ({len(playable)} options)"
        )
        return CpuAction(
            kind="play",
            card=card,
            new_color=new_color,
            said_uno=len(player.cards) == 2,
        )

    @classmethod
    def take_turn(cls, game: Game, player_name: str) -> CpuAction:
        """Choose and apply a CPU player's move."""
        action = cls.choose_action(game, player_name)
        if action.kind == "play":
            game.play_card(player_name, action.card, action.new_color, action.said_uno)
        else:
            action.drawn = game.draw_cards(player_name)
        return action
