"""
Typed exceptions for the UNO engine and its game registry.

Two families:

GameRuleError
    A player (or the collaborator acting for one) asked for something the
    rules or the current state do not allow. Every subclass carries a stable
    ``code`` so the transport layer can map it to a response without
    string-matching messages. Raised before any state is mutated.

GameInvariantError
    A state that valid call sequences can never reach. Seeing one means a bug
    in the caller or the engine, not bad input.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from game import Card


class GameRuleError(Exception):
    """Base exception for recoverable game rule violations."""

    code = "GAME_RULE_ERROR"


class GameInvariantError(RuntimeError):
    """Base exception for impossible-by-construction engine states."""


# =============================================================================
# Lifecycle
# =============================================================================

class GameStartError(GameRuleError):
    """The game could not be started."""


class GameAlreadyStartedError(GameStartError):
    code = "GAME_ALREADY_STARTED"

    def __init__(self) -> None:
        super().__init__("Game is already running")


class DeckEmptyWhenStartingGameError(GameStartError):
    code = "DECK_EMPTY"

    def __init__(self, player_count: int) -> None:
        self.player_count = player_count
        super().__init__(f"Deck cannot supply starting cards for {player_count} players")


class GameNotRunningError(GameRuleError):
    code = "GAME_NOT_RUNNING"

    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"Game is not running (status: {status})")


# =============================================================================
# Players and turns
# =============================================================================

class NoSuchPlayerError(GameRuleError):
    code = "PLAYER_NOT_FOUND"

    def __init__(self, player_name: str) -> None:
        self.player_name = player_name
        super().__init__(f"Player '{player_name}' is not in this game")


class PlayerOutOfTurnError(GameRuleError):
    code = "NOT_YOUR_TURN"

    def __init__(self, player_name: str) -> None:
        self.player_name = player_name
        super().__init__(f"It is not {player_name}'s turn")


class NoOneIsPlayingError(GameInvariantError):
    """The turn pointer does not reference any seated player."""


# =============================================================================
# Playing cards
# =============================================================================

class PlayCardError(GameRuleError):
    """A card could not be played."""


class PlayerHasNoSuchCardError(PlayCardError):
    code = "CARD_NOT_IN_HAND"

    def __init__(self, card: "Card") -> None:
        self.card = card
        super().__init__(f"Player does not hold {card}")


class CardCannotBePlayedError(PlayCardError):
    code = "CANNOT_PLAY_THIS"

    def __init__(self, card: "Card", top_card: "Card") -> None:
        self.card = card
        self.top_card = top_card
        super().__init__(f"{card} cannot be played on {top_card}")


class InvalidNewColorError(PlayCardError):
    code = "INVALID_COLOR"

    def __init__(self, color) -> None:
        self.color = color
        super().__init__(f"Cannot choose {color.value} as the new color")


class SaidUnoWhenShouldNotHaveError(PlayCardError):
    code = "CANNOT_SAY_UNO"

    def __init__(self, cards_left: int) -> None:
        self.cards_left = cards_left
        super().__init__(f"Cannot say UNO with {cards_left} cards left after this play")


class InvalidCardError(GameRuleError):
    code = "INVALID_CARD"


# =============================================================================
# Drawing cards
# =============================================================================

class DrawCardsError(GameRuleError):
    """A player is not allowed to draw right now."""

    code = "CANNOT_DRAW"


class PlayerCanPlayInsteadError(DrawCardsError):
    def __init__(self, player_name: str) -> None:
        self.player_name = player_name
        super().__init__(f"{player_name} has a card to play and cannot draw")


class PlayerMustPlayInsteadError(DrawCardsError):
    def __init__(self, top_card: "Card") -> None:
        self.top_card = top_card
        super().__init__(f"A skip is pending on {top_card}; play a Skip instead of drawing")


# =============================================================================
# Engine invariants
# =============================================================================

class IncompatibleStackError(GameInvariantError):
    def __init__(self, active_symbol, card: "Card") -> None:
        self.active_symbol = active_symbol
        self.card = card
        if active_symbol is None:
            super().__init__(f"{card} cannot start a chain")
        else:
            super().__init__(f"Cannot stack {card} on an active {active_symbol.value} chain")


class PositionAlreadySetError(GameInvariantError):
    def __init__(self, player_name: str, position: int) -> None:
        self.player_name = player_name
        self.position = position
        super().__init__(f"{player_name} already finished at position {position}")


class CannotMorphCardError(GameInvariantError):
    def __init__(self, card: "Card") -> None:
        self.card = card
        super().__init__(f"{card} cannot change color")


class EmptyDiscardPileError(GameInvariantError):
    def __init__(self) -> None:
        super().__init__("Discard pile is empty; the starting card was never turned up")


# =============================================================================
# Game registry
# =============================================================================

class GameNotFoundError(GameRuleError):
    code = "GAME_NOT_FOUND"

    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        super().__init__(f"Game with id '{game_id}' not found")


class GameBusyError(GameRuleError):
    code = "GAME_BUSY"

    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        super().__init__(f"Game '{game_id}' is busy, try again")


class InvalidPlayerNameError(GameRuleError):
    code = "INVALID_NAME"

    def __init__(self) -> None:
        super().__init__("Name of the player cannot be empty")


class PlayerNameTakenError(GameRuleError):
    code = "NAME_TAKEN"

    def __init__(self, player_name: str) -> None:
        self.player_name = player_name
        super().__init__(f"Name '{player_name}' is already taken in this game")


class GameNotInLobbyError(GameRuleError):
    code = "GAME_NOT_IN_LOBBY"

    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        super().__init__(f"Game '{game_id}' has already started")


class GameFullError(GameRuleError):
    code = "GAME_FULL"

    def __init__(self, game_id: str, max_players: int) -> None:
        self.game_id = game_id
        self.max_players = max_players
        super().__init__(f"Game '{game_id}' is full ({max_players} players)")
