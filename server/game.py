"""
Game logic for UNO.

This module implements the server-authoritative rule engine: cards, the deck,
the active-card chain, players, and the Game state machine that validates and
applies every player action.

UNO Rules Summary:
    - Each player is dealt 7 cards; one plain number card is turned up
    - On your turn: play a card matching the top card's color or symbol,
      or any black (Wild / Draw Four) card, choosing its new color
    - If you cannot play, draw one card and the turn passes
    - Skip, Draw Two and Draw Four start a chain: the next player must answer
      with the same symbol or take the consequence (skipped / draws the sum)
    - Reverse flips the direction of play (with two players left it acts
      like a Skip)
    - Emptying your hand finishes you; finish order is your rank
    - The game ends when fewer than two players still hold cards

The engine is synchronous and transport-agnostic. Every mutating call
validates first and raises a GameRuleError before touching any state;
notifications are appended to an outbox drained by the caller.
"""

import random
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from constants import (
    CARDS_DEALT_TO_PLAYERS,
    CARDS_TOTAL_IN_GAME,
    COPIES_PER_ACTION,
    COPIES_PER_VALUE,
    COPIES_PER_WILD,
    DRAW2_AMOUNT,
    DRAW4_AMOUNT,
    GAME_ID_LENGTH,
    VALUE_RANGE,
)
from exceptions import (
    CannotMorphCardError,
    CardCannotBePlayedError,
    DeckEmptyWhenStartingGameError,
    EmptyDiscardPileError,
    GameAlreadyStartedError,
    GameInvariantError,
    GameNotRunningError,
    IncompatibleStackError,
    InvalidCardError,
    InvalidNewColorError,
    NoOneIsPlayingError,
    NoSuchPlayerError,
    PlayerCanPlayInsteadError,
    PlayerHasNoSuchCardError,
    PlayerMustPlayInsteadError,
    PlayerOutOfTurnError,
    PositionAlreadySetError,
    SaidUnoWhenShouldNotHaveError,
)
from models import events
from models.events import GameEvent


class CardColor(str, Enum):
    """Card colors. Black marks a Wild / Draw Four that has no color yet."""

    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    BLACK = "black"


class CardSymbol(str, Enum):
    """
    Card symbols.

    VALUE cards carry a number 0-9 in Card.value; two VALUE cards only share a
    symbol when their numbers match.
    """

    VALUE = "value"
    SKIP = "skip"
    REVERSE = "reverse"
    DRAW2 = "draw2"
    DRAW4 = "draw4"
    WILD = "wild"


# Colors a player may pick when playing a black card
PLAYABLE_COLORS = (CardColor.RED, CardColor.YELLOW, CardColor.GREEN, CardColor.BLUE)

BLACK_SYMBOLS = frozenset({CardSymbol.WILD, CardSymbol.DRAW4})
STACKABLE_SYMBOLS = frozenset({CardSymbol.SKIP, CardSymbol.DRAW2, CardSymbol.DRAW4})
DRAW_AMOUNTS: dict[CardSymbol, int] = {
    CardSymbol.DRAW2: DRAW2_AMOUNT,
    CardSymbol.DRAW4: DRAW4_AMOUNT,
}


@dataclass(frozen=True)
class Card:
    """
    An immutable UNO card.

    Attributes:
        color: The card's color (black for unplayed Wild / Draw Four).
        symbol: What the card does.
        value: Number 0-9 for VALUE cards, None otherwise.
    """

    color: CardColor
    symbol: CardSymbol
    value: Optional[int] = None

    def __str__(self) -> str:
        if self.symbol == CardSymbol.VALUE:
            return f"{self.color.value} {self.value}"
        return f"{self.color.value} {self.symbol.value}"

    def is_black(self) -> bool:
        return self.color == CardColor.BLACK

    def should_be_black(self) -> bool:
        """Whether this card is dealt black (Wild family)."""
        return self.symbol in BLACK_SYMBOLS

    def matches_symbol(self, other: "Card") -> bool:
        """Same symbol, and for number cards the same number."""
        return self.symbol == other.symbol and self.value == other.value

    def morph_black_card(self, color: CardColor) -> "Card":
        """
        Give a black card its chosen color.

        Args:
            color: The color chosen by the player.

        Returns:
            A new Card with the chosen color.

        Raises:
            CannotMorphCardError: The card is not black, or color is black.
        """
        if not self.is_black() or color == CardColor.BLACK:
            raise CannotMorphCardError(self)
        return Card(color, self.symbol, self.value)

    def as_dealt(self) -> "Card":
        """The card as it looks in the draw pile (morphed wilds turn black again)."""
        if self.should_be_black() and not self.is_black():
            return Card(CardColor.BLACK, self.symbol, self.value)
        return self

    def to_dict(self) -> dict:
        """Convert card to dictionary for JSON serialization."""
        return {
            "color": self.color.value,
            "symbol": self.symbol.value,
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Card":
        """
        Build a card from client data.

        Raises:
            InvalidCardError: Unknown color or symbol, a missing or out-of-range
                number, or a black card that is not from the Wild family.
        """
        try:
            color = CardColor(data["color"])
            symbol = CardSymbol(data["symbol"])
        except (KeyError, ValueError, TypeError) as e:
            raise InvalidCardError(f"Malformed card: {data!r}") from e

        value = data.get("value")
        if symbol == CardSymbol.VALUE:
            if isinstance(value, bool) or not isinstance(value, int) or value not in VALUE_RANGE:
                raise InvalidCardError(f"Number card needs a value 0-9, got {value!r}")
        elif value is not None:
            raise InvalidCardError(f"{symbol.value} cards carry no value")

        if color == CardColor.BLACK and symbol not in BLACK_SYMBOLS:
            raise InvalidCardError(f"There is no black {symbol.value} card")

        return cls(color, symbol, value)


def build_full_card_set() -> list[Card]:
    """Build the standard 108-card set, unshuffled."""
    cards: list[Card] = []
    for color in PLAYABLE_COLORS:
        for value in VALUE_RANGE:
            copies = 1 if value == 0 else COPIES_PER_VALUE
            cards.extend(Card(color, CardSymbol.VALUE, value) for _ in range(copies))
        for symbol in (CardSymbol.SKIP, CardSymbol.REVERSE, CardSymbol.DRAW2):
            cards.extend(Card(color, symbol) for _ in range(COPIES_PER_ACTION))
    for symbol in (CardSymbol.WILD, CardSymbol.DRAW4):
        cards.extend(Card(CardColor.BLACK, symbol) for _ in range(COPIES_PER_WILD))
    return cards


class Deck:
    """
    The draw pile and the discard pile.

    Together the two piles always hold every card not in a player's hand.
    The top of each pile is the end of its list.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        """
        Initialize a new, shuffled deck with an empty discard pile.

        Args:
            seed: Optional seed for a deterministic shuffle (simulations).
        """
        self._rng = random.Random(seed)
        self.draw_pile: list[Card] = build_full_card_set()
        self.discard_pile: list[Card] = []
        self._rng.shuffle(self.draw_pile)

    def draw(self) -> Optional[Card]:
        """
        Draw the top card, reshuffling the discard pile in when empty.

        Returns:
            The drawn Card, or None if no card can be drawn at all.
        """
        if not self.draw_pile:
            self._reshuffle_discard_pile()
        if not self.draw_pile:
            return None
        return self.draw_pile.pop()

    def _reshuffle_discard_pile(self) -> None:
        """Shuffle every discard except the top card back into the draw pile."""
        if len(self.discard_pile) <= 1:
            return

        top_card = self.discard_pile[-1]
        self.draw_pile.extend(card.as_dealt() for card in self.discard_pile[:-1])
        self.discard_pile = [top_card]
        self._rng.shuffle(self.draw_pile)

    def play(self, card: Card) -> None:
        """Put a card on the discard pile; it becomes the new top card."""
        self.discard_pile.append(card)

    def top_discard_card(self) -> Card:
        """
        The card every play is checked against.

        Raises:
            EmptyDiscardPileError: No starting card was turned up.
        """
        if not self.discard_pile:
            raise EmptyDiscardPileError()
        return self.discard_pile[-1]

    def discard_top(self) -> Optional[Card]:
        """Top discard card, or None before the game starts."""
        if self.discard_pile:
            return self.discard_pile[-1]
        return None

    def flip_starting_card(self) -> Optional[Card]:
        """
        Turn up the starting card.

        Takes the topmost number card from the draw pile, so the game never
        opens on an action or black card.

        Returns:
            The turned-up Card, or None if the draw pile has no number card.
        """
        for index in range(len(self.draw_pile) - 1, -1, -1):
            if self.draw_pile[index].symbol == CardSymbol.VALUE:
                card = self.draw_pile.pop(index)
                self.play(card)
                return card
        return None

    def cards_remaining(self) -> int:
        """Return the number of cards left in the draw pile."""
        return len(self.draw_pile)

    def total_cards(self) -> int:
        return len(self.draw_pile) + len(self.discard_pile)


class ActiveCards:
    """
    An unresolved Skip / Draw Two / Draw Four chain.

    The next player must answer with the same symbol or take the chain's
    consequence. All cards in the chain share one symbol.
    """

    def __init__(self) -> None:
        self.cards: list[Card] = []

    def __len__(self) -> int:
        return len(self.cards)

    def push(self, card: Card) -> None:
        """
        Start or extend the chain.

        Raises:
            IncompatibleStackError: The card's symbol differs from the active
                one, or the card cannot start a chain. The chain is unchanged.
        """
        active = self.active_symbol()
        if active is None and card.symbol not in STACKABLE_SYMBOLS:
            raise IncompatibleStackError(None, card)
        if active is not None and card.symbol != active:
            raise IncompatibleStackError(active, card)
        self.cards.append(card)

    def are_cards_active(self) -> bool:
        return bool(self.cards)

    def active_symbol(self) -> Optional[CardSymbol]:
        if self.cards:
            return self.cards[0].symbol
        return None

    def sum_active_draw_cards(self) -> Optional[int]:
        """
        Total cards the next player has to draw.

        Returns:
            2 per Draw Two and 4 per Draw Four in the chain, or None when the
            chain is empty or made of Skips.
        """
        if self.active_symbol() not in DRAW_AMOUNTS:
            return None
        return sum(DRAW_AMOUNTS[card.symbol] for card in self.cards)

    def clear(self) -> None:
        self.cards = []


@dataclass(eq=False)
class Player:
    """
    A player seated in an UNO game.

    Players compare equal by name; names are unique within a game.

    Attributes:
        name: Display name and identity.
        is_author: Whether this player created the game.
        cards: The player's hand (order only matters for display).
        position: Finish rank (0 = first out), None while still playing.
    """

    name: str
    is_author: bool = False
    cards: list[Card] = field(default_factory=list)
    position: Optional[int] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Player):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def give_card(self, card: Card) -> None:
        self.cards.append(card)

    def drop_all_cards(self) -> None:
        self.cards = []

    def has_card(self, card: Card) -> bool:
        return card in self.cards

    def play_card_by_eq(self, card: Card) -> Card:
        """
        Remove the first card in hand equal to the given one.

        Raises:
            PlayerHasNoSuchCardError: The hand holds no such card.
        """
        for index, held in enumerate(self.cards):
            if held == card:
                return self.cards.pop(index)
        raise PlayerHasNoSuchCardError(card)

    def is_finished(self) -> bool:
        return not self.cards

    def set_position(self, position: int) -> None:
        """
        Record the player's finish rank.

        Raises:
            PositionAlreadySetError: Rank was already recorded this game.
        """
        if self.position is not None:
            raise PositionAlreadySetError(self.name, self.position)
        self.position = position

    def clear_position(self) -> None:
        self.position = None


class GameStatus(str, Enum):
    """
    Lifecycle of an UNO game.

    Flow: LOBBY -> RUNNING -> FINISHED (-> RUNNING again on restart)
    """

    LOBBY = "lobby"
    RUNNING = "running"
    FINISHED = "finished"


GAME_ID_ALPHABET = string.ascii_letters + string.digits + "_-"


def generate_game_id(length: int = GAME_ID_LENGTH) -> str:
    """Generate a random URL-safe game id."""
    return "".join(random.choices(GAME_ID_ALPHABET, k=length))


class Game:
    """
    Main game state and rule engine for UNO.

    Attributes:
        id: Unique game identifier.
        status: Current lifecycle status.
        players: Seated players in turn order.
        deck: Draw and discard piles.
        current_player: Index into players of whose turn it is.
        active_cards: The pending Skip / Draw chain, if any.
        is_clockwise: Direction of play (True = increasing index).

    Pass `seed` to make seating, the starting player and shuffles repeatable.
    """

    def __init__(
        self,
        author_name: str,
        game_id: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.id = game_id or generate_game_id()
        self.status = GameStatus.LOBBY
        self.players: list[Player] = [Player(author_name, is_author=True)]
        # Seating, starting player and every deck shuffle derive from this
        self._rng = random.Random(seed)
        self.deck = Deck(seed=self._rng.getrandbits(32))
        self.current_player = 0
        self.active_cards = ActiveCards()
        self.is_clockwise = True

        self._events: list[GameEvent] = []
        self._sequence_num = 0

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def _emit(self, factory, **data) -> GameEvent:
        """Build an event with the next sequence number and queue it."""
        self._sequence_num += 1
        event = factory(game_id=self.id, sequence_num=self._sequence_num, **data)
        self._events.append(event)
        return event

    def drain_events(self) -> list[GameEvent]:
        """Return every queued notification and empty the outbox."""
        drained, self._events = self._events, []
        return drained

    def _status_message_all(self) -> None:
        """Queue a personalized status snapshot for every seated player."""
        for player in self.players:
            self._emit(
                events.status,
                recipient=player.name,
                snapshot=self.get_state(player.name),
            )

    # -------------------------------------------------------------------------
    # Player Management
    # -------------------------------------------------------------------------

    def add_player(self, name: str) -> Player:
        """
        Seat a new player.

        Name uniqueness and lobby-only joins are enforced by the registry
        (room.GameManager.join), not here.
        """
        player = Player(name)
        self.players.append(player)
        return player

    def find_player(self, name: str) -> Optional[Player]:
        for player in self.players:
            if player.name == name:
                return player
        return None

    def find_author(self) -> Optional[Player]:
        for player in self.players:
            if player.is_author:
                return player
        return None

    def get_current_player(self) -> Optional[Player]:
        """Get the player whose turn it currently is."""
        if 0 <= self.current_player < len(self.players):
            return self.players[self.current_player]
        return None

    def get_finished_players(self) -> list[Player]:
        """Players who emptied their hand, in finish order."""
        finished = [p for p in self.players if p.position is not None]
        return sorted(finished, key=lambda p: p.position)

    def get_unfinished_players(self) -> list[Player]:
        return [p for p in self.players if not p.is_finished()]

    # -------------------------------------------------------------------------
    # Game Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """
        Start (or restart) the game.

        Randomizes seating and the starting player, clears finish positions,
        deals a fresh deck and turns up the starting card, then queues a
        status snapshot for every player.

        Raises:
            GameAlreadyStartedError: The game is already running.
            DeckEmptyWhenStartingGameError: Too many players for one deck.
        """
        if self.status == GameStatus.RUNNING:
            raise GameAlreadyStartedError()

        if len(self.players) * CARDS_DEALT_TO_PLAYERS + 1 > CARDS_TOTAL_IN_GAME:
            raise DeckEmptyWhenStartingGameError(len(self.players))

        self._randomize_player_order()
        self._randomize_starting_player()
        self._clear_player_positions()
        self.is_clockwise = True
        self.active_cards.clear()

        self.status = GameStatus.RUNNING
        self._deal_starting_cards()

        self._status_message_all()

    def _randomize_player_order(self) -> None:
        self._rng.shuffle(self.players)

    def _randomize_starting_player(self) -> None:
        """Pick a random starter, as if some rounds had already been played."""
        self.current_player = self._rng.randrange(len(self.players))

    def _clear_player_positions(self) -> None:
        for player in self.players:
            player.clear_position()

    def _deal_starting_cards(self) -> None:
        """Clear all hands, deal from a new deck and turn up the first card."""
        self.deck = Deck(seed=self._rng.getrandbits(32))

        for player in self.players:
            player.drop_all_cards()
            for _ in range(CARDS_DEALT_TO_PLAYERS):
                card = self.deck.draw()
                if card is None:
                    raise DeckEmptyWhenStartingGameError(len(self.players))
                player.give_card(card)

        if self.deck.flip_starting_card() is None:
            raise DeckEmptyWhenStartingGameError(len(self.players))

    # -------------------------------------------------------------------------
    # Turn Flow
    # -------------------------------------------------------------------------

    def _next_turn(self) -> None:
        step = 1 if self.is_clockwise else -1
        self.current_player = (self.current_player + step) % len(self.players)

    def _must_be_skipped(self, player: Player) -> bool:
        """A pending Skip chain skips a player who holds no Skip to answer it."""
        if self.active_cards.active_symbol() != CardSymbol.SKIP:
            return False
        return not any(card.symbol == CardSymbol.SKIP for card in player.cards)

    def end_turn(self) -> bool:
        """
        Move the turn to the next player who still holds cards.

        A player facing a Skip chain without a Skip of their own is passed
        over and the chain is cleared.

        Returns:
            True if a next player was found, False if everyone is finished.
        """
        if all(player.is_finished() for player in self.players):
            return False

        while True:
            self._next_turn()
            player = self.players[self.current_player]
            if player.is_finished():
                continue
            if self._must_be_skipped(player):
                self.active_cards.clear()
                continue
            return True

    def reverse(self) -> None:
        self.is_clockwise = not self.is_clockwise

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def can_play_card(self, card: Card) -> bool:
        """
        Check a card against the current top card and chain.

        While a chain is active only its symbol may be played, whatever the
        color. Otherwise black cards are always playable, and any other card
        must match the top card's color or symbol.
        """
        if self.active_cards.are_cards_active():
            return card.symbol == self.active_cards.active_symbol()

        top_card = self.deck.top_discard_card()
        return (
            card.is_black()
            or card.color == top_card.color
            or card.matches_symbol(top_card)
        )

    def _require_running(self) -> None:
        if self.status != GameStatus.RUNNING:
            raise GameNotRunningError(self.status.value)

    def _require_player(self, player_name: str) -> Player:
        player = self.find_player(player_name)
        if player is None:
            raise NoSuchPlayerError(player_name)
        return player

    def _require_turn(self, player: Player) -> None:
        current = self.get_current_player()
        if current is None:
            raise NoOneIsPlayingError(f"Turn index {self.current_player} is out of range")
        if current != player:
            raise PlayerOutOfTurnError(player.name)

    def can_player_play(
        self,
        player_name: str,
        card: Card,
        new_color: Optional[CardColor] = None,
        said_uno: bool = False,
    ) -> Player:
        """
        Check, without mutating anything, that a play is allowed.

        Returns:
            The acting Player.

        Raises:
            GameRuleError: The first rule the play breaks.
        """
        self._require_running()
        player = self._require_player(player_name)
        self._require_turn(player)

        if new_color == CardColor.BLACK:
            raise InvalidNewColorError(new_color)

        if not self.can_play_card(card):
            raise CardCannotBePlayedError(card, self.deck.top_discard_card())

        if not player.has_card(card):
            raise PlayerHasNoSuchCardError(card)

        if said_uno and len(player.cards) != 2:
            raise SaidUnoWhenShouldNotHaveError(len(player.cards) - 1)

        return player

    def can_player_draw(self, player_name: str) -> Player:
        """
        Check, without mutating anything, that a player may draw.

        Drawing is only allowed with no playable card in hand, and never to
        dodge a pending Skip.

        Returns:
            The acting Player.
        """
        self._require_running()
        player = self._require_player(player_name)
        self._require_turn(player)

        if any(self.can_play_card(card) for card in player.cards):
            raise PlayerCanPlayInsteadError(player.name)

        if self.active_cards.active_symbol() == CardSymbol.SKIP:
            raise PlayerMustPlayInsteadError(self.deck.top_discard_card())

        return player

    # -------------------------------------------------------------------------
    # Turn Actions
    # -------------------------------------------------------------------------

    def play_card(
        self,
        player_name: str,
        card: Card,
        new_color: Optional[CardColor] = None,
        said_uno: bool = False,
    ) -> Card:
        """
        Play a card from a player's hand.

        Args:
            player_name: Name of the acting player.
            card: The card as the client claims to hold it.
            new_color: Color chosen for a black card (ignored otherwise).
                A black card played without one stays black.
            said_uno: Whether the player called UNO with this play.

        Returns:
            The card as it landed on the discard pile.

        Raises:
            GameRuleError: The play is not allowed; nothing was changed.
        """
        player = self.can_player_play(player_name, card, new_color, said_uno)

        possible_position = len(self.get_finished_players())
        played_card = player.play_card_by_eq(card)
        if played_card.should_be_black() and new_color is not None:
            played_card = played_card.morph_black_card(new_color)

        player_finished = player.is_finished()
        if player_finished:
            player.set_position(possible_position)

        self._handle_played_card(played_card)
        self.deck.play(played_card)
        self.end_turn()

        # With two players in, a reverse hands the turn straight back
        if (
            played_card.symbol == CardSymbol.REVERSE
            and not player_finished
            and len(self.get_unfinished_players()) == 2
        ):
            self.end_turn()

        self._play_card_messages(player, played_card, player_finished, said_uno)
        return played_card

    def _handle_played_card(self, played_card: Card) -> None:
        """Apply the card's effect on direction and the active chain."""
        if played_card.symbol in (CardSymbol.VALUE, CardSymbol.WILD):
            self.active_cards.clear()
        elif played_card.symbol == CardSymbol.REVERSE:
            self.reverse()
            self.active_cards.clear()
        else:
            self.active_cards.push(played_card)

    def _play_card_messages(
        self,
        player: Player,
        played_card: Card,
        player_finished: bool,
        said_uno: bool,
    ) -> None:
        next_player = self.get_current_player()
        self._emit(
            events.play_card,
            by=player.name,
            next_player=next_player.name if next_player else None,
            card=played_card.to_dict(),
            said_uno=said_uno,
        )

        if player_finished:
            self._emit(events.finish, player_name=player.name, position=player.position)

        if len(self.get_unfinished_players()) < 2:
            self.status = GameStatus.FINISHED
            self._status_message_all()

    def draw_cards(self, player_name: str) -> list[Card]:
        """
        Draw for a player who cannot play.

        Draws the summed amount of a pending Draw chain (clearing it), or a
        single card otherwise. Stops early if the deck runs dry.

        Returns:
            The cards actually drawn.

        Raises:
            GameRuleError: The player may not draw; nothing was changed.
        """
        player = self.can_player_draw(player_name)

        if self.active_cards.are_cards_active():
            draw_count = self.active_cards.sum_active_draw_cards()
            if draw_count is None:
                raise GameInvariantError("Drawing allowed while a non-draw chain is active")
            self.active_cards.clear()
        else:
            draw_count = 1

        drawn_cards = self._draw_n_cards(player, draw_count)
        self.end_turn()

        next_player = self.get_current_player()
        self._emit(
            events.draw,
            by=player.name,
            next_player=next_player.name if next_player else None,
            count=len(drawn_cards),
        )

        return drawn_cards

    def _draw_n_cards(self, player: Player, n: int) -> list[Card]:
        drawn_cards = []
        for _ in range(n):
            card = self.deck.draw()
            if card is None:
                # No cards left anywhere on the table
                break
            drawn_cards.append(card)
            player.give_card(card)
        return drawn_cards

    # -------------------------------------------------------------------------
    # State Queries
    # -------------------------------------------------------------------------

    def total_cards_in_game(self) -> int:
        """Cards in both piles plus every hand; always the full card set."""
        return self.deck.total_cards() + sum(len(p.cards) for p in self.players)

    def get_state(self, for_player_name: str) -> dict:
        """
        Get the game state as seen by one player.

        Only the recipient's own hand is included; everyone else appears with
        a card count.

        Args:
            for_player_name: The player who will receive this state.

        Returns:
            Dict suitable for JSON serialization.
        """
        author = self.find_author()
        current = self.get_current_player()
        recipient = self.find_player(for_player_name)
        top_card = self.deck.discard_top()

        players_data = [
            {
                "name": player.name,
                "card_count": len(player.cards),
                "is_author": player.is_author,
                "position": player.position,
            }
            for player in self.players
        ]

        return {
            "id": self.id,
            "status": self.status.value,
            "author": author.name if author else None,
            "you": for_player_name,
            "cards": [c.to_dict() for c in recipient.cards] if recipient else [],
            "players": players_data,
            "current_player": current.name if current else None,
            "finished_players": [p.name for p in self.get_finished_players()],
            "is_clockwise": self.is_clockwise,
            "discarded_card": top_card.to_dict() if top_card else None,
            "active_cards": [c.to_dict() for c in self.active_cards.cards],
            "deck_remaining": self.deck.cards_remaining(),
        }
