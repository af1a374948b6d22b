"""
Test suite for CPU player decisions in ai.py.

Covers:
- card_priority(): action cards first, wilds held back, Draw Four last
- choose_color(): most common color left in hand
- choose_action(): drawing, chain answers, UNO calls
- take_turn(): the decision is applied to the game

Run with: pytest test_ai_decisions.py -v
"""

import pytest

from ai import (
    PRIORITY_DRAW4,
    PRIORITY_SAME_COLOR_ACTION,
    PRIORITY_SAME_COLOR_NUMBER,
    PRIORITY_SYMBOL_MATCH,
    PRIORITY_WILD,
    UnoAI,
    choose_color,
)
from exceptions import NoSuchPlayerError
from game import PLAYABLE_COLORS, Card, CardColor, CardSymbol, Game


# =============================================================================
# Helpers
# =============================================================================

def num(color, value):
    return Card(color, CardSymbol.VALUE, value)


RED_5 = num(CardColor.RED, 5)
RED_3 = num(CardColor.RED, 3)
BLUE_5 = num(CardColor.BLUE, 5)
BLUE_7 = num(CardColor.BLUE, 7)
BLUE_3 = num(CardColor.BLUE, 3)
GREEN_1 = num(CardColor.GREEN, 1)
RED_SKIP = Card(CardColor.RED, CardSymbol.SKIP)
BLUE_SKIP = Card(CardColor.BLUE, CardSymbol.SKIP)
RED_DRAW2 = Card(CardColor.RED, CardSymbol.DRAW2)
BLUE_DRAW2 = Card(CardColor.BLUE, CardSymbol.DRAW2)
WILD = Card(CardColor.BLACK, CardSymbol.WILD)
DRAW4 = Card(CardColor.BLACK, CardSymbol.DRAW4)


def make_game(hand, top=RED_5):
    """Two-player running game with the CPU ("Ada") at turn holding `hand`."""
    game = Game("Ada")
    game.add_player("Bix")
    game.start()
    game.players.sort(key=lambda p: p.name)
    game.current_player = 0
    game.find_player("Ada").cards = list(hand)
    game.find_player("Bix").cards = [GREEN_1, GREEN_1]
    game.deck.discard_pile = [top]
    game.drain_events()
    return game


# =============================================================================
# Priorities
# =============================================================================

class TestCardPriority:

    def test_same_color_action(self):
        assert UnoAI.card_priority(RED_SKIP, RED_5) == PRIORITY_SAME_COLOR_ACTION

    def test_same_color_number(self):
        assert UnoAI.card_priority(RED_3, RED_5) == PRIORITY_SAME_COLOR_NUMBER

    def test_symbol_match(self):
        assert UnoAI.card_priority(BLUE_5, RED_5) == PRIORITY_SYMBOL_MATCH

    def test_black_cards_last(self):
        assert UnoAI.card_priority(WILD, RED_5) == PRIORITY_WILD
        assert UnoAI.card_priority(DRAW4, RED_5) == PRIORITY_DRAW4
        assert PRIORITY_WILD < PRIORITY_DRAW4


class TestChooseColor:

    def test_most_common_color(self):
        assert choose_color([BLUE_7, GREEN_1, BLUE_3, WILD]) == CardColor.BLUE

    def test_ignores_black_cards(self):
        assert choose_color([WILD, DRAW4, GREEN_1]) == CardColor.GREEN

    def test_no_colored_cards(self):
        assert choose_color([WILD]) in PLAYABLE_COLORS
        assert choose_color([], fallback=CardColor.YELLOW) == CardColor.YELLOW

    def test_only_black_cards_left_keeps_current_color(self):
        game = make_game([WILD, DRAW4], top=num(CardColor.GREEN, 5))
        assert UnoAI.choose_action(game, "Ada").new_color == CardColor.GREEN


# =============================================================================
# Decisions
# =============================================================================

class TestChooseAction:

    def test_draws_when_nothing_playable(self):
        game = make_game([BLUE_7, GREEN_1])
        action = UnoAI.choose_action(game, "Ada")
        assert action.kind == "draw"
        assert action.card is None

    def test_prefers_action_card(self):
        game = make_game([RED_3, RED_SKIP, BLUE_5])
        action = UnoAI.choose_action(game, "Ada")
        assert action.kind == "play"
        assert action.card == RED_SKIP
        assert action.new_color is None

    def test_keeps_wild_over_symbol_match(self):
        game = make_game([WILD, BLUE_5, GREEN_1])
        assert UnoAI.choose_action(game, "Ada").card == BLUE_5

    def test_wild_before_draw4(self):
        game = make_game([DRAW4, WILD, GREEN_1])
        assert UnoAI.choose_action(game, "Ada").card == WILD

    def test_wild_color_from_remaining_hand(self):
        game = make_game([WILD, BLUE_7, BLUE_3, GREEN_1])
        action = UnoAI.choose_action(game, "Ada")
        assert action.card == WILD
        assert action.new_color == CardColor.BLUE

    def test_answers_chain(self):
        game = make_game([RED_3, BLUE_DRAW2], top=RED_DRAW2)
        game.active_cards.push(RED_DRAW2)
        assert UnoAI.choose_action(game, "Ada").card == BLUE_DRAW2

    def test_calls_uno_on_second_to_last_card(self):
        game = make_game([RED_3, BLUE_7])
        action = UnoAI.choose_action(game, "Ada")
        assert action.card == RED_3
        assert action.said_uno is True

    def test_no_uno_with_more_cards(self):
        game = make_game([RED_3, BLUE_7, GREEN_1])
        assert UnoAI.choose_action(game, "Ada").said_uno is False

    def test_decision_does_not_change_game(self):
        game = make_game([RED_3, BLUE_7])
        UnoAI.choose_action(game, "Ada")
        assert game.find_player("Ada").cards == [RED_3, BLUE_7]
        assert game.deck.discard_pile == [RED_5]
        assert game.drain_events() == []

    def test_unknown_player(self):
        game = make_game([RED_3])
        with pytest.raises(NoSuchPlayerError):
            UnoAI.choose_action(game, "Nobody")


class TestTakeTurn:

    def test_play_is_applied(self):
        game = make_game([RED_3, BLUE_7])
        action = UnoAI.take_turn(game, "Ada")

        assert action.kind == "play"
        assert game.deck.top_discard_card() == RED_3
        assert game.find_player("Ada").cards == [BLUE_7]
        assert game.get_current_player().name == "Bix"

    def test_wild_lands_colored(self):
        game = make_game([WILD, BLUE_7, BLUE_3])
        UnoAI.take_turn(game, "Ada")
        assert game.deck.top_discard_card() == Card(CardColor.BLUE, CardSymbol.WILD)

    def test_draw_is_applied(self):
        game = make_game([BLUE_7])
        action = UnoAI.take_turn(game, "Ada")

        assert action.kind == "draw"
        assert len(action.drawn) == 1
        assert len(game.find_player("Ada").cards) == 2
        assert game.get_current_player().name == "Bix"
