"""
Rule constants for the UNO engine.

Deck composition is fixed; dealing and registry limits come from config.py
(environment-aware). See config.py for the variables that can be overridden.

Standard deck (108 cards):
    - Per color (red, yellow, green, blue): one 0, two each of 1-9,
      two Skip, two Reverse, two Draw Two
    - Four Wild and four Wild Draw Four (black until played)
"""

from config import config


# =============================================================================
# Deck Composition
# =============================================================================

VALUE_RANGE = range(0, 10)
COPIES_PER_VALUE = 2       # 1-9; zero has a single copy per color
COPIES_PER_ACTION = 2      # Skip, Reverse, Draw2 per color
COPIES_PER_WILD = 4        # Wild and Draw4

CARDS_TOTAL_IN_GAME = 108

# Forced-draw amount per stacked card
DRAW2_AMOUNT = 2
DRAW4_AMOUNT = 4


# =============================================================================
# Game Constants
# =============================================================================

CARDS_DEALT_TO_PLAYERS = config.rules.cards_dealt
MAX_PLAYERS = config.MAX_PLAYERS_PER_GAME
GAME_ID_LENGTH = config.GAME_ID_LENGTH
GAME_LOCK_TIMEOUT_SECONDS = config.GAME_LOCK_TIMEOUT_SECONDS

# Upper bound on consecutive CPU turns run after one human action; a table of
# CPUs holding only unplayable cards over an exhausted deck never ends.
MAX_CPU_TURNS = 1000
