"""
UNO CPU Simulation Runner

Runs CPU-vs-CPU games straight against the engine to exercise the rules.
No server/websocket needed - runs games directly.

After every action the runner checks that no card was created or lost.

Usage:
    python simulate.py [num_games] [num_players]
    python simulate.py detail [num_players]

Examples:
    python simulate.py 10        # Run 10 games with 4 players each
    python simulate.py 50 2      # Run 50 games with 2 players each
"""

import sys
from typing import Optional

from ai import CPU_NAMES, CpuAction, UnoAI
from config import config
from constants import CARDS_TOTAL_IN_GAME
from exceptions import GameInvariantError
from game import CardSymbol, Game, GameStatus
from logging_config import get_logger, setup_logging

logger = get_logger(__name__)

MAX_TURNS = 2000  # Safety limit


class SimulationStats:
    """Track simulation statistics."""

    def __init__(self):
        self.games_played = 0
        self.games_stalled = 0
        self.total_turns = 0
        self.total_draws = 0
        self.cards_drawn = 0
        self.uno_calls = 0
        self.plays_by_symbol: dict[str, int] = {}
        self.positions: dict[str, list[int]] = {}

    def record_game(self, game: Game):
        self.games_played += 1
        if game.status != GameStatus.FINISHED:
            self.games_stalled += 1

        for player in game.players:
            if player.position is not None:
                self.positions.setdefault(player.name, []).append(player.position)

    def record_turn(self, action: CpuAction):
        self.total_turns += 1
        if action.kind == "draw":
            self.total_draws += 1
            self.cards_drawn += len(action.drawn)
            return

        symbol = action.card.symbol.value
        self.plays_by_symbol[symbol] = self.plays_by_symbol.get(symbol, 0) + 1
        if action.said_uno:
            self.uno_calls += 1

    def report(self) -> str:
        lines = [
            "=" * 50,
            "SIMULATION RESULTS",
            "=" * 50,
            f"Games played: {self.games_played}",
            f"Games stalled: {self.games_stalled}",
            f"Total turns: {self.total_turns}",
            f"Avg turns/game: {self.total_turns / max(1, self.games_played):.1f}",
            f"Draw turns: {self.total_draws} ({self.cards_drawn} cards)",
            f"UNO calls: {self.uno_calls}",
            "",
            "PLAYS BY SYMBOL:",
        ]

        total_plays = sum(self.plays_by_symbol.values())
        for symbol, count in sorted(self.plays_by_symbol.items(), key=lambda x: -x[1]):
            pct = count / max(1, total_plays) * 100
            lines.append(f"  {symbol}: {count} ({pct:.1f}%)")

        lines.append("")
        lines.append("AVERAGE FINISH POSITION (lower is better):")

        for name, positions in sorted(
            self.positions.items(),
            key=lambda x: sum(x[1]) / len(x[1])
        ):
            wins = positions.count(0)
            avg = sum(positions) / len(positions)
            lines.append(f"  {name}: {avg:.2f} ({wins} wins)")

        return "\n".join(lines)


def check_card_conservation(game: Game) -> None:
    """Raise if the table no longer holds exactly one full card set."""
    total = game.total_cards_in_game()
    if total != CARDS_TOTAL_IN_GAME:
        raise GameInvariantError(
            f"Game {game.id} holds {total} cards, expected {CARDS_TOTAL_IN_GAME}"
        )


def create_game(num_players: int, seed: Optional[int] = None) -> Game:
    """Create a lobby game seated with CPU players."""
    if not 2 <= num_players <= len(CPU_NAMES):
        raise ValueError(f"num_players must be between 2 and {len(CPU_NAMES)}")
    names = CPU_NAMES[:num_players]
    game = Game(names[0], game_id="SIM", seed=seed)
    for name in names[1:]:
        game.add_player(name)
    return game


def run_game(
    num_players: int,
    stats: SimulationStats,
    seed: Optional[int] = None,
    verbose: bool = False,
) -> Game:
    """Run a complete game. Returns the game after it ends (or stalls)."""
    game = create_game(num_players, seed)
    game.start()
    game.drain_events()
    check_card_conservation(game)

    turn_count = 0
    while game.status == GameStatus.RUNNING and turn_count < MAX_TURNS:
        current = game.get_current_player()
        action = UnoAI.take_turn(game, current.name)
        game.drain_events()
        check_card_conservation(game)
        stats.record_turn(action)

        if verbose:
            top_card = game.deck.top_discard_card()
            if action.kind == "play":
                print(f"  Turn {turn_count + 1}: {current.name} plays {action.card}"
                      f" -> top {top_card} ({len(current.cards)} left)")
            else:
                print(f"  Turn {turn_count + 1}: {current.name} draws {len(action.drawn)}")
            if current.position is not None:
                print(f"  >>> {current.name} is out in position {current.position}")

        turn_count += 1

    if game.status == GameStatus.RUNNING:
        logger.with_context(game_id=game.id).warning(
            f"Game stalled after {turn_count} turns with "
            f"{game.deck.cards_remaining()} cards left to draw"
        )

    stats.record_game(game)
    return game


def run_simulation(
    num_games: int = 10,
    num_players: int = 4,
    seed: Optional[int] = None,
    verbose: bool = True,
) -> SimulationStats:
    """Run multiple games and report statistics."""
    stats = SimulationStats()

    if verbose:
        print(f"\nRunning {num_games} games with {num_players} players each...")
        print("=" * 50)

    for i in range(num_games):
        game_seed = None if seed is None else seed + i
        game = run_game(num_players, stats, seed=game_seed)

        if verbose:
            order = ", ".join(p.name for p in game.get_finished_players())
            print(f"Game {i + 1}/{num_games}: finish order {order}")

    if verbose:
        print("\n")
        print(stats.report())

    return stats


def run_detailed_game(num_players: int = 4) -> Game:
    """Run a single game with turn-by-turn output."""
    print(f"\nRunning detailed game with {num_players} players...")
    print("=" * 50)

    stats = SimulationStats()
    game = run_game(num_players, stats, verbose=True)

    print("\n" + "=" * 50)
    print("FINISH ORDER")
    print("=" * 50)
    for player in game.get_finished_players():
        print(f"  {player.position + 1}. {player.name}")
    for player in game.get_unfinished_players():
        held = ", ".join(str(c) for c in player.cards)
        print(f"  --  {player.name} still holds: {held}")

    reverses = stats.plays_by_symbol.get(CardSymbol.REVERSE.value, 0)
    print(f"\n{stats.total_turns} turns, {reverses} reverses")
    return game


if __name__ == "__main__":
    setup_logging("DEBUG" if config.DEBUG else config.LOG_LEVEL, config.ENVIRONMENT)
    if len(sys.argv) > 1 and sys.argv[1] == "detail":
        # Detailed single game
        num_players = int(sys.argv[2]) if len(sys.argv) > 2 else 4
        run_detailed_game(num_players)
    else:
        # Batch simulation
        num_games = int(sys.argv[1]) if len(sys.argv) > 1 else 10
        num_players = int(sys.argv[2]) if len(sys.argv) > 2 else 4
        run_simulation(num_games, num_players)
