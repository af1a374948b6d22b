"""
Game registry and notification delivery.

The engine (game.py) is a plain in-memory object with no locking and no I/O.
This module owns every live game and is the only place where concurrency and
transport meet the rules:

A GameRoom contains:
    - The Game instance with the actual game state
    - The push connection (WebSocket) of each seated human player
    - An asyncio.Lock serializing every mutation of that game
    - The names of CPU-controlled seats

GameManager maps game ids to rooms. A request that cannot take a game's lock
within the configured timeout fails fast with GameBusyError instead of
queueing behind a slow one.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Optional, TypeVar

from fastapi import WebSocket

from ai import CPU_NAMES, UnoAI
from constants import GAME_LOCK_TIMEOUT_SECONDS, MAX_CPU_TURNS, MAX_PLAYERS
from exceptions import (
    GameBusyError,
    GameFullError,
    GameNotFoundError,
    GameNotInLobbyError,
    InvalidPlayerNameError,
    PlayerNameTakenError,
)
from game import Game, GameStatus, Player, generate_game_id
from logging_config import bind_game_context, get_logger
from models.events import GameEvent

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class GameRoom:
    """
    A live game plus everything needed to reach its players.

    Attributes:
        game: The Game instance.
        connections: Player name -> WebSocket for connected humans.
        cpu_players: Names of seats played by the server.
        lock: asyncio.Lock serializing game mutations.
    """

    game: Game
    connections: dict[str, WebSocket] = field(default_factory=dict)
    cpu_players: set[str] = field(default_factory=set)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def game_id(self) -> str:
        return self.game.id

    def connect(self, player_name: str, websocket: WebSocket) -> None:
        """Attach (or replace) a player's push connection."""
        self.connections[player_name] = websocket

    def disconnect(self, player_name: str) -> Optional[WebSocket]:
        return self.connections.pop(player_name, None)

    def is_cpu(self, player_name: str) -> bool:
        return player_name in self.cpu_players

    async def send_to(self, player_name: str, message: dict) -> bool:
        """
        Send a message to one player.

        A failed send is logged and reported, never raised, so one broken
        connection cannot stop delivery to the rest of the table.

        Returns:
            True if the message was handed to the connection.
        """
        websocket = self.connections.get(player_name)
        if websocket is None:
            return False
        try:
            await websocket.send_json(message)
        except Exception:
            logger.with_context(game_id=self.game_id, player_name=player_name).warning(
                "Failed to deliver notification", exc_info=True
            )
            return False
        return True

    async def deliver(self, events: list[GameEvent]) -> int:
        """
        Push drained game events to their recipients, in order.

        Broadcast events go to every seated player; personal events (status
        snapshots) only to their recipient.

        Returns:
            Number of messages successfully sent.
        """
        sent = 0
        for event in events:
            message = event.to_dict()
            if event.is_broadcast:
                recipients = [player.name for player in self.game.players]
            else:
                recipients = [event.recipient]
            for name in recipients:
                if await self.send_to(name, message):
                    sent += 1
        return sent


class GameManager:
    """
    Manages all active games.

    A single GameManager instance is used by the server.
    """

    def __init__(
        self,
        lock_timeout: float = GAME_LOCK_TIMEOUT_SECONDS,
        max_players: int = MAX_PLAYERS,
    ) -> None:
        self.rooms: dict[str, GameRoom] = {}
        self.lock_timeout = lock_timeout
        self.max_players = max_players

    def __len__(self) -> int:
        return len(self.rooms)

    def _generate_id(self, max_attempts: int = 100) -> str:
        """Generate a game id not used by any live game."""
        for _ in range(max_attempts):
            game_id = generate_game_id()
            if game_id not in self.rooms:
                return game_id
        raise RuntimeError("Could not generate unique game id")

    @staticmethod
    def _validate_name(player_name: str) -> None:
        if not player_name or not player_name.strip():
            raise InvalidPlayerNameError()

    def create_game(self, author_name: str) -> GameRoom:
        """
        Create a new game in the lobby, authored by the given player.

        Raises:
            InvalidPlayerNameError: The author name is empty.
        """
        self._validate_name(author_name)
        room = GameRoom(game=Game(author_name, game_id=self._generate_id()))
        self.rooms[room.game_id] = room
        logger.with_context(game_id=room.game_id, player_name=author_name).info("Game created")
        return room

    def get_room(self, game_id: str) -> Optional[GameRoom]:
        return self.rooms.get(game_id)

    def require_room(self, game_id: str) -> GameRoom:
        room = self.rooms.get(game_id)
        if room is None:
            raise GameNotFoundError(game_id)
        return room

    def remove_game(self, game_id: str) -> Optional[GameRoom]:
        room = self.rooms.pop(game_id, None)
        if room is not None:
            logger.with_context(game_id=game_id).info("Game removed")
        return room

    @asynccontextmanager
    async def locked(self, game_id: str) -> AsyncIterator[GameRoom]:
        """
        Hold a game's lock for the duration of the block.

        Raises:
            GameNotFoundError: No live game has this id.
            GameBusyError: The lock was not free within the timeout.
        """
        room = self.require_room(game_id)
        try:
            await asyncio.wait_for(room.lock.acquire(), timeout=self.lock_timeout)
        except asyncio.TimeoutError:
            logger.with_context(game_id=game_id).warning("Game lock busy, rejecting request")
            raise GameBusyError(game_id) from None
        try:
            with bind_game_context(game_id):
                yield room
        finally:
            room.lock.release()

    async def join(self, game_id: str, player_name: str) -> Player:
        """
        Seat a new human player in a game that is still in the lobby.

        Raises:
            InvalidPlayerNameError: The name is empty.
            GameNotInLobbyError: The game has already started.
            PlayerNameTakenError: Someone in the game already has this name.
            GameFullError: All seats are taken.
        """
        self._validate_name(player_name)
        async with self.locked(game_id) as room:
            return self._seat_player(room, player_name)

    def _seat_player(self, room: GameRoom, player_name: str) -> Player:
        game = room.game
        if game.status != GameStatus.LOBBY:
            raise GameNotInLobbyError(game.id)
        if game.find_player(player_name) is not None:
            raise PlayerNameTakenError(player_name)
        if len(game.players) >= self.max_players:
            raise GameFullError(game.id, self.max_players)

        player = game.add_player(player_name)
        logger.with_context(game_id=game.id, player_name=player_name).info("Player joined")
        return player

    async def add_cpu_player(self, game_id: str) -> Player:
        """Seat a CPU player under the first free CPU name."""
        async with self.locked(game_id) as room:
            taken = {player.name for player in room.game.players}
            name = next((n for n in CPU_NAMES if n not in taken), None)
            if name is None:
                name = f"CPU {len(room.game.players) + 1}"
            player = self._seat_player(room, name)
            room.cpu_players.add(name)
            return player

    async def perform(self, game_id: str, action: Callable[[Game], T]) -> T:
        """
        Run an engine call under the game's lock and deliver what it emitted.

        Usage:
            cards = await manager.perform(game_id, lambda g: g.draw_cards("Alice"))

        Rule errors raised by the action propagate unchanged; the engine
        queues no events for a rejected action.
        """
        async with self.locked(game_id) as room:
            result = action(room.game)
            await room.deliver(room.game.drain_events())
            await self._play_cpu_turns(room)
        return result

    async def _play_cpu_turns(self, room: GameRoom) -> int:
        """
        Let CPU seats move while it is their turn. Caller holds the lock.

        Returns:
            Number of CPU turns taken.
        """
        game = room.game
        turns = 0
        while game.status == GameStatus.RUNNING and turns < MAX_CPU_TURNS:
            current = game.get_current_player()
            if current is None or not room.is_cpu(current.name):
                break
            action = UnoAI.take_turn(game, current.name)
            logger.with_context(game_id=game.id, player_name=current.name).debug(
                f"CPU turn: {action.kind}"
            )
            await room.deliver(game.drain_events())
            turns += 1

        if turns >= MAX_CPU_TURNS:
            logger.with_context(game_id=game.id).warning(
                f"Stopped CPU play after {turns} turns without reaching a human"
            )
        return turns
