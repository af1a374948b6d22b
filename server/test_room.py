"""
Test suite for GameRoom and GameManager.

Covers:
- Game creation and lookup
- Join rules (lobby only, unique names, seat limit)
- Fail-fast locking
- Event delivery and per-recipient isolation
- CPU seats

Run with: pytest test_room.py -v
"""

import asyncio

import pytest

from exceptions import (
    GameBusyError,
    GameFullError,
    GameNotFoundError,
    GameNotInLobbyError,
    GameNotRunningError,
    InvalidPlayerNameError,
    PlayerNameTakenError,
)
from game import Game, GameStatus
from models import events
from room import GameManager, GameRoom


# =============================================================================
# Mock helpers
# =============================================================================

class MockWebSocket:
    """Mock WebSocket that collects sent messages."""

    def __init__(self):
        self.messages: list[dict] = []

    async def send_json(self, data: dict):
        self.messages.append(data)


class BrokenWebSocket:
    """WebSocket whose peer has gone away."""

    async def send_json(self, data: dict):
        raise ConnectionError("peer closed")


async def create_room_with(manager: GameManager, *names: str) -> GameRoom:
    room = manager.create_game(names[0])
    for name in names[1:]:
        await manager.join(room.game_id, name)
    return room


# =============================================================================
# GameManager tests
# =============================================================================

class TestGameManagerCreate:

    def test_create_game_returns_room(self):
        manager = GameManager()
        room = manager.create_game("Alice")
        assert len(room.game_id) == 10
        assert manager.get_room(room.game_id) is room
        assert room.game.find_author().name == "Alice"
        assert room.game.status == GameStatus.LOBBY
        assert len(manager) == 1

    def test_create_multiple_games_unique_ids(self):
        manager = GameManager()
        ids = {manager.create_game("Alice").game_id for _ in range(20)}
        assert len(ids) == 20
        assert len(manager) == 20

    @pytest.mark.parametrize("name", ["", "   "])
    def test_create_game_requires_name(self, name):
        manager = GameManager()
        with pytest.raises(InvalidPlayerNameError):
            manager.create_game(name)
        assert len(manager) == 0

    def test_remove_game(self):
        manager = GameManager()
        room = manager.create_game("Alice")
        assert manager.remove_game(room.game_id) is room
        assert manager.get_room(room.game_id) is None

    def test_remove_nonexistent_game(self):
        manager = GameManager()
        assert manager.remove_game("ZZZZZZZZZZ") is None

    def test_require_room_not_found(self):
        manager = GameManager()
        with pytest.raises(GameNotFoundError) as exc_info:
            manager.require_room("ZZZZZZZZZZ")
        assert exc_info.value.code == "GAME_NOT_FOUND"


class TestGameManagerJoin:

    @pytest.mark.asyncio
    async def test_join_seats_player(self):
        manager = GameManager()
        room = manager.create_game("Alice")

        player = await manager.join(room.game_id, "Bob")

        assert player.name == "Bob"
        assert not player.is_author
        assert [p.name for p in room.game.players] == ["Alice", "Bob"]

    @pytest.mark.asyncio
    async def test_join_duplicate_name(self):
        manager = GameManager()
        room = manager.create_game("Alice")
        with pytest.raises(PlayerNameTakenError):
            await manager.join(room.game_id, "Alice")
        assert len(room.game.players) == 1

    @pytest.mark.asyncio
    async def test_join_after_start(self):
        manager = GameManager()
        room = await create_room_with(manager, "Alice", "Bob")
        room.game.start()

        with pytest.raises(GameNotInLobbyError):
            await manager.join(room.game_id, "Carol")
        assert len(room.game.players) == 2

    @pytest.mark.asyncio
    async def test_join_full_game(self):
        manager = GameManager(max_players=2)
        room = await create_room_with(manager, "Alice", "Bob")

        with pytest.raises(GameFullError) as exc_info:
            await manager.join(room.game_id, "Carol")
        assert exc_info.value.max_players == 2

    @pytest.mark.asyncio
    async def test_join_unknown_game(self):
        manager = GameManager()
        with pytest.raises(GameNotFoundError):
            await manager.join("ZZZZZZZZZZ", "Bob")

    @pytest.mark.asyncio
    async def test_join_empty_name(self):
        manager = GameManager()
        room = manager.create_game("Alice")
        with pytest.raises(InvalidPlayerNameError):
            await manager.join(room.game_id, "")


# =============================================================================
# Locking
# =============================================================================

class TestLocking:

    @pytest.mark.asyncio
    async def test_busy_game_fails_fast(self):
        manager = GameManager(lock_timeout=0.01)
        room = manager.create_game("Alice")
        await room.lock.acquire()

        try:
            with pytest.raises(GameBusyError):
                async with manager.locked(room.game_id):
                    pass
        finally:
            room.lock.release()

    @pytest.mark.asyncio
    async def test_lock_released_after_error(self):
        manager = GameManager()
        room = manager.create_game("Alice")

        with pytest.raises(GameNotRunningError):
            await manager.perform(room.game_id, lambda g: g.draw_cards("Mallory"))

        assert not room.lock.locked()

    @pytest.mark.asyncio
    async def test_other_games_not_blocked(self):
        manager = GameManager(lock_timeout=0.01)
        busy = manager.create_game("Alice")
        free = manager.create_game("Bob")
        await busy.lock.acquire()

        try:
            async with manager.locked(free.game_id) as room:
                assert room is free
        finally:
            busy.lock.release()

    @pytest.mark.asyncio
    async def test_waiter_gets_lock_within_timeout(self):
        manager = GameManager(lock_timeout=1.0)
        room = manager.create_game("Alice")
        await room.lock.acquire()
        asyncio.get_running_loop().call_later(0.01, room.lock.release)

        async with manager.locked(room.game_id) as locked_room:
            assert locked_room is room


# =============================================================================
# Delivery
# =============================================================================

class TestDelivery:

    @pytest.mark.asyncio
    async def test_start_sends_each_player_their_own_status(self):
        manager = GameManager()
        room = await create_room_with(manager, "Alice", "Bob")
        alice_ws, bob_ws = MockWebSocket(), MockWebSocket()
        room.connect("Alice", alice_ws)
        room.connect("Bob", bob_ws)

        await manager.perform(room.game_id, lambda g: g.start())

        assert len(alice_ws.messages) == 1
        assert len(bob_ws.messages) == 1
        assert alice_ws.messages[0]["event_type"] == "status"
        assert alice_ws.messages[0]["recipient"] == "Alice"
        assert bob_ws.messages[0]["data"]["you"] == "Bob"
        alice_hand = [c.to_dict() for c in room.game.find_player("Alice").cards]
        assert alice_ws.messages[0]["data"]["cards"] == alice_hand

    @pytest.mark.asyncio
    async def test_broadcast_reaches_every_connection(self):
        manager = GameManager()
        room = await create_room_with(manager, "Alice", "Bob", "Carol")
        sockets = {name: MockWebSocket() for name in ("Alice", "Bob", "Carol")}
        for name, ws in sockets.items():
            room.connect(name, ws)

        event = events.draw(room.game_id, 1, by="Alice", next_player="Bob", count=1)
        sent = await room.deliver([event])

        assert sent == 3
        for ws in sockets.values():
            assert ws.messages == [event.to_dict()]

    @pytest.mark.asyncio
    async def test_personal_event_only_reaches_recipient(self):
        room = GameRoom(game=Game("Alice"))
        room.game.add_player("Bob")
        alice_ws, bob_ws = MockWebSocket(), MockWebSocket()
        room.connect("Alice", alice_ws)
        room.connect("Bob", bob_ws)

        event = events.status(room.game_id, 1, recipient="Bob", snapshot={"you": "Bob"})
        await room.deliver([event])

        assert alice_ws.messages == []
        assert len(bob_ws.messages) == 1

    @pytest.mark.asyncio
    async def test_broken_connection_does_not_block_others(self):
        manager = GameManager()
        room = await create_room_with(manager, "Alice", "Bob", "Carol")
        alice_ws, carol_ws = MockWebSocket(), MockWebSocket()
        room.connect("Alice", alice_ws)
        room.connect("Bob", BrokenWebSocket())
        room.connect("Carol", carol_ws)

        event = events.finish(room.game_id, 1, player_name="Alice", position=0)
        sent = await room.deliver([event])

        assert sent == 2
        assert len(alice_ws.messages) == 1
        assert len(carol_ws.messages) == 1

    @pytest.mark.asyncio
    async def test_unconnected_player_is_skipped(self):
        manager = GameManager()
        room = await create_room_with(manager, "Alice", "Bob")
        alice_ws = MockWebSocket()
        room.connect("Alice", alice_ws)

        assert await room.send_to("Bob", {"event_type": "test"}) is False
        sent = await room.deliver([events.draw(room.game_id, 1, "Alice", "Bob", 1)])
        assert sent == 1

    def test_disconnect(self):
        room = GameManager().create_game("Alice")
        ws = MockWebSocket()
        room.connect("Alice", ws)
        assert room.disconnect("Alice") is ws
        assert room.disconnect("Alice") is None

    @pytest.mark.asyncio
    async def test_events_delivered_in_order(self):
        manager = GameManager()
        room = await create_room_with(manager, "Alice", "Bob")
        ws = MockWebSocket()
        room.connect("Alice", ws)

        await manager.perform(room.game_id, lambda g: g.start())
        current = room.game.get_current_player()
        playable = [c for c in current.cards if room.game.can_play_card(c)]
        if playable:
            action = lambda g: g.play_card(current.name, playable[0], new_color=None)
        else:
            action = lambda g: g.draw_cards(current.name)
        await manager.perform(room.game_id, action)

        sequence = [m["sequence_num"] for m in ws.messages]
        assert sequence == sorted(sequence)
        assert len(set(sequence)) == len(sequence)


# =============================================================================
# CPU seats
# =============================================================================

class TestCPUPlayers:

    @pytest.mark.asyncio
    async def test_add_cpu_player(self):
        manager = GameManager()
        room = manager.create_game("Alice")

        cpu = await manager.add_cpu_player(room.game_id)

        assert cpu.name == "Ada"
        assert room.is_cpu("Ada")
        assert not room.is_cpu("Alice")

    @pytest.mark.asyncio
    async def test_cpu_names_do_not_clash(self):
        manager = GameManager()
        room = manager.create_game("Ada")

        cpu = await manager.add_cpu_player(room.game_id)

        assert cpu.name == "Bix"

    @pytest.mark.asyncio
    async def test_cpu_players_move_until_human_turn(self):
        manager = GameManager()
        room = manager.create_game("Alice")
        await manager.add_cpu_player(room.game_id)
        await manager.add_cpu_player(room.game_id)
        ws = MockWebSocket()
        room.connect("Alice", ws)

        await manager.perform(room.game_id, lambda g: g.start())

        game = room.game
        assert (
            game.status == GameStatus.FINISHED
            or game.get_current_player().name == "Alice"
        )
        assert game.total_cards_in_game() == 108
