"""Per-game move history and the session store."""
import os
import sys

THIS_DIR = os.path.dirname(os.path.abspath(__file__))
AGENT_DIR = os.path.dirname(THIS_DIR)
if AGENT_DIR not in sys.path:
    sys.path.insert(0, AGENT_DIR)

from ship_core.scorer import Command  # noqa: E402
from ship_core.session import HISTORY_LENGTH, MoveHistory, SessionStore  # noqa: E402


def test_history_keeps_only_recent_commands():
    history = MoveHistory()
    for _ in range(HISTORY_LENGTH + 3):
        history.record(Command.MOVE)
    history.record(Command.FIRE)
    assert len(history.commands) == HISTORY_LENGTH
    assert history.commands[-1] == Command.FIRE
    assert history.turns == HISTORY_LENGTH + 4
    assert history.recent(2) == [Command.MOVE, Command.FIRE]
    assert history.recent(0) == []


def test_rotation_streak_counts_trailing_rotations():
    history = MoveHistory()
    assert history.rotation_streak() == 0
    for command in (Command.ROTATE_LEFT, Command.MOVE, Command.ROTATE_RIGHT, Command.ROTATE_LEFT):
        history.record(command)
    assert history.rotation_streak() == 2
    assert not history.stuck_rotating()

    history.record(Command.ROTATE_RIGHT)
    history.record(Command.ROTATE_RIGHT)
    assert history.stuck_rotating()

    history.record(Command.FIRE)
    assert history.rotation_streak() == 0


def test_sessions_are_isolated_per_game():
    store = SessionStore()
    store.get(1).record(Command.ROTATE_LEFT)
    store.get(2).record(Command.MOVE)
    assert store.get(1).commands == [Command.ROTATE_LEFT]
    assert store.get(2).commands == [Command.MOVE]
    assert len(store) == 2


def test_store_evicts_least_recently_used_game():
    store = SessionStore(max_sessions=2)
    store.get(1)
    store.get(2)
    store.get(1)
    store.get(3)
    assert 1 in store
    assert 3 in store
    assert 2 not in store
    assert len(store) == 2

