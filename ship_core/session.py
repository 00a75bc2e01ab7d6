from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .scorer import Command

HISTORY_LENGTH = 6
LOOP_WINDOW = 4

ROTATIONS = (Command.ROTATE_LEFT, Command.ROTATE_RIGHT)


@dataclass
class MoveHistory:
    """Recent commands of one game. Owned by the caller, never by the engine."""

    commands: List[Command] = field(default_factory=list)
    turns: int = 0

    def record(self, command: Command) -> None:
        self.commands.append(command)
        if len(self.commands) > HISTORY_LENGTH:
            del self.commands[: len(self.commands) - HISTORY_LENGTH]
        self.turns += 1

    def recent(self, count: int = HISTORY_LENGTH) -> List[Command]:
        return self.commands[-count:] if count > 0 else []

    def rotation_streak(self) -> int:
        streak = 0
        for command in reversed(self.commands):
            if command not in ROTATIONS:
                break
            streak += 1
        return streak

    def stuck_rotating(self, window: int = LOOP_WINDOW) -> bool:
        return self.rotation_streak() >= window


class SessionStore:
    def __init__(self, max_sessions: int = 256):
        self.max_sessions = max(1, max_sessions)
        self._sessions: Dict[int, MoveHistory] = {}

    def get(self, game_id: int) -> MoveHistory:
        history = self._sessions.pop(game_id, None)
        if history is None:
            history = MoveHistory()
            while len(self._sessions) >= self.max_sessions:
                oldest = next(iter(self._sessions))
                del self._sessions[oldest]
        # Re-insert so iteration order tracks recency.
        self._sessions[game_id] = history
        return history

    def __contains__(self, game_id: int) -> bool:
        return game_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
