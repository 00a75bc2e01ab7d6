from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence

from .geometry import Position, euclidean_distance
from .threats import FIRE_RANGE, in_narrowing_danger


class Command(Enum):
    MOVE = "M"
    ROTATE_LEFT = "L"
    ROTATE_RIGHT = "R"
    FIRE = "F"


WEIGHTS: Dict[str, float] = {
    "survival": 10.0,
    "coin": 20.0,
    "kill": 40.0,
}

# Equal scores resolve in this order.
PREFERENCE = (Command.MOVE, Command.ROTATE_RIGHT, Command.ROTATE_LEFT, Command.FIRE)

ROTATION_PENALTY = 0.9
NEARBY_ENEMY_RADIUS = 3.0

COIN_DANGER_FACTOR = 0.8
COIN_CROSSFIRE_FACTOR = 0.5
ATTACK_DANGER_FACTOR = 0.3
ATTACK_COVER_FACTOR = 1.2
SAFETY_ENEMY_FACTOR = 0.5
SAFETY_EDGE_FACTOR = 0.7
SAFETY_EXPOSED_FACTOR = 0.5


@dataclass
class MoveOption:
    command: Command
    score: float
    mode: str = ""


def pick_best(options: Iterable[MoveOption]) -> Optional[MoveOption]:
    best: Optional[MoveOption] = None
    for option in options:
        if best is None or option.score > best.score:
            best = option
        elif option.score == best.score and PREFERENCE.index(option.command) < PREFERENCE.index(best.command):
            best = option
    return best


class MoveScorer:
    def __init__(self, weights: Optional[Dict[str, float]] = None, fire_range: int = FIRE_RANGE):
        self.weights = dict(WEIGHTS)
        if weights:
            self.weights.update(weights)
        self.fire_range = fire_range
        self.ideal_distance = fire_range - 1

    def coin_score(self, path_distance: int, in_danger: bool, crosses_fire: bool) -> float:
        score = self.weights["coin"] / math.sqrt(path_distance + 1)
        if in_danger:
            score *= COIN_DANGER_FACTOR
        if crosses_fire:
            score *= COIN_CROSSFIRE_FACTOR
        return score

    def attack_score(self, distance: float, player_in_danger: bool, has_cover: bool) -> float:
        score = self.weights["kill"] / (1.0 + abs(distance - self.ideal_distance))
        if player_in_danger:
            score *= ATTACK_DANGER_FACTOR
        if has_cover:
            score *= ATTACK_COVER_FACTOR
        return score

    @staticmethod
    def safety_score(pos: Position, enemies: Sequence[Position], size: int, exposed: bool = False) -> float:
        """Baseline 1.0, halved for every enemy closer than three cells."""
        score = 1.0
        for enemy in enemies:
            if euclidean_distance(pos, enemy) < NEARBY_ENEMY_RADIUS:
                score *= SAFETY_ENEMY_FACTOR
        if in_narrowing_danger(pos, 1, size):
            score *= SAFETY_EDGE_FACTOR
        if exposed:
            score *= SAFETY_EXPOSED_FACTOR
        return score

    def survival_score(self, pos: Position, enemies: Sequence[Position], size: int) -> float:
        return self.weights["survival"] * self.safety_score(pos, enemies, size)
