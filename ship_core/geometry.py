from __future__ import annotations

import math
from enum import Enum
from typing import Tuple

Position = Tuple[int, int]


class Direction(Enum):
    NORTH = (-1, 0)
    EAST = (0, 1)
    SOUTH = (1, 0)
    WEST = (0, -1)

    @property
    def drow(self) -> int:
        return self.value[0]

    @property
    def dcol(self) -> int:
        return self.value[1]

    def turn_right(self) -> "Direction":
        return CLOCKWISE[(CLOCKWISE.index(self) + 1) % 4]

    def turn_left(self) -> "Direction":
        return CLOCKWISE[(CLOCKWISE.index(self) - 1) % 4]


CLOCKWISE = (Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST)


def quarter_turns_clockwise(current: Direction, target: Direction) -> int:
    return (CLOCKWISE.index(target) - CLOCKWISE.index(current)) % 4


def step(pos: Position, direction: Direction, count: int = 1) -> Position:
    return pos[0] + direction.drow * count, pos[1] + direction.dcol * count


def neighbors4(pos: Position) -> Tuple[Position, ...]:
    return tuple(step(pos, direction) for direction in CLOCKWISE)


def euclidean_distance(a: Position, b: Position) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def manhattan_distance(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def chebyshev_distance(a: Position, b: Position) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def dominant_direction(source: Position, target: Position) -> Direction:
    """Direction along the axis with the larger delta; vertical wins ties."""
    drow = target[0] - source[0]
    dcol = target[1] - source[1]
    if abs(drow) >= abs(dcol):
        return Direction.SOUTH if drow > 0 else Direction.NORTH
    return Direction.EAST if dcol > 0 else Direction.WEST
