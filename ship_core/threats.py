from __future__ import annotations

from typing import Iterable, List, Optional, Set

from .field_model import CellKind, Grid, entities_of, ship_facings
from .geometry import Direction, Position, step

FIRE_RANGE = 4

RAY_BLOCKERS = (CellKind.ASTEROID, CellKind.ENEMY, CellKind.UNKNOWN)


def _trace(origin: Position, direction: Direction, grid: Grid, fire_range: int):
    """Walk the ray; returns (passed cells, cell that stopped it or None)."""
    passed: List[Position] = []
    for distance in range(1, fire_range + 1):
        cell = step(origin, direction, distance)
        if not grid.in_bounds(cell):
            return passed, None
        if grid.kind_at(cell) in RAY_BLOCKERS:
            return passed, cell
        passed.append(cell)
    return passed, None


def firing_ray(origin: Position, direction: Direction, grid: Grid, fire_range: int = FIRE_RANGE) -> List[Position]:
    return _trace(origin, direction, grid, fire_range)[0]


def ray_target(origin: Position, direction: Direction, grid: Grid, fire_range: int = FIRE_RANGE) -> Optional[Position]:
    blocker = _trace(origin, direction, grid, fire_range)[1]
    if blocker is not None and grid.kind_at(blocker) == CellKind.ENEMY:
        return blocker
    return None


def is_in_firing_line(
    attacker_pos: Position,
    attacker_dir: Direction,
    target_pos: Position,
    grid: Grid,
    fire_range: int = FIRE_RANGE,
) -> bool:
    return target_pos in firing_ray(attacker_pos, attacker_dir, grid, fire_range)


def collision_risk(pos_a: Position, dir_a: Direction, pos_b: Position, dir_b: Direction) -> bool:
    next_a = step(pos_a, dir_a)
    next_b = step(pos_b, dir_b)
    return next_a == next_b or next_a == pos_b or next_b == pos_a


def in_narrowing_danger(pos: Position, narrowing: int, size: int) -> bool:
    if narrowing <= 0:
        return False
    row, col = pos
    return row < narrowing or row >= size - narrowing or col < narrowing or col >= size - narrowing


class ThreatAnalyzer:
    def __init__(self, grid: Grid, fire_range: int = FIRE_RANGE):
        self.grid = grid
        self.fire_range = fire_range
        self.enemies: List[Position] = entities_of(grid, CellKind.ENEMY)
        self.enemy_facings: List[Direction] = ship_facings(grid, self.enemies)
        self._rays: List[Set[Position]] = [
            set(firing_ray(pos, facing, grid, fire_range)) for pos, facing in zip(self.enemies, self.enemy_facings)
        ]

    def attackers_of(self, pos: Position, exclude: Iterable[Position] = ()) -> List[Position]:
        skipped = set(exclude)
        return [enemy for enemy, ray in zip(self.enemies, self._rays) if enemy not in skipped and pos in ray]

    def exposed(self, pos: Position) -> bool:
        return any(pos in ray for ray in self._rays)

    def collision_with_any(self, pos: Position, facing: Direction, exclude: Iterable[Position] = ()) -> bool:
        skipped = set(exclude)
        return any(
            collision_risk(pos, facing, enemy, enemy_dir)
            for enemy, enemy_dir in zip(self.enemies, self.enemy_facings)
            if enemy not in skipped
        )

    def enemy_next_cells(self) -> Set[Position]:
        return {step(enemy, enemy_dir) for enemy, enemy_dir in zip(self.enemies, self.enemy_facings)}

    def in_narrowing_danger(self, pos: Position, narrowing: int) -> bool:
        return in_narrowing_danger(pos, narrowing, self.grid.size)
