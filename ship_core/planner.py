from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional, Sequence

import numpy as np

from .field_model import CellKind, Grid, facing_of
from .geometry import Direction, Position, euclidean_distance, neighbors4
from .threats import FIRE_RANGE, firing_ray


class PathPlanner:
    """Breadth-first routing over EMPTY/COIN cells of one grid snapshot."""

    def __init__(self, grid: Grid, fire_range: int = FIRE_RANGE):
        self.grid = grid
        self.fire_range = fire_range

        size = grid.size
        self.passable = np.zeros((size, size), dtype=bool)
        self.asteroids = np.zeros((size, size), dtype=bool)
        for row, col in grid.positions():
            kind = grid.cells[row][col].kind
            self.passable[row, col] = kind in (CellKind.EMPTY, CellKind.COIN)
            self.asteroids[row, col] = kind == CellKind.ASTEROID

    def _open(self, cell: Position) -> bool:
        return self.grid.in_bounds(cell) and bool(self.passable[cell])

    def shortest_path(self, start: Position, goal: Position) -> List[Position]:
        if start == goal or not self._open(goal):
            return []

        came_from: Dict[Position, Position] = {}
        frontier = deque([start])
        visited = {start}

        while frontier:
            current = frontier.popleft()
            if current == goal:
                path = [current]
                while came_from.get(current) != start:
                    current = came_from[current]
                    path.append(current)
                path.reverse()
                return path

            for neighbor in neighbors4(current):
                if neighbor in visited or not self._open(neighbor):
                    continue
                visited.add(neighbor)
                came_from[neighbor] = current
                frontier.append(neighbor)

        return []

    def path_crosses_fire_line(self, path: Sequence[Position], enemy_pos: Position, enemy_dir: Direction) -> bool:
        ray = set(firing_ray(enemy_pos, enemy_dir, self.grid, self.fire_range))
        return any(cell in ray for cell in path)

    def has_cover(self, pos: Position) -> bool:
        return any(self.grid.in_bounds(n) and bool(self.asteroids[n]) for n in neighbors4(pos))

    def ideal_attack_position(self, enemy_pos: Position, player_pos: Position, enemy_dir: Optional[Direction] = None) -> Optional[Position]:
        if enemy_dir is None:
            enemy_dir = facing_of(self.grid, enemy_pos)
        exposed = set(firing_ray(enemy_pos, enemy_dir, self.grid, self.fire_range))

        best_cell: Optional[Position] = None
        best_distance = float("inf")
        er, ec = enemy_pos
        for row in range(er - self.fire_range, er + self.fire_range + 1):
            for col in range(ec - self.fire_range, ec + self.fire_range + 1):
                cell = (row, col)
                if not self.grid.in_bounds(cell):
                    continue
                if euclidean_distance(cell, enemy_pos) >= self.fire_range:
                    continue
                if cell != player_pos and not self.passable[cell]:
                    continue
                if cell in exposed or not self.has_cover(cell):
                    continue

                dist_me = euclidean_distance(cell, player_pos)
                if dist_me < best_distance:
                    best_distance = dist_me
                    best_cell = cell

        return best_cell
