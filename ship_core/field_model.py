from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence

from .geometry import Direction, Position, dominant_direction

DEFAULT_GRID_SIZE = 13

ENTITY_LETTERS = {
    "P": "PLAYER",
    "E": "ENEMY",
    "C": "COIN",
    "A": "ASTEROID",
    "*": "ASTEROID",
}

FACING_NAMES = {
    "N": Direction.NORTH,
    "NORTH": Direction.NORTH,
    "S": Direction.SOUTH,
    "SOUTH": Direction.SOUTH,
    "E": Direction.EAST,
    "EAST": Direction.EAST,
    "W": Direction.WEST,
    "WEST": Direction.WEST,
}


class FieldError(Exception):
    """Base for grids the engine refuses to reason about."""


class MalformedGridError(FieldError, ValueError):
    pass


class MissingPlayerError(FieldError, LookupError):
    pass


class CellKind(Enum):
    EMPTY = "empty"
    ASTEROID = "asteroid"
    COIN = "coin"
    PLAYER = "player"
    ENEMY = "enemy"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Cell:
    kind: CellKind = CellKind.EMPTY
    facing: Optional[Direction] = None


EMPTY_CELL = Cell()


def decode_facing(text: Optional[str]) -> Optional[Direction]:
    if not text:
        return None
    return FACING_NAMES.get(text.strip().upper())


def decode_cell(raw: Optional[str]) -> Cell:
    if raw is None:
        return EMPTY_CELL
    text = str(raw).strip()
    if not text:
        return EMPTY_CELL

    letter = text[0].upper()
    kind_name = ENTITY_LETTERS.get(letter)
    if kind_name is None:
        # Unrecognised markers still occupy the cell.
        return Cell(CellKind.UNKNOWN)

    kind = CellKind[kind_name]
    if kind in (CellKind.PLAYER, CellKind.ENEMY):
        return Cell(kind, decode_facing(text[1:]))
    return Cell(kind)


class Grid:
    def __init__(self, cells: List[List[Cell]]):
        self.cells = cells

    @property
    def size(self) -> int:
        return len(self.cells)

    @property
    def center(self) -> Position:
        return self.size // 2, self.size // 2

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos[0] < self.size and 0 <= pos[1] < self.size

    def cell(self, pos: Position) -> Cell:
        return self.cells[pos[0]][pos[1]]

    def kind_at(self, pos: Position) -> Optional[CellKind]:
        if not self.in_bounds(pos):
            return None
        return self.cells[pos[0]][pos[1]].kind

    def is_passable(self, pos: Position) -> bool:
        return self.kind_at(pos) in (CellKind.EMPTY, CellKind.COIN)

    def positions(self):
        for row in range(self.size):
            for col in range(self.size):
                yield row, col


def parse(raw_grid: Any, size: Optional[int] = None) -> Grid:
    if not isinstance(raw_grid, (list, tuple)):
        raise MalformedGridError("field must be a list of rows")

    n = len(raw_grid)
    if n <= 0:
        raise MalformedGridError("field has no rows")
    if size is not None and n != size:
        raise MalformedGridError(f"expected {size} rows, got {n}")

    cells: List[List[Cell]] = []
    for index, row in enumerate(raw_grid):
        if not isinstance(row, (list, tuple)) or len(row) != n:
            length = len(row) if isinstance(row, (list, tuple)) else "n/a"
            raise MalformedGridError(f"row {index} has length {length}, expected {n}")
        cells.append([decode_cell(raw) for raw in row])
    return Grid(cells)


def blank_field(size: int = DEFAULT_GRID_SIZE) -> List[List[str]]:
    return [["" for _ in range(size)] for _ in range(size)]


def entities_of(grid: Grid, kind: CellKind) -> List[Position]:
    return [pos for pos in grid.positions() if grid.cell(pos).kind == kind]


def find_player(grid: Grid) -> Position:
    for pos in grid.positions():
        if grid.cell(pos).kind == CellKind.PLAYER:
            return pos
    raise MissingPlayerError("player not found on the field")


def facing_of(grid: Grid, pos: Position) -> Direction:
    """Encoded facing of a ship cell, or the direction pointing at the center."""
    cell = grid.cell(pos)
    if cell.kind in (CellKind.PLAYER, CellKind.ENEMY) and cell.facing is not None:
        return cell.facing
    return dominant_direction(pos, grid.center)


def ship_facings(grid: Grid, positions: Sequence[Position]) -> List[Direction]:
    return [facing_of(grid, pos) for pos in positions]
