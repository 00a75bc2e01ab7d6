"""BFS routing, fire-line crossing and attack positions."""
import os
import random
import sys

THIS_DIR = os.path.dirname(os.path.abspath(__file__))
AGENT_DIR = os.path.dirname(THIS_DIR)
if AGENT_DIR not in sys.path:
    sys.path.insert(0, AGENT_DIR)

from ship_core.field_model import blank_field, parse  # noqa: E402
from ship_core.geometry import Direction, manhattan_distance  # noqa: E402
from ship_core.planner import PathPlanner  # noqa: E402


def _raw(size, cells):
    raw = blank_field(size)
    for (row, col), value in cells.items():
        raw[row][col] = value
    return raw


def _planner(size, cells):
    return PathPlanner(parse(_raw(size, cells)))


def _brute_distance(raw, start, goal):
    """Relax distances until nothing changes; no queue involved."""
    size = len(raw)
    dist = {start: 0}
    changed = True
    while changed:
        changed = False
        for row in range(size):
            for col in range(size):
                here = dist.get((row, col))
                if here is None:
                    continue
                for drow, dcol in ((1, 0), (-1, 0), (0, 1), (0, -1)):
                    nr, nc = row + drow, col + dcol
                    if not (0 <= nr < size and 0 <= nc < size):
                        continue
                    if raw[nr][nc] not in ("", "C"):
                        continue
                    if dist.get((nr, nc), 10 ** 9) > here + 1:
                        dist[(nr, nc)] = here + 1
                        changed = True
    return dist.get(goal)


def test_open_field_path_is_manhattan_and_excludes_start():
    planner = _planner(5, {(0, 0): "PE"})
    path = planner.shortest_path((0, 0), (3, 4))
    assert len(path) == manhattan_distance((0, 0), (3, 4))
    assert (0, 0) not in path
    assert path[-1] == (3, 4)
    for a, b in zip([(0, 0)] + path, path):
        assert manhattan_distance(a, b) == 1


def test_path_goes_around_asteroid_wall():
    planner = _planner(5, {(2, 0): "PE", (1, 2): "A", (2, 2): "A", (3, 2): "A"})
    path = planner.shortest_path((2, 0), (2, 4))
    assert len(path) == 8
    assert all(cell not in ((1, 2), (2, 2), (3, 2)) for cell in path)


def test_unreachable_goal_returns_empty_path():
    planner = _planner(5, {(2, 0): "PE", (0, 3): "A", (1, 4): "A", (0, 4): "C"})
    assert planner.shortest_path((2, 0), (0, 4)) == []


def test_blocked_goal_and_same_cell_return_empty_path():
    planner = _planner(5, {(2, 0): "PE", (2, 3): "A", (4, 4): "E"})
    assert planner.shortest_path((2, 0), (2, 3)) == []
    assert planner.shortest_path((2, 0), (4, 4)) == []
    assert planner.shortest_path((2, 0), (2, 0)) == []


def test_path_passes_over_coins_but_not_ships():
    planner = _planner(3, {(0, 0): "PE", (0, 1): "C", (1, 1): "E", (1, 0): "E"})
    assert planner.shortest_path((0, 0), (2, 2)) == [(0, 1), (0, 2), (1, 2), (2, 2)]


def test_path_length_is_symmetric_and_matches_brute_force():
    rng = random.Random(1337)
    checked = 0
    for _ in range(300):
        size = rng.randint(2, 7)
        raw = [[rng.choice(["", "", "", "A", "C"]) for _ in range(size)] for _ in range(size)]
        open_cells = [(r, c) for r in range(size) for c in range(size) if raw[r][c] in ("", "C")]
        if len(open_cells) < 2:
            continue
        a, b = rng.sample(open_cells, 2)
        planner = PathPlanner(parse(raw))

        forward = planner.shortest_path(a, b)
        backward = planner.shortest_path(b, a)
        expected = _brute_distance(raw, a, b)

        assert len(forward) == len(backward)
        if expected is None:
            assert forward == []
        else:
            assert len(forward) == expected
        checked += 1
    assert checked > 200


def test_path_crosses_fire_line():
    planner = _planner(7, {(1, 0): "EE", (3, 3): "PN"})
    crossing = planner.shortest_path((3, 3), (0, 3))
    assert planner.path_crosses_fire_line(crossing, (1, 0), Direction.EAST)

    safe = planner.shortest_path((3, 3), (3, 6))
    assert not planner.path_crosses_fire_line(safe, (1, 0), Direction.EAST)


def test_ideal_attack_position_prefers_covered_cell_near_player():
    planner = _planner(9, {(4, 4): "EN", (4, 6): "A", (4, 8): "PW"})
    assert planner.ideal_attack_position((4, 4), (4, 8)) == (4, 7)
    assert planner.has_cover((4, 7))


def test_ideal_attack_position_skips_enemy_firing_line():
    planner = _planner(9, {(4, 4): "EE", (3, 6): "A", (4, 8): "PW"})
    best = planner.ideal_attack_position((4, 4), (4, 8))
    assert best == (3, 7)
    assert best != (4, 6)


def test_ideal_attack_position_needs_cover():
    planner = _planner(9, {(4, 4): "EN", (4, 8): "PW"})
    assert planner.ideal_attack_position((4, 4), (4, 8)) is None
    assert not planner.has_cover((4, 7))
