from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .field_model import CellKind, FieldError, Grid, entities_of, facing_of, find_player, parse
from .geometry import (
    Direction,
    Position,
    chebyshev_distance,
    dominant_direction,
    euclidean_distance,
    manhattan_distance,
    quarter_turns_clockwise,
    step,
)
from .planner import PathPlanner
from .scorer import ROTATION_PENALTY, Command, MoveOption, MoveScorer, pick_best
from .session import ROTATIONS, MoveHistory
from .threats import FIRE_RANGE, ThreatAnalyzer, ray_target

HOLD_STAGE = "attack_hold"


@dataclass
class Decision:
    command: Command
    stage: str
    score: float = 0.0


@dataclass
class TurnContext:
    grid: Grid
    player: Position
    facing: Direction
    narrowing: int
    threats: ThreatAnalyzer
    planner: PathPlanner

    @property
    def forward(self) -> Position:
        return step(self.player, self.facing)


def movement_command(current: Position, target: Position, facing: Direction, grid: Grid) -> Command:
    if current == target:
        return Command.ROTATE_RIGHT

    desired = dominant_direction(current, target)
    if facing == desired and grid.is_passable(step(current, facing)):
        return Command.MOVE
    if quarter_turns_clockwise(facing, desired) <= 2:
        return Command.ROTATE_RIGHT
    return Command.ROTATE_LEFT


def standoff_command(current: Position, enemy: Position, facing: Direction) -> Command:
    """Turn in place toward the enemy's row or column without leaving cover."""
    desired = dominant_direction(current, enemy)
    if facing == desired:
        drow, dcol = enemy[0] - current[0], enemy[1] - current[1]
        if desired in (Direction.NORTH, Direction.SOUTH):
            cross = Direction.EAST if dcol > 0 else Direction.WEST if dcol < 0 else None
        else:
            cross = Direction.SOUTH if drow > 0 else Direction.NORTH if drow < 0 else None
        if cross is None:
            return Command.ROTATE_RIGHT
        desired = cross
    if quarter_turns_clockwise(facing, desired) <= 2:
        return Command.ROTATE_RIGHT
    return Command.ROTATE_LEFT


def safe_interior_cell(grid: Grid, narrowing: int) -> Position:
    """First EMPTY cell on growing rings around the center, inside the safe band."""
    center = grid.center
    c = center[0]
    radius_limit = min(c - narrowing, grid.size - 1 - narrowing - c)
    for radius in range(0, radius_limit + 1):
        for row in range(c - radius, c + radius + 1):
            for col in range(c - radius, c + radius + 1):
                cell = (row, col)
                if chebyshev_distance(cell, center) != radius:
                    continue
                if grid.kind_at(cell) == CellKind.EMPTY:
                    return cell
    return center


class DecisionPipeline:
    def __init__(
        self,
        fire_range: int = FIRE_RANGE,
        weights: Optional[Dict[str, float]] = None,
        grid_size: Optional[int] = None,
        name: str = "ShipEngine",
    ):
        self.fire_range = fire_range
        self.grid_size = grid_size
        self.name = name
        self.scorer = MoveScorer(weights, fire_range=fire_range)

    def decide(self, raw_field: Any, narrowing_in: int = 0, history: Optional[MoveHistory] = None) -> Decision:
        try:
            grid = parse(raw_field, self.grid_size)
            player = find_player(grid)
        except FieldError as exc:
            print(f"[{self.name}] unusable field ({exc}), rotating in place")
            return Decision(Command.ROTATE_RIGHT, "fallback_error")

        ctx = TurnContext(
            grid=grid,
            player=player,
            facing=facing_of(grid, player),
            narrowing=max(0, narrowing_in or 0),
            threats=ThreatAnalyzer(grid, self.fire_range),
            planner=PathPlanner(grid, self.fire_range),
        )

        decision = self._emergency(ctx)
        if decision is not None:
            return decision

        decision = self._fire(ctx)
        if decision is not None:
            return decision

        decision = self._strategic(ctx)
        if history is not None:
            decision = self._break_rotation_loop(ctx, decision, history)
        return decision

    # -- stages -----------------------------------------------------------

    def _fire_target(self, ctx: TurnContext) -> Optional[Position]:
        """Enemy a shot would hit, provided nobody else can hit us back."""
        target = ray_target(ctx.player, ctx.facing, ctx.grid, self.fire_range)
        if target is None:
            return None
        if ctx.threats.attackers_of(ctx.player, exclude=[target]):
            return None
        return target

    def _emergency(self, ctx: TurnContext) -> Optional[Decision]:
        if ctx.threats.in_narrowing_danger(ctx.player, ctx.narrowing):
            return Decision(self._escape_narrowing(ctx), "emergency_narrowing")

        # The enemy we are about to shoot is not a reason to run.
        target = self._fire_target(ctx)
        spared = [target] if target is not None else []

        if ctx.threats.collision_with_any(ctx.player, ctx.facing, exclude=spared):
            return self._evade(ctx, "emergency_collision", dodge=False)

        if ctx.threats.attackers_of(ctx.player, exclude=spared):
            return self._evade(ctx, "emergency_dodge", dodge=True)

        return None

    def _escape_narrowing(self, ctx: TurnContext) -> Command:
        center = ctx.grid.center
        target = safe_interior_cell(ctx.grid, ctx.narrowing)
        command = movement_command(ctx.player, target, ctx.facing, ctx.grid)
        if command == Command.MOVE and manhattan_distance(ctx.forward, center) > manhattan_distance(ctx.player, center):
            command = movement_command(ctx.player, center, ctx.facing, ctx.grid)
        return command

    def _evade(self, ctx: TurnContext, stage: str, dodge: bool) -> Decision:
        enemies = ctx.threats.enemies
        size = ctx.grid.size
        options: List[MoveOption] = []

        forward = ctx.forward
        if ctx.grid.is_passable(forward) and forward not in ctx.threats.enemy_next_cells():
            exposed = dodge and ctx.threats.exposed(forward)
            options.append(MoveOption(Command.MOVE, self.scorer.safety_score(forward, enemies, size, exposed), stage))

        here = self.scorer.safety_score(ctx.player, enemies, size, exposed=dodge) * ROTATION_PENALTY
        options.append(MoveOption(Command.ROTATE_LEFT, here, stage))
        options.append(MoveOption(Command.ROTATE_RIGHT, here, stage))

        best = pick_best(options)
        assert best is not None
        return Decision(best.command, stage, best.score)

    def _fire(self, ctx: TurnContext) -> Optional[Decision]:
        if self._fire_target(ctx) is None:
            return None
        return Decision(Command.FIRE, "fire", self.scorer.weights["kill"])

    def _strategic(self, ctx: TurnContext) -> Decision:
        options = self._coin_options(ctx) + self._attack_options(ctx)
        best = pick_best(options)
        if best is not None:
            return Decision(best.command, best.mode, best.score)
        return self._safety_fallback(ctx)

    def _coin_options(self, ctx: TurnContext) -> List[MoveOption]:
        options: List[MoveOption] = []
        enemies = list(zip(ctx.threats.enemies, ctx.threats.enemy_facings))
        for coin in entities_of(ctx.grid, CellKind.COIN):
            path = ctx.planner.shortest_path(ctx.player, coin)
            if not path:
                continue
            crosses = any(ctx.planner.path_crosses_fire_line(path, enemy, enemy_dir) for enemy, enemy_dir in enemies)
            score = self.scorer.coin_score(len(path), ctx.threats.in_narrowing_danger(coin, ctx.narrowing), crosses)
            options.append(MoveOption(movement_command(ctx.player, path[0], ctx.facing, ctx.grid), score, "coin"))
        return options

    def _attack_options(self, ctx: TurnContext) -> List[MoveOption]:
        options: List[MoveOption] = []
        player_in_danger = ctx.threats.in_narrowing_danger(ctx.player, ctx.narrowing)
        for enemy, enemy_dir in zip(ctx.threats.enemies, ctx.threats.enemy_facings):
            ideal = ctx.planner.ideal_attack_position(enemy, ctx.player, enemy_dir)
            waypoint = enemy
            if ideal is not None and ideal != ctx.player:
                path = ctx.planner.shortest_path(ctx.player, ideal)
                if path:
                    waypoint = path[0]
                else:
                    ideal = None

            cover_cell = ideal if ideal is not None else ctx.player
            score = self.scorer.attack_score(
                euclidean_distance(ctx.player, enemy),
                player_in_danger,
                ctx.planner.has_cover(cover_cell),
            )
            if ideal == ctx.player:
                options.append(MoveOption(standoff_command(ctx.player, enemy, ctx.facing), score, HOLD_STAGE))
            else:
                options.append(MoveOption(movement_command(ctx.player, waypoint, ctx.facing, ctx.grid), score, "attack"))
        return options

    def _safety_fallback(self, ctx: TurnContext) -> Decision:
        score = self.scorer.survival_score(ctx.player, ctx.threats.enemies, ctx.grid.size)
        options = [
            MoveOption(Command.ROTATE_LEFT, score, "fallback"),
            MoveOption(Command.ROTATE_RIGHT, score, "fallback"),
        ]
        if ctx.grid.is_passable(ctx.forward):
            options.append(MoveOption(Command.MOVE, score, "fallback"))
        best = pick_best(options)
        assert best is not None
        return Decision(best.command, best.mode, best.score)

    def _break_rotation_loop(self, ctx: TurnContext, decision: Decision, history: MoveHistory) -> Decision:
        if decision.command not in ROTATIONS or not history.stuck_rotating():
            return decision
        if decision.stage == HOLD_STAGE:
            return decision
        forward = ctx.forward
        if not ctx.grid.is_passable(forward):
            return decision
        if ctx.threats.exposed(forward) or ctx.threats.in_narrowing_danger(forward, ctx.narrowing):
            return decision
        return Decision(Command.MOVE, f"{decision.stage}_unstuck", decision.score)
