"""
Core game logic: generators, board and tool factories, path simulation
and damage resolution.

Every function that takes a grid treats it as a value: the caller's grid is
never mutated, a fresh grid is returned instead.
"""

import random
import uuid
from typing import Dict, Hashable, List, NamedTuple, Optional

from config import (
    BASE_BET_UNIT,
    BLOCK_WEIGHTS,
    BLOCKS_CONFIG,
    BONUS_SPIN_OUTCOMES,
    EMPTY_SLOT_PROBABILITY,
    MULTIPLIER_WEIGHTS,
    TOOL_WEIGHTS,
    TOOLS_CONFIG,
)
from models import (
    Block,
    BlockType,
    ConfigError,
    DestroyedBlock,
    Grid,
    Tool,
    ToolSlot,
    ToolType,
    clone_grid,
)


class ToolDamageResult(NamedTuple):
    new_grid: Grid
    money_earned: float
    destroyed: List[DestroyedBlock]


class TntDamageResult(NamedTuple):
    new_grid: Grid
    money_earned: float
    destroyed: List[DestroyedBlock]


class SingleHitResult(NamedTuple):
    new_grid: Grid
    destroyed_value: float


def _new_id() -> str:
    return uuid.uuid4().hex[:9]


# ---------------------------------------------------------------------------
# Random generators
# ---------------------------------------------------------------------------

def pick_weighted(weights: Dict[Hashable, float], rng=None) -> Hashable:
    """
    Draw uniformly in [0, total) and walk the cumulative distribution,
    returning the first key whose running sum exceeds the draw.
    """
    rng = rng or random
    total = sum(weights.values()) if weights else 0
    if total <= 0:
        raise ConfigError("cannot pick from an empty or all-zero weight table")

    draw = rng.random() * total
    cumulative = 0.0
    last_positive = None
    for key, weight in weights.items():
        if weight <= 0:
            continue
        cumulative += weight
        last_positive = key
        if draw < cumulative:
            return key
    # Float rounding can leave draw == cumulative on the final key
    return last_positive


def generate_block_type(rng=None) -> BlockType:
    return pick_weighted(BLOCK_WEIGHTS, rng)


def generate_tool_type(rng=None) -> ToolType:
    return pick_weighted(TOOL_WEIGHTS, rng)


def generate_multiplier(rng=None) -> int:
    return pick_weighted(MULTIPLIER_WEIGHTS, rng)


def award_bonus_spins(rng=None) -> int:
    """Free spins won from the egg pick that precedes a bought bonus round."""
    rng = rng or random
    return rng.choice(BONUS_SPIN_OUTCOMES)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def create_block(block_type: BlockType, bet_amount: float = BASE_BET_UNIT) -> Block:
    cfg = BLOCKS_CONFIG[block_type]
    return Block(
        id=_new_id(),
        type=block_type,
        max_health=cfg["health"],
        current_health=cfg["health"],
        value=round(cfg["value"] * (bet_amount / BASE_BET_UNIT), 2),
    )


def create_board(rows: int, cols: int, bet_amount: float, rng=None) -> Grid:
    """Fresh rows x cols wall, every block at full health, values scaled by bet."""
    return [
        [create_block(generate_block_type(rng), bet_amount) for _ in range(cols)]
        for _ in range(rows)
    ]


def generate_multipliers(cols: int, rng=None) -> List[int]:
    return [generate_multiplier(rng) for _ in range(cols)]


def create_tool(tool_type: ToolType) -> Tool:
    cfg = TOOLS_CONFIG[tool_type]
    return Tool(id=_new_id(), type=tool_type, uses=cfg["uses"], damage_per_hit=cfg["damage"])


def create_tools(tool_rows: int, cols: int, rng=None) -> List[List[ToolSlot]]:
    """Rectangular tool_rows x cols matrix of slots, some left empty."""
    rng = rng or random
    matrix = []
    for _ in range(tool_rows):
        row = []
        for _ in range(cols):
            if rng.random() < EMPTY_SLOT_PROBABILITY:
                row.append(ToolSlot(tool=None))
            else:
                row.append(ToolSlot(tool=create_tool(generate_tool_type(rng))))
        matrix.append(row)
    return matrix


# ---------------------------------------------------------------------------
# Grid queries
# ---------------------------------------------------------------------------

def find_top_row(grid: Grid, col: int) -> Optional[int]:
    """Row index of the top-most live block in `col`, or None if cleared."""
    for row_idx, row in enumerate(grid):
        if not row[col].is_destroyed:
            return row_idx
    return None


def is_column_cleared(grid: Grid, col: int) -> bool:
    return bool(grid) and all(row[col].is_destroyed for row in grid)


def is_grid_cleared(grid: Grid) -> bool:
    return bool(grid) and all(block.is_destroyed for row in grid for block in row)


def cleared_columns(grid: Grid) -> List[int]:
    if not grid:
        return []
    return [c for c in range(len(grid[0])) if is_column_cleared(grid, c)]


def _in_bounds(grid: Grid, col: int) -> bool:
    return bool(grid) and 0 <= col < len(grid[0])


# ---------------------------------------------------------------------------
# Path simulation
# ---------------------------------------------------------------------------

def simulate_path(grid: Grid, col: int, tool: Tool) -> List[int]:
    """
    Forecast the rows `tool` will strike in `col`, in order, without touching
    `grid`. A TNT strikes once at the current top row; a pick keeps striking
    down the column until its uses run out or the column is empty.
    """
    if not _in_bounds(grid, col):
        return []

    if tool.is_explosive:
        top = find_top_row(grid, col)
        return [] if top is None else [top]

    sim_grid = clone_grid(grid)
    path = []
    remaining_uses = tool.uses
    while remaining_uses > 0:
        row_idx = find_top_row(sim_grid, col)
        if row_idx is None:
            break
        path.append(row_idx)
        sim_grid[row_idx][col].take_damage(tool.damage_per_hit)
        remaining_uses -= 1
    return path


# ---------------------------------------------------------------------------
# Damage resolution
# ---------------------------------------------------------------------------

def apply_tool_damage(grid: Grid, col: int, damage_per_hit: int, total_uses: int) -> ToolDamageResult:
    """A pick striking down `col` up to `total_uses` times."""
    new_grid = clone_grid(grid)
    money = 0.0
    destroyed = []
    if not _in_bounds(new_grid, col):
        return ToolDamageResult(new_grid, money, destroyed)

    for _ in range(total_uses):
        row_idx = find_top_row(new_grid, col)
        if row_idx is None:
            break
        block = new_grid[row_idx][col]
        if block.take_damage(damage_per_hit):
            money += block.value
            destroyed.append(DestroyedBlock(row_idx, col, block.value))

    return ToolDamageResult(new_grid, round(money, 2), destroyed)


def apply_tnt_damage(grid: Grid, col: int, damage: int) -> TntDamageResult:
    """
    Explode on the top block of `col` and splash the top blocks of the
    neighbouring columns. A neighbour is only reached when its top block is
    within one row of the hit row.
    """
    new_grid = clone_grid(grid)
    money = 0.0
    destroyed = []
    if not _in_bounds(new_grid, col):
        return TntDamageResult(new_grid, money, destroyed)

    hit_row = find_top_row(new_grid, col)
    if hit_row is None:
        return TntDamageResult(new_grid, money, destroyed)

    for target_col in (col - 1, col, col + 1):
        if not _in_bounds(new_grid, target_col):
            continue
        target_row = find_top_row(new_grid, target_col)
        if target_row is None or abs(target_row - hit_row) > 1:
            continue
        block = new_grid[target_row][target_col]
        if block.take_damage(damage):
            money += block.value
            destroyed.append(DestroyedBlock(target_row, target_col, block.value))

    return TntDamageResult(new_grid, round(money, 2), destroyed)


def apply_single_hit(grid: Grid, row: int, col: int, damage: int) -> SingleHitResult:
    """Damage exactly one cell; no-op when it is already destroyed or out of range."""
    new_grid = clone_grid(grid)
    if not (0 <= row < len(new_grid) and _in_bounds(new_grid, col)):
        return SingleHitResult(new_grid, 0.0)
    block = new_grid[row][col]
    if block.take_damage(damage):
        return SingleHitResult(new_grid, block.value)
    return SingleHitResult(new_grid, 0.0)


# ---------------------------------------------------------------------------
# Payout
# ---------------------------------------------------------------------------

def multiplier_sum(grid: Grid, multipliers: List[int]) -> int:
    return sum(multipliers[c] for c in cleared_columns(grid))


def compute_total_win(accumulated_win: float, grid: Grid, multipliers: List[int]) -> float:
    """Accumulated mining winnings times the cleared-column multiplier sum (floor 1)."""
    return round(accumulated_win * max(multiplier_sum(grid, multipliers), 1), 2)
