import random

import pytest

from config import BASE_BET_UNIT, BLOCKS_CONFIG, BONUS_SPIN_OUTCOMES, TOOLS_CONFIG
from helpers import SequenceRandom, build_grid, healths, tool
from game_logic import (
    apply_single_hit,
    apply_tnt_damage,
    apply_tool_damage,
    award_bonus_spins,
    cleared_columns,
    compute_total_win,
    create_board,
    create_tools,
    find_top_row,
    generate_multipliers,
    is_grid_cleared,
    pick_weighted,
    simulate_path,
)
from models import ConfigError, ToolSlot, ToolType


# -- generators ---------------------------------------------------------------

def test_pick_weighted_walks_cumulative_distribution():
    weights = {"a": 1, "b": 3}
    assert pick_weighted(weights, SequenceRandom([0.2])) == "a"  # 0.8 < 1
    assert pick_weighted(weights, SequenceRandom([0.25])) == "b"  # 1.0 is not < 1
    assert pick_weighted(weights, SequenceRandom([0.99])) == "b"


def test_pick_weighted_accepts_unnormalised_tables():
    weights = {"x": 40, "y": 60}
    assert pick_weighted(weights, SequenceRandom([0.39])) == "x"
    assert pick_weighted(weights, SequenceRandom([0.41])) == "y"


def test_pick_weighted_skips_zero_weights():
    assert pick_weighted({"never": 0, "always": 2}, SequenceRandom([0.0])) == "always"


@pytest.mark.parametrize("weights", [{}, {"a": 0, "b": 0}])
def test_pick_weighted_rejects_degenerate_tables(weights):
    with pytest.raises(ConfigError):
        pick_weighted(weights, SequenceRandom([0.5]))


def test_generate_multipliers_one_per_column_in_range(rng):
    mults = generate_multipliers(7, rng)
    assert len(mults) == 7
    assert all(1 <= m <= 10 for m in mults)


def test_award_bonus_spins_draws_from_outcomes(rng):
    for _ in range(20):
        assert award_bonus_spins(rng) in BONUS_SPIN_OUTCOMES


# -- factories ----------------------------------------------------------------

def test_create_board_shape_and_fresh_blocks(rng):
    grid = create_board(4, 6, BASE_BET_UNIT, rng)
    assert len(grid) == 4
    assert all(len(row) == 6 for row in grid)
    for row in grid:
        for block in row:
            assert not block.is_destroyed
            assert block.current_health == block.max_health == BLOCKS_CONFIG[block.type]["health"]
            assert block.value == BLOCKS_CONFIG[block.type]["value"]


def test_create_board_scales_values_by_bet(rng):
    grid = create_board(5, 5, 1.00, rng)
    for row in grid:
        for block in row:
            assert block.value == round(5 * BLOCKS_CONFIG[block.type]["value"], 2)


def test_create_board_ids_unique(rng):
    grid = create_board(5, 5, BASE_BET_UNIT, rng)
    ids = [b.id for row in grid for b in row]
    assert len(set(ids)) == len(ids)


def test_create_tools_is_rectangular(rng):
    for _ in range(20):
        matrix = create_tools(2, 5, rng)
        assert len(matrix) == 2
        assert all(len(row) == 5 for row in matrix)
        for row in matrix:
            for slot in row:
                assert isinstance(slot, ToolSlot)
                if slot.tool is not None:
                    cfg = TOOLS_CONFIG[slot.tool.type]
                    assert slot.tool.uses == cfg["uses"]
                    assert slot.tool.damage_per_hit == cfg["damage"]


def test_create_tools_leaves_slots_empty_below_threshold():
    # every draw 0.0 is below the empty probability
    matrix = create_tools(2, 3, SequenceRandom([0.0] * 6))
    assert all(slot.tool is None for row in matrix for slot in row)


# -- queries ------------------------------------------------------------------

def test_find_top_row_skips_destroyed_blocks():
    grid = build_grid([[0, 3], [0, 3], [2, 3]])
    assert find_top_row(grid, 0) == 2
    assert find_top_row(grid, 1) == 0
    assert find_top_row(build_grid([[0], [0]]), 0) is None


def test_cleared_columns_and_grid():
    grid = build_grid([[0, 1, 0], [0, 0, 0]])
    assert cleared_columns(grid) == [0, 2]
    assert not is_grid_cleared(grid)
    assert is_grid_cleared(build_grid([[0, 0], [0, 0]]))


# -- path simulation ----------------------------------------------------------

def test_simulate_path_pick_walks_down_until_uses_run_out():
    grid = build_grid([[1], [1], [5]])
    pick = tool(ToolType.STONE, 3, 2)
    assert simulate_path(grid, 0, pick) == [0, 1, 2]


def test_simulate_path_stops_when_column_empties():
    grid = build_grid([[1], [1]])
    pick = tool(ToolType.DIAMOND, 8, 4)
    assert simulate_path(grid, 0, pick) == [0, 1]


def test_simulate_path_repeats_row_for_tough_block():
    grid = build_grid([[3], [1]])
    pick = tool(ToolType.WOOD, 2, 1)
    assert simulate_path(grid, 0, pick) == [0, 0]


def test_simulate_path_tnt_single_top_row(tnt):
    assert simulate_path(build_grid([[0], [4], [4]]), 0, tnt) == [1]
    assert simulate_path(build_grid([[0], [0]]), 0, tnt) == []


def test_simulate_path_eye_never_hits():
    eye = tool(ToolType.EYE, 0, 0)
    assert simulate_path(build_grid([[1]]), 0, eye) == []


def test_simulate_path_is_deterministic_and_read_only():
    grid = build_grid([[2, 1], [1, 4], [3, 0]])
    before = healths(grid)
    pick = tool(ToolType.GOLD, 5, 1)
    first = simulate_path(grid, 0, pick)
    second = simulate_path(grid, 0, pick)
    assert first == second
    assert healths(grid) == before
    assert not any(b.is_destroyed for b in (grid[0][0], grid[1][0], grid[2][0]))


# -- damage resolution --------------------------------------------------------

def test_tool_exhaustion_carries_through_column():
    grid = build_grid([[1], [1], [5]], values=[[3.0], [4.0], [50.0]])
    result = apply_tool_damage(grid, 0, damage_per_hit=2, total_uses=3)
    assert healths(result.new_grid) == [[0], [0], [3]]
    assert result.new_grid[0][0].is_destroyed and result.new_grid[1][0].is_destroyed
    assert not result.new_grid[2][0].is_destroyed
    assert result.money_earned == 7.0
    assert [(d.row, d.col) for d in result.destroyed] == [(0, 0), (1, 0)]


def test_apply_tool_damage_does_not_mutate_input():
    grid = build_grid([[1], [1]])
    apply_tool_damage(grid, 0, 5, 5)
    assert healths(grid) == [[1], [1]]
    assert not grid[0][0].is_destroyed


def test_apply_tool_damage_on_cleared_column_is_noop():
    grid = build_grid([[0, 2]])
    result = apply_tool_damage(grid, 0, 3, 3)
    assert result.money_earned == 0
    assert healths(result.new_grid) == [[0, 2]]


def test_tnt_adjacency_gate_blocks_deep_neighbour():
    # column 0's top block is at row 5, column 1's at row 0
    rows = [[0, 5] for _ in range(5)] + [[5, 5]]
    grid = build_grid(rows)
    result = apply_tnt_damage(grid, 1, 10)
    assert result.new_grid[5][0].current_health == 5
    assert result.new_grid[0][1].is_destroyed
    assert [(d.row, d.col) for d in result.destroyed] == [(0, 1)]


def test_tnt_splashes_neighbours_within_one_row():
    grid = build_grid(
        [[0, 9, 20], [3, 9, 20], [3, 9, 20]],
        values=[[1.0, 2.0, 4.0], [8.0, 16.0, 32.0], [1.0, 1.0, 1.0]],
    )
    result = apply_tnt_damage(grid, 1, 10)
    new = result.new_grid
    assert new[1][0].is_destroyed          # one row below the hit row
    assert new[0][1].is_destroyed          # hit block
    assert new[0][2].current_health == 10  # damaged, not destroyed
    assert result.money_earned == 8.0 + 2.0
    assert healths(grid)[0] == [0, 9, 20]


def test_tnt_at_board_edge_ignores_missing_column():
    grid = build_grid([[5, 5]])
    result = apply_tnt_damage(grid, 0, 10)
    assert healths(result.new_grid) == [[0, 0]]


def test_tnt_on_cleared_column_is_noop():
    grid = build_grid([[0, 5], [0, 5]])
    result = apply_tnt_damage(grid, 0, 10)
    assert result.money_earned == 0
    assert result.destroyed == []
    assert healths(result.new_grid) == [[0, 5], [0, 5]]


def test_single_hit_clamps_and_credits_once():
    grid = build_grid([[2]], values=[[12.5]])
    first = apply_single_hit(grid, 0, 0, 7)
    assert first.new_grid[0][0].current_health == 0
    assert first.destroyed_value == 12.5
    again = apply_single_hit(first.new_grid, 0, 0, 7)
    assert again.destroyed_value == 0.0
    assert again.new_grid[0][0].current_health == 0


def test_single_hit_partial_damage_earns_nothing():
    grid = build_grid([[5]])
    result = apply_single_hit(grid, 0, 0, 2)
    assert result.new_grid[0][0].current_health == 3
    assert result.destroyed_value == 0.0
    assert grid[0][0].current_health == 5


def test_health_monotonic_and_single_payout_under_random_damage():
    rng = random.Random(99)
    grid = create_board(5, 5, BASE_BET_UNIT, rng)
    values = {b.id: b.value for row in grid for b in row}
    last = {b.id: b.current_health for row in grid for b in row}
    earned = 0.0

    for _ in range(200):
        col = rng.randrange(5)
        choice = rng.randrange(3)
        if choice == 0:
            res = apply_tool_damage(grid, col, rng.randint(1, 4), rng.randint(1, 5))
            grid, earned = res.new_grid, earned + res.money_earned
        elif choice == 1:
            res = apply_tnt_damage(grid, col, 10)
            grid, earned = res.new_grid, earned + res.money_earned
        else:
            res = apply_single_hit(grid, rng.randrange(5), col, rng.randint(1, 6))
            grid, earned = res.new_grid, earned + res.destroyed_value
        for row in grid:
            for b in row:
                assert 0 <= b.current_health <= last[b.id]
                assert b.is_destroyed == (b.current_health == 0)
                last[b.id] = b.current_health

    destroyed_total = sum(values[b.id] for row in grid for b in row if b.is_destroyed)
    assert earned == pytest.approx(destroyed_total)


# -- payout -------------------------------------------------------------------

def test_total_win_multiplies_by_cleared_columns():
    grid = build_grid([[0, 1, 0], [0, 1, 0]])
    assert compute_total_win(12.50, grid, [4, 9, 7]) == 137.50


def test_total_win_floors_multiplier_at_one():
    grid = build_grid([[1, 1], [0, 0]])
    assert compute_total_win(12.50, grid, [4, 7]) == 12.50
