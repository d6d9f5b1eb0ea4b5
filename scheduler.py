"""
Turn scheduling: who strikes when during one spin, plus the virtual clock
that lands each strike on the authoritative grid.
"""

import heapq
import itertools
import logging
from typing import Callable, List, NamedTuple

from config import (
    EMPTY_TOOL_DURATION,
    EXPLOSION_DURATION,
    INTER_TOOL_GAP,
    POST_EXPLOSION_GAP,
    TOOL_HIT_DURATION,
)
from game_logic import (
    apply_single_hit,
    apply_tnt_damage,
    apply_tool_damage,
    simulate_path,
)
from models import (
    DestroyedBlock,
    Grid,
    SpinPlan,
    TimelineEvent,
    ToolSlot,
    clone_grid,
)

logger = logging.getLogger(__name__)


class EventResult(NamedTuple):
    new_grid: Grid
    money_earned: float
    destroyed: List[DestroyedBlock]


def normal_tool_duration(path: List[int]) -> int:
    if not path:
        return EMPTY_TOOL_DURATION
    return len(path) * TOOL_HIT_DURATION


def _pick_events(slot: ToolSlot, tool_row: int, col: int, grid_before: Grid) -> List[TimelineEvent]:
    """One "hit" event per planned strike, or a single "fade" when the path is empty."""
    tool = slot.tool
    if not slot.planned_path:
        return [
            TimelineEvent(
                time=slot.start_delay + EMPTY_TOOL_DURATION,
                kind="fade",
                col=col,
                rows=[],
                tool_id=tool.id,
                tool_type=tool.type,
                tool_row=tool_row,
                damage=0,
            )
        ]

    events = []
    hit_grid = grid_before
    for i, row in enumerate(slot.planned_path):
        result = apply_single_hit(hit_grid, row, col, tool.damage_per_hit)
        destroyed = []
        if result.new_grid[row][col].is_destroyed and not hit_grid[row][col].is_destroyed:
            destroyed.append(DestroyedBlock(row, col, result.destroyed_value))
        hit_grid = result.new_grid
        events.append(
            TimelineEvent(
                time=slot.start_delay + (i + 1) * TOOL_HIT_DURATION,
                kind="hit",
                col=col,
                rows=[row],
                tool_id=tool.id,
                tool_type=tool.type,
                tool_row=tool_row,
                damage=tool.damage_per_hit,
                destroyed=destroyed,
                money=result.destroyed_value,
            )
        )
    return events


def plan_spin(grid: Grid, tools: List[List[ToolSlot]]) -> SpinPlan:
    """
    Resolve one spin against a copy of `grid`.

    Normal tools act first, column by column, bottom tool-row before top
    tool-row. TNT waits until every column has finished its normal mining,
    then explodes in order of landing time (bottom tool-row first on ties).
    Fills in `planned_path` and `start_delay` on each slot of `tools`.
    """
    tool_rows = len(tools)
    cols = len(tools[0]) if tools else 0
    sim_grid = clone_grid(grid)
    column_timer = [0] * cols
    money = 0.0
    ordered = []  # (time, resolution index, event)
    explosives = []

    # Phase 1: normal tools
    for col in range(cols):
        for tool_row in range(tool_rows - 1, -1, -1):
            slot = tools[tool_row][col]
            if slot.tool is None:
                continue
            if slot.tool.is_explosive:
                explosives.append((tool_row, col, slot))
                continue

            tool = slot.tool
            slot.planned_path = simulate_path(sim_grid, col, tool)
            slot.start_delay = column_timer[col]

            for event in _pick_events(slot, tool_row, col, sim_grid):
                ordered.append((event.time, len(ordered), event))

            result = apply_tool_damage(sim_grid, col, tool.damage_per_hit, tool.uses)
            sim_grid = result.new_grid
            money += result.money_earned
            column_timer[col] += normal_tool_duration(slot.planned_path) + INTER_TOOL_GAP

    normal_phase_end = max(column_timer, default=0)

    # Phase 2: explosives, never before the whole board finished normal mining
    explosives.sort(key=lambda item: (-item[0], item[1]))
    for tool_row, col, slot in explosives:
        slot.start_delay = max(column_timer[col], normal_phase_end)
        column_timer[col] = slot.start_delay + EXPLOSION_DURATION + POST_EXPLOSION_GAP

    explosives.sort(key=lambda item: (item[2].start_delay, -item[0], item[1]))
    for tool_row, col, slot in explosives:
        tool = slot.tool
        slot.planned_path = simulate_path(sim_grid, col, tool)
        result = apply_tnt_damage(sim_grid, col, tool.damage_per_hit)
        sim_grid = result.new_grid
        money += result.money_earned
        event = TimelineEvent(
            time=slot.start_delay + EXPLOSION_DURATION,
            kind="explosion" if slot.planned_path else "fade",
            col=col,
            rows=list(slot.planned_path),
            tool_id=tool.id,
            tool_type=tool.type,
            tool_row=tool_row,
            damage=tool.damage_per_hit if slot.planned_path else 0,
            destroyed=result.destroyed,
            money=result.money_earned,
        )
        ordered.append((event.time, len(ordered), event))

    ordered.sort(key=lambda item: (item[0], item[1]))
    total_duration = max(column_timer, default=0)

    logger.debug(
        "Planned spin: %d events, normal phase ends at %dms, total %dms, %.2f earned",
        len(ordered), normal_phase_end, total_duration, money,
    )
    return SpinPlan(
        tools=tools,
        events=[event for _, _, event in ordered],
        final_grid=sim_grid,
        money_earned=round(money, 2),
        normal_phase_end=normal_phase_end,
        total_duration=total_duration,
    )


def apply_event(grid: Grid, event: TimelineEvent) -> EventResult:
    """Land one timeline event on `grid`, returning the new grid."""
    if event.kind == "hit":
        row = event.rows[0]
        was_alive = not grid[row][event.col].is_destroyed
        result = apply_single_hit(grid, row, event.col, event.damage)
        destroyed = []
        if was_alive and result.new_grid[row][event.col].is_destroyed:
            destroyed.append(DestroyedBlock(row, event.col, result.destroyed_value))
        return EventResult(result.new_grid, result.destroyed_value, destroyed)
    if event.kind == "explosion":
        result = apply_tnt_damage(grid, event.col, event.damage)
        return EventResult(result.new_grid, result.money_earned, result.destroyed)
    return EventResult(clone_grid(grid), 0.0, [])


class EventQueue:
    """
    Virtual clock: a priority queue of (fire_time, seq, callback).
    Time only moves when `advance` or `run_until_idle` is called, and
    callbacks scheduled for the same instant fire in scheduling order.
    """

    def __init__(self) -> None:
        self.now = 0
        self._heap = []
        self._seq = itertools.count()
        self._cancelled = set()

    def schedule(self, delay: int, callback: Callable, *args) -> int:
        handle = next(self._seq)
        heapq.heappush(self._heap, (self.now + max(0, delay), handle, callback, args))
        return handle

    def cancel(self, handle: int) -> None:
        if any(entry[1] == handle for entry in self._heap):
            self._cancelled.add(handle)

    def clear(self) -> None:
        self._heap.clear()
        self._cancelled.clear()

    @property
    def pending(self) -> int:
        return sum(1 for entry in self._heap if entry[1] not in self._cancelled)

    def _fire_next(self) -> None:
        fire_time, handle, callback, args = heapq.heappop(self._heap)
        if handle in self._cancelled:
            self._cancelled.discard(handle)
            return
        self.now = fire_time
        callback(*args)

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while self._heap and self._heap[0][0] <= target:
            self._fire_next()
        self.now = target

    def run_until_idle(self) -> None:
        while self._heap:
            self._fire_next()
