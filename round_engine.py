"""
Round state machine for the mining bonus: BETTING -> PLAYING -> FINISHED.
"""

import logging
import math
from typing import List, Optional

from config import (
    FIRST_SPIN_DELAY,
    GRID_COLS,
    GRID_ROWS,
    MAX_SPINS,
    MIN_SPIN_DURATION,
    SPIN_SETTLE_DURATION,
    TOOL_ROWS,
    WATCHDOG_TIMEOUT,
    validate_config,
)
from game_logic import (
    cleared_columns,
    compute_total_win,
    create_board,
    create_tools,
    generate_multipliers,
    is_grid_cleared,
    multiplier_sum,
)
from models import (
    BetError,
    GameState,
    Grid,
    SpinPlan,
    StateError,
    TimelineEvent,
    ToolSlot,
)
from scheduler import EventQueue, apply_event, plan_spin

logger = logging.getLogger(__name__)


def validate_bet(bet_amount, spin_count) -> None:
    """Reject a bet before a round is ever started with it."""
    if isinstance(bet_amount, bool) or not isinstance(bet_amount, (int, float)):
        raise BetError(f"bet amount must be numeric, got {bet_amount!r}")
    if not math.isfinite(bet_amount) or bet_amount <= 0:
        raise BetError(f"bet amount must be positive, got {bet_amount!r}")
    if isinstance(spin_count, bool) or not isinstance(spin_count, int) or spin_count <= 0:
        raise BetError(f"spin count must be a positive integer, got {spin_count!r}")


class BonusRound:
    """
    One mining bonus round.

    Spins are planned up front by the scheduler and then land on the
    authoritative grid event by event as the virtual clock advances. At most
    one spin is in flight; spin requests while busy are ignored.
    """

    def __init__(self, rng=None, rows: int = GRID_ROWS, cols: int = GRID_COLS,
                 tool_rows: int = TOOL_ROWS, queue: Optional[EventQueue] = None,
                 auto_first_spin: bool = False) -> None:
        validate_config()
        self.auto_first_spin = auto_first_spin
        self.rng = rng
        self.rows = rows
        self.cols = cols
        self.tool_rows = tool_rows
        self.queue = queue or EventQueue()
        self._spin_ids = 0
        self._clear_state()

    def _clear_state(self) -> None:
        self._game_state = GameState.BETTING
        self._grid: Grid = []
        self._tools: List[List[ToolSlot]] = []
        self._multipliers: List[int] = []
        self._bet_amount = 0.0
        self._spins_remaining = 0
        self._accumulated_win = 0.0
        self._total_win = 0.0
        self._multiplier_sum = 0
        self._earned_columns: List[int] = []
        self._timeline: List[TimelineEvent] = []
        self._active_spin: Optional[int] = None
        self._watchdog_handle: Optional[int] = None
        self._first_spin_handle: Optional[int] = None
        # everything this round put on the queue, which may be shared
        self._handles: List[int] = []

    # -- read-only views ---------------------------------------------------

    @property
    def game_state(self) -> GameState:
        return self._game_state

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def tools(self) -> List[List[ToolSlot]]:
        return self._tools

    @property
    def multipliers(self) -> List[int]:
        return list(self._multipliers)

    @property
    def bet_amount(self) -> float:
        return self._bet_amount

    @property
    def spins_remaining(self) -> int:
        return self._spins_remaining

    @property
    def accumulated_win(self) -> float:
        return self._accumulated_win

    @property
    def total_win(self) -> float:
        return self._total_win

    @property
    def multiplier_sum(self) -> int:
        return self._multiplier_sum

    @property
    def earned_columns(self) -> List[int]:
        return list(self._earned_columns)

    @property
    def timeline(self) -> List[TimelineEvent]:
        return list(self._timeline)

    @property
    def is_animating(self) -> bool:
        return self._active_spin is not None

    # -- lifecycle ---------------------------------------------------------

    def start_game(self, bet_amount: float, spin_count: int = MAX_SPINS) -> None:
        if self._game_state is not GameState.BETTING:
            raise StateError(f"cannot start a round from {self._game_state.value}")
        validate_bet(bet_amount, spin_count)

        self._grid = create_board(self.rows, self.cols, bet_amount, self.rng)
        self._multipliers = generate_multipliers(self.cols, self.rng)
        self._bet_amount = bet_amount
        self._spins_remaining = spin_count
        self._accumulated_win = 0.0
        self._total_win = 0.0
        self._tools = []
        self._timeline = []
        self._game_state = GameState.PLAYING
        logger.info("Round started: bet %.2f, %d spins, multipliers %s",
                    bet_amount, spin_count, self._multipliers)
        if self.auto_first_spin:
            self._first_spin_handle = self._schedule(FIRST_SPIN_DELAY, self._auto_spin)

    def _schedule(self, delay: int, callback, *args) -> int:
        handle = self.queue.schedule(delay, callback, *args)
        self._handles.append(handle)
        return handle

    def _auto_spin(self) -> None:
        self._first_spin_handle = None
        self.spin()

    def spin(self) -> Optional[SpinPlan]:
        """
        Start one spin. Returns the plan, or None when the request is ignored
        (not playing, a spin already in flight, or no spins left).

        If tool generation or planning raises, the spin is refunded, the
        round is left idle and the error propagates.
        """
        if self._game_state is not GameState.PLAYING or self.is_animating or self._spins_remaining <= 0:
            return None
        if self._first_spin_handle is not None:
            self.queue.cancel(self._first_spin_handle)
            self._first_spin_handle = None

        self._spins_remaining -= 1
        self._spin_ids += 1
        spin_id = self._spin_ids
        self._active_spin = spin_id

        try:
            tools = create_tools(self.tool_rows, self.cols, self.rng)
            plan = plan_spin(self._grid, tools)
        except Exception:
            logger.error("Spin %d failed while planning; refunding it", spin_id, exc_info=True)
            self._active_spin = None
            self._spins_remaining += 1
            raise
        self._tools = plan.tools
        self._timeline = plan.events

        for event in plan.events:
            self._schedule(event.time, self._land_event, spin_id, event)
        spin_length = max(MIN_SPIN_DURATION, plan.total_duration + SPIN_SETTLE_DURATION)
        self._schedule(spin_length, self._complete_spin, spin_id)
        self._watchdog_handle = self._schedule(WATCHDOG_TIMEOUT, self._watchdog, spin_id)

        logger.debug("Spin %d: %d events over %dms, %d spins left",
                     spin_id, len(plan.events), spin_length, self._spins_remaining)
        return plan

    def _land_event(self, spin_id: int, event: TimelineEvent) -> None:
        if spin_id != self._active_spin:
            logger.warning("Discarding stale %s event from spin %d", event.kind, spin_id)
            return
        result = apply_event(self._grid, event)
        self._grid = result.new_grid
        if result.money_earned:
            self._accumulated_win = round(self._accumulated_win + result.money_earned, 2)

    def _complete_spin(self, spin_id: int) -> None:
        if spin_id != self._active_spin:
            return
        self._active_spin = None
        if self._watchdog_handle is not None:
            self.queue.cancel(self._watchdog_handle)
            self._watchdog_handle = None
        self._check_round_end()

    def _watchdog(self, spin_id: int) -> None:
        if spin_id != self._active_spin:
            return
        logger.warning("Spin %d did not complete within %dms; clearing busy flag",
                       spin_id, WATCHDOG_TIMEOUT)
        self._watchdog_handle = None
        self._complete_spin(spin_id)

    def _check_round_end(self) -> None:
        if self._game_state is not GameState.PLAYING:
            return
        if self._spins_remaining == 0 or is_grid_cleared(self._grid):
            self._finish()

    def _finish(self) -> float:
        """Compute the payout and close the round."""
        if self._game_state is GameState.FINISHED:
            return self._total_win
        self._earned_columns = cleared_columns(self._grid)
        self._multiplier_sum = multiplier_sum(self._grid, self._multipliers)
        self._total_win = compute_total_win(self._accumulated_win, self._grid, self._multipliers)
        self._game_state = GameState.FINISHED
        logger.info("Round finished: accumulated %.2f x %d -> total %.2f (cleared columns %s)",
                    self._accumulated_win, max(self._multiplier_sum, 1),
                    self._total_win, self._earned_columns)
        return self._total_win

    def reset_game(self) -> None:
        """Back to BETTING; anything this round still has scheduled is dropped."""
        for handle in self._handles:
            self.queue.cancel(handle)
        self._clear_state()
        logger.info("Round reset")

    # -- clock -------------------------------------------------------------

    def advance(self, ms: int) -> None:
        self.queue.advance(ms)

    def run_until_idle(self) -> None:
        self.queue.run_until_idle()

    def play_spin(self) -> Optional[SpinPlan]:
        """Spin and let the clock run until the spin has fully landed."""
        plan = self.spin()
        if plan is not None:
            self.run_until_idle()
        return plan
