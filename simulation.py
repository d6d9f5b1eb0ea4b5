"""
Headless round play and Monte Carlo simulation of whole bonus rounds.
"""

import random
from dataclasses import dataclass, field
from typing import List

from config import MAX_SPINS
from models import GameState
from round_engine import BonusRound


@dataclass
class RoundSummary:
    """Outcome of one bonus round played to completion."""
    bet_amount: float
    spins_granted: int
    spins_used: int
    accumulated_win: float
    multiplier_sum: int
    total_win: float
    cleared_columns: List[int] = field(default_factory=list)
    blocks_destroyed: int = 0
    board_cleared: bool = False


def play_round(bet_amount: float, spin_count: int = MAX_SPINS, rng=None) -> RoundSummary:
    """
    Play one round from BETTING to FINISHED, landing every spin before the
    next one starts.
    """
    game = BonusRound(rng=rng)
    game.start_game(bet_amount, spin_count)

    while game.game_state is GameState.PLAYING:
        if game.play_spin() is None:
            # Nothing left to spin but the round did not close; should not happen
            break

    blocks_destroyed = sum(block.is_destroyed for row in game.grid for block in row)
    return RoundSummary(
        bet_amount=bet_amount,
        spins_granted=spin_count,
        spins_used=spin_count - game.spins_remaining,
        accumulated_win=game.accumulated_win,
        multiplier_sum=game.multiplier_sum,
        total_win=game.total_win,
        cleared_columns=game.earned_columns,
        blocks_destroyed=blocks_destroyed,
        board_cleared=blocks_destroyed == game.rows * game.cols,
    )


def simulate_rounds(
    n_rounds: int = 1000,
    bet_amount: float = 0.20,
    spin_count: int = MAX_SPINS,
    rng=None,
) -> List[RoundSummary]:
    """
    Monte Carlo: play `n_rounds` independent rounds.
    Pass a seeded `random.Random` for a reproducible batch.
    """
    rng = rng or random.Random()
    return [play_round(bet_amount, spin_count, rng) for _ in range(n_rounds)]
