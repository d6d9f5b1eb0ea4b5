"""
Bonus analytics: exact expectations from the configuration tables and
statistics over simulated rounds.
"""

from dataclasses import asdict
from fractions import Fraction
from typing import Dict, List

import pandas as pd

from config import (
    BASE_BET_UNIT,
    BLOCK_WEIGHTS,
    BLOCKS_CONFIG,
    EMPTY_SLOT_PROBABILITY,
    GRID_COLS,
    MULTIPLIER_WEIGHTS,
    TOOL_WEIGHTS,
    TOOLS_CONFIG,
)
from models import BlockType, Grid, TimelineEvent, ToolType
from simulation import RoundSummary


def _exact(x) -> Fraction:
    # str() first so 0.1 becomes 1/10 rather than its binary expansion
    return Fraction(str(x))


def _normalise(weights: dict) -> Dict:
    total = sum(_exact(w) for w in weights.values())
    return {k: _exact(w) / total for k, w in weights.items()}


def block_type_probabilities() -> Dict[BlockType, Fraction]:
    return _normalise(BLOCK_WEIGHTS)


def tool_type_probabilities() -> Dict[ToolType, Fraction]:
    """P(a given tool slot holds each tool type); the remainder is an empty slot."""
    filled = 1 - _exact(EMPTY_SLOT_PROBABILITY)
    return {t: filled * p for t, p in _normalise(TOOL_WEIGHTS).items()}


def expected_multiplier() -> Fraction:
    return sum(m * p for m, p in _normalise(MULTIPLIER_WEIGHTS).items())


def expected_block_value(bet_amount: float = BASE_BET_UNIT) -> Fraction:
    """Expected payout of a single freshly generated block at this bet."""
    scale = _exact(bet_amount) / _exact(BASE_BET_UNIT)
    return sum(
        p * _exact(BLOCKS_CONFIG[b]["value"]) * scale
        for b, p in block_type_probabilities().items()
    )


def expected_slot_damage() -> Fraction:
    """
    Expected raw damage budget dropped into one tool slot, counting a pick
    as uses x damage and a TNT as a single blast on its own column.
    """
    return sum(
        p * TOOLS_CONFIG[t]["uses"] * TOOLS_CONFIG[t]["damage"]
        for t, p in tool_type_probabilities().items()
    )


def rounds_frame(results: List[RoundSummary]) -> pd.DataFrame:
    rows = []
    for r in results:
        row = asdict(r)
        row["cleared_columns"] = len(r.cleared_columns)
        rows.append(row)
    return pd.DataFrame(rows)


def summarize_rounds(results: List[RoundSummary]) -> Dict[str, float]:
    """Headline numbers for a batch of simulated rounds."""
    if not results:
        return {"rounds": 0}

    df = rounds_frame(results)
    return {
        "rounds": len(df),
        "mean_total_win": float(df["total_win"].mean()),
        "max_total_win": float(df["total_win"].max()),
        "mean_accumulated_win": float(df["accumulated_win"].mean()),
        "mean_return_per_bet": float((df["total_win"] / df["bet_amount"]).mean()),
        "multiplied_rate": float((df["multiplier_sum"] > 0).mean()),
        "board_clear_rate": float(df["board_cleared"].mean()),
        "mean_spins_used": float(df["spins_used"].mean()),
        "mean_blocks_destroyed": float(df["blocks_destroyed"].mean()),
    }


def column_clear_rates(results: List[RoundSummary], cols: int = GRID_COLS) -> Dict[int, float]:
    """Fraction of rounds in which each column ended fully cleared."""
    if not results:
        return {c: 0.0 for c in range(cols)}
    counts = {c: 0 for c in range(cols)}
    for r in results:
        for c in r.cleared_columns:
            counts[c] += 1
    return {c: counts[c] / len(results) for c in range(cols)}


def payout_distribution(results: List[RoundSummary], bins: List[float] = None) -> pd.DataFrame:
    """Share of rounds by total win expressed in multiples of the bet."""
    bins = bins or [0, 1, 5, 10, 25, 50, 100, float("inf")]
    df = rounds_frame(results)
    if df.empty:
        return pd.DataFrame(columns=["bucket", "share"])
    x_bet = df["total_win"] / df["bet_amount"]
    buckets = pd.cut(x_bet, bins=bins, right=False)
    share = buckets.value_counts(normalize=True, sort=False)
    return pd.DataFrame({"bucket": share.index.astype(str), "share": share.values})


def timeline_frame(events: List[TimelineEvent]) -> pd.DataFrame:
    rows = []
    for e in events:
        rows.append(
            {
                "time_ms": e.time,
                "kind": e.kind,
                "column": e.col,
                "rows": ", ".join(str(r) for r in e.rows),
                "tool": e.tool_type.value,
                "tool_row": e.tool_row,
                "damage": e.damage,
                "destroyed": len(e.destroyed),
                "money": e.money,
            }
        )
    return pd.DataFrame(rows, columns=[
        "time_ms", "kind", "column", "rows", "tool", "tool_row", "damage", "destroyed", "money",
    ])


def grid_frame(grid: Grid) -> pd.DataFrame:
    """Long-form view of the wall: one row per block."""
    rows = []
    for r, blocks in enumerate(grid):
        for c, block in enumerate(blocks):
            rows.append(
                {
                    "row": r,
                    "col": c,
                    "type": block.type.value,
                    "health": block.current_health,
                    "max_health": block.max_health,
                    "value": block.value,
                    "destroyed": block.is_destroyed,
                }
            )
    return pd.DataFrame(rows)
