"""
Data models and state representations.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional


class BlockType(str, Enum):
    DIRT = "dirt"
    STONE = "stone"
    IRON_ORE = "iron_ore"
    GOLD_ORE = "gold_ore"
    DIAMOND_ORE = "diamond_ore"
    OBSIDIAN = "obsidian"


class ToolType(str, Enum):
    WOOD = "wood"
    STONE = "stone"
    GOLD = "gold"
    DIAMOND = "diamond"
    TNT = "tnt"
    EYE = "eye"  # cosmetic filler, never hits


class GameState(str, Enum):
    BETTING = "BETTING"
    PLAYING = "PLAYING"
    FINISHED = "FINISHED"


class EngineError(Exception):
    """Base engine error"""


class ConfigError(EngineError):
    """Static configuration tables are unusable"""


class BetError(EngineError):
    """Invalid bet amount or spin count"""


class StateError(EngineError):
    """Action performed in invalid round state"""


@dataclass
class Block:
    """One cell of the mining wall."""
    id: str
    type: BlockType
    max_health: int
    current_health: int
    value: float
    is_destroyed: bool = False

    def take_damage(self, damage: int) -> bool:
        """
        Subtract `damage` from health, clamping at 0.
        Returns True only on the hit that destroys the block; hits on an
        already-destroyed block change nothing.
        """
        if self.is_destroyed:
            return False
        self.current_health = max(0, self.current_health - damage)
        if self.current_health == 0:
            self.is_destroyed = True
            return True
        return False

    def clone(self) -> "Block":
        return replace(self)


Grid = List[List[Block]]  # row-major, row 0 is the top of the wall


def clone_grid(grid: Grid) -> Grid:
    return [[block.clone() for block in row] for row in grid]


@dataclass(frozen=True)
class Tool:
    id: str
    type: ToolType
    uses: int
    damage_per_hit: int

    @property
    def is_explosive(self) -> bool:
        return self.type is ToolType.TNT


@dataclass
class ToolSlot:
    """A cell of the tool-drop matrix; filled in by the scheduler each spin."""
    tool: Optional[Tool] = None
    planned_path: List[int] = field(default_factory=list)
    start_delay: int = 0


@dataclass(frozen=True)
class DestroyedBlock:
    row: int
    col: int
    value: float


@dataclass
class TimelineEvent:
    """
    One discrete, time-stamped mutation of the grid.

    `time` is the offset in simulated milliseconds from the start of the
    spin. `kind` is "hit" (one pick strike on `rows[0]`), "explosion"
    (a TNT resolution centred on `rows[0]` if any) or "fade" (a tool that
    found nothing to hit).
    """
    time: int
    kind: str
    col: int
    rows: List[int]
    tool_id: str
    tool_type: ToolType
    tool_row: int
    damage: int
    destroyed: List[DestroyedBlock] = field(default_factory=list)
    money: float = 0.0


@dataclass
class SpinPlan:
    """Everything one spin will do, computed up front."""
    tools: List[List[ToolSlot]]
    events: List[TimelineEvent]
    final_grid: Grid
    money_earned: float
    normal_phase_end: int
    total_duration: int
