"""
Game configuration and constants.
"""

from models import BlockType, ConfigError, ToolType

# Block health and base payout (value is per BASE_BET_UNIT of bet)
BLOCKS_CONFIG = {
    BlockType.DIRT: {"health": 1, "value": 5.0},
    BlockType.STONE: {"health": 3, "value": 10.0},
    BlockType.IRON_ORE: {"health": 5, "value": 25.0},
    BlockType.GOLD_ORE: {"health": 8, "value": 50.0},
    BlockType.DIAMOND_ORE: {"health": 12, "value": 100.0},
    BlockType.OBSIDIAN: {"health": 24, "value": 200.0},
}

# Tool hit budget and damage per hit
TOOLS_CONFIG = {
    ToolType.WOOD: {"uses": 2, "damage": 1},
    ToolType.STONE: {"uses": 3, "damage": 2},
    ToolType.GOLD: {"uses": 5, "damage": 1},
    ToolType.DIAMOND: {"uses": 8, "damage": 4},
    ToolType.TNT: {"uses": 1, "damage": 10},
    ToolType.EYE: {"uses": 0, "damage": 0},
}

# Weighted generation tables (weights need not sum to 1)
BLOCK_WEIGHTS = {
    BlockType.DIRT: 0.10,
    BlockType.STONE: 0.20,
    BlockType.IRON_ORE: 0.10,
    BlockType.GOLD_ORE: 0.20,
    BlockType.DIAMOND_ORE: 0.40,
    BlockType.OBSIDIAN: 0.05,
}

TOOL_WEIGHTS = {
    ToolType.WOOD: 0.40,
    ToolType.STONE: 0.30,
    ToolType.GOLD: 0.15,
    ToolType.DIAMOND: 0.05,
    ToolType.TNT: 0.10,
    ToolType.EYE: 0.05,
}

# Column multipliers, skewed toward low values
MULTIPLIER_WEIGHTS = {
    1: 30,
    2: 22,
    3: 15,
    4: 10,
    5: 8,
    6: 6,
    7: 4,
    8: 3,
    9: 1.5,
    10: 0.5,
}

EMPTY_SLOT_PROBABILITY = 0.3

# Board geometry
GRID_ROWS = 5
GRID_COLS = 5
TOOL_ROWS = 2

# Economy
BASE_BET_UNIT = 0.20
BET_LEVELS = [0.20, 0.40, 0.60, 1.00, 2.00, 5.00]
MAX_SPINS = 5
BONUS_SPIN_OUTCOMES = [7, 10, 13]  # "pick an egg" free-spin awards

# Timing, in simulated milliseconds
TOOL_HIT_DURATION = 800
INTER_TOOL_GAP = 200
EXPLOSION_DURATION = 800
POST_EXPLOSION_GAP = 200
EMPTY_TOOL_DURATION = 300  # a tool with nothing left to hit still fades out
SPIN_SETTLE_DURATION = 500
MIN_SPIN_DURATION = 1000
WATCHDOG_TIMEOUT = 20000
FIRST_SPIN_DELAY = 500  # auto_first_spin: the opening spin starts on its own

# Block colours for the wall plot, also used as the accent colour in charts
COLOR_MAP = {
    BlockType.DIRT.value: "#8b5a2b",
    BlockType.STONE.value: "#8c8c8c",
    BlockType.IRON_ORE.value: "#d8b4a0",
    BlockType.GOLD_ORE.value: "#f4c430",
    BlockType.DIAMOND_ORE.value: "#4de1e1",
    BlockType.OBSIDIAN.value: "#3b2a4f",
}

TOOL_ICONS = {
    ToolType.WOOD: "🪵",
    ToolType.STONE: "⛏️",
    ToolType.GOLD: "🟨",
    ToolType.DIAMOND: "💎",
    ToolType.TNT: "🧨",
    ToolType.EYE: "👁️",
}

# UI Settings
MONTE_CARLO_ROUNDS = 500


def validate_weights(name: str, weights: dict) -> None:
    """Raise ConfigError unless `weights` is a usable weighted table."""
    if not weights:
        raise ConfigError(f"{name} is empty")
    negative = [k for k, w in weights.items() if w < 0]
    if negative:
        raise ConfigError(f"{name} has negative weights for {negative}")
    if sum(weights.values()) <= 0:
        raise ConfigError(f"{name} weights sum to zero")


def validate_config() -> None:
    """
    Check every static table once at startup.
    A failure here is fatal: the engine never recovers from a bad table.
    """
    validate_weights("BLOCK_WEIGHTS", BLOCK_WEIGHTS)
    validate_weights("TOOL_WEIGHTS", TOOL_WEIGHTS)
    validate_weights("MULTIPLIER_WEIGHTS", MULTIPLIER_WEIGHTS)

    for block_type in BLOCK_WEIGHTS:
        cfg = BLOCKS_CONFIG.get(block_type)
        if cfg is None:
            raise ConfigError(f"no BLOCKS_CONFIG entry for {block_type.value}")
        if cfg["health"] <= 0 or cfg["value"] < 0:
            raise ConfigError(f"bad health/value for {block_type.value}: {cfg}")
        if block_type.value not in COLOR_MAP:
            raise ConfigError(f"no COLOR_MAP entry for {block_type.value}")

    for tool_type in TOOL_WEIGHTS:
        cfg = TOOLS_CONFIG.get(tool_type)
        if cfg is None:
            raise ConfigError(f"no TOOLS_CONFIG entry for {tool_type.value}")
        if cfg["uses"] < 0 or cfg["damage"] < 0:
            raise ConfigError(f"bad uses/damage for {tool_type.value}: {cfg}")

    bad_mults = [m for m in MULTIPLIER_WEIGHTS if not 1 <= m <= 10]
    if bad_mults:
        raise ConfigError(f"multipliers out of range 1..10: {bad_mults}")

    if not 0 <= EMPTY_SLOT_PROBABILITY < 1:
        raise ConfigError("EMPTY_SLOT_PROBABILITY must be in [0, 1)")
    if BASE_BET_UNIT <= 0:
        raise ConfigError("BASE_BET_UNIT must be positive")
