"""Grid and tool builders shared by the test modules."""

from models import Block, BlockType, Tool, ToolSlot


def build_grid(healths, values=None):
    """
    Grid from a matrix of remaining healths (0 means already destroyed).
    Values default to 10.0 per block.
    """
    grid = []
    for r, row in enumerate(healths):
        blocks = []
        for c, health in enumerate(row):
            value = values[r][c] if values else 10.0
            blocks.append(
                Block(
                    id=f"b{r}{c}",
                    type=BlockType.STONE,
                    max_health=max(health, 1),
                    current_health=health,
                    value=value,
                    is_destroyed=health == 0,
                )
            )
        grid.append(blocks)
    return grid


def healths(grid):
    return [[b.current_health for b in row] for row in grid]


def tool(tool_type, uses, damage, tool_id=None):
    return Tool(id=tool_id or f"{tool_type.value}-{uses}-{damage}",
                type=tool_type, uses=uses, damage_per_hit=damage)


def slots(matrix):
    """Tool-slot matrix from a matrix of Tool | None."""
    return [[ToolSlot(tool=t) for t in row] for row in matrix]


class SequenceRandom:
    """Stand-in RNG returning a fixed sequence of random() draws."""

    def __init__(self, draws):
        self._draws = list(draws)

    def random(self):
        return self._draws.pop(0)
