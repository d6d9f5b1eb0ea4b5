import random

import pytest

from helpers import tool
from models import ToolType


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def wood():
    return tool(ToolType.WOOD, 2, 1)


@pytest.fixture
def tnt():
    return tool(ToolType.TNT, 1, 10)
