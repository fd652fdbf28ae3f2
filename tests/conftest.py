"""Pytest configuration to ensure the `src` package layout is importable.

This adds the `src/` directory to `sys.path` so tests can import the
`britannia` package (e.g., `from britannia.domain import turn`) without
requiring an editable install in CI.  It also provides a small map shared
by the engine tests.
"""

import sys
from pathlib import Path

import pytest

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from britannia.domain import actions  # noqa: E402
from britannia.domain.dispatcher import dispatch  # noqa: E402
from britannia.domain.enums import BuildingType  # noqa: E402
from britannia.domain.models import Character, CountyState, GameState, Kingdom  # noqa: E402
from britannia.domain.setup import create_initial_game_state  # noqa: E402

# YORK - LEEDS, YORK - HULL, YORK - LINCOLN, LINCOLN - DERBY
ADJACENCY = {
    "YORK": ("HULL", "LEEDS", "LINCOLN"),
    "LEEDS": ("YORK",),
    "HULL": ("YORK",),
    "LINCOLN": ("DERBY", "YORK"),
    "DERBY": ("LINCOLN",),
}


def make_counties() -> list[CountyState]:
    return [
        CountyState(
            id="YORK",
            name="York",
            buildings={BuildingType.FARM: 1, BuildingType.LUMBER_CAMP: 1},
            population=60,
        ),
        CountyState(id="LEEDS", name="Leeds", buildings={BuildingType.FARM: 1}, population=20),
        CountyState(id="HULL", name="Hull", population=10),
        CountyState(
            id="LINCOLN",
            name="Lincoln",
            buildings={BuildingType.FARM: 2, BuildingType.PALISADE: 5},
            road_level=2,
            population=60,
        ),
        CountyState(id="DERBY", name="Derby", population=15),
    ]


def make_setup_state() -> GameState:
    return create_initial_game_state(
        make_counties(),
        kingdoms=[
            Kingdom(id="NORTHUMBRIA", name="Northumbria", color="#3355aa", county_ids=("YORK", "LEEDS")),
            Kingdom(id="MERCIA", name="Mercia", color="#aa3333", county_ids=("LINCOLN",)),
        ],
        characters=[
            Character(id="edwin", name="Edwin", start_county_id="YORK"),
            Character(id="penda", name="Penda", start_county_id="DERBY"),
        ],
        adjacency=ADJACENCY,
    )


@pytest.fixture
def setup_state() -> GameState:
    return make_setup_state()


@pytest.fixture
def playing_state() -> GameState:
    """Edwin of Northumbria, turn 1, starting resources."""

    return dispatch(make_setup_state(), actions.BeginGameWithCharacter("edwin"))
