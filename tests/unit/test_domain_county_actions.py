"""Tests for claim and conquest rules."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from britannia.domain import county_actions
from britannia.domain.enums import BuildingType, ResourceKey
from britannia.domain.models import CountyState


def test_claim_has_fixed_cost_and_duration():
    assert county_actions.get_claim_county_cost() == {ResourceKey.GOLD: 120, ResourceKey.WOOD: 80}
    assert county_actions.get_claim_county_turns(0) == 2
    assert county_actions.get_claim_county_turns(15) == 2


def test_conquer_duration_follows_palisade_and_roads():
    assert county_actions.get_conquer_county_turns(0, 0) == 2
    assert county_actions.get_conquer_county_turns(5, 0) == 3
    assert county_actions.get_conquer_county_turns(20, 0) == 6
    assert county_actions.get_conquer_county_turns(20, 10) == 5
    assert county_actions.get_conquer_county_turns(0, 10) == 2


@given(st.integers(min_value=0, max_value=20), st.integers(min_value=0, max_value=20))
def test_conquer_duration_is_clamped(palisade, roads):
    assert 2 <= county_actions.get_conquer_county_turns(palisade, roads) <= 6


def test_conquest_damage_floors_levels_and_keeps_a_farm():
    damaged = county_actions.apply_conquest_damage_to_buildings(
        {BuildingType.FARM: 1, BuildingType.LUMBER_CAMP: 3, BuildingType.PALISADE: 5}
    )
    assert damaged[BuildingType.FARM] == 1
    assert damaged[BuildingType.LUMBER_CAMP] == 2
    assert damaged[BuildingType.PALISADE] == 3
    assert damaged[BuildingType.MARKET] == 0


def test_conquest_halves_roads_and_population_with_floors():
    assert county_actions.get_post_conquest_road_level(5) == 2
    assert county_actions.get_post_conquest_road_level(1) == 1
    assert county_actions.get_post_conquest_population(100) == 50
    assert county_actions.get_post_conquest_population(30) == 20


def test_apply_conquest_changes_owner():
    county = CountyState(
        id="LINCOLN",
        name="Lincoln",
        owner_id="MERCIA",
        buildings={BuildingType.FARM: 2, BuildingType.PALISADE: 5},
        road_level=2,
        population=60,
    )
    conquered = county_actions.apply_conquest(county, "NORTHUMBRIA")

    assert conquered.owner_id == "NORTHUMBRIA"
    assert conquered.level_of(BuildingType.FARM) == 1
    assert conquered.level_of(BuildingType.PALISADE) == 3
    assert conquered.road_level == 1
    assert conquered.population == 30
    assert county.owner_id == "MERCIA"


def test_apply_claim_resets_county():
    county = CountyState(id="HULL", name="Hull", buildings={BuildingType.MARKET: 4}, road_level=6, population=80)
    claimed = county_actions.apply_claim(county, "NORTHUMBRIA")

    assert claimed.owner_id == "NORTHUMBRIA"
    assert {b: lvl for b, lvl in claimed.buildings.items() if lvl} == {BuildingType.FARM: 1}
    assert claimed.road_level == 1
    assert claimed.population == 30
