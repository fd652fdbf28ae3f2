"""Tests for turn resolution."""

from __future__ import annotations

import logging
from dataclasses import replace

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from britannia.domain import actions
from britannia.domain.dispatcher import dispatch
from britannia.domain.economy import get_county_derived_stats
from britannia.domain.enums import BuildingType, GamePhase, MacroOrderCategory, ResourceKey, SpecialTrack
from britannia.domain.models import CountyState, GameState, MacroOrder, ResourceStockpile
from britannia.domain.resources import STORABLE_RESOURCE_KEYS, get_storage_caps_for_warehouse_level
from britannia.domain.rules_config import DEFAULT_RULES, RulesConfig
from britannia.domain.turn import resolve_turn

G = ResourceKey.GOLD
W = ResourceKey.WOOD


def _end_turns(state: GameState, count: int) -> GameState:
    for _ in range(count):
        state = dispatch(state, actions.EndTurn())
    return state


def test_quiet_turn_credits_yields(playing_state):
    after = resolve_turn(playing_state)

    assert after.turn_number == 2
    assert after.player_resources.gold == 516
    assert after.player_resources.wood == 274
    assert after.player_resources.population == 80
    assert after.last_turn_report.turn_number == 2
    assert after.last_turn_report.resource_deltas == {G: 16, W: 24}
    assert after.last_turn_report.lines[0] == "York (YORK): +8 Gold, +6 Wood (County base income)"
    assert playing_state.turn_number == 1


def test_resolution_is_deterministic(playing_state):
    queued = dispatch(playing_state, actions.QueueTrackUpgrade("YORK", BuildingType.LUMBER_CAMP))
    assert resolve_turn(queued) == resolve_turn(queued)


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture], max_examples=30)
@given(gold=st.integers(min_value=0, max_value=5_000), wood=st.integers(min_value=0, max_value=5_000))
def test_storage_never_exceeds_caps_and_waste_is_reported(playing_state, gold, wood):
    faction = playing_state.player_faction_id
    state = replace(
        playing_state,
        resources_by_kingdom_id={faction: replace(playing_state.player_resources, gold=gold, wood=wood)},
    )
    after = resolve_turn(state)
    caps = get_storage_caps_for_warehouse_level(after.warehouse_level)

    for key in STORABLE_RESOURCE_KEYS:
        assert after.player_resources.get(key) <= caps[key]
    assert after.last_turn_report.wasted_delta.get(G, 0) == max(0, gold + 16 - caps[G])
    assert after.last_turn_report.wasted_delta.get(W, 0) == max(0, wood + 24 - caps[W])
    assert after == resolve_turn(state)


def test_waste_line_precedes_contributions(playing_state):
    faction = playing_state.player_faction_id
    state = replace(playing_state, resources_by_kingdom_id={faction: ResourceStockpile(gold=995)})
    after = resolve_turn(state)

    assert after.player_resources.gold == 1_000
    assert after.last_turn_report.wasted_delta == {G: 11}
    assert after.last_turn_report.lines[0] == "Storage full: +11 Gold wasted"


def test_completed_upgrade_yields_the_same_turn(playing_state):
    queued = dispatch(playing_state, actions.QueueTrackUpgrade("YORK", BuildingType.LUMBER_CAMP))
    assert queued.player_resources.gold == 400

    after = resolve_turn(queued)

    assert after.counties["YORK"].level_of(BuildingType.LUMBER_CAMP) == 2
    assert after.player_resources.gold == 416
    assert after.player_resources.wood == 250 + 6 + 24 + 6
    assert after.last_turn_report.lines[0] == "York (YORK): Lumber Camp reached L2"
    assert "YORK" not in after.build_queue_by_county_id


def test_levels_rise_at_most_one_per_turn(playing_state):
    state = dispatch(playing_state, actions.QueueTrackUpgrade("YORK", BuildingType.LUMBER_CAMP))
    state = dispatch(state, actions.QueueTrackUpgrade("YORK", BuildingType.LUMBER_CAMP))

    first = resolve_turn(state)
    second = resolve_turn(first)

    assert first.counties["YORK"].level_of(BuildingType.LUMBER_CAMP) == 2
    assert second.counties["YORK"].level_of(BuildingType.LUMBER_CAMP) == 3


def test_warehouse_completion_raises_caps(playing_state):
    state = dispatch(playing_state, actions.QueueWarehouseUpgrade())
    after = resolve_turn(state)

    assert after.warehouse_level == 1
    assert after.global_build_queue.active is None
    assert "Warehouse reached L1" in after.last_turn_report.lines


def test_claim_transfers_neutral_county(playing_state):
    state = dispatch(playing_state, actions.QueueClaimCounty("YORK", "HULL"))
    assert state.counties["YORK"].population == 35

    first = resolve_turn(state)
    assert "HULL" not in first.owned_county_ids

    second = resolve_turn(first)
    hull = second.counties["HULL"]
    assert hull.owner_id == "NORTHUMBRIA"
    assert hull.road_level == 1
    assert {b: level for b, level in hull.buildings.items() if level} == {BuildingType.FARM: 1}
    assert hull.population == 30
    assert "HULL" in second.owned_county_ids
    assert "HULL" in second.discovered_county_ids
    assert second.last_turn_report.lines[0] == "Claimed Hull (HULL)"
    assert second.player_resources.population == 35 + 20 + 30
    assert "HULL" not in second.build_queue_by_county_id


def test_conquest_damages_and_reveals_neighbours(playing_state):
    state = dispatch(playing_state, actions.QueueConquerCounty("YORK", "LINCOLN"))
    assert state.build_queue_by_county_id["LINCOLN"].active.turns_remaining == 3

    after = _end_turns(state, 3)
    lincoln = after.counties["LINCOLN"]

    assert lincoln.owner_id == "NORTHUMBRIA"
    assert lincoln.level_of(BuildingType.FARM) == 1
    assert lincoln.level_of(BuildingType.PALISADE) == 3
    assert lincoln.road_level == 1
    assert lincoln.population == 30
    assert "DERBY" in after.discovered_county_ids
    assert after.last_turn_report.lines[0] == "Conquered Lincoln (LINCOLN)"


def test_population_is_clamped_to_farm_cap(playing_state):
    york = playing_state.counties["YORK"]
    state = replace(playing_state, counties={**playing_state.counties, "YORK": replace(york, population=130)})
    after = resolve_turn(state)

    assert after.counties["YORK"].population == 100
    assert "York (YORK): Population cap reached (-30 Population)" in after.last_turn_report.lines
    for county_id in after.owned_county_ids:
        stats = get_county_derived_stats(after.counties[county_id])
        assert 0 <= stats.population <= stats.population_cap


def _with_homesteads(state: GameState, population: int) -> GameState:
    york = state.counties["YORK"]
    york = replace(york, buildings={**york.buildings, BuildingType.HOMESTEADS: 1}, population=population)
    return replace(state, counties={**state.counties, "YORK": york})


def test_homesteads_grow_county_and_faction_population(playing_state):
    after = resolve_turn(_with_homesteads(playing_state, 60))

    assert after.counties["YORK"].population == 70
    assert after.counties["LEEDS"].population == 20
    assert after.player_resources.population == 90
    assert after.last_turn_report.resource_deltas[ResourceKey.POPULATION] == 10


def test_homestead_growth_stops_at_farm_cap(playing_state):
    after = resolve_turn(_with_homesteads(playing_state, 95))

    assert after.counties["YORK"].population == 100
    assert after.player_resources.population == 120
    assert resolve_turn(after).counties["YORK"].population == 100


def test_owned_roads_are_kept_at_level_one(playing_state):
    leeds = playing_state.counties["LEEDS"]
    state = replace(playing_state, counties={**playing_state.counties, "LEEDS": replace(leeds, road_level=0)})
    assert resolve_turn(state).counties["LEEDS"].road_level == 1


def test_invalid_pending_orders_are_dropped_with_warning(playing_state, caplog):
    orders = (
        MacroOrder(id="o1", category=MacroOrderCategory.BUILD, county_id="YORK", issued_on_turn=1),
        MacroOrder(id="o2", category=MacroOrderCategory.TROOPS, county_id="ATLANTIS", issued_on_turn=1),
    )
    state = replace(playing_state, pending_orders=orders)

    with caplog.at_level(logging.WARNING, logger="britannia.domain.turn"):
        after = resolve_turn(state)

    assert after.pending_orders == ()
    assert after.turn_number == 2
    assert "Unknown county: ATLANTIS" in caplog.text


def test_report_is_limited_to_eight_lines(playing_state):
    counties = {
        f"C{index}": CountyState(
            id=f"C{index}", name=f"County {index}", buildings={BuildingType.FARM: 1}, road_level=1, population=10
        )
        for index in range(10)
    }
    state = replace(playing_state, counties=counties, owned_county_ids=tuple(counties))
    assert len(resolve_turn(state).last_turn_report.lines) == 8


def _market_rules(base_gold: int) -> RulesConfig:
    catalog = DEFAULT_RULES.catalog
    market = replace(
        catalog.buildings[BuildingType.MARKET],
        base_cost={G: base_gold},
        yields_per_turn_per_level={G: 2},
        workforce_per_level=0,
    )
    return replace(
        DEFAULT_RULES,
        catalog=replace(catalog, buildings={**catalog.buildings, BuildingType.MARKET: market}),
        economy=replace(DEFAULT_RULES.economy, cost_step_per_level=0.0, base_county_yield={}),
    )


def _market_state() -> GameState:
    county = CountyState(
        id="AVON",
        name="Avon",
        owner_id="WESSEX",
        buildings={BuildingType.FARM: 1, BuildingType.MARKET: 1},
        road_level=1,
        population=10,
    )
    return GameState(
        phase=GamePhase.PLAYING,
        player_faction_id="WESSEX",
        owned_county_ids=("AVON",),
        counties={"AVON": county},
        resources_by_kingdom_id={"WESSEX": ResourceStockpile(gold=100)},
    )


def test_market_upgrade_too_expensive_is_rejected():
    state = _market_state()
    after = dispatch(state, actions.QueueTrackUpgrade("AVON", BuildingType.MARKET), rules=_market_rules(150))

    assert after is state
    assert after.player_resources.gold == 100


def test_market_upgrade_completes_and_credits_market():
    rules = _market_rules(80)
    state = dispatch(_market_state(), actions.QueueTrackUpgrade("AVON", BuildingType.MARKET), rules=rules)
    assert state.build_queue_by_county_id["AVON"].active.turns_remaining == 1

    after = dispatch(state, actions.EndTurn(), rules=rules)

    assert after.counties["AVON"].level_of(BuildingType.MARKET) == 2
    assert after.player_resources.gold == 100 - 80 + 4
    assert after.turn_number == 2
    assert "Avon (AVON): +4 Gold (Market L2)" in after.last_turn_report.lines


def test_roads_track_upgrades_county_roads(playing_state):
    state = dispatch(playing_state, actions.QueueTrackUpgrade("YORK", SpecialTrack.ROADS))
    after = resolve_turn(state)
    assert after.counties["YORK"].road_level == 2
    assert after.last_turn_report.lines[0] == "York (YORK): Roads reached L2"
