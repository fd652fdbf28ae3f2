"""Claim and conquest rules: costs, durations, and post-transition damage."""

from __future__ import annotations

import math
from dataclasses import replace

from britannia.domain.enums import BuildingType
from britannia.domain.models import BuildingLevels, CountyState, ResourceDelta
from britannia.domain.rules_config import DEFAULT_RULES, RulesConfig
from britannia.domain.tracks import get_population_cap_for_farm_level


def get_claim_county_cost(*, rules: RulesConfig = DEFAULT_RULES) -> ResourceDelta:
    return dict(rules.county_actions.claim_cost)


def get_claim_county_turns(source_road_level: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Claims take a fixed number of turns; the source road level is ignored."""

    del source_road_level
    return rules.county_actions.claim_turns


def get_conquer_county_cost(*, rules: RulesConfig = DEFAULT_RULES) -> ResourceDelta:
    return dict(rules.county_actions.conquer_cost)


def get_conquer_county_turns(
    target_palisade_level: int,
    source_road_level: int,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    """Base turns grow with the target's palisade; good roads shave one off."""

    actions = rules.county_actions
    turns = actions.conquer_base_turns + max(0, target_palisade_level) // actions.conquer_palisade_levels_per_turn
    if source_road_level >= actions.conquer_road_bonus_level:
        turns -= 1
    return max(actions.conquer_min_turns, min(actions.conquer_max_turns, turns))


def apply_conquest_damage_to_buildings(
    buildings: BuildingLevels, *, rules: RulesConfig = DEFAULT_RULES
) -> BuildingLevels:
    """Every level loses 30% (floored); FARM never drops below 1."""

    retention = rules.county_actions.conquest_level_retention
    damaged: BuildingLevels = {}
    for building in rules.catalog.building_order:
        level = max(0, buildings.get(building, 0))
        reduced = math.floor(level * retention)
        damaged[building] = max(1, reduced) if building is BuildingType.FARM else max(0, reduced)
    return damaged


def get_post_conquest_road_level(road_level: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    return max(1, math.floor(max(0, road_level) * rules.county_actions.conquest_road_retention))


def get_post_conquest_population(population: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    actions = rules.county_actions
    return max(
        actions.conquest_population_floor,
        math.floor(max(0, population) * actions.conquest_population_retention),
    )


def apply_conquest(county: CountyState, new_owner_id: str, *, rules: RulesConfig = DEFAULT_RULES) -> CountyState:
    """Return the county as it stands after being conquered."""

    return replace(
        county,
        owner_id=new_owner_id,
        buildings=apply_conquest_damage_to_buildings(county.buildings, rules=rules),
        road_level=get_post_conquest_road_level(county.road_level, rules=rules),
        population=get_post_conquest_population(county.population, rules=rules),
    )


def apply_claim(county: CountyState, new_owner_id: str, *, rules: RulesConfig = DEFAULT_RULES) -> CountyState:
    """Return the county as it stands after a claim: a single FARM, road 1."""

    buildings: BuildingLevels = {building: 0 for building in rules.catalog.building_order}
    buildings[BuildingType.FARM] = 1
    population_cap = get_population_cap_for_farm_level(1, rules=rules)
    return replace(
        county,
        owner_id=new_owner_id,
        buildings=buildings,
        road_level=1,
        population=min(rules.county_actions.claim_population_ceiling, population_cap),
    )
