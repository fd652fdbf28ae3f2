"""Track catalog: cost, duration, and yield scaling for every upgrade track."""

from __future__ import annotations

from collections.abc import Mapping

from britannia.domain.enums import BuildingType, ResourceKey, SpecialTrack, Track, TrackKind, track_kind
from britannia.domain.models import BuildingLevels, ResourceDelta
from britannia.domain.resources import round_half_up
from britannia.domain.rules_config import DEFAULT_RULES, BuildingDefinition, RulesConfig

SPECIAL_TRACK_LABELS: dict[SpecialTrack, str] = {
    SpecialTrack.ROADS: "Roads",
    SpecialTrack.WAREHOUSE: "Warehouse",
}


def get_building_definition(
    building: BuildingType, *, rules: RulesConfig = DEFAULT_RULES
) -> BuildingDefinition:
    return rules.catalog.buildings[building]


def get_track_label(track: Track, *, rules: RulesConfig = DEFAULT_RULES) -> str:
    if isinstance(track, BuildingType):
        return get_building_definition(track, rules=rules).label
    return SPECIAL_TRACK_LABELS[track]


def create_empty_building_levels(*, rules: RulesConfig = DEFAULT_RULES) -> BuildingLevels:
    return {building: 0 for building in rules.catalog.building_order}


def clamp_track_level(level: float, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    return max(0, min(rules.economy.max_track_level, int(level // 1)))


# ---------------------------------------------------------------------------
# Buildings


def get_building_upgrade_cost(
    building: BuildingType, level: int, *, rules: RulesConfig = DEFAULT_RULES
) -> ResourceDelta:
    """Cost to reach ``level``: base cost grown 25% per level above the first."""

    definition = get_building_definition(building, rules=rules)
    multiplier = 1 + (max(1, level) - 1) * rules.economy.cost_step_per_level
    cost: ResourceDelta = {}
    for key, base in definition.base_cost.items():
        if base == 0:
            continue
        cost[key] = max(1, round_half_up(base * multiplier))
    return cost


def get_building_upgrade_turns(level: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    return 1 + (max(1, level) - 1) // rules.economy.levels_per_extra_turn


def get_building_yield_for_level(
    building: BuildingType, level: int, *, rules: RulesConfig = DEFAULT_RULES
) -> ResourceDelta:
    if level <= 0:
        return {}
    definition = get_building_definition(building, rules=rules)
    return {key: amount * level for key, amount in definition.yields_per_turn_per_level.items() if amount}


# ---------------------------------------------------------------------------
# Roads and warehouse


def get_road_upgrade_cost(level: int, *, rules: RulesConfig = DEFAULT_RULES) -> ResourceDelta:
    road = rules.roads
    if level <= 1:
        return dict(road.first_level_cost)
    squared = level * level
    cost: ResourceDelta = {ResourceKey.GOLD: road.gold_per_level_squared * squared}
    if level >= road.stone_from_level:
        cost[ResourceKey.STONE] = road.stone_per_level_squared * squared
    return cost


def get_road_upgrade_turns(level: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    return _tiered_turns(level, rules.roads.one_turn_max_level, rules.roads.two_turn_max_level)


def get_warehouse_upgrade_cost(level: int, *, rules: RulesConfig = DEFAULT_RULES) -> ResourceDelta:
    warehouse = rules.warehouse
    if level <= 1:
        return dict(warehouse.first_level_cost)
    squared = level * level
    cost: ResourceDelta = {
        ResourceKey.GOLD: warehouse.gold_per_level_squared * squared,
        ResourceKey.WOOD: warehouse.wood_per_level_squared * squared,
    }
    if level >= warehouse.stone_from_level:
        cost[ResourceKey.STONE] = warehouse.stone_per_level_squared * squared
    return cost


def get_warehouse_upgrade_turns(level: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    return _tiered_turns(
        level, rules.warehouse.one_turn_max_level, rules.warehouse.two_turn_max_level
    )


def _tiered_turns(level: int, one_turn_max: int, two_turn_max: int) -> int:
    if level <= one_turn_max:
        return 1
    if level <= two_turn_max:
        return 2
    return 3


# ---------------------------------------------------------------------------
# Track-level dispatch


def get_track_upgrade_cost(
    track: Track, level: int, *, rules: RulesConfig = DEFAULT_RULES
) -> ResourceDelta:
    kind = track_kind(track)
    if kind is TrackKind.ROADS:
        return get_road_upgrade_cost(level, rules=rules)
    if kind is TrackKind.WAREHOUSE:
        return get_warehouse_upgrade_cost(level, rules=rules)
    return get_building_upgrade_cost(track, level, rules=rules)  # type: ignore[arg-type]


def get_track_upgrade_turns(track: Track, level: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    kind = track_kind(track)
    if kind is TrackKind.ROADS:
        return get_road_upgrade_turns(level, rules=rules)
    if kind is TrackKind.WAREHOUSE:
        return get_warehouse_upgrade_turns(level, rules=rules)
    return get_building_upgrade_turns(level, rules=rules)


# ---------------------------------------------------------------------------
# Projections over building levels


def get_population_cap_for_farm_level(farm_level: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    population = rules.population
    return population.base_population_cap + population.population_cap_per_farm_level * max(0, farm_level)


def get_build_slots_cap_for_farm_level(farm_level: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    if farm_level <= 0:
        return 0
    population = rules.population
    return population.base_build_slots + population.build_slots_per_farm_level * farm_level


def get_build_slots_used(buildings: Mapping[BuildingType, int], *, rules: RulesConfig = DEFAULT_RULES) -> int:
    return sum(
        1
        for building in rules.catalog.building_order
        if buildings.get(building, 0) > 0 and rules.catalog.buildings[building].uses_build_slot
    )


def get_population_used_for_building_levels(
    buildings: Mapping[BuildingType, int], *, rules: RulesConfig = DEFAULT_RULES
) -> int:
    return sum(
        rules.catalog.buildings[building].workforce_per_level * max(0, buildings.get(building, 0))
        for building in rules.catalog.building_order
    )


def get_county_defense_from_building_levels(
    buildings: Mapping[BuildingType, int], *, rules: RulesConfig = DEFAULT_RULES
) -> int:
    """Defense comes from per-level bonuses; only PALISADE carries one."""

    return sum(
        rules.catalog.buildings[building].defense_per_level * max(0, buildings.get(building, 0))
        for building in rules.catalog.building_order
    )
