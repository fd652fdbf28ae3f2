"""Per-county and aggregate yield computation under workforce constraints."""

from __future__ import annotations

from dataclasses import dataclass, field

from britannia.domain.enums import BuildingType, ResourceKey
from britannia.domain.models import CountyState, GameState, ResourceDelta
from britannia.domain.resources import (
    add_deltas,
    floor_non_negative,
    format_signed_amount,
    get_non_zero_resource_delta_entries,
    round_half_up,
    scale_resource_delta,
)
from britannia.domain.rules_config import DEFAULT_RULES, RulesConfig
from britannia.domain.tracks import (
    get_build_slots_cap_for_farm_level,
    get_build_slots_used,
    get_building_definition,
    get_building_yield_for_level,
    get_county_defense_from_building_levels,
    get_population_cap_for_farm_level,
    get_population_used_for_building_levels,
)


@dataclass(frozen=True, slots=True)
class CountyDerivedStats:
    """Figures projected from a county's building levels and population."""

    population: int
    population_cap: int
    population_used: int
    population_free: int
    workforce_ratio: float
    build_slots_used: int
    build_slots_cap: int
    defense: int


@dataclass(frozen=True, slots=True)
class TurnYieldSummary:
    """Aggregated yields of every owned county for one turn."""

    total_delta: ResourceDelta = field(default_factory=dict)
    contribution_lines: tuple[str, ...] = ()
    county_population_deltas: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PopulationTotals:
    total: int
    used: int
    free: int
    cap: int


def get_county_derived_stats(county: CountyState, *, rules: RulesConfig = DEFAULT_RULES) -> CountyDerivedStats:
    """Project population, workforce, slots and defense for ``county``.

    The workforce ratio is capped at 1, so surplus population never lifts a
    yield above its nominal per-level rate.
    """

    farm_level = county.level_of(BuildingType.FARM)
    population_cap = get_population_cap_for_farm_level(farm_level, rules=rules)
    population_used = get_population_used_for_building_levels(county.buildings, rules=rules)
    population = floor_non_negative(county.population)
    if population_used <= 0:
        workforce_ratio = 1.0
    else:
        workforce_ratio = max(0.0, min(1.0, population / population_used))

    return CountyDerivedStats(
        population=population,
        population_cap=population_cap,
        population_used=population_used,
        population_free=max(0, population - population_used),
        workforce_ratio=workforce_ratio,
        build_slots_used=get_build_slots_used(county.buildings, rules=rules),
        build_slots_cap=get_build_slots_cap_for_farm_level(farm_level, rules=rules),
        defense=get_county_defense_from_building_levels(county.buildings, rules=rules),
    )


def get_county_yield_breakdown(
    county_id: str, state: GameState, *, rules: RulesConfig = DEFAULT_RULES
) -> TurnYieldSummary:
    """Yields, contribution lines, and population growth of one owned county."""

    county = state.counties.get(county_id)
    if county is None or county_id not in state.owned_county_ids:
        return TurnYieldSummary()

    stats = get_county_derived_stats(county, rules=rules)
    base_yield = dict(rules.economy.base_county_yield)
    total: ResourceDelta = dict(base_yield)
    lines: list[str] = []
    if base_yield:
        lines.append(f"{county.label}: {_format_delta(base_yield)} (County base income)")

    growth = 0
    for building in rules.catalog.building_order:
        level = county.level_of(building)
        if level <= 0:
            continue

        adjusted = scale_resource_delta(
            get_building_yield_for_level(building, level, rules=rules), stats.workforce_ratio
        )
        if building is BuildingType.HOMESTEADS:
            adjusted, applied = _cap_population_growth(adjusted, stats, growth)
            growth += applied

        total = add_deltas(total, adjusted)
        label = get_building_definition(building, rules=rules).label
        for entry in get_non_zero_resource_delta_entries(adjusted):
            lines.append(
                f"{county.label}: {format_signed_amount(entry.amount)} {entry.label} ({label} L{level})"
            )

    if stats.workforce_ratio < 1 and stats.population_used > 0:
        lines.append(
            f"{county.label}: Workforce shortage ({round_half_up(stats.workforce_ratio * 100)}% efficiency)"
        )

    return TurnYieldSummary(
        total_delta=total,
        contribution_lines=tuple(lines),
        county_population_deltas={county_id: growth},
    )


def _cap_population_growth(
    adjusted: ResourceDelta, stats: CountyDerivedStats, committed: int
) -> tuple[ResourceDelta, int]:
    # Growth beyond the cap is dropped from the yield rather than zeroed.
    potential = adjusted.get(ResourceKey.POPULATION, 0)
    room = max(0, stats.population_cap - (stats.population + committed))
    applied = min(potential, room)
    capped = {key: amount for key, amount in adjusted.items() if key is not ResourceKey.POPULATION}
    if applied > 0:
        capped[ResourceKey.POPULATION] = applied
    return capped, max(0, applied)


def get_county_yields(county_id: str, state: GameState, *, rules: RulesConfig = DEFAULT_RULES) -> ResourceDelta:
    return get_county_yield_breakdown(county_id, state, rules=rules).total_delta


def get_player_turn_yield_summary(state: GameState, *, rules: RulesConfig = DEFAULT_RULES) -> TurnYieldSummary:
    """Sum every owned county's yields in ownership order."""

    total: ResourceDelta = {}
    lines: list[str] = []
    population_deltas: dict[str, int] = {}
    for county_id in state.owned_county_ids:
        breakdown = get_county_yield_breakdown(county_id, state, rules=rules)
        total = add_deltas(total, breakdown.total_delta)
        lines.extend(breakdown.contribution_lines)
        population_deltas.update(breakdown.county_population_deltas)
    return TurnYieldSummary(
        total_delta=total,
        contribution_lines=tuple(lines),
        county_population_deltas=population_deltas,
    )


def get_player_population_totals(state: GameState, *, rules: RulesConfig = DEFAULT_RULES) -> PopulationTotals:
    total = used = free = cap = 0
    for county_id in state.owned_county_ids:
        county = state.counties.get(county_id)
        if county is None:
            continue
        stats = get_county_derived_stats(county, rules=rules)
        total += stats.population
        used += stats.population_used
        free += stats.population_free
        cap += stats.population_cap
    return PopulationTotals(total=total, used=used, free=free, cap=cap)


def _format_delta(delta: ResourceDelta) -> str:
    return ", ".join(
        f"{format_signed_amount(entry.amount)} {entry.label}"
        for entry in get_non_zero_resource_delta_entries(delta)
    )
