"""Command preconditions shared by the dispatcher and any presentation layer.

Each ``check_*`` function returns an :class:`Eligibility`.  When the command
would be accepted it carries a plan with the exact cost, duration and level
the dispatcher will commit; otherwise it carries a human-readable reason.
"""

from __future__ import annotations

from dataclasses import dataclass

from britannia.domain.build_queue import EMPTY_QUEUE, has_exclusive_order, is_empty, iter_orders, queued_track_increments
from britannia.domain.county_actions import (
    get_claim_county_cost,
    get_claim_county_turns,
    get_conquer_county_cost,
    get_conquer_county_turns,
)
from britannia.domain.enums import (
    NEUTRAL_OWNER_ID,
    BuildingType,
    GamePhase,
    OrderKind,
    SpecialTrack,
    Track,
    TrackKind,
    track_kind,
)
from britannia.domain.models import BuildQueue, CountyState, GameState, ResourceDelta
from britannia.domain.resources import exceeds_storage_caps, format_cost_label, format_signed_amount, has_enough_resources
from britannia.domain.rules_config import DEFAULT_RULES, RulesConfig
from britannia.domain.setup import normalize_county_id
from britannia.domain.tracks import (
    get_build_slots_cap_for_farm_level,
    get_build_slots_used,
    get_building_definition,
    get_track_label,
    get_track_upgrade_cost,
    get_track_upgrade_turns,
)


@dataclass(frozen=True, slots=True)
class TrackUpgradePlan:
    """Accepted upgrade: where it goes and what it costs."""

    track: Track
    county_id: str | None
    next_level: int
    turns: int
    cost: ResourceDelta


@dataclass(frozen=True, slots=True)
class CountyActionPlan:
    """Accepted claim or conquest."""

    kind: OrderKind
    source_county_id: str
    target_county_id: str
    turns: int
    cost: ResourceDelta
    population_cost: int


@dataclass(frozen=True, slots=True)
class Eligibility:
    allowed: bool
    reason: str | None = None
    plan: TrackUpgradePlan | CountyActionPlan | None = None

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True, slots=True)
class TrackUpgradeOption:
    """Row of the county development panel."""

    track: Track
    label: str
    level: int
    next_level: int
    turns_required: int
    yield_label: str
    cost_label: str
    can_upgrade: bool
    reason: str | None = None


def _deny(reason: str) -> Eligibility:
    return Eligibility(False, reason)


def _check_playing(state: GameState) -> Eligibility | None:
    if state.phase is not GamePhase.PLAYING:
        return _deny("The game is not in progress")
    if state.player_resources is None:
        return _deny("No player faction is active")
    return None


def _check_cost(state: GameState, cost: ResourceDelta, rules: RulesConfig) -> Eligibility | None:
    if exceeds_storage_caps(cost, state.warehouse_level, rules=rules):
        return _deny("Cost exceeds storage capacity; upgrade the warehouse first")
    resources = state.player_resources
    if resources is None or not has_enough_resources(resources, cost):
        return _deny(f"Not enough resources (needs {format_cost_label(cost)})")
    return None


def current_track_level(state: GameState, county_id: str | None, track: Track) -> int:
    kind = track_kind(track)
    if kind is TrackKind.WAREHOUSE:
        return state.warehouse_level
    county = state.counties.get(county_id or "")
    if county is None:
        return 0
    if kind is TrackKind.ROADS:
        return county.road_level
    return county.level_of(track)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Track upgrades


def check_track_upgrade(
    state: GameState,
    county_id: str | None,
    track: Track,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> Eligibility:
    """Can ``track`` in ``county_id`` be queued for its next level?"""

    if track_kind(track) is TrackKind.WAREHOUSE:
        return check_warehouse_upgrade(state, rules=rules)

    denied = _check_playing(state)
    if denied is not None:
        return denied

    county_id = normalize_county_id(county_id)
    county = state.counties.get(county_id)
    if county is None:
        return _deny(f"Unknown county: {county_id or '(none)'}")
    if county_id not in state.owned_county_ids:
        return _deny(f"{county.label} is not owned")

    queue = state.build_queue_by_county_id.get(county_id, EMPTY_QUEUE)
    if has_exclusive_order(queue):
        return _deny(f"{county.label} is committed to a claim or conquest")

    pending = queued_track_increments(queue, track)
    next_level = current_track_level(state, county_id, track) + pending + 1
    if next_level > rules.economy.max_track_level:
        return _deny(f"{get_track_label(track, rules=rules)} is at max level")

    if isinstance(track, BuildingType) and pending == 0 and county.level_of(track) == 0:
        denied = _check_build_slot(county, queue, track, rules)
        if denied is not None:
            return denied

    turns = get_track_upgrade_turns(track, next_level, rules=rules)
    if turns <= 0:
        return _deny("Upgrade has no valid duration")

    cost = get_track_upgrade_cost(track, next_level, rules=rules)
    denied = _check_cost(state, cost, rules)
    if denied is not None:
        return denied

    return Eligibility(
        True,
        plan=TrackUpgradePlan(track=track, county_id=county_id, next_level=next_level, turns=turns, cost=cost),
    )


def _check_build_slot(
    county: CountyState, queue: BuildQueue, building: BuildingType, rules: RulesConfig
) -> Eligibility | None:
    if not get_building_definition(building, rules=rules).uses_build_slot:
        return None
    # Tracks queued from level 0 will claim a slot when they complete.
    reserved = {
        order.track
        for order in iter_orders(queue)
        if isinstance(order.track, BuildingType)
        and county.level_of(order.track) == 0
        and get_building_definition(order.track, rules=rules).uses_build_slot
    }
    used = get_build_slots_used(county.buildings, rules=rules) + len(reserved)
    cap = get_build_slots_cap_for_farm_level(county.level_of(BuildingType.FARM), rules=rules)
    if used >= cap:
        return _deny(f"{county.label} has no free building slots")
    return None


def check_warehouse_upgrade(state: GameState, *, rules: RulesConfig = DEFAULT_RULES) -> Eligibility:
    denied = _check_playing(state)
    if denied is not None:
        return denied

    track = SpecialTrack.WAREHOUSE
    next_level = state.warehouse_level + queued_track_increments(state.global_build_queue, track) + 1
    if next_level > rules.economy.max_track_level:
        return _deny("Warehouse is at max level")

    turns = get_track_upgrade_turns(track, next_level, rules=rules)
    cost = get_track_upgrade_cost(track, next_level, rules=rules)
    denied = _check_cost(state, cost, rules)
    if denied is not None:
        return denied

    return Eligibility(
        True,
        plan=TrackUpgradePlan(track=track, county_id=None, next_level=next_level, turns=turns, cost=cost),
    )


# ---------------------------------------------------------------------------
# Claim and conquest


def _check_county_action(
    state: GameState,
    kind: OrderKind,
    source_county_id: str | None,
    target_county_id: str | None,
) -> tuple[Eligibility | None, CountyState | None, CountyState | None]:
    denied = _check_playing(state)
    if denied is not None:
        return denied, None, None

    source_id = normalize_county_id(source_county_id)
    target_id = normalize_county_id(target_county_id)
    source = state.counties.get(source_id)
    target = state.counties.get(target_id)
    if source is None:
        return _deny(f"Unknown county: {source_id or '(none)'}"), None, None
    if target is None:
        return _deny(f"Unknown county: {target_id or '(none)'}"), None, None
    if source_id not in state.owned_county_ids:
        return _deny(f"{source.label} is not owned"), None, None
    if target_id in state.owned_county_ids or target.owner_id == state.player_faction_id:
        return _deny(f"{target.label} is already yours"), None, None
    if target_id not in state.neighbors_of(source_id):
        return _deny(f"{target.label} is not adjacent to {source.label}"), None, None
    if not is_empty(state.build_queue_by_county_id.get(target_id, EMPTY_QUEUE)):
        return _deny(f"{target.label} already has an order in progress"), None, None

    if kind is OrderKind.CLAIM_COUNTY and target.owner_id != NEUTRAL_OWNER_ID:
        return _deny(f"{target.label} is not neutral land"), None, None
    if kind is OrderKind.CONQUER_COUNTY:
        if state.no_conquest_enabled:
            return _deny("Conquest is disabled"), None, None
        if target.owner_id == NEUTRAL_OWNER_ID:
            return _deny(f"{target.label} is neutral; claim it instead"), None, None
    return None, source, target


def check_claim_county(
    state: GameState,
    source_county_id: str | None,
    target_county_id: str | None,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> Eligibility:
    """Can the player claim a neutral county from an adjacent owned one?"""

    denied, source, target = _check_county_action(
        state, OrderKind.CLAIM_COUNTY, source_county_id, target_county_id
    )
    if source is None or target is None:
        return denied or _deny("Unknown county")

    return _finish_county_action(
        state,
        OrderKind.CLAIM_COUNTY,
        source,
        target,
        cost=get_claim_county_cost(rules=rules),
        population_cost=rules.county_actions.claim_population_cost,
        turns=get_claim_county_turns(source.road_level, rules=rules),
        rules=rules,
    )


def check_conquer_county(
    state: GameState,
    source_county_id: str | None,
    target_county_id: str | None,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> Eligibility:
    """Can the player conquer an enemy county from an adjacent owned one?"""

    denied, source, target = _check_county_action(
        state, OrderKind.CONQUER_COUNTY, source_county_id, target_county_id
    )
    if source is None or target is None:
        return denied or _deny("Unknown county")

    return _finish_county_action(
        state,
        OrderKind.CONQUER_COUNTY,
        source,
        target,
        cost=get_conquer_county_cost(rules=rules),
        population_cost=rules.county_actions.conquer_population_cost,
        turns=get_conquer_county_turns(
            target.level_of(BuildingType.PALISADE), source.road_level, rules=rules
        ),
        rules=rules,
    )


def _finish_county_action(
    state: GameState,
    kind: OrderKind,
    source: CountyState,
    target: CountyState,
    *,
    cost: ResourceDelta,
    population_cost: int,
    turns: int,
    rules: RulesConfig,
) -> Eligibility:
    if source.population < population_cost:
        return _deny(f"{source.label} needs {population_cost} population to send")
    denied = _check_cost(state, cost, rules)
    if denied is not None:
        return denied
    return Eligibility(
        True,
        plan=CountyActionPlan(
            kind=kind,
            source_county_id=source.id,
            target_county_id=target.id,
            turns=turns,
            cost=cost,
            population_cost=population_cost,
        ),
    )


# ---------------------------------------------------------------------------
# Panel data


def get_track_upgrade_options(
    state: GameState, county_id: str | None, *, rules: RulesConfig = DEFAULT_RULES
) -> list[TrackUpgradeOption]:
    """One row per county track (roads first, then buildings in catalog order)."""

    county_id = normalize_county_id(county_id)
    if county_id not in state.counties:
        return []

    queue = state.build_queue_by_county_id.get(county_id, EMPTY_QUEUE)
    tracks: list[Track] = [SpecialTrack.ROADS, *rules.catalog.building_order]
    options: list[TrackUpgradeOption] = []
    for track in tracks:
        level = current_track_level(state, county_id, track)
        next_level = min(rules.economy.max_track_level, level + queued_track_increments(queue, track) + 1)
        eligibility = check_track_upgrade(state, county_id, track, rules=rules)
        options.append(
            TrackUpgradeOption(
                track=track,
                label=get_track_label(track, rules=rules),
                level=level,
                next_level=next_level,
                turns_required=get_track_upgrade_turns(track, next_level, rules=rules),
                yield_label=_yield_label(track, rules),
                cost_label=format_cost_label(get_track_upgrade_cost(track, next_level, rules=rules)),
                can_upgrade=eligibility.allowed,
                reason=eligibility.reason,
            )
        )
    return options


def _yield_label(track: Track, rules: RulesConfig) -> str:
    if not isinstance(track, BuildingType):
        return "Faster movement and conquest"
    definition = get_building_definition(track, rules=rules)
    if definition.defense_per_level:
        return f"+{definition.defense_per_level} Defense per level"
    if not definition.yields_per_turn_per_level:
        return "Raises population cap and building slots"
    return ", ".join(
        f"{format_signed_amount(amount)} {key.value.capitalize()}/turn per level"
        for key, amount in definition.yields_per_turn_per_level.items()
    )
