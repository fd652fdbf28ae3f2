"""Turn resolution for the county economy.

:func:`resolve_turn` is one atomic transform from a :class:`GameState` to the
next.  It advances every build queue, applies completed upgrades and
ownership transitions, credits yields, clamps storage and population, and
emits a :class:`TurnReport`.  The input state is never modified.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from britannia.domain import county_actions
from britannia.domain.build_queue import EMPTY_QUEUE, advance_queue, is_empty
from britannia.domain.economy import get_county_derived_stats, get_player_turn_yield_summary
from britannia.domain.enums import OrderKind, ResourceKey, TrackKind, track_kind
from britannia.domain.models import BuildOrder, BuildQueue, CountyState, GameState, MacroOrder, TurnReport
from britannia.domain.orders import validate_orders
from britannia.domain.resources import (
    RESOURCE_LABELS,
    add_resource_delta,
    clamp_resources_to_storage_caps,
    create_zero_resources,
    get_resource_delta_between_stockpiles,
)
from britannia.domain.rules_config import DEFAULT_RULES, RulesConfig
from britannia.domain.tracks import clamp_track_level, get_track_label

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _TurnLedger:
    """Working copy of the containers a turn rewrites."""

    counties: dict[str, CountyState]
    owned: list[str]
    discovered: list[str]
    warehouse_level: int
    completion_lines: list[str] = field(default_factory=list)

    def acquire(self, county_id: str, neighbors: Iterable[str]) -> None:
        if county_id not in self.owned:
            self.owned.append(county_id)
        for discovered_id in (county_id, *neighbors):
            if discovered_id not in self.discovered:
                self.discovered.append(discovered_id)


def resolve_turn(
    state: GameState,
    pending_orders: Iterable[MacroOrder] | None = None,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> GameState:
    """Resolve one full turn and return the next state."""

    orders = state.pending_orders if pending_orders is None else tuple(pending_orders)
    _validate_pending_orders(orders, state)

    ledger = _TurnLedger(
        counties=dict(state.counties),
        owned=list(state.owned_county_ids),
        discovered=list(state.discovered_county_ids),
        warehouse_level=state.warehouse_level,
    )

    build_queues = _advance_county_queues(state, ledger, rules)
    global_queue = _advance_global_queue(state, ledger, rules)
    _enforce_minimum_roads(ledger, rules)

    post_build = replace(
        state,
        counties=dict(ledger.counties),
        owned_county_ids=tuple(ledger.owned),
        discovered_county_ids=tuple(ledger.discovered),
        warehouse_level=ledger.warehouse_level,
    )
    summary = get_player_turn_yield_summary(post_build, rules=rules)

    for county_id, growth in summary.county_population_deltas.items():
        if growth:
            county = ledger.counties[county_id]
            ledger.counties[county_id] = replace(county, population=county.population + growth)

    faction_id = state.player_faction_id
    before = state.player_resources or create_zero_resources()
    credited = add_resource_delta(before, summary.total_delta)
    clamp = clamp_resources_to_storage_caps(credited, ledger.warehouse_level, rules=rules)

    cap_lines = _clamp_county_populations(ledger, rules)
    owned_population = sum(
        ledger.counties[county_id].population for county_id in ledger.owned if county_id in ledger.counties
    )
    after = replace(clamp.resources, population=owned_population)

    resources_by_kingdom_id = dict(state.resources_by_kingdom_id)
    if faction_id is not None:
        resources_by_kingdom_id[faction_id] = after

    next_turn = state.turn_number + 1
    lines = [
        *ledger.completion_lines,
        *clamp.waste_lines,
        *cap_lines,
        *summary.contribution_lines,
    ]
    report = TurnReport(
        turn_number=next_turn,
        resource_deltas=get_resource_delta_between_stockpiles(before, after) if faction_id else {},
        lines=tuple(lines[: rules.report.max_lines]),
        wasted_delta=dict(clamp.wasted_delta),
    )

    return replace(
        post_build,
        counties=ledger.counties,
        turn_number=next_turn,
        resources_by_kingdom_id=resources_by_kingdom_id,
        build_queue_by_county_id=build_queues,
        global_build_queue=global_queue,
        last_turn_report=report,
        pending_orders=(),
    )


# ---------------------------------------------------------------------------
# Resolution steps


def _validate_pending_orders(orders: tuple[MacroOrder, ...], state: GameState) -> None:
    results = validate_orders(orders, state)
    invalid = [result for result in results if not result.is_valid]
    if invalid:
        logger.warning(
            "ignoring %d invalid order(s) this turn: %s",
            len(invalid),
            "; ".join(f"{result.order_id}: {result.reason}" for result in invalid),
        )
    if len(invalid) < len(results):
        logger.debug("acknowledged %d macro order(s)", len(results) - len(invalid))


def _advance_county_queues(
    state: GameState, ledger: _TurnLedger, rules: RulesConfig
) -> dict[str, BuildQueue]:
    next_queues: dict[str, BuildQueue] = {}
    for county_id, queue in state.build_queue_by_county_id.items():
        if county_id not in ledger.counties:
            logger.warning("dropping build queue for unknown county %s", county_id)
            continue

        advance = advance_queue(queue)
        next_queue = advance.queue
        if advance.completed is not None:
            _complete_county_order(state, ledger, county_id, advance.completed, rules)
            if advance.completed.is_exclusive:
                # A captured county starts with a fresh queue.
                next_queue = EMPTY_QUEUE

        if not is_empty(next_queue):
            next_queues[county_id] = next_queue
    return next_queues


def _complete_county_order(
    state: GameState,
    ledger: _TurnLedger,
    county_id: str,
    order: BuildOrder,
    rules: RulesConfig,
) -> None:
    county = ledger.counties[county_id]

    if order.kind is OrderKind.UPGRADE_TRACK:
        if order.track is None:
            logger.warning("order %s has no track; skipped", order.id)
            return
        kind = track_kind(order.track)
        if kind is TrackKind.ROADS:
            level = clamp_track_level(county.road_level + order.target_level_delta, rules=rules)
            ledger.counties[county_id] = replace(county, road_level=level)
        elif kind is TrackKind.BUILDING:
            buildings = dict(county.buildings)
            level = clamp_track_level(buildings.get(order.track, 0) + order.target_level_delta, rules=rules)
            buildings[order.track] = level  # type: ignore[index]
            ledger.counties[county_id] = replace(county, buildings=buildings)
        else:
            logger.warning("warehouse order %s found in county queue %s; skipped", order.id, county_id)
            return
        label = get_track_label(order.track, rules=rules)
        ledger.completion_lines.append(f"{county.label}: {label} reached L{level}")
        logger.debug("order %s completed: %s L%d in %s", order.id, label, level, county_id)
        return

    faction_id = state.player_faction_id
    if faction_id is None:
        logger.warning("order %s completed without a player faction; skipped", order.id)
        return

    if order.kind is OrderKind.CLAIM_COUNTY:
        ledger.counties[county_id] = county_actions.apply_claim(county, faction_id, rules=rules)
        verb = "Claimed"
    else:
        ledger.counties[county_id] = county_actions.apply_conquest(county, faction_id, rules=rules)
        verb = "Conquered"
    ledger.acquire(county_id, state.neighbors_of(county_id))
    ledger.completion_lines.append(f"{verb} {county.label}")
    logger.debug("order %s completed: %s %s", order.id, verb.lower(), county_id)


def _advance_global_queue(state: GameState, ledger: _TurnLedger, rules: RulesConfig) -> BuildQueue:
    advance = advance_queue(state.global_build_queue)
    order = advance.completed
    if order is not None:
        ledger.warehouse_level = clamp_track_level(
            ledger.warehouse_level + order.target_level_delta, rules=rules
        )
        ledger.completion_lines.append(f"Warehouse reached L{ledger.warehouse_level}")
        logger.debug("order %s completed: warehouse L%d", order.id, ledger.warehouse_level)
    return advance.queue


def _enforce_minimum_roads(ledger: _TurnLedger, rules: RulesConfig) -> None:
    minimum = rules.starting.minimum_road_level
    for county_id in ledger.owned:
        county = ledger.counties.get(county_id)
        if county is not None and county.road_level < minimum:
            ledger.counties[county_id] = replace(county, road_level=minimum)


def _clamp_county_populations(ledger: _TurnLedger, rules: RulesConfig) -> list[str]:
    lines: list[str] = []
    for county_id in ledger.owned:
        county = ledger.counties.get(county_id)
        if county is None:
            continue
        stats = get_county_derived_stats(county, rules=rules)
        if stats.population > stats.population_cap:
            excess = stats.population - stats.population_cap
            ledger.counties[county_id] = replace(county, population=stats.population_cap)
            label = RESOURCE_LABELS[ResourceKey.POPULATION]
            lines.append(f"{county.label}: Population cap reached (-{excess} {label})")
        elif stats.population != county.population:
            ledger.counties[county_id] = replace(county, population=stats.population)
    return lines
