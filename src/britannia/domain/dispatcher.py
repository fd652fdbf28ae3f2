"""Command dispatch for the county economy.

:func:`dispatch` is the single entry point for player commands.  Every
handler checks its preconditions before building a new state; a rejected
command returns the very same :class:`GameState` object, so callers detect a
no-op with ``new_state is state``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, cast

from britannia.domain import actions
from britannia.domain.build_queue import (
    EMPTY_QUEUE,
    create_order_id,
    enqueue,
    is_empty,
    remove_order,
    reprice_track_orders,
)
from britannia.domain.eligibility import (
    CountyActionPlan,
    TrackUpgradePlan,
    check_claim_county,
    check_conquer_county,
    check_track_upgrade,
    check_warehouse_upgrade,
    current_track_level,
)
from britannia.domain.enums import GamePhase, OrderKind, ResourceKey, SpecialTrack, parse_track
from britannia.domain.models import BuildOrder, GameState, ResourceDelta, ResourceStockpile
from britannia.domain.resources import add_deltas, add_resource_delta, subtract_resource_delta
from britannia.domain.rules_config import DEFAULT_RULES, RulesConfig
from britannia.domain.setup import begin_game, normalize_county_id, reset_to_setup
from britannia.domain.turn import resolve_turn

logger = logging.getLogger(__name__)

WAREHOUSE_QUEUE_OWNER = "KINGDOM"


@dataclass(slots=True)
class DispatchResult:
    """Outcome of one command."""

    state: GameState
    rejected_reason: str | None = None

    @property
    def accepted(self) -> bool:
        return self.rejected_reason is None


ActionHandler = Callable[[GameState, Any, RulesConfig], DispatchResult]


def dispatch(state: GameState, action: actions.Action, *, rules: RulesConfig = DEFAULT_RULES) -> GameState:
    """Apply ``action`` and return the next state (``state`` itself when rejected)."""

    return apply_action(state, action, rules=rules).state


def apply_action(
    state: GameState, action: actions.Action, *, rules: RulesConfig = DEFAULT_RULES
) -> DispatchResult:
    """Like :func:`dispatch` but also reports why a command was refused."""

    handler = _ACTION_HANDLERS.get(type(action))
    if handler is None:
        result = DispatchResult(state, f"unsupported action: {type(action).__name__}")
    else:
        result = handler(state, action, rules)
        if result.rejected_reason is not None:
            result = DispatchResult(state, result.rejected_reason)

    if result.rejected_reason is not None:
        logger.debug("rejected %s: %s", type(action).__name__, result.rejected_reason)
    return result


def _rejected(state: GameState, reason: str) -> DispatchResult:
    return DispatchResult(state, reason)


def _require_playing(state: GameState) -> DispatchResult | None:
    if state.phase is not GamePhase.PLAYING:
        return _rejected(state, "The game is not in progress")
    return None


# ---------------------------------------------------------------------------
# Session and view commands


def _handle_open_setup(state: GameState, action: actions.OpenSetup, rules: RulesConfig) -> DispatchResult:
    return DispatchResult(reset_to_setup(state))


def _handle_begin_game(
    state: GameState, action: actions.BeginGameWithCharacter, rules: RulesConfig
) -> DispatchResult:
    character = next((c for c in state.characters if c.id == action.character_id), None)
    if character is None:
        return _rejected(state, f"Unknown character: {action.character_id}")
    return DispatchResult(begin_game(state, character, action.discovered_county_ids, rules=rules))


def _handle_toggle_fog(state: GameState, action: actions.ToggleFogOfWar, rules: RulesConfig) -> DispatchResult:
    return DispatchResult(replace(state, fog_of_war_enabled=not state.fog_of_war_enabled))


def _handle_toggle_superhighways(
    state: GameState, action: actions.ToggleSuperhighways, rules: RulesConfig
) -> DispatchResult:
    return DispatchResult(replace(state, superhighways_enabled=not state.superhighways_enabled))


def _handle_toggle_no_conquest(
    state: GameState, action: actions.ToggleNoConquest, rules: RulesConfig
) -> DispatchResult:
    return DispatchResult(replace(state, no_conquest_enabled=not state.no_conquest_enabled))


def _handle_select_county(state: GameState, action: actions.SelectCounty, rules: RulesConfig) -> DispatchResult:
    denied = _require_playing(state)
    if denied is not None:
        return denied
    county_id = normalize_county_id(action.county_id)
    return DispatchResult(replace(state, selected_county_id=county_id or None))


def _handle_end_turn(state: GameState, action: actions.EndTurn, rules: RulesConfig) -> DispatchResult:
    denied = _require_playing(state)
    if denied is not None:
        return denied
    return DispatchResult(resolve_turn(state, rules=rules))


def _handle_close_turn_report(
    state: GameState, action: actions.CloseTurnReport, rules: RulesConfig
) -> DispatchResult:
    if state.last_turn_report is None:
        return _rejected(state, "No turn report is open")
    return DispatchResult(replace(state, last_turn_report=None))


# ---------------------------------------------------------------------------
# Queue commands


def _handle_queue_track_upgrade(
    state: GameState, action: actions.QueueTrackUpgrade, rules: RulesConfig
) -> DispatchResult:
    try:
        track = parse_track(action.track)
    except ValueError as exc:
        return _rejected(state, str(exc))

    eligibility = check_track_upgrade(state, action.county_id, track, rules=rules)
    if not eligibility.allowed:
        return _rejected(state, eligibility.reason or "Upgrade not allowed")
    return DispatchResult(_commit_track_upgrade(state, cast(TrackUpgradePlan, eligibility.plan)))


def _handle_queue_warehouse_upgrade(
    state: GameState, action: actions.QueueWarehouseUpgrade, rules: RulesConfig
) -> DispatchResult:
    eligibility = check_warehouse_upgrade(state, rules=rules)
    if not eligibility.allowed:
        return _rejected(state, eligibility.reason or "Upgrade not allowed")
    return DispatchResult(_commit_track_upgrade(state, cast(TrackUpgradePlan, eligibility.plan)))


def _commit_track_upgrade(state: GameState, plan: TrackUpgradePlan) -> GameState:
    faction_id = cast(str, state.player_faction_id)
    resources = cast(ResourceStockpile, state.player_resources)

    if plan.county_id is None:
        queue = state.global_build_queue
        owner = WAREHOUSE_QUEUE_OWNER
    else:
        queue = state.build_queue_by_county_id.get(plan.county_id, EMPTY_QUEUE)
        owner = plan.county_id

    order = BuildOrder(
        id=create_order_id(owner, plan.track.value, state.turn_number, queue),
        kind=OrderKind.UPGRADE_TRACK,
        turns_remaining=plan.turns,
        cost=dict(plan.cost),
        queued_on_turn=state.turn_number,
        track=plan.track,
    )
    resources_by_kingdom_id = {
        **state.resources_by_kingdom_id,
        faction_id: subtract_resource_delta(resources, plan.cost),
    }

    if plan.county_id is None:
        return replace(
            state,
            global_build_queue=enqueue(queue, order),
            resources_by_kingdom_id=resources_by_kingdom_id,
        )
    return replace(
        state,
        build_queue_by_county_id={**state.build_queue_by_county_id, plan.county_id: enqueue(queue, order)},
        resources_by_kingdom_id=resources_by_kingdom_id,
    )


def _handle_queue_claim(state: GameState, action: actions.QueueClaimCounty, rules: RulesConfig) -> DispatchResult:
    eligibility = check_claim_county(state, action.source_county_id, action.target_county_id, rules=rules)
    if not eligibility.allowed:
        return _rejected(state, eligibility.reason or "Claim not allowed")
    return DispatchResult(_commit_county_action(state, cast(CountyActionPlan, eligibility.plan)))


def _handle_queue_conquer(
    state: GameState, action: actions.QueueConquerCounty, rules: RulesConfig
) -> DispatchResult:
    eligibility = check_conquer_county(state, action.source_county_id, action.target_county_id, rules=rules)
    if not eligibility.allowed:
        return _rejected(state, eligibility.reason or "Conquest not allowed")
    return DispatchResult(_commit_county_action(state, cast(CountyActionPlan, eligibility.plan)))


def _commit_county_action(state: GameState, plan: CountyActionPlan) -> GameState:
    faction_id = cast(str, state.player_faction_id)
    resources = cast(ResourceStockpile, state.player_resources)

    queue = state.build_queue_by_county_id.get(plan.target_county_id, EMPTY_QUEUE)
    order = BuildOrder(
        id=create_order_id(plan.target_county_id, plan.kind.value, state.turn_number, queue),
        kind=plan.kind,
        turns_remaining=plan.turns,
        cost=dict(plan.cost),
        queued_on_turn=state.turn_number,
        population_cost=plan.population_cost,
        source_county_id=plan.source_county_id,
        target_county_id=plan.target_county_id,
    )

    source = state.counties[plan.source_county_id]
    spent = subtract_resource_delta(resources, {**plan.cost, ResourceKey.POPULATION: plan.population_cost})
    return replace(
        state,
        counties={
            **state.counties,
            source.id: replace(source, population=source.population - plan.population_cost),
        },
        build_queue_by_county_id={
            **state.build_queue_by_county_id,
            plan.target_county_id: enqueue(queue, order),
        },
        resources_by_kingdom_id={**state.resources_by_kingdom_id, faction_id: spent},
    )


# ---------------------------------------------------------------------------
# Cancellation


def _handle_cancel_build_order(
    state: GameState, action: actions.CancelBuildOrder, rules: RulesConfig
) -> DispatchResult:
    denied = _require_playing(state)
    if denied is not None:
        return denied

    county_id = normalize_county_id(action.county_id)
    queue = state.build_queue_by_county_id.get(county_id)
    if queue is None:
        return _rejected(state, f"No orders queued in {county_id or '(none)'}")
    next_queue, removed = remove_order(queue, action.order_id)
    if removed is None:
        return _rejected(state, f"Unknown order: {action.order_id}")
    overpaid: ResourceDelta = {}
    if removed.track is not None:
        base_level = current_track_level(state, county_id, removed.track)
        next_queue, overpaid = reprice_track_orders(next_queue, removed.track, base_level, rules=rules)

    queues = dict(state.build_queue_by_county_id)
    if is_empty(next_queue):
        del queues[county_id]
    else:
        queues[county_id] = next_queue
    return DispatchResult(_refund(replace(state, build_queue_by_county_id=queues), removed, overpaid))


def _handle_cancel_warehouse_order(
    state: GameState, action: actions.CancelWarehouseOrder, rules: RulesConfig
) -> DispatchResult:
    denied = _require_playing(state)
    if denied is not None:
        return denied

    next_queue, removed = remove_order(state.global_build_queue, action.order_id)
    if removed is None:
        return _rejected(state, f"Unknown order: {action.order_id}")
    next_queue, overpaid = reprice_track_orders(
        next_queue, SpecialTrack.WAREHOUSE, state.warehouse_level, rules=rules
    )
    return DispatchResult(_refund(replace(state, global_build_queue=next_queue), removed, overpaid))


def _refund(state: GameState, order: BuildOrder, overpaid: ResourceDelta) -> GameState:
    faction_id = state.player_faction_id
    resources = state.player_resources
    if faction_id is None or resources is None:
        return state

    refund = add_deltas(order.cost, overpaid)
    counties = state.counties
    source = counties.get(order.source_county_id or "")
    if order.population_cost and source is not None:
        refund[ResourceKey.POPULATION] = refund.get(ResourceKey.POPULATION, 0) + order.population_cost
        counties = {**counties, source.id: replace(source, population=source.population + order.population_cost)}

    return replace(
        state,
        counties=counties,
        resources_by_kingdom_id={
            **state.resources_by_kingdom_id,
            faction_id: add_resource_delta(resources, refund),
        },
    )


_ACTION_HANDLERS: dict[type, ActionHandler] = {
    actions.SelectCounty: _handle_select_county,
    actions.OpenSetup: _handle_open_setup,
    actions.BeginGameWithCharacter: _handle_begin_game,
    actions.ToggleFogOfWar: _handle_toggle_fog,
    actions.ToggleSuperhighways: _handle_toggle_superhighways,
    actions.ToggleNoConquest: _handle_toggle_no_conquest,
    actions.QueueTrackUpgrade: _handle_queue_track_upgrade,
    actions.QueueWarehouseUpgrade: _handle_queue_warehouse_upgrade,
    actions.QueueClaimCounty: _handle_queue_claim,
    actions.QueueConquerCounty: _handle_queue_conquer,
    actions.CancelBuildOrder: _handle_cancel_build_order,
    actions.CancelWarehouseOrder: _handle_cancel_warehouse_order,
    actions.EndTurn: _handle_end_turn,
    actions.CloseTurnReport: _handle_close_turn_report,
}
