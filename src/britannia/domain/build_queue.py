"""FIFO build queue value type: one active slot plus ordered pending orders.

Every function is a pure transform returning a new :class:`BuildQueue`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from britannia.domain.enums import Track
from britannia.domain.models import BuildOrder, BuildQueue, ResourceDelta
from britannia.domain.rules_config import DEFAULT_RULES, RulesConfig
from britannia.domain.tracks import get_track_upgrade_cost, get_track_upgrade_turns

EMPTY_QUEUE = BuildQueue()


@dataclass(frozen=True, slots=True)
class QueueAdvance:
    """Result of advancing a queue by one turn."""

    queue: BuildQueue
    completed: BuildOrder | None = None


def is_empty(queue: BuildQueue) -> bool:
    return queue.active is None and not queue.queued


def iter_orders(queue: BuildQueue) -> tuple[BuildOrder, ...]:
    """All orders, active first, then pending in FIFO order."""

    if queue.active is None:
        return queue.queued
    return (queue.active, *queue.queued)


def enqueue(queue: BuildQueue, order: BuildOrder) -> BuildQueue:
    if queue.active is None:
        return replace(queue, active=order)
    return replace(queue, queued=(*queue.queued, order))


def has_exclusive_order(queue: BuildQueue) -> bool:
    return any(order.is_exclusive for order in iter_orders(queue))


def queued_track_increments(queue: BuildQueue, track: Track) -> int:
    """Sum of level increments already committed to ``track`` in this queue."""

    return sum(order.target_level_delta for order in iter_orders(queue) if order.track == track)


def find_order(queue: BuildQueue, order_id: str) -> BuildOrder | None:
    for order in iter_orders(queue):
        if order.id == order_id:
            return order
    return None


def remove_order(queue: BuildQueue, order_id: str) -> tuple[BuildQueue, BuildOrder | None]:
    """Drop an order by id; cancelling the active order promotes the FIFO head."""

    if queue.active is not None and queue.active.id == order_id:
        if queue.queued:
            return BuildQueue(active=queue.queued[0], queued=queue.queued[1:]), queue.active
        return EMPTY_QUEUE, queue.active

    for index, order in enumerate(queue.queued):
        if order.id == order_id:
            remaining = queue.queued[:index] + queue.queued[index + 1 :]
            return replace(queue, queued=remaining), order
    return queue, None


def reprice_track_orders(
    queue: BuildQueue, track: Track, base_level: int, *, rules: RulesConfig = DEFAULT_RULES
) -> tuple[BuildQueue, ResourceDelta]:
    """Re-level every order on ``track`` from ``base_level`` after a removal.

    Orders whose target level dropped get the cost and duration of the new
    level; the second value is the overpayment to hand back.
    """

    refund: ResourceDelta = {}
    level = base_level
    repriced: list[BuildOrder] = []
    for order in iter_orders(queue):
        if order.track != track:
            repriced.append(order)
            continue
        level += order.target_level_delta
        cost = get_track_upgrade_cost(track, level, rules=rules)
        if cost == order.cost:
            repriced.append(order)
            continue
        for key in sorted({*order.cost, *cost}):
            difference = order.cost.get(key, 0) - cost.get(key, 0)
            if difference:
                refund[key] = refund.get(key, 0) + difference
        repriced.append(
            replace(order, cost=cost, turns_remaining=get_track_upgrade_turns(track, level, rules=rules))
        )

    if not repriced:
        return queue, refund
    if queue.active is None:
        return replace(queue, queued=tuple(repriced)), refund
    return BuildQueue(active=repriced[0], queued=tuple(repriced[1:])), refund


def advance_queue(queue: BuildQueue) -> QueueAdvance:
    """Count the active order down one turn, promoting the next on completion."""

    active = queue.active
    pending = queue.queued
    if active is None:
        if not pending:
            return QueueAdvance(queue=queue)
        active, pending = pending[0], pending[1:]

    active = replace(active, turns_remaining=max(0, active.turns_remaining - 1))
    if active.turns_remaining > 0:
        return QueueAdvance(queue=BuildQueue(active=active, queued=pending))

    if pending:
        return QueueAdvance(queue=BuildQueue(active=pending[0], queued=pending[1:]), completed=active)
    return QueueAdvance(queue=EMPTY_QUEUE, completed=active)


def create_order_id(owner_id: str, label: str, turn_number: int, queue: BuildQueue) -> str:
    """Build an id unique within ``queue`` for orders placed on the same turn."""

    used = {order.id for order in iter_orders(queue)}
    sequence = len(used) + 1
    candidate = f"{owner_id}-{label}-{turn_number}-{sequence}"
    while candidate in used:
        sequence += 1
        candidate = f"{owner_id}-{label}-{turn_number}-{sequence}"
    return candidate
