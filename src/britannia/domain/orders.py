"""Validation of macro orders submitted for the next turn."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from britannia.domain.models import GameState, MacroOrder


@dataclass(frozen=True, slots=True)
class OrderValidationResult:
    order_id: str
    is_valid: bool
    reason: str | None = None


def validate_order(order: MacroOrder, state: GameState) -> OrderValidationResult:
    if order.county_id not in state.counties:
        return OrderValidationResult(order.id, False, f"Unknown county: {order.county_id}")
    return OrderValidationResult(order.id, True)


def validate_orders(orders: Iterable[MacroOrder], state: GameState) -> list[OrderValidationResult]:
    return [validate_order(order, state) for order in orders]
