"""Stockpile arithmetic, affordability checks, and storage clamping."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

from britannia.domain.enums import ResourceKey
from britannia.domain.models import ResourceDelta, ResourceStockpile
from britannia.domain.rules_config import DEFAULT_RULES, RulesConfig

RESOURCE_KEYS: tuple[ResourceKey, ...] = tuple(ResourceKey)

# Population is a derived figure and never limited by the warehouse.
STORABLE_RESOURCE_KEYS: tuple[ResourceKey, ...] = tuple(
    key for key in ResourceKey if key is not ResourceKey.POPULATION
)

RESOURCE_LABELS: dict[ResourceKey, str] = {key: key.value.capitalize() for key in ResourceKey}


@dataclass(frozen=True, slots=True)
class ResourceDeltaEntry:
    """Labelled, non-zero entry of a resource delta."""

    key: ResourceKey
    label: str
    amount: int


@dataclass(frozen=True, slots=True)
class StorageClampResult:
    """Outcome of clamping a stockpile to the warehouse caps."""

    resources: ResourceStockpile
    wasted_delta: ResourceDelta
    waste_lines: tuple[str, ...]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""

    return math.floor(value + 0.5)


def floor_non_negative(value: float) -> int:
    if not math.isfinite(value):
        return 0
    return max(0, math.floor(value))


def create_zero_resources() -> ResourceStockpile:
    return ResourceStockpile()


def create_starting_resources(*, rules: RulesConfig = DEFAULT_RULES) -> ResourceStockpile:
    return add_resource_delta(ResourceStockpile(), rules.starting.resources)


def add_resource_delta(resources: ResourceStockpile, delta: Mapping[ResourceKey, int]) -> ResourceStockpile:
    """Return a new stockpile with ``delta`` added key by key."""

    changes = {key.value: resources.get(key) + delta.get(key, 0) for key in RESOURCE_KEYS if key in delta}
    return replace(resources, **changes) if changes else resources


def subtract_resource_delta(
    resources: ResourceStockpile, delta: Mapping[ResourceKey, int]
) -> ResourceStockpile:
    """Return a new stockpile with ``delta`` subtracted key by key."""

    return add_resource_delta(resources, {key: -amount for key, amount in delta.items()})


def has_enough_resources(resources: ResourceStockpile, cost: Mapping[ResourceKey, int]) -> bool:
    """True when every key of ``cost`` is covered; absent keys count as zero."""

    return all(resources.get(key) >= cost.get(key, 0) for key in RESOURCE_KEYS)


def add_deltas(left: Mapping[ResourceKey, int], right: Mapping[ResourceKey, int]) -> ResourceDelta:
    """Merge two deltas, keeping only keys whose total is positive."""

    merged: ResourceDelta = {}
    for key in RESOURCE_KEYS:
        total = left.get(key, 0) + right.get(key, 0)
        if total > 0:
            merged[key] = total
    return merged


def scale_resource_delta(delta: Mapping[ResourceKey, int], multiplier: float) -> ResourceDelta:
    """Scale every entry, rounding half up and dropping non-positive results."""

    scaled: ResourceDelta = {}
    for key in RESOURCE_KEYS:
        base = delta.get(key, 0)
        if base == 0:
            continue
        value = max(0, round_half_up(base * multiplier))
        if value != 0:
            scaled[key] = value
    return scaled


def get_queued_cost(costs: Iterable[Mapping[ResourceKey, int]]) -> ResourceDelta:
    total: ResourceDelta = {}
    for cost in costs:
        total = add_deltas(total, cost)
    return total


def get_storage_caps_for_warehouse_level(
    warehouse_level: int, *, rules: RulesConfig = DEFAULT_RULES
) -> ResourceDelta:
    """Per-key storage caps; non-decreasing in level, positive at level 0."""

    level = max(0, int(warehouse_level))
    multiplier = 1 + level * rules.storage.growth_per_level
    return {
        key: max(1, math.floor(rules.storage.base_caps.get(key, 0) * multiplier))
        for key in STORABLE_RESOURCE_KEYS
    }


def clamp_resources_to_storage_caps(
    resources: ResourceStockpile,
    warehouse_level: int,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> StorageClampResult:
    """Clamp storable resources to the caps and report what was wasted."""

    caps = get_storage_caps_for_warehouse_level(warehouse_level, rules=rules)
    changes: dict[str, int] = {}
    wasted: ResourceDelta = {}
    lines: list[str] = []

    for key in STORABLE_RESOURCE_KEYS:
        current = floor_non_negative(resources.get(key))
        cap = caps[key]
        if current <= cap:
            changes[key.value] = current
            continue
        surplus = current - cap
        changes[key.value] = cap
        wasted[key] = surplus
        lines.append(f"Storage full: +{surplus} {RESOURCE_LABELS[key]} wasted")

    changes[ResourceKey.POPULATION.value] = floor_non_negative(resources.population)
    return StorageClampResult(
        resources=replace(resources, **changes),
        wasted_delta=wasted,
        waste_lines=tuple(lines),
    )


def exceeds_storage_caps(
    cost: Mapping[ResourceKey, int], warehouse_level: int, *, rules: RulesConfig = DEFAULT_RULES
) -> bool:
    """True when some storable cost entry could never be held at this warehouse level."""

    caps = get_storage_caps_for_warehouse_level(warehouse_level, rules=rules)
    return any(cost.get(key, 0) > caps[key] for key in STORABLE_RESOURCE_KEYS)


def get_non_zero_resource_delta_entries(delta: Mapping[ResourceKey, int]) -> list[ResourceDeltaEntry]:
    return [
        ResourceDeltaEntry(key=key, label=RESOURCE_LABELS[key], amount=delta[key])
        for key in RESOURCE_KEYS
        if delta.get(key, 0) != 0
    ]


def get_resource_delta_between_stockpiles(
    previous: ResourceStockpile, current: ResourceStockpile
) -> ResourceDelta:
    delta: ResourceDelta = {}
    for key in RESOURCE_KEYS:
        amount = current.get(key) - previous.get(key)
        if amount != 0:
            delta[key] = amount
    return delta


def format_signed_amount(amount: int) -> str:
    return f"+{amount}" if amount > 0 else str(amount)


def format_cost_label(cost: Mapping[ResourceKey, int]) -> str:
    """Render a cost as ``"70 Gold + 50 Wood"``."""

    parts = []
    for key in RESOURCE_KEYS:
        amount = cost.get(key, 0)
        if amount <= 0:
            continue
        name = "Pop" if key is ResourceKey.POPULATION else RESOURCE_LABELS[key]
        parts.append(f"{amount} {name}")
    return " + ".join(parts)
