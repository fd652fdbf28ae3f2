"""Tests for stockpile arithmetic and storage clamping."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from britannia.domain.enums import ResourceKey
from britannia.domain.models import ResourceStockpile
from britannia.domain.resources import (
    STORABLE_RESOURCE_KEYS,
    add_deltas,
    add_resource_delta,
    clamp_resources_to_storage_caps,
    create_starting_resources,
    exceeds_storage_caps,
    format_cost_label,
    get_queued_cost,
    get_resource_delta_between_stockpiles,
    get_storage_caps_for_warehouse_level,
    has_enough_resources,
    round_half_up,
    scale_resource_delta,
    subtract_resource_delta,
)

G = ResourceKey.GOLD
W = ResourceKey.WOOD


def test_add_and_subtract_return_new_stockpiles():
    stock = ResourceStockpile(gold=100, wood=20)
    richer = add_resource_delta(stock, {G: 50})
    poorer = subtract_resource_delta(stock, {G: 30, W: 20})

    assert stock == ResourceStockpile(gold=100, wood=20)
    assert richer.gold == 150
    assert poorer.gold == 70
    assert poorer.wood == 0


def test_has_enough_resources_treats_absent_keys_as_zero():
    stock = ResourceStockpile(gold=100)
    assert has_enough_resources(stock, {G: 100})
    assert has_enough_resources(stock, {})
    assert not has_enough_resources(stock, {G: 100, W: 1})


def test_starting_resources_match_rules():
    stock = create_starting_resources()
    assert stock.gold == 500
    assert stock.wood == 250
    assert stock.population == 0


def test_round_half_up_rounds_halves_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2


def test_scale_resource_delta_drops_zero_entries():
    assert scale_resource_delta({G: 10, W: 1}, 0.4) == {G: 4}
    assert scale_resource_delta({G: 10}, 0.0) == {}


def test_add_deltas_keeps_only_positive_totals():
    assert add_deltas({G: 5, W: 3}, {G: 2, W: -3}) == {G: 7}


def test_queued_cost_sums_every_order():
    assert get_queued_cost([{G: 70, W: 50}, {G: 80}]) == {G: 150, W: 50}


def test_clamp_records_surplus_as_waste():
    result = clamp_resources_to_storage_caps(ResourceStockpile(gold=1_250, wood=10, population=999), 0)

    assert result.resources.gold == 1_000
    assert result.resources.wood == 10
    assert result.resources.population == 999
    assert result.wasted_delta == {G: 250}
    assert result.waste_lines == ("Storage full: +250 Gold wasted",)


def test_clamp_floors_negative_population():
    result = clamp_resources_to_storage_caps(ResourceStockpile(population=-4), 0)
    assert result.resources.population == 0


def test_storage_caps_grow_with_warehouse_level():
    assert get_storage_caps_for_warehouse_level(0)[G] == 1_000
    assert get_storage_caps_for_warehouse_level(2)[G] == 2_000
    assert ResourceKey.POPULATION not in get_storage_caps_for_warehouse_level(0)


@given(st.integers(min_value=0, max_value=19))
def test_storage_caps_are_monotonic_and_positive(level):
    lower = get_storage_caps_for_warehouse_level(level)
    higher = get_storage_caps_for_warehouse_level(level + 1)
    for key in STORABLE_RESOURCE_KEYS:
        assert lower[key] >= 1
        assert higher[key] >= lower[key]


def test_exceeds_storage_caps_only_checks_storable_keys():
    assert exceeds_storage_caps({G: 1_001}, 0)
    assert not exceeds_storage_caps({G: 1_000}, 0)
    assert not exceeds_storage_caps({ResourceKey.POPULATION: 10_000}, 0)


def test_delta_between_stockpiles_omits_unchanged_keys():
    before = ResourceStockpile(gold=100, wood=50)
    after = ResourceStockpile(gold=120, wood=50, stone=-5)
    assert get_resource_delta_between_stockpiles(before, after) == {G: 20, ResourceKey.STONE: -5}


def test_format_cost_label():
    assert format_cost_label({W: 50, G: 70}) == "70 Gold + 50 Wood"
    assert format_cost_label({G: 120, ResourceKey.POPULATION: 25}) == "120 Gold + 25 Pop"
