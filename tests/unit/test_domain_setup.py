"""Tests for setup-state construction, the calendar, and macro order validation."""

from __future__ import annotations

from britannia.domain.enums import NEUTRAL_OWNER_ID, GamePhase, MacroOrderCategory
from britannia.domain.models import CountyState, GameState, Kingdom, MacroOrder
from britannia.domain.orders import validate_order, validate_orders
from britannia.domain.setup import create_initial_game_state, get_display_year, normalize_county_id


def test_normalize_county_id():
    assert normalize_county_id("  york ") == "YORK"
    assert normalize_county_id(None) == ""


def test_display_year_advances_every_four_turns():
    assert get_display_year(1) == 650
    assert get_display_year(4) == 651
    assert get_display_year(9) == 652
    assert get_display_year(-3) == 650


def test_initial_state_assigns_kingdom_owners(setup_state):
    assert setup_state.phase is GamePhase.SETUP
    assert setup_state.counties["YORK"].owner_id == "NORTHUMBRIA"
    assert setup_state.counties["LINCOLN"].owner_id == "MERCIA"
    assert setup_state.counties["HULL"].owner_id == NEUTRAL_OWNER_ID
    assert setup_state.owned_county_ids == ()


def test_initial_state_normalizes_ids_and_adjacency():
    state = create_initial_game_state(
        [CountyState(id=" kent ", name="Kent"), CountyState(id="KENT", name="Duplicate")],
        kingdoms=[Kingdom(id="KENT_K", name="Kent", color="#fff", county_ids=("kent",))],
        adjacency={"kent": ["sussex", "KENT"]},
    )

    assert list(state.counties) == ["KENT"]
    assert state.counties["KENT"].name == "Kent"
    assert state.counties["KENT"].owner_id == "KENT_K"
    assert state.adjacency == {"KENT": ("SUSSEX",)}


def test_macro_orders_referencing_unknown_counties_are_invalid(playing_state):
    good = MacroOrder(id="a", category=MacroOrderCategory.RESEARCH, county_id="YORK", issued_on_turn=1)
    bad = MacroOrder(id="b", category=MacroOrderCategory.POLICIES, county_id="MORDOR", issued_on_turn=1)

    assert validate_order(good, playing_state).is_valid
    results = validate_orders([good, bad], playing_state)
    assert [result.is_valid for result in results] == [True, False]
    assert results[1].reason == "Unknown county: MORDOR"
    assert validate_orders([], GameState()) == []
