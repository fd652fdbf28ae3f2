"""Construction of setup-phase state and seeding of the player faction."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from britannia.domain.build_queue import EMPTY_QUEUE
from britannia.domain.enums import NEUTRAL_OWNER_ID, GamePhase
from britannia.domain.models import Character, CountyState, GameState, Kingdom
from britannia.domain.resources import create_starting_resources
from britannia.domain.rules_config import DEFAULT_RULES, RulesConfig


def normalize_county_id(county_id: str | None) -> str:
    """Strip and uppercase a county id; ``None`` becomes the empty string."""

    return (county_id or "").strip().upper()


def get_display_year(turn_number: int, *, rules: RulesConfig = DEFAULT_RULES) -> int:
    starting = rules.starting
    return starting.calendar_start_year + max(0, turn_number) // starting.turns_per_year


def create_initial_game_state(
    counties: Iterable[CountyState],
    kingdoms: Iterable[Kingdom] = (),
    characters: Iterable[Character] = (),
    adjacency: Mapping[str, Iterable[str]] | None = None,
) -> GameState:
    """Build the setup-phase state from static map data.

    Each county is owned by the first kingdom that lists it, or is neutral.
    """

    kingdoms = tuple(kingdoms)
    owner_by_county: dict[str, str] = {}
    for kingdom in kingdoms:
        for county_id in kingdom.county_ids:
            owner_by_county.setdefault(normalize_county_id(county_id), kingdom.id)

    county_map: dict[str, CountyState] = {}
    for county in counties:
        county_id = normalize_county_id(county.id)
        if not county_id or county_id in county_map:
            continue
        county_map[county_id] = replace(
            county, id=county_id, owner_id=owner_by_county.get(county_id, NEUTRAL_OWNER_ID)
        )

    neighbors: dict[str, tuple[str, ...]] = {}
    for county_id, linked in (adjacency or {}).items():
        normalized = normalize_county_id(county_id)
        neighbors[normalized] = tuple(sorted({normalize_county_id(other) for other in linked} - {normalized}))

    return GameState(
        counties=county_map,
        kingdoms=kingdoms,
        characters=tuple(characters),
        adjacency=neighbors,
    )


def reset_to_setup(state: GameState) -> GameState:
    """Drop the running game but keep the map and the superhighway preference."""

    return replace(
        state,
        phase=GamePhase.SETUP,
        turn_number=1,
        selected_county_id=None,
        selected_character_id=None,
        starting_county_id=None,
        player_faction_id=None,
        player_faction_name=None,
        player_faction_color=None,
        owned_county_ids=(),
        discovered_county_ids=(),
        build_queue_by_county_id={},
        global_build_queue=EMPTY_QUEUE,
        warehouse_level=0,
        last_turn_report=None,
        pending_orders=(),
        fog_of_war_enabled=True,
    )


def begin_game(
    state: GameState,
    character: Character,
    discovered_county_ids: Iterable[str] | None = None,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> GameState:
    """Seed the player faction for ``character`` and enter the playing phase.

    The faction is the kingdom holding the character's start county and owns
    every county of that kingdom.  Without a kingdom the character founds a new
    realm owning only the start county.
    """

    start_id = normalize_county_id(character.start_county_id)
    kingdom = next((k for k in state.kingdoms if start_id in {normalize_county_id(c) for c in k.county_ids}), None)

    counties = dict(state.counties)
    if kingdom is not None:
        faction_id, faction_name, faction_color = kingdom.id, kingdom.name, kingdom.color
        owned = [normalize_county_id(county_id) for county_id in kingdom.county_ids]
    else:
        faction_id = f"player-{character.id}"
        faction_name = f"{character.name}'s Realm"
        faction_color = rules.starting.default_faction_color
        owned = [start_id] if start_id else []
    owned = [county_id for county_id in dict.fromkeys(owned) if county_id in counties]

    minimum_road = rules.starting.minimum_road_level
    for county_id in owned:
        county = counties[county_id]
        counties[county_id] = replace(
            county,
            owner_id=faction_id,
            road_level=max(county.road_level, minimum_road),
        )

    if discovered_county_ids is None:
        discovered = [start_id, *state.neighbors_of(start_id)] if start_id else []
    else:
        discovered = [normalize_county_id(county_id) for county_id in discovered_county_ids]
        if start_id:
            discovered.append(start_id)
    discovered = [county_id for county_id in dict.fromkeys(discovered) if county_id]

    starting = create_starting_resources(rules=rules)
    population = sum(counties[county_id].population for county_id in owned)

    return replace(
        state,
        phase=GamePhase.PLAYING,
        turn_number=1,
        selected_character_id=character.id,
        starting_county_id=start_id or None,
        selected_county_id=start_id or None,
        player_faction_id=faction_id,
        player_faction_name=faction_name,
        player_faction_color=faction_color,
        owned_county_ids=tuple(owned),
        discovered_county_ids=tuple(discovered),
        counties=counties,
        resources_by_kingdom_id={
            **state.resources_by_kingdom_id,
            faction_id: replace(starting, population=population),
        },
        build_queue_by_county_id={},
        global_build_queue=EMPTY_QUEUE,
        warehouse_level=0,
        last_turn_report=None,
        fog_of_war_enabled=True,
        pending_orders=(),
    )
