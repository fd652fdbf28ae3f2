"""Static map data loader and adjacency provider.

Reads the county metadata, kingdom list, starting characters and county
neighbour documents from ``Settings.data_dir``.  Individual malformed records
are skipped; a missing required document raises :class:`FileNotFoundError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from britannia.config import Settings, get_settings
from britannia.domain.enums import BuildingType, parse_track
from britannia.domain.models import Character, CountyState, GameState, Kingdom
from britannia.domain.rules_config import DEFAULT_RULES, RulesConfig
from britannia.domain.setup import create_initial_game_state, normalize_county_id

logger = logging.getLogger(__name__)

_DOCUMENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CountyRecord(_Record):
    id: str | None = Field(None, description="County id; falls back to the document key")
    display_name: str | None = Field(None, alias="displayName", description="Human-readable county name")
    prosperity_base: float = Field(0.0, alias="prosperityBase", description="Static prosperity modifier")
    buildings: dict[str, int] = Field(default_factory=dict, description="Starting level per building type")
    road_level: int = Field(0, alias="roadLevel", ge=0, description="Starting road level")
    population: int = Field(0, ge=0, description="Starting population")


class KingdomRecord(_Record):
    id: str = Field(..., min_length=1, description="Kingdom id, also used as the faction id")
    name: str = Field(..., min_length=1, description="Kingdom display name")
    color: str = Field("#888888", description="Map colour")
    county_ids: list[str] = Field(default_factory=list, alias="countyIds", description="Member counties")

    @field_validator("county_ids")
    @classmethod
    def normalize_county_ids(cls, value: list[str]) -> list[str]:
        return [county_id for county_id in (normalize_county_id(item) for item in value) if county_id]


class CharacterRecord(_Record):
    id: str = Field(..., min_length=1, description="Character id")
    name: str = Field(..., min_length=1, description="Character display name")
    start_county_id: str = Field(..., min_length=1, alias="startCountyId", description="Home county")


class AdjacencyDocument(_Record):
    neighbors: dict[str, list[str]] = Field(default_factory=dict, description="Shared-border neighbours")
    manual_edges: list[list[str]] = Field(
        default_factory=list, alias="manualEdges", description="Extra undirected county pairs"
    )


@dataclass(frozen=True, slots=True)
class MapData:
    """Everything the engine needs to build its setup-phase state."""

    counties: tuple[CountyState, ...] = ()
    kingdoms: tuple[Kingdom, ...] = ()
    characters: tuple[Character, ...] = ()
    adjacency: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def create_game_state(self) -> GameState:
        return create_initial_game_state(self.counties, self.kingdoms, self.characters, self.adjacency)


def load_map_data(settings: Settings | None = None, *, rules: RulesConfig = DEFAULT_RULES) -> MapData:
    """Read every static document named by ``settings``."""

    settings = settings or get_settings()
    counties = parse_counties(_read_json(settings.path_for(settings.counties_file)), rules=rules)
    kingdoms = parse_kingdoms(_read_json(settings.path_for(settings.kingdoms_file)))
    characters = parse_characters(_read_json(settings.path_for(settings.characters_file)))

    adjacency_path = settings.path_for(settings.adjacency_file)
    if adjacency_path.exists() or settings.adjacency_required:
        adjacency = parse_adjacency(_read_json(adjacency_path))
    else:
        logger.info("no adjacency document at %s; counties have no neighbours", adjacency_path)
        adjacency = {}

    logger.info(
        "loaded %d counties, %d kingdoms, %d characters from %s",
        len(counties),
        len(kingdoms),
        len(characters),
        settings.data_dir,
    )
    return MapData(counties=counties, kingdoms=kingdoms, characters=characters, adjacency=adjacency)


def _read_json(path: Path) -> Any:
    if not path.is_file():
        raise FileNotFoundError(f"map data document not found: {path}")
    return _DOCUMENT_ADAPTER.validate_json(path.read_bytes())


def _records(payload: Any, key: str) -> list[Any]:
    if isinstance(payload, Mapping):
        payload = payload.get(key, [])
    if not isinstance(payload, list):
        logger.debug("expected a list under %r; got %s", key, type(payload).__name__)
        return []
    return payload


def parse_counties(payload: Any, *, rules: RulesConfig = DEFAULT_RULES) -> tuple[CountyState, ...]:
    """Counties from a mapping keyed by county id (or a list of records)."""

    if isinstance(payload, Mapping):
        items: Iterable[tuple[str | None, Any]] = payload.items()
    elif isinstance(payload, list):
        items = ((None, record) for record in payload)
    else:
        logger.debug("county metadata is not a mapping; nothing loaded")
        return ()

    counties: dict[str, CountyState] = {}
    for fallback_id, raw in items:
        try:
            record = CountyRecord.model_validate(raw)
        except ValidationError as exc:
            logger.debug("skipping county record %s: %s", fallback_id, exc.errors()[0]["msg"])
            continue
        county_id = normalize_county_id(record.id or fallback_id)
        if not county_id:
            logger.debug("skipping county record without an id")
            continue
        name = (record.display_name or "").strip() or county_id
        counties[county_id] = CountyState(
            id=county_id,
            name=name,
            buildings=_parse_buildings(county_id, record.buildings, rules),
            road_level=min(record.road_level, rules.economy.max_track_level),
            population=record.population,
            prosperity=record.prosperity_base,
        )
    return tuple(counties.values())


def _parse_buildings(county_id: str, raw: Mapping[str, int], rules: RulesConfig) -> dict[BuildingType, int]:
    buildings: dict[BuildingType, int] = {}
    for key, level in raw.items():
        try:
            track = parse_track(key)
        except ValueError:
            logger.debug("county %s: ignoring unknown building %r", county_id, key)
            continue
        if not isinstance(track, BuildingType):
            logger.debug("county %s: %s is not a building", county_id, track)
            continue
        buildings[track] = max(0, min(rules.economy.max_track_level, level))
    return buildings


def parse_kingdoms(payload: Any) -> tuple[Kingdom, ...]:
    kingdoms: list[Kingdom] = []
    for raw in _records(payload, "kingdoms"):
        try:
            record = KingdomRecord.model_validate(raw)
        except ValidationError as exc:
            logger.debug("skipping kingdom record: %s", exc.errors()[0]["msg"])
            continue
        kingdoms.append(
            Kingdom(id=record.id, name=record.name, color=record.color, county_ids=tuple(record.county_ids))
        )
    return tuple(kingdoms)


def parse_characters(payload: Any) -> tuple[Character, ...]:
    characters: list[Character] = []
    for raw in _records(payload, "starts"):
        try:
            record = CharacterRecord.model_validate(raw)
        except ValidationError as exc:
            logger.debug("skipping starting character: %s", exc.errors()[0]["msg"])
            continue
        characters.append(
            Character(
                id=record.id,
                name=record.name,
                start_county_id=normalize_county_id(record.start_county_id),
            )
        )
    return tuple(characters)


def parse_adjacency(payload: Any) -> dict[str, tuple[str, ...]]:
    """Symmetric, sorted neighbour lists from border data plus manual edges."""

    try:
        document = AdjacencyDocument.model_validate(payload)
    except ValidationError as exc:
        logger.debug("adjacency document is malformed; ignoring it: %s", exc.errors()[0]["msg"])
        return {}

    edges: list[tuple[str, str]] = [
        (county_id, neighbor_id)
        for county_id, neighbor_ids in document.neighbors.items()
        for neighbor_id in neighbor_ids
    ]
    for pair in document.manual_edges:
        if len(pair) != 2:
            logger.debug("skipping manual edge %r", pair)
            continue
        edges.append((pair[0], pair[1]))
    return build_adjacency(edges)


def build_adjacency(edges: Iterable[tuple[str, str]]) -> dict[str, tuple[str, ...]]:
    linked: dict[str, set[str]] = {}
    for left, right in edges:
        a, b = normalize_county_id(left), normalize_county_id(right)
        if not a or not b or a == b:
            continue
        linked.setdefault(a, set()).add(b)
        linked.setdefault(b, set()).add(a)
    return {county_id: tuple(sorted(neighbors)) for county_id, neighbors in sorted(linked.items())}
