"""Dataclasses describing the county economy game state.

All records are frozen.  Transitions build new values with
:func:`dataclasses.replace` and fresh containers, so any earlier
:class:`GameState` stays valid and comparable after a command is applied.
Mapping fields are never mutated once a record is constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from britannia.domain.enums import (
    NEUTRAL_OWNER_ID,
    BuildingType,
    GamePhase,
    MacroOrderCategory,
    OrderKind,
    ResourceKey,
    Track,
)

# Partial signed mapping over resource keys, used for costs and yields.
ResourceDelta = dict[ResourceKey, int]

# Level per building type; absent keys are level 0.
BuildingLevels = dict[BuildingType, int]


@dataclass(frozen=True, slots=True)
class ResourceStockpile:
    """Integer amounts held by one faction."""

    gold: int = 0
    population: int = 0
    wood: int = 0
    stone: int = 0
    iron: int = 0
    wool: int = 0
    leather: int = 0
    horses: int = 0

    def get(self, key: ResourceKey) -> int:
        return getattr(self, key.value)

    def as_delta(self) -> ResourceDelta:
        return {key: self.get(key) for key in ResourceKey}


@dataclass(frozen=True, slots=True)
class CountyState:
    """Mutable-by-replacement state of one county."""

    id: str
    name: str
    owner_id: str = NEUTRAL_OWNER_ID
    buildings: BuildingLevels = field(default_factory=dict)
    road_level: int = 0
    population: int = 0
    prosperity: float = 0.0

    def level_of(self, building: BuildingType) -> int:
        return self.buildings.get(building, 0)

    @property
    def label(self) -> str:
        return f"{self.name} ({self.id})"


@dataclass(frozen=True, slots=True)
class BuildOrder:
    """Order waiting in, or running at the head of, a build queue."""

    id: str
    kind: OrderKind
    turns_remaining: int
    cost: ResourceDelta
    queued_on_turn: int
    track: Track | None = None
    target_level_delta: int = 1
    population_cost: int = 0
    source_county_id: str | None = None
    target_county_id: str | None = None

    @property
    def is_exclusive(self) -> bool:
        return self.kind in (OrderKind.CLAIM_COUNTY, OrderKind.CONQUER_COUNTY)


@dataclass(frozen=True, slots=True)
class BuildQueue:
    """One active slot plus an ordered FIFO of pending orders."""

    active: BuildOrder | None = None
    queued: tuple[BuildOrder, ...] = ()


@dataclass(frozen=True, slots=True)
class Kingdom:
    """Kingdom as supplied by the static map data."""

    id: str
    name: str
    color: str
    county_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Character:
    """Playable starting character."""

    id: str
    name: str
    start_county_id: str


@dataclass(frozen=True, slots=True)
class MacroOrder:
    """Order issued from the command panel and validated at turn end."""

    id: str
    category: MacroOrderCategory
    county_id: str
    issued_on_turn: int
    parameters: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TurnReport:
    """User-facing summary of one turn resolution."""

    turn_number: int
    resource_deltas: ResourceDelta
    lines: tuple[str, ...] = ()
    wasted_delta: ResourceDelta = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class GameState:
    """Root aggregate for a single-player session."""

    phase: GamePhase = GamePhase.SETUP
    turn_number: int = 1
    selected_county_id: str | None = None
    selected_character_id: str | None = None
    starting_county_id: str | None = None
    player_faction_id: str | None = None
    player_faction_name: str | None = None
    player_faction_color: str | None = None
    owned_county_ids: tuple[str, ...] = ()
    discovered_county_ids: tuple[str, ...] = ()
    resources_by_kingdom_id: dict[str, ResourceStockpile] = field(default_factory=dict)
    build_queue_by_county_id: dict[str, BuildQueue] = field(default_factory=dict)
    global_build_queue: BuildQueue = BuildQueue()
    warehouse_level: int = 0
    counties: dict[str, CountyState] = field(default_factory=dict)
    kingdoms: tuple[Kingdom, ...] = ()
    characters: tuple[Character, ...] = ()
    adjacency: dict[str, tuple[str, ...]] = field(default_factory=dict)
    last_turn_report: TurnReport | None = None
    pending_orders: tuple[MacroOrder, ...] = ()
    fog_of_war_enabled: bool = True
    superhighways_enabled: bool = False
    no_conquest_enabled: bool = False

    @property
    def player_resources(self) -> ResourceStockpile | None:
        if self.player_faction_id is None:
            return None
        return self.resources_by_kingdom_id.get(self.player_faction_id)

    def neighbors_of(self, county_id: str) -> tuple[str, ...]:
        return self.adjacency.get(county_id, ())
