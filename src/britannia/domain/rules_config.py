"""Declarative rule configuration for the county economy.

Every tunable number the engine uses lives here.  Rule functions accept a
keyword-only ``rules`` argument defaulting to :data:`DEFAULT_RULES`, so a
scenario can swap any subsystem with :func:`dataclasses.replace`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from britannia.domain.enums import BuildingType, ResourceKey
from britannia.domain.models import ResourceDelta

G = ResourceKey.GOLD
W = ResourceKey.WOOD
S = ResourceKey.STONE


@dataclass(frozen=True, slots=True)
class BuildingDefinition:
    """Static catalog entry for one building track."""

    id: BuildingType
    label: str
    short_label: str
    badge: str
    description: str
    base_cost: ResourceDelta
    yields_per_turn_per_level: ResourceDelta
    workforce_per_level: int = 0
    defense_per_level: int = 0
    uses_build_slot: bool = True


def _default_buildings() -> dict[BuildingType, BuildingDefinition]:
    definitions = [
        BuildingDefinition(
            id=BuildingType.HOMESTEADS,
            label="Homesteads",
            short_label="Homesteads",
            badge="Settled",
            description="Expand local settlement and grow population each turn.",
            base_cost={G: 70, W: 50},
            yields_per_turn_per_level={ResourceKey.POPULATION: 10},
            workforce_per_level=2,
        ),
        BuildingDefinition(
            id=BuildingType.LUMBER_CAMP,
            label="Lumber Camp",
            short_label="Lumber",
            badge="Timber",
            description="Harvest nearby forests for steady wood production.",
            base_cost={G: 80},
            yields_per_turn_per_level={W: 12},
            workforce_per_level=8,
        ),
        BuildingDefinition(
            id=BuildingType.FARM,
            label="Farm",
            short_label="Farm",
            badge="Fields",
            description="Feed more mouths and open land for further building.",
            base_cost={G: 60, W: 30},
            yields_per_turn_per_level={},
            uses_build_slot=False,
        ),
        BuildingDefinition(
            id=BuildingType.QUARRY,
            label="Quarry",
            short_label="Quarry",
            badge="Stonecut",
            description="Cut building stone from the hills.",
            base_cost={G: 90, W: 40},
            yields_per_turn_per_level={S: 8},
            workforce_per_level=10,
        ),
        BuildingDefinition(
            id=BuildingType.MINE,
            label="Mine",
            short_label="Mine",
            badge="Delved",
            description="Dig for iron ore beneath the county.",
            base_cost={G: 120, W: 60, S: 30},
            yields_per_turn_per_level={ResourceKey.IRON: 5},
            workforce_per_level=12,
        ),
        BuildingDefinition(
            id=BuildingType.PASTURE,
            label="Pasture",
            short_label="Pasture",
            badge="Grazing",
            description="Breed horses on open grassland.",
            base_cost={G: 70, W: 30},
            yields_per_turn_per_level={ResourceKey.HORSES: 2},
            workforce_per_level=6,
        ),
        BuildingDefinition(
            id=BuildingType.TANNERY,
            label="Tannery",
            short_label="Tannery",
            badge="Hides",
            description="Cure hides into leather.",
            base_cost={G: 85, W: 40},
            yields_per_turn_per_level={ResourceKey.LEATHER: 4},
            workforce_per_level=8,
        ),
        BuildingDefinition(
            id=BuildingType.WEAVERY,
            label="Weavery",
            short_label="Weavery",
            badge="Looms",
            description="Spin and weave wool for trade and kit.",
            base_cost={G: 85, W: 40},
            yields_per_turn_per_level={ResourceKey.WOOL: 4},
            workforce_per_level=8,
        ),
        BuildingDefinition(
            id=BuildingType.MARKET,
            label="Market",
            short_label="Market",
            badge="Trade",
            description="Draw merchants and tax their stalls.",
            base_cost={G: 100, W: 40},
            yields_per_turn_per_level={G: 10},
            workforce_per_level=6,
        ),
        BuildingDefinition(
            id=BuildingType.PALISADE,
            label="Palisade",
            short_label="Palisade",
            badge="Fortified",
            description="Raise wooden defenses to harden the county border.",
            base_cost={G: 110, W: 90},
            yields_per_turn_per_level={},
            workforce_per_level=3,
            defense_per_level=1,
        ),
    ]
    return {definition.id: definition for definition in definitions}


@dataclass(frozen=True, slots=True)
class TrackCatalog:
    """Building definitions and the canonical iteration order."""

    buildings: dict[BuildingType, BuildingDefinition] = field(default_factory=_default_buildings)
    building_order: tuple[BuildingType, ...] = tuple(BuildingType)


@dataclass(frozen=True, slots=True)
class EconomyRules:
    """Track level bounds, cost scaling, and flat county income."""

    max_track_level: int = 20
    cost_step_per_level: float = 0.25
    levels_per_extra_turn: int = 4
    base_county_yield: ResourceDelta = field(default_factory=lambda: {G: 8, W: 6})


@dataclass(frozen=True, slots=True)
class PopulationRules:
    """FARM-driven population cap and building slots."""

    base_population_cap: int = 40
    population_cap_per_farm_level: int = 60
    base_build_slots: int = 2
    build_slots_per_farm_level: int = 1


@dataclass(frozen=True, slots=True)
class StorageRules:
    """Warehouse-derived storage caps."""

    base_caps: ResourceDelta = field(
        default_factory=lambda: {
            G: 1000,
            W: 600,
            S: 400,
            ResourceKey.IRON: 300,
            ResourceKey.WOOL: 300,
            ResourceKey.LEATHER: 300,
            ResourceKey.HORSES: 150,
        }
    )
    growth_per_level: float = 0.5


@dataclass(frozen=True, slots=True)
class RoadRules:
    """ROADS track cost and duration schedule."""

    first_level_cost: ResourceDelta = field(default_factory=lambda: {G: 40})
    gold_per_level_squared: int = 25
    stone_from_level: int = 4
    stone_per_level_squared: int = 5
    one_turn_max_level: int = 3
    two_turn_max_level: int = 10


@dataclass(frozen=True, slots=True)
class WarehouseRules:
    """WAREHOUSE track cost and duration schedule."""

    first_level_cost: ResourceDelta = field(default_factory=lambda: {G: 120, W: 80})
    gold_per_level_squared: int = 25
    wood_per_level_squared: int = 15
    stone_from_level: int = 3
    stone_per_level_squared: int = 8
    one_turn_max_level: int = 5
    two_turn_max_level: int = 12


@dataclass(frozen=True, slots=True)
class CountyActionRules:
    """Claim and conquest costs, durations, and damage."""

    claim_cost: ResourceDelta = field(default_factory=lambda: {G: 120, W: 80})
    claim_population_cost: int = 25
    claim_turns: int = 2
    claim_population_ceiling: int = 30
    conquer_cost: ResourceDelta = field(default_factory=lambda: {G: 160, W: 40})
    conquer_population_cost: int = 35
    conquer_base_turns: int = 2
    conquer_palisade_levels_per_turn: int = 5
    conquer_road_bonus_level: int = 10
    conquer_min_turns: int = 2
    conquer_max_turns: int = 6
    conquest_level_retention: float = 0.7
    conquest_road_retention: float = 0.5
    conquest_population_retention: float = 0.5
    conquest_population_floor: int = 20


@dataclass(frozen=True, slots=True)
class StartingRules:
    """Faction seeding when a game begins."""

    resources: ResourceDelta = field(
        default_factory=lambda: {
            G: 500,
            W: 250,
            S: 120,
            ResourceKey.IRON: 40,
            ResourceKey.WOOL: 40,
            ResourceKey.LEATHER: 30,
            ResourceKey.HORSES: 10,
        }
    )
    minimum_road_level: int = 1
    default_faction_color: str = "#f3c94b"
    calendar_start_year: int = 650
    turns_per_year: int = 4


@dataclass(frozen=True, slots=True)
class ReportRules:
    """Turn report presentation limits."""

    max_lines: int = 8


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    catalog: TrackCatalog = TrackCatalog()
    economy: EconomyRules = EconomyRules()
    population: PopulationRules = PopulationRules()
    storage: StorageRules = StorageRules()
    roads: RoadRules = RoadRules()
    warehouse: WarehouseRules = WarehouseRules()
    county_actions: CountyActionRules = CountyActionRules()
    starting: StartingRules = StartingRules()
    report: ReportRules = ReportRules()


DEFAULT_RULES = RulesConfig()
