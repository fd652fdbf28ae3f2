"""Closed set of player commands accepted by :func:`britannia.domain.dispatcher.dispatch`."""

from __future__ import annotations

from dataclasses import dataclass

from britannia.domain.enums import Track


@dataclass(frozen=True, slots=True)
class SelectCounty:
    county_id: str | None


@dataclass(frozen=True, slots=True)
class OpenSetup:
    """Return to character selection, discarding the running game."""


@dataclass(frozen=True, slots=True)
class BeginGameWithCharacter:
    character_id: str
    discovered_county_ids: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class ToggleFogOfWar:
    pass


@dataclass(frozen=True, slots=True)
class ToggleSuperhighways:
    pass


@dataclass(frozen=True, slots=True)
class ToggleNoConquest:
    pass


@dataclass(frozen=True, slots=True)
class QueueTrackUpgrade:
    county_id: str
    track: Track


@dataclass(frozen=True, slots=True)
class QueueWarehouseUpgrade:
    pass


@dataclass(frozen=True, slots=True)
class QueueClaimCounty:
    source_county_id: str
    target_county_id: str


@dataclass(frozen=True, slots=True)
class QueueConquerCounty:
    source_county_id: str
    target_county_id: str


@dataclass(frozen=True, slots=True)
class CancelBuildOrder:
    county_id: str
    order_id: str


@dataclass(frozen=True, slots=True)
class CancelWarehouseOrder:
    order_id: str


@dataclass(frozen=True, slots=True)
class EndTurn:
    pass


@dataclass(frozen=True, slots=True)
class CloseTurnReport:
    pass


Action = (
    SelectCounty
    | OpenSetup
    | BeginGameWithCharacter
    | ToggleFogOfWar
    | ToggleSuperhighways
    | ToggleNoConquest
    | QueueTrackUpgrade
    | QueueWarehouseUpgrade
    | QueueClaimCounty
    | QueueConquerCounty
    | CancelBuildOrder
    | CancelWarehouseOrder
    | EndTurn
    | CloseTurnReport
)
