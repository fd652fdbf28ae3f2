"""Enumerations and type aliases for the Britannia county engine."""

from __future__ import annotations

from enum import StrEnum


class GamePhase(StrEnum):
    """Top-level lifecycle of a game session."""

    SETUP = "setup"
    PLAYING = "playing"


class ResourceKey(StrEnum):
    """Every resource tracked in a faction stockpile."""

    GOLD = "gold"
    POPULATION = "population"
    WOOD = "wood"
    STONE = "stone"
    IRON = "iron"
    WOOL = "wool"
    LEATHER = "leather"
    HORSES = "horses"


class BuildingType(StrEnum):
    """County buildings, each a leveled upgrade track."""

    HOMESTEADS = "HOMESTEADS"
    LUMBER_CAMP = "LUMBER_CAMP"
    FARM = "FARM"
    QUARRY = "QUARRY"
    MINE = "MINE"
    PASTURE = "PASTURE"
    TANNERY = "TANNERY"
    WEAVERY = "WEAVERY"
    MARKET = "MARKET"
    PALISADE = "PALISADE"


class SpecialTrack(StrEnum):
    """Tracks that are not buildings."""

    ROADS = "ROADS"
    WAREHOUSE = "WAREHOUSE"


# Closed union of every upgrade track.
Track = BuildingType | SpecialTrack


class TrackKind(StrEnum):
    """Discriminant for :data:`Track` values."""

    BUILDING = "building"
    ROADS = "roads"
    WAREHOUSE = "warehouse"


class OrderKind(StrEnum):
    """Kinds of build-queue orders."""

    UPGRADE_TRACK = "UPGRADE_TRACK"
    CLAIM_COUNTY = "CLAIM_COUNTY"
    CONQUER_COUNTY = "CONQUER_COUNTY"


class MacroOrderCategory(StrEnum):
    """Categories of macro orders issued from the command panel."""

    BUILD = "BUILD"
    TROOPS = "TROOPS"
    RESEARCH = "RESEARCH"
    POLICIES = "POLICIES"


NEUTRAL_OWNER_ID = "NEUTRAL"


def track_kind(track: Track) -> TrackKind:
    """Return the discriminant for a track value."""

    if isinstance(track, BuildingType):
        return TrackKind.BUILDING
    if track is SpecialTrack.ROADS:
        return TrackKind.ROADS
    if track is SpecialTrack.WAREHOUSE:
        return TrackKind.WAREHOUSE
    raise TypeError(f"not a track: {track!r}")


def parse_track(value: str | Track) -> Track:
    """Coerce a raw string into a member of the track union."""

    if isinstance(value, (BuildingType, SpecialTrack)):
        return value
    normalized = str(value).strip().upper()
    if normalized in SpecialTrack.__members__:
        return SpecialTrack(normalized)
    if normalized in BuildingType.__members__:
        return BuildingType(normalized)
    raise ValueError(f"unknown track type: {value!r}")
