"""Configuration for locating the static map data."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Loader settings, read from ``BRITANNIA_*`` variables or ``.env``."""

    model_config = SettingsConfigDict(env_prefix="BRITANNIA_", env_file=".env", env_file_encoding="utf-8")

    data_dir: Path = Field(default=Path("data"), description="Directory holding the static map documents")
    counties_file: str = Field(default="county_metadata.json", description="County metadata document")
    kingdoms_file: str = Field(default="kingdoms.json", description="Kingdom list document")
    characters_file: str = Field(default="starts.json", description="Playable starting characters")
    adjacency_file: str = Field(default="adjacency.json", description="County neighbour document")
    adjacency_required: bool = Field(
        default=False,
        description="Fail when the adjacency document is missing instead of loading an empty graph",
    )

    def path_for(self, file_name: str) -> Path:
        return self.data_dir / file_name


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
