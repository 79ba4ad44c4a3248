"""
orbitmap Configuration

Two layers of configuration:

1. Environment variables (prefixed with ORBITMAP_) and ~/.orbitmap/.env,
   loaded through pydantic-settings:
   - ORBITMAP_LOG_LEVEL: Logging level for the CLI (default: WARNING)
   - ORBITMAP_CONFIG_FILE: Explicit path to an orbitmap.toml

2. An orbitmap.toml found in the working directory or any parent, carrying
   the tunables of the layout engine and the recommender:

    [layout]
    core_radius = 8
    resource_radius = 25

    [project_layout]
    importance_threshold = 0.7

    [recommender]
    max_results = 5
"""

import logging
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "orbitmap.toml"


# ============================================================================
# Layout Configuration
# ============================================================================

class LayoutConfig(BaseModel):
    """Tunables of the layered radial layout."""

    model_config = ConfigDict(frozen=True)

    core_radius: float = Field(default=8.0, gt=0, description="Radius of the core (adapter) ring")
    tool_radius: float = Field(default=15.0, gt=0, description="Radius of the tool (category) ring")
    resource_radius: float = Field(default=25.0, gt=0, description="Radius of the first resource ring")
    layer_height: float = Field(default=3.0, description="Vertical offset between layers")
    vertical_spread: float = Field(
        default=0.6, ge=0, description="Amplitude of the sin(2*angle) ripple on core/tool rings"
    )
    start_angle: float = Field(default=0.0, description="Angle (radians) of the first slot")
    group_gap: float = Field(default=0.08, ge=0, description="Gap (radians) between resource sectors")
    min_sector_angle: float = Field(
        default=0.25, ge=0, description="Minimum sector width (radians) of a resource group"
    )
    sector_inset: float = Field(
        default=0.08, ge=0, lt=0.5, description="Fraction of a sector left empty on each side"
    )
    min_arc_spacing: float = Field(
        default=2.0, gt=0, description="Minimum arc distance between nodes of one ring"
    )
    max_per_ring: int = Field(default=15, ge=1, description="Hard cap on nodes per ring")
    ring_step: float = Field(default=5.0, gt=0, description="Radius added per overflow ring")
    ring_vertical_step: float = Field(
        default=2.5, ge=0, description="Vertical step of alternating overflow rings"
    )


class ProjectLayoutConfig(BaseModel):
    """Tunables of the file-structure layout."""

    model_config = ConfigDict(frozen=True)

    directory_radius: float = Field(default=5.0, gt=0, description="Ring of directory anchors")
    inner_radius: float = Field(default=10.0, gt=0, description="Ring of important files")
    outer_radius: float = Field(default=15.0, gt=0, description="Ring of remaining files")
    vertical_spread: float = Field(default=2.0, ge=0, description="Amplitude of the file wave")
    vertical_offset: float = Field(default=-1.0, description="Baseline height of files")
    importance_threshold: float = Field(
        default=0.7, ge=0, le=1, description="Files strictly above go on the inner ring"
    )
    main_directories: List[str] = Field(
        default_factory=lambda: ["app", "components", "services", "stores", "utils", "types"],
        description="Directories always given an anchor, in this order",
    )


class RecommenderConfig(BaseModel):
    """Tunables of the keyword recommender."""

    model_config = ConfigDict(frozen=True)

    max_results: int = Field(default=5, ge=1, description="Recommendations returned per session")
    min_score: float = Field(default=0.1, ge=0, le=1, description="Scores must be strictly above")
    action_min_score: float = Field(
        default=0.3, ge=0, le=1, description="Minimum score for an add-modules suggestion"
    )
    action_max_modules: int = Field(default=3, ge=1, description="Modules per add-modules suggestion")


class OrbitmapConfig(BaseModel):
    """Complete orbitmap.toml configuration."""

    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    project_layout: ProjectLayoutConfig = Field(default_factory=ProjectLayoutConfig)
    recommender: RecommenderConfig = Field(default_factory=RecommenderConfig)


def find_orbitmap_toml(start_path: Path = Path(".")) -> Optional[Path]:
    """Search for orbitmap.toml in start_path and its parents."""
    current = start_path.resolve()
    for _ in range(len(current.parts)):
        check_path = current / CONFIG_FILENAME
        if check_path.exists():
            return check_path
        if current == current.parent:
            break
        current = current.parent
    return None


def load_orbitmap_config(
    start_path: Path = Path("."),
    config_file: Optional[Path] = None,
) -> OrbitmapConfig:
    """Load orbitmap.toml, returning defaults when absent or malformed."""
    toml_path = config_file or find_orbitmap_toml(start_path)
    if not toml_path:
        return OrbitmapConfig()
    if not toml_path.exists():
        logger.warning(f"Config file {toml_path} not found, using defaults")
        return OrbitmapConfig()

    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
        config = OrbitmapConfig(**data)
    except (tomllib.TOMLDecodeError, ValidationError) as e:
        logger.warning(f"Ignoring malformed {toml_path}: {e}")
        return OrbitmapConfig()

    logger.debug(f"Loaded configuration from {toml_path}")
    return config


# ============================================================================
# Environment Settings
# ============================================================================

class Settings(BaseSettings):
    """orbitmap environment settings."""

    log_level: str = "WARNING"
    config_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="ORBITMAP_",
        env_file=Path.home() / ".orbitmap" / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Optional[str]) -> str:
        level = (value or "WARNING").upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return cached settings."""
    return Settings()


def reload_settings() -> Settings:
    """Clear cached settings (useful for tests)."""
    get_settings.cache_clear()
    return get_settings()


__all__ = [
    "LayoutConfig",
    "ProjectLayoutConfig",
    "RecommenderConfig",
    "OrbitmapConfig",
    "Settings",
    "find_orbitmap_toml",
    "load_orbitmap_config",
    "get_settings",
    "reload_settings",
]
