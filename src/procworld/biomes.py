"""Biome parameter records and the default biome registry."""

from typing import Mapping

from pydantic import BaseModel, Field

from .exceptions import UnknownBiomeError
from .terrain_types import Material

DEFAULT_BIOME = "dark_forest"


class BiomeParams(BaseModel, frozen=True):
    """Immutable terrain and population parameters for one biome.

    Weather and atmosphere baselines are stored as tuples of pairs so the
    record cannot be mutated through them; use ``weather_defaults`` and
    ``atmosphere_defaults`` to get fresh dictionaries.
    """

    base_elevation: float = Field(description="Elevation offset added after roughness scaling")
    roughness: float = Field(description="Multiplier on raw fBm elevation")
    tree_density: float = Field(ge=0.0, description="Tree candidates per 1000 cells")
    rock_density: float = Field(ge=0.0, description="Rock candidates per 1000 cells")
    strange_density: float = Field(ge=0.0, description="Anomaly candidates per 1000 cells")
    tree_types: tuple[str, ...] = Field(default=("pine",), description="Allowed tree sub-types")
    ground_materials: tuple[Material, ...] = Field(
        default=(Material.DIRT,), description="Material roulette entries, repeats weight a material"
    )
    fear_level: float = Field(ge=0.1, le=1.0, description="Baseline scene fear level")
    weather: tuple[tuple[str, float], ...] = ()
    atmosphere: tuple[tuple[str, float], ...] = ()

    def weather_defaults(self) -> dict[str, float]:
        """Return a fresh weather weight mapping."""
        return dict(self.weather)

    def atmosphere_defaults(self) -> dict[str, float]:
        """Return a fresh atmosphere weight mapping."""
        return dict(self.atmosphere)


def default_biomes() -> dict[str, BiomeParams]:
    """Build the stock biome registry."""
    return {
        "dark_forest": BiomeParams(
            base_elevation=0.5,
            roughness=0.6,
            tree_density=8.0,
            rock_density=3.0,
            strange_density=0.5,
            tree_types=("pine", "dead_tree", "twisted_tree"),
            ground_materials=(Material.DIRT, Material.DIRT, Material.DIRT, Material.ROCK),
            fear_level=0.7,
            weather=(("fog", 0.7), ("mist", 0.5), ("wind", 0.3)),
            atmosphere=(
                ("atmosphere.fear", 0.7),
                ("atmosphere.ominous", 0.8),
                ("atmosphere.dread", 0.6),
                ("visuals.dark", 0.7),
                ("conditions.shadow", 0.8),
                ("conditions.darkness", 0.6),
            ),
        ),
        "swamp": BiomeParams(
            base_elevation=0.3,
            roughness=0.4,
            tree_density=5.0,
            rock_density=1.0,
            strange_density=0.8,
            tree_types=("dead_tree", "twisted_tree", "thin_tree"),
            ground_materials=(Material.WATER, Material.DIRT, Material.WATER, Material.WATER),
            fear_level=0.8,
            weather=(("fog", 0.9), ("mist", 0.8), ("wind", 0.1)),
            atmosphere=(
                ("atmosphere.fear", 0.8),
                ("atmosphere.ominous", 0.9),
                ("atmosphere.dread", 0.8),
                ("visuals.dark", 0.6),
                ("visuals.distorted", 0.7),
                ("conditions.fog", 0.9),
                ("conditions.darkness", 0.5),
                ("conditions.unnatural", 0.6),
            ),
        ),
        "mountains": BiomeParams(
            base_elevation=0.7,
            roughness=0.8,
            tree_density=3.0,
            rock_density=7.0,
            strange_density=0.3,
            tree_types=("pine", "small_pine"),
            ground_materials=(Material.ROCK, Material.ROCK, Material.ROCK, Material.SNOW),
            fear_level=0.6,
            weather=(("fog", 0.4), ("mist", 0.3), ("wind", 0.9)),
            atmosphere=(
                ("atmosphere.fear", 0.6),
                ("atmosphere.tension", 0.7),
                ("atmosphere.ominous", 0.5),
                ("visuals.dark", 0.4),
                ("conditions.shadow", 0.7),
            ),
        ),
        "clearing": BiomeParams(
            base_elevation=0.4,
            roughness=0.3,
            tree_density=1.0,
            rock_density=1.0,
            strange_density=0.1,
            tree_types=("pine", "small_pine", "bush"),
            ground_materials=(Material.DIRT, Material.DIRT, Material.DIRT, Material.DIRT),
            fear_level=0.3,
            weather=(("fog", 0.3), ("mist", 0.2), ("wind", 0.4)),
            atmosphere=(
                ("atmosphere.fear", 0.3),
                ("atmosphere.tension", 0.4),
                ("visuals.dark", 0.3),
            ),
        ),
    }


def get_biome(biomes: Mapping[str, BiomeParams], name: str) -> BiomeParams:
    """Look up biome parameters by name.

    Raises:
        UnknownBiomeError: If no biome with that name is registered.
    """
    try:
        return biomes[name]
    except KeyError:
        raise UnknownBiomeError(
            f"Unknown biome '{name}'. Available biomes: {sorted(biomes)}"
        ) from None
