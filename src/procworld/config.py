"""World configuration models.

Configuration is resolved before the engine is built; nothing here reads
files or mutates at runtime.
"""

from pydantic import BaseModel, Field

from .biomes import DEFAULT_BIOME, BiomeParams, default_biomes
from .terrain.config import TerrainConfig

# Seeds stay well inside int64 so hash offsets never overflow
MAX_SEED = 2**31 - 1


class EvolutionConfig(BaseModel):
    """Scene evolution cadence and mutation probabilities."""

    day_cycle_seconds: float = Field(
        default=15 * 60.0, gt=0.0, description="Length of a full day/night cycle"
    )
    evolve_interval: float = Field(
        default=3.0, gt=0.0, description="Simulated seconds between evolution steps"
    )
    max_steps_per_update: int = Field(
        default=10, ge=1, description="Evolution steps one update call may catch up"
    )
    initial_time_of_day: float = Field(default=0.2, ge=0.0, lt=1.0)

    fog_smoothing: float = Field(default=0.1, description="Weight of the new fog target")
    mist_ratio: float = Field(default=0.7, description="Mist as a fraction of fog")
    wind_change_chance: float = Field(default=0.2)
    wind_smoothing: float = Field(default=0.2, description="Weight of the new wind target")

    object_drift_chance: float = Field(default=0.05, description="Per object, per step")
    metadata_delta: float = Field(default=0.1, description="Max change of one weight")
    new_metadata_chance: float = Field(default=0.1)
    jitter_chance: float = Field(default=0.05)
    jitter_range: float = Field(default=0.5, description="Max positional offset")

    population_change_chance: float = Field(default=0.1)
    add_probability: float = Field(
        default=0.5, description="Share of population changes that add an object"
    )
    min_object_spacing: float = Field(default=2.0)

    fear_change_chance: float = Field(default=0.05)
    fear_delta: float = Field(default=0.1)


class WorldConfig(BaseModel):
    """Complete configuration for a procedural world."""

    seed: int = Field(
        default=0, ge=0, le=MAX_SEED, description="World seed (0 = derive from the clock)"
    )
    biome: str = Field(default=DEFAULT_BIOME, description="Base biome of the scene")
    biomes: dict[str, BiomeParams] = Field(default_factory=default_biomes)

    terrain: TerrainConfig = Field(default_factory=TerrainConfig)
    evolution: EvolutionConfig = Field(default_factory=EvolutionConfig)
