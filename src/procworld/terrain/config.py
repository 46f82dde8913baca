"""Terrain generation configuration models."""

from pydantic import BaseModel, Field


class SynthesisConfig(BaseModel):
    """Noise channel parameters for elevation and humidity synthesis."""

    base_scale: float = Field(default=0.03, description="Base noise frequency per cell")
    detail_scale: float = Field(default=0.1, description="Small-scale detail frequency")
    band_weights: tuple[float, float, float] = Field(
        default=(0.6, 0.3, 0.1), description="Large/medium/small band mix"
    )
    lacunarity: float = Field(default=2.0, description="Frequency multiplier per octave")
    gain: float = Field(default=0.5, description="Amplitude multiplier per octave")
    region_scale: float = Field(
        default=0.01, description="Frequency of the region tie-break channel"
    )
    river_threshold: float = Field(
        default=0.05, description="|river path noise| below this carves a river"
    )
    river_depth: float = Field(default=0.15, description="Maximum river depth")
    humid_dirt_threshold: float = Field(
        default=0.7, description="Humidity above which dirt may turn to water"
    )
    humid_water_chance: float = Field(
        default=0.3, description="Chance very humid dirt becomes water"
    )


class CarvingConfig(BaseModel):
    """Feature carving pass counts."""

    clearings: int = Field(default=3, ge=0, description="Clearings in dark forests")
    dense_groves: int = Field(default=5, ge=0, description="Dense groves in dark forests")
    swamp_pits: int = Field(default=4, ge=0, description="Pits in swamps")
    small_islands: int = Field(default=6, ge=0, description="Islands in swamps")
    mountain_peaks: int = Field(default=3, ge=0, description="Peaks in mountains")
    ravines: int = Field(default=2, ge=0, description="Ravines in mountains")
    paths: int = Field(default=1, ge=0, description="Paths for every biome")
    smoothing_passes: int = Field(default=1, ge=0, description="Final smoothing passes")
    peak_threshold: float = Field(
        default=0.7, description="Minimum elevation for peak centres"
    )


class PopulationConfig(BaseModel):
    """Object population parameters."""

    density_normalization: float = Field(
        default=1000.0, gt=0.0, description="Cells per unit of biome density"
    )
    strange_attempts: int = Field(
        default=10, ge=1, description="Position retries when seeking dark regions"
    )
    tree_min_elevation: float = Field(default=0.3, description="Trees need elevation above this")
    tree_max_elevation: float = Field(default=0.8, description="Trees need elevation below this")
    rock_min_elevation: float = Field(default=0.2, description="Rocks need elevation above this")
    open_ground_skip: float = Field(
        default=0.7, description="Chance a tree or rock candidate on a clearing/path is dropped"
    )


class TerrainConfig(BaseModel):
    """Complete terrain generation configuration."""

    size: int = Field(default=256, ge=2, description="Grid width and height in cells")
    height_scale: float = Field(
        default=20.0, description="World units per unit of normalized elevation"
    )

    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)
    carving: CarvingConfig = Field(default_factory=CarvingConfig)
    population: PopulationConfig = Field(default_factory=PopulationConfig)
