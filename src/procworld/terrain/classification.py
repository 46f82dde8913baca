"""Per-cell classification: ground material and region label."""

import numpy as np
from numpy.typing import NDArray

from ..biomes import BiomeParams
from ..terrain_types import REGION_DTYPE, Material, Region
from .config import SynthesisConfig
from .fields import grid_coordinates
from .noise import fbm_2d


def default_material(elevation: NDArray[np.float64]) -> NDArray[np.uint8]:
    """Material implied by elevation alone."""
    return np.select(
        [elevation < 0.3, elevation < 0.55, elevation < 0.8],
        [Material.WATER, Material.DIRT, Material.ROCK],
        default=Material.SNOW,
    ).astype(np.uint8)


def determine_material(
    elevation: NDArray[np.float64],
    humidity: NDArray[np.float64],
    biome: BiomeParams,
    rng: np.random.Generator,
    config: SynthesisConfig,
) -> NDArray[np.uint8]:
    """Choose a material per cell by biome-weighted roulette.

    The elevation default gets triple weight among the biome's ground
    materials; water above elevation 0.4 and snow below 0.7 are heavily
    down-weighted. Very humid dirt may first turn to water.

    Args:
        elevation: Elevation field.
        humidity: Humidity field [0, 1].
        biome: Biome parameters (supplies the ground material list).
        rng: Random number generator.
        config: Synthesis parameters.

    Returns:
        2D array of Material ids as uint8.
    """
    default = default_material(elevation)

    soggy = (
        (default == Material.DIRT)
        & (humidity > config.humid_dirt_threshold)
        & (rng.random(elevation.shape) < config.humid_water_chance)
    )
    default[soggy] = Material.WATER

    choices = np.array(biome.ground_materials, dtype=np.uint8)
    if choices.size == 0:
        return default

    # Weights have shape (height, width, len(choices))
    weights = np.ones(elevation.shape + choices.shape, dtype=np.float64)
    weights[choices[None, None, :] == default[..., None]] *= 3.0
    weights[(choices == Material.WATER)[None, None, :] & (elevation >= 0.4)[..., None]] *= 0.2
    weights[(choices == Material.SNOW)[None, None, :] & (elevation < 0.7)[..., None]] *= 0.1

    cumulative = np.cumsum(weights, axis=-1)
    cumulative /= cumulative[..., -1:]

    selection = rng.random(elevation.shape)
    # First entry whose cumulative weight covers the draw; index 0 if none do
    index = np.argmax(selection[..., None] <= cumulative, axis=-1)
    return choices[index]


def make_region_noise(width: int, height: int, seed: int, config: SynthesisConfig) -> NDArray[np.float64]:
    """Low-frequency tie-break channel for region boundaries, in [0, 1]."""
    wx, wz = grid_coordinates(width, height)
    scale = config.region_scale
    noise = fbm_2d(wx * scale, wz * scale, 2, 2.0, 0.5, seed + 191919)
    return (noise + 1.0) * 0.5


def determine_region(
    elevation: NDArray[np.float64],
    humidity: NDArray[np.float64],
    region_noise: NDArray[np.float64],
) -> NDArray[np.str_]:
    """Assign a region label to every cell from the elevation/humidity table.

    Bands, evaluated in order:
        < 0.25: swamp if humidity > 0.7, else pond
        < 0.40: swamp if humidity > 0.6, clearing if noise < 0.4, else low_forest
        < 0.70: clearing / dark_forest / dense_forest split by noise at 0.3, 0.7
        < 0.85: rocky_hills if humidity < 0.4, else mountains
        else:   mountain_peak

    Returns:
        2D array of region labels.
    """
    e, h, n = elevation, humidity, region_noise
    low = e < 0.25
    lowland = ~low & (e < 0.4)
    middle = (e >= 0.4) & (e < 0.7)
    high = (e >= 0.7) & (e < 0.85)

    conditions = [
        low & (h > 0.7),
        low,
        lowland & (h > 0.6),
        lowland & (n < 0.4),
        lowland,
        middle & (n < 0.3),
        middle & (n < 0.7),
        middle,
        high & (h < 0.4),
        high,
    ]
    labels = [
        Region.SWAMP.value,
        Region.POND.value,
        Region.SWAMP.value,
        Region.CLEARING.value,
        Region.LOW_FOREST.value,
        Region.CLEARING.value,
        Region.DARK_FOREST.value,
        Region.DENSE_FOREST.value,
        Region.ROCKY_HILLS.value,
        Region.MOUNTAINS.value,
    ]
    return np.select(conditions, labels, default=Region.MOUNTAIN_PEAK.value).astype(REGION_DTYPE)
