"""Field generation for terrain: elevation, biome shaping, and humidity."""

import numpy as np
from numpy.typing import NDArray

from ..biomes import BiomeParams
from .config import SynthesisConfig
from .heightmap import MAX_ELEVATION, MIN_ELEVATION
from .noise import fbm_2d, perlin_2d, ridge_2d


def grid_coordinates(width: int, height: int) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """World-space sample coordinates for every cell, centred on the grid.

    Cell ``(x, y)`` samples noise at ``(x - width // 2, y - height // 2)``.

    Returns:
        Tuple of (world_x, world_z) arrays of shape (height, width).
    """
    xs = np.arange(width, dtype=np.float64) - width // 2
    zs = np.arange(height, dtype=np.float64) - height // 2
    world_z, world_x = np.meshgrid(zs, xs, indexing="ij")
    return world_x, world_z


def make_elevation(
    width: int,
    height: int,
    seed: int,
    biome_name: str,
    biome: BiomeParams,
    config: SynthesisConfig,
) -> NDArray[np.float64]:
    """Generate the elevation field.

    Mixes three fBm bands (large, medium, small scale), rescales by the
    biome's roughness and base elevation, then applies biome shaping and
    river carving.

    Args:
        width: Grid width in cells.
        height: Grid height in cells.
        seed: World seed.
        biome_name: Biome used for shaping.
        biome: Biome parameters.
        config: Synthesis parameters.

    Returns:
        2D elevation array clamped to [0.01, 0.99].
    """
    wx, wz = grid_coordinates(width, height)
    base = config.base_scale
    detail = config.detail_scale
    lac, gain = config.lacunarity, config.gain

    large = fbm_2d(wx * base * 0.5, wz * base * 0.5, 3, lac, gain, seed)
    medium = fbm_2d(wx * base, wz * base, 4, lac, gain, seed + 1234)
    small = fbm_2d(wx * detail, wz * detail, 3, lac, gain, seed + 5678)

    w_large, w_medium, w_small = config.band_weights
    elevation = large * w_large + medium * w_medium + small * w_small
    elevation = elevation * biome.roughness + biome.base_elevation

    elevation = apply_terrain_features(elevation, wx, wz, seed, biome_name, config)
    return np.clip(elevation, MIN_ELEVATION, MAX_ELEVATION)


def apply_terrain_features(
    elevation: NDArray[np.float64],
    wx: NDArray[np.float64],
    wz: NDArray[np.float64],
    seed: int,
    biome_name: str,
    config: SynthesisConfig,
) -> NDArray[np.float64]:
    """Apply per-biome shaping and river carving to raw elevation.

    Args:
        elevation: Raw elevation after roughness/base rescaling.
        wx: World x coordinates.
        wz: World z coordinates.
        seed: World seed.
        biome_name: Biome used to select the shaping rule.
        config: Synthesis parameters.

    Returns:
        New elevation array clamped to [0.01, 0.99].
    """
    scale = config.base_scale
    elevation = elevation.copy()

    if biome_name == "dark_forest":
        # Low hills and hollows
        hills = ridge_2d(wx * scale * 2.0, wz * scale * 2.0, seed + 123)
        elevation += (hills - 0.5) * 0.15

    elif biome_name == "swamp":
        flat = fbm_2d(wx * scale * 3.0, wz * scale * 3.0, 2, 2.0, 0.5, seed + 456)
        flat_factor = np.where(flat < 0.4, (0.4 - flat) / 0.4, 0.0)
        elevation = elevation * (1.0 - flat_factor * 0.7) + 0.2 * flat_factor

    elif biome_name == "mountains":
        ridges = ridge_2d(wx * scale * 1.5, wz * scale * 1.5, seed + 789)
        elevation += ridges**2 * 1.5 * 0.3

        peaks = perlin_2d(wx * scale * 5.0, wz * scale * 5.0, seed + 101112)
        elevation += np.where(peaks > 0.7, (peaks - 0.7) / 0.3 * 0.2, 0.0)

    elif biome_name == "clearing":
        dist = np.sqrt(wx * wx + wz * wz) * scale
        flat_factor = np.where(dist < 0.05, (0.05 - dist) / 0.05, 0.0)
        elevation = elevation * (1.0 - flat_factor) + 0.45 * flat_factor

    # Rivers follow the zero crossings of a low-frequency channel
    river = perlin_2d(wx * scale * 10.0, wz * scale * 10.0, seed + 131415)
    river_path = np.abs(perlin_2d(wx * scale * 2.0, wz * scale * 2.0, seed + 161718))

    threshold = config.river_threshold
    depth = (threshold - river_path) / threshold * config.river_depth
    if biome_name == "swamp":
        depth *= 0.7
    elevation -= np.where((river_path < threshold) & (river > 0.0), depth, 0.0)

    return np.clip(elevation, MIN_ELEVATION, MAX_ELEVATION)


def make_humidity(
    width: int,
    height: int,
    seed: int,
    biome_name: str,
    config: SynthesisConfig,
) -> NDArray[np.float64]:
    """Generate the humidity field, independent of elevation.

    Swamps are pushed toward wet, mountains toward dry.

    Returns:
        2D humidity array in [0, 1].
    """
    wx, wz = grid_coordinates(width, height)
    scale = config.base_scale * 1.5
    noise = fbm_2d(wx * scale, wz * scale, 3, config.lacunarity, config.gain, seed + 9999)

    humidity = (noise + 1.0) * 0.5
    if biome_name == "swamp":
        humidity = humidity * 0.3 + 0.7
    elif biome_name == "mountains":
        humidity = humidity * 0.6

    return np.clip(humidity, 0.0, 1.0)
