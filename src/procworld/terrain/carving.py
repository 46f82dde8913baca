"""Feature carving: clearings, groves, pits, islands, peaks, ravines, paths.

Every pass edits the height map in place. Neighbourhood windows are clipped
to the grid, elevation changes blend toward a target rather than
overwriting it, and each pass re-clamps elevation to [0.01, 0.99].
"""

import logging
import math

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from ..terrain_types import Material, Region
from .config import CarvingConfig
from .heightmap import MAX_ELEVATION, MIN_ELEVATION, HeightMap

logger = logging.getLogger(__name__)

# 4-connected steps as (dx, dy): down, right, up, left
PATH_DX = (0, 1, 0, -1)
PATH_DY = (1, 0, -1, 0)

PATH_HEIGHT_PENALTY = 10.0
PATH_WANDER_CHANCE = 0.2

# Per-pass RNG seed offsets
_CLEARING_OFFSET = 0
_GROVE_OFFSET = 1000
_PIT_OFFSET = 2000
_ISLAND_OFFSET = 3000
_PEAK_OFFSET = 4000
_RAVINE_OFFSET = 5000
_PATH_OFFSET = 6000


def _disc_window(
    terrain: HeightMap, cx: int, cy: int, radius: int
) -> tuple[tuple[slice, slice], NDArray[np.float64]]:
    """Square window around a centre, clipped to the grid.

    Returns:
        Tuple of ((row slice, column slice), distance-from-centre array).
    """
    x0, x1 = max(cx - radius, 0), min(cx + radius + 1, terrain.width)
    y0, y1 = max(cy - radius, 0), min(cy + radius + 1, terrain.height)
    ys, xs = np.mgrid[y0:y1, x0:x1]
    dist = np.sqrt((xs - cx) ** 2 + (ys - cy) ** 2)
    return (slice(y0, y1), slice(x0, x1)), dist


def _blend_disc(
    terrain: HeightMap,
    window: tuple[slice, slice],
    dist: NDArray[np.float64],
    radius: int,
    strength: float,
    target: NDArray[np.float64] | float,
) -> tuple[NDArray[np.float64], NDArray[np.bool_]]:
    """Blend a window's elevation toward a target with linear radial falloff.

    Returns:
        Tuple of (per-cell blend factor, inside-disc mask).
    """
    inside = dist <= radius
    factor = np.where(inside, (1.0 - dist / radius) * strength, 0.0)

    elevation = terrain.elevation[window]
    elevation[...] = elevation * (1.0 - factor) + target * factor
    return factor, inside


def create_clearings(terrain: HeightMap, count: int, seed: int) -> None:
    """Flatten circular patches toward a mid elevation and mark them clearings."""
    rng = np.random.default_rng(seed + _CLEARING_OFFSET)

    for _ in range(count):
        cx = int(rng.integers(terrain.width))
        cy = int(rng.integers(terrain.height))
        radius = 5 + int(rng.integers(10))

        window, dist = _disc_window(terrain, cx, cy, radius)
        target = 0.4 + rng.random(dist.shape) * 0.1
        _, inside = _blend_disc(terrain, window, dist, radius, 0.8, target)

        terrain.region[window][inside] = Region.CLEARING.value
        terrain.material[window][inside] = Material.DIRT

    terrain.clamp_elevation()


def create_dense_groves(terrain: HeightMap, count: int, seed: int) -> None:
    """Relabel soft-edged patches as dense forest without touching elevation."""
    rng = np.random.default_rng(seed + _GROVE_OFFSET)

    for _ in range(count):
        cx = int(rng.integers(terrain.width))
        cy = int(rng.integers(terrain.height))
        radius = 8 + int(rng.integers(12))

        window, dist = _disc_window(terrain, cx, cy, radius)
        factor = np.where(dist <= radius, (1.0 - dist / radius) * 0.7, 0.0)
        grove = rng.random(dist.shape) < factor
        terrain.region[window][grove] = Region.DENSE_FOREST.value


def create_swamp_pits(terrain: HeightMap, count: int, seed: int) -> None:
    """Sink waterlogged pits and raise their humidity."""
    rng = np.random.default_rng(seed + _PIT_OFFSET)

    for _ in range(count):
        cx = int(rng.integers(terrain.width))
        cy = int(rng.integers(terrain.height))
        radius = 4 + int(rng.integers(8))

        window, dist = _disc_window(terrain, cx, cy, radius)
        target = 0.15 + rng.random(dist.shape) * 0.1
        factor, inside = _blend_disc(terrain, window, dist, radius, 0.9, target)

        terrain.region[window][inside] = Region.SWAMP_PIT.value
        terrain.material[window][inside] = Material.WATER
        humidity = terrain.humidity[window]
        humidity[...] = np.minimum(1.0, humidity + factor * 0.3)

    terrain.clamp_elevation()


def create_small_islands(terrain: HeightMap, count: int, seed: int) -> None:
    """Raise small patches of solid ground out of the swamp."""
    rng = np.random.default_rng(seed + _ISLAND_OFFSET)

    for _ in range(count):
        cx = int(rng.integers(terrain.width))
        cy = int(rng.integers(terrain.height))
        radius = 2 + int(rng.integers(4))

        window, dist = _disc_window(terrain, cx, cy, radius)
        target = 0.35 + rng.random(dist.shape) * 0.1
        _, inside = _blend_disc(terrain, window, dist, radius, 0.8, target)

        terrain.region[window][inside] = Region.SMALL_ISLAND.value
        terrain.material[window][inside] = Material.DIRT

    terrain.clamp_elevation()


def create_mountain_peaks(
    terrain: HeightMap, count: int, seed: int, threshold: float = 0.7
) -> None:
    """Boost already-high cells into peaks with an exponential falloff.

    Candidate centres are the cells above ``threshold``, shuffled; the
    first ``count`` are used. Does nothing when no cell qualifies.
    """
    rng = np.random.default_rng(seed + _PEAK_OFFSET)

    high_spots = np.argwhere(terrain.elevation > threshold)
    if len(high_spots) == 0:
        logger.debug(f"No cells above {threshold:.2f}, skipping mountain peaks")
        return

    high_spots = rng.permutation(high_spots)

    for cy, cx in high_spots[:count]:
        radius = 3 + int(rng.integers(5))
        window, dist = _disc_window(terrain, int(cx), int(cy), radius)
        inside = dist <= radius

        peak_factor = np.where(inside, np.exp(-dist * dist / (radius * radius * 0.5)), 0.0)
        peak_height = 0.9 + rng.random(dist.shape) * 0.1

        elevation = terrain.elevation[window]
        elevation[...] = np.maximum(
            elevation, elevation * (1.0 - peak_factor) + peak_height * peak_factor
        )
        np.clip(elevation, MIN_ELEVATION, MAX_ELEVATION, out=elevation)

        core = dist < radius * 0.5
        terrain.region[window][core] = Region.MOUNTAIN_PEAK.value
        terrain.material[window][core] = np.where(
            elevation[core] > 0.85, Material.SNOW, Material.ROCK
        )

    terrain.clamp_elevation()


def create_ravines(
    terrain: HeightMap, count: int, seed: int, angle_variation: float = 0.3
) -> None:
    """Carve meandering ravines by a bounded random walk.

    Each ravine walks 20-49 steps from a random start, perturbing its
    heading by up to ``angle_variation`` radians per step, and stops early
    at the grid edge. Cells along the way sink toward 60% of their
    elevation with radial falloff; the corridor core becomes rocky ravine.
    """
    rng = np.random.default_rng(seed + _RAVINE_OFFSET)

    for _ in range(count):
        cur_x = float(rng.integers(terrain.width))
        cur_y = float(rng.integers(terrain.height))
        angle = rng.random() * 2.0 * math.pi
        length = 20 + int(rng.integers(30))
        ravine_width = 2 + int(rng.integers(4))

        for _ in range(length):
            angle += (rng.random() * 2.0 - 1.0) * angle_variation
            cur_x += math.cos(angle)
            cur_y += math.sin(angle)

            # Truncation toward zero, so -0.5 still maps to column 0
            x, y = int(cur_x), int(cur_y)
            if not terrain.in_bounds(x, y):
                break

            window, dist = _disc_window(terrain, x, y, ravine_width)
            factor, _ = _blend_disc(
                terrain, window, dist, ravine_width, 0.7, terrain.elevation[window] * 0.6
            )
            core = factor > 0.5
            terrain.region[window][core] = Region.RAVINE.value
            terrain.material[window][core] = Material.ROCK

    terrain.clamp_elevation()


def find_path(
    terrain: HeightMap,
    start: tuple[int, int],
    end: tuple[int, int],
    rng: np.random.Generator,
    max_steps: int | None = None,
) -> list[tuple[int, int]]:
    """Greedy wandering path between two cells.

    Each step moves to the 4-connected neighbour minimizing distance to the
    goal plus a penalty on the height difference, and 20% of the time takes
    an extra random step. This is a natural-looking heuristic, not a
    shortest path. The walk is truncated after ``max_steps`` (default
    ``width * height // 10``) if it has not reached the goal.

    Args:
        terrain: Height map to walk over.
        start: (x, y) start cell.
        end: (x, y) goal cell.
        rng: Random number generator.
        max_steps: Step budget.

    Returns:
        List of (x, y) cells from the start, possibly short of the goal.
    """
    if max_steps is None:
        max_steps = terrain.width * terrain.height // 10

    elevation = terrain.elevation
    cur_x, cur_y = start
    end_x, end_y = end
    path = [(cur_x, cur_y)]

    for _ in range(max_steps):
        if (cur_x, cur_y) == (end_x, end_y):
            break

        best_dir = -1
        best_score = math.inf
        for i in range(len(PATH_DX)):
            nx = cur_x + PATH_DX[i]
            ny = cur_y + PATH_DY[i]
            if not terrain.in_bounds(nx, ny):
                continue

            dist = math.hypot(nx - end_x, ny - end_y)
            height_diff = abs(elevation[ny, nx] - elevation[cur_y, cur_x])
            score = dist + height_diff * PATH_HEIGHT_PENALTY
            if score < best_score:
                best_score = score
                best_dir = i

        if best_dir == -1:
            break

        cur_x += PATH_DX[best_dir]
        cur_y += PATH_DY[best_dir]
        path.append((cur_x, cur_y))

        if rng.random() < PATH_WANDER_CHANCE:
            d = int(rng.integers(len(PATH_DX)))
            nx = cur_x + PATH_DX[d]
            ny = cur_y + PATH_DY[d]
            if terrain.in_bounds(nx, ny):
                cur_x, cur_y = nx, ny
                path.append((cur_x, cur_y))

    return path


def _edge_endpoints(
    width: int, height: int, rng: np.random.Generator
) -> tuple[tuple[int, int], tuple[int, int]]:
    """Random start on one grid edge and a goal on the opposite edge."""
    side = int(rng.integers(4))
    if side == 0:  # top to bottom
        start = (int(rng.integers(width)), 0)
        end = (int(rng.integers(width)), height - 1)
    elif side == 1:  # right to left
        start = (width - 1, int(rng.integers(height)))
        end = (0, int(rng.integers(height)))
    elif side == 2:  # bottom to top
        start = (int(rng.integers(width)), height - 1)
        end = (int(rng.integers(width)), 0)
    else:  # left to right
        start = (0, int(rng.integers(height)))
        end = (width - 1, int(rng.integers(height)))
    return start, end


def create_paths(terrain: HeightMap, count: int, seed: int) -> None:
    """Carve edge-to-edge footpaths with a slight elevation dip."""
    rng = np.random.default_rng(seed + _PATH_OFFSET)

    for _ in range(count):
        start, end = _edge_endpoints(terrain.width, terrain.height, rng)
        path = find_path(terrain, start, end, rng)
        if path[-1] != end:
            logger.debug(f"Path from {start} stopped at {path[-1]}, short of {end}")

        path_width = 1 + int(rng.integers(2))
        for x, y in path:
            window, dist = _disc_window(terrain, x, y, path_width)
            factor, _ = _blend_disc(
                terrain, window, dist, path_width, 0.6, terrain.elevation[window] * 0.95
            )
            core = factor > 0.5
            terrain.region[window][core] = Region.PATH.value
            terrain.material[window][core] = Material.DIRT

    terrain.clamp_elevation()


def smooth_terrain(terrain: HeightMap, passes: int, blend: float = 0.3) -> None:
    """Blend interior cells toward their 8-neighbour mean.

    Each pass sets ``elevation = (1 - blend) * elevation + blend * mean``
    for every cell not on the grid border. Zero passes leave the map
    untouched.
    """
    if passes <= 0 or terrain.width < 3 or terrain.height < 3:
        return

    kernel = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.float64) / 8.0
    interior = (slice(1, -1), slice(1, -1))

    for _ in range(passes):
        mean = ndimage.convolve(terrain.elevation, kernel, mode="nearest")
        current = terrain.elevation[interior]
        current[...] = current * (1.0 - blend) + mean[interior] * blend

    terrain.clamp_elevation()


def post_process_terrain(
    terrain: HeightMap, seed: int, biome_name: str, config: CarvingConfig
) -> None:
    """Run the carving passes for a biome, then the shared path and smoothing passes."""
    if biome_name == "dark_forest":
        create_clearings(terrain, config.clearings, seed)
        create_dense_groves(terrain, config.dense_groves, seed)
    elif biome_name == "swamp":
        create_swamp_pits(terrain, config.swamp_pits, seed)
        create_small_islands(terrain, config.small_islands, seed)
    elif biome_name == "mountains":
        create_mountain_peaks(terrain, config.mountain_peaks, seed, config.peak_threshold)
        create_ravines(terrain, config.ravines, seed)

    create_paths(terrain, config.paths, seed)
    smooth_terrain(terrain, config.smoothing_passes)
