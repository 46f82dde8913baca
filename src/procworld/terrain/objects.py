"""Object population: trees, rocks, and anomalies placed on the carved grid."""

import logging
import math
from enum import Enum

import numpy as np

from ..biomes import BiomeParams
from ..state import ProceduralObject, Scene, Vector3
from ..terrain_types import DARK_REGIONS, HIGHLAND_REGIONS, OPEN_REGIONS, Material, Region
from .config import PopulationConfig
from .heightmap import HeightMap

logger = logging.getLogger(__name__)


class ObjectType(str, Enum):
    """Top-level object categories."""

    TREE = "tree"
    ROCK = "rock"
    STRANGE = "strange"
    STUMP = "stump"


# Each category owns a block of width * height + 1 object seeds; candidate
# indices are capped at width * height, so blocks never overlap
TREE_SEED_BLOCK = 0
ROCK_SEED_BLOCK = 1
STRANGE_SEED_BLOCK = 2
EVOLVED_SEED_BLOCK = 3

# Range = (base, spread), sampled as base + rng.random() * spread
_Range = tuple[float, float]

# subtype -> (height, width, metadata)
TREE_SHAPES: dict[str, tuple[_Range, _Range, dict[str, _Range]]] = {
    "pine": (
        (3.0, 2.0),
        (0.8, 0.4),
        {
            "atmosphere.fear": (0.3, 0.3),
            "atmosphere.ominous": (0.2, 0.4),
            "visuals.distorted": (0.0, 0.5),
            "visuals.dark": (0.3, 0.4),
            "conditions.silhouette": (0.2, 0.7),
        },
    ),
    "dead_tree": (
        (2.5, 1.5),
        (0.6, 0.3),
        {
            "atmosphere.fear": (0.5, 0.3),
            "atmosphere.ominous": (0.4, 0.4),
            "atmosphere.dread": (0.3, 0.4),
            "visuals.distorted": (0.2, 0.3),
            "visuals.dark": (0.5, 0.3),
            "conditions.silhouette": (0.5, 0.5),
        },
    ),
    "twisted_tree": (
        (2.0, 2.5),
        (0.7, 0.5),
        {
            "atmosphere.fear": (0.4, 0.4),
            "atmosphere.ominous": (0.5, 0.3),
            "atmosphere.dread": (0.4, 0.3),
            "visuals.distorted": (0.4, 0.4),
            "visuals.twisted": (0.6, 0.4),
            "conditions.silhouette": (0.4, 0.4),
        },
    ),
    "thin_tree": (
        (3.0, 2.0),
        (0.4, 0.2),
        {
            "atmosphere.fear": (0.3, 0.3),
            "atmosphere.ominous": (0.3, 0.3),
            "visuals.dark": (0.3, 0.3),
            "conditions.silhouette": (0.4, 0.4),
        },
    ),
    "small_pine": (
        (1.5, 1.0),
        (0.6, 0.3),
        {
            "atmosphere.fear": (0.2, 0.2),
            "atmosphere.ominous": (0.1, 0.3),
            "visuals.dark": (0.2, 0.3),
            "conditions.silhouette": (0.1, 0.5),
        },
    ),
    "bush": (
        (0.7, 0.5),
        (0.8, 0.4),
        {
            "atmosphere.fear": (0.1, 0.2),
            "visuals.dark": (0.2, 0.2),
        },
    ),
}

# Tree sub-types that lean
TILTED_TREES = frozenset({"dead_tree", "twisted_tree"})
MAX_TILT = 0.2

ROCK_METADATA: dict[str, _Range] = {
    "atmosphere.ominous": (0.1, 0.3),
    "visuals.rough": (0.4, 0.4),
    "conditions.shadow": (0.3, 0.3),
}

ROCK_EXTRA_METADATA: dict[str, dict[str, _Range]] = {
    "boulder": {"atmosphere.dread": (0.2, 0.2), "visuals.dark": (0.3, 0.3)},
    "sharp_rock": {"atmosphere.tension": (0.3, 0.3), "visuals.distorted": (0.2, 0.2)},
}

# subtype -> (size, height); a height of None means height equals size
STRANGE_SHAPES: dict[str, tuple[_Range, _Range | None]] = {
    "obelisk": ((0.5, 0.5), (3.0, 2.0)),
    "strange_tree": ((0.8, 0.8), (4.0, 3.0)),
    "anomaly": ((1.0, 1.5), None),
    "ritual_stones": ((1.2, 0.8), (1.5, 1.0)),
}

STRANGE_METADATA: dict[str, _Range] = {
    "atmosphere.fear": (0.7, 0.3),
    "atmosphere.dread": (0.8, 0.2),
    "visuals.distorted": (0.6, 0.4),
    "visuals.twisted": (0.7, 0.3),
    "conditions.silhouette": (0.8, 0.2),
    "conditions.unnatural": (0.9, 0.1),
}


def sample(rng: np.random.Generator, value_range: _Range) -> float:
    """Draw ``base + U[0, 1) * spread``."""
    base, spread = value_range
    return base + rng.random() * spread


def sample_metadata(rng: np.random.Generator, ranges: dict[str, _Range]) -> dict[str, float]:
    """Draw one weight per key, in the mapping's order."""
    return {key: sample(rng, value_range) for key, value_range in ranges.items()}


def random_position(terrain: HeightMap, rng: np.random.Generator) -> tuple[float, float]:
    """Uniform world-space (x, z) over the grid, centred on the origin."""
    x = rng.random() * terrain.width - terrain.origin_x
    z = rng.random() * terrain.height - terrain.origin_z
    return x, z


def world_to_cell(terrain: HeightMap, x: float, z: float) -> tuple[int, int]:
    """Grid cell containing a world-space point (may be out of bounds)."""
    return math.floor(x + terrain.origin_x), math.floor(z + terrain.origin_z)


def candidate_count(density: float, terrain: HeightMap, config: PopulationConfig) -> int:
    """Number of placement attempts for a category, at most one per cell."""
    cells = terrain.width * terrain.height
    return min(int(density * cells / config.density_normalization), cells)


def object_seed(scene: Scene, block: int, index: int) -> int:
    """Seed for the ``index``-th object of a seed block.

    Blocks are ``width * height + 1`` seeds apart. The evolved block is the
    last one, so its open-ended range cannot reach another block.
    """
    terrain = scene.terrain
    return scene.seed + block * (terrain.width * terrain.height + 1) + index


def _choose_tree_type(
    region: str, biome: BiomeParams, rng: np.random.Generator, config: PopulationConfig
) -> str | None:
    """Pick a tree sub-type for a region, or None to drop the candidate."""
    tree_type = "pine"
    if biome.tree_types:
        tree_type = biome.tree_types[int(rng.integers(len(biome.tree_types)))]

    if region in (Region.SWAMP.value, Region.SWAMP_PIT.value):
        tree_type = "dead_tree"
    elif region == Region.DENSE_FOREST.value:
        if rng.random() < 0.4:
            tree_type = "twisted_tree"
    elif region in OPEN_REGIONS:
        if rng.random() < config.open_ground_skip:
            return None
        if rng.random() < 0.5:
            tree_type = "small_pine"
        elif rng.random() < 0.3:
            tree_type = "bush"

    return tree_type


def place_trees(
    scene: Scene,
    biome: BiomeParams,
    occupied: set[tuple[int, int]],
    rng: np.random.Generator,
    config: PopulationConfig,
    height_scale: float,
) -> list[ProceduralObject]:
    """Place trees on dry mid-elevation ground.

    Sub-types follow the region: swamps force dead trees, dense forest
    favours twisted trees, and open ground drops most candidates and
    favours small pines and bushes.

    Args:
        scene: Scene to add trees to.
        biome: Biome parameters.
        occupied: Set of (x, y) cells already taken; updated in place.
        rng: Random number generator.
        config: Population parameters.
        height_scale: World units per unit of elevation.

    Returns:
        List of placed trees.
    """
    terrain = scene.terrain
    trees: list[ProceduralObject] = []

    for i in range(candidate_count(biome.tree_density, terrain, config)):
        x, z = random_position(terrain, rng)
        cx, cy = world_to_cell(terrain, x, z)
        if not terrain.in_bounds(cx, cy):
            continue

        elevation = terrain.elevation_at(cx, cy)
        if not config.tree_min_elevation < elevation < config.tree_max_elevation:
            continue
        if terrain.material_at(cx, cy) == Material.WATER:
            continue
        if (cx, cy) in occupied:
            continue
        occupied.add((cx, cy))

        tree_type = _choose_tree_type(terrain.region_at(cx, cy), biome, rng, config)
        if tree_type is None:
            continue

        height_range, width_range, meta_ranges = TREE_SHAPES.get(tree_type, TREE_SHAPES["pine"])
        tree_height = sample(rng, height_range)
        tree_width = sample(rng, width_range)
        metadata = sample_metadata(rng, meta_ranges)

        rotation = Vector3(0.0, rng.random() * 2.0 * math.pi, 0.0)
        if tree_type in TILTED_TREES:
            rotation.x = (rng.random() * 2.0 - 1.0) * MAX_TILT
            rotation.z = (rng.random() * 2.0 - 1.0) * MAX_TILT

        tree = ProceduralObject(
            object_id=scene.next_object_id(),
            object_type=ObjectType.TREE.value,
            subtype=tree_type,
            position=Vector3(x, elevation * height_scale, z),
            scale=Vector3(tree_width, tree_height, tree_width),
            rotation=rotation,
            metadata=metadata,
            seed=object_seed(scene, TREE_SEED_BLOCK, i),
        )
        scene.add_object(tree)
        trees.append(tree)

    return trees


def place_rocks(
    scene: Scene,
    biome: BiomeParams,
    occupied: set[tuple[int, int]],
    rng: np.random.Generator,
    config: PopulationConfig,
    height_scale: float,
) -> list[ProceduralObject]:
    """Place rocks anywhere above the lowlands that is not water.

    Highlands get larger rocks and occasional boulders, ravines get sharp
    rocks, and open ground drops most candidates and keeps small stones.
    """
    terrain = scene.terrain
    rocks: list[ProceduralObject] = []

    for i in range(candidate_count(biome.rock_density, terrain, config)):
        x, z = random_position(terrain, rng)
        cx, cy = world_to_cell(terrain, x, z)
        if not terrain.in_bounds(cx, cy):
            continue

        elevation = terrain.elevation_at(cx, cy)
        if elevation <= config.rock_min_elevation:
            continue
        if terrain.material_at(cx, cy) == Material.WATER:
            continue
        if (cx, cy) in occupied:
            continue
        occupied.add((cx, cy))

        region = terrain.region_at(cx, cy)
        rock_size = sample(rng, (0.5, 1.5))
        rock_type = "rock"

        if region in HIGHLAND_REGIONS:
            rock_size = sample(rng, (1.0, 2.0))
            if rng.random() < 0.3:
                rock_type = "boulder"
        elif region == Region.RAVINE.value:
            rock_type = "sharp_rock"
            rock_size = sample(rng, (0.7, 1.2))
        elif region in OPEN_REGIONS:
            if rng.random() < config.open_ground_skip:
                continue
            rock_size = sample(rng, (0.3, 0.5))

        metadata = sample_metadata(rng, ROCK_METADATA)
        metadata.update(sample_metadata(rng, ROCK_EXTRA_METADATA.get(rock_type, {})))

        rock = ProceduralObject(
            object_id=scene.next_object_id(),
            object_type=ObjectType.ROCK.value,
            subtype=rock_type,
            position=Vector3(x, elevation * height_scale, z),
            scale=Vector3(rock_size, rock_size * 0.7, rock_size),
            rotation=Vector3(
                rng.random() * 0.3, rng.random() * 2.0 * math.pi, rng.random() * 0.3
            ),
            metadata=metadata,
            seed=object_seed(scene, ROCK_SEED_BLOCK, i),
        )
        scene.add_object(rock)
        rocks.append(rock)

    return rocks


def find_dark_position(
    terrain: HeightMap, rng: np.random.Generator, attempts: int
) -> tuple[float, float]:
    """Random position, retried up to ``attempts`` times to land in a dark region.

    The bias is soft: if no attempt lands in a dark region, the last
    sampled position is returned anyway.
    """
    x, z = random_position(terrain, rng)
    for _ in range(attempts):
        cx, cy = world_to_cell(terrain, x, z)
        if terrain.in_bounds(cx, cy) and terrain.region_at(cx, cy) in DARK_REGIONS:
            break
        x, z = random_position(terrain, rng)
    return x, z


def place_strange(
    scene: Scene,
    biome: BiomeParams,
    occupied: set[tuple[int, int]],
    rng: np.random.Generator,
    config: PopulationConfig,
    height_scale: float,
) -> list[ProceduralObject]:
    """Place anomalies, biased toward dark regions."""
    terrain = scene.terrain
    anomalies: list[ProceduralObject] = []
    strange_types = list(STRANGE_SHAPES)

    for i in range(candidate_count(biome.strange_density, terrain, config)):
        x, z = find_dark_position(terrain, rng, config.strange_attempts)
        cx, cy = world_to_cell(terrain, x, z)
        if not terrain.in_bounds(cx, cy):
            continue
        if terrain.material_at(cx, cy) == Material.WATER:
            continue
        if (cx, cy) in occupied:
            continue
        occupied.add((cx, cy))

        strange_type = strange_types[int(rng.integers(len(strange_types)))]
        size_range, height_range = STRANGE_SHAPES[strange_type]
        size = sample(rng, size_range)
        height = size if height_range is None else sample(rng, height_range)

        strange = ProceduralObject(
            object_id=scene.next_object_id(),
            object_type=ObjectType.STRANGE.value,
            subtype=strange_type,
            position=Vector3(x, terrain.elevation_at(cx, cy) * height_scale, z),
            scale=Vector3(size, height, size),
            rotation=Vector3(0.0, rng.random() * 2.0 * math.pi, 0.0),
            metadata=sample_metadata(rng, STRANGE_METADATA),
            seed=object_seed(scene, STRANGE_SEED_BLOCK, i),
        )
        scene.add_object(strange)
        anomalies.append(strange)

    return anomalies


def populate_scene(
    scene: Scene,
    biome: BiomeParams,
    rng: np.random.Generator,
    config: PopulationConfig,
    height_scale: float,
) -> list[ProceduralObject]:
    """Populate a scene with trees, rocks, and anomalies.

    One occupancy set is shared by all three categories, so no two objects
    placed by this call share a grid cell.

    Args:
        scene: Scene whose terrain has been generated and carved.
        biome: Biome parameters (densities and tree types).
        rng: Random number generator.
        config: Population parameters.
        height_scale: World units per unit of elevation.

    Returns:
        All objects placed, in placement order.
    """
    occupied: set[tuple[int, int]] = set()

    trees = place_trees(scene, biome, occupied, rng, config, height_scale)
    rocks = place_rocks(scene, biome, occupied, rng, config, height_scale)
    anomalies = place_strange(scene, biome, occupied, rng, config, height_scale)

    logger.info(
        f"Placed {len(trees)} trees, {len(rocks)} rocks, {len(anomalies)} anomalies"
    )
    return trees + rocks + anomalies
