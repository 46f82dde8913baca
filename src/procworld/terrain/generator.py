"""Main terrain generation orchestration."""

import logging

import numpy as np

from ..biomes import BiomeParams
from ..state import ProceduralObject, Scene
from ..terrain_types import Material
from .carving import post_process_terrain
from .classification import determine_material, determine_region, make_region_noise
from .config import TerrainConfig
from .fields import make_elevation, make_humidity
from .heightmap import HeightMap
from .objects import populate_scene
from .validation import ValidationResult, validate_terrain

logger = logging.getLogger(__name__)

# Population draws from its own stream so terrain tweaks don't reshuffle objects
_POPULATION_SEED_OFFSET = 7000


class GenerationResult:
    """Result of world generation: the new scene and what went into it."""

    def __init__(
        self,
        scene: Scene,
        objects: list[ProceduralObject],
        validation: ValidationResult,
    ):
        self.scene = scene
        self.objects = objects
        self.validation = validation


def generate_terrain(
    seed: int,
    biome_name: str,
    biome: BiomeParams,
    config: TerrainConfig,
) -> HeightMap:
    """Generate a carved height map.

    Args:
        seed: World seed.
        biome_name: Biome used for shaping and carving rules.
        biome: Biome parameters.
        config: Terrain generation configuration.

    Returns:
        HeightMap with every layer filled and every cell labelled.
    """
    rng = np.random.default_rng(seed)
    size = config.size

    logger.info(f"Generating {biome_name} terrain {size}x{size} with seed {seed}")

    # Stage A: Continuous fields
    logger.info("Stage A: Generating elevation and humidity fields...")
    elevation = make_elevation(size, size, seed, biome_name, biome, config.synthesis)
    humidity = make_humidity(size, size, seed, biome_name, config.synthesis)

    # Stage B: Per-cell classification
    logger.info("Stage B: Classifying materials and regions...")
    material = determine_material(elevation, humidity, biome, rng, config.synthesis)
    region_noise = make_region_noise(size, size, seed, config.synthesis)
    region = determine_region(elevation, humidity, region_noise)

    terrain = HeightMap(elevation, material, humidity, region)

    # Stage C: Feature carving
    logger.info("Stage C: Carving terrain features...")
    post_process_terrain(terrain, seed, biome_name, config.carving)

    _log_terrain_stats(terrain)
    return terrain


def generate_scene(
    seed: int,
    biome_name: str,
    biome: BiomeParams,
    config: TerrainConfig,
    time_of_day: float = 0.0,
) -> GenerationResult:
    """Generate terrain, wrap it in a fresh scene, and populate it.

    Weather, atmosphere, and fear level start from the biome baselines.

    Args:
        seed: World seed.
        biome_name: Biome of the scene.
        biome: Biome parameters.
        config: Terrain generation configuration.
        time_of_day: Initial time of day in [0, 1).

    Returns:
        GenerationResult with the scene, placed objects, and validation report.
    """
    terrain = generate_terrain(seed, biome_name, biome, config)

    scene = Scene(
        terrain=terrain,
        seed=seed,
        biome=biome_name,
        weather=biome.weather_defaults(),
        atmosphere=biome.atmosphere_defaults(),
        time_of_day=time_of_day,
        fear_level=biome.fear_level,
    )

    # Stage D: Object placement
    logger.info("Stage D: Placing objects...")
    rng = np.random.default_rng(seed + _POPULATION_SEED_OFFSET)
    objects = populate_scene(scene, biome, rng, config.population, config.height_scale)

    # Stage E: Validation
    validation = validate_terrain(terrain, objects)

    return GenerationResult(scene=scene, objects=objects, validation=validation)


def _log_terrain_stats(terrain: HeightMap) -> None:
    """Log terrain generation statistics."""
    total = terrain.elevation.size

    logger.info(
        f"Terrain stats ({total:,} cells): elevation "
        f"{terrain.elevation.min():.3f}-{terrain.elevation.max():.3f}, "
        f"mean humidity {terrain.humidity.mean():.3f}"
    )
    for material in Material:
        count = int(np.sum(terrain.material == material))
        logger.info(f"  {material.name.lower()}: {count:,} ({count / total:.1%})")

    labels, counts = np.unique(terrain.region, return_counts=True)
    for label, count in zip(labels, counts):
        logger.debug(f"  region {label}: {count:,} ({count / total:.1%})")
