"""Shared test fixtures for procworld tests."""

import numpy as np
import pytest

from procworld.biomes import default_biomes
from procworld.config import WorldConfig
from procworld.engine import ProceduralWorld
from procworld.state import Scene
from procworld.terrain.config import TerrainConfig
from procworld.terrain.generator import generate_scene, generate_terrain
from procworld.terrain.heightmap import HeightMap
from procworld.terrain_types import Region


@pytest.fixture
def flat_terrain() -> HeightMap:
    """32x32 map at elevation 0.5, dirt, labelled dark forest."""
    terrain = HeightMap.empty(32, 32)
    terrain.region[...] = Region.DARK_FOREST.value
    return terrain


@pytest.fixture
def noisy_terrain() -> HeightMap:
    """32x32 map with uniformly random elevation."""
    rng = np.random.default_rng(7)
    terrain = HeightMap.empty(32, 32)
    terrain.elevation[...] = rng.uniform(0.01, 0.99, size=(32, 32))
    terrain.region[...] = Region.DARK_FOREST.value
    return terrain


@pytest.fixture
def forest_terrain() -> HeightMap:
    """Generated 64x64 dark forest height map, seed 42."""
    biome = default_biomes()["dark_forest"]
    return generate_terrain(42, "dark_forest", biome, TerrainConfig(size=64))


@pytest.fixture
def small_scene() -> Scene:
    """Generated and populated 32x32 dark forest scene, seed 11."""
    biome = default_biomes()["dark_forest"]
    return generate_scene(11, "dark_forest", biome, TerrainConfig(size=32)).scene


@pytest.fixture
def world_config() -> WorldConfig:
    """Seed 42 dark forest on a 64x64 grid."""
    return WorldConfig(seed=42, biome="dark_forest", terrain=TerrainConfig(size=64))


@pytest.fixture
def generated_world(world_config: WorldConfig) -> ProceduralWorld:
    """World with its initial scene generated."""
    world = ProceduralWorld(world_config)
    world.generate_initial_world()
    return world
