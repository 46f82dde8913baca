"""Tests for object population."""

import math

import numpy as np
import pytest

from procworld.biomes import BiomeParams, default_biomes
from procworld.state import Scene
from procworld.terrain.config import PopulationConfig
from procworld.terrain.heightmap import HeightMap
from procworld.terrain.objects import (
    ROCK_SEED_BLOCK,
    STRANGE_SEED_BLOCK,
    TREE_SEED_BLOCK,
    ObjectType,
    candidate_count,
    find_dark_position,
    place_trees,
    populate_scene,
    world_to_cell,
)
from procworld.terrain_types import Material

BIOMES = default_biomes()


def _scene(terrain: HeightMap, seed: int = 100) -> Scene:
    return Scene(terrain=terrain, seed=seed, biome="dark_forest")


def _populate(terrain: HeightMap, biome: BiomeParams, seed: int = 3) -> Scene:
    scene = _scene(terrain)
    populate_scene(scene, biome, np.random.default_rng(seed), PopulationConfig(), 20.0)
    return scene


class TestHelpers:
    """Tests for placement helpers."""

    def test_candidate_count(self, flat_terrain: HeightMap) -> None:
        """Density is candidates per 1000 cells, truncated."""
        assert candidate_count(8.0, flat_terrain, PopulationConfig()) == 8
        assert candidate_count(0.5, flat_terrain, PopulationConfig()) == 0

    def test_world_to_cell(self, flat_terrain: HeightMap) -> None:
        """World origin maps to the centre cell; floors negative coordinates."""
        assert world_to_cell(flat_terrain, 0.0, 0.0) == (16, 16)
        assert world_to_cell(flat_terrain, -16.0, -0.5) == (0, 15)
        assert world_to_cell(flat_terrain, -16.5, 0.0) == (-1, 16)

    def test_dark_position_prefers_dark_regions(self, flat_terrain: HeightMap) -> None:
        """With a dark half, nearly every position lands in it."""
        flat_terrain.region[:, :16] = "swamp"
        rng = np.random.default_rng(0)
        hits = 0
        for _ in range(50):
            x, z = find_dark_position(flat_terrain, rng, attempts=10)
            cx, cy = world_to_cell(flat_terrain, x, z)
            hits += flat_terrain.region_at(cx, cy) == "swamp"
        assert hits >= 45

    def test_dark_position_falls_back(self, flat_terrain: HeightMap) -> None:
        """Without dark regions a position is still returned."""
        x, z = find_dark_position(flat_terrain, np.random.default_rng(0), attempts=10)
        assert -16.0 <= x < 16.0
        assert -16.0 <= z < 16.0


class TestPopulateScene:
    """Tests for full population."""

    def test_no_shared_cells(self, forest_terrain: HeightMap) -> None:
        """Every object sits in its own grid cell."""
        scene = _populate(forest_terrain, BIOMES["dark_forest"])
        cells = [world_to_cell(forest_terrain, o.position.x, o.position.z) for o in scene.objects]
        assert len(cells) == len(set(cells))
        assert scene.object_count > 0

    def test_ids_increase(self, forest_terrain: HeightMap) -> None:
        """Ids are unique and follow placement order."""
        scene = _populate(forest_terrain, BIOMES["dark_forest"])
        ids = [o.object_id for o in scene.objects]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)
        assert ids[0] == 1

    def test_objects_avoid_water(self, forest_terrain: HeightMap) -> None:
        """No object is placed on a water cell."""
        scene = _populate(forest_terrain, BIOMES["dark_forest"])
        for obj in scene.objects:
            cx, cy = world_to_cell(forest_terrain, obj.position.x, obj.position.z)
            assert forest_terrain.material_at(cx, cy) != Material.WATER

    def test_tree_elevation_band(self, forest_terrain: HeightMap) -> None:
        """Trees stand strictly between 0.3 and 0.8 elevation."""
        scene = _populate(forest_terrain, BIOMES["dark_forest"])
        for tree in scene.objects_by_type(ObjectType.TREE.value):
            cx, cy = world_to_cell(forest_terrain, tree.position.x, tree.position.z)
            assert 0.3 < forest_terrain.elevation_at(cx, cy) < 0.8
            assert tree.position.y == pytest.approx(forest_terrain.elevation_at(cx, cy) * 20.0)

    def test_seed_ranges_by_category(self, forest_terrain: HeightMap) -> None:
        """Object seeds fall in their category's block."""
        scene = _populate(forest_terrain, BIOMES["dark_forest"])
        stride = forest_terrain.width * forest_terrain.height + 1
        expected = {
            ObjectType.TREE.value: TREE_SEED_BLOCK,
            ObjectType.ROCK.value: ROCK_SEED_BLOCK,
            ObjectType.STRANGE.value: STRANGE_SEED_BLOCK,
        }
        for obj in scene.objects:
            assert (obj.seed - scene.seed) // stride == expected[obj.object_type]

    def test_seeds_unique_on_large_grid(self) -> None:
        """Over a thousand candidates per category still yield distinct seeds."""
        terrain = HeightMap.empty(400, 400)
        terrain.region[...] = "dark_forest"
        scene = _populate(terrain, BIOMES["dark_forest"])

        trees = scene.objects_by_type(ObjectType.TREE.value)
        assert len(trees) > 1000
        seeds = [obj.seed for obj in scene.objects]
        assert len(seeds) == len(set(seeds))

        stride = 400 * 400 + 1
        rock_seeds = [obj.seed for obj in scene.objects_by_type(ObjectType.ROCK.value)]
        assert max(obj.seed for obj in trees) < scene.seed + stride
        assert min(rock_seeds) >= scene.seed + ROCK_SEED_BLOCK * stride

    def test_candidates_capped_at_cell_count(self, flat_terrain: HeightMap) -> None:
        """Densities above one per cell cannot overrun a seed block."""
        assert candidate_count(5000.0, flat_terrain, PopulationConfig()) == 32 * 32

    def test_metadata_weights_in_unit_range(self, forest_terrain: HeightMap) -> None:
        """Sampled metadata weights lie in [0, 1]."""
        scene = _populate(forest_terrain, BIOMES["dark_forest"])
        for obj in scene.objects:
            assert obj.metadata
            assert all(0.0 <= w <= 1.0 for w in obj.metadata.values())
            assert 0.0 <= obj.rotation.y < 2.0 * math.pi

    def test_subtypes_follow_biome(self, forest_terrain: HeightMap) -> None:
        """Tree sub-types come from the biome list or the region overrides."""
        scene = _populate(forest_terrain, BIOMES["dark_forest"])
        allowed = set(BIOMES["dark_forest"].tree_types) | {"small_pine", "bush"}
        for tree in scene.objects_by_type(ObjectType.TREE.value):
            assert tree.subtype in allowed

    def test_zero_density_places_nothing(self, forest_terrain: HeightMap) -> None:
        """A biome with zero densities yields an empty scene."""
        biome = BIOMES["dark_forest"].model_copy(
            update={"tree_density": 0.0, "rock_density": 0.0, "strange_density": 0.0}
        )
        assert _populate(forest_terrain, biome).object_count == 0

    def test_all_water_places_nothing(self, flat_terrain: HeightMap) -> None:
        """Nothing can stand on an all-water map."""
        flat_terrain.material[...] = Material.WATER
        assert _populate(flat_terrain, BIOMES["swamp"]).object_count == 0

    def test_deterministic(self, forest_terrain: HeightMap) -> None:
        """Same generator seed places the same objects."""
        a = _populate(forest_terrain.copy(), BIOMES["dark_forest"], seed=9)
        b = _populate(forest_terrain.copy(), BIOMES["dark_forest"], seed=9)
        assert [(o.object_id, o.subtype, o.position) for o in a.objects] == [
            (o.object_id, o.subtype, o.position) for o in b.objects
        ]

    def test_tree_ids_from_scene_counter(self, flat_terrain: HeightMap) -> None:
        """Placement continues the scene's id counter."""
        scene = _scene(flat_terrain)
        scene.next_object_id()
        scene.next_object_id()
        trees = place_trees(
            scene, BIOMES["dark_forest"], set(), np.random.default_rng(1), PopulationConfig(), 20.0
        )
        assert trees
        assert trees[0].object_id == 3
