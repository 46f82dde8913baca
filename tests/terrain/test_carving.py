"""Tests for terrain feature carving passes."""

import numpy as np
import pytest

from procworld.terrain.carving import (
    create_clearings,
    create_dense_groves,
    create_mountain_peaks,
    create_paths,
    create_ravines,
    create_small_islands,
    create_swamp_pits,
    find_path,
    post_process_terrain,
    smooth_terrain,
)
from procworld.terrain.config import CarvingConfig
from procworld.terrain.heightmap import HeightMap
from procworld.terrain_types import Material


class TestDiscPasses:
    """Tests for the radial carving passes."""

    def test_clearings_are_dirt(self, noisy_terrain: HeightMap) -> None:
        """Every clearing cell is dirt and elevation stays in range."""
        create_clearings(noisy_terrain, 3, seed=42)
        clearing = noisy_terrain.region == "clearing"
        assert clearing.any()
        assert np.all(noisy_terrain.material[clearing] == Material.DIRT)
        assert noisy_terrain.elevation.min() >= 0.01
        assert noisy_terrain.elevation.max() <= 0.99

    def test_groves_leave_elevation_alone(self, noisy_terrain: HeightMap) -> None:
        """Groves relabel cells without changing elevation."""
        before = noisy_terrain.elevation.copy()
        create_dense_groves(noisy_terrain, 5, seed=42)
        np.testing.assert_array_equal(noisy_terrain.elevation, before)
        assert (noisy_terrain.region == "dense_forest").any()

    def test_swamp_pits_are_water(self, flat_terrain: HeightMap) -> None:
        """Pit cells become water, sink, and get wetter."""
        create_swamp_pits(flat_terrain, 4, seed=3)
        pit = flat_terrain.region == "swamp_pit"
        assert pit.any()
        assert np.all(flat_terrain.material[pit] == Material.WATER)
        assert np.all(flat_terrain.elevation[pit] <= 0.5)
        assert flat_terrain.humidity.max() <= 1.0
        assert flat_terrain.humidity[pit].max() > 0.0

    def test_small_islands_are_dirt(self, flat_terrain: HeightMap) -> None:
        """Island cells are dirt."""
        flat_terrain.material[...] = Material.WATER
        create_small_islands(flat_terrain, 6, seed=3)
        island = flat_terrain.region == "small_island"
        assert island.any()
        assert np.all(flat_terrain.material[island] == Material.DIRT)

    def test_zero_count_is_noop(self, noisy_terrain: HeightMap) -> None:
        """No features requested leaves the map unchanged."""
        before = noisy_terrain.copy()
        create_clearings(noisy_terrain, 0, seed=1)
        create_swamp_pits(noisy_terrain, 0, seed=1)
        np.testing.assert_array_equal(noisy_terrain.elevation, before.elevation)
        np.testing.assert_array_equal(noisy_terrain.region, before.region)


class TestMountainPeaks:
    """Tests for peak boosting."""

    def test_no_candidates_does_nothing(self, flat_terrain: HeightMap) -> None:
        """A map with no high cells is left untouched."""
        create_mountain_peaks(flat_terrain, 3, seed=1)
        assert np.all(flat_terrain.elevation == 0.5)
        assert not (flat_terrain.region == "mountain_peak").any()

    def test_peaks_only_raise(self, noisy_terrain: HeightMap) -> None:
        """Peaks never lower a cell and their cores are rock or snow."""
        before = noisy_terrain.elevation.copy()
        create_mountain_peaks(noisy_terrain, 3, seed=1)
        assert np.all(noisy_terrain.elevation >= before)

        peak = noisy_terrain.region == "mountain_peak"
        assert peak.any()
        assert set(np.unique(noisy_terrain.material[peak])) <= {Material.ROCK, Material.SNOW}


class TestRavines:
    """Tests for ravine carving."""

    def test_ravines_only_lower(self, flat_terrain: HeightMap) -> None:
        """Ravines never raise elevation."""
        create_ravines(flat_terrain, 2, seed=8)
        assert np.all(flat_terrain.elevation <= 0.5)

    def test_ravine_cores_are_rock(self, flat_terrain: HeightMap) -> None:
        """Labelled ravine cells are rock."""
        create_ravines(flat_terrain, 4, seed=8)
        ravine = flat_terrain.region == "ravine"
        assert np.all(flat_terrain.material[ravine] == Material.ROCK)


class TestFindPath:
    """Tests for the greedy wandering path search."""

    def test_steps_are_four_connected(self, noisy_terrain: HeightMap) -> None:
        """Consecutive path cells are orthogonal neighbours."""
        path = find_path(noisy_terrain, (0, 5), (31, 20), np.random.default_rng(0))
        for (x0, y0), (x1, y1) in zip(path, path[1:]):
            assert abs(x1 - x0) + abs(y1 - y0) == 1
        assert all(noisy_terrain.in_bounds(x, y) for x, y in path)

    def test_reaches_goal_on_flat_ground(self, flat_terrain: HeightMap) -> None:
        """On flat ground the walk always closes in on the goal."""
        path = find_path(flat_terrain, (0, 0), (10, 10), np.random.default_rng(1), max_steps=500)
        assert path[0] == (0, 0)
        assert path[-1] == (10, 10)

    def test_truncates_at_step_budget(self, flat_terrain: HeightMap) -> None:
        """A short step budget returns a partial path."""
        path = find_path(flat_terrain, (0, 0), (31, 31), np.random.default_rng(1), max_steps=5)
        assert path[-1] != (31, 31)
        assert len(path) <= 11

    def test_start_equals_end(self, flat_terrain: HeightMap) -> None:
        """Start at the goal gives a one-cell path."""
        assert find_path(flat_terrain, (4, 4), (4, 4), np.random.default_rng(0)) == [(4, 4)]

    def test_paths_are_labelled(self, flat_terrain: HeightMap) -> None:
        """Carved paths mark cells as path and dirt."""
        flat_terrain.material[...] = Material.ROCK
        create_paths(flat_terrain, 1, seed=5)
        path = flat_terrain.region == "path"
        assert path.any()
        assert np.all(flat_terrain.material[path] == Material.DIRT)


class TestSmoothing:
    """Tests for neighbourhood smoothing."""

    def test_zero_passes_is_identity(self, noisy_terrain: HeightMap) -> None:
        """No passes leaves elevation unchanged."""
        before = noisy_terrain.elevation.copy()
        smooth_terrain(noisy_terrain, 0)
        np.testing.assert_array_equal(noisy_terrain.elevation, before)

    def test_border_untouched(self, noisy_terrain: HeightMap) -> None:
        """Only interior cells are blended."""
        before = noisy_terrain.elevation.copy()
        smooth_terrain(noisy_terrain, 2)
        np.testing.assert_array_equal(noisy_terrain.elevation[0], before[0])
        np.testing.assert_array_equal(noisy_terrain.elevation[:, -1], before[:, -1])

    def test_reduces_variation(self, noisy_terrain: HeightMap) -> None:
        """Smoothing lowers the spread of interior elevation."""
        before = noisy_terrain.elevation[1:-1, 1:-1].std()
        smooth_terrain(noisy_terrain, 3)
        assert noisy_terrain.elevation[1:-1, 1:-1].std() < before

    def test_interior_blend_value(self) -> None:
        """A single spike is blended 30% toward its neighbour mean."""
        terrain = HeightMap.empty(3, 3)
        terrain.elevation[1, 1] = 0.9
        smooth_terrain(terrain, 1)
        assert terrain.elevation[1, 1] == pytest.approx(0.9 * 0.7 + 0.5 * 0.3)


class TestPostProcess:
    """Tests for the per-biome carving dispatcher."""

    @pytest.mark.parametrize("biome_name", ["dark_forest", "swamp", "mountains", "clearing"])
    def test_deterministic(self, noisy_terrain: HeightMap, biome_name: str) -> None:
        """Same seed and input produce identical maps."""
        a = noisy_terrain.copy()
        b = noisy_terrain.copy()
        post_process_terrain(a, 17, biome_name, CarvingConfig())
        post_process_terrain(b, 17, biome_name, CarvingConfig())
        np.testing.assert_array_equal(a.elevation, b.elevation)
        np.testing.assert_array_equal(a.material, b.material)
        np.testing.assert_array_equal(a.region, b.region)
        assert a.elevation.min() >= 0.01
        assert a.elevation.max() <= 0.99

    @pytest.mark.parametrize("size", [2, 3])
    def test_tiny_grids(self, size: int) -> None:
        """Carving survives grids too small for most features."""
        terrain = HeightMap.empty(size, size)
        terrain.region[...] = "dark_forest"
        post_process_terrain(terrain, 1, "mountains", CarvingConfig())
        assert terrain.elevation.min() >= 0.01
        assert terrain.elevation.max() <= 0.99
