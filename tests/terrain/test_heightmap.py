"""Tests for the HeightMap grid type."""

import numpy as np
import pytest

from procworld.terrain.heightmap import MAX_ELEVATION, MIN_ELEVATION, HeightMap
from procworld.terrain_types import REGION_DTYPE, Material


class TestConstruction:
    """Tests for building height maps."""

    def test_empty_shape(self) -> None:
        """Empty map has (height, width) layers."""
        terrain = HeightMap.empty(width=8, height=5)
        assert terrain.shape == (5, 8)
        assert terrain.width == 8
        assert terrain.height == 5
        assert terrain.material.dtype == np.uint8

    def test_mismatched_layers_rejected(self) -> None:
        """Layers of different shapes raise ValueError."""
        with pytest.raises(ValueError, match="share one 2D shape"):
            HeightMap(
                elevation=np.zeros((4, 4)),
                material=np.zeros((4, 5), dtype=np.uint8),
                humidity=np.zeros((4, 4)),
                region=np.full((4, 4), "", dtype=REGION_DTYPE),
            )

    def test_one_dimensional_layers_rejected(self) -> None:
        """Layers must be 2D."""
        with pytest.raises(ValueError):
            HeightMap(
                elevation=np.zeros(4),
                material=np.zeros(4, dtype=np.uint8),
                humidity=np.zeros(4),
                region=np.full(4, "", dtype=REGION_DTYPE),
            )


class TestAccessors:
    """Tests for per-cell access and bounds."""

    def test_in_bounds(self) -> None:
        """Bounds check covers all four edges."""
        terrain = HeightMap.empty(4, 3)
        assert terrain.in_bounds(0, 0)
        assert terrain.in_bounds(3, 2)
        assert not terrain.in_bounds(4, 0)
        assert not terrain.in_bounds(0, 3)
        assert not terrain.in_bounds(-1, 1)

    def test_cell_accessors_index_x_then_y(self) -> None:
        """Accessors take (x, y) and read row y, column x."""
        terrain = HeightMap.empty(4, 3)
        terrain.elevation[2, 1] = 0.8
        terrain.material[2, 1] = Material.SNOW
        terrain.region[2, 1] = "mountain_peak"

        assert terrain.elevation_at(1, 2) == 0.8
        assert terrain.material_at(1, 2) is Material.SNOW
        assert terrain.region_at(1, 2) == "mountain_peak"

    def test_clamp_elevation(self) -> None:
        """Clamping pulls every cell into the legal domain."""
        terrain = HeightMap.empty(3, 3)
        terrain.elevation[0, 0] = -5.0
        terrain.elevation[1, 1] = 5.0
        terrain.clamp_elevation()
        assert terrain.elevation.min() == MIN_ELEVATION
        assert terrain.elevation.max() == MAX_ELEVATION

    def test_copy_is_independent(self) -> None:
        """Copies share no array storage and get their own lock."""
        terrain = HeightMap.empty(3, 3)
        clone = terrain.copy()
        clone.elevation[0, 0] = 0.9
        clone.region[0, 0] = "pond"

        assert terrain.elevation[0, 0] == 0.5
        assert terrain.region[0, 0] == ""
        assert clone.lock is not terrain.lock


class TestOrigin:
    """Tests for the world origin cell."""

    @pytest.mark.parametrize("size, origin", [(4, 2), (5, 2), (33, 16)])
    def test_origin_is_integer_centre(self, size: int, origin: int) -> None:
        """The origin cell is the integer centre, matching noise sampling."""
        terrain = HeightMap.empty(size, size + 1)
        assert terrain.origin_x == origin
        assert terrain.origin_z == (size + 1) // 2
