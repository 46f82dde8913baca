"""Height map grid: elevation, material, humidity and region per cell."""

import numpy as np
from numpy.typing import NDArray

from ..locks import ReadWriteLock
from ..terrain_types import REGION_DTYPE, Material

MIN_ELEVATION = 0.01
MAX_ELEVATION = 0.99


class HeightMap:
    """Per-cell terrain layers stored as row-major numpy arrays.

    All four layers have shape ``(height, width)`` and are indexed
    ``[y, x]``. The map carries its own reader/writer lock so point
    queries can run without holding the scene-wide lock exclusively.
    """

    def __init__(
        self,
        elevation: NDArray[np.float64],
        material: NDArray[np.uint8],
        humidity: NDArray[np.float64],
        region: NDArray[np.str_],
    ):
        shapes = {layer.shape for layer in (elevation, material, humidity, region)}
        if len(shapes) != 1 or elevation.ndim != 2:
            raise ValueError(
                f"Height map layers must share one 2D shape, got "
                f"elevation={elevation.shape}, material={material.shape}, "
                f"humidity={humidity.shape}, region={region.shape}"
            )

        self.elevation = elevation
        self.material = material
        self.humidity = humidity
        self.region = region
        self.lock = ReadWriteLock()

    @classmethod
    def empty(cls, width: int, height: int) -> "HeightMap":
        """Create a map with mid elevation, dirt, dry ground and no labels."""
        return cls(
            elevation=np.full((height, width), 0.5, dtype=np.float64),
            material=np.full((height, width), Material.DIRT, dtype=np.uint8),
            humidity=np.zeros((height, width), dtype=np.float64),
            region=np.full((height, width), "", dtype=REGION_DTYPE),
        )

    @property
    def width(self) -> int:
        return self.elevation.shape[1]

    @property
    def height(self) -> int:
        return self.elevation.shape[0]

    @property
    def shape(self) -> tuple[int, int]:
        """Grid shape as (height, width)."""
        return self.elevation.shape

    @property
    def origin_x(self) -> int:
        """Column of the world origin; cell x covers world [x - origin_x, x - origin_x + 1)."""
        return self.width // 2

    @property
    def origin_z(self) -> int:
        """Row of the world origin."""
        return self.height // 2

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if a cell lies within the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def elevation_at(self, x: int, y: int) -> float:
        return float(self.elevation[y, x])

    def material_at(self, x: int, y: int) -> Material:
        return Material(int(self.material[y, x]))

    def region_at(self, x: int, y: int) -> str:
        return str(self.region[y, x])

    def clamp_elevation(self) -> None:
        """Clamp every cell's elevation into the legal domain."""
        np.clip(self.elevation, MIN_ELEVATION, MAX_ELEVATION, out=self.elevation)

    def copy(self) -> "HeightMap":
        """Deep copy of all layers with a fresh lock."""
        return HeightMap(
            elevation=self.elevation.copy(),
            material=self.material.copy(),
            humidity=self.humidity.copy(),
            region=self.region.copy(),
        )

    def __repr__(self) -> str:
        return f"HeightMap(width={self.width}, height={self.height})"
