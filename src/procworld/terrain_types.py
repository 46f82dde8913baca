"""Terrain materials and region labels."""

from enum import Enum, IntEnum


class Material(IntEnum):
    """Ground material ids stored in the height map."""

    WATER = 1
    DIRT = 2
    ROCK = 3
    SNOW = 4

    @property
    def soft_ground(self) -> bool:
        """Whether objects can stand on this material."""
        return self is not Material.WATER


class Region(str, Enum):
    """Sub-biome region labels assigned per cell."""

    POND = "pond"
    SWAMP = "swamp"
    CLEARING = "clearing"
    LOW_FOREST = "low_forest"
    DARK_FOREST = "dark_forest"
    DENSE_FOREST = "dense_forest"
    ROCKY_HILLS = "rocky_hills"
    MOUNTAINS = "mountains"
    MOUNTAIN_PEAK = "mountain_peak"
    SWAMP_PIT = "swamp_pit"
    SMALL_ISLAND = "small_island"
    RAVINE = "ravine"
    PATH = "path"


# Regions that anomalies gravitate toward
DARK_REGIONS = frozenset({
    Region.SWAMP.value,
    Region.DENSE_FOREST.value,
    Region.RAVINE.value,
    Region.SWAMP_PIT.value,
})

# Open ground where vegetation and rocks thin out
OPEN_REGIONS = frozenset({
    Region.CLEARING.value,
    Region.PATH.value,
})

HIGHLAND_REGIONS = frozenset({
    Region.MOUNTAIN_PEAK.value,
    Region.MOUNTAINS.value,
    Region.ROCKY_HILLS.value,
})

# Wide enough for the longest label
REGION_DTYPE = "<U16"
