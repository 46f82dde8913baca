"""Post-generation validation of the height map and placed objects."""

import logging

import numpy as np

from ..state import ProceduralObject
from ..terrain_types import Material
from .heightmap import MAX_ELEVATION, MIN_ELEVATION, HeightMap
from .objects import world_to_cell

logger = logging.getLogger(__name__)


class ValidationResult:
    """Result of terrain validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


def validate_terrain(
    terrain: HeightMap,
    objects: list[ProceduralObject],
) -> ValidationResult:
    """Check generated terrain and objects against their invariants.

    Failures are reported in the result and logged; nothing is raised.

    Args:
        terrain: Generated height map.
        objects: Objects placed by the population pass.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()

    _check_elevation_range(terrain, result)
    _check_humidity_range(terrain, result)
    _check_materials(terrain, result)
    _check_region_labels(terrain, result)
    _check_occupancy(terrain, objects, result)

    if result.passed:
        logger.info("Terrain validation passed")
    else:
        logger.warning(f"Terrain validation failed with {len(result.errors)} errors")
        for error in result.errors:
            logger.error(f"  - {error}")

    for warning in result.warnings:
        logger.warning(f"  - {warning}")

    return result


def _check_elevation_range(terrain: HeightMap, result: ValidationResult) -> None:
    elevation = terrain.elevation
    if not np.all(np.isfinite(elevation)):
        result.add_error("Elevation contains non-finite values")
        return

    out_of_range = np.sum((elevation < MIN_ELEVATION) | (elevation > MAX_ELEVATION))
    if out_of_range:
        result.add_error(f"{out_of_range} cells have elevation outside [{MIN_ELEVATION}, {MAX_ELEVATION}]")


def _check_humidity_range(terrain: HeightMap, result: ValidationResult) -> None:
    out_of_range = np.sum(~((terrain.humidity >= 0.0) & (terrain.humidity <= 1.0)))
    if out_of_range:
        result.add_error(f"{out_of_range} cells have humidity outside [0, 1]")


def _check_materials(terrain: HeightMap, result: ValidationResult) -> None:
    known = np.array([m.value for m in Material], dtype=np.uint8)
    unknown = np.sum(~np.isin(terrain.material, known))
    if unknown:
        result.add_error(f"{unknown} cells have an unknown material id")


def _check_region_labels(terrain: HeightMap, result: ValidationResult) -> None:
    unlabeled = np.sum(terrain.region == "")
    if unlabeled:
        result.add_error(f"{unlabeled} cells have no region label")


def _check_occupancy(
    terrain: HeightMap,
    objects: list[ProceduralObject],
    result: ValidationResult,
) -> None:
    """Check no two objects share a cell and none stands in water."""
    seen: set[tuple[int, int]] = set()
    shared = 0
    in_water = 0

    for obj in objects:
        cell = world_to_cell(terrain, obj.position.x, obj.position.z)
        if cell in seen:
            shared += 1
        seen.add(cell)

        if terrain.in_bounds(*cell) and terrain.material_at(*cell) == Material.WATER:
            in_water += 1

    if shared:
        result.add_error(f"{shared} objects share a grid cell with another object")
    if in_water:
        result.add_warning(f"{in_water} objects placed on water")
