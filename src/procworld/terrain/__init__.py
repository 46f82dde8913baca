"""Procedural terrain generation package.

Noise-based height map synthesis conditioned on a biome, feature carving
(clearings, pits, peaks, ravines, paths), and object population.
"""

from .config import CarvingConfig, PopulationConfig, SynthesisConfig, TerrainConfig
from .generator import GenerationResult, generate_scene, generate_terrain
from .heightmap import HeightMap
from .validation import ValidationResult, validate_terrain

__all__ = [
    "CarvingConfig",
    "GenerationResult",
    "HeightMap",
    "PopulationConfig",
    "SynthesisConfig",
    "TerrainConfig",
    "ValidationResult",
    "generate_scene",
    "generate_terrain",
    "validate_terrain",
]
