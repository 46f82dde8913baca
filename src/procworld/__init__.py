"""Deterministic procedural world generation and evolution."""

from .biomes import DEFAULT_BIOME, BiomeParams, default_biomes, get_biome
from .config import EvolutionConfig, WorldConfig
from .engine import BIOME_SENTINEL, HEIGHT_SENTINEL, ProceduralWorld, SceneView
from .evolution import EvolutionState, EvolutionStep, SceneEvolver
from .exceptions import ObjectNotFoundError, UnknownBiomeError, WorldError
from .locks import ReadWriteLock
from .metadata import TAXONOMY, metadata_similarity, normalize_metadata
from .state import ProceduralObject, Scene, Vector3
from .terrain_types import DARK_REGIONS, Material, Region

__all__ = [
    # Engine
    "ProceduralWorld",
    "SceneView",
    "HEIGHT_SENTINEL",
    "BIOME_SENTINEL",
    # Config
    "WorldConfig",
    "EvolutionConfig",
    # Biomes
    "BiomeParams",
    "DEFAULT_BIOME",
    "default_biomes",
    "get_biome",
    # State
    "Scene",
    "ProceduralObject",
    "Vector3",
    # Evolution
    "EvolutionState",
    "EvolutionStep",
    "SceneEvolver",
    # Metadata
    "TAXONOMY",
    "metadata_similarity",
    "normalize_metadata",
    # Terrain types
    "Material",
    "Region",
    "DARK_REGIONS",
    # Locks
    "ReadWriteLock",
    # Exceptions
    "WorldError",
    "UnknownBiomeError",
    "ObjectNotFoundError",
]
