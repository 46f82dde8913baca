"""Query and command surface over the live procedural scene.

``ProceduralWorld`` is the single entry point used by renderer, physics, and
audio consumers. Generation and updates take the scene's write lock and
object and mood queries take its read lock. Height and biome point queries
take only the terrain's own read lock. Every query degrades to a sentinel
instead of raising.
"""

import math
import time

import numpy as np
import structlog

from .biomes import DEFAULT_BIOME, BiomeParams, default_biomes
from .config import MAX_SEED, WorldConfig
from .evolution import EvolutionState, EvolutionStep, SceneEvolver
from .locks import ReadWriteLock
from .state import ProceduralObject, Scene
from .terrain.generator import generate_scene
from .terrain.heightmap import HeightMap

logger = structlog.get_logger()

# Returned by point queries outside the grid or before generation
HEIGHT_SENTINEL = 0.0
BIOME_SENTINEL = "unknown"

# Evolution draws from its own stream, separate from generation
_EVOLUTION_SEED_OFFSET = 10000


class SceneView:
    """Read-locked handle on the current scene.

    Use as a context manager; the scene read lock is held from ``__enter__``
    until ``__exit__``, so the scene cannot change while the block runs::

        with world.get_current_scene() as scene:
            if scene is not None:
                draw(scene.objects)

    The yielded scene is None before the first generation.
    """

    def __init__(self, world: "ProceduralWorld"):
        self._world = world
        self._held = False

    def __enter__(self) -> Scene | None:
        self._world._lock.acquire_read()
        self._held = True
        return self._world._scene

    def __exit__(self, *exc_info: object) -> None:
        if self._held:
            self._held = False
            self._world._lock.release_read()


def resolve_seed(seed: int) -> int:
    """Return ``seed``, or a clock-derived seed when it is 0."""
    if seed != 0:
        return seed
    return (time.time_ns() & MAX_SEED) or 1


class ProceduralWorld:
    """Deterministic procedural world generator and evolver.

    Args:
        config: World configuration. Defaults are used when omitted.
    """

    def __init__(self, config: WorldConfig | None = None):
        self.config = config or WorldConfig()
        self._lock = ReadWriteLock()
        self._scene: Scene | None = None
        self._evolver: SceneEvolver | None = None
        self._state = EvolutionState.UNINITIALIZED

    @property
    def state(self) -> EvolutionState:
        """Current lifecycle state."""
        return self._state

    def _resolve_biome(self) -> tuple[str, BiomeParams]:
        """Configured biome, falling back to the default when it is unknown."""
        biomes = self.config.biomes
        name = self.config.biome
        if name in biomes:
            return name, biomes[name]

        logger.warning("unknown_biome", biome=name, fallback=DEFAULT_BIOME)
        fallback = biomes.get(DEFAULT_BIOME) or default_biomes()[DEFAULT_BIOME]
        return DEFAULT_BIOME, fallback

    def generate_initial_world(self) -> Scene:
        """Generate a fresh scene, replacing any existing one.

        The new scene is built without holding any lock and swapped in
        under the scene write lock and the outgoing terrain's write lock.

        Returns:
            The new scene. Callers outside the simulation thread should read
            it through ``get_current_scene``.
        """
        seed = resolve_seed(self.config.seed)
        biome_name, biome = self._resolve_biome()
        started = time.perf_counter()

        result = generate_scene(
            seed,
            biome_name,
            biome,
            self.config.terrain,
            time_of_day=self.config.evolution.initial_time_of_day,
        )
        evolver = SceneEvolver(
            result.scene,
            self.config.evolution,
            np.random.default_rng(seed + _EVOLUTION_SEED_OFFSET),
            height_scale=self.config.terrain.height_scale,
        )

        with self._lock.write_lock():
            previous = self._scene
            if previous is None:
                self._scene = result.scene
            else:
                with previous.terrain.lock.write_lock():
                    self._scene = result.scene
            self._evolver = evolver
            self._state = EvolutionState.GENERATED

        logger.info(
            "world_generated",
            seed=seed,
            biome=biome_name,
            size=self.config.terrain.size,
            objects=len(result.objects),
            validation_passed=result.validation.passed,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return result.scene

    def update(self, delta_time: float) -> list[EvolutionStep]:
        """Advance simulated time; no-op before the first generation.

        Returns:
            Evolution steps that ran during this update.
        """
        with self._lock.write_lock():
            if self._evolver is None:
                return []
            steps = self._evolver.advance(delta_time)
            self._state = EvolutionState.EVOLVING

        if steps:
            logger.debug("scene_evolved", steps=len(steps))
        return steps

    def get_current_scene(self) -> SceneView:
        """Read-locked handle on the current scene."""
        return SceneView(self)

    def _grid_point(self, terrain: HeightMap, x: float, z: float) -> tuple[float, float] | None:
        """Map world (x, z) to fractional grid coordinates, or None if outside."""
        if not (math.isfinite(x) and math.isfinite(z)):
            return None

        grid_x = x + terrain.origin_x
        grid_z = z + terrain.origin_z
        if not (0.0 <= grid_x < terrain.width and 0.0 <= grid_z < terrain.height):
            return None
        return grid_x, grid_z

    def get_terrain_height_at(self, x: float, z: float) -> float:
        """Bilinear terrain height at world (x, z), in world units.

        Only the terrain's own read lock is taken, so height lookups do not
        wait on object mutations during ``update``.

        Returns:
            Interpolated elevation times the height scale, or 0.0 outside the
            grid, for non-finite input, or before generation.
        """
        scene = self._scene
        if scene is None:
            return HEIGHT_SENTINEL
        terrain = scene.terrain

        with terrain.lock.read_lock():
            point = self._grid_point(terrain, x, z)
            if point is None:
                return HEIGHT_SENTINEL
            grid_x, grid_z = point

            x0 = int(math.floor(grid_x))
            z0 = int(math.floor(grid_z))
            x1 = min(x0 + 1, terrain.width - 1)
            z1 = min(z0 + 1, terrain.height - 1)
            wx = grid_x - x0
            wz = grid_z - z0

            elevation = terrain.elevation
            h0 = elevation[z0, x0] * (1.0 - wx) + elevation[z0, x1] * wx
            h1 = elevation[z1, x0] * (1.0 - wx) + elevation[z1, x1] * wx
            height = h0 * (1.0 - wz) + h1 * wz

        return float(height) * self.config.terrain.height_scale

    def get_biome_at(self, x: float, z: float) -> str:
        """Region label at world (x, z), under the terrain read lock only.

        Returns:
            The cell's region label, the scene biome if the cell has none,
            or "unknown" outside the grid, for non-finite input, or before
            generation.
        """
        scene = self._scene
        if scene is None:
            return BIOME_SENTINEL
        terrain = scene.terrain

        with terrain.lock.read_lock():
            point = self._grid_point(terrain, x, z)
            if point is None:
                return BIOME_SENTINEL
            grid_x, grid_z = point
            region = terrain.region_at(int(math.floor(grid_x)), int(math.floor(grid_z)))

        return region or scene.biome

    def get_objects_by_type(self, object_type: str) -> list[ProceduralObject]:
        """Objects of one type; empty before generation."""
        with self._lock.read_lock():
            if self._scene is None:
                return []
            return self._scene.objects_by_type(object_type)

    def get_nearest_object(
        self, x: float, z: float, object_type: str | None = None
    ) -> ProceduralObject | None:
        """Closest object to world (x, z), optionally of one type."""
        if not (math.isfinite(x) and math.isfinite(z)):
            return None
        with self._lock.read_lock():
            if self._scene is None:
                return None
            return self._scene.nearest_object(x, z, object_type)

    def get_atmosphere_value(self, key: str) -> float:
        """Scene atmosphere weight, 0.0 when absent or before generation."""
        with self._lock.read_lock():
            if self._scene is None:
                return 0.0
            return self._scene.get_atmosphere(key)

    def get_weather_value(self, key: str) -> float:
        """Scene weather weight, 0.0 when absent or before generation."""
        with self._lock.read_lock():
            if self._scene is None:
                return 0.0
            return self._scene.get_weather(key)

