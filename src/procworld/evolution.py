"""Scene evolution: slow weather, object, population, and mood drift."""

import math
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
import structlog

from .config import EvolutionConfig
from .metadata import TAXONOMY
from .state import ProceduralObject, Scene, Vector3
from .terrain.noise import perlin_1d
from .terrain.objects import (
    EVOLVED_SEED_BLOCK,
    ObjectType,
    object_seed,
    random_position,
    world_to_cell,
)
from .terrain_types import Material

logger = structlog.get_logger()

MIN_FEAR = 0.1
MAX_FEAR = 1.0

# Object types that fidget in place
JITTER_TYPES = frozenset({ObjectType.TREE.value, ObjectType.STRANGE.value})

ADDABLE_TYPES = (
    ObjectType.TREE,
    ObjectType.ROCK,
    ObjectType.STUMP,
    ObjectType.STRANGE,
)


class EvolutionState(str, Enum):
    """Lifecycle of the live scene."""

    UNINITIALIZED = "uninitialized"
    GENERATED = "generated"
    EVOLVING = "evolving"


@dataclass
class EvolutionStep:
    """What changed during one evolution step."""

    step_index: int
    elapsed: float
    modified_ids: list[int] = field(default_factory=list)
    added: ProceduralObject | None = None
    removed: ProceduralObject | None = None
    fear_delta: float = 0.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class SceneEvolver:
    """Applies small time-driven mutations to a live scene.

    Time accumulates across ``advance`` calls; every ``evolve_interval``
    seconds of simulated time one evolution step fires, independent of how
    the time was split into frames. A single call runs at most
    ``max_steps_per_update`` steps and drops any further backlog.

    The evolver does no locking of its own; callers hold the scene's
    write lock.
    """

    def __init__(
        self,
        scene: Scene,
        config: EvolutionConfig,
        rng: np.random.Generator,
        height_scale: float = 20.0,
    ):
        self.scene = scene
        self.config = config
        self.rng = rng
        self.height_scale = height_scale

        self.elapsed = 0.0
        self.steps_run = 0
        self._accumulator = 0.0
        self._start_time_of_day = scene.time_of_day

    def advance(self, delta_time: float) -> list[EvolutionStep]:
        """Advance simulated time and run any evolution steps that are due.

        Negative or non-finite ``delta_time`` is ignored.

        Returns:
            The steps that ran, oldest first.
        """
        if not math.isfinite(delta_time) or delta_time < 0.0:
            logger.warning("evolution_bad_delta", delta_time=delta_time)
            return []

        self.elapsed += delta_time
        cycle = self.elapsed / self.config.day_cycle_seconds
        self.scene.time_of_day = (self._start_time_of_day + cycle) % 1.0

        self._accumulator += delta_time
        interval = self.config.evolve_interval
        steps: list[EvolutionStep] = []

        while self._accumulator >= interval and len(steps) < self.config.max_steps_per_update:
            self._accumulator -= interval
            steps.append(self.step())

        if self._accumulator >= interval:
            dropped = int(self._accumulator // interval)
            self._accumulator %= interval
            logger.debug("evolution_backlog_dropped", dropped_steps=dropped)

        return steps

    def step(self) -> EvolutionStep:
        """Run one evolution step unconditionally."""
        self.steps_run += 1
        result = EvolutionStep(step_index=self.steps_run, elapsed=self.elapsed)

        self.update_weather()
        result.modified_ids = self.modify_objects()

        if self.rng.random() < self.config.population_change_chance:
            if self.rng.random() < self.config.add_probability:
                result.added = self.add_random_object()
            else:
                result.removed = self.remove_random_object()

        if self.rng.random() < self.config.fear_change_chance:
            result.fear_delta = self.drift_fear()

        return result

    def update_weather(self) -> None:
        """Ease fog, mist, and wind toward time-of-day targets.

        Fog is thickest around midnight; wind picks up at dawn and dusk and
        only changes on some steps.
        """
        cfg = self.config
        weather = self.scene.weather
        time_of_day = self.scene.time_of_day

        night_factor = 1.0 - math.sin(time_of_day * math.pi)
        noise = perlin_1d(self.elapsed * 0.01, self.scene.seed)
        fog_target = 0.3 + night_factor * 0.5 + noise * 0.2

        fog = weather.get("fog", 0.0) * (1.0 - cfg.fog_smoothing) + fog_target * cfg.fog_smoothing
        weather["fog"] = _clamp(fog, 0.0, 1.0)
        weather["mist"] = weather["fog"] * cfg.mist_ratio

        if self.rng.random() < cfg.wind_change_chance:
            twilight = math.sin((time_of_day - 0.25) * 2.0 * math.pi) * 0.5 + 0.5
            wind_target = 0.3 + noise * 0.3 + twilight * 0.2
            wind = (
                weather.get("wind", 0.0) * (1.0 - cfg.wind_smoothing)
                + wind_target * cfg.wind_smoothing
            )
            weather["wind"] = _clamp(wind, 0.0, 1.0)

    def modify_objects(self) -> list[int]:
        """Drift metadata weights and nudge restless objects.

        Returns:
            Ids of the objects that were touched.
        """
        cfg = self.config
        rng = self.rng
        modified: list[int] = []

        for obj in self.scene.objects:
            if rng.random() >= cfg.object_drift_chance:
                continue
            modified.append(obj.object_id)

            for key, value in obj.metadata.items():
                delta = (rng.random() * 2.0 - 1.0) * cfg.metadata_delta
                obj.metadata[key] = _clamp(value + delta, 0.0, 1.0)

            if rng.random() < cfg.new_metadata_chance:
                categories = list(TAXONOMY)
                category = categories[int(rng.integers(len(categories)))]
                props = TAXONOMY[category]
                key = f"{category}.{props[int(rng.integers(len(props)))]}"
                if key not in obj.metadata:
                    obj.metadata[key] = rng.random()

            if obj.object_type in JITTER_TYPES and rng.random() < cfg.jitter_chance:
                self._jitter(obj)

        return modified

    def _jitter(self, obj: ProceduralObject) -> None:
        """Shift an object slightly on the ground plane, staying over the grid."""
        terrain = self.scene.terrain
        spread = self.config.jitter_range
        min_x, max_x = -terrain.origin_x, terrain.width - terrain.origin_x
        min_z, max_z = -terrain.origin_z, terrain.height - terrain.origin_z

        x = obj.position.x + (self.rng.random() * 2.0 - 1.0) * spread
        z = obj.position.z + (self.rng.random() * 2.0 - 1.0) * spread
        # Upper edge is exclusive
        obj.position.x = _clamp(x, min_x, math.nextafter(max_x, -math.inf))
        obj.position.z = _clamp(z, min_z, math.nextafter(max_z, -math.inf))

    def add_random_object(self) -> ProceduralObject | None:
        """Try to add one object at a random dry, uncrowded spot.

        Returns:
            The new object, or None if the sampled spot was rejected.
        """
        scene = self.scene
        terrain = scene.terrain
        rng = self.rng

        object_type = ADDABLE_TYPES[int(rng.integers(len(ADDABLE_TYPES)))]
        x, z = random_position(terrain, rng)
        cx, cy = world_to_cell(terrain, x, z)
        if not terrain.in_bounds(cx, cy):
            return None
        if terrain.material_at(cx, cy) == Material.WATER:
            return None

        spacing = self.config.min_object_spacing
        if any(obj.position.distance_xz(x, z) < spacing for obj in scene.objects):
            return None

        object_id = scene.next_object_id()
        obj = _build_object(
            object_type,
            object_id,
            Vector3(x, terrain.elevation_at(cx, cy) * self.height_scale, z),
            rng,
            object_seed(scene, EVOLVED_SEED_BLOCK, object_id),
        )
        scene.add_object(obj)
        logger.debug("object_added", object_id=object_id, object_type=obj.object_type)
        return obj

    def remove_random_object(self) -> ProceduralObject | None:
        """Remove one object chosen uniformly at random, if there are any."""
        objects = self.scene.objects
        if not objects:
            return None

        obj = objects.pop(int(self.rng.integers(len(objects))))
        logger.debug("object_removed", object_id=obj.object_id, object_type=obj.object_type)
        return obj

    def drift_fear(self) -> float:
        """Random-walk the fear level, clamped to [0.1, 1.0].

        Returns:
            The change actually applied.
        """
        scene = self.scene
        before = scene.fear_level
        change = (self.rng.random() * 2.0 - 1.0) * self.config.fear_delta
        scene.fear_level = _clamp(before + change, MIN_FEAR, MAX_FEAR)
        return scene.fear_level - before


def _build_object(
    object_type: ObjectType,
    object_id: int,
    position: Vector3,
    rng: np.random.Generator,
    seed: int,
) -> ProceduralObject:
    """Create a freshly parameterized object of the given type."""
    spin = Vector3(0.0, rng.random() * 2.0 * math.pi, 0.0)

    if object_type == ObjectType.TREE:
        height = 2.0 + rng.random() * 3.0
        subtype = "pine"
        scale = Vector3(1.0, height, 1.0)
        metadata = {
            "atmosphere.fear": 0.3 + rng.random() * 0.3,
            "atmosphere.ominous": 0.2 + rng.random() * 0.4,
            "visuals.distorted": rng.random() * 0.5,
            "visuals.dark": 0.3 + rng.random() * 0.4,
            "conditions.silhouette": 0.2 + rng.random() * 0.7,
        }
    elif object_type == ObjectType.ROCK:
        size = 0.5 + rng.random() * 1.5
        subtype = "rock"
        scale = Vector3(size, size, size)
        spin = Vector3(rng.random(), rng.random() * 2.0 * math.pi, rng.random())
        metadata = {
            "atmosphere.ominous": 0.1 + rng.random() * 0.3,
            "visuals.rough": 0.4 + rng.random() * 0.4,
            "conditions.shadow": 0.3 + rng.random() * 0.3,
        }
    elif object_type == ObjectType.STUMP:
        subtype = "stump"
        scale = Vector3(0.8, 0.5, 0.8)
        metadata = {
            "atmosphere.dread": 0.4 + rng.random() * 0.4,
            "visuals.decay": 0.5 + rng.random() * 0.3,
            "conditions.darkness": 0.3 + rng.random() * 0.3,
        }
    else:
        size = 0.5 + rng.random()
        subtype = "anomaly"
        scale = Vector3(size, size * 3.0, size)
        metadata = {
            "atmosphere.fear": 0.7 + rng.random() * 0.3,
            "atmosphere.dread": 0.8 + rng.random() * 0.2,
            "visuals.distorted": 0.6 + rng.random() * 0.4,
            "visuals.twisted": 0.7 + rng.random() * 0.3,
            "conditions.silhouette": 0.8 + rng.random() * 0.2,
            "conditions.unnatural": 0.9 + rng.random() * 0.1,
        }

    return ProceduralObject(
        object_id=object_id,
        object_type=object_type.value,
        subtype=subtype,
        position=position,
        scale=scale,
        rotation=spin,
        metadata=metadata,
        seed=seed,
    )
