"""Scene state: placed objects and the live scene they belong to."""

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Mapping

from .exceptions import ObjectNotFoundError
from .metadata import metadata_similarity

if TYPE_CHECKING:
    from .terrain.heightmap import HeightMap


@dataclass
class Vector3:
    """World-space vector. ``y`` is up; the ground plane is x/z."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def distance_xz(self, x: float, z: float) -> float:
        """Distance to a point on the ground plane, ignoring height."""
        return math.hypot(self.x - x, self.z - z)


@dataclass
class ProceduralObject:
    """A placed scene object.

    ``metadata`` is an open mapping of dotted keys to weights in [0, 1];
    read it through ``get_weight`` so missing keys have a defined value.
    ``seed`` drives reproducible downstream detail for this object.
    """

    object_id: int
    object_type: str
    subtype: str
    position: Vector3
    scale: Vector3
    rotation: Vector3
    metadata: dict[str, float] = field(default_factory=dict)
    seed: int = 0

    def get_weight(self, key: str, default: float = 0.0) -> float:
        """Get a metadata weight, or ``default`` if the key is absent."""
        return self.metadata.get(key, default)


@dataclass
class Scene:
    """Live world state: terrain, objects, weather and mood.

    Object ids come from a monotonic counter and are never reused, even
    after removals.
    """

    terrain: "HeightMap"
    seed: int
    biome: str
    objects: list[ProceduralObject] = field(default_factory=list)
    weather: dict[str, float] = field(default_factory=dict)
    atmosphere: dict[str, float] = field(default_factory=dict)
    time_of_day: float = 0.0
    fear_level: float = 0.5
    _next_id: int = field(default=1, repr=False)

    def next_object_id(self) -> int:
        """Reserve and return the next object id."""
        object_id = self._next_id
        self._next_id += 1
        return object_id

    @property
    def object_count(self) -> int:
        return len(self.objects)

    def add_object(self, obj: ProceduralObject) -> None:
        """Append an object. Its id must come from ``next_object_id``."""
        self.objects.append(obj)

    def get_object(self, object_id: int) -> ProceduralObject:
        """Get object by id.

        Raises:
            ObjectNotFoundError: If no object has that id.
        """
        for obj in self.objects:
            if obj.object_id == object_id:
                return obj
        raise ObjectNotFoundError(f"Object {object_id} not found")

    def remove_object(self, object_id: int) -> ProceduralObject:
        """Remove an object by id and return it.

        Raises:
            ObjectNotFoundError: If no object has that id.
        """
        obj = self.get_object(object_id)
        self.objects.remove(obj)
        return obj

    def objects_by_type(self, object_type: str) -> list[ProceduralObject]:
        return [obj for obj in self.objects if obj.object_type == object_type]

    def nearest_object(
        self, x: float, z: float, object_type: str | None = None
    ) -> ProceduralObject | None:
        """Closest object on the ground plane, optionally of one type."""
        candidates = (
            self.objects if object_type is None else self.objects_by_type(object_type)
        )
        return min(candidates, key=lambda obj: obj.position.distance_xz(x, z), default=None)

    def find_objects_by_metadata(
        self, query: Mapping[str, float], threshold: float = 0.5
    ) -> list[ProceduralObject]:
        """Objects whose metadata scores at least ``threshold`` against a query.

        Results are sorted best match first.
        """
        scored = [(metadata_similarity(query, obj.metadata), obj) for obj in self.objects]
        matches = [(score, obj) for score, obj in scored if score >= threshold]
        matches.sort(key=lambda pair: pair[0], reverse=True)
        return [obj for _, obj in matches]

    def get_weather(self, key: str, default: float = 0.0) -> float:
        return self.weather.get(key, default)

    def get_atmosphere(self, key: str, default: float = 0.0) -> float:
        return self.atmosphere.get(key, default)
