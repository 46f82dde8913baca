"""Custom exceptions for the procedural world."""


class WorldError(Exception):
    """Base exception for world errors."""

    pass


class UnknownBiomeError(WorldError):
    """Raised when a biome name is not in the registry."""

    pass


class ObjectNotFoundError(WorldError):
    """Raised when an object id is not in the scene."""

    pass
