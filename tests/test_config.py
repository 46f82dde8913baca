"""Tests for configuration and the biome registry."""

import pytest
from pydantic import ValidationError

from procworld.biomes import DEFAULT_BIOME, default_biomes, get_biome
from procworld.config import EvolutionConfig, WorldConfig
from procworld.exceptions import UnknownBiomeError
from procworld.terrain.config import CarvingConfig, TerrainConfig


class TestWorldConfig:
    """Tests for world configuration defaults and validation."""

    def test_defaults(self) -> None:
        """Defaults describe a 256x256 dark forest with a clock seed."""
        config = WorldConfig()
        assert config.seed == 0
        assert config.biome == DEFAULT_BIOME
        assert config.terrain.size == 256
        assert config.terrain.height_scale == 20.0
        assert config.evolution.evolve_interval == 3.0
        assert set(config.biomes) == {"dark_forest", "swamp", "mountains", "clearing"}

    def test_negative_seed_rejected(self) -> None:
        """Seeds must be non-negative."""
        with pytest.raises(ValidationError):
            WorldConfig(seed=-1)

    def test_nested_validation(self) -> None:
        """Nested models validate their fields."""
        with pytest.raises(ValidationError):
            TerrainConfig(size=1)
        with pytest.raises(ValidationError):
            CarvingConfig(paths=-1)
        with pytest.raises(ValidationError):
            EvolutionConfig(evolve_interval=0.0)

    def test_nested_from_dict(self) -> None:
        """Nested sections can be given as plain mappings."""
        config = WorldConfig.model_validate(
            {"seed": 9, "terrain": {"size": 32, "carving": {"paths": 0}}}
        )
        assert config.terrain.size == 32
        assert config.terrain.carving.paths == 0
        assert config.terrain.carving.clearings == 3


class TestBiomes:
    """Tests for biome records and lookup."""

    def test_biome_is_frozen(self) -> None:
        """Biome parameters cannot be mutated."""
        biome = default_biomes()["swamp"]
        with pytest.raises(ValidationError):
            biome.roughness = 2.0

    def test_get_biome(self) -> None:
        """Lookup returns registered biomes and rejects unknown names."""
        biomes = default_biomes()
        assert get_biome(biomes, "mountains") is biomes["mountains"]
        with pytest.raises(UnknownBiomeError, match="volcano"):
            get_biome(biomes, "volcano")

    def test_defaults_are_fresh(self) -> None:
        """Weather and atmosphere defaults are independent copies."""
        biome = default_biomes()["dark_forest"]
        weather = biome.weather_defaults()
        weather["fog"] = 0.0
        assert biome.weather_defaults()["fog"] == 0.7
        assert biome.atmosphere_defaults() is not biome.atmosphere_defaults()
