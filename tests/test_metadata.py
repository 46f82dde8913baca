"""Tests for metadata normalization and similarity."""

import pytest

from procworld.metadata import TAG_MAPPING, metadata_similarity, normalize_metadata, taxonomy_keys


class TestTaxonomy:
    """Tests for the taxonomy key listing."""

    def test_keys_are_dotted(self) -> None:
        """Every key is category.property."""
        keys = taxonomy_keys()
        assert "atmosphere.fear" in keys
        assert "conditions.darkness" in keys
        assert all(key.count(".") == 1 for key in keys)
        assert len(keys) == len(set(keys))


class TestNormalizeMetadata:
    """Tests for flat tag expansion."""

    def test_adds_hierarchical_key(self) -> None:
        """Flat tags gain their hierarchical key and are kept."""
        metadata = {"fear": 0.5, "unnatural": 0.9}
        normalize_metadata(metadata)
        assert metadata == {
            "fear": 0.5,
            "unnatural": 0.9,
            "atmosphere.fear": 0.5,
            "conditions.unnatural": 0.9,
        }

    def test_existing_key_not_overwritten(self) -> None:
        """An explicit hierarchical value wins over the flat tag."""
        metadata = {"fear": 0.2, "atmosphere.fear": 0.9}
        normalize_metadata(metadata)
        assert metadata["atmosphere.fear"] == 0.9

    def test_unknown_tags_untouched(self) -> None:
        """Tags without a mapping are left alone."""
        metadata = {"sparkly": 0.4}
        normalize_metadata(metadata)
        assert metadata == {"sparkly": 0.4}

    def test_mapping_targets_are_dotted(self) -> None:
        """Every flat tag maps into a namespace."""
        assert all("." in key for key in TAG_MAPPING.values())


class TestMetadataSimilarity:
    """Tests for query scoring."""

    def test_exact_match(self) -> None:
        """Exact keys score one minus the value difference."""
        score = metadata_similarity({"atmosphere.fear": 0.8}, {"atmosphere.fear": 0.6})
        assert score == pytest.approx(0.8)

    def test_identical_scores_one(self) -> None:
        """A mapping matches itself perfectly."""
        metadata = {"atmosphere.fear": 0.3, "visuals.dark": 0.7}
        assert metadata_similarity(metadata, metadata) == pytest.approx(1.0)

    def test_namespace_match_is_scaled(self) -> None:
        """A namespace match is scaled by shared prefix over the longer key."""
        score = metadata_similarity({"atmosphere": 1.0}, {"atmosphere.fear": 1.0})
        assert score == pytest.approx(10 / 15)

    def test_unmatched_keys_reduce_score(self) -> None:
        """Only the matched fraction of query keys counts."""
        score = metadata_similarity(
            {"atmosphere.fear": 1.0, "visuals.dark": 1.0}, {"atmosphere.fear": 1.0}
        )
        assert score == pytest.approx(0.5)

    def test_sibling_keys_do_not_match(self) -> None:
        """Keys that only share a namespace prefix are not matches."""
        assert metadata_similarity({"atmosphere.fear": 1.0}, {"atmosphere.dread": 1.0}) == 0.0

    def test_empty_query(self) -> None:
        """An empty query scores zero."""
        assert metadata_similarity({}, {"atmosphere.fear": 1.0}) == 0.0

    def test_score_in_unit_range(self) -> None:
        """Large value differences are capped."""
        score = metadata_similarity({"atmosphere.fear": 5.0}, {"atmosphere.fear": -5.0})
        assert score == 0.0
