"""Weighted metadata: taxonomy, flat-tag normalization, and similarity.

Object and scene mood is described by sparse ``key -> weight`` mappings with
dotted namespaces such as ``atmosphere.fear``. The key set is open; the
taxonomy below only lists the keys the scene evolver may inject.
"""

from typing import Mapping, MutableMapping

TAXONOMY: dict[str, tuple[str, ...]] = {
    "atmosphere": ("fear", "ominous", "dread", "tension"),
    "visuals": ("distorted", "dark", "glitchy", "twisted"),
    "conditions": ("fog", "shadow", "silhouette", "darkness"),
}

# Flat tag -> hierarchical key
TAG_MAPPING: dict[str, str] = {
    "fear": "atmosphere.fear",
    "ominous": "atmosphere.ominous",
    "dread": "atmosphere.dread",
    "tension": "atmosphere.tension",
    "distorted": "visuals.distorted",
    "dark": "visuals.dark",
    "glitchy": "visuals.glitchy",
    "twisted": "visuals.twisted",
    "fog": "conditions.fog",
    "shadow": "conditions.shadow",
    "silhouette": "conditions.silhouette",
    "darkness": "conditions.darkness",
    "unnatural": "conditions.unnatural",
}


def taxonomy_keys() -> list[str]:
    """All ``category.property`` keys in the taxonomy, in a stable order."""
    return [f"{category}.{prop}" for category, props in TAXONOMY.items() for prop in props]


def normalize_metadata(metadata: MutableMapping[str, float]) -> None:
    """Add hierarchical keys for known flat tags, in place.

    The flat tag is kept. An existing hierarchical value is never
    overwritten.
    """
    for tag, value in list(metadata.items()):
        key = TAG_MAPPING.get(tag)
        if key is not None and key not in metadata:
            metadata[key] = value


def _shared_prefix_length(a: str, b: str) -> int:
    n = 0
    for ca, cb in zip(a, b):
        if ca != cb:
            break
        n += 1
    return n


def metadata_similarity(query: Mapping[str, float], metadata: Mapping[str, float]) -> float:
    """Score how well a metadata mapping matches a query, in [0, 1].

    For each query key the best-matching metadata key is found. An exact key
    scores ``1 - min(|dq - dm|, 1)``. A namespace match (one key is a dotted
    prefix of the other, e.g. ``atmosphere`` and ``atmosphere.fear``) scores
    the same value term scaled by shared-prefix length over the longer key.
    The result is the mean best score over matched keys times the fraction
    of query keys that matched at all.

    Args:
        query: Desired key weights.
        metadata: Candidate key weights.

    Returns:
        Similarity score; 0.0 for an empty query or no matches.
    """
    if not query:
        return 0.0

    total = 0.0
    matched = 0

    for query_key, query_value in query.items():
        best = 0.0
        for key, value in metadata.items():
            value_score = 1.0 - min(abs(query_value - value), 1.0)
            if query_key == key:
                score = value_score
            elif query_key.startswith(key + ".") or key.startswith(query_key + "."):
                shared = _shared_prefix_length(query_key, key)
                score = shared / max(len(query_key), len(key)) * value_score
            else:
                continue
            best = max(best, score)

        if best > 0.0:
            total += best
            matched += 1

    if matched == 0:
        return 0.0

    return (total / matched) * (matched / len(query))
