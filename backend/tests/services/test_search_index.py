"""Tests for TagSearchIndex."""
import pytest

from tagengine.core.config import Settings
from tagengine.models.tag_variant import TagVariant
from tagengine.services.search_index import TagSearchIndex
from tagengine.services.tag_consolidation import TagGroupingService


@pytest.fixture
def vocabulary(now):
    return [
        TagVariant(canonical="latex", aliases=["latx"], count=4, confidence=0.8, last_updated=now),
        TagVariant(
            canonical="dress",
            aliases=["dresses", "dresed"],
            count=9,
            confidence=0.7,
            last_updated=now,
        ),
        TagVariant(
            canonical="beach sunset",
            aliases=["sunset beach"],
            count=3,
            confidence=1.0,
            last_updated=now,
        ),
    ]


@pytest.fixture
def index(vocabulary) -> TagSearchIndex:
    search_index = TagSearchIndex()
    search_index.build(vocabulary)
    return search_index


def test_canonical_and_alias_lookup(index) -> None:
    """Test that both the canonical label and a misspelt alias find the variant."""
    assert [v.canonical for v in index.search("latex")] == ["latex"]
    assert [v.canonical for v in index.search("latx")] == ["latex"]
    assert [v.canonical for v in index.search("LATX ")] == ["latex"]


def test_exact_hit_ranks_before_fuzzy(now) -> None:
    """Test that an exact alias hit is never outranked by a token match."""
    index = TagSearchIndex()
    index.build(
        [
            TagVariant(canonical="latx suit", count=50, confidence=1.0, last_updated=now),
            TagVariant(canonical="latex", aliases=["latx"], count=1, confidence=0.5, last_updated=now),
        ]
    )

    results = index.search("latx")

    assert [v.canonical for v in results] == ["latex", "latx suit"]


def test_fuzzy_token_match(index) -> None:
    """Test that misspelt query tokens reach indexed tokens."""
    assert [v.canonical for v in index.search("sunsett")] == ["beach sunset"]


def test_blank_and_unknown_queries(index) -> None:
    """Test queries with no results."""
    assert index.search("") == []
    assert index.search("   ") == []
    assert index.search("mountain") == []


def test_get(index) -> None:
    """Test direct canonical lookup."""
    assert index.get("Dress").count == 9
    assert index.get("dresses") is None


def test_all_canonical_ordered_by_count(index) -> None:
    """Test vocabulary listing order."""
    assert index.all_canonical() == ["dress", "latex", "beach sunset"]
    assert len(index) == 3


def test_rebuild_replaces_contents(index, now) -> None:
    """Test that a rebuild swaps in a completely new vocabulary."""
    index.update([TagVariant(canonical="lingerie", count=2, last_updated=now)])

    assert index.all_canonical() == ["lingerie"]
    assert index.get("latex") is None
    assert index.search("latx") == []


def test_empty_index() -> None:
    """Test searching before anything is indexed."""
    index = TagSearchIndex()

    assert index.search("latex") == []
    assert index.all_canonical() == []
    assert len(index) == 0


def test_grouped_vocabulary_search(make_occurrences, now) -> None:
    """Test search over a vocabulary grouped with the built-in pattern table."""
    occurrences = make_occurrences(
        ("dresses", 3), ("dress", 5), ("dresed", 1), ("latex", 3), ("latx", 1), ("beach", 1)
    )
    variants = TagGroupingService().group(occurrences, now=now)
    index = TagSearchIndex()
    index.build(variants)

    assert index.search("latx")[0].canonical == "latex"
    assert index.search("latex")[0].canonical == "latex"
    assert index.search("dresses")[0].canonical == "dress"
    assert [v.canonical for v in index.search("beach")] == ["beach"]
    assert set(index.all_canonical()) == {"dress", "latex", "beach"}


def test_from_settings_applies_similarity_bounds(vocabulary) -> None:
    """Test that the configured threshold governs fuzzy lookups."""
    strict = TagSearchIndex.from_settings(Settings(SIMILARITY_THRESHOLD=0.9))
    strict.build(vocabulary)

    assert strict.similarity.similarity_threshold == 0.9
    assert strict.search("sunsett") == []
    assert [v.canonical for v in strict.search("latx")] == ["latex"]
