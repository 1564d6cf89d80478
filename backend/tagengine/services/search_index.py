"""In-memory search index over a tag vocabulary."""
import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from tagengine.core.config import Settings, settings as default_settings
from tagengine.models.tag_variant import TagVariant
from tagengine.services.similarity_service import SimilarityService
from tagengine.services.tokenizer import TagTokenizer, tokenize as default_tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _IndexMaps:
    """One fully built generation of the index. Never mutated once published."""

    canonical: Dict[str, TagVariant] = field(default_factory=dict)
    alias: Dict[str, TagVariant] = field(default_factory=dict)
    token: Dict[str, List[TagVariant]] = field(default_factory=dict)


class TagSearchIndex:
    """Exact and fuzzy lookup of tag variants by canonical label, alias or token.

    Rebuilds construct a fresh set of maps and publish them with a single
    attribute assignment, so a concurrent search sees either the previous
    or the new index in full.
    """

    def __init__(
        self,
        tokenize: Callable[[str], List[str]] = default_tokenize,
        similarity: Optional[SimilarityService] = None,
    ):
        """Initialize search index.

        Args:
            tokenize: Tokenizer applied to labels and queries
            similarity: Similarity service used for fuzzy token matches
        """
        self._tokenize = tokenize
        self.similarity = similarity or SimilarityService()
        self._maps = _IndexMaps()
        self._write_lock = threading.Lock()

    @classmethod
    def from_settings(cls, config: Settings = default_settings) -> "TagSearchIndex":
        """Build an empty index using the configured tokenizer and similarity bounds."""
        return cls(
            tokenize=TagTokenizer(min_length=config.MIN_TOKEN_LENGTH).tokenize,
            similarity=SimilarityService(
                max_distance=config.MAX_EDIT_DISTANCE,
                similarity_threshold=config.SIMILARITY_THRESHOLD,
            ),
        )

    def build(self, variants: Iterable[TagVariant]) -> None:
        """Replace the index contents with the given variants.

        Args:
            variants: Complete tag vocabulary snapshot
        """
        canonical_map: Dict[str, TagVariant] = {}
        alias_map: Dict[str, TagVariant] = {}
        token_map: Dict[str, List[TagVariant]] = {}

        for variant in variants:
            canonical_map[variant.canonical.lower()] = variant
            for alias in variant.aliases:
                alias_map.setdefault(alias.lower(), variant)

            for label in variant.members:
                for token in self._tokenize(label):
                    bucket = token_map.setdefault(token, [])
                    if not any(v is variant for v in bucket):
                        bucket.append(variant)

        maps = _IndexMaps(canonical=canonical_map, alias=alias_map, token=token_map)
        with self._write_lock:
            self._maps = maps

        logger.info(
            f"Indexed {len(canonical_map)} tag variants "
            f"({len(alias_map)} aliases, {len(token_map)} tokens)"
        )

    def update(self, variants: Iterable[TagVariant]) -> None:
        """Rebuild after the variant set changed."""
        self.build(variants)

    def search(self, query: str) -> List[TagVariant]:
        """Find variants matching a free-text query.

        Args:
            query: Search text

        Returns:
            Exact canonical/alias hits first, then other matches ordered by
            coarse confidence and count
        """
        maps = self._maps
        normalized = (query or "").strip().lower()
        if not normalized:
            return []

        exact: Dict[str, TagVariant] = {}
        for hit in (maps.canonical.get(normalized), maps.alias.get(normalized)):
            if hit is not None:
                exact.setdefault(hit.canonical, hit)

        matches: Dict[str, TagVariant] = {}
        indexed_tokens = list(maps.token)
        for token in self._tokenize(query):
            for variant in maps.token.get(token, []):
                matches.setdefault(variant.canonical, variant)
            # Linear in the number of distinct indexed tokens
            for candidate in self.similarity.find_similar(token, indexed_tokens):
                for variant in maps.token[candidate]:
                    matches.setdefault(variant.canonical, variant)

        results = list(exact.values()) + [
            variant for canonical, variant in matches.items() if canonical not in exact
        ]
        return sorted(
            results,
            key=lambda v: (
                0 if v.canonical in exact else 1,
                -math.floor(v.confidence * 10),
                -v.count,
            ),
        )

    def get(self, canonical: str) -> Optional[TagVariant]:
        """Look up a variant by its canonical label."""
        return self._maps.canonical.get(canonical.lower())

    def all_canonical(self) -> List[str]:
        """Canonical labels ordered by descending count."""
        variants = sorted(self._maps.canonical.values(), key=lambda v: -v.count)
        return [variant.canonical for variant in variants]

    def __len__(self) -> int:
        return len(self._maps.canonical)
