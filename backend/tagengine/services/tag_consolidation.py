"""Tag grouping service for clustering near-duplicate labels into tag variants."""
import functools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from tagengine.core.exceptions import ValueTooLongError
from tagengine.models.label_occurrence import LabelOccurrence, SourceKind, utc_now
from tagengine.models.tag_variant import TagVariant
from tagengine.services.similarity_service import SimilarityService
from tagengine.services.tag_patterns import DEFAULT_TAG_PATTERNS, PatternEntry, PatternTable

logger = logging.getLogger(__name__)

USER_INTENT_KINDS = frozenset({SourceKind.USER_FOLDER, SourceKind.MANUAL})

# Float slack for the confidence tie window
_EPSILON = 1e-9


@dataclass
class ValueStats:
    """Occurrence count and provenance for one raw label value."""

    count: int = 0
    sources: List[LabelOccurrence] = field(default_factory=list)

    @property
    def has_user_intent(self) -> bool:
        return any(source.kind in USER_INTENT_KINDS for source in self.sources)


class TagGroupingService:
    """Service for clustering raw label occurrences into canonical tag variants.

    Every call recomputes the whole vocabulary from the occurrences it is
    given; no state is carried between calls.
    """

    def __init__(
        self,
        patterns: PatternTable = DEFAULT_TAG_PATTERNS,
        similarity: Optional[SimilarityService] = None,
        confidence_floor: float = 0.1,
        confidence_window: float = 0.1,
        max_value_length: int = 256,
    ):
        """Initialize tag grouping service.

        Args:
            patterns: Ordered curated (canonical, patterns) table
            similarity: Similarity service (default: distance 3, threshold 0.7)
            confidence_floor: Lowest confidence assigned to a variant
            confidence_window: Confidence difference below which count decides order
            max_value_length: Longest raw value accepted
        """
        self.patterns = tuple(patterns)
        self.similarity = similarity or SimilarityService()
        self.confidence_floor = confidence_floor
        self.confidence_window = confidence_window
        self.max_value_length = max_value_length

    def group(
        self,
        occurrences: Iterable[LabelOccurrence],
        now: Optional[datetime] = None,
    ) -> List[TagVariant]:
        """Cluster occurrences into tag variants.

        Args:
            occurrences: All label occurrences of one refresh cycle
            now: Timestamp stamped on every variant (defaults to current UTC time)

        Returns:
            Tag variants ordered by confidence, then count

        Raises:
            ValueTooLongError: If a raw value exceeds the length cap
        """
        stats = self.collect_stats(occurrences)
        if not stats:
            return []

        now = now or utc_now()
        clusters = self._cluster(list(stats))
        clusters = self._apply_patterns(clusters)
        variants = [self._build_variant(members, stats, now) for members in clusters]
        variants = self.sort_variants(variants)

        logger.info(
            f"Grouped {sum(s.count for s in stats.values())} occurrences "
            f"({len(stats)} unique values) into {len(variants)} tag variants"
        )
        return variants

    def collect_stats(self, occurrences: Iterable[LabelOccurrence]) -> Dict[str, ValueStats]:
        """Count raw values and collect their sources in first-seen order."""
        stats: Dict[str, ValueStats] = {}
        for occurrence in occurrences:
            if not occurrence.value or not occurrence.value.strip():
                continue
            if len(occurrence.value) > self.max_value_length:
                logger.warning(
                    f"Rejected {occurrence.kind.value} label of {len(occurrence.value)} characters "
                    f"(limit {self.max_value_length})"
                )
                raise ValueTooLongError(occurrence.value, self.max_value_length, "value")
            entry = stats.setdefault(occurrence.value, ValueStats())
            entry.count += 1
            entry.sources.append(occurrence)
        return stats

    def belongs_with(self, seed: str, other: str) -> bool:
        """Whether other joins the cluster seeded by seed."""
        return (
            self.similarity.is_direct_match(seed, other)
            or self.similarity.is_subset(seed, other)
            or self.similarity.is_subset(other, seed)
            or self.similarity.are_rearrangements(seed, other)
        )

    def select_canonical(self, members: Sequence[str], stats: Dict[str, ValueStats]) -> str:
        """Choose the representative label of a cluster.

        Prefers, in order:
        1. A curated canonical whose label or pattern is literally a member
        2. The first member with a user folder or manual source
        3. The member with the highest occurrence count
        4. On equal counts, the member with more words

        Args:
            members: Cluster members in first-seen order
            stats: Per-value counts and sources

        Returns:
            The canonical label
        """
        member_set = set(members)
        for canonical, patterns in self.patterns:
            if canonical in member_set:
                return canonical
            # A raw value outside this cluster already belongs to another one
            if canonical not in stats and any(p in member_set for p in patterns):
                return canonical

        for member in members:
            entry = stats.get(member)
            if entry is not None and entry.has_user_intent:
                return member

        ranked = sorted(
            members,
            key=lambda m: (
                -(stats[m].count if m in stats else 0),  # Higher usage first
                -len(m.split()),  # More complete phrase first
            ),
        )
        return ranked[0]

    def sort_variants(self, variants: List[TagVariant]) -> List[TagVariant]:
        """Order by confidence, using count when confidences are within the window."""

        def compare(a: TagVariant, b: TagVariant) -> int:
            if abs(a.confidence - b.confidence) <= self.confidence_window + _EPSILON:
                return b.count - a.count
            return -1 if a.confidence > b.confidence else 1

        return sorted(variants, key=functools.cmp_to_key(compare))

    def _cluster(self, values: List[str]) -> List[List[str]]:
        clusters: List[List[str]] = []
        processed = set()

        for seed in values:
            if seed in processed:
                continue

            members = [seed]
            processed.add(seed)
            # Compared against the seed only; absorbed values do not recruit others
            for other in values:
                if other in processed:
                    continue
                if self.belongs_with(seed, other):
                    members.append(other)
                    processed.add(other)

            clusters.append(members)

        return clusters

    def _apply_patterns(self, clusters: List[List[str]]) -> List[List[str]]:
        owner = {value: idx for idx, members in enumerate(clusters) for value in members}

        for idx, members in enumerate(clusters):
            if not members:
                continue
            entry = self._match_pattern(members)
            if entry is None:
                continue

            canonical = entry[0]
            if canonical in members:
                continue

            other_idx = owner.get(canonical)
            if other_idx is not None and other_idx != idx:
                absorbed = clusters[other_idx]
                clusters[other_idx] = []
                for value in absorbed:
                    owner[value] = idx
                members.extend(absorbed)
                logger.debug(f"Merged cluster of '{canonical}' into cluster of '{members[0]}'")
            else:
                members.append(canonical)
                owner[canonical] = idx
                logger.debug(f"Added curated label '{canonical}' to cluster of '{members[0]}'")

        return [members for members in clusters if members]

    def _match_pattern(self, members: Sequence[str]) -> Optional[PatternEntry]:
        for entry in self.patterns:
            canonical, patterns = entry
            for candidate in (canonical,) + tuple(patterns):
                if any(self.similarity.is_match(member, candidate) for member in members):
                    return entry
        return None

    def _build_variant(
        self,
        members: List[str],
        stats: Dict[str, ValueStats],
        now: datetime,
    ) -> TagVariant:
        canonical = self.select_canonical(members, stats)
        if canonical not in members:
            members = members + [canonical]

        sources: List[LabelOccurrence] = []
        for member in members:
            if member in stats:
                sources.extend(stats[member].sources)

        confidence = max(
            self.confidence_floor,
            self.similarity.mean_pairwise_similarity(members),
        )

        return TagVariant(
            canonical=canonical,
            aliases=[m for m in members if m != canonical],
            count=sum(stats[m].count for m in members if m in stats),
            sources=sources,
            confidence=min(1.0, confidence),
            last_updated=now,
        )
