"""String similarity calculation service."""
import logging
from typing import List, Sequence

import numpy as np

logger = logging.getLogger(__name__)


class SimilarityService:
    """Edit-distance and token-set similarity between tag strings."""

    def __init__(self, max_distance: int = 3, similarity_threshold: float = 0.7):
        """Initialize similarity service.

        Args:
            max_distance: Largest edit distance worth computing exactly;
                strings whose lengths differ by more are rejected early
            similarity_threshold: Minimum similarity for a fuzzy match (0.0-1.0)
        """
        self.max_distance = max_distance
        self.similarity_threshold = similarity_threshold

    def edit_distance(self, a: str, b: str) -> int:
        """Levenshtein distance with a length-difference fast reject.

        Args:
            a: First string
            b: Second string

        Returns:
            Exact distance, or max_distance + 1 when the lengths alone
            rule out a distance within max_distance
        """
        if not a or not b:
            return len(a) + len(b)
        if abs(len(a) - len(b)) > self.max_distance:
            return self.max_distance + 1
        return self.levenshtein(a, b)

    @staticmethod
    def levenshtein(a: str, b: str) -> int:
        """Unbounded Levenshtein distance, two DP rows at a time."""
        if len(a) < len(b):
            a, b = b, a

        previous = list(range(len(b) + 1))
        for i, char_a in enumerate(a, 1):
            current = [i]
            for j, char_b in enumerate(b, 1):
                current.append(
                    min(
                        previous[j] + 1,  # deletion
                        current[j - 1] + 1,  # insertion
                        previous[j - 1] + (char_a != char_b),  # substitution
                    )
                )
            previous = current

        return previous[-1]

    def similarity(self, a: str, b: str) -> float:
        """Similarity ratio in [0, 1]; identical strings (even empty) score 1.0.

        Uses the exact distance. The fast-reject value of edit_distance is
        only a bound and would overrate long strings of very different length.
        """
        if a == b:
            return 1.0
        return self.ratio_from_distance(a, b, self.levenshtein(a, b))

    def ratio_from_distance(self, a: str, b: str, distance: int) -> float:
        """Convert an already computed edit distance into a similarity ratio."""
        longest = max(len(a), len(b))
        if longest == 0:
            return 1.0
        return max(0.0, 1.0 - distance / longest)

    def is_match(self, a: str, b: str) -> bool:
        """Fuzzy match at the configured threshold."""
        return self.similarity(a, b) >= self.similarity_threshold

    def is_direct_match(self, a: str, b: str) -> bool:
        """Within max_distance edits and above the similarity threshold."""
        distance = self.edit_distance(a, b)
        return (
            distance <= self.max_distance
            and self.ratio_from_distance(a, b, distance) >= self.similarity_threshold
        )

    def is_subset(self, a: str, b: str) -> bool:
        """True if phrase a is a fuzzy sub-phrase of the longer phrase b.

        Args:
            a: Candidate sub-phrase
            b: Candidate containing phrase

        Returns:
            True when a has fewer words than b and every word of a
            fuzzily matches some word of b
        """
        tokens_a = a.split()
        tokens_b = b.split()
        if not tokens_a or len(tokens_a) >= len(tokens_b):
            return False
        return all(
            any(self.is_match(token, other) for other in tokens_b)
            for token in tokens_a
        )

    def are_rearrangements(self, a: str, b: str) -> bool:
        """True if a and b contain the same words in a different order.

        Words are sorted before comparison and compared position by
        position with the fuzzy threshold.
        """
        tokens_a = sorted(a.split())
        tokens_b = sorted(b.split())
        if not tokens_a or len(tokens_a) != len(tokens_b):
            return False
        return all(self.is_match(x, y) for x, y in zip(tokens_a, tokens_b))

    def similarity_matrix(self, values: Sequence[str]) -> np.ndarray:
        """Calculate the symmetric pairwise similarity matrix.

        Args:
            values: Strings to compare

        Returns:
            2D numpy array with 1.0 on the diagonal
        """
        size = len(values)
        matrix = np.ones((size, size), dtype=np.float64)
        for i in range(size):
            for j in range(i + 1, size):
                score = self.similarity(values[i], values[j])
                matrix[i, j] = score
                matrix[j, i] = score
        return matrix

    def mean_pairwise_similarity(self, values: Sequence[str]) -> float:
        """Average similarity over all distinct pairs (1.0 for fewer than two values)."""
        if len(values) < 2:
            return 1.0
        matrix = self.similarity_matrix(values)
        upper = matrix[np.triu_indices(len(values), k=1)]
        return float(upper.mean())

    def find_similar(self, query: str, candidates: Sequence[str]) -> List[str]:
        """Return candidates fuzzily matching query, in candidate order."""
        matches = [candidate for candidate in candidates if self.is_match(query, candidate)]
        logger.debug(f"Found {len(matches)} fuzzy matches for '{query}'")
        return matches


default_similarity = SimilarityService()


def edit_distance(a: str, b: str) -> int:
    return default_similarity.edit_distance(a, b)


def similarity(a: str, b: str) -> float:
    return default_similarity.similarity(a, b)


def is_subset(a: str, b: str) -> bool:
    return default_similarity.is_subset(a, b)


def are_rearrangements(a: str, b: str) -> bool:
    return default_similarity.are_rearrangements(a, b)
