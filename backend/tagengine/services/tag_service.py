"""
Tag Processing Service.

Entry point for callers:
- Turning a new entity's filename, folders and metadata into a title and tags
- Recomputing the shared tag vocabulary across all known entities
- Re-deriving each entity's canonical tags from the current vocabulary
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from tagengine.core.config import Settings, settings as default_settings
from tagengine.models.entity import TaggedEntity
from tagengine.models.label_occurrence import LabelOccurrence, utc_now
from tagengine.models.metadata import MetadataRecord
from tagengine.models.tag_variant import TagVariant
from tagengine.services.similarity_service import SimilarityService
from tagengine.services.source_extraction import SourceExtractor
from tagengine.services.tag_consolidation import TagGroupingService
from tagengine.services.tag_patterns import PatternTable, resolve_pattern_table
from tagengine.services.tokenizer import TagTokenizer

logger = logging.getLogger(__name__)


class ProcessedLabels(BaseModel):
    """Title and tags derived from one entity's identifying strings."""

    title: str
    raw_occurrences: List[LabelOccurrence] = Field(default_factory=list)
    canonical_tags: List[str] = Field(default_factory=list)
    variants: List[TagVariant] = Field(default_factory=list)


class TagProcessingService:
    """Service wiring the tokenizer, extractors and grouping engine together."""

    def __init__(
        self,
        patterns: Optional[PatternTable] = None,
        max_distance: int = 3,
        similarity_threshold: float = 0.7,
        min_token_length: int = 2,
        max_value_length: int = 256,
        title_max_words: int = 3,
        confidence_floor: float = 0.1,
        confidence_window: float = 0.1,
    ):
        """
        Initialize the tag processing service.

        Args:
            patterns: Curated pattern table (built-in defaults if None)
            max_distance: Edit distance cap for direct matches
            similarity_threshold: Minimum similarity for fuzzy matches (0.0-1.0)
            min_token_length: Shortest token kept by the tokenizer
            max_value_length: Longest raw value accepted by the extractors and the grouping engine
            title_max_words: Upper bound on words in a derived title
            confidence_floor: Lowest confidence assigned to a variant
            confidence_window: Confidence difference below which count decides order
        """
        self.similarity = SimilarityService(
            max_distance=max_distance,
            similarity_threshold=similarity_threshold,
        )
        self.tokenizer = TagTokenizer(min_length=min_token_length)
        self.extractor = SourceExtractor(
            tokenizer=self.tokenizer,
            max_value_length=max_value_length,
            title_max_words=title_max_words,
        )
        self.grouping = TagGroupingService(
            patterns=patterns if patterns is not None else resolve_pattern_table(),
            similarity=self.similarity,
            confidence_floor=confidence_floor,
            confidence_window=confidence_window,
            max_value_length=max_value_length,
        )

    @classmethod
    def from_settings(cls, config: Settings = default_settings) -> "TagProcessingService":
        """Build a service from application settings."""
        return cls(
            patterns=resolve_pattern_table(config.TAG_PATTERNS_PATH),
            max_distance=config.MAX_EDIT_DISTANCE,
            similarity_threshold=config.SIMILARITY_THRESHOLD,
            min_token_length=config.MIN_TOKEN_LENGTH,
            max_value_length=config.MAX_VALUE_LENGTH,
            title_max_words=config.TITLE_MAX_WORDS,
            confidence_floor=config.CONFIDENCE_FLOOR,
            confidence_window=config.CONFIDENCE_WINDOW,
        )

    def process_labels(
        self,
        filename: str,
        folder_name: Optional[str] = None,
        user_folder_name: Optional[str] = None,
        metadata: Optional[Sequence[MetadataRecord]] = None,
        entity_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ProcessedLabels:
        """
        Derive a title and canonical tags for a single entity.

        Args:
            filename: Entity filename
            folder_name: Folder path the entity lives in
            user_folder_name: Folder label chosen by the user
            metadata: Embedded metadata records
            entity_id: Owning entity id stamped on every occurrence
            now: Extraction and grouping timestamp (defaults to current UTC time)

        Returns:
            ProcessedLabels with the entity's own grouped variants

        Raises:
            ValueTooLongError: If any raw value exceeds the length cap
        """
        now = now or utc_now()
        title, occurrences = self.extractor.split_title_and_tags(
            filename, entity_id=entity_id, extracted_at=now
        )
        occurrences.extend(
            self.extractor.extract_folder_labels(
                folder_name, user_folder_name, entity_id=entity_id, extracted_at=now
            )
        )
        occurrences.extend(
            self.extractor.extract_metadata_labels(
                metadata, entity_id=entity_id, extracted_at=now
            )
        )

        variants = self.grouping.group(occurrences, now=now)
        logger.info(
            f"Processed '{filename}': {len(occurrences)} raw labels, "
            f"{len(variants)} canonical tags"
        )
        return ProcessedLabels(
            title=title,
            raw_occurrences=occurrences,
            canonical_tags=[variant.canonical for variant in variants],
            variants=variants,
        )

    def group(
        self,
        occurrences: Iterable[LabelOccurrence],
        now: Optional[datetime] = None,
    ) -> List[TagVariant]:
        """Recompute the shared vocabulary from all known occurrences."""
        return self.grouping.group(occurrences, now=now)

    def refresh_entity_tags(
        self,
        entities: Sequence[TaggedEntity],
        now: Optional[datetime] = None,
    ) -> Tuple[List[TagVariant], List[TaggedEntity]]:
        """
        Regroup the occurrences of all entities and re-derive their tags.

        Args:
            entities: Every known entity
            now: Grouping timestamp

        Returns:
            Tuple of (recomputed vocabulary, entity copies with updated tags)

        Raises:
            ValueTooLongError: If a raw value exceeds the length cap
        """
        variants = self.group(
            (occurrence for entity in entities for occurrence in entity.raw_occurrences),
            now=now,
        )
        refreshed = [
            entity.model_copy(update={"tags": tags_for_entity(entity.raw_values, variants)})
            for entity in entities
        ]
        return variants, refreshed


def tags_for_entity(raw_values: Iterable[str], variants: Sequence[TagVariant]) -> List[str]:
    """
    Canonical labels of every variant containing one of the entity's raw values.

    Args:
        raw_values: The entity's raw label values
        variants: Current vocabulary

    Returns:
        Canonical labels in vocabulary order
    """
    values = set(raw_values)
    return [
        variant.canonical
        for variant in variants
        if variant.canonical in values or any(alias in values for alias in variant.aliases)
    ]


_default_service: Optional[TagProcessingService] = None


def get_tag_service() -> TagProcessingService:
    """Lazily built service configured from settings."""
    global _default_service
    if _default_service is None:
        _default_service = TagProcessingService.from_settings()
    return _default_service


def process_labels(
    filename: str,
    folder_name: Optional[str] = None,
    user_folder_name: Optional[str] = None,
    metadata: Optional[Sequence[MetadataRecord]] = None,
    entity_id: Optional[str] = None,
) -> ProcessedLabels:
    return get_tag_service().process_labels(
        filename, folder_name, user_folder_name, metadata, entity_id
    )


def group(occurrences: Iterable[LabelOccurrence]) -> List[TagVariant]:
    return get_tag_service().group(occurrences)
