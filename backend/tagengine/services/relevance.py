"""Relevance scoring and filtering of tagged entities for search results."""
import logging
from typing import Iterable, List, Optional, Sequence

from tagengine.models.entity import TaggedEntity
from tagengine.services.similarity_service import SimilarityService, default_similarity

logger = logging.getLogger(__name__)

TITLE_MATCH = 100
EXACT_TAG_MATCH = 80
PARTIAL_TAG_MATCH = 50
FILENAME_MATCH = 30
FUZZY_TAG_MATCH = 20


def score(
    title: str,
    tags: Sequence[str],
    filename: str,
    query: str,
    similarity: SimilarityService = default_similarity,
) -> int:
    """Additive relevance score of one entity for a query.

    Each check is independent, so an exact tag hit also earns the
    substring and fuzzy bonuses. Scores only rank results within a
    single query.

    Args:
        title: Entity title
        tags: Entity canonical tags
        filename: Entity filename
        query: Search text
        similarity: Similarity service for the fuzzy tag check

    Returns:
        Integer score, 0 for a blank query
    """
    q = (query or "").strip().lower()
    if not q:
        return 0

    lowered_tags = [tag.lower() for tag in tags]
    total = 0
    if q in (title or "").lower():
        total += TITLE_MATCH
    if any(tag == q for tag in lowered_tags):
        total += EXACT_TAG_MATCH
    if any(q in tag for tag in lowered_tags):
        total += PARTIAL_TAG_MATCH
    if q in (filename or "").lower():
        total += FILENAME_MATCH
    if any(similarity.is_match(tag, q) for tag in lowered_tags):
        total += FUZZY_TAG_MATCH
    return total


def score_entity(
    entity: TaggedEntity,
    query: str,
    similarity: SimilarityService = default_similarity,
) -> int:
    """Score a tagged entity for a query."""
    return score(entity.title, entity.tags, entity.filename, query, similarity)


def rank_entities(
    entities: Iterable[TaggedEntity],
    query: str,
    similarity: SimilarityService = default_similarity,
) -> List[TaggedEntity]:
    """Sort entities by descending relevance; equal scores keep input order."""
    entities = list(entities)
    if not (query or "").strip():
        return entities
    return sorted(entities, key=lambda entity: -score_entity(entity, query, similarity))


def filter_entities(
    entities: Iterable[TaggedEntity],
    query: Optional[str] = None,
    selected_tags: Sequence[str] = (),
    similarity: SimilarityService = default_similarity,
) -> List[TaggedEntity]:
    """Filter entities by a search query and a set of selected tags.

    Args:
        entities: Candidate entities
        query: Case-insensitive substring looked up in filename, title,
            tags, raw label values and folder
        selected_tags: Every selected tag must be contained in one of the
            entity's tags
        similarity: Similarity service used when ranking

    Returns:
        Matching entities, ranked by relevance when a query is given
    """
    q = (query or "").strip().lower()
    results = []
    for entity in entities:
        if q and not _matches_query(entity, q):
            continue
        if selected_tags and not all(
            any(selected in tag for tag in entity.tags) for selected in selected_tags
        ):
            continue
        results.append(entity)

    logger.debug(f"Filtered entities down to {len(results)} for query '{q}'")
    return rank_entities(results, q, similarity) if q else results


def _matches_query(entity: TaggedEntity, q: str) -> bool:
    haystack = [entity.filename, entity.title, entity.folder or ""]
    haystack.extend(entity.tags)
    haystack.extend(entity.raw_values)
    return any(q in text.lower() for text in haystack)
