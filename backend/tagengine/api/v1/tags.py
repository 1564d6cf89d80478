"""Tag vocabulary endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from tagengine.api.deps import get_search_index, get_service
from tagengine.core.exceptions import ValueTooLongError
from tagengine.models.entity import TaggedEntity
from tagengine.models.label_occurrence import LabelOccurrence
from tagengine.models.tag_variant import TagVariant
from tagengine.services.relevance import score_entity
from tagengine.services.search_index import TagSearchIndex
from tagengine.services.tag_service import TagProcessingService

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter(prefix="/tags")


class GroupRequest(BaseModel):
    """Request model for recomputing the vocabulary."""
    occurrences: List[LabelOccurrence] = Field(..., description="All known label occurrences")


class ScoreRequest(BaseModel):
    """Request model for relevance scoring."""
    entity: TaggedEntity
    query: str = Field(..., description="Search text")


class ScoreResponse(BaseModel):
    """Relevance score of one entity."""
    score: int


@router.post("/group", response_model=List[TagVariant])
async def group_tags(
    request: GroupRequest,
    service: TagProcessingService = Depends(get_service),
    index: TagSearchIndex = Depends(get_search_index),
) -> List[TagVariant]:
    """
    Recompute the shared vocabulary and rebuild the search index from it.
    """
    try:
        variants = service.group(request.occurrences)
    except ValueTooLongError as e:
        logger.error(f"Rejected occurrences for grouping: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    index.update(variants)
    return variants


@router.get("/search", response_model=List[TagVariant])
async def search_tags(
    q: str = Query(..., description="Search text"),
    index: TagSearchIndex = Depends(get_search_index),
) -> List[TagVariant]:
    """Exact and fuzzy search over the indexed vocabulary."""
    return index.search(q)


@router.get("", response_model=List[str])
async def list_tags(index: TagSearchIndex = Depends(get_search_index)) -> List[str]:
    """Canonical labels ordered by usage."""
    return index.all_canonical()


@router.post("/score", response_model=ScoreResponse)
async def score_tags(
    request: ScoreRequest,
    service: TagProcessingService = Depends(get_service),
) -> ScoreResponse:
    """Relevance score of an entity for a query."""
    return ScoreResponse(score=score_entity(request.entity, request.query, service.similarity))
