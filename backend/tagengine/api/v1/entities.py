"""Entity filtering and tag refresh endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from tagengine.api.deps import get_search_index, get_service
from tagengine.core.exceptions import ValueTooLongError
from tagengine.models.entity import TaggedEntity
from tagengine.models.tag_variant import TagVariant
from tagengine.services.relevance import filter_entities
from tagengine.services.search_index import TagSearchIndex
from tagengine.services.tag_service import TagProcessingService

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter(prefix="/entities")


class FilterRequest(BaseModel):
    """Request model for filtering entities."""
    entities: List[TaggedEntity]
    query: Optional[str] = Field(None, description="Search text")
    selected_tags: List[str] = Field(default_factory=list, description="Tags every result must carry")


class RefreshRequest(BaseModel):
    """Request model for refreshing entity tags."""
    entities: List[TaggedEntity]


class RefreshResponse(BaseModel):
    """Recomputed vocabulary and entities with re-derived tags."""
    variants: List[TagVariant]
    entities: List[TaggedEntity]


@router.post("/filter", response_model=List[TaggedEntity])
async def filter_entity_list(
    request: FilterRequest,
    service: TagProcessingService = Depends(get_service),
) -> List[TaggedEntity]:
    """Filter by query and selected tags, ranked by relevance."""
    return filter_entities(
        request.entities, request.query, request.selected_tags, service.similarity
    )


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_entities(
    request: RefreshRequest,
    service: TagProcessingService = Depends(get_service),
    index: TagSearchIndex = Depends(get_search_index),
) -> RefreshResponse:
    """
    Regroup every entity's raw labels, re-derive their tags and rebuild the index.
    """
    try:
        variants, entities = service.refresh_entity_tags(request.entities)
    except ValueTooLongError as e:
        logger.error(f"Rejected entities for tag refresh: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    index.update(variants)
    return RefreshResponse(variants=variants, entities=entities)
