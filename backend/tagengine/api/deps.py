"""Shared API dependencies."""
import logging

from fastapi import HTTPException, Request, status

from tagengine.core.exceptions import PatternTableError
from tagengine.services.search_index import TagSearchIndex
from tagengine.services.tag_service import TagProcessingService, get_tag_service

logger = logging.getLogger(__name__)


def get_service() -> TagProcessingService:
    """
    Dependency for the configured tag processing service.

    Raises:
        HTTPException: If the configured pattern table cannot be loaded
    """
    try:
        return get_tag_service()
    except PatternTableError as e:
        logger.error(f"Tag service unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Curated tag pattern table could not be loaded",
        )


def get_search_index(request: Request) -> TagSearchIndex:
    """Dependency for the application's shared search index."""
    return request.app.state.search_index
