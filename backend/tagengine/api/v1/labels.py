"""Label processing endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from tagengine.api.deps import get_service
from tagengine.core.exceptions import ValueTooLongError
from tagengine.models.metadata import MetadataRecord
from tagengine.services.tag_service import ProcessedLabels, TagProcessingService

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter(prefix="/labels")


class ProcessLabelsRequest(BaseModel):
    """Request model for processing one entity's labels."""
    filename: str = Field(..., description="Entity filename")
    folder_name: Optional[str] = Field(None, description="Slash-separated folder path")
    user_folder_name: Optional[str] = Field(None, description="Folder label chosen by the user")
    metadata: List[MetadataRecord] = Field(default_factory=list, description="EXIF/IPTC/XMP records")
    entity_id: Optional[str] = Field(None, description="Owning entity id")


@router.post("/process", response_model=ProcessedLabels)
async def process_labels(
    request: ProcessLabelsRequest,
    service: TagProcessingService = Depends(get_service),
) -> ProcessedLabels:
    """
    Derive a title and canonical tags from an entity's filename, folders and metadata.
    """
    try:
        return service.process_labels(
            request.filename,
            folder_name=request.folder_name,
            user_folder_name=request.user_folder_name,
            metadata=request.metadata,
            entity_id=request.entity_id,
        )
    except ValueTooLongError as e:
        logger.error(f"Rejected labels for {request.entity_id or request.filename}: {e}")
        raise HTTPException(status_code=422, detail=str(e))
