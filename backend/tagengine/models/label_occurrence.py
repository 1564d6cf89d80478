"""Label occurrence model."""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SourceKind(str, Enum):
    """Where a raw label was extracted from."""

    FILENAME = "filename"
    FOLDER = "folder"
    USER_FOLDER = "user_folder"
    METADATA = "metadata"
    MANUAL = "manual"


def utc_now() -> datetime:
    """Timezone-aware current time used for all engine timestamps."""
    return datetime.now(timezone.utc)


class LabelOccurrence(BaseModel):
    """One raw label string extracted from one source, with provenance."""

    model_config = ConfigDict(frozen=True)

    kind: SourceKind
    value: str
    entity_id: Optional[str] = None  # owning image/document, if known
    extracted_at: datetime = Field(default_factory=utc_now)
