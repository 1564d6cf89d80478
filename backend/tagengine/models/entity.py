"""Tagged entity model."""
from typing import List, Optional

from pydantic import BaseModel, Field

from tagengine.models.label_occurrence import LabelOccurrence


class TaggedEntity(BaseModel):
    """Caller-owned record (an image or similar) associated with canonical tags.

    The engine never stores these; it only reads them for scoring and
    filtering, and returns updated copies when tags are refreshed.
    """

    id: str
    filename: str
    title: str = ""
    tags: List[str] = Field(default_factory=list)  # canonical labels, derived
    raw_occurrences: List[LabelOccurrence] = Field(default_factory=list)
    folder: Optional[str] = None

    @property
    def raw_values(self) -> List[str]:
        return [occurrence.value for occurrence in self.raw_occurrences]
