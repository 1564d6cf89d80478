"""Tag variant model."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from tagengine.models.label_occurrence import LabelOccurrence, utc_now


class TagVariant(BaseModel):
    """A clustered, canonicalized tag with aliases, usage count and confidence."""

    canonical: str
    aliases: List[str] = Field(default_factory=list)  # other members, first-seen order
    count: int = 0  # occurrences across canonical + aliases
    sources: List[LabelOccurrence] = Field(default_factory=list)
    confidence: float = Field(1.0, ge=0.0, le=1.0)
    last_updated: datetime = Field(default_factory=utc_now)
    user_override: Optional[bool] = None

    @model_validator(mode="after")
    def _drop_canonical_from_aliases(self) -> "TagVariant":
        seen = set()
        aliases = []
        for alias in self.aliases:
            if alias == self.canonical or alias in seen:
                continue
            seen.add(alias)
            aliases.append(alias)
        self.aliases = aliases
        return self

    @property
    def members(self) -> List[str]:
        """Canonical label followed by all aliases."""
        return [self.canonical] + self.aliases
