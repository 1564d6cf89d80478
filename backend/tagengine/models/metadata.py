"""Embedded image metadata models.

Each namespace is its own model with a fixed list of fields the metadata
extractor reads. Unknown keys in incoming payloads are ignored, so a
record built from an arbitrary EXIF/IPTC/XMP bag only exposes the fields
below.
"""
from typing import Annotated, ClassVar, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

FieldValue = Optional[Union[str, List[str]]]


class _MetadataRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    FIELDS: ClassVar[Tuple[str, ...]] = ()

    def field_values(self) -> List[Tuple[str, str]]:
        """Return (field, text) pairs for every populated field, list values space-joined."""
        values = []
        for name in self.FIELDS:
            raw = getattr(self, name)
            if raw is None:
                continue
            if isinstance(raw, list):
                raw = " ".join(part for part in raw if part)
            if raw.strip():
                values.append((name, raw))
        return values


class ExifMetadata(_MetadataRecord):
    """EXIF fields carrying free text."""

    FIELDS: ClassVar[Tuple[str, ...]] = (
        "image_description",
        "user_comment",
        "artist",
        "xp_keywords",
        "xp_subject",
    )

    namespace: Literal["exif"] = "exif"
    image_description: FieldValue = None
    user_comment: FieldValue = None
    artist: FieldValue = None
    xp_keywords: FieldValue = None
    xp_subject: FieldValue = None


class IptcMetadata(_MetadataRecord):
    """IPTC core fields."""

    FIELDS: ClassVar[Tuple[str, ...]] = (
        "keywords",
        "caption",
        "headline",
        "category",
        "supplemental_categories",
    )

    namespace: Literal["iptc"] = "iptc"
    keywords: FieldValue = None
    caption: FieldValue = None
    headline: FieldValue = None
    category: FieldValue = None
    supplemental_categories: FieldValue = None


class XmpMetadata(_MetadataRecord):
    """XMP (Dublin Core / Lightroom) fields."""

    FIELDS: ClassVar[Tuple[str, ...]] = (
        "subject",
        "title",
        "description",
        "label",
        "hierarchical_subject",
    )

    namespace: Literal["xmp"] = "xmp"
    subject: FieldValue = None
    title: FieldValue = None
    description: FieldValue = None
    label: FieldValue = None
    hierarchical_subject: FieldValue = None


MetadataRecord = Annotated[
    Union[ExifMetadata, IptcMetadata, XmpMetadata],
    Field(discriminator="namespace"),
]
