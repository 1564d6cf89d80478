"""Engine data models."""
from tagengine.models.entity import TaggedEntity
from tagengine.models.label_occurrence import LabelOccurrence, SourceKind, utc_now
from tagengine.models.metadata import (
    ExifMetadata,
    IptcMetadata,
    MetadataRecord,
    XmpMetadata,
)
from tagengine.models.tag_variant import TagVariant

__all__ = [
    "LabelOccurrence",
    "SourceKind",
    "TagVariant",
    "TaggedEntity",
    "ExifMetadata",
    "IptcMetadata",
    "XmpMetadata",
    "MetadataRecord",
    "utc_now",
]
