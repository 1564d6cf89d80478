"""Services package for tag normalization, grouping and search."""

from tagengine.services.search_index import TagSearchIndex
from tagengine.services.similarity_service import SimilarityService
from tagengine.services.source_extraction import SourceExtractor
from tagengine.services.tag_consolidation import TagGroupingService
from tagengine.services.tag_service import ProcessedLabels, TagProcessingService
from tagengine.services.tokenizer import TagTokenizer

__all__ = [
    "ProcessedLabels",
    "SimilarityService",
    "SourceExtractor",
    "TagGroupingService",
    "TagProcessingService",
    "TagSearchIndex",
    "TagTokenizer",
]
