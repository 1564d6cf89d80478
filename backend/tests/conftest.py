"""Pytest configuration and fixtures."""
from datetime import datetime, timezone
from typing import Callable, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

from tagengine.main import app
from tagengine.models.label_occurrence import LabelOccurrence, SourceKind
from tagengine.services.search_index import TagSearchIndex
from tagengine.services.tag_consolidation import TagGroupingService
from tagengine.services.tag_service import TagProcessingService

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed timestamp for deterministic variants."""
    return FIXED_NOW


@pytest.fixture
def make_occurrences(now: datetime) -> Callable[..., List[LabelOccurrence]]:
    """Build occurrences from (value, repeat) pairs."""

    def _make(
        *pairs,
        kind: SourceKind = SourceKind.FILENAME,
        entity_id: Optional[str] = None,
    ) -> List[LabelOccurrence]:
        occurrences = []
        for value, repeat in pairs:
            occurrences.extend(
                LabelOccurrence(kind=kind, value=value, entity_id=entity_id, extracted_at=now)
                for _ in range(repeat)
            )
        return occurrences

    return _make


@pytest.fixture
def grouping_service() -> TagGroupingService:
    """Grouping service with the built-in pattern table."""
    return TagGroupingService()


@pytest.fixture
def plain_grouping_service() -> TagGroupingService:
    """Grouping service without curated patterns."""
    return TagGroupingService(patterns=())


@pytest.fixture
def tag_service() -> TagProcessingService:
    """Tag processing service with default settings."""
    return TagProcessingService()


@pytest.fixture(scope="function")
def client() -> Generator:
    """Create a test client with an empty search index."""
    app.state.search_index = TagSearchIndex.from_settings()
    with TestClient(app) as test_client:
        yield test_client
    app.state.search_index = TagSearchIndex.from_settings()
