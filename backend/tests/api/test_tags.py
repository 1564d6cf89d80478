"""Tests for the HTTP endpoints."""
from fastapi.testclient import TestClient

from tagengine.api.deps import get_service
from tagengine.core.config import settings
from tagengine.main import app
from tagengine.services import tag_service
from tagengine.services.tag_service import TagProcessingService


def _occurrences(*pairs):
    return [
        {"kind": "filename", "value": value}
        for value, repeat in pairs
        for _ in range(repeat)
    ]


def test_health_check(client: TestClient):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_process_labels(client: TestClient):
    """Test title and tag derivation for one entity."""
    response = client.post(
        "/api/v1/labels/process",
        json={
            "filename": "Trip Report ,, beach ,, sunset.jpg",
            "entity_id": "img-1",
            "metadata": [{"namespace": "iptc", "keywords": ["family"], "camera": "ignored"}],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Trip Report"
    assert set(data["canonical_tags"]) == {"beach", "sunset", "family"}
    assert all(o["entity_id"] == "img-1" for o in data["raw_occurrences"])


def test_process_labels_value_too_long(client: TestClient):
    """Test that oversized values are rejected with 422."""
    response = client.post("/api/v1/labels/process", json={"filename": "a" * 300 + ".jpg"})

    assert response.status_code == 422
    assert "limit 256" in response.json()["detail"]


def test_process_labels_unknown_namespace(client: TestClient):
    """Test request validation of metadata records."""
    response = client.post(
        "/api/v1/labels/process",
        json={"filename": "beach.jpg", "metadata": [{"namespace": "id3"}]},
    )

    assert response.status_code == 422


def test_group_then_search(client: TestClient):
    """Test that grouping rebuilds the index used by search and listing."""
    response = client.post(
        "/api/v1/tags/group",
        json={
            "occurrences": _occurrences(
                ("dresses", 3), ("dress", 5), ("dresed", 1), ("latex", 2), ("latx", 1)
            )
        },
    )
    assert response.status_code == 200
    assert {v["canonical"] for v in response.json()} == {"dress", "latex"}

    response = client.get("/api/v1/tags/search", params={"q": "latx"})
    assert response.status_code == 200
    assert response.json()[0]["canonical"] == "latex"

    response = client.get("/api/v1/tags/search", params={"q": "dresses"})
    assert response.json()[0]["canonical"] == "dress"

    response = client.get("/api/v1/tags")
    assert response.json() == ["dress", "latex"]


def test_list_tags_empty(client: TestClient):
    """Test listing before any vocabulary is built."""
    response = client.get("/api/v1/tags")
    assert response.status_code == 200
    assert response.json() == []


def test_score(client: TestClient):
    """Test relevance scoring endpoint."""
    response = client.post(
        "/api/v1/tags/score",
        json={
            "entity": {"id": "1", "filename": "beach.jpg", "title": "Beach", "tags": ["beach"]},
            "query": "beach",
        },
    )

    assert response.status_code == 200
    assert response.json() == {"score": 280}


def test_filter_entities(client: TestClient):
    """Test filtering by query and selected tags."""
    entities = [
        {"id": "a", "filename": "a.jpg", "title": "Beach day", "tags": ["beach"]},
        {"id": "b", "filename": "b.jpg", "title": "Studio", "tags": ["black dress"]},
    ]

    response = client.post(
        "/api/v1/entities/filter", json={"entities": entities, "selected_tags": ["dress"]}
    )

    assert response.status_code == 200
    assert [e["id"] for e in response.json()] == ["b"]


def test_refresh_entities(client: TestClient):
    """Test tag refresh across entities and the resulting index."""
    entities = [
        {
            "id": "e1",
            "filename": "one.jpg",
            "raw_occurrences": [
                {"kind": "filename", "value": "dresses", "entity_id": "e1"},
                {"kind": "filename", "value": "dress", "entity_id": "e1"},
            ],
        },
        {
            "id": "e2",
            "filename": "two.jpg",
            "raw_occurrences": [{"kind": "user_folder", "value": "latx", "entity_id": "e2"}],
        },
    ]

    response = client.post("/api/v1/entities/refresh", json={"entities": entities})

    assert response.status_code == 200
    data = response.json()
    assert {v["canonical"] for v in data["variants"]} == {"dress", "latex"}
    assert data["entities"][0]["tags"] == ["dress"]
    assert data["entities"][1]["tags"] == ["latex"]

    response = client.get("/api/v1/tags/search", params={"q": "latex"})
    assert response.json()[0]["canonical"] == "latex"


def test_broken_pattern_table(client: TestClient, monkeypatch, tmp_path):
    """Test that an unreadable pattern file surfaces as a server error."""
    monkeypatch.setattr(settings, "TAG_PATTERNS_PATH", str(tmp_path / "missing.json"))
    monkeypatch.setattr(tag_service, "_default_service", None)

    response = client.post("/api/v1/labels/process", json={"filename": "beach.jpg"})

    assert response.status_code == 500


def test_group_value_too_long(client: TestClient):
    """Test that oversized occurrence values are rejected with 422."""
    response = client.post(
        "/api/v1/tags/group", json={"occurrences": _occurrences(("x" * 300, 1), ("beach", 1))}
    )

    assert response.status_code == 422
    assert "limit 256" in response.json()["detail"]
    assert client.get("/api/v1/tags").json() == []


def test_refresh_value_too_long(client: TestClient):
    """Test that refresh rejects oversized raw values."""
    entities = [
        {"id": "e1", "filename": "one.jpg", "raw_occurrences": _occurrences(("x" * 300, 1))}
    ]

    response = client.post("/api/v1/entities/refresh", json={"entities": entities})

    assert response.status_code == 422


def test_score_uses_configured_similarity(client: TestClient):
    """Test that scoring follows the service's similarity threshold."""
    app.dependency_overrides[get_service] = lambda: TagProcessingService(similarity_threshold=0.9)
    try:
        response = client.post(
            "/api/v1/tags/score",
            json={
                "entity": {"id": "1", "filename": "x.jpg", "title": "Trip", "tags": ["latex"]},
                "query": "latx",
            },
        )
    finally:
        app.dependency_overrides.clear()

    assert response.json() == {"score": 0}
