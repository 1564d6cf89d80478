"""Tests for curated pattern tables."""
import json

import pytest

from tagengine.core.exceptions import PatternTableError
from tagengine.services.tag_patterns import (
    DEFAULT_TAG_PATTERNS,
    build_pattern_table,
    load_pattern_table,
    resolve_pattern_table,
)


def test_build_pattern_table_normalizes() -> None:
    """Test lowercasing, blank removal and first-wins deduplication."""
    table = build_pattern_table(
        [("Latex", ["LATX", "latx", " "]), ("latex", ["laytex"]), ("", ["anything"])]
    )

    assert table == (("latex", ("latx",)),)


def test_default_table_is_immutable() -> None:
    """Test the built-in table shape."""
    assert isinstance(DEFAULT_TAG_PATTERNS, tuple)
    assert DEFAULT_TAG_PATTERNS[0][0] == "forced feminization"
    assert all(isinstance(patterns, tuple) for _, patterns in DEFAULT_TAG_PATTERNS)


def test_load_pattern_table(tmp_path) -> None:
    """Test loading entries in file order."""
    path = tmp_path / "patterns.json"
    path.write_text(
        json.dumps(
            [
                {"canonical": "roleplay", "patterns": ["role play"]},
                {"canonical": "latex"},
            ]
        )
    )

    assert load_pattern_table(path) == (("roleplay", ("role play",)), ("latex", ()))


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        '{"canonical": "latex"}',
        '[{"patterns": ["latx"]}]',
        '[{"canonical": "latex", "patterns": "latx"}]',
    ],
)
def test_load_pattern_table_rejects_malformed(tmp_path, content: str) -> None:
    """Test that malformed files raise PatternTableError."""
    path = tmp_path / "patterns.json"
    path.write_text(content)

    with pytest.raises(PatternTableError):
        load_pattern_table(path)


def test_missing_file(tmp_path) -> None:
    """Test that a missing file raises PatternTableError."""
    with pytest.raises(PatternTableError):
        load_pattern_table(tmp_path / "missing.json")


def test_resolve_defaults() -> None:
    """Test fallback to the built-in table."""
    assert resolve_pattern_table() is DEFAULT_TAG_PATTERNS
    assert resolve_pattern_table("") is DEFAULT_TAG_PATTERNS
