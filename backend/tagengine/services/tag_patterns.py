"""Curated canonical tag patterns.

A pattern table is an ordered tuple of ``(canonical, (pattern, ...))``
pairs. Order matters: when several entries match a cluster, the earliest
one wins, so tables are always passed explicitly to the grouping service
rather than read from shared state.
"""
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

from tagengine.core.exceptions import PatternTableError

logger = logging.getLogger(__name__)

PatternEntry = Tuple[str, Tuple[str, ...]]
PatternTable = Tuple[PatternEntry, ...]

DEFAULT_TAG_PATTERNS: PatternTable = (
    ("forced feminization", ("forced fem", "forcedfem", "forced feminisation", "feminization")),
    ("crossdressing", ("cross dressing", "crossdress", "cross dress", "crossdresser")),
    ("latex", ("latx", "laytex", "latexx")),
    ("dominant", ("dominate", "domination", "dominance")),
    ("petplay", ("pet play", "puppy play")),
    ("sissy", ("sisy", "sissie")),
    ("transformation", ("transform", "transformed", "tranformation")),
    ("hypno", ("hypnosis", "hypnotic", "hypnotize")),
    ("bdsm", ("bdsn", "bsdm")),
    ("submission", ("submissive", "submision")),
    ("makeup", ("make up", "makup")),
    ("heels", ("high heel", "stiletto")),
    ("dress", ("dres", "dresse")),
    ("lingerie", ("lingere", "lingery", "lingeri")),
    ("training", ("trainning", "trained")),
    ("humiliation", ("humilation", "humiliate", "humiliated")),
    ("bondage", ("bondge",)),
    ("roleplay", ("role play", "rollplay")),
)


def build_pattern_table(entries: Iterable[Tuple[str, Sequence[str]]]) -> PatternTable:
    """Normalize (canonical, patterns) pairs into an immutable pattern table.

    Labels are lowercased and stripped; blank entries are dropped and
    the first occurrence of a duplicated canonical wins.

    Args:
        entries: Iterable of (canonical, patterns) pairs, in priority order

    Returns:
        Ordered, immutable pattern table
    """
    table = []
    seen = set()
    for canonical, patterns in entries:
        label = (canonical or "").strip().lower()
        if not label or label in seen:
            continue
        seen.add(label)
        cleaned = tuple(
            dict.fromkeys(p.strip().lower() for p in patterns if p and p.strip())
        )
        table.append((label, cleaned))
    return tuple(table)


def load_pattern_table(path: Union[str, Path]) -> PatternTable:
    """Load a pattern table from a JSON file.

    The file holds an ordered list of objects:
    ``[{"canonical": "latex", "patterns": ["latx", "laytex"]}, ...]``.

    Args:
        path: JSON file path

    Returns:
        Pattern table in file order

    Raises:
        PatternTableError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data: Any = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise PatternTableError(f"Cannot read pattern table {path}: {e}") from e

    if not isinstance(data, list):
        raise PatternTableError(f"Pattern table {path} must be a JSON list")

    entries = []
    for item in data:
        if not isinstance(item, dict) or "canonical" not in item:
            raise PatternTableError(f"Invalid pattern entry in {path}: {item!r}")
        patterns = item.get("patterns") or []
        if not isinstance(patterns, list):
            raise PatternTableError(f"'patterns' must be a list for '{item['canonical']}'")
        entries.append((str(item["canonical"]), [str(p) for p in patterns]))

    table = build_pattern_table(entries)
    logger.info(f"Loaded {len(table)} curated tag patterns from {path}")
    return table


def resolve_pattern_table(path: Optional[Union[str, Path]] = None) -> PatternTable:
    """Return the table at path, or the built-in defaults when no path is set."""
    if path:
        return load_pattern_table(path)
    return DEFAULT_TAG_PATTERNS
