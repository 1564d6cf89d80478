"""Tokenizer turning raw label strings into normalized word tokens."""
import re
from typing import FrozenSet, Iterable, List, Optional, Tuple

DELIMITERS = re.compile(r"[\s_\-,.()\[\]{}|;:!?\"'`@#$%^&*+=<>/\\~]+")
CAMEL_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z])")
TRAILING_DIGITS = re.compile(r"\d+$")
NON_ALNUM = re.compile(r"[^a-z0-9]")

BRACKET_PATTERNS = (
    re.compile(r"\(([^)]*)\)"),
    re.compile(r"\[([^\]]*)\]"),
    re.compile(r"\{([^}]*)\}"),
)

IMAGE_EXTENSIONS: FrozenSet[str] = frozenset(
    {"jpg", "jpeg", "png", "webp", "gif", "bmp", "tiff", "svg"}
)

# Ordered: first matching suffix wins
PLURAL_RULES: Tuple[Tuple[str, str], ...] = (
    ("ies", "y"),
    ("ves", "f"),
    ("ses", "s"),
    ("es", ""),
    ("s", ""),
)

STOP_WORDS: FrozenSet[str] = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "but", "by", "for",
        "from", "has", "have", "he", "her", "his", "in", "into", "is", "it",
        "its", "me", "my", "of", "on", "or", "our", "she", "so", "than",
        "that", "the", "their", "them", "then", "there", "these", "they",
        "this", "those", "to", "too", "up", "us", "was", "we", "were",
        "what", "when", "where", "which", "who", "why", "will", "with",
        "you", "your",
        # filename noise
        "img", "copy", "untitled", "dsc", "final", "edit", "version",
    }
)


def singularize(word: str) -> str:
    """Strip a plural suffix using the ordered rule table.

    A rule only applies when the word is longer than its suffix. Words
    ending in "ss" keep their final "s" (dress, glass).
    """
    for suffix, replacement in PLURAL_RULES:
        if not word.endswith(suffix) or len(word) <= len(suffix):
            continue
        if suffix == "s" and word.endswith("ss"):
            return word
        return word[: -len(suffix)] + replacement
    return word


class TagTokenizer:
    """Split raw strings into an ordered, deduplicated list of tag tokens."""

    def __init__(
        self,
        min_length: int = 2,
        stop_words: Optional[Iterable[str]] = None,
    ):
        """Initialize tokenizer.

        Args:
            min_length: Shortest token kept after normalization
            stop_words: Words to discard (defaults to STOP_WORDS)
        """
        self.min_length = min_length
        self.stop_words = frozenset(stop_words) if stop_words is not None else STOP_WORDS

    def tokenize(self, text: Optional[str]) -> List[str]:
        """Tokenize text into normalized tokens in emission order.

        Args:
            text: Raw label string (filename, folder name, metadata value)

        Returns:
            List of unique tokens
        """
        if not text:
            return []

        tokens: List[str] = []
        seen = set()
        for piece in DELIMITERS.split(text):
            if not piece:
                continue
            words = CAMEL_BOUNDARY.split(piece) if len(piece) > 1 else [piece]
            for word in words:
                token = self._normalize_word(word)
                if token and token not in seen:
                    seen.add(token)
                    tokens.append(token)
        return tokens

    def extract_bracket_content(self, text: Optional[str]) -> List[List[str]]:
        """Tokenize the interior of every (), [] and {} span.

        Each bracket type is scanned in its own pass, so nested or
        overlapping spans may contribute the same words more than once.

        Args:
            text: Raw label string

        Returns:
            One token list per non-empty bracket interior
        """
        if not text:
            return []

        groups: List[List[str]] = []
        for pattern in BRACKET_PATTERNS:
            for match in pattern.finditer(text):
                tokens = self.tokenize(match.group(1))
                if tokens:
                    groups.append(tokens)
        return groups

    def _normalize_word(self, word: str) -> Optional[str]:
        cleaned = TRAILING_DIGITS.sub("", word.lower())
        cleaned = NON_ALNUM.sub("", cleaned)
        if cleaned in self.stop_words:
            return None

        token = singularize(cleaned)
        if (
            len(token) < self.min_length
            or token in self.stop_words
            or token.isdigit()
            or token in IMAGE_EXTENSIONS
            or cleaned in IMAGE_EXTENSIONS
        ):
            return None
        return token


default_tokenizer = TagTokenizer()


def tokenize(text: Optional[str]) -> List[str]:
    """Tokenize with the default tokenizer."""
    return default_tokenizer.tokenize(text)


def extract_bracket_content(text: Optional[str]) -> List[List[str]]:
    """Bracket scan with the default tokenizer."""
    return default_tokenizer.extract_bracket_content(text)
