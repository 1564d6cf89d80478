"""
Source Extraction Service

This module turns the identifying strings of an entity (filename, folder
path, user-chosen folder label, embedded metadata) into label occurrences
with provenance.

Usage:
    extractor = SourceExtractor()
    title, occurrences = extractor.split_title_and_tags("Trip ,, beach.jpg")
"""

import logging
import math
import re
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from tagengine.core.exceptions import ValueTooLongError
from tagengine.models.label_occurrence import LabelOccurrence, SourceKind, utc_now
from tagengine.models.metadata import MetadataRecord
from tagengine.services.tokenizer import TagTokenizer, default_tokenizer

logger = logging.getLogger(__name__)

FILE_EXTENSION = re.compile(r"\.[^/.]+$")
TAG_MARKER = ",,"


class SourceExtractor:
    """
    Service for extracting label occurrences from entity identifiers.

    Every raw value is checked against a length cap before it reaches the
    tokenizer; oversized values raise ValueTooLongError.
    """

    def __init__(
        self,
        tokenizer: Optional[TagTokenizer] = None,
        max_value_length: int = 256,
        title_max_words: int = 3,
    ):
        """Initialize source extractor.

        Args:
            tokenizer: Tokenizer used for all free text (default tokenizer if None)
            max_value_length: Longest raw value accepted
            title_max_words: Upper bound on tokens used for a derived title
        """
        self.tokenizer = tokenizer or default_tokenizer
        self.max_value_length = max_value_length
        self.title_max_words = title_max_words

    def split_title_and_tags(
        self,
        filename: str,
        entity_id: Optional[str] = None,
        extracted_at: Optional[datetime] = None,
    ) -> Tuple[str, List[LabelOccurrence]]:
        """
        Split a filename into a display title and filename tags.

        "Title ,, tag one ,, tag two.jpg" yields the title and the tag
        segments verbatim. Any other name is tokenized; the first few
        tokens form the title and the rest become tags.

        Args:
            filename: File name, with or without extension
            entity_id: Owning entity id
            extracted_at: Extraction timestamp (defaults to now)

        Returns:
            Tuple of (title, filename occurrences)

        Raises:
            ValueTooLongError: If the filename exceeds the length cap
        """
        self._check_length(filename, "filename")
        extracted_at = extracted_at or utc_now()
        name = FILE_EXTENSION.sub("", filename or "")

        if TAG_MARKER in name:
            parts = [part.strip() for part in name.split(TAG_MARKER)]
            title = parts[0] or name
            tags = [part for part in parts[1:] if part]
        else:
            tokens = self._tokens_with_brackets(name)
            if not tokens:
                return name, []
            title_size = min(self.title_max_words, math.ceil(len(tokens) / 3))
            title = " ".join(tokens[:title_size])
            tags = tokens[title_size:]

        occurrences = self._occurrences(SourceKind.FILENAME, tags, entity_id, extracted_at)
        logger.debug(f"Split '{filename}' into title '{title}' and {len(occurrences)} tags")
        return title, occurrences

    def extract_folder_labels(
        self,
        folder_path: Optional[str] = None,
        user_folder_name: Optional[str] = None,
        entity_id: Optional[str] = None,
        extracted_at: Optional[datetime] = None,
    ) -> List[LabelOccurrence]:
        """
        Extract occurrences from a folder path and a user-supplied folder label.

        Args:
            folder_path: Slash-separated folder path
            user_folder_name: Folder label typed by the user
            entity_id: Owning entity id
            extracted_at: Extraction timestamp (defaults to now)

        Returns:
            Folder occurrences followed by user_folder occurrences

        Raises:
            ValueTooLongError: If either value exceeds the length cap
        """
        self._check_length(folder_path, "folder_path")
        self._check_length(user_folder_name, "user_folder_name")
        extracted_at = extracted_at or utc_now()

        occurrences: List[LabelOccurrence] = []
        if folder_path:
            for segment in folder_path.split("/"):
                if not segment.strip():
                    continue
                occurrences.extend(
                    self._occurrences(
                        SourceKind.FOLDER,
                        self.tokenizer.tokenize(segment),
                        entity_id,
                        extracted_at,
                    )
                )

        if user_folder_name:
            occurrences.extend(
                self._occurrences(
                    SourceKind.USER_FOLDER,
                    self.tokenizer.tokenize(user_folder_name),
                    entity_id,
                    extracted_at,
                )
            )

        return occurrences

    def extract_metadata_labels(
        self,
        records: Optional[Iterable[MetadataRecord]],
        entity_id: Optional[str] = None,
        extracted_at: Optional[datetime] = None,
    ) -> List[LabelOccurrence]:
        """
        Extract occurrences from EXIF, IPTC and XMP records.

        Only the fields each namespace declares are read; list values are
        joined with spaces before tokenizing.

        Args:
            records: Metadata records of any namespace
            entity_id: Owning entity id
            extracted_at: Extraction timestamp (defaults to now)

        Returns:
            Metadata occurrences in record and field order

        Raises:
            ValueTooLongError: If a field value exceeds the length cap
        """
        extracted_at = extracted_at or utc_now()
        occurrences: List[LabelOccurrence] = []

        for record in records or []:
            for field_name, text in record.field_values():
                self._check_length(text, f"{record.namespace}.{field_name}")
                occurrences.extend(
                    self._occurrences(
                        SourceKind.METADATA,
                        self.tokenizer.tokenize(text),
                        entity_id,
                        extracted_at,
                    )
                )

        return occurrences

    def _tokens_with_brackets(self, name: str) -> List[str]:
        tokens = self.tokenizer.tokenize(name)
        seen = set(tokens)
        for group in self.tokenizer.extract_bracket_content(name):
            for token in group:
                if token not in seen:
                    seen.add(token)
                    tokens.append(token)
        return tokens

    def _check_length(self, value: Optional[str], field: str) -> None:
        if value and len(value) > self.max_value_length:
            logger.warning(
                f"Rejected {field} of {len(value)} characters (limit {self.max_value_length})"
            )
            raise ValueTooLongError(value, self.max_value_length, field)

    @staticmethod
    def _occurrences(
        kind: SourceKind,
        values: Iterable[str],
        entity_id: Optional[str],
        extracted_at: datetime,
    ) -> List[LabelOccurrence]:
        return [
            LabelOccurrence(kind=kind, value=value, entity_id=entity_id, extracted_at=extracted_at)
            for value in values
        ]
