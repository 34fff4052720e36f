"""
Chunk aggregation, from retrieval results to per-file documents.

The vector engine answers a query with fragments of many files, in
relevance order. The assistant wants one document per file, with the
fragments of that file stitched back together in source order.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from ..indexer.languages import RECOGNIZED_LANGUAGES
from .models import Chunk, ProgrammingLanguage, RelevantDocument

__all__ = [
    "MAX_RELATIVE_PATH_LENGTH",
    "ChunkAggregator",
    "convert_chunks_to_relevant_documents",
]

# Longest relativeFilePath accepted downstream
MAX_RELATIVE_PATH_LENGTH = 4000


class ChunkAggregator:
    """Groups chunks by file and builds one RelevantDocument per file.

    Rules:
    - File key: ``relative_path`` when present and non-empty, else ``file_path``
    - Documents come out in the first-seen order of their file key
    - Within a file, chunks are sorted by ``start_line``; chunks without
      one go after those that have one and keep their input order
    - ``text`` is the contents joined by newlines, left out when every
      content is empty
    - ``relative_file_path`` is the first chunk's ``relative_path``,
      truncated to MAX_RELATIVE_PATH_LENGTH characters
    - ``programming_language`` is kept only for recognized languages

    The aggregator holds no mutable state and never raises on malformed
    chunks: missing values only drop the corresponding field.
    """

    def __init__(
        self,
        recognized_languages: Iterable[str] = RECOGNIZED_LANGUAGES,
        max_path_length: int = MAX_RELATIVE_PATH_LENGTH,
    ) -> None:
        self.recognized_languages = frozenset(recognized_languages)
        self.max_path_length = max_path_length

    def aggregate(self, chunks: Iterable[Chunk | Mapping[str, Any]]) -> list[RelevantDocument]:
        """Merge chunks into per-file documents.

        Args:
            chunks: Chunks, or raw engine payloads, in retrieval order

        Returns:
            One RelevantDocument per distinct file key, in first-seen order.
        """
        groups: dict[str, list[Chunk]] = {}
        for item in chunks:
            chunk = item if isinstance(item, Chunk) else Chunk.from_dict(item)
            groups.setdefault(_file_key(chunk), []).append(chunk)

        return [self._build_document(group) for group in groups.values()]

    def _build_document(self, group: list[Chunk]) -> RelevantDocument:
        first = group[0]
        ordered = sorted(group, key=_start_line_key)

        text = None
        if any(chunk.content for chunk in ordered):
            text = "\n".join(chunk.content or "" for chunk in ordered)

        relative_file_path = None
        if first.relative_path:
            relative_file_path = first.relative_path[: self.max_path_length]

        language = None
        if first.programming_language in self.recognized_languages:
            language = ProgrammingLanguage(language_name=first.programming_language)

        return RelevantDocument(
            relative_file_path=relative_file_path,
            programming_language=language,
            text=text,
        )


def _file_key(chunk: Chunk) -> str:
    return chunk.relative_path or chunk.file_path


def _start_line_key(chunk: Chunk) -> tuple[bool, int]:
    # Chunks without a start line sort last; sorted() keeps ties in input order
    return (chunk.start_line is None, chunk.start_line or 0)


_default_aggregator = ChunkAggregator()


def convert_chunks_to_relevant_documents(
    chunks: Iterable[Chunk | Mapping[str, Any]],
) -> list[RelevantDocument]:
    """Aggregate chunks with the default language whitelist."""
    return _default_aggregator.aggregate(chunks)
