"""
Data structures exchanged with the vector engine and the assistant.

``Chunk`` is what the vector engine returns for a query; ``RelevantDocument``
is the per-file shape handed back to the protocol layer.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

__all__ = [
    "Chunk",
    "ProgrammingLanguage",
    "RelevantDocument",
]


@dataclass
class Chunk:
    """A retrieved fragment of a source file.

    ``vector`` is the engine's embedding; nothing in this package reads it.
    """

    file_path: str
    content: str = ""
    programming_language: str = ""
    relative_path: str | None = None
    start_line: int | None = None
    id: str = ""
    index: int = 0
    vector: list[float] = field(default_factory=list, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Chunk":
        """Build a Chunk from an engine payload.

        Accepts the engine's camelCase keys (``filePath``, ``relativePath``,
        ``startLine``...) as well as the snake_case field names. Missing or
        malformed optional values become None.
        """

        def pick(*keys: str) -> Any:
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        start_line = pick("startLine", "start_line")
        try:
            start_line = int(start_line) if start_line is not None else None
        except (TypeError, ValueError):
            start_line = None

        index = pick("index")
        try:
            index = int(index) if index is not None else 0
        except (TypeError, ValueError):
            index = 0

        relative_path = pick("relativePath", "relative_path")
        return cls(
            file_path=str(pick("filePath", "file_path") or ""),
            content=str(pick("content") or ""),
            programming_language=str(pick("programmingLanguage", "programming_language") or ""),
            relative_path=str(relative_path) if relative_path is not None else None,
            start_line=start_line,
            id=str(pick("id") or ""),
            index=index,
            vector=list(pick("vec", "vector") or []),
        )


@dataclass(frozen=True)
class ProgrammingLanguage:
    language_name: str


@dataclass
class RelevantDocument:
    """Aggregated content of one file.

    Every field is optional. An absent field is None here and is left out
    of ``to_dict()``; it is never emitted as an empty value.
    """

    relative_file_path: str | None = None
    programming_language: ProgrammingLanguage | None = None
    text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase shape expected by the protocol layer."""
        result: dict[str, Any] = {}
        if self.relative_file_path is not None:
            result["relativeFilePath"] = self.relative_file_path
        if self.programming_language is not None:
            result["programmingLanguage"] = {
                "languageName": self.programming_language.language_name,
            }
        if self.text is not None:
            result["text"] = self.text
        return result
