"""
Retrieval module: shaping vector-engine results for the assistant.
"""

from .aggregator import MAX_RELATIVE_PATH_LENGTH, ChunkAggregator, convert_chunks_to_relevant_documents
from .models import Chunk, ProgrammingLanguage, RelevantDocument

__all__ = [
    "Chunk",
    "ChunkAggregator",
    "MAX_RELATIVE_PATH_LENGTH",
    "ProgrammingLanguage",
    "RelevantDocument",
    "convert_chunks_to_relevant_documents",
]
