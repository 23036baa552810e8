"""
Retrieval — vector storage, similarity search, and context assembly.

Public surface
--------------
- :class:`RAGEngine` — index documents and answer queries.
- :class:`VectorStoreBase` — abstract backend.
- :class:`JsonVectorStore` — default JSON-file backend.
- :class:`StoredRecord`, :class:`QueryResult`, :class:`RAGResult` — data models.
"""

from pdf_rag.retrieval.base import VectorStoreBase
from pdf_rag.retrieval.models import (
    Chunk,
    DocumentSummary,
    IndexReport,
    QueryResult,
    RAGResult,
    RecordMetadata,
    StoredRecord,
)

__all__ = [
    "Chunk",
    "DocumentSummary",
    "IndexReport",
    "JsonVectorStore",
    "QueryResult",
    "RAGEngine",
    "RAGResult",
    "RecordMetadata",
    "StoredRecord",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import the engine and store; the engine depends on ingestion, which imports models."""
    if name == "RAGEngine":
        from pdf_rag.retrieval.engine import RAGEngine

        return RAGEngine
    if name == "JsonVectorStore":
        from pdf_rag.retrieval.json_store import JsonVectorStore

        return JsonVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
