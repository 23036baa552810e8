"""Domain models for chunks, stored records and query results."""

from __future__ import annotations

import hashlib

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Chunk(BaseModel):
    """A contiguous span of cleaned text taken from one document page.

    Attributes
    ----------
    text:
        Whitespace-normalised passage text (never empty).
    source:
        File name of the originating document.
    page:
        1-based page number within the document.
    chunk_index:
        Position of the chunk within the document, continuous across pages.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    source: str
    page: int = Field(ge=1)
    chunk_index: int = Field(ge=0)

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("chunk text must not be empty")
        return value

    def record_id(self) -> str:
        """Return the deterministic store id for this chunk position."""
        return record_id(self.source, self.page, self.chunk_index)


def record_id(source: str, page: int, chunk_index: int) -> str:
    """MD5 digest of ``source-page-chunk_index``.

    Re-indexing the same document position yields the same id, so the
    store overwrites instead of duplicating.
    """
    key = f"{source}-{page}-{chunk_index}"
    return hashlib.md5(key.encode("utf-8")).hexdigest()


class RecordMetadata(BaseModel):
    """Metadata persisted alongside each vector."""

    source: str
    page: int | None = None
    timestamp: str


class StoredRecord(BaseModel):
    """The persisted unit of retrieval."""

    id: str
    text: str
    vector: list[float]
    metadata: RecordMetadata


class QueryResult(BaseModel):
    """A raw store hit with its cosine similarity."""

    id: str
    text: str
    metadata: RecordMetadata
    similarity: float


class RAGResult(BaseModel):
    """Caller-facing retrieval result."""

    content: str
    source: str
    page: int
    similarity: float

    def __str__(self) -> str:  # noqa: D105
        return f"[{self.source} - Page {self.page}] {self.content[:120]}…"


class DocumentSummary(BaseModel):
    """Number of indexed chunks for one source document."""

    source: str
    count: int


class IndexReport(BaseModel):
    """Outcome of one :meth:`RAGEngine.index` call."""

    files: int
    chunks: int
    total_records: int
