"""Exception hierarchy shared by ingestion, embedding and storage."""

from __future__ import annotations


class RAGError(Exception):
    """Base class for every error raised by :mod:`pdf_rag`."""


class ExtractionFailure(RAGError):
    """A document could not be read or converted to text."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to extract text from {path}: {reason}")
        self.path = path
        self.reason = reason


class NoContentExtracted(RAGError):
    """Indexing produced zero usable chunks across all inputs."""

    def __init__(self, file_count: int) -> None:
        super().__init__(f"No content extracted from {file_count} file(s)")
        self.file_count = file_count


class EmbeddingProviderFailure(RAGError):
    """The embedding provider failed while processing a batch.

    The original transport error is available as ``__cause__``.
    """

    def __init__(
        self,
        provider: str,
        model: str,
        batch: int,
        total_batches: int,
        reason: str,
    ) -> None:
        super().__init__(
            f"{provider} embedding error (model={model!r}, batch {batch}/{total_batches}): {reason}"
        )
        self.provider = provider
        self.model = model
        self.batch = batch
        self.total_batches = total_batches
        self.reason = reason


class DimensionMismatch(RAGError, ValueError):
    """Two vectors that must share a dimensionality do not."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Vectors must have the same length (expected {expected}, got {actual})")
        self.expected = expected
        self.actual = actual


class StorageCorrupt(RAGError):
    """The durable store file exists but cannot be loaded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Vector store file {path} is unreadable: {reason}")
        self.path = path
        self.reason = reason
