"""Abstract base class for vector-store backends.

A backend owns the persisted record collection.  The retrieval engine
only talks to it through the methods below and never touches its
internals.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from pdf_rag.retrieval.models import QueryResult, StoredRecord


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface."""

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def initialize(self) -> None:
        """Load persisted state.  Must not raise on a missing or corrupt file."""
        ...

    @abstractmethod
    def upsert(self, records: Sequence[StoredRecord]) -> None:
        """Insert or replace *records* by id and persist the whole batch once."""
        ...

    @abstractmethod
    def search(self, query_vector: Sequence[float], k: int = 5) -> list[QueryResult]:
        """Return the top-*k* records by cosine similarity, highest first.

        Ties keep storage order.  An empty collection yields ``[]``.
        """
        ...

    @abstractmethod
    def list_by_source(self) -> dict[str, int]:
        """Return the number of stored chunks per source document."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every record and persist the empty collection."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored records."""
        ...

    # -- optional overrides ---------------------------------------------------

    def health_check(self) -> bool:
        """Return ``True`` when the backend is ready to serve queries."""
        return True
