"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from pdf_rag.ingestion.chunker import Chunker
from pdf_rag.ingestion.embedder import EmbeddingProvider, EmbeddingService
from pdf_rag.ingestion.loader import ExtractedDocument
from pdf_rag.retrieval.engine import RAGEngine
from pdf_rag.retrieval.json_store import JsonVectorStore

VOCABULARY = ("kubernetes", "python", "pdf", "cat")


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


class FakeEmbeddingProvider(EmbeddingProvider):
    """Keyword-count embeddings: one dimension per vocabulary word plus a bias.

    Records every batch it receives.  ``fail_on_call`` (1-based) makes
    that call raise ``ConnectionError``.
    """

    def __init__(self, fail_on_call: int | None = None, model: str = "fake-embed") -> None:
        super().__init__("fake", model)
        self.calls: list[list[str]] = []
        self.fail_on_call = fail_on_call

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise ConnectionError("connection refused")
        return [self.vector_for(text) for text in texts]

    @staticmethod
    def vector_for(text: str) -> list[float]:
        lowered = text.lower()
        return [float(lowered.count(word)) for word in VOCABULARY] + [0.1]


class FakeExtractor:
    """Maps file paths to canned text; unknown paths raise like the real loader."""

    def __init__(self, documents: dict[str, str]) -> None:
        self.documents = documents
        self.calls: list[str] = []

    def __call__(self, path: str | Path) -> ExtractedDocument:
        from pdf_rag.errors import ExtractionFailure

        key = str(path)
        self.calls.append(key)
        if key not in self.documents:
            raise ExtractionFailure(key, "file not found")
        return ExtractedDocument(source=Path(key).name, text=self.documents[key])


@pytest.fixture()
def fake_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture()
def store(tmp_path: Path) -> JsonVectorStore:
    vector_store = JsonVectorStore(tmp_path)
    vector_store.initialize()
    return vector_store


@pytest.fixture()
def make_engine(
    store: JsonVectorStore, fake_provider: FakeEmbeddingProvider
) -> Callable[..., RAGEngine]:
    """Factory building an engine over the shared store and provider."""

    def _make(documents: dict[str, str] | None = None, **chunker_kwargs: int) -> RAGEngine:
        service = EmbeddingService(fake_provider, batch_size=100, batch_delay=0)
        return RAGEngine(
            store,
            service,
            Chunker(**chunker_kwargs),
            extractor=FakeExtractor(documents or {}),
            index_batch_size=10,
        )

    return _make
