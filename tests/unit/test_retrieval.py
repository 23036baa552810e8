"""Unit tests for the retrieval engine — indexing, querying and formatting."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from conftest import FakeEmbeddingProvider, FakeExtractor

from pdf_rag.errors import EmbeddingProviderFailure, ExtractionFailure, NoContentExtracted
from pdf_rag.ingestion.chunker import Chunker
from pdf_rag.ingestion.embedder import EmbeddingService
from pdf_rag.retrieval.engine import NO_CONTEXT_MESSAGE, RAGEngine, format_search_results
from pdf_rag.retrieval.json_store import JsonVectorStore
from pdf_rag.retrieval.models import RAGResult, record_id

EngineFactory = Callable[..., RAGEngine]

DOCUMENTS = {
    "/docs/k8s.pdf": "Kubernetes schedules pods. Kubernetes restarts failed pods.",
    "/docs/python.pdf": "Python is a programming language.\fPython has a large standard library.",
    "/docs/cats.txt": "The cat sat on the mat. A cat likes naps.",
}


@pytest.fixture()
def engine(make_engine: EngineFactory) -> RAGEngine:
    return make_engine(DOCUMENTS)


# ── index ──────────────────────────────────────────────────────────────


class TestIndex:
    def test_index_stores_one_record_per_chunk(self, engine: RAGEngine) -> None:
        report = engine.index(list(DOCUMENTS))
        # python.pdf has two pages; every document is shorter than one chunk.
        assert report.files == 3
        assert report.chunks == 4
        assert report.total_records == 4
        assert engine.count() == 4

    def test_reindex_is_idempotent(self, engine: RAGEngine) -> None:
        engine.index(list(DOCUMENTS))
        engine.index(list(DOCUMENTS))
        assert engine.count() == 4

    def test_ids_derive_from_source_page_and_chunk_index(
        self, engine: RAGEngine, store: JsonVectorStore
    ) -> None:
        engine.index(["/docs/python.pdf"])
        hits = store.search(FakeEmbeddingProvider.vector_for("python"), k=10)
        assert {hit.id for hit in hits} == {
            record_id("python.pdf", 1, 0),
            record_id("python.pdf", 2, 1),
        }
        assert {hit.metadata.page for hit in hits} == {1, 2}

    def test_records_share_one_timestamp(self, engine: RAGEngine, store: JsonVectorStore) -> None:
        engine.index(list(DOCUMENTS))
        hits = store.search(FakeEmbeddingProvider.vector_for("cat"), k=10)
        assert len({hit.metadata.timestamp for hit in hits}) == 1

    def test_progress_per_file(self, engine: RAGEngine) -> None:
        progress: list[tuple[int, int]] = []
        engine.index(list(DOCUMENTS), lambda done, total: progress.append((done, total)))
        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_uses_index_batch_size(
        self, make_engine: EngineFactory, fake_provider: FakeEmbeddingProvider
    ) -> None:
        engine = make_engine({"/docs/long.txt": "python " * 400}, chunk_size=50, chunk_overlap=0)
        engine.index(["/docs/long.txt"])
        assert max(len(call) for call in fake_provider.calls) == 10
        assert sum(len(call) for call in fake_provider.calls) == engine.count()

    def test_no_content_raises(
        self, make_engine: EngineFactory, fake_provider: FakeEmbeddingProvider
    ) -> None:
        engine = make_engine({"/docs/blank.pdf": "  \n\n\n  \f "})
        with pytest.raises(NoContentExtracted):
            engine.index(["/docs/blank.pdf"])
        assert fake_provider.calls == []

    def test_no_files_raises(self, engine: RAGEngine) -> None:
        with pytest.raises(NoContentExtracted):
            engine.index([])

    def test_extraction_failure_propagates(self, engine: RAGEngine) -> None:
        with pytest.raises(ExtractionFailure):
            engine.index(["/docs/k8s.pdf", "/docs/missing.pdf"])
        assert engine.count() == 0

    def test_embedding_failure_persists_nothing(
        self, store: JsonVectorStore, tmp_path: Path
    ) -> None:
        provider = FakeEmbeddingProvider(fail_on_call=1)
        engine = RAGEngine(
            store,
            EmbeddingService(provider, batch_delay=0),
            extractor=FakeExtractor(DOCUMENTS),
        )
        with pytest.raises(EmbeddingProviderFailure):
            engine.index(list(DOCUMENTS))
        assert engine.count() == 0
        reopened = JsonVectorStore(tmp_path)
        reopened.initialize()
        assert reopened.count() == 0


# ── query / format_context ─────────────────────────────────────────────


class TestQuery:
    def test_best_match_first(self, engine: RAGEngine) -> None:
        engine.index(list(DOCUMENTS))
        results = engine.query("tell me about kubernetes", k=2)
        assert len(results) == 2
        assert results[0].source == "k8s.pdf"
        assert results[0].page == 1
        assert results[0].similarity >= results[1].similarity
        assert all(isinstance(r, RAGResult) for r in results)

    def test_empty_store_skips_provider(
        self, engine: RAGEngine, fake_provider: FakeEmbeddingProvider
    ) -> None:
        assert engine.query("anything") == []
        assert fake_provider.calls == []

    def test_k_larger_than_store(self, engine: RAGEngine) -> None:
        engine.index(list(DOCUMENTS))
        assert len(engine.query("python", k=100)) == 4

    def test_embedding_failure_propagates(self, store: JsonVectorStore, engine: RAGEngine) -> None:
        engine.index(list(DOCUMENTS))
        failing = RAGEngine(store, EmbeddingService(FakeEmbeddingProvider(fail_on_call=1)))
        with pytest.raises(EmbeddingProviderFailure):
            failing.query("python")


class TestFormatContext:
    def test_sentinel_when_empty(self, engine: RAGEngine) -> None:
        assert engine.format_context("anything") == NO_CONTEXT_MESSAGE

    def test_context_block_layout(self, engine: RAGEngine) -> None:
        engine.index(["/docs/cats.txt"])
        context = engine.format_context("cat", k=1)
        assert context.startswith("Relevant context from indexed PDFs:\n\n")
        assert "[cats.txt - Page 1] (Similarity: " in context
        assert "The cat sat on the mat." in context
        assert context.endswith("---\n\n")

    def test_similarity_rendered_as_percentage(self, engine: RAGEngine) -> None:
        engine.index(["/docs/cats.txt"])
        # Query vector equals the stored vector, so similarity is 1.0.
        context = engine.format_context(DOCUMENTS["/docs/cats.txt"], k=1)
        assert "(Similarity: 100.0%)" in context


class TestFormatSearchResults:
    def test_markdown_report(self) -> None:
        results = [
            RAGResult(content="First passage.", source="a.pdf", page=3, similarity=0.9123),
            RAGResult(content="Second passage.", source="b.pdf", page=1, similarity=0.5),
        ]
        report = format_search_results("what?", results)
        assert report.startswith('# Search Results for: "what?"\n\nFound 2 result(s)')
        assert "## Result 2" in report
        assert "**Page:** 3" in report
        assert "**Similarity:** 91.2%" in report
        assert "First passage." in report


# ── store pass-through ─────────────────────────────────────────────────


class TestDocuments:
    def test_list_documents(self, engine: RAGEngine) -> None:
        engine.index(list(DOCUMENTS))
        summary = {doc.source: doc.count for doc in engine.list_documents()}
        assert summary == {"k8s.pdf": 1, "python.pdf": 2, "cats.txt": 1}

    def test_clear(self, engine: RAGEngine) -> None:
        engine.index(list(DOCUMENTS))
        engine.clear()
        assert engine.count() == 0
        assert engine.list_documents() == []

    def test_default_extractor_reads_text_files(self, store: JsonVectorStore, tmp_path: Path) -> None:
        notes = tmp_path / "notes.md"
        notes.write_text("PDF parsing notes.\n\n\n\nSecond page about python.", encoding="utf-8")
        engine = RAGEngine(
            store,
            EmbeddingService(FakeEmbeddingProvider(), batch_delay=0),
            Chunker(chunk_size=200, chunk_overlap=20),
        )
        engine.index([notes])
        assert engine.list_documents()[0].source == "notes.md"
        assert engine.count() == 2
