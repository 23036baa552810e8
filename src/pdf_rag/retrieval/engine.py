"""Retrieval engine — indexing and querying over a vector store.

This module is the **primary public interface** of the package.  It
composes the chunker, the embedding service and a vector store into two
workflows:

* :meth:`RAGEngine.index` — files → chunks → vectors → stored records.
* :meth:`RAGEngine.query` — text → vector → ranked :class:`RAGResult`.

Usage::

    from pdf_rag.context import build_engine

    engine = build_engine()
    engine.index(["manual.pdf"])
    print(engine.format_context("How do I reset the device?", k=3))
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path

from pdf_rag.errors import NoContentExtracted
from pdf_rag.ingestion.chunker import Chunker
from pdf_rag.ingestion.embedder import EmbeddingService, ProgressCallback
from pdf_rag.ingestion.loader import ExtractedDocument, load_document
from pdf_rag.retrieval.base import VectorStoreBase
from pdf_rag.retrieval.models import (
    Chunk,
    DocumentSummary,
    IndexReport,
    RAGResult,
    RecordMetadata,
    StoredRecord,
)

logger = logging.getLogger(__name__)

Extractor = Callable[[str | Path], ExtractedDocument]

NO_CONTEXT_MESSAGE = "No relevant context found in the knowledge base."
CONTEXT_HEADER = "Relevant context from indexed PDFs:"


def _percent(similarity: float) -> str:
    return f"{similarity * 100:.1f}%"


class RAGEngine:
    """Index documents and answer similarity queries.

    Parameters
    ----------
    store:
        Initialised vector-store backend.
    embedding_service:
        Orchestrator wrapping the configured embedding provider.
    chunker:
        Chunking configuration.  Defaults to 1000 / 200 characters.
    extractor:
        Callable turning a file path into :class:`ExtractedDocument`.
    index_batch_size:
        Embedding batch size used while indexing.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedding_service: EmbeddingService,
        chunker: Chunker | None = None,
        *,
        extractor: Extractor = load_document,
        index_batch_size: int = 10,
    ) -> None:
        self._store = store
        self._embeddings = embedding_service
        self._chunker = chunker or Chunker()
        self._extract = extractor
        self.index_batch_size = index_batch_size

    @property
    def store(self) -> VectorStoreBase:
        return self._store

    @property
    def embedding_service(self) -> EmbeddingService:
        return self._embeddings

    # -- indexing -------------------------------------------------------------

    def index(
        self,
        file_paths: Iterable[str | Path],
        progress_callback: ProgressCallback | None = None,
        *,
        embedding_progress: ProgressCallback | None = None,
    ) -> IndexReport:
        """Extract, chunk, embed and store every file in *file_paths*.

        Parameters
        ----------
        file_paths:
            Documents to index.  Re-indexing a file overwrites its records.
        progress_callback:
            Called as ``(files_done, files_total)`` after each file is chunked.
        embedding_progress:
            Called as ``(texts_embedded, texts_total)`` after each batch.

        Raises
        ------
        ExtractionFailure
            A file could not be read; nothing is stored.
        NoContentExtracted
            No chunks were produced from any file.
        EmbeddingProviderFailure
            The provider failed; nothing is stored.
        """
        paths = list(file_paths)
        logger.info("Processing %d file(s)...", len(paths))

        all_chunks: list[Chunk] = []
        for position, path in enumerate(paths, start=1):
            logger.info("Processing file %d/%d: %s", position, len(paths), path)
            document = self._extract(path)
            chunks = self._chunker.chunk(document.text, document.source)
            logger.debug("%s produced %d chunks", document.source, len(chunks))
            all_chunks.extend(chunks)

            if progress_callback is not None:
                progress_callback(position, len(paths))

        if not all_chunks:
            raise NoContentExtracted(len(paths))

        logger.info("Extracted %d chunks, generating embeddings...", len(all_chunks))
        vectors = self._embeddings.embed_texts(
            [chunk.text for chunk in all_chunks],
            batch_size=self.index_batch_size,
            progress_callback=embedding_progress,
        )

        timestamp = datetime.now(timezone.utc).isoformat()
        records = [
            StoredRecord(
                id=chunk.record_id(),
                text=chunk.text,
                vector=vector,
                metadata=RecordMetadata(source=chunk.source, page=chunk.page, timestamp=timestamp),
            )
            for chunk, vector in zip(all_chunks, vectors)
        ]
        self._store.upsert(records)

        return IndexReport(files=len(paths), chunks=len(records), total_records=self._store.count())

    # -- querying -------------------------------------------------------------

    def query(self, text: str, k: int = 5) -> list[RAGResult]:
        """Return the *k* stored passages most similar to *text*.

        The provider is not called when the store is empty.
        """
        if self._store.count() == 0:
            return []

        vector = self._embeddings.embed_text(text)
        if not vector:
            return []

        hits = self._store.search(vector, k)
        return [
            RAGResult(
                content=hit.text,
                source=hit.metadata.source,
                page=hit.metadata.page or 0,
                similarity=hit.similarity,
            )
            for hit in hits
        ]

    def format_context(self, text: str, k: int = 5) -> str:
        """Render query results as a context block for a text-generation model."""
        results = self.query(text, k)
        if not results:
            return NO_CONTEXT_MESSAGE

        parts = [f"{CONTEXT_HEADER}\n\n"]
        for result in results:
            parts.append(
                f"[{result.source} - Page {result.page}] "
                f"(Similarity: {_percent(result.similarity)})\n"
            )
            parts.append(f"{result.content}\n\n")
            parts.append("---\n\n")
        return "".join(parts)

    # -- store pass-through ---------------------------------------------------

    def list_documents(self) -> list[DocumentSummary]:
        return [
            DocumentSummary(source=source, count=count)
            for source, count in self._store.list_by_source().items()
        ]

    def clear(self) -> None:
        self._store.clear()

    def count(self) -> int:
        return self._store.count()

    def health_check(self) -> bool:
        return self._store.health_check()


def format_search_results(query: str, results: list[RAGResult]) -> str:
    """Render results as a Markdown report, one section per hit."""
    lines = [f'# Search Results for: "{query}"\n\n', f"Found {len(results)} result(s)\n\n", "---\n\n"]
    for number, result in enumerate(results, start=1):
        lines.append(f"## Result {number}\n\n")
        lines.append(f"**Source:** {result.source}\n\n")
        lines.append(f"**Page:** {result.page}\n\n")
        lines.append(f"**Similarity:** {_percent(result.similarity)}\n\n")
        lines.append(f"**Content:**\n\n{result.content}\n\n")
        lines.append("---\n\n")
    return "".join(lines)
