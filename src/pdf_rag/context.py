"""Engine construction and reconfiguration.

There is no module-level engine.  Callers build one with
:func:`build_engine` and, when configuration changes, ask an
:class:`EngineHolder` to swap in a freshly built engine.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from pdf_rag.config import Settings
from pdf_rag.ingestion.chunker import Chunker
from pdf_rag.ingestion.embedder import EmbeddingProvider, EmbeddingService
from pdf_rag.ingestion.providers import build_provider
from pdf_rag.retrieval.base import VectorStoreBase
from pdf_rag.retrieval.engine import RAGEngine
from pdf_rag.retrieval.json_store import JsonVectorStore

logger = logging.getLogger(__name__)


def build_engine(
    settings: Settings | None = None,
    *,
    provider: EmbeddingProvider | None = None,
    store: VectorStoreBase | None = None,
) -> RAGEngine:
    """Construct a ready-to-use :class:`RAGEngine` from *settings*.

    Parameters
    ----------
    settings:
        Configuration to use.  Defaults to a fresh :class:`Settings`
        read from the environment.
    provider:
        Overrides the provider selected by ``settings.embedding_provider``.
    store:
        An already initialised store to reuse instead of opening
        ``settings.storage_path``.
    """
    settings = settings or Settings()

    if store is None:
        store = JsonVectorStore(settings.storage_path)
        store.initialize()

    service = EmbeddingService(
        provider or build_provider(settings),
        batch_size=settings.embedding_batch_size,
        batch_delay=settings.batch_delay_seconds,
    )
    chunker = Chunker(settings.chunk_size, settings.chunk_overlap)

    engine = RAGEngine(store, service, chunker, index_batch_size=settings.index_batch_size)
    logger.info("RAG engine initialized (provider=%s)", service.provider.name)
    return engine


def _same_storage(left: Settings, right: Settings) -> bool:
    return Path(left.storage_path).resolve() == Path(right.storage_path).resolve()


class EngineHolder:
    """Owns the current engine and the settings it was built from.

    Only one store instance may own a collection file.  When the storage
    path is unchanged, :meth:`reconfigure` hands the current store to the
    new engine, so an engine still busy indexing keeps writing into the
    collection the new engine reads.
    """

    def __init__(self, engine: RAGEngine | None = None, settings: Settings | None = None) -> None:
        self._engine = engine
        self.settings = settings
        self._lock = threading.Lock()

    @property
    def engine(self) -> RAGEngine | None:
        return self._engine

    def reconfigure(
        self,
        settings: Settings | None = None,
        *,
        provider: EmbeddingProvider | None = None,
    ) -> RAGEngine:
        """Build a new engine from *settings* and make it current.

        The previous engine stays in place if construction fails.
        """
        settings = settings or Settings()
        with self._lock:
            store = None
            if (
                self._engine is not None
                and self.settings is not None
                and _same_storage(self.settings, settings)
            ):
                store = self._engine.store
                logger.debug("Reusing vector store at %s", settings.storage_path)

            engine = build_engine(settings, provider=provider, store=store)
            self._engine = engine
            self.settings = settings
        return engine
