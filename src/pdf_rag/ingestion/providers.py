"""Concrete embedding providers backed by LangChain ``Embeddings`` classes.

Every provider here adapts a LangChain embeddings object to the
:class:`~pdf_rag.ingestion.embedder.EmbeddingProvider` capability.  The
backend client is created lazily on first use, so a misconfigured
provider (missing API key, Ollama not running) surfaces as an
:class:`~pdf_rag.errors.EmbeddingProviderFailure` from the embedding
call instead of breaking engine construction.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pdf_rag.ingestion.embedder import EmbeddingProvider

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from pdf_rag.config import Settings

logger = logging.getLogger(__name__)


class LangChainEmbeddingProvider(EmbeddingProvider):
    """Adapter from any LangChain ``Embeddings`` implementation.

    Parameters
    ----------
    name:
        Provider identifier used in logs and errors.
    model:
        Embedding model identifier.
    embeddings:
        Ready-made LangChain embeddings object.  Subclasses leave this as
        *None* and build the client in :meth:`_create_embeddings`.
    """

    def __init__(self, name: str, model: str, embeddings: Embeddings | None = None) -> None:
        super().__init__(name, model)
        self._embeddings = embeddings

    @property
    def embeddings(self) -> Embeddings:
        if self._embeddings is None:
            self._embeddings = self._create_embeddings()
        return self._embeddings

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return self.embeddings.embed_documents(texts)

    def _create_embeddings(self) -> Embeddings:
        raise NotImplementedError(f"{type(self).__name__} requires an Embeddings instance")


class OpenAIEmbeddingProvider(LangChainEmbeddingProvider):
    """OpenAI cloud embeddings (``text-embedding-3-small`` by default)."""

    def __init__(self, api_key: str, model: str = "text-embedding-3-small") -> None:
        super().__init__("openai", model)
        if not api_key:
            logger.warning(
                "OpenAI API key not configured; set PDF_RAG_OPENAI_API_KEY "
                "or switch PDF_RAG_EMBEDDING_PROVIDER to 'ollama'"
            )
        self._api_key = api_key

    def _create_embeddings(self) -> Embeddings:
        from langchain_openai import OpenAIEmbeddings

        return OpenAIEmbeddings(model=self.model, api_key=self._api_key)


class OllamaEmbeddingProvider(LangChainEmbeddingProvider):
    """Local Ollama embeddings.

    Local models can take many seconds per chunk; callers indexing
    documents should use a small batch size so progress stays visible.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "nomic-embed-text",
    ) -> None:
        super().__init__("ollama", model)
        self.base_url = base_url

    def _create_embeddings(self) -> Embeddings:
        from langchain_community.embeddings import OllamaEmbeddings

        return OllamaEmbeddings(base_url=self.base_url, model=self.model)


class HuggingFaceEmbeddingProvider(LangChainEmbeddingProvider):
    """In-process sentence-transformer embeddings."""

    def __init__(self, model: str = "sentence-transformers/all-MiniLM-L6-v2") -> None:
        super().__init__("huggingface", model)

    def _create_embeddings(self) -> Embeddings:
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=self.model)


def build_provider(settings: Settings) -> EmbeddingProvider:
    """Return the provider selected by ``settings.embedding_provider``."""
    provider = settings.embedding_provider
    if provider == "ollama":
        logger.info("Using Ollama embeddings with model: %s", settings.ollama_model)
        return OllamaEmbeddingProvider(settings.ollama_base_url, settings.ollama_model)
    if provider == "huggingface":
        logger.info("Using HuggingFace embeddings with model: %s", settings.huggingface_model)
        return HuggingFaceEmbeddingProvider(settings.huggingface_model)
    if provider == "openai":
        logger.info("Using OpenAI embeddings with model: %s", settings.embedding_model)
        return OpenAIEmbeddingProvider(settings.openai_api_key, settings.embedding_model)
    raise ValueError(f"Unsupported embedding provider: {provider!r}")
