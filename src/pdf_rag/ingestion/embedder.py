"""Embedding orchestration over a pluggable provider.

:class:`EmbeddingProvider` is the only capability the core depends on.
:class:`EmbeddingService` sends texts to it in sequential, bounded
batches with a short pause between batches to stay inside rate limits.
"""

from __future__ import annotations

import logging
import math
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from pdf_rag.errors import EmbeddingProviderFailure

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class EmbeddingProvider(ABC):
    """Converts batches of text to equal-length vectors.

    Parameters
    ----------
    name:
        Short provider identifier used in logs and errors (e.g. ``"openai"``).
    model:
        Embedding model identifier.
    """

    def __init__(self, name: str, model: str) -> None:
        self.name = name
        self.model = model

    @abstractmethod
    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per input text, in input order."""
        ...

    def embed_query(self, text: str) -> list[float]:
        """Embed a single string."""
        return self.embed_documents([text])[0]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, model={self.model!r})"


class EmbeddingService:
    """Sequential, batched embedding with progress reporting.

    Parameters
    ----------
    provider:
        Any :class:`EmbeddingProvider`.
    batch_size:
        Default number of texts per provider call.
    batch_delay:
        Seconds to pause between consecutive batches.
    sleep:
        Pause function, injectable for tests.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        *,
        batch_size: int = 100,
        batch_delay: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.provider = provider
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self._sleep = sleep

    def embed_texts(
        self,
        texts: Sequence[str],
        batch_size: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> list[list[float]]:
        """Embed *texts* and return vectors aligned with the input.

        Any provider failure aborts the whole call; no partial result is
        returned.

        Raises
        ------
        EmbeddingProviderFailure
            When the provider raises or returns the wrong number of vectors.
        """
        size = self.batch_size if batch_size is None else batch_size
        if size < 1:
            raise ValueError(f"batch_size must be >= 1, got {size}")

        total = len(texts)
        if total == 0:
            return []

        total_batches = math.ceil(total / size)
        logger.info("Processing %d texts in batches of %d", total, size)

        vectors: list[list[float]] = []
        for batch_number, start in enumerate(range(0, total, size), start=1):
            batch = list(texts[start : start + size])
            logger.debug("Processing batch %d/%d", batch_number, total_batches)

            vectors.extend(self._embed_batch(batch, batch_number, total_batches))

            if progress_callback is not None:
                progress_callback(len(vectors), total)

            if batch_number < total_batches and self.batch_delay > 0:
                self._sleep(self.batch_delay)

        logger.info("Completed processing %d embeddings", len(vectors))
        return vectors

    def embed_text(self, text: str) -> list[float]:
        """Embed a single string."""
        return self.embed_texts([text])[0]

    # -- internals ------------------------------------------------------------

    def _embed_batch(
        self, batch: list[str], batch_number: int, total_batches: int
    ) -> list[list[float]]:
        try:
            result = self.provider.embed_documents(batch)
        except EmbeddingProviderFailure:
            raise
        except Exception as exc:
            raise EmbeddingProviderFailure(
                provider=self.provider.name,
                model=self.provider.model,
                batch=batch_number,
                total_batches=total_batches,
                reason=str(exc) or type(exc).__name__,
            ) from exc

        if len(result) != len(batch):
            raise EmbeddingProviderFailure(
                provider=self.provider.name,
                model=self.provider.model,
                batch=batch_number,
                total_batches=total_batches,
                reason=f"expected {len(batch)} vectors, got {len(result)}",
            )
        return [list(vector) for vector in result]
