"""JSON-file implementation of the vector-store abstraction.

The whole collection lives in memory and is rewritten to
``<storage_path>/vector_db/documents.json`` after every mutation.  Search
is an exact linear scan, so the practical limit is whatever comfortably
fits in memory and serialises quickly.

Every public operation holds an instance lock, so one store may be shared
by threads (FastAPI runs plain `def` routes in a threadpool).  Engines
over the same file must share the store instance; see
:meth:`pdf_rag.context.EngineHolder.reconfigure`.
"""

from __future__ import annotations

import logging
import math
import os
import tempfile
import threading
from collections.abc import Sequence
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from pdf_rag.errors import DimensionMismatch, StorageCorrupt
from pdf_rag.retrieval.base import VectorStoreBase
from pdf_rag.retrieval.models import QueryResult, StoredRecord
from pdf_rag.retrieval.similarity import cosine_similarity

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[StoredRecord])


def _rank_key(similarity: float) -> float:
    # NaN (zero-norm vectors) ranks below every real similarity.
    return math.inf if math.isnan(similarity) else -similarity


class JsonVectorStore(VectorStoreBase):
    """File-backed store with upsert-by-id and exact cosine search.

    Parameters
    ----------
    storage_path:
        Directory under which ``vector_db/documents.json`` is kept.
    """

    def __init__(self, storage_path: str | Path) -> None:
        self._db_dir = Path(storage_path) / "vector_db"
        self._db_file = self._db_dir / "documents.json"
        self._records: list[StoredRecord] = []
        self._positions: dict[str, int] = {}
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        """Location of the durable collection file."""
        return self._db_file

    @property
    def dimension(self) -> int | None:
        """Vector length shared by the collection, or ``None`` when empty."""
        if not self._records:
            return None
        return len(self._records[0].vector)

    # -- VectorStoreBase overrides --------------------------------------------

    def initialize(self) -> None:
        with self._lock:
            try:
                records = self._load()
            except StorageCorrupt as exc:
                logger.warning("%s; starting from an empty collection", exc)
                records = None

            if records is None:
                self._reset([])
                self._save()
                return

            self._reset(records)
            logger.info("Loaded %d documents from %s", len(self._records), self._db_file)

    def upsert(self, records: Sequence[StoredRecord]) -> None:
        if not records:
            return

        with self._lock:
            expected = self.dimension
            for record in records:
                if expected is None:
                    expected = len(record.vector)
                elif len(record.vector) != expected:
                    raise DimensionMismatch(expected, len(record.vector))

            previous_records = list(self._records)
            previous_positions = dict(self._positions)
            for record in records:
                self._put(record)

            try:
                self._save()
            except Exception:
                self._records = previous_records
                self._positions = previous_positions
                raise

            logger.info("Upserted %d documents. Total: %d", len(records), len(self._records))

    def search(self, query_vector: Sequence[float], k: int = 5) -> list[QueryResult]:
        with self._lock:
            if k <= 0 or not self._records:
                return []
            scored = [(cosine_similarity(query_vector, rec.vector), rec) for rec in self._records]

        # list.sort is stable: equal similarities keep storage order.
        scored.sort(key=lambda item: _rank_key(item[0]))

        return [
            QueryResult(id=rec.id, text=rec.text, metadata=rec.metadata, similarity=similarity)
            for similarity, rec in scored[:k]
        ]

    def list_by_source(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        with self._lock:
            for record in self._records:
                source = record.metadata.source
                counts[source] = counts.get(source, 0) + 1
        return counts

    def clear(self) -> None:
        with self._lock:
            self._reset([])
            self._save()
        logger.info("Vector store cleared")

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def health_check(self) -> bool:
        """``True`` while the collection file exists on disk."""
        return self._db_file.exists()

    # -- internals ------------------------------------------------------------

    def _put(self, record: StoredRecord) -> None:
        position = self._positions.get(record.id)
        if position is None:
            self._positions[record.id] = len(self._records)
            self._records.append(record)
        else:
            self._records[position] = record

    def _reset(self, records: list[StoredRecord]) -> None:
        self._records = []
        self._positions = {}
        for record in records:
            self._put(record)

    def _load(self) -> list[StoredRecord] | None:
        if not self._db_file.exists():
            return None
        try:
            records = _RECORDS.validate_json(self._db_file.read_bytes())
        except (OSError, ValidationError) as exc:
            raise StorageCorrupt(str(self._db_file), str(exc)) from exc

        dimensions = {len(rec.vector) for rec in records}
        if len(dimensions) > 1:
            raise StorageCorrupt(
                str(self._db_file), f"mixed vector dimensions {sorted(dimensions)}"
            )
        return records

    def _save(self) -> None:
        """Atomically rewrite the collection file (temp file + rename)."""
        self._db_dir.mkdir(parents=True, exist_ok=True)
        payload = _RECORDS.dump_json(self._records, indent=2)

        fd, tmp_name = tempfile.mkstemp(dir=self._db_dir, prefix=".documents.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._db_file)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Persisted %d records to %s", len(self._records), self._db_file)
