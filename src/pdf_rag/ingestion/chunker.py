"""Text chunking: page splitting and a sentence-aware sliding window."""

from __future__ import annotations

import re

from pdf_rag.retrieval.models import Chunk

_PAGE_BREAK = "\f"
_PAGE_GAP = re.compile(r"\n{3,}")
_WHITESPACE = re.compile(r"\s+")


def split_into_pages(raw_text: str) -> list[str]:
    """Split extracted text into pages.

    Form feeds are used when the extractor kept them; otherwise runs of
    three or more newlines approximate page breaks.  Whitespace-only
    segments are dropped.  Any non-empty input yields at least one page.
    """
    segments = raw_text.split(_PAGE_BREAK)
    if len(segments) == 1:
        segments = _PAGE_GAP.split(raw_text)

    pages = [segment for segment in segments if segment.strip()]
    if not pages and raw_text:
        return [raw_text]
    return pages


def chunk_text(text: str, max_size: int = 1000, overlap: int = 200) -> list[str]:
    """Split *text* into overlapping chunks of at most *max_size* characters.

    Parameters
    ----------
    text:
        Raw page text; whitespace runs are collapsed to single spaces.
    max_size:
        Maximum number of characters per chunk.
    overlap:
        Characters shared between consecutive chunks.  Values at or
        above *max_size* are tolerated: the window then advances without
        overlap.

    Returns
    -------
    list[str]
        Trimmed, non-empty chunks in document order.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be >= 1, got {max_size}")
    if overlap < 0:
        raise ValueError(f"overlap must be >= 0, got {overlap}")

    clean = _WHITESPACE.sub(" ", text).strip()
    if not clean:
        return []
    if len(clean) <= max_size:
        return [clean]

    length = len(clean)
    chunks: list[str] = []
    start = 0

    while start < length:
        end = min(start + max_size, length)

        if end < length:
            # A ". " ending at ``end`` still keeps the chunk within max_size.
            period = clean.rfind(". ", start, end + 1)
            if period > start and period > start + max_size / 2:
                end = period + 1
            else:
                space = clean.rfind(" ", start, end + 1)
                if space > start:
                    end = space

        piece = clean[start:end].strip()
        if piece:
            chunks.append(piece)

        if end >= length:
            break

        next_start = end - overlap
        if next_start <= start:
            next_start = end
        start = next_start

    return chunks


def chunk_document(
    text: str,
    source: str,
    max_size: int = 1000,
    overlap: int = 200,
) -> list[Chunk]:
    """Chunk a whole document, numbering chunks continuously across pages."""
    chunks: list[Chunk] = []
    chunk_index = 0
    for page_number, page_text in enumerate(split_into_pages(text), start=1):
        for piece in chunk_text(page_text, max_size=max_size, overlap=overlap):
            chunks.append(
                Chunk(text=piece, source=source, page=page_number, chunk_index=chunk_index)
            )
            chunk_index += 1
    return chunks


class Chunker:
    """Configured chunker used by the retrieval engine.

    Parameters
    ----------
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of overlapping characters between consecutive chunks.
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200) -> None:
        self.set_chunk_size(chunk_size)
        self.set_chunk_overlap(chunk_overlap)

    def set_chunk_size(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {size}")
        self.chunk_size = size

    def set_chunk_overlap(self, overlap: int) -> None:
        if overlap < 0:
            raise ValueError(f"chunk_overlap must be >= 0, got {overlap}")
        self.chunk_overlap = overlap

    def chunk(self, text: str, source: str) -> list[Chunk]:
        return chunk_document(text, source, max_size=self.chunk_size, overlap=self.chunk_overlap)
