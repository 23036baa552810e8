"""Document loaders — thin wrappers around LangChain document loaders.

PDF pages are joined with form feeds so the chunker can recover page
boundaries.  Plain-text and Markdown files are read as a single page
unless they contain their own form feeds or large blank gaps.
"""

from __future__ import annotations

import logging
from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader, TextLoader
from pydantic import BaseModel

from pdf_rag.errors import ExtractionFailure

logger = logging.getLogger(__name__)

PDF_SUFFIXES = frozenset({".pdf"})
TEXT_SUFFIXES = frozenset({".txt", ".md", ".markdown"})


class ExtractedDocument(BaseModel):
    """Raw text pulled out of one file."""

    source: str
    text: str


def load_pdf(path: str | Path) -> str:
    """Return the text of a PDF with pages separated by ``\\f``."""
    pages = PyPDFLoader(str(path)).load()
    return "\f".join(page.page_content for page in pages)


def load_text(path: str | Path) -> str:
    """Return the UTF-8 text of a plain-text or Markdown file."""
    docs = TextLoader(str(path), encoding="utf-8").load()
    return "\n".join(doc.page_content for doc in docs)


def load_document(path: str | Path) -> ExtractedDocument:
    """Extract text from *path*.

    Parameters
    ----------
    path:
        A ``.pdf``, ``.txt`` or ``.md`` file.

    Returns
    -------
    ExtractedDocument
        ``source`` is the file name (not the full path), matching the
        metadata stored with each chunk.

    Raises
    ------
    ExtractionFailure
        When the file is missing, unsupported or cannot be parsed.
    """
    path = Path(path)
    if not path.is_file():
        raise ExtractionFailure(str(path), "file not found")

    suffix = path.suffix.lower()
    if suffix in PDF_SUFFIXES:
        reader = load_pdf
    elif suffix in TEXT_SUFFIXES:
        reader = load_text
    else:
        raise ExtractionFailure(str(path), f"unsupported file type {suffix or '(none)'!r}")

    try:
        text = reader(path)
    except Exception as exc:
        raise ExtractionFailure(str(path), str(exc) or type(exc).__name__) from exc

    logger.info("Extracted %d characters from %s", len(text), path.name)
    return ExtractedDocument(source=path.name, text=text)
