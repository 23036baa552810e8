"""LangChain tool exposing the knowledge base to an AI assistant.

The assistant calls ``pdf-rag-search`` with a natural-language query and
receives a formatted context block it can quote from.

Dependency-injection note
-------------------------
The tool is built around an :class:`~pdf_rag.context.EngineHolder`
rather than a global engine, so reconfiguring the holder is picked up
by the next tool call.  Tests pass a holder wrapping a fake engine.
"""

from __future__ import annotations

import logging

from langchain_core.tools import BaseTool, tool

from pdf_rag.context import EngineHolder

logger = logging.getLogger(__name__)

TOOL_NAME = "pdf-rag-search"
NOT_INITIALIZED_MESSAGE = "RAG engine not initialized"


def build_search_tool(holder: EngineHolder, default_k: int = 5) -> BaseTool:
    """Return the ``pdf-rag-search`` tool bound to *holder*."""

    @tool(TOOL_NAME)
    def search_pdf_knowledge(query: str, max_results: int | None = None) -> str:
        """Search the indexed PDF knowledge base for passages relevant to the query.

        Use this tool when the user asks about the content of documents
        they have indexed.  Each passage is labelled with its source
        file, page and similarity score.  ``max_results`` limits the
        number of passages returned.
        """
        engine = holder.engine
        if engine is None:
            return NOT_INITIALIZED_MESSAGE

        if max_results:
            k = max_results
        elif holder.settings is not None:
            k = holder.settings.max_results
        else:
            k = default_k

        try:
            context = engine.format_context(query, k)
        except Exception as exc:
            logger.warning("%s failed for %r", TOOL_NAME, query, exc_info=True)
            return f"Error searching knowledge base: {exc}"

        logger.info("%s answered %r (k=%d)", TOOL_NAME, query, k)
        return context

    return search_pdf_knowledge
