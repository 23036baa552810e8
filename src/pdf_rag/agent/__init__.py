"""
Agent — tools that let an AI assistant query the knowledge base.

Public API
----------
- :func:`build_search_tool` — the ``pdf-rag-search`` LangChain tool.
"""

from pdf_rag.agent.tools import build_search_tool

__all__ = ["build_search_tool"]
