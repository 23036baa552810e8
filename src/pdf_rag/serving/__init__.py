"""
Serving — FastAPI application for the knowledge base.

Exposes indexing, search and document management over HTTP so a UI or
CLI can drive the engine without importing it.
"""
