"""
Ingestion — document loading, chunking, and embedding.

This module turns raw documents (PDF, plain text, Markdown) into
overlapping text chunks and converts those chunks to vectors through a
pluggable embedding provider.
"""
