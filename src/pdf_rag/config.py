"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings, populated from ``PDF_RAG_*`` env vars or a .env file."""

    # Embedding provider
    embedding_provider: Literal["openai", "ollama", "huggingface"] = Field(
        default="openai",
        description="Which embedding backend to use for indexing and queries.",
    )
    openai_api_key: str = Field(default="", description="OpenAI API key")
    embedding_model: str = Field(
        default="text-embedding-3-small",
        description="OpenAI embedding model identifier",
    )
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "nomic-embed-text"
    huggingface_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    # Vector store
    storage_path: str = Field(
        default=".pdf_rag",
        description="Directory holding vector_db/documents.json",
    )

    # Chunking
    chunk_size: int = Field(default=1000, ge=1)
    chunk_overlap: int = Field(default=200, ge=0)

    # Retrieval
    max_results: int = Field(default=5, ge=1)

    # Embedding orchestration
    embedding_batch_size: int = Field(default=100, ge=1)
    index_batch_size: int = Field(
        default=10,
        ge=1,
        description="Batch size used while indexing documents (small for slow local models).",
    )
    batch_delay_seconds: float = Field(default=0.1, ge=0.0)

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="PDF_RAG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

