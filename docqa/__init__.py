"""docqa - question answering over one document.

Retrieval-Augmented Generation over a single ingested document.

Key Components:
    - HuggingFaceEmbeddingService: Batched, retried, normalized embeddings
    - InMemoryVectorStore: Exact cosine top-K index
    - IntentDetector: Lexical question classifier (Vietnamese and English)
    - Retriever: Oversample-then-boost reranking
    - Answerer: Intent-specific prompts and the chat call
    - RAGManager: Orchestrates all components

Quick Start:
    from docqa import RAGManager

    manager = RAGManager()
    manager.ingest_file("document.pdf")
    result = manager.ask("What is a vector index?")
    print(result.answer, result.sources)
"""

__version__ = "1.0.0"

from docqa.config import Settings, get_settings
from docqa.exceptions import DocQAError
from docqa.models import AskResult, AskStatus, IngestResult, Intent, IntentHint, ScoredChunk
from docqa.services.manager import RAGManager

__all__ = [
    "AskResult",
    "AskStatus",
    "DocQAError",
    "IngestResult",
    "Intent",
    "IntentHint",
    "RAGManager",
    "ScoredChunk",
    "Settings",
    "get_settings",
]
