"""docqa services.

Core services for the question-answering pipeline:
  - embeddings: Hugging Face embedding adapter
  - vector_store: In-memory cosine index
  - intent: Question classifier
  - retriever: Oversample-then-boost reranker
  - llm_client: OpenAI-compatible chat client
  - answerer: Prompt assembly
  - chunker: Default text splitter
  - manager: Main orchestrator (USE THIS!)

Quick Start:
    >>> from docqa.services import RAGManager
    >>> manager = RAGManager()
    >>> manager.ingest_file("report.pdf")
    >>> result = manager.ask("Tóm tắt phần mở đầu")
"""

from docqa.services.answerer import Answerer
from docqa.services.chunker import Chunker
from docqa.services.embeddings import EmbeddingProvider, HuggingFaceEmbeddingService
from docqa.services.intent import IntentDetector, detect_intent
from docqa.services.llm_client import ChatProvider, OpenAIChatClient
from docqa.services.manager import RAGManager
from docqa.services.retriever import Retriever
from docqa.services.vector_store import InMemoryVectorStore

__all__ = [
    # Main interface (USE THIS)
    "RAGManager",
    # Individual services
    "Answerer",
    "ChatProvider",
    "Chunker",
    "EmbeddingProvider",
    "HuggingFaceEmbeddingService",
    "InMemoryVectorStore",
    "IntentDetector",
    "OpenAIChatClient",
    "Retriever",
    "detect_intent",
]
