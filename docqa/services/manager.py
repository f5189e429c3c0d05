"""RAG Manager - main orchestrator for the question-answering pipeline.

Exposes the three entrypoints an outer layer (HTTP, CLI) calls:
- ingest_chunks() / ingest_text() / ingest_file() - index one document
- ask() - answer a question about it
- clear() - drop the index

Ingestion replaces the index: everything is embedded first and swapped in
with a single store operation, so a failed ingestion leaves the previous
index untouched.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from docqa.config import get_settings
from docqa.exceptions import IngestionError
from docqa.file_processing import extract_text
from docqa.models import AskResult, AskStatus, IngestResult
from docqa.services.answerer import Answerer
from docqa.services.chunker import Chunker
from docqa.services.embeddings import EmbeddingProvider, HuggingFaceEmbeddingService
from docqa.services.intent import IntentDetector
from docqa.services.llm_client import ChatProvider, OpenAIChatClient
from docqa.services.retriever import Retriever
from docqa.services.vector_store import InMemoryVectorStore
from docqa.utils.validators import validate_chunks, validate_file_path, validate_question

logger = logging.getLogger(__name__)

EMPTY_INDEX_ANSWER = "Chưa upload dữ liệu PDF."
INSUFFICIENT_EVIDENCE_ANSWER = "Tôi không biết."


class RAGManager:
    """Coordinates chunking, embeddings, the vector index, reranking and answering.

    Attributes:
        embedding_service: Embedding provider adapter
        vector_store: Shared in-memory index
        retriever: Oversample-then-boost reranker
        answerer: Prompt assembler and chat caller
        chunker: Default text splitter
        intent_detector: Question classifier
    """

    def __init__(
        self,
        embedding_service: Optional[EmbeddingProvider] = None,
        vector_store: Optional[InMemoryVectorStore] = None,
        chat: Optional[ChatProvider] = None,
        retriever: Optional[Retriever] = None,
        answerer: Optional[Answerer] = None,
        chunker: Optional[Chunker] = None,
        intent_detector: Optional[IntentDetector] = None,
        top_k: Optional[int] = None,
        similarity_threshold: Optional[float] = None,
    ) -> None:
        """Initialize RAG Manager.

        Every component is created from configuration unless passed in.

        Args:
            embedding_service: Embedding adapter
            vector_store: Vector index
            chat: Chat-completion provider
            retriever: Reranker (built on vector_store if omitted)
            answerer: Answerer (built on chat if omitted)
            chunker: Text splitter
            intent_detector: Question classifier
            top_k: Chunks passed to the chat model
            similarity_threshold: Minimum score to answer
        """
        logger.info("Initializing RAG Manager components...")

        self._owns_embedding_service = embedding_service is None
        self.embedding_service = embedding_service or HuggingFaceEmbeddingService()
        self.vector_store = vector_store or InMemoryVectorStore()
        self.intent_detector = intent_detector or IntentDetector()
        self.chunker = chunker or Chunker()
        self.retriever = retriever or Retriever(
            vector_store=self.vector_store,
            embedding_service=self.embedding_service,
            top_k=top_k,
            min_score=similarity_threshold,
            intent_detector=self.intent_detector,
        )
        self.answerer = answerer or Answerer(chat or OpenAIChatClient())

        logger.info("✓ RAG Manager initialized successfully")

    # ---------- Ingestion ----------

    def ingest_chunks(self, chunks: Sequence[str]) -> IngestResult:
        """Embed pre-split chunks and make them the index content.

        Chunk ids are positions in the sequence.

        Args:
            chunks: Ordered chunk strings

        Returns:
            IngestResult with chunk count, index size and elapsed time

        Raises:
            IngestionError: If no chunks were produced
            ValidationError: If a chunk is blank or not a string
            EmbeddingProviderError: If embedding failed after retries
        """
        started = time.perf_counter()
        if not chunks:
            raise IngestionError("No chunks created from document")
        texts = validate_chunks(chunks)

        logger.info(f"Embedding {len(texts)} chunks...")
        vectors = self.embedding_service.embed_batch(texts)
        if len(vectors) != len(texts):
            raise IngestionError(
                f"Embedding returned {len(vectors)} vectors for {len(texts)} chunks"
            )

        total = self.vector_store.replace_all(
            (position, text, vector) for position, (text, vector) in enumerate(zip(texts, vectors))
        )
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        logger.info(f"✓ Indexed {len(texts)} chunks in {elapsed_ms} ms (total={total})")
        return IngestResult(chunks=len(texts), total_vectors=total, elapsed_ms=elapsed_ms)

    def ingest_text(self, text: str, source: Optional[str] = None) -> IngestResult:
        """Split text with the default chunker and ingest it.

        Raises:
            IngestionError: If the text is blank or yields no chunks
        """
        if not text or not text.strip():
            raise IngestionError(f"No text extracted from {source or 'document'}", source=source)

        chunks = self.chunker.split(text)
        if not chunks:
            raise IngestionError("No chunks created from document", source=source)

        logger.info(f"Created {len(chunks)} chunks from {source or 'text'} ({len(text)} chars)")
        return self.ingest_chunks(chunks)

    def ingest_file(self, file_path: Union[str, Path]) -> IngestResult:
        """Extract text from a PDF or text file and ingest it.

        Raises:
            ValidationError: If the path is missing or empty
            IngestionError: If no text could be extracted
        """
        path = validate_file_path(file_path)
        logger.info(f"Processing document: {path.name}")

        try:
            text = extract_text(path)
        except ValueError as e:
            raise IngestionError(f"Cannot extract text from {path.name}: {e}", source=path.name) from e

        return self.ingest_text(text, source=path.name)

    async def ingest_chunks_async(self, chunks: Sequence[str]) -> IngestResult:
        """Run ingest_chunks in a worker thread."""
        return await asyncio.to_thread(self.ingest_chunks, chunks)

    # ---------- Questions ----------

    def ask(self, question: str) -> AskResult:
        """Answer a question about the indexed document.

        Args:
            question: User question

        Returns:
            AskResult; status EMPTY_INDEX before any ingestion and
            INSUFFICIENT_EVIDENCE when no chunk clears the threshold

        Raises:
            ValidationError: If the question is blank
            EmbeddingProviderError: If the question could not be embedded
            AnswerGenerationError: If the chat call failed
        """
        question = validate_question(question)

        if self.vector_store.size() == 0:
            logger.info("Question received before any document was indexed")
            return AskResult(answer=EMPTY_INDEX_ANSWER, status=AskStatus.EMPTY_INDEX)

        hint = self.intent_detector.detect(question)
        logger.debug(f"Intent: {hint}")

        query_vector = self.embedding_service.embed(question)
        hits = self.retriever.rerank(question, hint, query_vector)
        if not hits:
            return AskResult(
                answer=INSUFFICIENT_EVIDENCE_ANSWER,
                status=AskStatus.INSUFFICIENT_EVIDENCE,
            )

        return self.answerer.answer(question, hint, hits)

    async def ask_async(self, question: str) -> AskResult:
        """Run ask in a worker thread."""
        return await asyncio.to_thread(self.ask, question)

    # ---------- Index management ----------

    def clear(self) -> None:
        """Drop every indexed chunk."""
        logger.warning("Clearing vector index...")
        self.vector_store.clear()

    def size(self) -> int:
        return self.vector_store.size()

    def get_stats(self) -> Dict[str, Any]:
        """Get index and retrieval statistics.

        Returns:
            Dictionary with chunk count, embedding and retrieval settings
        """
        return {
            "total_chunks": self.vector_store.size(),
            "index_dimension": self.vector_store.dimension,
            "embedding_model": getattr(self.embedding_service, "model", ""),
            "embedding_dimension": self.embedding_service.dimensions(),
            "top_k": self.retriever.top_k,
            "similarity_threshold": self.retriever.min_score,
        }

    # ---------- Lifecycle ----------

    def close(self) -> None:
        """Release the embedding provider if this manager created it."""
        if self._owns_embedding_service:
            self.embedding_service.close()

    def __enter__(self) -> "RAGManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
