"""Retriever service with intent-aware reranking.

Main flow:
1. Oversample candidates from the vector index (wider than the final K)
2. Reject the question if even the best raw score is below the threshold
3. Add lexical boosts: referenced section, introduction, term being defined
4. Re-sort by boosted score (stable), check the threshold again, cut to K

Raw top-K on similarity alone tends to drop the chunk that matches the
question's structure (the named section, the defined term) in favour of
chunks that are merely on topic; oversampling keeps such chunks in the pool
so the boosts can promote them.
"""

from __future__ import annotations

import logging
import unicodedata
from typing import List, Optional

from docqa.config import get_settings
from docqa.models import Intent, IntentHint, ScoredChunk
from docqa.services.embeddings import EmbeddingProvider
from docqa.services.intent import IntentDetector, is_intro_section
from docqa.services.vector_store import InMemoryVectorStore

logger = logging.getLogger(__name__)

SECTION_BOOST = 0.08
INTRO_BOOST = 0.06
TERM_BOOST = 0.12
INTRO_MARKERS = ("mở đầu", "introduction")


def _fold(text: str) -> str:
    return unicodedata.normalize("NFC", text).lower()


class Retriever:
    """Oversample-then-boost retrieval over an InMemoryVectorStore.

    Attributes:
        vector_store: Index to search
        embedding_service: Used by retrieve() to embed the question
        top_k: Default number of chunks returned
        min_score: Default similarity threshold
        oversample_factor: Candidate pool is max(factor * k, k + 2)
        section_boost, intro_boost, term_boost: Additive score boosts
    """

    def __init__(
        self,
        vector_store: InMemoryVectorStore,
        embedding_service: Optional[EmbeddingProvider] = None,
        top_k: Optional[int] = None,
        min_score: Optional[float] = None,
        oversample_factor: Optional[int] = None,
        section_boost: float = SECTION_BOOST,
        intro_boost: float = INTRO_BOOST,
        term_boost: float = TERM_BOOST,
        intent_detector: Optional[IntentDetector] = None,
    ) -> None:
        settings = get_settings()
        self.vector_store = vector_store
        self.embedding_service = embedding_service
        self.top_k = top_k if top_k is not None else settings.TOP_K
        self.min_score = min_score if min_score is not None else settings.SIMILARITY_THRESHOLD
        self.oversample_factor = (
            oversample_factor if oversample_factor is not None else settings.OVERSAMPLE_FACTOR
        )
        self.section_boost = section_boost
        self.intro_boost = intro_boost
        self.term_boost = term_boost
        self.intent_detector = intent_detector or IntentDetector()

        if self.oversample_factor < 1:
            raise ValueError(f"oversample_factor must be >= 1, got {self.oversample_factor}")

        logger.info(
            f"✓ Retriever initialized with top_k={self.top_k}, threshold={self.min_score}"
        )

    # ---------- Public API ----------

    def oversample_size(self, k: int) -> int:
        return max(self.oversample_factor * k, k + 2)

    def retrieve(
        self,
        question: str,
        hint: Optional[IntentHint] = None,
        k: Optional[int] = None,
        min_score: Optional[float] = None,
    ) -> List[ScoredChunk]:
        """Embed the question and rerank.

        Args:
            question: User question
            hint: Intent hint (detected from the question if omitted)
            k: Number of chunks to return (default top_k)
            min_score: Threshold (default min_score)

        Returns:
            Ranked chunks, empty when the evidence is insufficient
        """
        if self.embedding_service is None:
            raise ValueError("retrieve() needs an embedding_service")
        hint = hint or self.intent_detector.detect(question)
        query_vector = self.embedding_service.embed(question)
        return self.rerank(question, hint, query_vector, k=k, min_score=min_score)

    def rerank(
        self,
        question: str,
        hint: IntentHint,
        query_vector,
        k: Optional[int] = None,
        min_score: Optional[float] = None,
    ) -> List[ScoredChunk]:
        """Oversample, boost, re-sort and truncate.

        Args:
            question: User question (used for logging)
            hint: Intent hint driving the boosts
            query_vector: Normalized question embedding
            k: Number of chunks to return (default top_k)
            min_score: Threshold (default min_score)

        Returns:
            Up to k chunks with boosted scores, or an empty list when no
            candidate clears the threshold
        """
        k = k if k is not None else self.top_k
        threshold = min_score if min_score is not None else self.min_score
        if k <= 0:
            return []

        candidates = self.vector_store.top_k(query_vector, self.oversample_size(k))
        if not candidates or candidates[0].score < threshold:
            best = candidates[0].score if candidates else None
            logger.info(f"No candidate above threshold {threshold:.2f} (best raw={best})")
            return []

        boosted = [candidate.with_score(candidate.score + self.boost_for(candidate.text, hint))
                   for candidate in candidates]
        # list.sort is stable, so exact ties keep their raw-score order
        boosted.sort(key=lambda chunk: chunk.score, reverse=True)

        if boosted[0].score < threshold:
            logger.info(f"No boosted candidate above threshold {threshold:.2f}")
            return []

        hits = boosted[:k]
        logger.info(
            f"Reranked {len(candidates)} candidates for '{question[:50]}' "
            f"(intent={hint.intent.value}); kept {len(hits)}"
        )
        return hits

    def boost_for(self, text: str, hint: IntentHint) -> float:
        """Sum of the boosts a chunk text earns under a hint."""
        boost = 0.0
        text_folded = _fold(text)

        if hint.section_hint:
            section = _fold(hint.section_hint)
            if section in text_folded:
                boost += self.section_boost
            if is_intro_section(section) and any(marker in text_folded for marker in INTRO_MARKERS):
                boost += self.intro_boost

        if hint.intent == Intent.DEFINE and hint.term and _fold(hint.term) in text_folded:
            boost += self.term_boost

        return boost
