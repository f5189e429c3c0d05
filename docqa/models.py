"""Data models for docqa.

Defines core data structures for indexed chunks, search results,
intent hints and answers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np


class Intent(str, Enum):
    """Shape of answer a question expects."""

    SUMMARY = "summary"
    BULLET_SUMMARY = "bullet_summary"
    DEFINE = "define"
    COMPARE = "compare"
    DEFAULT = "default"


class AskStatus(str, Enum):
    """Outcome of one question."""

    ANSWERED = "answered"
    INSUFFICIENT_EVIDENCE = "insufficient_evidence"
    EMPTY_INDEX = "empty_index"


@dataclass(frozen=True)
class Chunk:
    """A text chunk stored in the vector index.

    Attributes:
        id: Caller-assigned id (position in the split sequence)
        text: Chunk text content
        vector: L2-normalized embedding
    """

    id: int
    text: str
    vector: np.ndarray = field(repr=False)

    def __post_init__(self):
        """Validate chunk after initialization."""
        if self.vector.ndim != 1 or self.vector.size == 0:
            raise ValueError(
                f"Chunk vector must be a non-empty 1-D array, got shape {self.vector.shape}"
            )

    @property
    def dimension(self) -> int:
        return int(self.vector.shape[0])


@dataclass(frozen=True)
class ScoredChunk:
    """Represents a search or rerank result.

    Attributes:
        id: ID of matched chunk
        text: Chunk text
        score: Cosine similarity, plus any rerank boosts
    """

    id: int
    text: str
    score: float

    def with_score(self, score: float) -> "ScoredChunk":
        return ScoredChunk(id=self.id, text=self.text, score=score)

    def __repr__(self) -> str:
        return (
            f"ScoredChunk(id={self.id}, score={self.score:.3f}, "
            f"text={self.text[:50]}...)"
        )


@dataclass(frozen=True)
class IntentHint:
    """Structured description of a question.

    Attributes:
        intent: Detected intent category
        term: Term to define (DEFINE only)
        section_hint: Lower-cased document section named in the question
        bullet_count: Requested number of bullets (BULLET_SUMMARY only)
    """

    intent: Intent = Intent.DEFAULT
    term: Optional[str] = None
    section_hint: Optional[str] = None
    bullet_count: Optional[int] = None


@dataclass(frozen=True)
class SourceScore:
    """A chunk id and the score it was ranked with."""

    id: int
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "score": self.score}


@dataclass
class AskResult:
    """Answer to one question.

    Attributes:
        answer: Model answer, or a fixed message for the non-answer outcomes
        sources: Chunks used to build the prompt, in ranked order
        status: Whether the question was answered
    """

    answer: str
    sources: List[SourceScore] = field(default_factory=list)
    status: AskStatus = AskStatus.ANSWERED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation (the query entrypoint response body)
        """
        return {
            "answer": self.answer,
            "sources": [source.to_dict() for source in self.sources],
        }


@dataclass
class IngestResult:
    """Outcome of one ingestion request.

    Attributes:
        chunks: Number of chunks embedded and indexed
        total_vectors: Index size after ingestion
        elapsed_ms: Wall-clock duration of the request
    """

    chunks: int
    total_vectors: int
    elapsed_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chunks": self.chunks,
            "total_vectors": self.total_vectors,
            "elapsed_ms": self.elapsed_ms,
        }
