"""In-memory vector index.

Stores (id, text, vector) chunks of a single document and answers exact
top-K cosine similarity queries by full scan. Vectors are expected to be
L2-normalized, so the score is a plain dot product.

The index is the only state shared between requests. Mutations happen under
a lock; a search copies the entry list under the same lock and scores the
copy, so a concurrent clear never produces a partially visible state.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional, Tuple

import numpy as np

from docqa.exceptions import VectorStoreError
from docqa.models import Chunk, ScoredChunk

logger = logging.getLogger(__name__)


class InMemoryVectorStore:
    """Exact cosine-similarity index held in process memory.

    Attributes:
        dimension: Vector width fixed by the first insert (None when empty)
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._chunks: List[Chunk] = []
        self._ids: set = set()
        self._dimension: Optional[int] = None

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    # ---------- Public API ----------

    def add(self, chunk_id: int, text: str, vector) -> None:
        """Append one chunk.

        Args:
            chunk_id: Unique id (position in the split sequence)
            text: Chunk text
            vector: Normalized embedding

        Raises:
            VectorStoreError: On duplicate id or dimension mismatch
        """
        self.add_many([(chunk_id, text, vector)])

    def add_many(self, items: Iterable[Tuple[int, str, object]]) -> int:
        """Append several chunks atomically.

        Either every item is added or none is.

        Returns:
            Number of chunks added
        """
        chunks = [self._make_chunk(chunk_id, text, vector) for chunk_id, text, vector in items]
        with self._lock:
            self._check_batch(chunks, self._ids, self._dimension)
            self._append(chunks)
            logger.debug(f"Added {len(chunks)} chunks (size={len(self._chunks)})")
        return len(chunks)

    def replace_all(self, items: Iterable[Tuple[int, str, object]]) -> int:
        """Swap the whole index content in one step.

        Concurrent searches see either the old content or the new one.

        Returns:
            Number of chunks now indexed
        """
        chunks = [self._make_chunk(chunk_id, text, vector) for chunk_id, text, vector in items]
        with self._lock:
            self._check_batch(chunks, set(), None)
            self._chunks = []
            self._ids = set()
            self._dimension = None
            self._append(chunks)
            logger.info(f"Index replaced: {len(self._chunks)} chunks")
            return len(self._chunks)

    def size(self) -> int:
        with self._lock:
            return len(self._chunks)

    def clear(self) -> None:
        """Remove all chunks. The only deletion primitive."""
        with self._lock:
            removed = len(self._chunks)
            self._chunks = []
            self._ids = set()
            self._dimension = None
        logger.info(f"Cleared vector index ({removed} chunks removed)")

    def get(self, chunk_id: int) -> Optional[Chunk]:
        with self._lock:
            for chunk in self._chunks:
                if chunk.id == chunk_id:
                    return chunk
        return None

    def top_k(self, query_vector, k: int) -> List[ScoredChunk]:
        """Return the k chunks most similar to the query.

        Args:
            query_vector: Normalized query embedding
            k: Maximum number of results

        Returns:
            ScoredChunk list sorted by score descending, ties by ascending id;
            length is at most min(k, size)

        Raises:
            VectorStoreError: If the query dimension differs from the index
        """
        with self._lock:
            snapshot = list(self._chunks)
            dimension = self._dimension

        if k <= 0 or not snapshot:
            return []

        query = np.asarray(query_vector, dtype=np.float32).reshape(-1)
        if query.shape[0] != dimension:
            raise VectorStoreError(
                f"Query dimension {query.shape[0]} does not match index dimension {dimension}",
                operation="search",
            )

        matrix = np.vstack([chunk.vector for chunk in snapshot])
        scores = (matrix.astype(np.float64) @ query.astype(np.float64)).tolist()
        ids = [chunk.id for chunk in snapshot]

        # lexsort sorts by the last key first: score descending, then id ascending
        order = np.lexsort((np.asarray(ids), -np.asarray(scores)))[:k]
        return [
            ScoredChunk(id=snapshot[i].id, text=snapshot[i].text, score=float(scores[i]))
            for i in order
        ]

    # ---------- Internal methods ----------

    @staticmethod
    def _make_chunk(chunk_id: int, text: str, vector) -> Chunk:
        arr = np.asarray(vector, dtype=np.float32).reshape(-1)
        try:
            return Chunk(id=int(chunk_id), text=text, vector=arr)
        except ValueError as e:
            raise VectorStoreError(str(e), operation="add") from e

    @staticmethod
    def _check_batch(chunks: List[Chunk], existing_ids: set, dimension: Optional[int]) -> None:
        seen = set(existing_ids)
        for chunk in chunks:
            if chunk.id in seen:
                raise VectorStoreError(f"Duplicate chunk id: {chunk.id}", operation="add")
            seen.add(chunk.id)

            if dimension is None:
                dimension = chunk.dimension
            elif chunk.dimension != dimension:
                raise VectorStoreError(
                    f"Chunk {chunk.id} has dimension {chunk.dimension}, index expects {dimension}",
                    operation="add",
                )

    def _append(self, chunks: List[Chunk]) -> None:
        for chunk in chunks:
            if self._dimension is None:
                self._dimension = chunk.dimension
            self._chunks.append(chunk)
            self._ids.add(chunk.id)
