"""Chunking service for docqa.

Splits document text into overlapping word windows. This is the default
chunker used when text (rather than pre-split chunks) is ingested; callers
with their own splitter can pass chunk strings straight to the manager.

The chunk's index in the returned list becomes its id in the vector index.
"""

from __future__ import annotations

import re
from typing import List, Optional

from docqa.config import get_settings
from docqa.exceptions import ChunkingError


class Chunker:
    """Word-window text splitter.

    Algorithm:
    1. Collapse whitespace and split into words.
    2. Emit windows of chunk_size words.
    3. Advance by chunk_size - chunk_overlap words.
    """

    def __init__(
        self,
        chunk_size: Optional[int] = None,
        chunk_overlap: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self.chunk_size = chunk_size if chunk_size is not None else settings.CHUNK_SIZE
        self.chunk_overlap = chunk_overlap if chunk_overlap is not None else settings.CHUNK_OVERLAP

        if self.chunk_size <= 0:
            raise ChunkingError("chunk_size must be > 0")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ChunkingError("chunk_overlap must be between 0 and chunk_size - 1")

    # ---------- Public API ----------

    def split(self, text: str) -> List[str]:
        """Split text into chunks.

        Args:
            text: Source document text

        Returns:
            Ordered chunk strings; empty for blank text
        """
        tokens = self._tokenize(text)
        if not tokens:
            return []

        chunks: List[str] = []
        step = self.chunk_size - self.chunk_overlap
        idx = 0

        while idx < len(tokens):
            window = tokens[idx : idx + self.chunk_size]
            chunks.append(" ".join(window))
            if idx + self.chunk_size >= len(tokens):
                break
            idx += step

        return chunks

    # ---------- Internal methods ----------

    @staticmethod
    def _tokenize(text: str) -> List[str]:
        normalized = re.sub(r"\s+", " ", text or "").strip()
        if not normalized:
            return []
        return normalized.split(" ")
