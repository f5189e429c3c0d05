"""Embedding service for docqa.

Generates vector embeddings through the Hugging Face inference API.

Texts are sent in fixed-size sub-batches, each retried with linear backoff,
and every returned vector is L2-normalized so a plain dot product downstream
equals cosine similarity.

Output width depends on the model: 384 for all-MiniLM-L6-v2,
1024 for multilingual-e5-large.
"""

from __future__ import annotations

import logging
import math
import time
from numbers import Real
from typing import Any, Callable, List, Optional

import httpx
import numpy as np

from docqa.config import get_settings
from docqa.exceptions import (
    ConfigurationMissingError,
    EmbeddingProviderError,
    MalformedResponseError,
    ProviderUnavailableError,
)

logger = logging.getLogger(__name__)

NORM_EPSILON = 1e-12

# Substring of the model name -> output dimension
MODEL_DIMENSIONS = {
    "multilingual-e5-large": 1024,
    "all-MiniLM-L6-v2": 384,
}
DEFAULT_DIMENSION = 768


def model_dimension(model_name: str) -> int:
    """Look up the embedding width of a model.

    Args:
        model_name: Model identifier, e.g. sentence-transformers/all-MiniLM-L6-v2

    Returns:
        Dimension from MODEL_DIMENSIONS, or DEFAULT_DIMENSION for unknown models
    """
    for key, dimension in MODEL_DIMENSIONS.items():
        if key in model_name:
            return dimension
    return DEFAULT_DIMENSION


def normalize_vector(vector: Any) -> np.ndarray:
    """L2-normalize a vector.

    Divides by sqrt(max(sum of squares, NORM_EPSILON)) so an all-zero vector
    stays all-zero instead of producing NaNs.
    """
    arr = np.asarray(vector, dtype=np.float32)
    sum_squares = float(np.dot(arr.astype(np.float64), arr.astype(np.float64)))
    norm = math.sqrt(max(sum_squares, NORM_EPSILON))
    return (arr / norm).astype(np.float32)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def parse_embedding_response(payload: Any) -> List[List[float]]:
    """Interpret an inference API payload.

    Two shapes are accepted:
        [0.1, 0.2, ...]                 one text
        [[0.1, 0.2, ...], [...], ...]   a batch

    Args:
        payload: Decoded JSON body

    Returns:
        List of raw (not normalized) vectors

    Raises:
        MalformedResponseError: For any other shape
    """
    if not isinstance(payload, list) or not payload:
        raise MalformedResponseError(
            f"Unexpected response format from embedding API: {type(payload).__name__}"
        )

    if all(_is_number(value) for value in payload):
        return [[float(value) for value in payload]]

    if all(
        isinstance(row, list) and row and all(_is_number(value) for value in row)
        for row in payload
    ):
        return [[float(value) for value in row] for row in payload]

    raise MalformedResponseError("Unexpected response format from embedding API")


class EmbeddingProvider:
    """Embedding capability.

    A provider turns texts into vectors. Subclasses implement embed_texts and
    dimensions; embed and embed_batch normalize on top of them. Chat
    completion is a separate capability (see docqa.services.llm_client.ChatProvider).
    """

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """Embed texts, one raw vector per text in input order."""
        raise NotImplementedError

    def dimensions(self) -> int:
        """Width of the vectors this provider returns."""
        raise NotImplementedError

    def embed_batch(self, texts: List[str]) -> List[np.ndarray]:
        """Embed texts and L2-normalize every vector."""
        if not texts:
            return []
        vectors = self.embed_texts(texts)
        if len(vectors) != len(texts):
            raise MalformedResponseError(
                f"Embedding provider returned {len(vectors)} vectors for {len(texts)} texts"
            )
        return [normalize_vector(vector) for vector in vectors]

    def embed(self, text: str) -> np.ndarray:
        return self.embed_batch([text])[0]

    def close(self) -> None:
        """Release provider resources (nothing by default)."""


class HuggingFaceEmbeddingService(EmbeddingProvider):
    """Embedding service backed by the Hugging Face inference API.

    Attributes:
        model: Model identifier appended to base_url
        base_url: Inference endpoint prefix
        batch_size: Texts per request
        max_retries: Attempts per sub-batch
        retry_delay_ms: Base delay; attempt N waits N * retry_delay_ms
        timeout: HTTP timeout in seconds
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        batch_size: Optional[int] = None,
        max_retries: Optional[int] = None,
        retry_delay_ms: Optional[int] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize embedding service.

        Args:
            api_key: Bearer token (from config if omitted)
            model: Model name (from config if omitted)
            base_url: Endpoint prefix (from config if omitted)
            batch_size: Sub-batch size (from config if omitted)
            max_retries: Attempts per sub-batch (from config if omitted)
            retry_delay_ms: Backoff base in milliseconds (from config if omitted)
            timeout: HTTP timeout in seconds (from config if omitted)
            http_client: Pre-built httpx client, e.g. with a mock transport
            sleep: Called with the backoff delay in seconds between attempts
        """
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.HUGGINGFACE_API_KEY
        self.model = model or settings.EMBEDDING_MODEL
        self.base_url = (base_url or settings.EMBEDDING_BASE_URL).rstrip("/")
        self.batch_size = batch_size if batch_size is not None else settings.EMBEDDING_BATCH_SIZE
        self.max_retries = max_retries if max_retries is not None else settings.EMBEDDING_MAX_RETRIES
        self.retry_delay_ms = (
            retry_delay_ms if retry_delay_ms is not None else settings.EMBEDDING_RETRY_DELAY_MS
        )
        self.timeout = timeout if timeout is not None else settings.EMBEDDING_TIMEOUT

        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.max_retries <= 0:
            raise ValueError(f"max_retries must be positive, got {self.max_retries}")

        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=self.timeout)
        self._sleep = sleep

        if not self.api_key:
            logger.warning("Hugging Face API key is not set; embedding calls will fail")
        logger.info(
            f"Embedding service ready: model={self.model}, dim={self.dimensions()}, "
            f"batch_size={self.batch_size}"
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/{self.model}"

    # ---------- Public API ----------

    def embed(self, text: str) -> np.ndarray:
        """Embed one text.

        Args:
            text: Source text

        Returns:
            Normalized vector

        Raises:
            EmbeddingProviderError: If all attempts failed
            ConfigurationMissingError: If the API key is missing or rejected
        """
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: List[str]) -> List[np.ndarray]:
        """Embed texts in sub-batches of batch_size.

        Sub-batches are sent sequentially and concatenated in input order.

        Args:
            texts: Source texts

        Returns:
            One normalized vector per input text

        Raises:
            EmbeddingProviderError: If any sub-batch failed after all retries
            ConfigurationMissingError: If the API key is missing or rejected
        """
        if not texts:
            return []

        results: List[np.ndarray] = []
        total_batches = math.ceil(len(texts) / self.batch_size)
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start : start + self.batch_size]
            logger.debug(
                f"Embedding batch {start // self.batch_size + 1}/{total_batches} "
                f"({len(batch)} texts)"
            )
            results.extend(self._embed_with_retry(batch))

        logger.info(f"Generated {len(results)} embeddings (dim={results[0].shape[0]})")
        return results

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        return [vector.tolist() for vector in self.embed_batch(texts)]

    def dimensions(self) -> int:
        return model_dimension(self.model)

    def close(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_client:
            self._client.close()

    # ---------- Internal methods ----------

    def _embed_with_retry(self, batch: List[str]) -> List[np.ndarray]:
        """Embed one sub-batch, retrying with linear backoff."""
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                return self._embed_once(batch)
            except (ProviderUnavailableError, MalformedResponseError) as e:
                last_error = e
                if attempt < self.max_retries:
                    delay_ms = self.retry_delay_ms * attempt
                    logger.warning(
                        f"Embedding attempt {attempt}/{self.max_retries} failed, "
                        f"retrying in {delay_ms}ms: {e}"
                    )
                    self._sleep(delay_ms / 1000.0)

        logger.error(
            f"Embedding API failed after {self.max_retries} attempts: {last_error}"
        )
        raise EmbeddingProviderError(
            f"Embedding API failed after {self.max_retries} attempts: {last_error}",
            last_error=last_error,
            batch_size=len(batch),
        ) from last_error

    def _embed_once(self, batch: List[str]) -> List[np.ndarray]:
        """Single API call for one sub-batch."""
        if not self.api_key:
            raise ConfigurationMissingError(
                "Hugging Face API key is not configured",
                config_key="HUGGINGFACE_API_KEY",
            )

        body = {"inputs": batch[0] if len(batch) == 1 else batch}
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

        try:
            response = self._client.post(self.endpoint, json=body, headers=headers)
        except httpx.TimeoutException as e:
            raise ProviderUnavailableError(f"Embedding request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(f"Embedding request failed: {e}") from e

        if response.status_code in (401, 403):
            raise ConfigurationMissingError(
                f"Embedding API rejected credentials (status {response.status_code})",
                config_key="HUGGINGFACE_API_KEY",
            )
        if response.status_code != 200:
            raise ProviderUnavailableError(
                f"Embedding API returned status: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Embedding API returned invalid JSON: {e}") from e

        vectors = parse_embedding_response(payload)
        if len(vectors) != len(batch):
            raise MalformedResponseError(
                f"Embedding API returned {len(vectors)} vectors for {len(batch)} texts"
            )

        width = len(vectors[0])
        if width != self.dimensions():
            logger.warning(
                f"Model {self.model} returned dim={width}, expected {self.dimensions()}"
            )

        return [normalize_vector(vector) for vector in vectors]
