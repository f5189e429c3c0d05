"""Pytest configuration and fixtures for docqa tests."""

import hashlib
import json
from typing import Dict, List, Optional

import httpx
import numpy as np
import pytest

from docqa.config import get_settings
from docqa.services.embeddings import HuggingFaceEmbeddingService
from docqa.services.llm_client import ChatProvider
from docqa.services.manager import RAGManager
from docqa.services.vector_store import InMemoryVectorStore


class FakeEmbeddingAPI:
    """Deterministic stand-in for the Hugging Face inference endpoint.

    Known texts map to fixed vectors; anything else gets a vector close to
    the first axis, perturbed by its hash, so unrelated texts still score
    well above the default threshold against each other. Queued failures are consumed one per request before
    normal responses resume: an int is an HTTP status, an Exception is
    raised as a transport error, anything else is returned as the JSON body.
    """

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, dim: int = 3):
        self.vectors = dict(vectors or {})
        self.dim = dim
        self.requests: List[List[str]] = []
        self.bodies: List[dict] = []
        self.headers: List[httpx.Headers] = []
        self.failures: list = []

    def vector_for(self, text: str) -> List[float]:
        if text in self.vectors:
            return self.vectors[text]
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [1.0] + [digest[i % len(digest)] / 2550.0 for i in range(self.dim - 1)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        inputs = body["inputs"]
        batch = [inputs] if isinstance(inputs, str) else list(inputs)
        self.requests.append(batch)
        self.bodies.append(body)
        self.headers.append(request.headers)

        if self.failures:
            failure = self.failures.pop(0)
            if isinstance(failure, Exception):
                raise failure
            if isinstance(failure, int):
                return httpx.Response(failure, json={"error": "upstream failure"})
            return httpx.Response(200, json=failure)

        if isinstance(inputs, str):
            return httpx.Response(200, json=self.vector_for(inputs))
        return httpx.Response(200, json=[self.vector_for(text) for text in batch])


class FakeChat(ChatProvider):
    """Chat provider that records prompts and returns a canned reply."""

    def __init__(self, reply: str = "Câu trả lời.", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[tuple] = []

    def complete(self, system: str, user: str) -> str:
        self.calls.append((system, user))
        if self.error is not None:
            raise self.error
        return self.reply


def unit(*values: float) -> np.ndarray:
    """Normalized float32 vector."""
    arr = np.asarray(values, dtype=np.float32)
    return arr / np.linalg.norm(arr)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test read configuration afresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def embedding_api():
    return FakeEmbeddingAPI()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_embedding_service(sleeps):
    """Factory building an embedding service wired to a FakeEmbeddingAPI."""

    def _make(api: FakeEmbeddingAPI, **kwargs) -> HuggingFaceEmbeddingService:
        options = dict(
            api_key="hf_test_key",
            model="test/embedding-model",
            base_url="https://embeddings.test/models",
            batch_size=10,
            max_retries=3,
            retry_delay_ms=1000,
            sleep=sleeps.append,
        )
        options.update(kwargs)
        return HuggingFaceEmbeddingService(
            http_client=httpx.Client(transport=httpx.MockTransport(api.handler)),
            **options,
        )

    return _make


@pytest.fixture
def embedding_service(embedding_api, make_embedding_service):
    return make_embedding_service(embedding_api)


@pytest.fixture
def vector_store():
    return InMemoryVectorStore()


@pytest.fixture
def fake_chat():
    return FakeChat()


@pytest.fixture
def manager(embedding_service, vector_store, fake_chat):
    return RAGManager(
        embedding_service=embedding_service,
        vector_store=vector_store,
        chat=fake_chat,
        top_k=4,
        similarity_threshold=0.35,
    )


@pytest.fixture
def sample_text():
    """Sample document text for testing."""
    return """
    Mở đầu. Tài liệu này giới thiệu hệ thống hỏi đáp dựa trên truy xuất.

    RAG (Retrieval-Augmented Generation) là cách kết hợp tìm kiếm đoạn văn
    liên quan với sinh câu trả lời bằng mô hình ngôn ngữ.

    Hệ thống hoạt động như sau:
    1. Tải tài liệu
    2. Chia thành các đoạn
    3. Tạo embeddings
    4. Lưu vào chỉ mục vector
    5. Tìm kiếm ngữ nghĩa và trả lời
    """
