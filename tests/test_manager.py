"""Tests for RAGManager end to end, with mocked providers."""

import asyncio

import httpx
import numpy as np
import pytest

from docqa.exceptions import (
    AnswerGenerationError,
    EmbeddingProviderError,
    IngestionError,
    ValidationError,
)
from docqa.models import AskStatus, Intent
from docqa.services.answerer import SYSTEM_PROMPTS
from docqa.services.embeddings import EmbeddingProvider
from docqa.services.manager import EMPTY_INDEX_ANSWER, INSUFFICIENT_EVIDENCE_ANSWER, RAGManager
from docqa.services.vector_store import InMemoryVectorStore

from tests.conftest import FakeChat, FakeEmbeddingAPI


@pytest.fixture
def scenario_api():
    """Embedding endpoint with hand-picked vectors (query axis is x)."""
    return FakeEmbeddingAPI(
        vectors={
            "What is X?": [1.0, 0.0, 0.0],
            "X is defined as Y.": [0.6, 0.8, 0.0],
            "Y appears in many places.": [0.7, 0.0, 0.714],
            "Tell me about the weather": [1.0, 0.0, 0.0],
            "Chapter one covers history.": [0.2, 0.9798, 0.0],
            "Chapter two covers geography.": [0.1, 0.0, 0.995],
        }
    )


@pytest.fixture
def scenario_manager(scenario_api, make_embedding_service, vector_store, fake_chat):
    return RAGManager(
        embedding_service=make_embedding_service(scenario_api),
        vector_store=vector_store,
        chat=fake_chat,
        top_k=4,
        similarity_threshold=0.35,
    )


class TestAsk:
    """Test question answering outcomes."""

    def test_empty_index(self, manager, fake_chat, embedding_api):
        """Asking before ingestion returns the empty-index response."""
        result = manager.ask("What is RAG?")

        assert result.answer == EMPTY_INDEX_ANSWER
        assert result.sources == []
        assert result.status == AskStatus.EMPTY_INDEX
        assert fake_chat.calls == []
        assert embedding_api.requests == []

    def test_empty_index_after_clear(self, manager):
        manager.ingest_chunks(["some text"])
        manager.clear()

        assert manager.ask("anything?").status == AskStatus.EMPTY_INDEX

    def test_define_term_is_boosted(self, scenario_manager, vector_store, fake_chat):
        """The chunk containing the defined term ranks first with the term boost."""
        scenario_manager.ingest_chunks(["Y appears in many places.", "X is defined as Y."])
        query = scenario_manager.embedding_service.embed("What is X?")
        raw = {hit.id: hit.score for hit in vector_store.top_k(query, 2)}

        result = scenario_manager.ask("What is X?")

        assert result.status == AskStatus.ANSWERED
        assert result.sources[0].id == 1
        assert result.sources[0].score == pytest.approx(raw[1] + 0.12, abs=1e-6)
        assert raw[0] > raw[1]

        system, user = fake_chat.calls[0]
        assert 'Term to define: "X"' in user
        assert user.index("[Chunk #1") < user.index("[Chunk #0")

    def test_insufficient_evidence(self, scenario_manager, fake_chat):
        """Candidates exist but none clears the threshold."""
        scenario_manager.ingest_chunks(
            ["Chapter one covers history.", "Chapter two covers geography."]
        )

        result = scenario_manager.ask("Tell me about the weather")

        assert result.answer == INSUFFICIENT_EVIDENCE_ANSWER
        assert result.sources == []
        assert result.status == AskStatus.INSUFFICIENT_EVIDENCE
        assert fake_chat.calls == []

    def test_answer_returned_verbatim(self, manager, fake_chat, sample_text):
        manager.ingest_text(sample_text)
        fake_chat.reply = "  Câu trả lời nguyên văn.\n"

        result = manager.ask("Hệ thống hoạt động như thế nào?")

        # fallback vectors share a dominant axis, so every chunk clears 0.35
        assert result.answer == "  Câu trả lời nguyên văn.\n"
        assert 1 <= len(result.sources) <= 4

    def test_blank_question_rejected(self, manager):
        with pytest.raises(ValidationError):
            manager.ask("   ")

    def test_chat_failure_surfaces(self, manager, fake_chat):
        manager.ingest_chunks(["some text"])
        fake_chat.error = RuntimeError("boom")

        with pytest.raises(AnswerGenerationError):
            manager.ask("some question")

    def test_uses_detected_intent_template(self, manager, fake_chat):
        manager.ingest_chunks(["one", "two"])
        manager.ask("Tóm tắt 2 ý chính")

        system, user = fake_chat.calls[0]
        assert system == SYSTEM_PROMPTS[Intent.BULLET_SUMMARY]
        assert "Return exactly 2 bullets." in user


class TestIngest:
    """Test ingestion."""

    def test_batched_ingestion(self, manager, embedding_api, vector_store):
        """25 chunks become 3 embedding calls and 25 ordered entries."""
        chunks = [f"chunk number {i}" for i in range(25)]

        result = manager.ingest_chunks(chunks)

        assert [len(batch) for batch in embedding_api.requests] == [10, 10, 5]
        assert result.chunks == 25
        assert result.total_vectors == 25
        assert result.elapsed_ms >= 0
        assert vector_store.size() == 25
        assert [vector_store.get(i).text for i in range(25)] == chunks

    def test_reingest_replaces_index(self, manager, vector_store):
        manager.ingest_chunks(["a", "b", "c"])
        manager.ingest_chunks(["d"])

        assert vector_store.size() == 1
        assert vector_store.get(0).text == "d"

    def test_failed_ingestion_keeps_previous_index(self, manager, embedding_api, vector_store):
        manager.ingest_chunks(["old one", "old two"])
        embedding_api.failures = [500, 500, 500]

        with pytest.raises(EmbeddingProviderError):
            manager.ingest_chunks(["new one", "new two"])

        assert vector_store.size() == 2
        assert vector_store.get(0).text == "old one"

    def test_failure_in_later_batch_adds_nothing(self, make_embedding_service, fake_chat):
        """The first sub-batch succeeds, the second never does."""

        class SecondBatchDown(FakeEmbeddingAPI):
            def handler(self, request):
                response = super().handler(request)
                if "c10" in self.requests[-1]:
                    return httpx.Response(500, json={"error": "down"})
                return response

        store = InMemoryVectorStore()
        manager = RAGManager(
            embedding_service=make_embedding_service(SecondBatchDown()),
            vector_store=store,
            chat=fake_chat,
        )

        with pytest.raises(EmbeddingProviderError):
            manager.ingest_chunks([f"c{i}" for i in range(15)])

        assert store.size() == 0

    def test_empty_chunk_list(self, manager):
        with pytest.raises(IngestionError, match="No chunks"):
            manager.ingest_chunks([])

    def test_blank_chunk_rejected(self, manager, vector_store):
        with pytest.raises(ValidationError):
            manager.ingest_chunks(["ok", "  "])

        assert vector_store.size() == 0

    def test_blank_text(self, manager):
        with pytest.raises(IngestionError):
            manager.ingest_text("   \n ")

    def test_ingest_text_splits(self, manager, sample_text):
        result = manager.ingest_text(sample_text)

        assert result.chunks >= 1
        assert manager.size() == result.chunks

    def test_ingest_txt_file(self, manager, tmp_path, sample_text):
        path = tmp_path / "notes.txt"
        path.write_text(sample_text, encoding="utf-8")

        result = manager.ingest_file(path)

        assert result.total_vectors == manager.size()

    def test_unsupported_file(self, manager, tmp_path):
        path = tmp_path / "table.xlsx"
        path.write_bytes(b"not really a spreadsheet")

        with pytest.raises(IngestionError):
            manager.ingest_file(path)

    def test_missing_file(self, manager, tmp_path):
        with pytest.raises(ValidationError):
            manager.ingest_file(tmp_path / "missing.pdf")


class TestAsync:
    """Test the asyncio wrappers."""

    def test_async_round_trip(self, manager):
        async def run():
            await manager.ingest_chunks_async(["alpha text", "beta text"])
            return await manager.ask_async("alpha?")

        result = asyncio.run(run())

        assert result.status == AskStatus.ANSWERED

    def test_concurrent_questions(self, manager, fake_chat):
        manager.ingest_chunks(["alpha text", "beta text"])

        async def run():
            return await asyncio.gather(*(manager.ask_async(f"question {i}") for i in range(5)))

        results = asyncio.run(run())

        assert len(results) == 5
        assert len(fake_chat.calls) == 5


class TestStats:
    """Test index statistics."""

    def test_stats(self, manager):
        manager.ingest_chunks(["a", "b"])

        stats = manager.get_stats()

        assert stats["total_chunks"] == 2
        assert stats["index_dimension"] == 3
        assert stats["embedding_model"] == "test/embedding-model"
        assert stats["top_k"] == 4
        assert stats["similarity_threshold"] == 0.35

    def test_clear_is_idempotent(self, manager):
        manager.ingest_chunks(["a"])
        manager.clear()
        manager.clear()

        assert manager.size() == 0


class KeywordEmbeddings(EmbeddingProvider):
    """Provider keyed on words, with unnormalized output."""

    AXES = ("rag", "retrieval", "weather")

    def embed_texts(self, texts):
        return [[2.0 * (axis in text.lower()) + 0.1 for axis in self.AXES] for text in texts]

    def dimensions(self):
        return len(self.AXES)


class TestCustomProvider:
    """Test a manager running on any EmbeddingProvider."""

    def test_ask_with_custom_provider(self, vector_store, fake_chat):
        manager = RAGManager(
            embedding_service=KeywordEmbeddings(),
            vector_store=vector_store,
            chat=fake_chat,
            top_k=2,
            similarity_threshold=0.35,
        )
        manager.ingest_chunks(["The weather is sunny.", "RAG uses retrieval before generation."])

        result = manager.ask("What is RAG?")

        assert result.status == AskStatus.ANSWERED
        assert result.sources[0].id == 1
        norms = [np.linalg.norm(vector_store.get(i).vector) for i in range(2)]
        assert norms == pytest.approx([1.0, 1.0], abs=1e-6)

    def test_stats_without_model_name(self, vector_store, fake_chat):
        manager = RAGManager(embedding_service=KeywordEmbeddings(), vector_store=vector_store, chat=fake_chat)

        stats = manager.get_stats()

        assert stats["embedding_model"] == ""
        assert stats["embedding_dimension"] == 3


class TestLifecycle:
    """Test resource cleanup."""

    def test_close_releases_default_embedding_client(self, fake_chat):
        manager = RAGManager(chat=fake_chat)

        manager.close()

        assert manager.embedding_service._client.is_closed

    def test_injected_service_left_open(self, manager, embedding_service):
        with manager as entered:
            assert entered is manager

        assert not embedding_service._client.is_closed

    def test_context_manager_closes_on_error(self, fake_chat):
        with pytest.raises(RuntimeError):
            with RAGManager(chat=fake_chat) as manager:
                raise RuntimeError("stop")

        assert manager.embedding_service._client.is_closed


def test_default_chat_client_needs_key(make_embedding_service, monkeypatch):
    """Without a chat key the manager still builds; the first answer fails."""
    monkeypatch.setenv("OPENAI_API_KEY", "")
    manager = RAGManager(embedding_service=make_embedding_service(FakeEmbeddingAPI()))
    manager.ingest_chunks(["text"])

    with pytest.raises(AnswerGenerationError):
        manager.ask("text?")
