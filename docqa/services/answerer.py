"""Prompt assembly and answer generation.

Each intent has its own system instruction. All of them restrict the model
to the supplied context, fix the response format, and tell it to say the
context is insufficient rather than invent an answer.

The user message carries the ranked chunks as a delimited context block,
an intent-specific formatting directive, and the original question.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from docqa.exceptions import AnswerGenerationError
from docqa.models import AskResult, Intent, IntentHint, ScoredChunk, SourceScore
from docqa.services.llm_client import ChatProvider

logger = logging.getLogger(__name__)

CONTEXT_START = "=== CONTEXT START ==="
CONTEXT_END = "=== CONTEXT END ==="

SYSTEM_PROMPTS: Dict[Intent, str] = {
    Intent.SUMMARY: (
        "Bạn là trợ lý AI phân tích tài liệu. Nhiệm vụ: tóm tắt nội dung.\n\n"
        "QUY TẮC:\n"
        "- CHỈ dùng thông tin trong context được cung cấp\n"
        "- Viết ngắn gọn, súc tích bằng tiếng Việt, tập trung vào ý chính\n"
        "- Không thêm thông tin nằm ngoài context\n"
        "- Nếu context không đủ, trả lời rõ: \"Tôi không có đủ thông tin để trả lời\"\n\n"
        "ĐỊNH DẠNG: Một đoạn văn ngắn (3-5 câu)"
    ),
    Intent.BULLET_SUMMARY: (
        "Bạn là trợ lý AI phân tích tài liệu. Nhiệm vụ: tóm tắt thành các gạch đầu dòng.\n\n"
        "QUY TẮC:\n"
        "- CHỈ dùng thông tin trong context được cung cấp\n"
        "- Mỗi gạch đầu dòng là một câu hoàn chỉnh bằng tiếng Việt\n"
        "- Không thêm thông tin nằm ngoài context\n"
        "- Nếu context không đủ, trả lời rõ: \"Tôi không có đủ thông tin\"\n\n"
        "ĐỊNH DẠNG: Danh sách gạch đầu dòng, mỗi dòng một ý"
    ),
    Intent.DEFINE: (
        "Bạn là trợ lý AI phân tích tài liệu. Nhiệm vụ: định nghĩa một khái niệm.\n\n"
        "QUY TẮC:\n"
        "- CHỈ dùng định nghĩa có trong context được cung cấp\n"
        "- Nếu context có định nghĩa rõ ràng, trích dẫn ngắn (1-2 câu)\n"
        "- Không suy luận hay thêm ý kiến cá nhân\n"
        "- Nếu không có định nghĩa, trả lời rõ: \"Tôi không tìm thấy định nghĩa trong tài liệu\"\n\n"
        "ĐỊNH DẠNG: Định nghĩa ngắn gọn, chính xác"
    ),
    Intent.COMPARE: (
        "Bạn là trợ lý AI phân tích tài liệu. Nhiệm vụ: so sánh các khái niệm.\n\n"
        "QUY TẮC:\n"
        "- CHỈ dùng thông tin trong context được cung cấp\n"
        "- Trình bày theo từng phía: điểm mạnh / khi nào dùng A, điểm mạnh / khi nào dùng B\n"
        "- Không thêm ý kiến chủ quan\n"
        "- Nếu thiếu thông tin về một phía, nói rõ phía đó thiếu thông tin\n\n"
        "ĐỊNH DẠNG: So sánh có cấu trúc, dễ đọc"
    ),
    Intent.DEFAULT: (
        "Bạn là trợ lý AI phân tích tài liệu PDF.\n\n"
        "QUY TẮC:\n"
        "- CHỈ trả lời dựa trên context được cung cấp\n"
        "- Trả lời ngắn gọn, rõ ràng bằng tiếng Việt\n"
        "- Không bịa đặt hay suy luận ngoài context\n"
        "- Nếu context không chứa thông tin cần thiết, trả lời rõ: "
        "\"Tôi không tìm thấy thông tin này trong tài liệu\"\n\n"
        "ĐỊNH DẠNG: Câu trả lời súc tích, dễ hiểu"
    ),
}

_missing_templates = set(Intent) - set(SYSTEM_PROMPTS)
if _missing_templates:
    raise RuntimeError(f"No system prompt for intents: {sorted(i.value for i in _missing_templates)}")


def system_prompt_for(intent: Intent) -> str:
    return SYSTEM_PROMPTS[intent]


def format_directive(hint: IntentHint) -> str:
    """Intent-specific formatting line placed before the question."""
    if hint.intent == Intent.BULLET_SUMMARY:
        if hint.bullet_count is not None:
            return f"Return exactly {hint.bullet_count} bullets.\n"
        return "Return 3-6 bullets.\n"
    if hint.intent == Intent.DEFINE:
        return f'Term to define: "{hint.term}"\n' if hint.term else ""
    if hint.intent == Intent.COMPARE:
        return (
            "If the question mentions two methods A and B, structure the answer "
            "in two parts, one per method, with bullets for each.\n"
        )
    return ""


def build_context(chunks: List[ScoredChunk]) -> str:
    """Serialize ranked chunks into a delimited context block."""
    parts = [CONTEXT_START, "\n"]
    for chunk in chunks:
        parts.append(f"\n[Chunk #{chunk.id} / score={chunk.score:.3f}]\n{chunk.text}\n")
    parts.append(CONTEXT_END)
    parts.append("\n")
    return "".join(parts)


def build_user_prompt(question: str, hint: IntentHint, chunks: List[ScoredChunk]) -> str:
    return f"{build_context(chunks)}\n{format_directive(hint)}Question: {question}\nAnswer:"


class Answerer:
    """Builds the prompt for a ranked chunk list and calls the chat model."""

    def __init__(self, chat: ChatProvider) -> None:
        self.chat = chat

    def answer(self, question: str, hint: IntentHint, chunks: List[ScoredChunk]) -> AskResult:
        """Generate an answer grounded in the given chunks.

        Args:
            question: Original user question
            hint: Intent hint selecting the template and directive
            chunks: Ranked chunks (already boosted and truncated)

        Returns:
            AskResult with the reply verbatim and the chunks' id/score pairs

        Raises:
            AnswerGenerationError: If the chat call fails
        """
        system = system_prompt_for(hint.intent)
        user = build_user_prompt(question, hint, chunks)

        try:
            reply = self.chat.complete(system, user)
        except Exception as e:
            logger.error(f"Answer generation failed: {e}")
            raise AnswerGenerationError(f"Answer generation failed: {e}") from e

        return AskResult(
            answer=reply,
            sources=[SourceScore(id=chunk.id, score=chunk.score) for chunk in chunks],
        )
