"""Lexical intent detection for questions.

Classifies a question into one of five intents using keyword and pattern
matching over Vietnamese and English phrasing, and extracts the entities the
reranker and the prompt assembler need: the term to define, the requested
bullet count and a referenced document section.

Detection is pure and total: every question maps to exactly one intent,
DEFAULT when nothing matches. Precedence is COMPARE, BULLET_SUMMARY,
SUMMARY, DEFINE.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Optional

from docqa.models import Intent, IntentHint

COMPARE_PATTERNS = [
    re.compile(p)
    for p in (
        r"so sánh",
        r"khác nhau",
        r"khác biệt",
        r"\bcompare\b",
        r"\bcomparison\b",
        r"\bcontrast\b",
        r"\bdifferences? between\b",
        r"\bversus\b",
        r"\bvs\.?(?=\s)",
    )
]

BULLET_PATTERNS = [
    re.compile(p)
    for p in (
        r"gạch đầu dòng",
        r"liệt kê",
        r"ý chính",
        r"\bbullets?\b",
        r"\bbullet points?\b",
        r"\bkey points\b",
        r"^\s*list\b",
        r"\blist (?:the|all|some|\d+)\b",
    )
]

SUMMARY_PATTERNS = [
    re.compile(p)
    for p in (
        r"tóm tắt",
        r"tổng quan",
        r"\bsummar(?:y|ize|ise)\b",
        r"\boverview\b",
        r"\btl;?dr\b",
    )
]

DEFINE_PATTERNS = [
    re.compile(p)
    for p in (
        r"^(?:(?:cho (?:tôi|mình) biết|hãy cho biết|vậy)\s+)?"
        r"(?:(?:hãy\s+)?(?:định nghĩa|khái niệm)(?:\s+(?:của|về))?\s+)?"
        r"(?P<term>.+?)\s+(?:có\s+)?(?:nghĩa\s+)?là\s+(?:gì|cái gì)$",
        r"^(?:hãy\s+)?(?:định nghĩa|khái niệm)(?:\s+(?:của|về))?\s+(?P<term>.+)$",
        r"^(?:what(?:'s|’s|\s+is)\s+)?(?:the\s+)?(?:definition|meaning)\s+of\s+(?P<term>.+)$",
        r"^what(?:'s|’s|\s+is|\s+are|\s+does)\s+(?:an?\s+|the\s+)?(?P<term>.+?)(?:\s+mean)?$",
        r"^(?:please\s+)?define\s+(?:the\s+term\s+)?(?P<term>.+)$",
    )
]

NUMBERED_SECTION = re.compile(
    r"\b(?P<kind>chương|chapter|section|phần|mục)\s+(?P<num>\d+|[ivxlc]+)\b"
)
SECTION_KEYWORDS = (
    "mở đầu",
    "giới thiệu",
    "kết luận",
    "tổng kết",
    "introduction",
    "conclusion",
    "abstract",
    "summary section",
)
INTRO_KEYWORDS = ("mở đầu", "giới thiệu", "introduction")

BULLET_UNITS = r"(?:bullets?|bullet points?|points?|items?|ý|gạch|điểm|dòng)"
NUMBER_WORDS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "hai": 2, "ba": 3, "bốn": 4, "sáu": 6, "bảy": 7, "tám": 8, "chín": 9, "mười": 10,
}
COUNT_NEAR_UNIT = re.compile(
    r"\b(?P<count>\d{1,2}|" + "|".join(NUMBER_WORDS) + r")\s+(?:key\s+|main\s+)?" + BULLET_UNITS + r"\b"
)
ANY_NUMBER = re.compile(r"\b(\d{1,2})\b")
MAX_BULLETS = 20

TERM_STRIP_CHARS = " \t\n\"'`“”‘’«».,;:!?"


def normalize_question(question: str) -> str:
    """NFC-normalize, lower-case and collapse whitespace."""
    text = unicodedata.normalize("NFC", question or "")
    return re.sub(r"\s+", " ", text).strip().lower()


def is_intro_section(section_hint: Optional[str]) -> bool:
    """True if the section hint names an introduction or opening section."""
    if not section_hint:
        return False
    return any(keyword in section_hint for keyword in INTRO_KEYWORDS)


class IntentDetector:
    """Heuristic intent classifier."""

    def detect(self, question: str) -> IntentHint:
        """Classify a question.

        Args:
            question: Raw user question

        Returns:
            IntentHint with the intent and any extracted entities
        """
        text = normalize_question(question)
        section_hint = self.extract_section_hint(text)

        if _matches_any(COMPARE_PATTERNS, text):
            return IntentHint(intent=Intent.COMPARE, section_hint=section_hint)

        if _matches_any(BULLET_PATTERNS, text):
            return IntentHint(
                intent=Intent.BULLET_SUMMARY,
                section_hint=section_hint,
                bullet_count=self.extract_bullet_count(text),
            )

        if _matches_any(SUMMARY_PATTERNS, text):
            return IntentHint(intent=Intent.SUMMARY, section_hint=section_hint)

        term = self.extract_term(question)
        if term is not None:
            return IntentHint(intent=Intent.DEFINE, term=term, section_hint=section_hint)

        return IntentHint(intent=Intent.DEFAULT, section_hint=section_hint)

    @staticmethod
    def extract_term(question: str) -> Optional[str]:
        """Extract X from "what is X" / "X là gì" style questions.

        Case of the term is kept as written; the reranker matches it
        case-insensitively.
        """
        text = unicodedata.normalize("NFC", question or "")
        text = re.sub(r"\s+", " ", text).strip().rstrip("?!. ")
        lowered = text.lower()
        if len(lowered) != len(text):
            # spans below index into text, so lengths must line up
            text = lowered
        for pattern in DEFINE_PATTERNS:
            match = pattern.match(lowered)
            if match:
                start, end = match.span("term")
                term = text[start:end].strip(TERM_STRIP_CHARS)
                return term or None
        return None

    @staticmethod
    def extract_section_hint(text: str) -> Optional[str]:
        """Find a document section named in a normalized question."""
        match = NUMBERED_SECTION.search(text)
        if match:
            return f"{match.group('kind')} {match.group('num')}"
        for keyword in SECTION_KEYWORDS:
            if keyword in text:
                return keyword
        return None

    @staticmethod
    def extract_bullet_count(text: str) -> Optional[int]:
        """Requested number of bullets, e.g. "in 5 bullets" -> 5.

        A number directly before a bullet unit wins; otherwise the first
        number that is not part of a section reference.
        """
        match = COUNT_NEAR_UNIT.search(text)
        if match:
            raw = match.group("count")
            count = int(raw) if raw.isdigit() else NUMBER_WORDS[raw]
        else:
            without_sections = NUMBERED_SECTION.sub(" ", text)
            number = ANY_NUMBER.search(without_sections)
            if not number:
                return None
            count = int(number.group(1))

        if 1 <= count <= MAX_BULLETS:
            return count
        return None


def _matches_any(patterns, text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)


_default_detector = IntentDetector()


def detect_intent(question: str) -> IntentHint:
    """Module-level shortcut for IntentDetector().detect()."""
    return _default_detector.detect(question)
