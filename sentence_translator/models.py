"""
Data model shared by the glossary, the batch workflow and the CLI.

Sentences are produced by an external segmentation step and exchanged as
camelCase JSON (`originalIndex`, `sentenceInParagraph`, `isMissing`, ...).
Target sentences carry an explicit status instead of encoding state in text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from sentence_translator.errors import ConfigurationError


SUPPORTED_MODELS = ("deepseek-chat", "deepseek-coder")
DEFAULT_MODEL = "deepseek-chat"
DEFAULT_BATCH_SIZE = 10


class SentenceType(str, Enum):
    SENTENCE = "sentence"
    TITLE = "title"
    POETRY_LINE = "poetry_line"
    EMPTY_LINE = "empty_line"


class SentenceStatus(str, Enum):
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    TRANSLATED = "translated"
    MISSING = "missing"
    ERROR = "error"
    EXCLUDED = "excluded"  # outside the configured sentence range


_MISSING_STATUSES = {
    SentenceStatus.PENDING,
    SentenceStatus.IN_FLIGHT,
    SentenceStatus.MISSING,
    SentenceStatus.ERROR,
}


class ResponseDialect(str, Enum):
    """Format of the proper-noun section the model is asked to produce."""

    JSON = "json"
    TEXT = "text"
    PLAIN = "plain"


@dataclass
class Sentence:
    text: str
    original_index: int
    paragraph: int = 0
    sentence_in_paragraph: int = 0
    type: SentenceType = SentenceType.SENTENCE
    status: SentenceStatus = SentenceStatus.TRANSLATED
    indentation: int | None = None
    line_number: int | None = None

    @property
    def is_missing(self) -> bool:
        return self.status in _MISSING_STATUSES

    @property
    def needs_translation(self) -> bool:
        return self.status not in (SentenceStatus.TRANSLATED, SentenceStatus.EXCLUDED)

    def with_status(self, status: SentenceStatus, text: str) -> "Sentence":
        return replace(self, status=status, text=text)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Sentence":
        if "status" in data:
            status = SentenceStatus(data["status"])
        elif data.get("isMissing"):
            status = SentenceStatus.MISSING
        else:
            status = SentenceStatus.TRANSLATED
        return cls(
            text=str(data.get("text", "")),
            original_index=int(data["originalIndex"]),
            paragraph=int(data.get("paragraph", 0)),
            sentence_in_paragraph=int(data.get("sentenceInParagraph", 0)),
            type=SentenceType(data.get("type", SentenceType.SENTENCE.value)),
            status=status,
            indentation=data.get("indentation"),
            line_number=data.get("lineNumber"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "text": self.text,
            "originalIndex": self.original_index,
            "paragraph": self.paragraph,
            "sentenceInParagraph": self.sentence_in_paragraph,
            "type": self.type.value,
            "isMissing": self.is_missing,
            "status": self.status.value,
        }
        if self.indentation is not None:
            data["indentation"] = self.indentation
        if self.line_number is not None:
            data["lineNumber"] = self.line_number
        return data


@dataclass
class TranslationSettings:
    api_key: str = ""
    model: str = DEFAULT_MODEL
    batch_size: int = DEFAULT_BATCH_SIZE
    sentence_range: str | None = None
    dialect: ResponseDialect = ResponseDialect.JSON

    def validate(self) -> None:
        if self.model not in SUPPORTED_MODELS:
            raise ConfigurationError(
                f"Unsupported model: {self.model} (expected one of {', '.join(SUPPORTED_MODELS)})"
            )
        if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, int) or self.batch_size <= 0:
            raise ConfigurationError(f"Batch size must be a positive integer, got {self.batch_size!r}")
        if not isinstance(self.dialect, ResponseDialect):
            try:
                self.dialect = ResponseDialect(self.dialect)
            except ValueError as exc:
                raise ConfigurationError(f"Unknown response dialect: {self.dialect}") from exc


@dataclass
class TranslationProgress:
    current: int = 0
    total: int = 0
    percentage: int = 0


@dataclass
class TranslationState:
    is_translating: bool = False
    should_stop: bool = False
    progress: TranslationProgress = field(default_factory=TranslationProgress)
    current_message: str = ""


_RANGE_PATTERN = re.compile(r"^(\d+)\.(\d+)\s*-\s*(\d+)\.(\d+)$")


@dataclass(frozen=True)
class SentenceRange:
    start_paragraph: int
    start_sentence: int
    end_paragraph: int
    end_sentence: int

    def contains(self, sentence: Sentence) -> bool:
        paragraph = sentence.paragraph
        position = sentence.sentence_in_paragraph
        if paragraph < self.start_paragraph or paragraph > self.end_paragraph:
            return False
        if paragraph == self.start_paragraph and position < self.start_sentence:
            return False
        if paragraph == self.end_paragraph and position > self.end_sentence:
            return False
        return True


def parse_sentence_range(text: str | None) -> SentenceRange | None:
    """Parse "P.S-P.S"; None means every sentence is eligible."""
    if not text or not text.strip():
        return None
    match = _RANGE_PATTERN.match(text.strip())
    if not match:
        return None
    start_para, start_sent, end_para, end_sent = (int(group) for group in match.groups())
    return SentenceRange(start_para, start_sent, end_para, end_sent)
