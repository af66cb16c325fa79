"""
Translation session: the explicit context shared by the batch orchestrator,
the retranslator and the CLI.

Holds source and target sentences, the glossary (persistent + session overlay),
settings and run state. Target slot i always belongs to source sentence i; the
two lists are joined by `original_index`.
"""

from __future__ import annotations

from dataclasses import replace

from sentence_translator.agents.prompts import DEFAULT_STYLE, PENDING_TEXT
from sentence_translator.errors import StorageError
from sentence_translator.knowledge.glossary import GlossaryStore
from sentence_translator.models import (
    ResponseDialect,
    Sentence,
    SentenceRange,
    SentenceStatus,
    TranslationProgress,
    TranslationSettings,
    TranslationState,
)
from sentence_translator.utils.config_loader import get_section
from sentence_translator.utils.logger import log_progress


class TranslationSession:
    def __init__(self, store, config: dict | None = None):
        self.store = store
        self.config = config
        storage_cfg = get_section(config, "storage")
        self.api_key_key = str(storage_cfg.get("api_key_key"))
        self.glossary = GlossaryStore(store, key=str(storage_cfg.get("glossary_key")))

        self.source_sentences: list[Sentence] = []
        self.target_sentences: list[Sentence] = []
        self._positions: dict[int, int] = {}

        self.settings = TranslationSettings()
        self.state = TranslationState()
        self.custom_prompt = ""

    # -- lifecycle ---------------------------------------------------------

    def load(self) -> "TranslationSession":
        """Load the persistent glossary and stored settings."""
        self.glossary.load()
        self.load_settings()
        return self

    def set_source_sentences(self, sentences: list[Sentence]) -> None:
        """Start a new translation task; the session overlay is reseeded from the glossary."""
        self.source_sentences = list(sentences)
        self.target_sentences = []
        self._positions = {sentence.original_index: pos for pos, sentence in enumerate(self.source_sentences)}
        self.glossary.begin_session()

    def set_target_sentences(self, sentences: list[Sentence]) -> None:
        self.target_sentences = list(sentences)

    # -- sentences ---------------------------------------------------------

    def source_for(self, original_index: int) -> Sentence | None:
        pos = self._positions.get(original_index)
        return None if pos is None else self.source_sentences[pos]

    def target_for(self, original_index: int) -> Sentence | None:
        pos = self._positions.get(original_index)
        if pos is None or pos >= len(self.target_sentences):
            return None
        return self.target_sentences[pos]

    def set_target(self, original_index: int, status: SentenceStatus, text: str) -> None:
        pos = self._positions[original_index]
        self.target_sentences[pos] = self.target_sentences[pos].with_status(status, text)

    def ensure_targets(self, sentence_range: SentenceRange | None = None) -> bool:
        """Allocate target slots unless they already match the sources. Returns True if allocated."""
        if len(self.target_sentences) == len(self.source_sentences):
            return False
        targets = []
        for source in self.source_sentences:
            if sentence_range is None or sentence_range.contains(source):
                targets.append(replace(source, text=PENDING_TEXT, status=SentenceStatus.PENDING))
            else:
                targets.append(replace(source, text="", status=SentenceStatus.EXCLUDED))
        self.target_sentences = targets
        return True

    def needs_translation(self, sentence: Sentence) -> bool:
        target = self.target_for(sentence.original_index)
        return target is None or target.needs_translation

    @property
    def missing_count(self) -> int:
        return sum(1 for sentence in self.target_sentences if sentence.is_missing)

    @property
    def is_complete(self) -> bool:
        return bool(self.target_sentences) and self.missing_count == 0

    def missing_sentences(self) -> list[Sentence]:
        """Source sentences whose translation is still missing, for a targeted retry."""
        return [
            self.source_sentences[pos]
            for pos, target in enumerate(self.target_sentences)
            if target.is_missing and pos < len(self.source_sentences)
        ]

    # -- settings / state --------------------------------------------------

    def load_settings(self) -> TranslationSettings:
        api_cfg = get_section(self.config, "api")
        translation_cfg = get_section(self.config, "translation")
        try:
            api_key = self.store.get(self.api_key_key) or ""
        except StorageError as exc:
            log_progress("SETTINGS", f"failed to read stored API key ({exc})", status="WARN")
            api_key = ""
        try:
            dialect = ResponseDialect(translation_cfg.get("dialect", ResponseDialect.JSON.value))
        except ValueError:
            log_progress("SETTINGS", f"unknown dialect {translation_cfg.get('dialect')!r}, using json", status="WARN")
            dialect = ResponseDialect.JSON
        self.settings = TranslationSettings(
            api_key=api_key,
            model=str(api_cfg.get("model")),
            batch_size=int(translation_cfg.get("batch_size")),
            dialect=dialect,
        )
        return self.settings

    def update_settings(self, **changes) -> TranslationSettings:
        settings = replace(self.settings, **changes)
        settings.validate()
        self.settings = settings
        if changes.get("api_key"):
            try:
                self.store.set(self.api_key_key, changes["api_key"])
            except StorageError as exc:
                log_progress("SETTINGS", f"failed to persist API key ({exc})", status="FAIL")
        return settings

    @property
    def style(self) -> str:
        return self.custom_prompt.strip() or DEFAULT_STYLE

    def update_state(self, **changes) -> None:
        self.state = replace(self.state, **changes)

    def update_progress(self, current: int, total: int) -> TranslationProgress:
        percentage = int(current / total * 100 + 0.5) if total > 0 else 0
        self.state.progress = TranslationProgress(current=current, total=total, percentage=percentage)
        self.state.current_message = f"已处理 {current} / {total} 个句子 ({percentage}%)"
        return self.state.progress
