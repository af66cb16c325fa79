from __future__ import annotations

from typing import Callable

from sentence_translator.agents.client import TranslationClient
from sentence_translator.agents.prompts import SINGLE_SENTENCE_PROMPT
from sentence_translator.errors import SentenceNotFoundError
from sentence_translator.models import SentenceStatus, TranslationSettings, parse_sentence_range
from sentence_translator.utils.logger import log_progress


class SentenceRetranslator:
    """Manual one-sentence correction path: no batching, no glossary, no retry."""

    def __init__(self, session, client_factory: Callable[[TranslationSettings], object] | None = None):
        self.session = session
        self.client_factory = client_factory or (
            lambda settings: TranslationClient.from_settings(settings, session.config)
        )

    def retranslate(self, index: int, settings: TranslationSettings | None = None) -> str:
        source = self.session.source_for(index)
        if source is None:
            raise SentenceNotFoundError(index)

        settings = settings or self.session.settings
        settings.validate()
        client = self.client_factory(settings)
        result = client.translate(
            SINGLE_SENTENCE_PROMPT,
            {"style": self.session.style, "sentence": source.text},
        )

        translation = result.strip()
        self.session.ensure_targets(parse_sentence_range(settings.sentence_range))
        self.session.set_target(index, SentenceStatus.TRANSLATED, translation)
        log_progress("RETRANSLATE", f"sentence {index} updated")
        return translation
