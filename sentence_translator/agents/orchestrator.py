"""
Batch orchestrator: drives one translation run over the session's sentences.

Batches run strictly one after another so that proper nouns learned from batch
N are part of the glossary context of batch N+1. Stopping is cooperative and
checked at batch boundaries only; a request already sent is allowed to finish.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable

from sentence_translator.agents.client import TranslationClient
from sentence_translator.agents.workflow import build_graph
from sentence_translator.models import TranslationProgress, TranslationSettings, parse_sentence_range
from sentence_translator.utils.config_loader import get_section
from sentence_translator.utils.logger import log_progress


class RunOutcome(str, Enum):
    DONE = "done"
    STOPPED = "stopped"


def partition(items: list, size: int) -> list[list]:
    """Split `items` into consecutive groups of at most `size`, preserving order."""
    return [items[start : start + size] for start in range(0, len(items), size)]


class BatchOrchestrator:
    def __init__(
        self,
        session,
        client_factory: Callable[[TranslationSettings], object] | None = None,
        config: dict | None = None,
        sleep: Callable[[float], None] = time.sleep,
        on_progress: Callable[[TranslationProgress, str], None] | None = None,
    ):
        self.session = session
        self.config = config if config is not None else session.config
        self.client_factory = client_factory or (lambda settings: TranslationClient.from_settings(settings, self.config))
        self.sleep = sleep
        self.on_progress = on_progress
        self.translated_count = 0
        self.learned_terms: dict[str, str] = {}

        translation_cfg = get_section(self.config, "translation")
        self.success_delay = float(translation_cfg.get("success_delay", 0.3))
        self.failure_delay = float(translation_cfg.get("failure_delay", 0.5))

    def request_stop(self) -> None:
        self.session.state.should_stop = True

    def _publish(self, current: int, total: int) -> None:
        progress = self.session.update_progress(current, total)
        if self.on_progress is not None:
            self.on_progress(progress, self.session.state.current_message)

    def run(self, settings: TranslationSettings | None = None) -> RunOutcome:
        """Translate every eligible sentence that is not translated yet."""
        session = self.session
        settings = settings or session.settings
        settings.validate()
        client = self.client_factory(settings)
        self.translated_count = 0
        self.learned_terms = {}

        sentence_range = parse_sentence_range(settings.sentence_range)
        if settings.sentence_range and sentence_range is None:
            log_progress("RUN", f"ignoring unparsable sentence range {settings.sentence_range!r}", status="WARN")
        session.ensure_targets(sentence_range)

        eligible = [
            sentence
            for sentence in session.source_sentences
            if sentence_range is None or sentence_range.contains(sentence)
        ]
        if not eligible:
            session.update_state(current_message="没有需要翻译的句子")
            return RunOutcome.DONE

        batches = partition(eligible, settings.batch_size)
        graph = build_graph(session, client, settings.dialect)
        total = len(eligible)
        processed = 0
        outcome = RunOutcome.DONE

        session.update_state(is_translating=True, should_stop=False)
        log_progress("RUN", f"{total} sentences in {len(batches)} batches of up to {settings.batch_size}")
        try:
            for batch_index, batch in enumerate(batches):
                if session.state.should_stop:
                    outcome = RunOutcome.STOPPED
                    log_progress("RUN", f"stopped before batch {batch_index + 1}/{len(batches)}", status="STOP")
                    break

                result = graph.invoke(
                    {
                        "batch_index": batch_index,
                        "batch": batch,
                        "needed": [],
                        "user_variables": {},
                        "response": None,
                        "error": None,
                        "new_terms": {},
                        "translated_count": 0,
                    }
                )

                processed += len(batch)
                self.translated_count += result.get("translated_count", 0)
                self.learned_terms.update(result.get("new_terms") or {})
                self._publish(processed, total)

                if not result["needed"]:
                    continue
                self.sleep(self.failure_delay if result.get("error") else self.success_delay)
        finally:
            session.update_state(is_translating=False)

        if outcome is RunOutcome.DONE:
            log_progress(
                "RUN",
                f"done, {self.translated_count} translated, {len(self.learned_terms)} new proper nouns, "
                f"{session.missing_count} sentences still missing",
            )
        return outcome
