import re

from langgraph.graph import StateGraph, END

from sentence_translator.agents.prompts import (
    ERROR_TEXT,
    IN_FLIGHT_TEXT,
    MISSING_TEXT,
    SECTION_MARKERS,
    build_batch_prompt,
    number_sentences,
)
from sentence_translator.agents.state import BatchState
from sentence_translator.errors import TranslationError
from sentence_translator.knowledge.extractor import TermExtractor
from sentence_translator.knowledge.relevance import filter_relevant_terms, format_terms_for_prompt
from sentence_translator.models import ResponseDialect, SentenceStatus
from sentence_translator.utils.logger import log_progress


_INDEX_PREFIX = re.compile(r"^\[\d+\]\s*")


def split_response(response: str, marker: str) -> tuple:
    """Split a response into (translation part, proper-noun part) at `marker`."""
    index = response.find(marker)
    if index == -1:
        return response, ""
    return response[:index].strip(), response[index + len(marker):].strip()


def match_numbered_lines(translation_part: str, count: int) -> list:
    """Return the text of lines "[1] ..." .. "[count] ...", None where a line is absent."""
    lines = [line.strip() for line in translation_part.splitlines() if line.strip()]
    matched = []
    for position in range(1, count + 1):
        prefix = f"[{position}]"
        line = next((candidate for candidate in lines if candidate.startswith(prefix)), None)
        matched.append(None if line is None else _INDEX_PREFIX.sub("", line).strip())
    return matched


def build_graph(session, client, dialect: ResponseDialect = ResponseDialect.JSON):
    """Build and compile the per-batch workflow: prepare -> translator -> reconciler | failure."""
    dialect = ResponseDialect(dialect)
    prompt = build_batch_prompt(dialect)
    marker = SECTION_MARKERS[dialect]
    extractor = TermExtractor(session.glossary)

    def prepare_node(state: BatchState):
        """Pick sentences still lacking a translation and mark them in flight."""
        needed = [sentence for sentence in state["batch"] if session.needs_translation(sentence)]
        if not needed:
            return {"needed": []}

        for sentence in needed:
            if session.target_for(sentence.original_index) is not None:
                session.set_target(sentence.original_index, SentenceStatus.IN_FLIGHT, IN_FLIGHT_TEXT)

        texts = [sentence.text for sentence in needed]
        relevant = filter_relevant_terms(" ".join(texts), session.glossary.accumulated)
        log_progress(
            f"BATCH {state['batch_index'] + 1}",
            f"{len(needed)} sentences, {len(relevant)}/{len(session.glossary.accumulated)} glossary terms relevant",
        )
        return {
            "needed": needed,
            "user_variables": {
                "style": session.style,
                "count": len(needed),
                "numbered_sentences": number_sentences(texts),
                "glossary": format_terms_for_prompt(relevant),
            },
        }

    def translate_node(state: BatchState):
        try:
            return {"response": client.translate(prompt, state["user_variables"]), "error": None}
        except TranslationError as exc:
            return {"response": None, "error": str(exc)}

    def reconcile_node(state: BatchState):
        """Assign numbered lines back to their sentences and merge new proper nouns."""
        needed = state["needed"]
        translation_part, terms_part = split_response(state["response"], marker)

        translated = 0
        for sentence, text in zip(needed, match_numbered_lines(translation_part, len(needed))):
            if text is None:
                session.set_target(sentence.original_index, SentenceStatus.MISSING, MISSING_TEXT)
            else:
                session.set_target(sentence.original_index, SentenceStatus.TRANSLATED, text)
                translated += 1
        if translated < len(needed):
            log_progress(
                f"BATCH {state['batch_index'] + 1}",
                f"{len(needed) - translated} translations missing from response",
                status="WARN",
            )

        new_terms = extractor.extract_terms(terms_part, dialect) if terms_part else {}
        for original, translation in new_terms.items():
            session.glossary.upsert(original, translation)
        session.glossary.merge_accumulated(new_terms)
        if new_terms:
            log_progress(f"BATCH {state['batch_index'] + 1}", f"{len(new_terms)} new proper nouns")
        return {"new_terms": new_terms, "translated_count": translated}

    def failure_node(state: BatchState):
        for sentence in state["needed"]:
            target = session.target_for(sentence.original_index)
            if target is not None and target.is_missing:
                session.set_target(sentence.original_index, SentenceStatus.ERROR, ERROR_TEXT)
        log_progress(f"BATCH {state['batch_index'] + 1}", state["error"] or "translation failed", status="FAIL")
        return {"new_terms": {}, "translated_count": 0}

    workflow = StateGraph(BatchState)

    workflow.add_node("prepare", prepare_node)
    workflow.add_node("translator", translate_node)
    workflow.add_node("reconciler", reconcile_node)
    workflow.add_node("failure", failure_node)

    workflow.set_entry_point("prepare")
    workflow.add_conditional_edges(
        "prepare",
        lambda state: "translator" if state["needed"] else "skip",
        {"translator": "translator", "skip": END},
    )
    workflow.add_conditional_edges(
        "translator",
        lambda state: "failure" if state.get("error") else "reconciler",
        {"failure": "failure", "reconciler": "reconciler"},
    )
    workflow.add_edge("reconciler", END)
    workflow.add_edge("failure", END)

    return workflow.compile()
