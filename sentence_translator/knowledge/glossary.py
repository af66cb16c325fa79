import json
from typing import Dict, Optional

from sentence_translator.errors import StorageError
from sentence_translator.utils.logger import log_progress


GLOSSARY_KEY = "properNounIndex"


def clean_terms(mapping: Dict[str, str], source: str) -> Dict[str, str]:
    """Trim originals and translations, dropping entries where either ends up empty."""
    cleaned = {}
    for original, translation in mapping.items():
        original = str(original).strip()
        translation = translation.strip() if isinstance(translation, str) else ""
        if not original or not translation:
            log_progress("GLOSSARY", f"skipping blank {source} entry {original!r}", status="WARN")
            continue
        cleaned[original] = translation
    return cleaned


class GlossaryStore:
    """
    Proper-noun glossary with a session overlay.

    `terms` is the persistent glossary, written through to the key-value store
    on every change. `accumulated` is the per-session overlay that batches of
    one run pass on to each other; it never touches storage.
    """

    def __init__(self, store, key: str = GLOSSARY_KEY):
        self.store = store
        self.key = key
        self.terms: Dict[str, str] = {}
        self.accumulated: Dict[str, str] = {}

    def load(self):
        try:
            raw = self.store.get(self.key)
            data = json.loads(raw) if raw else {}
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            self.terms = clean_terms(data, "stored")
        except (ValueError, StorageError) as exc:
            log_progress("GLOSSARY", f"failed to load proper nouns, starting empty ({exc})", status="WARN")
            self.terms = {}
        return self

    def save(self):
        try:
            self.store.set(self.key, json.dumps(self.terms, ensure_ascii=False))
        except StorageError as exc:
            log_progress("GLOSSARY", f"failed to save proper nouns, keeping them in memory ({exc})", status="FAIL")

    def get(self, original: str) -> Optional[str]:
        return self.terms.get(original)

    def upsert(self, original: str, translation: str):
        term = clean_terms({original: translation}, "new")
        if term:
            self.terms.update(term)
            self.save()

    def remove(self, original: str):
        if self.terms.pop(original, None) is not None:
            self.save()

    def clear(self):
        """Clear all persistent terms."""
        self.terms = {}
        try:
            self.store.remove(self.key)
        except StorageError as exc:
            log_progress("GLOSSARY", f"failed to clear stored proper nouns ({exc})", status="FAIL")

    def import_bulk(self, mapping: Dict[str, str]):
        """Imported values win over existing entries, in storage and in the session overlay."""
        mapping = clean_terms(mapping, "imported")
        self.terms = {**self.terms, **mapping}
        self.save()
        self.accumulated = {**self.accumulated, **mapping}
        log_progress("GLOSSARY", f"imported {len(mapping)} terms ({len(self.terms)} total)")

    def begin_session(self):
        self.accumulated = dict(self.terms)

    def merge_accumulated(self, new_terms: Dict[str, str]):
        self.accumulated = {**self.accumulated, **new_terms}

    def clear_accumulated(self):
        self.accumulated = {}

    def export(self) -> Dict[str, str]:
        return dict(self.terms)

    def __contains__(self, original) -> bool:
        return original in self.terms

    def __len__(self) -> int:
        return len(self.terms)
