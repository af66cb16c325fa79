"""
Proper-noun extraction from the terms section of a model response.

Three response dialects are understood, selected explicitly:

- json:  a flat JSON object {"original": "translation"}, optionally wrapped in a
         code fence. Text that is not a JSON object is read with the delimited
         line rules instead.
- text:  one "original: translation" line per term, read with the delimited
         rules (book title, last colon, leading CJK run).
- plain: one "original: translation" line per term, split at the first colon.

Only originals missing from the persistent glossary are returned.
"""

from __future__ import annotations

import json
import re

from sentence_translator.models import ResponseDialect
from sentence_translator.utils.logger import log_progress


CJK_CHAR = re.compile(r"[\u4e00-\u9fa5]")
BOOK_TITLE = re.compile(r"《([^》]+)》")
CJK_RUN = re.compile(r"""^[\u4e00-\u9fa5《》：、，。！？；“”‘’"'（）【】·\-—…0-9\s/&]+""")
_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"```\s*$")


def has_cjk(text: str) -> bool:
    return bool(CJK_CHAR.search(text))


def strip_code_fence(text: str) -> str:
    text = _FENCE_OPEN.sub("", text.strip())
    return _FENCE_CLOSE.sub("", text).strip()


def parse_structured_terms(text: str) -> dict[str, str] | None:
    """Return the string pairs of a flat JSON object, or None if `text` is not one."""
    try:
        parsed = json.loads(strip_code_fence(text))
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    pairs: dict[str, str] = {}
    for original, translation in parsed.items():
        if not isinstance(translation, str):
            continue
        original, translation = original.strip(), translation.strip()
        if original and translation:
            pairs.setdefault(original, translation)
    return pairs


def parse_delimited_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    colon = line.find(":")
    if colon == -1:
        return None
    original = line[:colon].strip()
    rest = line[colon + 1 :].strip()

    # Book titles keep their guillemets; text before them belongs to the original.
    book_title = BOOK_TITLE.search(rest)
    if book_title:
        translation = f"《{book_title.group(1)}》"
        prefix = rest[: rest.index("《")].strip()
        prefix = re.sub(r":$", "", prefix).strip()
        if prefix:
            original = f"{original}: {prefix}"
        return (original, translation) if original and translation else None

    last_colon = rest.rfind(":")
    if last_colon != -1:
        candidate = rest[last_colon + 1 :].strip()
        if has_cjk(candidate):
            middle = rest[:last_colon].strip()
            if middle:
                original = f"{original}: {middle}"
            return (original, candidate) if original and candidate else None

    first_cjk = CJK_CHAR.search(rest)
    if first_cjk:
        run = CJK_RUN.match(rest[first_cjk.start() :])
        translation = run.group(0).strip() if run else ""
        return (original, translation) if original and translation else None
    return None


def parse_plain_line(line: str) -> tuple[str, str] | None:
    colon = line.find(":")
    if colon == -1:
        return None
    original = line[:colon].strip()
    translation = line[colon + 1 :].strip()
    return (original, translation) if original and translation else None


class TermExtractor:
    def __init__(self, glossary):
        self.glossary = glossary

    def _is_new(self, original: str) -> bool:
        return original not in self.glossary

    def _from_lines(self, text: str, parse_line) -> dict[str, str]:
        new_terms: dict[str, str] = {}
        for line in text.splitlines():
            if not line.strip():
                continue
            pair = parse_line(line)
            if pair is None:
                continue
            original, translation = pair
            if self._is_new(original) and original not in new_terms:
                new_terms[original] = translation
        return new_terms

    def extract_terms(self, text: str, dialect: ResponseDialect = ResponseDialect.JSON) -> dict[str, str]:
        """Extract proper nouns whose original is not in the glossary yet."""
        if not text or not text.strip():
            return {}
        dialect = ResponseDialect(dialect)

        if dialect is ResponseDialect.PLAIN:
            return self._from_lines(text, parse_plain_line)

        if dialect is ResponseDialect.JSON:
            pairs = parse_structured_terms(text)
            if pairs is not None:
                return {original: translation for original, translation in pairs.items() if self._is_new(original)}
            log_progress("TERMS", "proper-noun section is not a JSON object, reading it line by line", status="WARN")

        return self._from_lines(text, parse_delimited_line)
