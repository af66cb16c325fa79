import pytest

from sentence_translator.errors import ConfigurationError
from sentence_translator.models import (
    ResponseDialect,
    Sentence,
    SentenceStatus,
    SentenceType,
    TranslationSettings,
    parse_sentence_range,
)


def _at(paragraph, position):
    return Sentence(text="x", original_index=0, paragraph=paragraph, sentence_in_paragraph=position)


def test_range_is_inclusive_on_both_ends():
    sentence_range = parse_sentence_range("2.1-3.2")
    assert sentence_range.contains(_at(2, 3))
    assert not sentence_range.contains(_at(1, 99))
    assert not sentence_range.contains(_at(3, 3))
    assert sentence_range.contains(_at(3, 2))
    assert sentence_range.contains(_at(2, 1))


def test_range_tolerates_spaces_around_dash():
    assert parse_sentence_range(" 69.1 - 79.4 ") == parse_sentence_range("69.1-79.4")


@pytest.mark.parametrize("text", [None, "", "   ", "2-3", "2.1-", "a.b-c.d"])
def test_absent_or_unparsable_range_means_everything(text):
    assert parse_sentence_range(text) is None


def test_sentence_from_camel_case_dict():
    sentence = Sentence.from_dict(
        {
            "text": "Arma virumque cano",
            "originalIndex": 7,
            "paragraph": 2,
            "sentenceInParagraph": 1,
            "type": "poetry_line",
            "isMissing": True,
            "indentation": 4,
        }
    )
    assert sentence.original_index == 7
    assert sentence.type is SentenceType.POETRY_LINE
    assert sentence.status is SentenceStatus.MISSING
    assert sentence.is_missing
    assert sentence.to_dict()["sentenceInParagraph"] == 1
    assert "lineNumber" not in sentence.to_dict()


def test_status_decides_missing_and_needs_translation():
    sentence = _at(1, 1)
    assert not sentence.with_status(SentenceStatus.EXCLUDED, "").is_missing
    assert not sentence.with_status(SentenceStatus.EXCLUDED, "").needs_translation
    assert sentence.with_status(SentenceStatus.ERROR, "[翻译错误]").needs_translation
    assert not sentence.with_status(SentenceStatus.TRANSLATED, "好").needs_translation


def test_settings_accept_any_positive_batch_size():
    TranslationSettings(api_key="k", batch_size=7).validate()


@pytest.mark.parametrize("batch_size", [0, -10, 2.5, True])
def test_settings_reject_bad_batch_size(batch_size):
    with pytest.raises(ConfigurationError):
        TranslationSettings(batch_size=batch_size).validate()


def test_settings_reject_unknown_model():
    with pytest.raises(ConfigurationError):
        TranslationSettings(model="gpt-x").validate()


def test_settings_coerce_dialect_string():
    settings = TranslationSettings(dialect="text")
    settings.validate()
    assert settings.dialect is ResponseDialect.TEXT
