import json

from sentence_translator.errors import StorageError
from sentence_translator.knowledge.glossary import GLOSSARY_KEY, GlossaryStore
from sentence_translator.knowledge.relevance import filter_relevant_terms


def test_load_missing_key_gives_empty_glossary(store):
    glossary = GlossaryStore(store).load()
    assert len(glossary) == 0


def test_load_corrupt_data_falls_back_to_empty(store, capsys):
    store.set(GLOSSARY_KEY, "{not json")
    glossary = GlossaryStore(store).load()
    assert glossary.terms == {}
    assert "WARN GLOSSARY" in capsys.readouterr().out


def test_load_non_mapping_falls_back_to_empty(store):
    store.set(GLOSSARY_KEY, json.dumps(["Athens", "雅典"]))
    assert GlossaryStore(store).load().terms == {}


def test_upsert_and_remove_write_through(store):
    glossary = GlossaryStore(store).load()
    glossary.upsert("Athens", "雅典")
    glossary.upsert("Sparta", "斯巴达")
    glossary.remove("Sparta")

    reloaded = GlossaryStore(store).load()
    assert reloaded.terms == {"Athens": "雅典"}
    assert reloaded.get("Athens") == "雅典"
    assert reloaded.get("Sparta") is None


def test_clear_removes_stored_key(store):
    glossary = GlossaryStore(store).load()
    glossary.upsert("Athens", "雅典")
    glossary.clear()
    assert store.get(GLOSSARY_KEY) is None
    assert len(glossary) == 0


def test_import_overrides_existing_and_reaches_session_overlay(store):
    glossary = GlossaryStore(store).load()
    glossary.upsert("Athens", "雅典城")
    glossary.begin_session()

    glossary.import_bulk({"Athens": "雅典", "Sparta": "斯巴达"})

    assert glossary.terms == {"Athens": "雅典", "Sparta": "斯巴达"}
    assert glossary.accumulated == {"Athens": "雅典", "Sparta": "斯巴达"}
    assert GlossaryStore(store).load().terms == {"Athens": "雅典", "Sparta": "斯巴达"}


def test_begin_session_copies_persistent_terms(store):
    glossary = GlossaryStore(store).load()
    glossary.upsert("Athens", "雅典")
    glossary.begin_session()
    glossary.accumulated["Sparta"] = "斯巴达"
    assert "Sparta" not in glossary


def test_merge_accumulated_does_not_persist(store):
    glossary = GlossaryStore(store).load()
    glossary.begin_session()
    glossary.merge_accumulated({"Troy": "特洛伊"})
    assert glossary.accumulated == {"Troy": "特洛伊"}
    assert GlossaryStore(store).load().terms == {}

    glossary.clear_accumulated()
    assert glossary.accumulated == {}


def test_storage_failure_keeps_value_in_memory(store, monkeypatch, capsys):
    glossary = GlossaryStore(store).load()

    def failing_set(key, value):
        raise StorageError("disk full")

    monkeypatch.setattr(store, "set", failing_set)
    glossary.upsert("Athens", "雅典")

    assert glossary.get("Athens") == "雅典"
    assert "FAIL GLOSSARY" in capsys.readouterr().out


def test_blank_entries_are_dropped_on_load(store, capsys):
    store.set(GLOSSARY_KEY, json.dumps({"": "x", "  ": "y", "A": "", " Troy ": " 特洛伊 ", "B": 3}))
    glossary = GlossaryStore(store).load()
    assert glossary.terms == {"Troy": "特洛伊"}
    assert "WARN GLOSSARY" in capsys.readouterr().out


def test_blank_entries_are_dropped_on_import_and_upsert(store):
    glossary = GlossaryStore(store).load()
    glossary.begin_session()
    glossary.import_bulk({"": "x", "Athens": "雅典", "Sparta": "  "})
    glossary.upsert("   ", "空")
    glossary.upsert("Rome", "")

    assert glossary.terms == {"Athens": "雅典"}
    assert glossary.accumulated == {"Athens": "雅典"}
    assert filter_relevant_terms("Any sentence at all.", glossary.accumulated) == {}
