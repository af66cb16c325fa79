"""
Command-line entry point.

Usage:
    python -m sentence_translator.main translate --source sentences.json --output target.json
    python -m sentence_translator.main translate ... --range 2.1-3.4 --batch-size 20
    python -m sentence_translator.main retranslate --source sentences.json --output target.json --index 12
    python -m sentence_translator.main missing --source sentences.json --output target.json
    python -m sentence_translator.main glossary list|import FILE|export FILE|remove ORIGINAL|clear

Sentence files are JSON lists of segmented sentences (`text`, `originalIndex`,
`paragraph`, `sentenceInParagraph`, `type`). Running `translate` again on the
same output file resumes where the previous run left off.
"""

import argparse
import json
import os

from tqdm import tqdm

from sentence_translator.agents.orchestrator import BatchOrchestrator, RunOutcome
from sentence_translator.agents.retranslator import SentenceRetranslator
from sentence_translator.errors import ConfigurationError, TranslationError
from sentence_translator.models import ResponseDialect, Sentence
from sentence_translator.session import TranslationSession
from sentence_translator.utils.config_loader import get_section, load_config, merge_defaults
from sentence_translator.utils.logger import log_progress, print_safe, set_log_file
from sentence_translator.utils.storage import JsonFileStore


def load_sentences(path: str) -> list:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("sentences", [])
    if not isinstance(data, list):
        raise ConfigurationError(f"Expected a list of sentences in {path}")
    return [Sentence.from_dict(item) for item in data]


def save_sentences(path: str, sentences: list) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([sentence.to_dict() for sentence in sentences], f, ensure_ascii=False, indent=2)


def _load_config(path: str) -> dict:
    if os.path.exists(path):
        return load_config(path)
    log_progress("CONFIG", f"{path} not found, using defaults", status="WARN")
    return merge_defaults({})


def _open_session(args, config: dict) -> TranslationSession:
    store = JsonFileStore(get_section(config, "storage").get("path"))
    session = TranslationSession(store, config).load()

    changes = {}
    api_key = args.api_key or os.getenv("DEEPSEEK_API_KEY", "")
    if api_key:
        changes["api_key"] = api_key
    for name in ("model", "batch_size", "sentence_range", "dialect"):
        value = getattr(args, name, None)
        if value is not None:
            changes[name] = ResponseDialect(value) if name == "dialect" else value
    if changes:
        session.update_settings(**changes)
    if getattr(args, "style", None):
        session.custom_prompt = args.style

    source = getattr(args, "source", None)
    if source:
        session.set_source_sentences(load_sentences(source))
        output = getattr(args, "output", None)
        if output and os.path.exists(output):
            targets = load_sentences(output)
            if len(targets) == len(session.source_sentences):
                session.set_target_sentences(targets)
                log_progress("RESUME", f"{session.missing_count} sentences left in {output}")
    return session


def cmd_translate(args, config: dict) -> int:
    session = _open_session(args, config)
    bar = tqdm(total=len(session.source_sentences), unit="sent", desc="Translating")

    def on_progress(progress, message):
        bar.total = progress.total
        bar.n = progress.current
        bar.set_postfix_str(message)
        bar.refresh()
        save_sentences(args.output, session.target_sentences)

    orchestrator = BatchOrchestrator(session, config=config, on_progress=on_progress)
    try:
        outcome = orchestrator.run()
    except KeyboardInterrupt:
        orchestrator.request_stop()
        outcome = RunOutcome.STOPPED
    finally:
        bar.close()
        save_sentences(args.output, session.target_sentences)

    print_safe(f"\n=== Translation {outcome.value} ===")
    print_safe(f"Output: {args.output}")
    print_safe(f"Missing: {session.missing_count} / {len(session.target_sentences)}")
    return 0 if outcome is RunOutcome.DONE else 1


def cmd_retranslate(args, config: dict) -> int:
    session = _open_session(args, config)
    translation = SentenceRetranslator(session).retranslate(args.index)
    save_sentences(args.output, session.target_sentences)
    print_safe(f"[{args.index}] {translation}")
    return 0


def cmd_missing(args, config: dict) -> int:
    session = _open_session(args, config)
    session.ensure_targets()
    for sentence in session.missing_sentences():
        target = session.target_for(sentence.original_index)
        print_safe(f"{sentence.original_index}\t{target.status.value}\t{sentence.text}")
    print_safe(f"{session.missing_count} missing")
    return 0


def cmd_glossary(args, config: dict) -> int:
    session = _open_session(args, config)
    glossary = session.glossary
    if args.action == "list":
        for original, translation in glossary.export().items():
            print_safe(f"{original}: {translation}")
        print_safe(f"{len(glossary)} terms")
    elif args.action == "import":
        with open(args.value, "r", encoding="utf-8") as f:
            mapping = json.load(f)
        if not isinstance(mapping, dict):
            raise ConfigurationError(f"Expected a JSON object in {args.value}")
        glossary.import_bulk({str(k): str(v) for k, v in mapping.items()})
    elif args.action == "export":
        with open(args.value, "w", encoding="utf-8") as f:
            json.dump(glossary.export(), f, ensure_ascii=False, indent=2)
        print_safe(f"Exported {len(glossary)} terms to {args.value}")
    elif args.action == "remove":
        glossary.remove(args.value)
    elif args.action == "clear":
        glossary.clear()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sentence batch translator with proper-noun glossary")
    parser.add_argument("--config", "-c", default="config.yaml", help="Path to config.yaml")
    parser.add_argument("--api-key", default="", help="API key (stored for later runs)")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_sentence_args(p):
        p.add_argument("--source", "-s", required=True, help="Segmented source sentences (JSON)")
        p.add_argument("--output", "-o", required=True, help="Target sentences file (JSON), resumed if present")
        p.add_argument("--model", default=None)
        p.add_argument("--style", default="", help="Custom translation style replacing the default one")

    translate = sub.add_parser("translate", help="Batch-translate every untranslated sentence")
    add_sentence_args(translate)
    translate.add_argument("--batch-size", type=int, default=None)
    translate.add_argument("--range", dest="sentence_range", default=None, help='Sentence range "P.S-P.S"')
    translate.add_argument("--dialect", choices=[d.value for d in ResponseDialect], default=None)
    translate.set_defaults(handler=cmd_translate)

    retranslate = sub.add_parser("retranslate", help="Translate one sentence again")
    add_sentence_args(retranslate)
    retranslate.add_argument("--index", type=int, required=True, help="originalIndex of the sentence")
    retranslate.set_defaults(handler=cmd_retranslate)

    missing = sub.add_parser("missing", help="List sentences that still need a translation")
    missing.add_argument("--source", "-s", required=True)
    missing.add_argument("--output", "-o", required=True)
    missing.set_defaults(handler=cmd_missing)

    glossary = sub.add_parser("glossary", help="Inspect or edit the proper-noun glossary")
    glossary.add_argument("action", choices=["list", "import", "export", "remove", "clear"])
    glossary.add_argument("value", nargs="?", default="", help="File for import/export, original for remove")
    glossary.set_defaults(handler=cmd_glossary)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = _load_config(args.config)
    set_log_file(get_section(config, "logging").get("file", ""))
    print_safe(f"Project: {config['project']['name']}")

    if args.command == "glossary" and args.action in ("import", "export", "remove") and not args.value:
        print_safe(f"Error: glossary {args.action} needs a value")
        return 2
    try:
        return args.handler(args, config)
    except (TranslationError, OSError, ValueError) as e:
        print_safe(f"Error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
