import re

import httpx
import pytest
from langchain_openai import ChatOpenAI

from sentence_translator.agents.client import TranslationClient
from sentence_translator.models import Sentence, TranslationSettings
from sentence_translator.session import TranslationSession
from sentence_translator.utils.storage import JsonFileStore


def make_sentences(count, per_paragraph=5):
    return [
        Sentence(
            text=f"Source sentence {i}.",
            original_index=i,
            paragraph=i // per_paragraph + 1,
            sentence_in_paragraph=i % per_paragraph + 1,
        )
        for i in range(count)
    ]


def sent_texts(variables):
    """Sentence texts of one batch request, in prompt order."""
    return re.findall(r"^\[\d+\] (.*)$", variables["numbered_sentences"], re.MULTILINE)


def numbered_reply(variables, terms_section=""):
    lines = [f"[{n}] 译文 {text}" for n, text in enumerate(sent_texts(variables), start=1)]
    reply = "\n".join(lines)
    if terms_section:
        reply += "\n\n" + terms_section
    return reply


class FakeClient:
    """Stands in for TranslationClient; `responder(call_number, variables)` returns or raises."""

    def __init__(self, responder=None):
        self.responder = responder or (lambda call, variables: numbered_reply(variables))
        self.calls = []
        self.prompts = []

    def translate(self, prompt, variables):
        self.calls.append(variables)
        self.prompts.append(prompt)
        return self.responder(len(self.calls), variables)

    def sent(self):
        return [text for variables in self.calls for text in sent_texts(variables)]


def chat_completion(content):
    """A minimal chat-completions response body."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "deepseek-chat",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
    }


def mock_transport_client(handler):
    """TranslationClient whose ChatOpenAI talks to `handler(request) -> httpx.Response`."""
    client = TranslationClient(api_key="test-key", model="deepseek-chat")
    client.llm = ChatOpenAI(
        model="deepseek-chat",
        base_url="https://api.deepseek.com/v1",
        api_key="test-key",
        max_retries=0,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    return client


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(str(tmp_path / "store.json"))


@pytest.fixture
def session(store):
    return TranslationSession(store).load()


@pytest.fixture
def settings():
    return TranslationSettings(api_key="test-key", batch_size=10)
