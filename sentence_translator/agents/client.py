"""
Chat-completions client for the translation endpoint.

Requests go through `prompt | ChatOpenAI | StrOutputParser()` against any
OpenAI-compatible base URL (DeepSeek by default). Endpoint failures surface as
TranslationAPIError so the batch loop can isolate them per batch.
"""

from __future__ import annotations

from typing import Any

import openai
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI

from sentence_translator.errors import ConfigurationError, InvalidResponseError, TranslationAPIError
from sentence_translator.utils.config_loader import get_section


def describe_status_error(exc: openai.APIStatusError) -> str:
    """Human message from an error body, else "HTTP <status> <reason>"."""
    body = exc.body
    if isinstance(body, dict):
        error = body.get("error", body)
        message = error.get("message") if isinstance(error, dict) else None
        if isinstance(message, str) and message.strip():
            return message.strip()
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None) or getattr(exc, "status_code", "")
    reason = getattr(response, "reason_phrase", "") or ""
    return f"HTTP {status} {reason}".strip()


class TranslationClient:
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.deepseek.com/v1",
        temperature: float = 0.3,
        timeout: float = 120,
    ):
        self.model = model
        self.llm = ChatOpenAI(
            model=model,
            base_url=base_url,
            api_key=api_key,
            temperature=temperature,
            timeout=timeout,
            max_retries=0,
        )

    @classmethod
    def from_settings(cls, settings, config: dict | None = None) -> "TranslationClient":
        if not settings.api_key or not settings.api_key.strip():
            raise ConfigurationError("API key is not set")
        api_cfg = get_section(config, "api")
        translation_cfg = get_section(config, "translation")
        return cls(
            api_key=settings.api_key.strip(),
            model=settings.model,
            base_url=str(api_cfg.get("base_url")),
            temperature=float(translation_cfg.get("temperature", 0.3)),
            timeout=float(api_cfg.get("request_timeout", 120)),
        )

    def translate(self, prompt: ChatPromptTemplate, variables: dict[str, Any]) -> str:
        """Send one request and return the message content."""
        chain = prompt | self.llm | StrOutputParser()
        try:
            content = chain.invoke(variables)
        except openai.APIStatusError as exc:
            raise TranslationAPIError(f"Translation API error: {describe_status_error(exc)}") from exc
        except openai.APIError as exc:
            raise TranslationAPIError(f"Translation API error: {exc}") from exc
        except (TypeError, IndexError, ValueError) as exc:
            # null or empty `choices`, or an `error` object in a 2xx body
            raise InvalidResponseError(f"Translation API returned an invalid response format: {exc}") from exc

        if not content or not content.strip():
            raise InvalidResponseError("Translation API returned an invalid response format")
        return content
