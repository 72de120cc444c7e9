import logging
from typing import Callable, Optional, Protocol

import requests

from autocrawler.exceptions import SummarizationError

logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
NO_SUMMARY = "No summary available."

PROMPT_TEMPLATE = (
    "Please provide a concise summary (max 3 sentences) of the following text, "
    "focusing on the main topics. Text: {text}"
)


class Summarizer(Protocol):
    def summarize(self, text: str) -> str: ...


class GeminiSummarizer:
    """Short synopsis of page text via the Gemini generateContent REST API.

    Requires http_client callable (same signature as `requests.post`) for
    dependency injection.
    """

    def __init__(
        self,
        api_key: Optional[str],
        http_client: Callable,
        model: str = "gemini-2.0-flash",
        max_input_chars: int = 10_000,
        timeout: float = 60,
    ):
        self.api_key = api_key
        self.http_client = http_client
        self.model = model
        self.max_input_chars = max_input_chars
        self.timeout = timeout

    def summarize(self, text: str) -> str:
        if not self.api_key:
            raise SummarizationError("API Key is missing")

        prompt = PROMPT_TEMPLATE.format(text=text[: self.max_input_chars])
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            resp = self.http_client(
                GEMINI_ENDPOINT.format(model=self.model),
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise SummarizationError(f"Summary request failed: {e}") from e

        if resp.status_code < 200 or resp.status_code >= 300:
            logger.error("Gemini returned status %s", resp.status_code)
            raise SummarizationError(f"Summary request failed with status {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise SummarizationError("Summary response was not JSON") from e

        return self._response_text(data) or NO_SUMMARY

    @staticmethod
    def _response_text(data) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            return ""
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()


def compose_summarized_content(summary: str, content: str) -> str:
    return f"[AI SUMMARY]: {summary}\n\n================================\n[FULL CONTENT]:\n{content}"
