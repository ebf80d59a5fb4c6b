"""Completion capability backed by Google Gemini.

The rest of the package only sees :class:`CompletionClient`: give it a
prompt, get text back, or get a :class:`CompletionError`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from .config import Settings
from .errors import CompletionError

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    def complete(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        json_mode: bool = False,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        ...


class GeminiCompletionClient:
    """Deterministic (temperature 0) Gemini client with a bounded request timeout.

    Construct it once at application start-up and pass it to the pipeline.
    """

    def __init__(self, settings: Settings):
        api_key = settings.require_api_key()
        client_options = {"api_endpoint": settings.base_url} if settings.base_url else None
        genai.configure(api_key=api_key, client_options=client_options)
        self._model_name = settings.model
        self._timeout = settings.timeout
        logger.info("Gemini client ready (model=%s, timeout=%ss)", self._model_name, self._timeout)

    @property
    def model_name(self) -> str:
        return self._model_name

    def complete(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        json_mode: bool = False,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        generation_config: Dict[str, Any] = {"temperature": 0.0}
        if json_mode:
            generation_config["response_mime_type"] = "application/json"
        if max_output_tokens:
            generation_config["max_output_tokens"] = max_output_tokens

        model = genai.GenerativeModel(
            self._model_name,
            system_instruction=system,
            generation_config=generation_config,
        )
        try:
            response = model.generate_content(prompt, request_options={"timeout": self._timeout})
        except google_exceptions.ResourceExhausted as exc:
            raise CompletionError(f"quota exhausted: {exc}") from exc
        except google_exceptions.GoogleAPIError as exc:
            raise CompletionError(str(exc)) from exc

        candidate = next((c for c in response.candidates if c.content.parts), None)
        if candidate is None:
            feedback = getattr(response, "prompt_feedback", None)
            raise CompletionError(f"empty response (prompt_feedback={feedback})")

        raw_text = "".join(part.text for part in candidate.content.parts if getattr(part, "text", ""))
        if not raw_text.strip():
            raise CompletionError("empty response")
        logger.debug("[Gemini] Raw response: %s", raw_text)
        return raw_text


__all__ = ["CompletionClient", "GeminiCompletionClient"]
