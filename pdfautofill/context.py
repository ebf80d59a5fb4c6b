"""Decide the natural-language description of an uploaded document."""

from __future__ import annotations

import logging
from typing import Optional

from .llm import CompletionClient
from .prompts import UNKNOWN_CONTEXT, build_context_prompt

logger = logging.getLogger(__name__)

_CONTEXT_MAX_TOKENS = 80


def _clean_detected(raw: str) -> Optional[str]:
    cleaned = raw.strip().strip('"').strip("'").strip()
    if not cleaned:
        return None
    if cleaned.rstrip(".").upper() == UNKNOWN_CONTEXT:
        return None
    return cleaned


def detect_document_context(text: str, client: CompletionClient) -> Optional[str]:
    """Ask the model for the document type; None when unknown or on any failure."""

    if not text.strip():
        return None
    prompt = build_context_prompt(text)
    try:
        raw = client.complete(prompt.user, system=prompt.system, max_output_tokens=_CONTEXT_MAX_TOKENS)
    except Exception as exc:
        logger.exception("Context detection failed: %s", exc)
        return None
    detected = _clean_detected(raw or "")
    logger.info("Detected document context: %r", detected)
    return detected


def resolve_context(
    user_context: Optional[str],
    text: str,
    client: CompletionClient,
) -> Optional[str]:
    """Return the user's context verbatim when given, else the detected one."""

    if user_context and user_context.strip():
        return user_context
    return detect_document_context(text, client)


__all__ = ["detect_document_context", "resolve_context"]
