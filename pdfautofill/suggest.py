"""Ask the completion capability for field values and validate its answer."""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from typing import Collection, Dict, List, Optional, Sequence

from .errors import AnalysisError, AutofillError, CreditExhaustedError
from .llm import CompletionClient
from .models import FieldSuggestion, PdfFieldDescriptor
from .policy import AllFieldsPolicy, FieldPolicy
from .prompts import build_fill_prompt

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.9

_CREDIT_PATTERN = re.compile(r"quota|billing|\brate\b|rate[\s_-]?limit|resource[\s_]exhausted", re.IGNORECASE)


def is_credit_exhausted(message: str) -> bool:
    """True when a provider failure message reports quota, billing or rate limits."""

    return bool(_CREDIT_PATTERN.search(message))


def classify_failure(exc: BaseException) -> AutofillError:
    message = str(exc)
    if is_credit_exhausted(message):
        return CreditExhaustedError(message)
    return AnalysisError(message or exc.__class__.__name__)


def _extract_json_dict(candidate_text: str) -> Dict[str, object]:
    """Extract a JSON object from model output, tolerating surrounding prose."""

    try:
        return json.loads(candidate_text)
    except json.JSONDecodeError:
        match = re.search(r"\{.*\}", candidate_text, flags=re.DOTALL)
        if not match:
            raise
        return json.loads(match.group(0))


def _coerce_value(raw: object) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, str):
        return None if raw.strip().lower() == "null" else raw
    if isinstance(raw, (int, float)):
        return str(raw)
    return json.dumps(raw, ensure_ascii=False)


def _coerce_confidence(raw: object) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return DEFAULT_CONFIDENCE
    return min(1.0, max(0.0, float(raw)))


def parse_suggestions(raw: str, known_names: Optional[Collection[str]] = None) -> List[FieldSuggestion]:
    """Turn the model's JSON answer into suggestions.

    Raises:
        AnalysisError: If the answer is not JSON or lacks a ``fields`` array.
    """

    try:
        payload = _extract_json_dict(raw.strip())
    except json.JSONDecodeError as exc:
        raise AnalysisError("Model response is not valid JSON.") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("fields"), list):
        raise AnalysisError("Model response has no 'fields' array.")

    suggestions: List[FieldSuggestion] = []
    seen: set[str] = set()
    for entry in payload["fields"]:
        if not isinstance(entry, dict):
            continue
        name = str(entry.get("name") or entry.get("id") or "").strip()
        if not name or name in seen:
            continue
        seen.add(name)
        if known_names is not None and name not in known_names:
            logger.debug("Model suggested unknown field '%s'; it will be skipped at fill time", name)
        suggestions.append(
            FieldSuggestion(
                field_name=name,
                suggested_value=_coerce_value(entry.get("value")),
                confidence=_coerce_confidence(entry.get("confidence")),
            )
        )
    logger.info("Model suggested values for %d fields", len(suggestions))
    return suggestions


def suggest_fields(
    text: str,
    context: Optional[str],
    fields: Sequence[PdfFieldDescriptor],
    client: CompletionClient,
    *,
    policy: Optional[FieldPolicy] = None,
    today: Optional[date] = None,
) -> List[FieldSuggestion]:
    """Single deterministic attempt at filling ``fields``; no retries.

    Raises:
        CreditExhaustedError: Provider quota, billing or rate limit reached.
        AnalysisError: Any other failure, including empty or malformed answers.
    """

    selected = (policy or AllFieldsPolicy()).select(fields)
    logger.info("Asking model about %d of %d fields", len(selected), len(fields))
    prompt = build_fill_prompt(selected, context, text, today=today or date.today())
    try:
        raw = client.complete(prompt.user, system=prompt.system, json_mode=True)
    except Exception as exc:
        logger.error("Completion failed: %s", exc)
        raise classify_failure(exc) from exc
    if not raw or not raw.strip():
        raise AnalysisError("Empty response from model.")
    return parse_suggestions(raw, known_names={descriptor.name for descriptor in fields})


__all__ = [
    "DEFAULT_CONFIDENCE",
    "classify_failure",
    "is_credit_exhausted",
    "parse_suggestions",
    "suggest_fields",
]
