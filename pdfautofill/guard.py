"""Validation of user-supplied document context before it reaches the model."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

MIN_CONTEXT_LENGTH = 5
MAX_CONTEXT_LENGTH = 500

REASON_TOO_SHORT = "Context is too short"
REASON_TOO_LONG = "Context is too long"
REASON_INVALID = "Invalid request for this context"

_BLOCKED_PATTERNS: Tuple[re.Pattern[str], ...] = (
    re.compile(r"ignore|forget|oublie|disregard", re.IGNORECASE),
    re.compile(r"jailbreak|bypass|hack|exploit", re.IGNORECASE),
    re.compile(r"write a|tell me|écris un|raconte", re.IGNORECASE),
    re.compile(r"code python|javascript|\bscripts?\b|write code", re.IGNORECASE),
    re.compile(r"pretend|act as|fais semblant", re.IGNORECASE),
)


@dataclass(frozen=True)
class ContextValidation:
    valid: bool
    reason: Optional[str] = None


def validate_user_context(context: str) -> ContextValidation:
    """Check length bounds and instruction-override vocabulary."""

    if len(context) < MIN_CONTEXT_LENGTH:
        return ContextValidation(False, REASON_TOO_SHORT)
    if len(context) > MAX_CONTEXT_LENGTH:
        return ContextValidation(False, REASON_TOO_LONG)
    for pattern in _BLOCKED_PATTERNS:
        if pattern.search(context):
            return ContextValidation(False, REASON_INVALID)
    return ContextValidation(True)


__all__ = [
    "ContextValidation",
    "MAX_CONTEXT_LENGTH",
    "MIN_CONTEXT_LENGTH",
    "REASON_INVALID",
    "REASON_TOO_LONG",
    "REASON_TOO_SHORT",
    "validate_user_context",
]
