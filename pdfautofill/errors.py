"""Exceptions raised by PDF Autofill."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Failure conditions a caller can tell apart."""

    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    CREDIT_EXHAUSTED = "CREDIT_EXHAUSTED"
    ANALYSIS_FAILED = "ANALYSIS_FAILED"
    INVALID_CONTEXT = "INVALID_CONTEXT"
    CONFIGURATION = "CONFIGURATION"


class AutofillError(Exception):
    """Base exception for PDF Autofill errors."""

    code: Optional[ErrorCode] = None


class ExtractionError(AutofillError):
    """The PDF could not be turned into text and fields."""

    code = ErrorCode.EXTRACTION_FAILED


class PdfParseError(ExtractionError):
    """The source bytes are not a parsable PDF."""


class NoExtractableTextError(ExtractionError):
    """The PDF opened fine but holds no extractable text."""


class AnalysisError(AutofillError):
    """The completion capability failed or answered with something unusable."""

    code = ErrorCode.ANALYSIS_FAILED


class CreditExhaustedError(AutofillError):
    """The completion provider reported quota, billing or rate-limit exhaustion."""

    code = ErrorCode.CREDIT_EXHAUSTED


class InvalidContextError(AutofillError):
    """User-supplied context was rejected before reaching the model."""

    code = ErrorCode.INVALID_CONTEXT

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ConfigurationError(AutofillError):
    """The completion capability is not configured correctly."""

    code = ErrorCode.CONFIGURATION


class MissingCredentialError(ConfigurationError):
    """No API key is available for the completion capability."""


class CompletionError(Exception):
    """Raised by completion clients; carries the provider's failure message."""


class FieldApplyError(AutofillError):
    """A single field could not take its value. Never escapes the filler."""

    def __init__(self, field_name: str, message: str):
        super().__init__(f"{field_name}: {message}")
        self.field_name = field_name


__all__ = [
    "AnalysisError",
    "AutofillError",
    "CompletionError",
    "ConfigurationError",
    "CreditExhaustedError",
    "ErrorCode",
    "ExtractionError",
    "FieldApplyError",
    "InvalidContextError",
    "MissingCredentialError",
    "NoExtractableTextError",
    "PdfParseError",
]
