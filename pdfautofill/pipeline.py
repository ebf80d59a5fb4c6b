"""High level orchestration: the "analyze document" and "export" operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional

from .context import resolve_context
from .errors import InvalidContextError, NoExtractableTextError
from .filler import export_filled_pdf
from .guard import validate_user_context
from .llm import CompletionClient
from .models import AnalysisResult, ExtractedDocument, SignaturePlacement
from .parser import extract_document
from .policy import FieldPolicy
from .suggest import suggest_fields

logger = logging.getLogger(__name__)


@dataclass
class ParsedForm:
    pdf_bytes: bytes
    document: ExtractedDocument


def parse_pdf(pdf_bytes: bytes) -> ParsedForm:
    return ParsedForm(pdf_bytes=pdf_bytes, document=extract_document(pdf_bytes))


def check_user_context(user_context: Optional[str]) -> None:
    """Raise :class:`InvalidContextError` for unacceptable non-empty context."""

    if not user_context or not user_context.strip():
        return
    validation = validate_user_context(user_context.strip())
    if not validation.valid:
        logger.warning("Rejected user context: %s", validation.reason)
        raise InvalidContextError(validation.reason or "Invalid context")


def analyze_parsed_form(
    parsed_form: ParsedForm,
    user_context: Optional[str] = None,
    *,
    client: CompletionClient,
    policy: Optional[FieldPolicy] = None,
    today: Optional[date] = None,
) -> AnalysisResult:
    check_user_context(user_context)
    document = parsed_form.document
    if not document.has_text:
        raise NoExtractableTextError("Could not extract any text from the PDF.")

    context = resolve_context(user_context, document.text, client)
    suggestions = suggest_fields(
        document.text,
        context,
        document.fields,
        client,
        policy=policy,
        today=today,
    )
    return AnalysisResult(
        context=context or "",
        fields=suggestions,
        descriptors=list(document.fields),
        page_count=document.page_count,
    )


def analyze_document(
    pdf_bytes: bytes,
    user_context: Optional[str] = None,
    *,
    client: CompletionClient,
    policy: Optional[FieldPolicy] = None,
    today: Optional[date] = None,
) -> AnalysisResult:
    """Extract, resolve the context and ask the model for field values.

    Raises:
        InvalidContextError: ``user_context`` failed validation; no model call was made.
        ExtractionError: The PDF is unparsable or holds no text.
        CreditExhaustedError: The provider reported quota/billing/rate exhaustion.
        AnalysisError: Any other completion failure.
    """

    return analyze_parsed_form(
        parse_pdf(pdf_bytes),
        user_context,
        client=client,
        policy=policy,
        today=today,
    )


def export_document(
    pdf_bytes: bytes,
    values: Mapping[str, str],
    signature: Optional[SignaturePlacement] = None,
    flatten: bool = True,
) -> bytes:
    """Return a filled copy of ``pdf_bytes``; local, no model involved."""

    return export_filled_pdf(pdf_bytes, values, signature=signature, flatten=flatten)


__all__ = [
    "ParsedForm",
    "analyze_document",
    "analyze_parsed_form",
    "check_user_context",
    "export_document",
    "parse_pdf",
]
