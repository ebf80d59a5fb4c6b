"""PDF Autofill package."""

from .acroform import list_field_names
from .config import Settings
from .context import detect_document_context, resolve_context
from .errors import (
    AnalysisError,
    AutofillError,
    CompletionError,
    ConfigurationError,
    CreditExhaustedError,
    ErrorCode,
    ExtractionError,
    InvalidContextError,
    MissingCredentialError,
    NoExtractableTextError,
    PdfParseError,
)
from .filler import FillReport, export_filled_pdf, fill_form
from .guard import validate_user_context
from .labels import find_nearest_label, is_meaningful_label
from .llm import CompletionClient, GeminiCompletionClient
from .models import (
    AnalysisResult,
    ExtractedDocument,
    FieldKind,
    FieldSuggestion,
    PdfFieldDescriptor,
    PdfRect,
    SignaturePlacement,
    TextRun,
)
from .parser import extract_document, extract_fields, extract_text
from .pipeline import analyze_document, export_document, parse_pdf
from .policy import AllFieldsPolicy, KeywordFieldsPolicy, LabelledFieldsPolicy, institution_policy
from .state import FormStateStore, FormValueUpdate
from .suggest import suggest_fields

__all__ = [
	"AllFieldsPolicy",
	"AnalysisError",
	"AnalysisResult",
	"AutofillError",
	"CompletionClient",
	"CompletionError",
	"ConfigurationError",
	"CreditExhaustedError",
	"ErrorCode",
	"ExtractedDocument",
	"ExtractionError",
	"FieldKind",
	"FieldSuggestion",
	"FillReport",
	"FormStateStore",
	"FormValueUpdate",
	"GeminiCompletionClient",
	"InvalidContextError",
	"KeywordFieldsPolicy",
	"LabelledFieldsPolicy",
	"MissingCredentialError",
	"NoExtractableTextError",
	"PdfFieldDescriptor",
	"PdfParseError",
	"PdfRect",
	"Settings",
	"SignaturePlacement",
	"TextRun",
	"analyze_document",
	"detect_document_context",
	"export_document",
	"export_filled_pdf",
	"extract_document",
	"extract_fields",
	"extract_text",
	"fill_form",
	"find_nearest_label",
	"institution_policy",
	"is_meaningful_label",
	"list_field_names",
	"parse_pdf",
	"resolve_context",
	"suggest_fields",
	"validate_user_context",
]
