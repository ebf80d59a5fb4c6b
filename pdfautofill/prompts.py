"""Prompt construction for context detection and field filling.

Prompts are pure functions of their inputs (the current date is passed in)
so an identical document and context always produce an identical request.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from .models import FieldKind, PdfFieldDescriptor
from .utils import excerpt

CONTEXT_EXCERPT_CHARS = 1500
FILL_EXCERPT_CHARS = 8000
UNKNOWN_CONTEXT = "UNKNOWN"

_FRENCH_MARKERS = re.compile(r"déclaration|formulaire|compte|étranger|impôts|cerfa", re.IGNORECASE)

_KIND_TAGS = {
    FieldKind.TEXT: "[TEXT]",
    FieldKind.CHECKBOX: "[CHECKBOX]",
    FieldKind.RADIO: "[RADIO]",
    FieldKind.SELECT: "[SELECT]",
}

CONTEXT_SYSTEM_PROMPT = f"""Identify the type of the document. Answer with the type as one short phrase.
Examples: "Foreign bank account declaration", "CERFA administrative form", "Employment contract".
If you are unsure, answer exactly "{UNKNOWN_CONTEXT}"."""


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str


def build_context_prompt(text: str) -> Prompt:
    return Prompt(
        system=CONTEXT_SYSTEM_PROMPT,
        user=f"What type of document is this?\n\n{excerpt(text, CONTEXT_EXCERPT_CHARS)}",
    )


def detect_form_origin(text: str) -> str:
    return "French/European" if _FRENCH_MARKERS.search(text) else "Unknown"


def format_field_line(descriptor: PdfFieldDescriptor) -> str:
    line = f"- {descriptor.name} {_KIND_TAGS[descriptor.kind]}"
    if descriptor.inferred_label:
        line += f': "{descriptor.inferred_label}"'
    if descriptor.options:
        line += f" (options: {', '.join(descriptor.options)})"
    return line


def format_field_list(fields: Sequence[PdfFieldDescriptor]) -> str:
    if not fields:
        return "(no fillable fields were detected; use short snake_case ids for the fields you find in the text)"
    return "\n".join(format_field_line(descriptor) for descriptor in fields)


def build_fill_prompt(
    fields: Sequence[PdfFieldDescriptor],
    context: Optional[str],
    text: str,
    *,
    today: date,
) -> Prompt:
    """Build the system/user prompt pair asking the model for field values."""

    user_context = context or "(none provided)"
    system = f"""You analyse PDF forms and return JSON describing the values to fill in.

FORM ORIGIN: {detect_form_origin(text)}
USER CONTEXT: "{user_context}"

AVAILABLE FIELDS (name [type]: "nearby label" (options)):
{format_field_list(fields)}

RULES for "value":
1. If the user context contains personal data (name, age, address, email, ...), use it for the matching fields.
2. Without such data, answer null for personal identifiers: names, addresses, emails, phone numbers, tax IDs, account numbers (IBAN), social security numbers, amounts and signatures. Never invent them.
3. Always suggest: dates ({today.strftime("%d/%m/%Y")} when unconstrained), checkboxes (false by default), country when the context makes it obvious.
4. For checkboxes, radio groups and selects that list options, answer with one of the listed options, or "true"/"false" for a plain checkbox.
5. Use only the field names listed above.

RESPOND IN JSON ONLY:
{{"fields": [{{"name": "FIELD_NAME", "value": "VALUE or null", "confidence": 0.9}}]}}"""

    user = f"Here is the text of the form. Analyse it and fill the appropriate fields:\n\n{excerpt(text, FILL_EXCERPT_CHARS)}"
    return Prompt(system=system, user=user)


__all__ = [
    "CONTEXT_EXCERPT_CHARS",
    "FILL_EXCERPT_CHARS",
    "Prompt",
    "UNKNOWN_CONTEXT",
    "build_context_prompt",
    "build_fill_prompt",
    "detect_form_origin",
    "format_field_line",
    "format_field_list",
]
