"""PDF parsing utilities: page text, positioned text runs and form widgets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import fitz

from .errors import PdfParseError
from .labels import find_nearest_label
from .models import ExtractedDocument, FieldKind, PdfFieldDescriptor, TextRun

logger = logging.getLogger(__name__)

_WIDGET_KIND_MAP: Dict[int, FieldKind] = {}
_WIDGET_KIND_PAIRS = {
    "PDF_WIDGET_TYPE_TEXT": FieldKind.TEXT,
    "PDF_WIDGET_TYPE_CHECKBOX": FieldKind.CHECKBOX,
    "PDF_WIDGET_TYPE_RADIOBUTTON": FieldKind.RADIO,
    "PDF_WIDGET_TYPE_COMBOBOX": FieldKind.SELECT,
    "PDF_WIDGET_TYPE_LISTBOX": FieldKind.SELECT,
}
for attr_name, field_kind in _WIDGET_KIND_PAIRS.items():
    value = getattr(fitz, attr_name, None)
    if isinstance(value, int):
        _WIDGET_KIND_MAP[value] = field_kind


@dataclass
class _FieldBuilder:
    name: str
    kind: FieldKind
    label: Optional[str]
    page: int
    options: List[str] = field(default_factory=list)

    def add_options(self, options: Tuple[str, ...]) -> None:
        for option in options:
            if option not in self.options:
                self.options.append(option)

    def build(self) -> PdfFieldDescriptor:
        return PdfFieldDescriptor(
            name=self.name,
            kind=self.kind,
            inferred_label=self.label,
            options=tuple(self.options),
            page=self.page,
        )


def open_document(source: bytes) -> fitz.Document:
    """Open PDF bytes with PyMuPDF, raising :class:`PdfParseError` on failure."""

    if not source:
        raise PdfParseError("The PDF is empty.")
    try:
        doc = fitz.open(stream=source, filetype="pdf")
    except (RuntimeError, ValueError, TypeError) as exc:
        raise PdfParseError(f"Could not open PDF: {exc}") from exc
    if not doc.is_pdf or (doc.page_count == 0 and not doc.needs_pass):
        doc.close()
        raise PdfParseError("The document has no PDF pages.")
    return doc


def map_widget_kind(widget: fitz.Widget) -> Optional[FieldKind]:
    """Return the field kind of a widget, or None for push buttons and signatures."""

    widget_type = getattr(widget, "field_type", None)
    if isinstance(widget_type, int):
        return _WIDGET_KIND_MAP.get(widget_type)
    return None


def widget_field_name(widget: fitz.Widget) -> Optional[str]:
    name = getattr(widget, "field_name", None)
    if isinstance(name, str):
        return name.strip() or None
    return None


def _appearance_states(widget: fitz.Widget) -> List[str]:
    try:
        states = widget.button_states() or {}
    except (RuntimeError, ValueError, AttributeError):
        return []
    names: List[str] = []
    for key in ("normal", "down"):
        for state in states.get(key) or []:
            if isinstance(state, str) and state and state != "Off" and state not in names:
                names.append(state)
    return names


def widget_on_state(widget: fitz.Widget) -> Optional[str]:
    """Return the export state a checkbox/radio widget shows when selected.

    ``Widget.on_state()`` is trusted when the appearance dictionary knows its
    answer; some MuPDF releases report ``Yes`` for every checkbox, so a
    group with states a/b/c falls back to the appearance names.
    """

    states = _appearance_states(widget)
    try:
        reported = widget.on_state()
    except (RuntimeError, ValueError, AttributeError):
        reported = None
    if isinstance(reported, str) and reported and reported != "Off" and (not states or reported in states):
        return reported
    return states[0] if states else None


def choice_options(widget: fitz.Widget) -> Tuple[str, ...]:
    options: List[str] = []
    for entry in getattr(widget, "choice_values", None) or []:
        if isinstance(entry, (list, tuple)):
            entry = entry[0] if entry else None
        if isinstance(entry, str) and entry:
            options.append(entry)
    return tuple(options)


def _widget_options(widget: fitz.Widget, kind: FieldKind) -> Tuple[str, ...]:
    if kind in {FieldKind.CHECKBOX, FieldKind.RADIO}:
        state = widget_on_state(widget)
        return (state,) if state else ()
    if kind == FieldKind.SELECT:
        return choice_options(widget)
    return ()


def _alternative_text(widget: fitz.Widget, name: str) -> Optional[str]:
    # MuPDF falls back to the field name when /TU is absent.
    label = getattr(widget, "field_label", None)
    if not isinstance(label, str):
        return None
    label = label.strip()
    if not label or label == name or label == name.rsplit(".", 1)[-1]:
        return None
    return label


def extract_text_runs(page: fitz.Page) -> List[TextRun]:
    """Return the page's text spans with their baseline origin in PDF space."""

    raw_dict = page.get_text("dict")
    if not isinstance(raw_dict, dict):
        return []
    to_pdf = ~page.transformation_matrix
    runs: List[TextRun] = []
    for block in raw_dict.get("blocks", []):
        if not isinstance(block, dict) or block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if not isinstance(text, str) or not text.strip():
                    continue
                origin = span.get("origin")
                if not isinstance(origin, (list, tuple)) or len(origin) != 2:
                    continue
                point = fitz.Point(origin) * to_pdf
                runs.append(TextRun(content=text.strip(), x=float(point.x), y=float(point.y)))
    return runs


def widget_anchor(page: fitz.Page, widget: fitz.Widget) -> Tuple[float, float]:
    """Lower-left corner of the widget rectangle in PDF space."""

    pdf_rect = widget.rect * ~page.transformation_matrix
    return float(pdf_rect.x0), float(pdf_rect.y0)


def _collect_page_fields(
    page: fitz.Page,
    page_index: int,
    builders: Dict[str, _FieldBuilder],
) -> None:
    widgets = list(page.widgets() or [])
    if not widgets:
        return
    runs = extract_text_runs(page)
    for widget in widgets:
        name = widget_field_name(widget)
        if not name:
            continue
        kind = map_widget_kind(widget)
        if kind is None:
            logger.debug("Skipping non-fillable widget '%s' on page %d", name, page_index)
            continue
        options = _widget_options(widget, kind)
        existing = builders.get(name)
        if existing is not None:
            existing.add_options(options)
            continue
        field_x, field_y = widget_anchor(page, widget)
        label = find_nearest_label(runs, field_x, field_y) or _alternative_text(widget, name)
        builder = _FieldBuilder(name=name, kind=kind, label=label, page=page_index)
        builder.add_options(options)
        builders[name] = builder
        logger.debug("Found %s field '%s' on page %d label=%r", kind.value, name, page_index, label)


def extract_document(source: bytes) -> ExtractedDocument:
    """Extract the flattened text and the form-field descriptors of a PDF.

    Encrypted documents that cannot be opened with an empty password yield
    an empty result rather than an error; callers decide what no text means.
    """

    doc = open_document(source)
    try:
        if doc.needs_pass and not doc.authenticate(""):
            logger.warning("PDF is encrypted; no text or fields extracted")
            return ExtractedDocument(text="", fields=[], page_count=doc.page_count)

        page_texts: List[str] = []
        builders: Dict[str, _FieldBuilder] = {}
        for page_index in range(doc.page_count):
            page = doc[page_index]
            page_texts.append(page.get_text("text"))
            _collect_page_fields(page, page_index, builders)

        fields = [builder.build() for builder in builders.values()]
        logger.info("Extracted %d fields from %d pages", len(fields), doc.page_count)
        return ExtractedDocument(text="\n".join(page_texts), fields=fields, page_count=doc.page_count)
    finally:
        doc.close()


def extract_fields(source: bytes) -> List[PdfFieldDescriptor]:
    return extract_document(source).fields


def extract_text(source: bytes) -> str:
    return extract_document(source).text


__all__ = [
    "extract_document",
    "extract_fields",
    "extract_text",
    "choice_options",
    "extract_text_runs",
    "map_widget_kind",
    "open_document",
    "widget_anchor",
    "widget_field_name",
    "widget_on_state",
]
