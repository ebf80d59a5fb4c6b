"""Write values back into a PDF form, flatten it and stamp a signature."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

import fitz

from .errors import FieldApplyError, PdfParseError
from .models import FieldKind, PdfRect, SignaturePlacement
from .parser import choice_options, map_widget_kind, open_document, widget_field_name, widget_on_state

logger = logging.getLogger(__name__)

_OFF_STATE = "Off"
_DEFAULT_ON_STATE = "Yes"
_CHECKED_VALUES = frozenset({"true", "on"})
_UNCHECKED_VALUES = frozenset({"false", "off"})
_NAME_DELIMITERS = frozenset("()<>[]{}/%#")
# Choice field flag bit 19: the combo box also takes typed text.
_CHOICE_EDIT_FLAG = 1 << 18


@dataclass(frozen=True)
class _WidgetRef:
    page: int
    xref: int
    kind: FieldKind
    on_state: Optional[str] = None


@dataclass
class FillReport:
    """What happened to each requested field during a fill."""

    applied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)


def _pdf_name(value: str) -> str:
    """Encode ``value`` as a PDF name object, escaping irregular bytes as ``#xx``."""

    parts: List[str] = []
    for byte in value.encode("utf-8"):
        char = chr(byte)
        if 0x21 <= byte <= 0x7E and char not in _NAME_DELIMITERS:
            parts.append(char)
        else:
            parts.append(f"#{byte:02X}")
    return "/" + "".join(parts)


def _xref_of(doc: fitz.Document, xref: int, key: str) -> Optional[int]:
    kind, value = doc.xref_get_key(xref, key)
    if kind != "xref":
        return None
    return int(value.split()[0])


def _terminal_field_xref(doc: fitz.Document, widget_xref: int) -> int:
    """Return the object holding the field's /T, starting from a widget annotation."""

    xref = widget_xref
    while doc.xref_get_key(xref, "T")[0] == "null":
        parent = _xref_of(doc, xref, "Parent")
        if parent is None:
            return widget_xref
        xref = parent
    return xref


def index_widgets(doc: fitz.Document) -> Dict[str, List[_WidgetRef]]:
    """Group fillable widgets by field name, in page then annotation order."""

    index: Dict[str, List[_WidgetRef]] = {}
    for page_index in range(doc.page_count):
        page = doc[page_index]
        for widget in page.widgets() or []:
            name = widget_field_name(widget)
            kind = map_widget_kind(widget)
            if not name or kind is None:
                continue
            on_state = widget_on_state(widget) if kind in {FieldKind.CHECKBOX, FieldKind.RADIO} else None
            index.setdefault(name, []).append(_WidgetRef(page_index, widget.xref, kind, on_state))
    return index


def _set_button_state(doc: fitz.Document, refs: List[_WidgetRef], state: str) -> None:
    """Set the field value to ``state`` and show it only on widgets exporting it."""

    field_xrefs = set()
    for ref in refs:
        shows_state = state != _OFF_STATE and (ref.on_state == state or ref.on_state is None)
        doc.xref_set_key(ref.xref, "AS", _pdf_name(state if shows_state else _OFF_STATE))
        field_xrefs.add(_terminal_field_xref(doc, ref.xref))
    for xref in sorted(field_xrefs):
        doc.xref_set_key(xref, "V", _pdf_name(state))


def _apply_text(doc: fitz.Document, refs: List[_WidgetRef], value: str) -> None:
    for ref in refs:
        page = doc[ref.page]
        widget = page.load_widget(ref.xref)
        widget.field_value = value
        widget.update()


def _apply_checkbox(doc: fitz.Document, name: str, refs: List[_WidgetRef], value: str) -> None:
    normalized = value.strip().lower()
    if normalized in _CHECKED_VALUES:
        state = next((ref.on_state for ref in refs if ref.on_state), _DEFAULT_ON_STATE)
    elif normalized in _UNCHECKED_VALUES:
        state = _OFF_STATE
    else:
        # Export value of one widget in a group sharing this field name.
        state = value
    logger.debug("Checkbox '%s' -> state '%s'", name, state)
    _set_button_state(doc, refs, state)


def _apply_radio(doc: fitz.Document, name: str, refs: List[_WidgetRef], value: str) -> None:
    states = [ref.on_state for ref in refs if ref.on_state]
    if value not in states:
        raise FieldApplyError(name, f"'{value}' is not one of the radio options {states}")
    _set_button_state(doc, refs, value)


def _accepts_free_text(widget: fitz.Widget) -> bool:
    flags = getattr(widget, "field_flags", 0)
    return isinstance(flags, int) and bool(flags & _CHOICE_EDIT_FLAG)


def _apply_select(doc: fitz.Document, name: str, refs: List[_WidgetRef], value: str) -> None:
    for ref in refs:
        page = doc[ref.page]
        widget = page.load_widget(ref.xref)
        options = choice_options(widget)
        if value not in options and not _accepts_free_text(widget):
            raise FieldApplyError(name, f"'{value}' is not one of the options {list(options)}")
        widget.field_value = value
        widget.update()


def fill_form(doc: fitz.Document, values: Mapping[str, str]) -> FillReport:
    """Apply ``values`` to the form fields of an open document.

    Unknown field names are skipped. A field that rejects its value is
    logged and left unchanged; the remaining fields are still filled.
    """

    report = FillReport()
    index = index_widgets(doc)
    for name, value in values.items():
        refs = index.get(name)
        if not refs:
            logger.debug("No field named '%s'; skipping", name)
            report.skipped.append(name)
            continue
        kind = refs[0].kind
        try:
            if kind == FieldKind.TEXT:
                _apply_text(doc, refs, value)
            elif kind == FieldKind.CHECKBOX:
                _apply_checkbox(doc, name, refs, value)
            elif kind == FieldKind.RADIO:
                _apply_radio(doc, name, refs, value)
            elif kind == FieldKind.SELECT:
                _apply_select(doc, name, refs, value)
        except Exception as exc:
            logger.warning("Could not set field '%s': %s", name, exc)
            report.failed[name] = str(exc)
            continue
        report.applied.append(name)
    logger.info(
        "Filled %d fields (%d skipped, %d failed)",
        len(report.applied),
        len(report.skipped),
        len(report.failed),
    )
    return report


def flatten_form(doc: fitz.Document) -> None:
    """Bake widget appearances into page content and drop the interactive fields."""

    doc.bake(annots=False, widgets=True)


def embed_signature(doc: fitz.Document, signature: SignaturePlacement) -> Optional[PdfRect]:
    """Draw the signature image on its page; returns the rectangle used.

    Page indices past the end clamp to the last page. An undecodable image is
    logged and the document is left without a signature.
    """

    page_index = min(signature.page_index, doc.page_count - 1)
    page = doc[page_index]
    mediabox = page.mediabox
    pdf_rect = signature.to_pdf_rect(mediabox.width, mediabox.height)
    target = fitz.Rect(
        pdf_rect.x,
        pdf_rect.y,
        pdf_rect.x + pdf_rect.width,
        pdf_rect.y + pdf_rect.height,
    ) * page.transformation_matrix
    try:
        page.insert_image(target, stream=signature.image_bytes, keep_proportion=False)
    except Exception as exc:
        logger.error("Could not embed signature on page %d: %s", page_index, exc)
        return None
    logger.info("Embedded signature on page %d at %s", page_index, pdf_rect)
    return pdf_rect


def export_filled_pdf(
    source: bytes,
    values: Mapping[str, str],
    signature: Optional[SignaturePlacement] = None,
    flatten: bool = True,
) -> bytes:
    """Fill, optionally flatten, optionally sign, and serialise a PDF.

    Raises:
        PdfParseError: If ``source`` cannot be opened as a PDF.
    """

    doc = open_document(source)
    try:
        if doc.needs_pass and not doc.authenticate(""):
            raise PdfParseError("The PDF is encrypted.")
        fill_form(doc, values)
        if flatten:
            flatten_form(doc)
        if signature is not None:
            embed_signature(doc, signature)
        return doc.tobytes(garbage=3, deflate=True, no_new_id=True)
    finally:
        doc.close()


__all__ = [
    "FillReport",
    "embed_signature",
    "export_filled_pdf",
    "fill_form",
    "flatten_form",
    "index_widgets",
]
