"""Read the AcroForm field tree with pypdf.

This walks ``/AcroForm /Fields`` rather than page widgets, so it sees
fields exactly as a PDF viewer's form model does.
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import List

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from .errors import PdfParseError

logger = logging.getLogger(__name__)


def _open_reader(source: bytes) -> PdfReader:
    try:
        return PdfReader(BytesIO(source))
    except (PdfReadError, ValueError, OSError) as exc:
        raise PdfParseError(f"Could not read PDF: {exc}") from exc


def has_acroform(source: bytes) -> bool:
    reader = _open_reader(source)
    root = reader.trailer["/Root"]
    return "/AcroForm" in root


def list_field_names(source: bytes) -> List[str]:
    """Return fully qualified names of terminal form fields, in tree order.

    Intermediate nodes of hierarchical names (``form`` for ``form.name``)
    are omitted. Push buttons and signature fields are included.
    """

    reader = _open_reader(source)
    fields = reader.get_fields() or {}
    names = list(fields.keys())
    terminal = [name for name in names if not any(other.startswith(f"{name}.") for other in names)]
    logger.debug("AcroForm lists %d terminal fields", len(terminal))
    return terminal


__all__ = ["has_acroform", "list_field_names"]
