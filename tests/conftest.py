"""Shared fixtures: hand-built AcroForm PDFs and a recording completion client."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import fitz
import pytest

PAGE_WIDTH = 595
PAGE_HEIGHT = 842

_PAGE_TEXT = b"""BT /F1 10 Tf 50 800 Td (Declaration of foreign accounts) Tj ET
BT /F1 12 Tf 50 695 Td (Full name) Tj ET
BT /F1 12 Tf 50 645 Td (Age) Tj ET
BT /F1 12 Tf 50 592 Td (Account type) Tj ET
BT /F1 12 Tf 50 542 Td (Answer) Tj ET
BT /F1 12 Tf 50 495 Td (Country of residence) Tj ET
"""


def _stream(data: bytes, extra: str = "") -> bytes:
    header = f"<< /Length {len(data)} {extra}>>\nstream\n".encode()
    return header + data + b"\nendstream"


def build_pdf(objects: Dict[int, bytes], root: int = 1) -> bytes:
    """Serialise numbered objects into a PDF with a correct xref table."""

    out = bytearray(b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n")
    offsets: Dict[int, int] = {}
    for number in sorted(objects):
        offsets[number] = len(out)
        out += f"{number} 0 obj\n".encode() + objects[number] + b"\nendobj\n"
    size = max(objects) + 1
    xref_position = len(out)
    out += f"xref\n0 {size}\n".encode()
    out += b"0000000000 65535 f \n"
    for number in range(1, size):
        out += f"{offsets[number]:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {size} /Root {root} 0 R >>\nstartxref\n{xref_position}\n%%EOF\n".encode()
    return bytes(out)


def _button_widget(parent: int, x: float, y: float, state: str) -> bytes:
    return (
        f"<< /Type /Annot /Subtype /Widget /Parent {parent} 0 R /Rect [{x} {y} {x + 12} {y + 12}] "
        f"/AS /Off /AP << /N << /{state} 16 0 R /Off 17 0 R >> /D << /{state} 16 0 R /Off 17 0 R >> >> "
        f"/MK << >> /P 4 0 R /F 4 >>"
    ).encode()


def build_form_pdf() -> bytes:
    """One page holding a text field pair, a 3-state checkbox group, a radio group and a combo box."""

    objects = {
        1: b"<< /Type /Catalog /Pages 2 0 R /AcroForm 3 0 R >>",
        2: b"<< /Type /Pages /Kids [4 0 R] /Count 1 >>",
        3: b"<< /Fields [6 0 R 7 0 R 8 0 R 12 0 R 15 0 R] /DA (/Helv 0 Tf 0 g) "
        b"/DR << /Font << /Helv 5 0 R >> >> >>",
        4: f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {PAGE_WIDTH} {PAGE_HEIGHT}] /Contents 18 0 R "
        f"/Resources << /Font << /F1 5 0 R >> >> "
        f"/Annots [6 0 R 7 0 R 9 0 R 10 0 R 11 0 R 13 0 R 14 0 R 15 0 R] >>".encode(),
        5: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
        6: b"<< /Type /Annot /Subtype /Widget /FT /Tx /T (name) /Rect [150 690 350 710] "
        b"/P 4 0 R /F 4 /DA (/Helv 12 Tf 0 g) >>",
        7: b"<< /Type /Annot /Subtype /Widget /FT /Tx /T (age) /Rect [150 640 250 660] "
        b"/P 4 0 R /F 4 /DA (/Helv 12 Tf 0 g) >>",
        8: b"<< /FT /Btn /T (account) /V /Off /Kids [9 0 R 10 0 R 11 0 R] >>",
        9: _button_widget(8, 150, 590, "a"),
        10: _button_widget(8, 200, 590, "b"),
        11: _button_widget(8, 250, 590, "c"),
        12: b"<< /FT /Btn /Ff 49152 /T (choice) /V /Off /Kids [13 0 R 14 0 R] >>",
        13: _button_widget(12, 150, 540, "yes"),
        14: _button_widget(12, 200, 540, "no"),
        15: b"<< /Type /Annot /Subtype /Widget /FT /Ch /Ff 131072 /T (country) "
        b"/Opt [(France) (Germany) (Spain)] /Rect [150 490 300 510] /P 4 0 R /F 4 "
        b"/DA (/Helv 10 Tf 0 g) >>",
        16: _stream(b"0 g 2 2 8 8 re f", "/Type /XObject /Subtype /Form /BBox [0 0 12 12] "),
        17: _stream(b"% off", "/Type /XObject /Subtype /Form /BBox [0 0 12 12] "),
        18: _stream(_PAGE_TEXT),
    }
    return build_pdf(objects)


def build_plain_pdf(text: Optional[str] = "Hello plain world", pages: int = 1) -> bytes:
    doc = fitz.open()
    for index in range(pages):
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        if text:
            page.insert_text((72, 72), f"{text} {index + 1}")
    try:
        return doc.tobytes()
    finally:
        doc.close()


def build_png(width: int = 20, height: int = 8) -> bytes:
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(0)
    return pix.tobytes("png")


def build_two_page_form_pdf() -> bytes:
    """One text field named "dup" whose widgets sit on two pages under different labels."""

    def page_text(label: str) -> bytes:
        return f"BT /F1 12 Tf 50 695 Td ({label}) Tj ET\n".encode()

    widget = "<< /Type /Annot /Subtype /Widget /Parent 7 0 R /Rect [150 690 350 710] /P {page} 0 R /F 4 /DA (/Helv 12 Tf 0 g) >>"
    objects = {
        1: b"<< /Type /Catalog /Pages 2 0 R /AcroForm 3 0 R >>",
        2: b"<< /Type /Pages /Kids [4 0 R 5 0 R] /Count 2 >>",
        3: b"<< /Fields [7 0 R] /DA (/Helv 0 Tf 0 g) /DR << /Font << /Helv 6 0 R >> >> >>",
        4: f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {PAGE_WIDTH} {PAGE_HEIGHT}] /Contents 10 0 R "
        f"/Resources << /Font << /F1 6 0 R >> >> /Annots [8 0 R] >>".encode(),
        5: f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {PAGE_WIDTH} {PAGE_HEIGHT}] /Contents 11 0 R "
        f"/Resources << /Font << /F1 6 0 R >> >> /Annots [9 0 R] >>".encode(),
        6: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
        7: b"<< /FT /Tx /T (dup) /Kids [8 0 R 9 0 R] >>",
        8: widget.format(page=4).encode(),
        9: widget.format(page=5).encode(),
        10: _stream(page_text("Label page 0")),
        11: _stream(page_text("Label page 1")),
    }
    return build_pdf(objects)


def build_editable_combo_pdf() -> bytes:
    """A single combo box carrying the Edit flag, so typed values are allowed."""

    objects = {
        1: b"<< /Type /Catalog /Pages 2 0 R /AcroForm 3 0 R >>",
        2: b"<< /Type /Pages /Kids [4 0 R] /Count 1 >>",
        3: b"<< /Fields [6 0 R] /DA (/Helv 0 Tf 0 g) /DR << /Font << /Helv 5 0 R >> >> >>",
        4: f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {PAGE_WIDTH} {PAGE_HEIGHT}] "
        f"/Annots [6 0 R] >>".encode(),
        5: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>",
        6: b"<< /Type /Annot /Subtype /Widget /FT /Ch /Ff 393216 /T (colour) "
        b"/Opt [(Red) (Blue)] /Rect [150 490 300 510] /P 4 0 R /F 4 /DA (/Helv 10 Tf 0 g) >>",
    }
    return build_pdf(objects)


def encrypt_pdf(source: bytes, user_pw: str = "secret") -> bytes:
    doc = fitz.open(stream=source, filetype="pdf")
    try:
        return doc.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, user_pw=user_pw, owner_pw=f"owner-{user_pw}")
    finally:
        doc.close()


class RecordingClient:
    """Completion client double that replays canned answers and records calls."""

    def __init__(self, responses: Optional[List[str]] = None, error: Optional[Exception] = None):
        self.responses = list(responses or [])
        self.error = error
        self.calls: List[dict] = []

    def complete(self, prompt, *, system=None, json_mode=False, max_output_tokens=None):
        self.calls.append(
            {
                "prompt": prompt,
                "system": system,
                "json_mode": json_mode,
                "max_output_tokens": max_output_tokens,
            }
        )
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


@pytest.fixture
def form_pdf() -> bytes:
    return build_form_pdf()


@pytest.fixture
def plain_pdf() -> bytes:
    return build_plain_pdf()


@pytest.fixture
def blank_pdf() -> bytes:
    return build_plain_pdf(text=None)


@pytest.fixture
def png_bytes() -> bytes:
    return build_png()


@pytest.fixture(autouse=True)
def _reset_package_logger():
    # The CLI installs a stream handler bound to the stderr captured for that test.
    yield
    logger = logging.getLogger("pdfautofill")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def encrypted_form_pdf() -> bytes:
    return encrypt_pdf(build_form_pdf())
