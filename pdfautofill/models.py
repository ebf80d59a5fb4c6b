"""Data models for PDF Autofill."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .utils import decode_data_url


class FieldKind(str, Enum):
    """Closed set of fillable AcroForm field kinds."""

    TEXT = "text"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SELECT = "select"


@dataclass(frozen=True)
class PdfFieldDescriptor:
    """A named form field found in a PDF, with its inferred label."""

    name: str
    kind: FieldKind
    inferred_label: Optional[str] = None
    options: Tuple[str, ...] = ()
    page: int = 0


@dataclass(frozen=True)
class TextRun:
    """A positioned run of page text in PDF point space (origin bottom-left)."""

    content: str
    x: float
    y: float


@dataclass(frozen=True)
class FieldSuggestion:
    """A value proposed for a field. ``None`` means the field must stay empty."""

    field_name: str
    suggested_value: Optional[str]
    confidence: float = 0.9


@dataclass(frozen=True)
class PdfRect:
    """Rectangle in PDF point space, (x, y) being the lower-left corner."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class SignaturePlacement:
    """Signature image positioned in the screen space of a rendered page."""

    image_bytes: bytes
    x: float
    y: float
    width: float
    height: float
    container_width: float
    container_height: float
    page_index: int = 0

    def __post_init__(self) -> None:
        if self.container_width <= 0 or self.container_height <= 0:
            raise ValueError("Container dimensions must be positive.")
        if self.page_index < 0:
            raise ValueError("page_index must not be negative.")

    @classmethod
    def from_data_url(
        cls,
        data_url: str,
        *,
        x: float,
        y: float,
        width: float,
        height: float,
        container_width: float,
        container_height: float,
        page_index: int = 0,
    ) -> "SignaturePlacement":
        return cls(
            image_bytes=decode_data_url(data_url),
            x=x,
            y=y,
            width=width,
            height=height,
            container_width=container_width,
            container_height=container_height,
            page_index=page_index,
        )

    def to_pdf_rect(self, page_width: float, page_height: float) -> PdfRect:
        """Convert the top-left-origin screen rectangle into page space.

        The screen container is assumed to show the whole page, so each axis
        is scaled independently before the vertical flip.
        """

        scale_x = page_width / self.container_width
        scale_y = page_height / self.container_height
        pdf_width = self.width * scale_x
        pdf_height = self.height * scale_y
        return PdfRect(
            x=self.x * scale_x,
            y=page_height - (self.y * scale_y) - pdf_height,
            width=pdf_width,
            height=pdf_height,
        )


@dataclass(frozen=True)
class ExtractedDocument:
    """Text and form fields recovered from one PDF."""

    text: str
    fields: List[PdfFieldDescriptor] = field(default_factory=list)
    page_count: int = 0

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())

    @property
    def field_names(self) -> List[str]:
        return [descriptor.name for descriptor in self.fields]


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of the "analyze document" operation."""

    context: str
    fields: List[FieldSuggestion]
    descriptors: List[PdfFieldDescriptor] = field(default_factory=list)
    page_count: int = 0
