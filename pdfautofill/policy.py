"""Policies deciding which fields the model is allowed to fill.

A policy is any object with ``select(fields) -> list``. The keyword lists
below are tuned for French administrative forms about foreign accounts;
swap the policy rather than editing the lists for other document families.
"""

from __future__ import annotations

import re
from typing import List, Protocol, Sequence, Tuple

from .models import PdfFieldDescriptor

_CONTROL_CHARS = re.compile(r"[\x00-\x1F]")

INSTITUTION_KEYWORDS: Tuple[str, ...] = (
    "organisme",
    "établissement",
    "psan",
    "gestionnaire",
    "désignation",
    "raison sociale",
    "url",
    "actifs numériques",
    "compte bancaire",
    "caractéristiques",
    "institution",
    "organisation",
    "organization",
    "bank name",
    "company name",
    "provider",
)


class FieldPolicy(Protocol):
    def select(self, fields: Sequence[PdfFieldDescriptor]) -> List[PdfFieldDescriptor]:
        ...


class AllFieldsPolicy:
    """Let the model see every extracted field."""

    def select(self, fields: Sequence[PdfFieldDescriptor]) -> List[PdfFieldDescriptor]:
        return list(fields)


class LabelledFieldsPolicy:
    """Keep fields whose inferred label is present, readable and long enough."""

    def __init__(self, min_label_length: int = 5):
        self.min_label_length = min_label_length

    def is_readable(self, descriptor: PdfFieldDescriptor) -> bool:
        label = descriptor.inferred_label
        if not label:
            return False
        if _CONTROL_CHARS.search(label):
            return False
        return len(label) >= self.min_label_length

    def select(self, fields: Sequence[PdfFieldDescriptor]) -> List[PdfFieldDescriptor]:
        return [descriptor for descriptor in fields if self.is_readable(descriptor)]


class KeywordFieldsPolicy(LabelledFieldsPolicy):
    """Keep readable fields whose label mentions one of ``keywords``."""

    def __init__(self, keywords: Sequence[str], min_label_length: int = 5):
        super().__init__(min_label_length)
        self.keywords = tuple(keyword.lower() for keyword in keywords)

    def matches(self, label: str) -> bool:
        lowered = label.lower()
        if any(keyword in lowered for keyword in self.keywords):
            return True
        return "adresse" in lowered and ("organisme" in lowered or "gestionnaire" in lowered)

    def select(self, fields: Sequence[PdfFieldDescriptor]) -> List[PdfFieldDescriptor]:
        return [
            descriptor
            for descriptor in super().select(fields)
            if self.matches(descriptor.inferred_label or "")
        ]


def institution_policy() -> KeywordFieldsPolicy:
    """Only institution/account fields; personal declarant data stays untouched."""

    return KeywordFieldsPolicy(INSTITUTION_KEYWORDS)


__all__ = [
    "AllFieldsPolicy",
    "FieldPolicy",
    "INSTITUTION_KEYWORDS",
    "KeywordFieldsPolicy",
    "LabelledFieldsPolicy",
    "institution_policy",
]
