"""Associate form-field widgets with the nearest plausible text label.

This is a proximity heuristic, not a layout parser. Labels it returns are
hints for the language model and the UI and may well be wrong.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, Optional

from .models import TextRun

_LEADER_ONLY = re.compile(r"^[.\s:]+$")
_LEADING_DOTS = re.compile(r"^\.{3,}")
_DATE_PART_WORDS = frozenset({"day", "month", "year", "jour", "mois", "année", "an"})
_MIN_LABEL_LENGTH = 3

# Admissible offsets from the field's lower-left corner to the run origin.
_DX_MIN, _DX_MAX = -10.0, 400.0
_DY_MIN, _DY_MAX = -30.0, 50.0


def is_meaningful_label(text: str) -> bool:
    """Return False for leader dots, tiny fragments and date-part captions."""

    if _LEADER_ONLY.match(text):
        return False
    if _LEADING_DOTS.match(text):
        return False
    if len(text) < _MIN_LABEL_LENGTH:
        return False
    if text.lower() in _DATE_PART_WORDS:
        return False
    return True


def find_nearest_label(runs: Iterable[TextRun], field_x: float, field_y: float) -> Optional[str]:
    """Pick the closest run lying roughly left of or above ``(field_x, field_y)``.

    Ties keep the earliest run in iteration order.
    """

    nearest: Optional[str] = None
    min_distance = math.inf
    for run in runs:
        if not is_meaningful_label(run.content):
            continue
        dx = field_x - run.x
        dy = field_y - run.y
        if not (_DX_MIN < dx < _DX_MAX and _DY_MIN < dy < _DY_MAX):
            continue
        distance = math.hypot(dx, dy)
        if distance < min_distance:
            min_distance = distance
            nearest = run.content
    return nearest


__all__ = ["find_nearest_label", "is_meaningful_label"]
