"""Utility helpers for PDF Autofill."""

from __future__ import annotations

import base64
import binascii
import logging
import os
from typing import Optional

PACKAGE_LOGGER = "pdfautofill"
_LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(level_name: Optional[str] = None) -> logging.Logger:
    """Attach a stream handler to the package logger, once.

    The level comes from ``level_name`` or the ``PDFAUTOFILL_LOG`` variable.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    resolved = (level_name or os.getenv("PDFAUTOFILL_LOG", "INFO")).upper()
    level = getattr(logging, resolved, logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def excerpt(text: str, limit: int) -> str:
    """Return at most ``limit`` leading characters of ``text``."""

    if limit <= 0:
        return ""
    return text[:limit]


def decode_data_url(data_url: str) -> bytes:
    """Decode a ``data:<mime>;base64,<payload>`` URL, or a bare base64 string."""

    payload = data_url.split(",", 1)[1] if "," in data_url else data_url
    payload = payload.strip()
    if not payload:
        raise ValueError("Image payload is empty.")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Image payload is not valid base64.") from exc


__all__ = ["PACKAGE_LOGGER", "configure_logging", "decode_data_url", "excerpt"]
