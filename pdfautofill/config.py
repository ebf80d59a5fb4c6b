"""Runtime configuration for the completion capability."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError, MissingCredentialError

DEFAULT_MODEL = "models/gemini-2.5-flash"
DEFAULT_TIMEOUT = 60.0


def normalise_model_name(raw_name: Optional[str]) -> str:
    """Normalise user-provided model identifiers to the API format."""

    if not raw_name or not raw_name.strip():
        return DEFAULT_MODEL

    slug = raw_name.strip().lower().replace(" ", "-")
    if not slug.startswith("models/"):
        slug = f"models/{slug}"
    return slug


@dataclass(frozen=True)
class Settings:
    """Credential, endpoint, model and timeout for the completion client."""

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``LLM_*`` variables (``GOOGLE_API_KEY`` as key fallback)."""

        env = os.environ if environ is None else environ
        api_key = env.get("LLM_API_KEY") or env.get("GOOGLE_API_KEY") or None
        base_url = env.get("LLM_BASE_URL") or None
        raw_timeout = env.get("LLM_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError as exc:
            raise ConfigurationError(f"LLM_TIMEOUT must be a number, got {raw_timeout!r}") from exc
        if timeout <= 0:
            raise ConfigurationError("LLM_TIMEOUT must be positive.")
        return cls(
            api_key=api_key,
            base_url=base_url,
            model=normalise_model_name(env.get("LLM_MODEL")),
            timeout=timeout,
        )

    def require_api_key(self) -> str:
        if not self.api_key:
            raise MissingCredentialError(
                "Completion API key not found. Set LLM_API_KEY (or GOOGLE_API_KEY) "
                "or pass api_key explicitly."
            )
        return self.api_key


__all__ = ["DEFAULT_MODEL", "DEFAULT_TIMEOUT", "Settings", "normalise_model_name"]
