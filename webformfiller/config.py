"""Environment-driven configuration for webformfiller."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MODEL = "gemini-2.0-flash-lite"
DEFAULT_STORAGE_DIR = Path.home() / ".webformfiller"


def _normalise_model_name(raw_name: Optional[str]) -> str:
    """Normalise user-provided model identifiers to the API format."""

    if not raw_name:
        raw_name = DEFAULT_MODEL

    slug = raw_name.strip().lower().replace(" ", "-")
    if not slug.startswith("models/"):
        slug = f"models/{slug}"
    return slug


@dataclass(frozen=True)
class FillerConfig:
    api_key: Optional[str] = None
    model_name: str = _normalise_model_name(DEFAULT_MODEL)
    temperature: float = 0.1
    storage_dir: Path = DEFAULT_STORAGE_DIR


def load_config() -> FillerConfig:
    """Build a ``FillerConfig`` from the process environment (and ``.env``)."""

    api_key = os.getenv("GOOGLE_API_KEY") or None
    storage_dir = os.getenv("WEBFORMFILLER_STORAGE_DIR")
    return FillerConfig(
        api_key=api_key.strip() if api_key else None,
        model_name=_normalise_model_name(os.getenv("GEMINI_MODEL")),
        temperature=float(os.getenv("TEMPERATURE", "0.1")),
        storage_dir=Path(storage_dir).expanduser() if storage_dir else DEFAULT_STORAGE_DIR,
    )


__all__ = ["FillerConfig", "load_config", "DEFAULT_MODEL", "DEFAULT_STORAGE_DIR"]
