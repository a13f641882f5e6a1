"""Environment-backed settings for the visualizer service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from src.utility.path_finder import Finder

load_dotenv(Finder().get_file("root") / ".env")

DEFAULT_PRIMARY_IMAGE_MODEL = "gemini-3-pro-image-preview"
DEFAULT_SECONDARY_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_DESCRIPTION_MODEL = "gemini-2.5-flash"
DEFAULT_OPENAI_DESCRIPTION_MODEL = "gpt-4o-mini"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_STAGE_TIMEOUT_SECONDS = 90.0
DEFAULT_MAX_IMAGE_BYTES = 10 * 1024 * 1024


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read an env var, treating blank values as unset."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    """Read-only process configuration, rebuilt per request so key rotation applies."""

    gemini_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    run_mode: str = "actual"
    gemini_transport: str = "sdk"
    text_provider: str = "gemini"
    primary_image_model: str = DEFAULT_PRIMARY_IMAGE_MODEL
    secondary_image_model: str = DEFAULT_SECONDARY_IMAGE_MODEL
    description_model: str = DEFAULT_DESCRIPTION_MODEL
    openai_description_model: str = DEFAULT_OPENAI_DESCRIPTION_MODEL
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    stage_timeout_seconds: float = DEFAULT_STAGE_TIMEOUT_SECONDS
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES

    @property
    def is_mock(self) -> bool:
        return self.run_mode == "mock"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current environment."""
        return cls(
            gemini_api_key=_env_str("GEMINI_API_KEY"),
            openai_api_key=_env_str("OPENAI_API_KEY"),
            run_mode=_env_str("RUN_MODE", "actual").lower(),
            gemini_transport=_env_str("GEMINI_TRANSPORT", "sdk").lower(),
            text_provider=_env_str("TEXT_PROVIDER", "gemini").lower(),
            primary_image_model=_env_str(
                "PRIMARY_IMAGE_MODEL", DEFAULT_PRIMARY_IMAGE_MODEL
            ),
            secondary_image_model=_env_str(
                "SECONDARY_IMAGE_MODEL", DEFAULT_SECONDARY_IMAGE_MODEL
            ),
            description_model=_env_str("DESCRIPTION_MODEL", DEFAULT_DESCRIPTION_MODEL),
            openai_description_model=_env_str(
                "OPENAI_DESCRIPTION_MODEL", DEFAULT_OPENAI_DESCRIPTION_MODEL
            ),
            gemini_base_url=_env_str("GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL),
            stage_timeout_seconds=_env_float(
                "STAGE_TIMEOUT_SECONDS", DEFAULT_STAGE_TIMEOUT_SECONDS
            ),
            max_image_bytes=_env_int("MAX_IMAGE_BYTES", DEFAULT_MAX_IMAGE_BYTES),
        )
