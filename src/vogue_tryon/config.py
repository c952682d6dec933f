from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_MODEL = "gemini-2.5-flash-image"
DEFAULT_API_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiConfig(BaseModel):
    """Settings required to call the Gemini image model."""

    api_key: str = Field(..., min_length=1, description="Google AI Studio API key")
    model: str = Field(default=DEFAULT_MODEL, description="Image-capable Gemini model name")
    api_url: str = Field(
        default=DEFAULT_API_URL,
        description="Base URL of the Generative Language REST API",
    )
    timeout_seconds: float = Field(
        default=120.0,
        ge=1.0,
        le=600.0,
        description="Transport timeout for a single generateContent call",
    )


class AppConfig(BaseModel):
    """Top-level configuration object consumed by the try-on controller."""

    gemini: GeminiConfig
    log_level: str = Field(default="INFO", description="Root level for the vogue_tryon logger")

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {value}")
        return level


def _float_from_env(value: Optional[str], default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise RuntimeError(f"Invalid float value: {value}") from exc


def load_config(dotenv_path: str | Path | None = None) -> AppConfig:
    """
    Build the Gemini settings from the environment, seeded by a .env file when one exists.

    The API key comes from ``GEMINI_API_KEY``, falling back to ``API_KEY``.
    ``GEMINI_MODEL``, ``GEMINI_API_URL`` and ``GEMINI_TIMEOUT_SECONDS`` override
    the model defaults and ``VOGUE_LOG_LEVEL`` sets the package log level.

    Parameters
    ----------
    dotenv_path:
        Optional override for the .env file location. Defaults to ``.env`` in
        the working directory.

    Raises
    ------
    RuntimeError
        If the API key is missing, or a value fails to parse or validate.
    """
    env_path = Path(dotenv_path) if dotenv_path else Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    data = {
        "gemini": {
            "api_key": os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY"),
            "model": os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            "api_url": os.getenv("GEMINI_API_URL", DEFAULT_API_URL),
            "timeout_seconds": _float_from_env(os.getenv("GEMINI_TIMEOUT_SECONDS"), 120.0),
        },
        "log_level": os.getenv("VOGUE_LOG_LEVEL", "INFO"),
    }

    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        missing = {"/".join(str(part) for part in err["loc"]) for err in exc.errors()}
        missing_str = ", ".join(sorted(missing))
        raise RuntimeError(f"Missing configuration values: {missing_str}") from exc
