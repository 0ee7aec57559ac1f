"""Runtime settings, read from the environment (and a local .env file)."""

import logging
import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


_TRUTHY = {"1", "true", "yes", "on"}


class AdvisorSettings(BaseModel):
    """Explicit configuration passed to the advice service and intake flow."""

    google_api_key: Optional[str] = Field(None, description="Gemini API key")
    advice_model: str = "gemini-1.5-flash"
    advice_temperature: float = 0.7
    advice_max_tokens: int = 500
    mock_mode: bool = Field(True, description="Skip the provider and answer from the fallback table")
    collateral_match: Literal["word", "substring"] = "word"
    log_level: str = "INFO"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def load_settings() -> AdvisorSettings:
    """Build settings from LOAN_ADVISOR_* variables plus the Gemini key."""
    load_dotenv()
    api_key = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
    if api_key and api_key.strip() in {"", "YOUR_API_KEY_HERE"}:
        api_key = None
    return AdvisorSettings(
        google_api_key=api_key,
        advice_model=os.getenv("LOAN_ADVISOR_ADVICE_MODEL", "gemini-1.5-flash"),
        mock_mode=_env_flag("LOAN_ADVISOR_MOCK_MODE", True),
        collateral_match=os.getenv("LOAN_ADVISOR_COLLATERAL_MATCH", "word").strip().lower(),
        log_level=os.getenv("LOAN_ADVISOR_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: AdvisorSettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
