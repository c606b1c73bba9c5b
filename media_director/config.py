"""Runtime settings read from the environment."""

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_ADVISORY_MODEL = "claude-haiku-4-5-20251001"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Settings for the decision core and its network collaborators."""

    anthropic_api_key: Optional[str] = Field(None, description="Key for the advisory service")
    advisory_model: str = Field(DEFAULT_ADVISORY_MODEL, description="Model used for advisory calls")
    advisory_timeout: float = Field(8.0, gt=0, description="Seconds before an advisory call is abandoned")
    advisory_enabled: bool = Field(False, description="Whether advisory passes run at all")
    fal_key: Optional[str] = Field(None, description="Key for the fal.ai queue provider")
    provider_timeout: float = Field(30.0, gt=0, description="Seconds before a provider request is abandoned")
    seed: Optional[int] = Field(None, description="Seed for reproducible style and seed picks")
    log_level: str = Field("INFO", description="Root log level for the API process")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from MEDIA_DIRECTOR_* and provider key variables."""
        api_key = os.environ.get("ANTHROPIC_API_KEY") or None
        seed_raw = os.environ.get("MEDIA_DIRECTOR_SEED")
        settings = cls(
            anthropic_api_key=api_key,
            advisory_model=os.environ.get("MEDIA_DIRECTOR_ADVISORY_MODEL", DEFAULT_ADVISORY_MODEL),
            advisory_timeout=os.environ.get("MEDIA_DIRECTOR_ADVISORY_TIMEOUT", 8.0),
            advisory_enabled=_env_bool("MEDIA_DIRECTOR_ADVISORY_ENABLED", api_key is not None),
            fal_key=os.environ.get("FAL_KEY") or None,
            provider_timeout=os.environ.get("MEDIA_DIRECTOR_PROVIDER_TIMEOUT", 30.0),
            seed=seed_raw if seed_raw not in (None, "") else None,
            log_level=os.environ.get("MEDIA_DIRECTOR_LOG_LEVEL", "INFO").upper(),
        )
        logger.debug(
            f"Settings loaded: advisory_enabled={settings.advisory_enabled}, "
            f"advisory_model={settings.advisory_model}, seed={settings.seed}"
        )
        return settings
