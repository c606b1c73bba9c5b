"""Shared DecisionCore instance for the API routes."""

import logging
from typing import Optional

from media_director.config import Settings
from media_director.core import DecisionCore
from media_director.providers.fal import FalQueueProvider

logger = logging.getLogger(__name__)

_core: Optional[DecisionCore] = None


def build_core(settings: Settings) -> DecisionCore:
    provider = None
    if settings.fal_key:
        provider = FalQueueProvider(api_key=settings.fal_key, timeout=settings.provider_timeout)
    else:
        logger.warning("FAL_KEY not set; pending generations cannot be executed")
    return DecisionCore(settings=settings, provider=provider)


def get_core() -> DecisionCore:
    """Get or create the DecisionCore singleton."""
    global _core
    if _core is None:
        _core = build_core(Settings.from_env())
    return _core


def set_core(core: Optional[DecisionCore]) -> None:
    """Replace the singleton (None forces a rebuild on next use)."""
    global _core
    _core = core
