"""ElevenLabs voice resolution for voice generation parameters."""

import logging
import re
from pathlib import Path
from typing import Any, Optional

from media_director.augmentation.schemas import VoiceTable
from media_director.augmentation.tables import load_table

logger = logging.getLogger(__name__)


class VoiceCatalog:
    def __init__(self, table: Optional[VoiceTable] = None, definitions_dir: Optional[Path] = None):
        self.table = table or load_table("voices.yaml", VoiceTable, definitions_dir)

    def resolve_id(self, voice_name: str) -> tuple[str, bool]:
        """Voice id for ``voice_name`` and whether it is a gender fallback."""
        direct = self.table.voices.get(voice_name)
        if direct:
            return direct, False
        gender = "female" if voice_name in self.table.female_names else "male"
        return self.table.defaults[gender], True

    def voice_in(self, text: str) -> Optional[str]:
        """A catalogued voice named in ``text``, if any."""
        for name in self.table.voices:
            if re.search(rf"\b{re.escape(name)}\b", text):
                return name
        return None

    def parameters(self, text: str, voice_name: Optional[str] = None) -> dict[str, Any]:
        name = voice_name or self.voice_in(text) or self.table.default_voice
        voice_id, fallback = self.resolve_id(name)
        if fallback:
            logger.debug(f"Voice '{name}' not catalogued, using default id {voice_id}")
        return {
            "text": text,
            "voice": name,
            "voice_id": voice_id,
            "output_format": "mp3",
            "quality": self.table.default_quality,
            "voice_settings": dict(self.table.settings),
        }
