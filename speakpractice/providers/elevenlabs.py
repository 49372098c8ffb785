from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from speakpractice.config import PLACEHOLDER_KEYS
from speakpractice.errors import ProviderError
from speakpractice.providers.base import ProviderAdapter

DEFAULT_TTS_MODEL = "eleven_multilingual_v2"


@dataclass(frozen=True)
class VoiceParams:
    stability: float = 0.5
    similarity_boost: float = 0.8
    style: float = 0.0
    use_speaker_boost: bool = True
    output_format: Optional[str] = None


class ElevenLabsAdapter(ProviderAdapter):
    """ElevenLabs text-to-speech over the REST API."""

    name = "elevenlabs"
    PLACEHOLDERS = PLACEHOLDER_KEYS["elevenlabs"]

    def default_params(self) -> VoiceParams:
        return VoiceParams(
            stability=self.credentials.stability,
            similarity_boost=self.credentials.similarity_boost,
        )

    async def synthesize(self, text: str, params: Optional[VoiceParams] = None) -> bytes:
        """Return MPEG audio for ``text``."""
        self._require_ready()
        params = params or self.default_params()

        base_url = self.credentials.base_url.rstrip("/")
        url = f"{base_url}/text-to-speech/{self.credentials.voice_id}"

        body = {
            "text": text,
            "model_id": self.credentials.model or DEFAULT_TTS_MODEL,
            "voice_settings": {
                "stability": params.stability,
                "similarity_boost": params.similarity_boost,
                "style": params.style,
                "use_speaker_boost": params.use_speaker_boost,
            },
        }
        if params.output_format:
            body["output_format"] = params.output_format

        headers = {
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
            "xi-api-key": self.credentials.api_key,
        }

        print(f"[TTS] Requesting speech for: {text[:50]}{'...' if len(text) > 50 else ''}")
        r = await self._post(url, json=body, headers=headers)

        audio = r.content
        if not audio:
            raise ProviderError(self.name, "empty audio response")
        print(f"[TTS] Received {len(audio)} bytes of audio")
        return audio

    async def _ping(self) -> None:
        await self.synthesize("Hello")

    def status(self):
        out = super().status()
        out["voice_id"] = self.credentials.voice_id
        return out
