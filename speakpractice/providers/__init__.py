"""Provider registry: the adapters available to the fallback policy, in priority order."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx

from speakpractice.config import Config
from speakpractice.providers.base import ProviderAdapter
from speakpractice.providers.elevenlabs import ElevenLabsAdapter, VoiceParams
from speakpractice.providers.gemini import GeminiAdapter
from speakpractice.providers.google_translate import GoogleTranslateAdapter
from speakpractice.providers.llm import LLMAdapter
from speakpractice.providers.openai import OpenAIAdapter


@dataclass
class ProviderRegistry:
    """Ordered adapter lists per operation kind."""
    narration: List[ElevenLabsAdapter] = field(default_factory=list)
    evaluation: List[LLMAdapter] = field(default_factory=list)
    translation: List[ProviderAdapter] = field(default_factory=list)

    def all(self) -> List[ProviderAdapter]:
        """Every distinct adapter, first-seen order."""
        seen: Dict[int, ProviderAdapter] = {}
        for adapter in [*self.narration, *self.evaluation, *self.translation]:
            seen.setdefault(id(adapter), adapter)
        return list(seen.values())

    def status(self) -> List[Dict]:
        return [adapter.status() for adapter in self.all()]


def build_registry(
    config: Config,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ProviderRegistry:
    """Create every adapter once from ``config``.

    Args:
        config: Application configuration
        transport: Optional httpx transport shared by all adapters

    Returns:
        ProviderRegistry with narration, evaluation and translation chains
    """
    elevenlabs = ElevenLabsAdapter(config.elevenlabs(), transport=transport)
    openai = OpenAIAdapter(config.openai(), transport=transport)
    gemini = GeminiAdapter(config.gemini(), transport=transport)
    google = GoogleTranslateAdapter(config.google_translate(), transport=transport)

    return ProviderRegistry(
        narration=[elevenlabs],
        evaluation=[openai, gemini],
        translation=[google, openai, gemini],
    )


__all__ = [
    "ProviderRegistry",
    "build_registry",
    "ProviderAdapter",
    "LLMAdapter",
    "ElevenLabsAdapter",
    "VoiceParams",
    "OpenAIAdapter",
    "GeminiAdapter",
    "GoogleTranslateAdapter",
]
