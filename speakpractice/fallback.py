"""Ordered-attempt selection across provider adapters with local fallbacks."""

from __future__ import annotations

from typing import List, Optional

from speakpractice.config import Config
from speakpractice.devices import LOCALE, PlaybackDevice
from speakpractice.errors import PlaybackError, ProviderError
from speakpractice.heuristic import evaluate_locally, translate_locally
from speakpractice.models import Evaluation, Outcome
from speakpractice.providers import ProviderRegistry

TTS_FAILED = "ElevenLabs TTS failed, using browser TTS instead."
PLAYBACK_UNAVAILABLE = "Speech synthesis is not available."
TRANSLATION_FAILED = "Translation failed, using fallback translation."
EVALUATION_FAILED = "AI evaluation failed, using fallback evaluation."


class FallbackPolicy:
    """Try ready adapters in priority order, then a deterministic local fallback.

    Each call makes at most one attempt per adapter. Adapters that are not
    ready are skipped without any request. ProviderError never escapes.
    """

    def __init__(self, registry: ProviderRegistry, playback: PlaybackDevice, config: Config):
        self.registry = registry
        self.playback = playback
        self.config = config

    async def narrate(self, text: str) -> Outcome[Optional[str]]:
        failures: List[str] = []

        if self.config.use_elevenlabs:
            for adapter in self.registry.narration:
                if not adapter.is_ready():
                    continue
                try:
                    audio = await adapter.synthesize(text)
                    await self.playback.play_audio(audio)
                    return Outcome(value=text, source=adapter.name)
                except (ProviderError, PlaybackError) as e:
                    print(f"[FALLBACK] {adapter.name} narration failed: {e}")
                    failures.append(adapter.name)

        notice = TTS_FAILED if failures else None
        try:
            await self.playback.speak(text, LOCALE, self.config.speech_rate)
        except PlaybackError as e:
            print(f"[FALLBACK] Local playback failed: {e}")
            return Outcome(value=None, source="local", failures=failures + ["local"], notice=PLAYBACK_UNAVAILABLE)
        return Outcome(value=text, source="local", failures=failures, notice=notice)

    async def translate(self, text: str) -> Outcome[str]:
        failures: List[str] = []
        for adapter in self.registry.translation:
            if not adapter.is_ready():
                continue
            try:
                return Outcome(value=await adapter.translate(text), source=adapter.name, failures=failures)
            except ProviderError as e:
                print(f"[FALLBACK] {adapter.name} translation failed: {e}")
                failures.append(adapter.name)

        return Outcome(
            value=translate_locally(text),
            source="local",
            failures=failures,
            notice=TRANSLATION_FAILED if failures else None,
        )

    async def evaluate(self, question: str, answer: str) -> Outcome[Evaluation]:
        failures: List[str] = []
        for adapter in self.registry.evaluation:
            if not adapter.is_ready():
                continue
            try:
                evaluation = await adapter.evaluate(question, answer)
                return Outcome(value=evaluation, source=adapter.name, failures=failures)
            except ProviderError as e:
                print(f"[FALLBACK] {adapter.name} evaluation failed: {e}")
                failures.append(adapter.name)

        if not failures:
            print("[FALLBACK] No evaluation provider ready, using local heuristic")
        return Outcome(
            value=evaluate_locally(question, answer),
            source="local",
            failures=failures,
            notice=EVALUATION_FAILED if failures else None,
        )
