"""Speech capture and playback device abstractions."""

from abc import ABC, abstractmethod

from speakpractice.models import CaptureResult

LOCALE = "zh-CN"

CAPTURE_ERROR_MESSAGES = {
    "no-speech": "No speech detected, please try again.",
    "network": "Network error, please check your connection.",
    "not-allowed": "Microphone access was denied.",
    "unavailable": "Speech recognition is not available.",
}


def capture_error_message(code: str) -> str:
    """User-facing text for a capture error code."""
    return CAPTURE_ERROR_MESSAGES.get(code, f"Speech recognition error: {code}")


class CaptureDevice(ABC):
    """Abstract interface for speech capture.

    One ``listen`` call is one attempt: it resolves with exactly one terminal
    result, a final transcript or an error code.
    """

    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def listen(self, locale: str = LOCALE) -> CaptureResult:
        """Start capturing and wait for the terminal result."""
        pass

    @abstractmethod
    async def stop(self):
        """Ask an in-progress capture to finish."""
        pass


class PlaybackDevice(ABC):
    """Abstract interface for audio output.

    Both methods raise PlaybackError when the device cannot play.
    """

    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def speak(self, text: str, locale: str = LOCALE, rate: float = 0.8):
        """Local speech synthesis, no network."""
        pass

    @abstractmethod
    async def play_audio(self, audio: bytes, media_type: str = "audio/mpeg"):
        """Play provider-synthesized audio."""
        pass
