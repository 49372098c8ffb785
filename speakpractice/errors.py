"""Error types shared by adapters, devices and the session controller."""

from __future__ import annotations

from typing import Optional, Union


class ProviderError(Exception):
    """A provider request failed (non-2xx status, transport error, bad payload)."""

    def __init__(self, provider: str, reason: Union[int, str], message: str = ""):
        self.provider = provider
        self.reason = reason
        self.message = message
        detail = f"{reason} - {message}" if message else str(reason)
        super().__init__(f"{provider} error: {detail}")

    @property
    def status(self) -> Optional[int]:
        return self.reason if isinstance(self.reason, int) else None


class ConfigurationMissing(ProviderError):
    """Raised when a primary operation is called on an adapter that is not ready."""

    def __init__(self, provider: str):
        super().__init__(provider, "not configured")


class NoPromptsProvided(ValueError):
    """A session cannot start without at least one prompt."""

    def __init__(self):
        super().__init__("Please enter at least one question first.")


class CaptureFailed(Exception):
    """The capture device ended with an error code instead of a transcript."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(code)


class PlaybackError(Exception):
    """The playback device could not play the given text or audio."""
