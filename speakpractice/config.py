"""Configuration management for API keys and settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

# config.py is in speakpractice/, .env is in project root
ENV_PATH = Path(__file__).parent.parent / ".env"
load_dotenv(ENV_PATH)


DEFAULT_VOICE_ID = "BrbEfHMQu0fyclQR7lfh"
DEFAULT_OPENAI_MODEL = "gpt-4"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"

ELEVENLABS_BASE = "https://api.elevenlabs.io/v1"
OPENAI_BASE = "https://api.openai.com/v1"
GOOGLE_TRANSLATE_BASE = "https://translation.googleapis.com/language/translate/v2"
GEMINI_BASE = "https://generativelanguage.googleapis.com"

# Template values that mean "no key yet", per provider
PLACEHOLDER_KEYS = {
    "elevenlabs": ("sk-elevenlabs-xxxx",),
    "openai": ("sk-proj-your-openai-api-key-here", "sk-openai-xxxx"),
    "google": ("YOUR_GOOGLE_CLOUD_API_KEY", "AIza-google-xxxx"),
    "gemini": (),
}

ENV_TEMPLATE = """# Spoken Question Practice environment variables
# API Keys and Configuration Settings

# ElevenLabs API Configuration
ELEVENLABS_API_KEY=sk-elevenlabs-xxxx
ELEVENLABS_VOICE_ID=BrbEfHMQu0fyclQR7lfh
ELEVENLABS_STABILITY=0.5
ELEVENLABS_SIMILARITY_BOOST=0.8
USE_ELEVENLABS=true

# OpenAI API Configuration
OPENAI_API_KEY=sk-openai-xxxx

# Google Cloud Translation API Configuration
GOOGLE_CLOUD_API_KEY=AIza-google-xxxx

# Gemini (optional second evaluator)
# GEMINI_API_KEY=

# Speech Settings
SPEECH_RATE=0.8
"""


@dataclass(frozen=True)
class ProviderCredentials:
    """Read-only settings for one provider adapter."""
    api_key: str = ""
    base_url: str = ""
    model: str = ""
    voice_id: str = ""
    stability: float = 0.5
    similarity_boost: float = 0.8

    @property
    def configured(self) -> bool:
        return bool(self.api_key.strip())


def has_key(value: Optional[str], provider: str) -> bool:
    """True when ``value`` is a usable key, not blank and not a template placeholder."""
    key = (value or "").strip()
    return bool(key) and key not in PLACEHOLDER_KEYS.get(provider, ())


def _float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value not in (None, "") else default
    except ValueError:
        return default


def _bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() == "true"


@dataclass
class Config:
    """Application configuration, built once from the environment.

    The object is passed explicitly to the provider registry; adapters never
    read the environment themselves.
    """

    elevenlabs_api_key: str = ""
    openai_api_key: str = ""
    google_cloud_api_key: str = ""
    gemini_api_key: str = ""

    voice_id: str = DEFAULT_VOICE_ID
    speech_rate: float = 0.8
    stability: float = 0.5
    similarity_boost: float = 0.8
    use_elevenlabs: bool = True

    openai_model: str = DEFAULT_OPENAI_MODEL
    gemini_model: str = DEFAULT_GEMINI_MODEL

    # Session timing (seconds)
    narration_delay: float = 1.0
    complete_delay: float = 3.0
    notice_seconds: float = 5.0

    host: str = "127.0.0.1"
    port: int = 8000

    base_urls: dict = field(default_factory=lambda: {
        "elevenlabs": ELEVENLABS_BASE,
        "openai": OPENAI_BASE,
        "google": GOOGLE_TRANSLATE_BASE,
        "gemini": GEMINI_BASE,
    })

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Config":
        """Read every setting from ``env`` (defaults to ``os.environ``)."""
        env = os.environ if env is None else env
        get = env.get

        try:
            port = int(get("PORT", "8000"))
        except ValueError:
            port = 8000

        return cls(
            elevenlabs_api_key=get("ELEVENLABS_API_KEY", "").strip(),
            openai_api_key=get("OPENAI_API_KEY", "").strip(),
            google_cloud_api_key=get("GOOGLE_CLOUD_API_KEY", "").strip(),
            gemini_api_key=get("GEMINI_API_KEY", "").strip(),
            voice_id=get("ELEVENLABS_VOICE_ID", "").strip() or DEFAULT_VOICE_ID,
            speech_rate=_float(get("SPEECH_RATE"), 0.8),
            stability=_float(get("ELEVENLABS_STABILITY"), 0.5),
            similarity_boost=_float(get("ELEVENLABS_SIMILARITY_BOOST"), 0.8),
            use_elevenlabs=_bool(get("USE_ELEVENLABS"), True),
            openai_model=get("OPENAI_MODEL", "").strip() or DEFAULT_OPENAI_MODEL,
            gemini_model=get("GEMINI_MODEL", "").strip() or DEFAULT_GEMINI_MODEL,
            host=get("HOST", "127.0.0.1"),
            port=port,
        )

    # Per-adapter credentials

    def elevenlabs(self) -> ProviderCredentials:
        return ProviderCredentials(
            api_key=self.elevenlabs_api_key,
            base_url=self.base_urls["elevenlabs"],
            model="eleven_multilingual_v2",
            voice_id=self.voice_id,
            stability=self.stability,
            similarity_boost=self.similarity_boost,
        )

    def openai(self) -> ProviderCredentials:
        return ProviderCredentials(
            api_key=self.openai_api_key,
            base_url=self.base_urls["openai"],
            model=self.openai_model,
        )

    def google_translate(self) -> ProviderCredentials:
        return ProviderCredentials(
            api_key=self.google_cloud_api_key,
            base_url=self.base_urls["google"],
        )

    def gemini(self) -> ProviderCredentials:
        return ProviderCredentials(
            api_key=self.gemini_api_key,
            base_url=self.base_urls["gemini"],
            model=self.gemini_model,
        )

    def validate(self) -> list[str]:
        """Return the settings that are missing; absence only disables a provider."""
        missing = []
        if not has_key(self.elevenlabs_api_key, "elevenlabs"):
            missing.append("ELEVENLABS_API_KEY (narration falls back to browser speech)")
        if not has_key(self.openai_api_key, "openai") and not has_key(self.gemini_api_key, "gemini"):
            missing.append("OPENAI_API_KEY (evaluation falls back to the local heuristic)")
        if not has_key(self.google_cloud_api_key, "google"):
            missing.append("GOOGLE_CLOUD_API_KEY (translation falls back to the LLM or local table)")
        return missing

    def status_lines(self) -> list[str]:
        """Configuration status without exposing secret values."""
        def mark(value: str, provider: str) -> str:
            if has_key(value, provider):
                return "✓ Configured"
            if value:
                return "✗ Placeholder value"
            return "✗ Not configured"

        return [
            f"- ElevenLabs API Key: {mark(self.elevenlabs_api_key, 'elevenlabs')}",
            f"- OpenAI API Key: {mark(self.openai_api_key, 'openai')}",
            f"- Google Cloud API Key: {mark(self.google_cloud_api_key, 'google')}",
            f"- Gemini API Key: {mark(self.gemini_api_key, 'gemini')}",
            f"- Voice ID: {self.voice_id}",
            f"- Speech Rate: {self.speech_rate}",
            f"- Use ElevenLabs: {self.use_elevenlabs}",
        ]

    def log_status(self) -> None:
        print("[CONFIG] Configuration Status:")
        for line in self.status_lines():
            print(f"[CONFIG] {line}")


def write_env_template(path: Path) -> bool:
    """Create a ``.env`` with placeholder keys. Returns False if one already exists."""
    path = Path(path)
    if path.exists():
        print(f"[CONFIG] {path} already exists. Skipping creation.")
        return False
    path.write_text(ENV_TEMPLATE, encoding="utf-8")
    print(f"[CONFIG] Created {path}. Replace the placeholder keys with your own.")
    return True
