from __future__ import annotations

from speakpractice.config import PLACEHOLDER_KEYS
from speakpractice.errors import ProviderError
from speakpractice.providers.base import ProviderAdapter


class GoogleTranslateAdapter(ProviderAdapter):
    """Google Cloud Translation v2, Chinese to English."""

    name = "google"
    PLACEHOLDERS = PLACEHOLDER_KEYS["google"]

    source = "zh"
    target = "en"

    async def translate(self, text: str) -> str:
        self._require_ready()

        body = {
            "q": text,
            "source": self.source,
            "target": self.target,
            "format": "text",
        }
        r = await self._post(
            self.credentials.base_url,
            json=body,
            headers={"Content-Type": "application/json"},
            params={"key": self.credentials.api_key},
        )

        try:
            translation = str(r.json()["data"]["translations"][0]["translatedText"]).strip()
        except (ValueError, KeyError, IndexError, TypeError):
            translation = ""
        if not translation:
            raise ProviderError(self.name, "no translation returned")
        print(f"[TRANSLATE] Google translation: {translation}")
        return translation

    async def _ping(self) -> None:
        await self.translate("你好")
