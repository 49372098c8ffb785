from __future__ import annotations

from speakpractice.config import DEFAULT_OPENAI_MODEL, PLACEHOLDER_KEYS
from speakpractice.errors import ProviderError
from speakpractice.providers.llm import LLMAdapter


class OpenAIAdapter(LLMAdapter):
    """OpenAI chat completions for evaluation and fallback translation."""

    name = "openai"
    PLACEHOLDERS = PLACEHOLDER_KEYS["openai"]

    async def _complete(
        self,
        system: str,
        user: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        base_url = self.credentials.base_url.rstrip("/")
        payload = {
            "model": self.credentials.model or DEFAULT_OPENAI_MODEL,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.credentials.api_key}",
        }

        r = await self._post(f"{base_url}/chat/completions", json=payload, headers=headers)

        try:
            data = r.json()
            return data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError):
            print(f"[OPENAI] Unexpected response shape: {r.text[:200]}")
            raise ProviderError(self.name, "malformed response")
