from __future__ import annotations

from speakpractice.config import DEFAULT_GEMINI_MODEL, PLACEHOLDER_KEYS
from speakpractice.errors import ProviderError
from speakpractice.providers.llm import LLMAdapter


class GeminiAdapter(LLMAdapter):
    """
    Kept on hand as a second evaluator; only used when GEMINI_API_KEY is set.
    Uses the Gemini Developer API generateContent endpoint.
    """

    name = "gemini"
    PLACEHOLDERS = PLACEHOLDER_KEYS["gemini"]

    async def _complete(
        self,
        system: str,
        user: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        base_url = self.credentials.base_url.rstrip("/")
        model = self.credentials.model or DEFAULT_GEMINI_MODEL

        # Gemini REST: POST /v1beta/models/{model}:generateContent
        url = f"{base_url}/v1beta/models/{model}:generateContent"

        body = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [
                {"role": "user", "parts": [{"text": user}]}
            ],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }

        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.credentials.api_key,
        }

        r = await self._post(url, json=body, headers=headers)

        # Extract text
        try:
            data = r.json()
            cand0 = (data.get("candidates") or [])[0]
            parts = ((cand0.get("content") or {}).get("parts") or [])
            return "".join([str(p.get("text", "")) for p in parts if isinstance(p, dict)])
        except (ValueError, AttributeError, IndexError, TypeError):
            print(f"[GEMINI] Unexpected response shape: {r.text[:200]}")
            raise ProviderError(self.name, "malformed response")
