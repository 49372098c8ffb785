from __future__ import annotations

from abc import abstractmethod

from speakpractice.errors import ProviderError
from speakpractice.models import Evaluation
from speakpractice.prompt import (
    EVALUATION_SYSTEM,
    TRANSLATION_SYSTEM,
    build_evaluation_prompt,
    build_translation_prompt,
)
from speakpractice.providers.base import ProviderAdapter
from speakpractice.schema import parse_evaluation


class LLMAdapter(ProviderAdapter):
    """Chat-model provider that can evaluate answers and translate prompts.

    Subclasses implement ``_complete``; it returns the model text and raises
    ProviderError when the reply envelope is not the expected shape.
    """

    @abstractmethod
    async def _complete(
        self,
        system: str,
        user: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        ...

    async def evaluate(self, question: str, answer: str) -> Evaluation:
        self._require_ready()
        print(f"[{self.name.upper()}] Evaluating answer for: {question[:40]}")
        text = await self._complete(
            EVALUATION_SYSTEM,
            build_evaluation_prompt(question, answer),
            temperature=0.7,
            max_tokens=500,
        )
        # Unreadable model text degrades to defaults rather than failing
        evaluation = parse_evaluation(text, provider=self.name)
        print(f"[{self.name.upper()}] Evaluation: {evaluation.category} ({evaluation.score}/10)")
        return evaluation

    async def translate(self, text: str) -> str:
        self._require_ready()
        out = await self._complete(
            TRANSLATION_SYSTEM,
            build_translation_prompt(text),
            temperature=0.3,
            max_tokens=100,
        )
        translation = (out or "").strip()
        if not translation:
            raise ProviderError(self.name, "no translation returned")
        print(f"[{self.name.upper()}] Translation: {translation}")
        return translation

    async def _ping(self) -> None:
        await self.evaluate("你叫什么名字？", "我叫小明。")

    def status(self):
        out = super().status()
        out["model"] = self.credentials.model
        return out
