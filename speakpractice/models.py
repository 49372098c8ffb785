"""Data models for the practice session."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from speakpractice.errors import NoPromptsProvided

Category = Literal["good", "partial", "poor"]
CATEGORIES = ("good", "partial", "poor")

BADGES = {
    "good": "✓ Excellent",
    "partial": "⚠ Good",
    "poor": "✗ Needs Work",
}


@dataclass(frozen=True)
class Evaluation:
    """One assessed answer, from a provider or the local heuristic."""
    category: Category
    feedback: str
    example: str
    score: int
    grammar_score: int
    pronunciation_tips: str = ""
    source: str = "local"

    def badge(self) -> str:
        text = BADGES.get(self.category, BADGES["poor"])
        if self.score:
            text += f" ({self.score}/10)"
        return text

    def feedback_text(self) -> str:
        text = self.feedback
        if self.grammar_score:
            text += f"\n\nGrammar Score: {self.grammar_score}/10"
        if self.pronunciation_tips:
            text += f"\n\nPronunciation Tips: {self.pronunciation_tips}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.category,
            "feedback": self.feedback,
            "example": self.example,
            "score": self.score,
            "grammar_score": self.grammar_score,
            "pronunciation_tips": self.pronunciation_tips,
            "source": self.source,
            "badge": self.badge(),
            "feedback_text": self.feedback_text(),
        }


@dataclass(frozen=True)
class PromptSet:
    """Ordered, non-empty sequence of practice prompts."""
    prompts: tuple

    @classmethod
    def parse_lines(cls, raw: str) -> List[str]:
        return [line.strip() for line in (raw or "").splitlines() if line.strip()]

    @classmethod
    def from_text(cls, raw: str) -> "PromptSet":
        lines = cls.parse_lines(raw)
        if not lines:
            raise NoPromptsProvided()
        return cls(tuple(lines))

    def shuffled(self, rng: Optional[random.Random] = None) -> "PromptSet":
        """Fisher-Yates shuffle into a new set."""
        rng = rng or random.Random()
        items = list(self.prompts)
        for i in range(len(items) - 1, 0, -1):
            j = rng.randint(0, i)
            items[i], items[j] = items[j], items[i]
        return PromptSet(tuple(items))

    def __len__(self) -> int:
        return len(self.prompts)

    def __getitem__(self, index: int) -> str:
        return self.prompts[index]


class Phase(str, Enum):
    SETUP = "setup"
    PRESENTING = "presenting"
    LISTENING = "listening"
    PROCESSING = "processing"
    REVIEWING = "reviewing"
    COMPLETE = "complete"


@dataclass
class SessionState:
    """Mutable state of one run through a prompt set."""
    prompts: PromptSet
    index: int = 0
    phase: Phase = Phase.PRESENTING
    answer: str = ""
    evaluation: Optional[Evaluation] = None
    translation: Optional[str] = None

    @property
    def is_listening(self) -> bool:
        return self.phase is Phase.LISTENING

    @property
    def is_processing(self) -> bool:
        return self.phase is Phase.PROCESSING

    @property
    def current_prompt(self) -> str:
        return self.prompts[self.index]

    @property
    def is_last(self) -> bool:
        return self.index >= len(self.prompts) - 1

    def clear_answer(self) -> None:
        self.answer = ""
        self.evaluation = None


@dataclass(frozen=True)
class CaptureResult:
    """Terminal event of one listening attempt."""
    transcript: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool((self.transcript or "").strip())


@dataclass(frozen=True)
class Notice:
    """Transient user-facing message; the presenter hides it after ``duration``."""
    message: str
    duration: float = 5.0

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "duration": self.duration}


T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    """Result of one fallback-policy operation."""
    value: T
    source: str
    failures: List[str] = field(default_factory=list)
    notice: Optional[str] = None

    @property
    def remote(self) -> bool:
        return self.source != "local"


@dataclass(frozen=True)
class SessionView:
    """Snapshot handed to the presenter on every render."""
    phase: Phase
    prompt: str = ""
    index: int = 0
    total: int = 0
    answer: str = ""
    evaluation: Optional[Evaluation] = None
    translation: Optional[str] = None
    can_start: bool = False
    pending_prompts: int = 0

    @property
    def progress(self) -> float:
        if not self.total:
            return 0.0
        return round((self.index + 1) / self.total * 100, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "prompt": self.prompt,
            "number": self.index + 1 if self.total else 0,
            "total": self.total,
            "progress": self.progress,
            "answer": self.answer,
            "evaluation": self.evaluation.to_dict() if self.evaluation else None,
            "translation": self.translation,
            "is_listening": self.phase is Phase.LISTENING,
            "is_processing": self.phase is Phase.PROCESSING,
            "can_start": self.can_start,
            "pending_prompts": self.pending_prompts,
        }
