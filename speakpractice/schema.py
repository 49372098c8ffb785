from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from speakpractice.models import CATEGORIES, Evaluation

DEFAULT_FEEDBACK = "Evaluation completed."
DEFAULT_EXAMPLE = "这是一个很好的回答示例。"
DEFAULT_SCORE = 5

_JSON_OBJ_RE = re.compile(r"\{.*\}", re.DOTALL)
_decoder = json.JSONDecoder()


def try_parse_json(text: str) -> Optional[Dict[str, Any]]:
    """
    Best-effort JSON extraction. Models sometimes wrap the object in prose
    or markdown fences. Returns None when no object can be decoded.
    """
    s = (text or "").strip()
    if not s:
        return None

    # Fast path
    if s.startswith("{") and s.endswith("}"):
        try:
            obj = json.loads(s)
            if isinstance(obj, dict):
                return obj
        except ValueError:
            pass

    # Widest {...} chunk
    m = _JSON_OBJ_RE.search(s)
    if m:
        try:
            obj = json.loads(m.group(0))
            if isinstance(obj, dict):
                return obj
        except ValueError:
            pass

    # First position where a whole object decodes
    pos = s.find("{")
    while pos != -1:
        try:
            obj, _ = _decoder.raw_decode(s, pos)
            if isinstance(obj, dict):
                return obj
        except ValueError:
            pass
        pos = s.find("{", pos + 1)

    return None


def _score(value: Any) -> int:
    try:
        score = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_SCORE
    if score == 0:
        return DEFAULT_SCORE
    return max(1, min(10, score))


def normalize_evaluation(obj: Dict[str, Any], provider: str) -> Evaluation:
    """
    Ensure a stable schema so the UI never depends on provider-specific formatting.
    Missing or empty fields get the documented defaults.
    """
    category = str(obj.get("type") or "").strip().lower()
    if category not in CATEGORIES:
        category = "partial"

    return Evaluation(
        category=category,
        feedback=str(obj.get("feedback") or "").strip() or DEFAULT_FEEDBACK,
        example=str(obj.get("example") or "").strip() or DEFAULT_EXAMPLE,
        score=_score(obj.get("score")),
        grammar_score=_score(obj.get("grammar_score")),
        pronunciation_tips=str(obj.get("pronunciation_tips") or "").strip(),
        source=provider,
    )


def parse_evaluation(text: str, provider: str) -> Evaluation:
    """Turn a free-form model reply into an Evaluation. Never raises."""
    parsed = try_parse_json(text)
    if parsed is None:
        # No object at all: keep whatever the model said as feedback
        return normalize_evaluation({"feedback": (text or "").strip()}, provider)
    return normalize_evaluation(parsed, provider)
