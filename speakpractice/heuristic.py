"""
heuristic.py

Network-free stand-ins for the evaluation and translation providers.

Used when no provider is ready, or when every ready provider failed. The
tables are fixed; unknown prompts get the generic placeholders.
"""
from __future__ import annotations

from typing import List

from speakpractice.models import Evaluation
from speakpractice.schema import DEFAULT_EXAMPLE

QUESTION_KEYWORDS = ["什么", "哪里", "怎么", "为什么", "什么时候", "谁", "哪个"]

# Declaration order matters: first substring match wins
EXAMPLE_ANSWERS = {
    "你叫什么名字": "我叫张三。",
    "你住在哪里": "我住在北京。",
    "你喜欢什么": "我喜欢运动。",
    "今天天气怎么样": "今天天气很好。",
    "你几岁了": "我25岁了。",
    "你是做什么工作的": "我是学生。",
}

TRANSLATIONS = {
    "你叫什么名字？": "What is your name?",
    "你住在哪里？": "Where do you live?",
    "你喜欢什么运动？": "What sports do you like?",
    "今天天气怎么样？": "How is the weather today?",
    "你几岁了？": "How old are you?",
    "你是做什么工作的？": "What do you do for work?",
    "你会说中文吗？": "Do you speak Chinese?",
    "你来自哪里？": "Where are you from?",
    "你喜欢吃什么？": "What do you like to eat?",
    "你周末做什么？": "What do you do on weekends?",
}
TRANSLATION_UNAVAILABLE = "Translation not available"

_RESULTS = {
    "good": (
        8,
        "Good answer! Your grammar and vocabulary are appropriate.",
        "Practice speaking slowly and clearly.",
    ),
    "partial": (
        6,
        "Your answer is mostly correct. Try to use more complete sentences.",
        "Focus on pronunciation of key words.",
    ),
    "poor": (
        4,
        "Keep practicing! Try to answer with complete sentences.",
        "Practice basic vocabulary and sentence structure.",
    ),
}


def extract_keywords(text: str) -> List[str]:
    return [kw for kw in QUESTION_KEYWORDS if kw in text]


def has_shared_keyword(question: str, answer: str) -> bool:
    answer_keywords = extract_keywords(answer)
    return any(kw in answer_keywords for kw in extract_keywords(question))


def example_answer(question: str) -> str:
    for pattern, example in EXAMPLE_ANSWERS.items():
        if pattern in question:
            return example
    return DEFAULT_EXAMPLE


def evaluate_locally(question: str, answer: str) -> Evaluation:
    """Deterministic length + keyword scoring."""
    is_complete = len(answer) > 5
    has_keyword = has_shared_keyword(question, answer)

    if is_complete and has_keyword:
        category = "good"
    elif is_complete or has_keyword:
        category = "partial"
    else:
        category = "poor"

    score, feedback, tips = _RESULTS[category]
    return Evaluation(
        category=category,
        feedback=feedback,
        example=example_answer(question),
        score=score,
        grammar_score=score,
        pronunciation_tips=tips,
        source="local",
    )


def translate_locally(text: str) -> str:
    return TRANSLATIONS.get(text, TRANSLATION_UNAVAILABLE)
