from __future__ import annotations

EVALUATION_SYSTEM = (
    "You are a Chinese language teacher evaluating student answers. "
    "Provide constructive feedback in English."
)

TRANSLATION_SYSTEM = (
    "You are a professional Chinese to English translator. "
    "Provide accurate and natural translations."
)


def build_evaluation_prompt(question: str, answer: str) -> str:
    """
    Single evaluation prompt shared by all LLM providers.
    The JSON keys here are the contract parse_evaluation() reads back.
    """
    return f"""Please evaluate this Chinese language answer:

Question: "{question}"
Student's Answer: "{answer}"

Please provide an evaluation in the following JSON format:
{{
    "type": "good|partial|poor",
    "feedback": "Detailed feedback in English explaining what was good and what could be improved",
    "example": "A good example answer in Chinese",
    "score": 1-10,
    "grammar_score": 1-10,
    "pronunciation_tips": "Tips for pronunciation if applicable"
}}

Evaluation criteria:
- "good": Correct grammar, appropriate vocabulary, complete answer
- "partial": Mostly correct but has some issues
- "poor": Significant grammar/vocabulary issues or incomplete answer

Focus on:
1. Grammar accuracy
2. Vocabulary appropriateness
3. Answer completeness
4. Cultural appropriateness
5. Pronunciation guidance

Respond only with the JSON object, no additional text."""


def build_translation_prompt(text: str) -> str:
    return (
        "Please translate this Chinese text to English. Provide only the English "
        "translation, no additional text or explanations:\n\n"
        f'"{text}"'
    )
