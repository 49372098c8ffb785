from speakpractice.heuristic import (
    TRANSLATION_UNAVAILABLE,
    evaluate_locally,
    example_answer,
    has_shared_keyword,
    translate_locally,
)
from speakpractice.schema import DEFAULT_EXAMPLE


def test_short_answer_without_keyword_is_poor() -> None:
    ev = evaluate_locally("你叫什么名字？", "我叫小明")
    assert ev.category == "poor"
    assert ev.score == 4
    assert ev.grammar_score == 4
    assert ev.example == "我叫张三。"
    assert ev.source == "local"


def test_long_answer_without_keyword_is_partial() -> None:
    ev = evaluate_locally("你叫什么名字？", "我叫小明，我今年二十岁")
    assert ev.category == "partial"
    assert ev.score == 6
    assert ev.grammar_score == 6


def test_long_answer_with_shared_keyword_is_good() -> None:
    ev = evaluate_locally("你叫什么名字？", "我不知道什么名字好")
    assert ev.category == "good"
    assert ev.score == 8
    assert ev.pronunciation_tips == "Practice speaking slowly and clearly."


def test_short_answer_with_shared_keyword_is_partial() -> None:
    assert evaluate_locally("你住在哪里？", "哪里").category == "partial"


def test_length_threshold_is_strictly_greater_than_five() -> None:
    assert evaluate_locally("你好", "一二三四五").category == "poor"
    assert evaluate_locally("你好", "一二三四五六").category == "partial"


def test_keyword_must_appear_in_both() -> None:
    assert not has_shared_keyword("你几岁了？", "什么")
    assert has_shared_keyword("你什么时候来？", "什么时候都可以")


def test_heuristic_is_pure() -> None:
    assert evaluate_locally("你叫什么名字？", "我叫小明") == evaluate_locally("你叫什么名字？", "我叫小明")


def test_example_first_match_wins_in_declaration_order() -> None:
    assert example_answer("你住在哪里？你叫什么名字？") == "我叫张三。"
    assert example_answer("你喜欢什么运动？") == "我喜欢运动。"
    assert example_answer("你是做什么工作的？") == "我是学生。"
    assert example_answer("你有猫吗？") == DEFAULT_EXAMPLE


def test_local_translation_table() -> None:
    assert translate_locally("你几岁了？") == "How old are you?"
    assert translate_locally("你几岁了") == TRANSLATION_UNAVAILABLE
    assert translate_locally("你有猫吗？") == TRANSLATION_UNAVAILABLE
