import json
from typing import Callable, List

import httpx
import pytest

from speakpractice.config import Config, ProviderCredentials
from speakpractice.errors import ConfigurationMissing, ProviderError
from speakpractice.providers import (
    ElevenLabsAdapter,
    GeminiAdapter,
    GoogleTranslateAdapter,
    OpenAIAdapter,
    build_registry,
)

CONFIG = Config.from_env(
    {
        "ELEVENLABS_API_KEY": "el-key",
        "OPENAI_API_KEY": "sk-real",
        "GOOGLE_CLOUD_API_KEY": "g-key",
        "GEMINI_API_KEY": "gm-key",
    }
)


def mock(handler: Callable[[httpx.Request], httpx.Response]):
    requests: List[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return httpx.MockTransport(record), requests


def chat_reply(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


@pytest.mark.parametrize(
    "adapter_cls, key",
    [
        (ElevenLabsAdapter, "sk-elevenlabs-xxxx"),
        (OpenAIAdapter, "sk-proj-your-openai-api-key-here"),
        (OpenAIAdapter, "sk-openai-xxxx"),
        (GoogleTranslateAdapter, "YOUR_GOOGLE_CLOUD_API_KEY"),
        (GoogleTranslateAdapter, "AIza-google-xxxx"),
        (GeminiAdapter, ""),
        (OpenAIAdapter, "   "),
    ],
)
def test_placeholder_or_blank_keys_are_not_ready(adapter_cls, key: str) -> None:
    assert not adapter_cls(ProviderCredentials(api_key=key)).is_ready()


def test_configure_replaces_credentials() -> None:
    adapter = OpenAIAdapter()
    assert not adapter.is_ready()
    adapter.configure(ProviderCredentials(api_key="sk-real"))
    assert adapter.is_ready()


def test_elevenlabs_request_shape(run) -> None:
    transport, requests = mock(lambda r: httpx.Response(200, content=b"ID3audio"))
    adapter = ElevenLabsAdapter(CONFIG.elevenlabs(), transport=transport)

    audio = run(adapter.synthesize("你好"))

    assert audio == b"ID3audio"
    (req,) = requests
    assert str(req.url) == "https://api.elevenlabs.io/v1/text-to-speech/BrbEfHMQu0fyclQR7lfh"
    assert req.headers["xi-api-key"] == "el-key"
    assert req.headers["accept"] == "audio/mpeg"
    body = json.loads(req.content)
    assert body["text"] == "你好"
    assert body["model_id"] == "eleven_multilingual_v2"
    assert body["voice_settings"] == {
        "stability": 0.5,
        "similarity_boost": 0.8,
        "style": 0.0,
        "use_speaker_boost": True,
    }


def test_elevenlabs_error_status(run) -> None:
    transport, _ = mock(lambda r: httpx.Response(401, json={"detail": {"message": "Invalid API key"}}))
    adapter = ElevenLabsAdapter(CONFIG.elevenlabs(), transport=transport)

    with pytest.raises(ProviderError) as excinfo:
        run(adapter.synthesize("你好"))
    assert excinfo.value.status == 401
    assert excinfo.value.message == "Invalid API key"
    assert excinfo.value.provider == "elevenlabs"


def test_not_ready_adapter_makes_no_request(run) -> None:
    transport, requests = mock(lambda r: httpx.Response(200))
    adapter = OpenAIAdapter(ProviderCredentials(api_key="sk-openai-xxxx"), transport=transport)

    with pytest.raises(ConfigurationMissing):
        run(adapter.evaluate("q", "a"))
    assert requests == []


def test_openai_evaluation_parses_embedded_json(run) -> None:
    content = 'Here you go: {"type": "good", "feedback": "Clear answer", "score": 9} Thanks'
    transport, requests = mock(lambda r: chat_reply(content))
    adapter = OpenAIAdapter(CONFIG.openai(), transport=transport)

    ev = run(adapter.evaluate("你叫什么名字？", "我叫小明。"))

    assert ev.category == "good"
    assert ev.feedback == "Clear answer"
    assert ev.score == 9
    assert ev.grammar_score == 5
    assert ev.source == "openai"
    (req,) = requests
    assert str(req.url) == "https://api.openai.com/v1/chat/completions"
    assert req.headers["authorization"] == "Bearer sk-real"
    body = json.loads(req.content)
    assert body["model"] == "gpt-4"
    assert body["temperature"] == 0.7
    assert body["max_tokens"] == 500
    assert body["messages"][0]["role"] == "system"
    assert "你叫什么名字？" in body["messages"][1]["content"]


@pytest.mark.parametrize(
    "reply",
    [
        httpx.Response(200, json={"unexpected": True}),
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, text="<html>gateway</html>"),
    ],
)
def test_openai_unexpected_envelope_is_an_error(run, reply: httpx.Response) -> None:
    transport, _ = mock(lambda r: reply)
    adapter = OpenAIAdapter(CONFIG.openai(), transport=transport)

    with pytest.raises(ProviderError) as excinfo:
        run(adapter.evaluate("q", "a"))
    assert excinfo.value.reason == "malformed response"


def test_openai_unreadable_model_text_degrades_to_defaults(run) -> None:
    transport, _ = mock(lambda r: chat_reply("I think the answer is fine."))
    adapter = OpenAIAdapter(CONFIG.openai(), transport=transport)

    ev = run(adapter.evaluate("q", "a"))
    assert ev.category == "partial"
    assert ev.score == 5
    assert ev.feedback == "I think the answer is fine."
    assert ev.source == "openai"


def test_non_finite_score_in_model_text(run) -> None:
    transport, _ = mock(lambda r: chat_reply('{"type": "good", "score": Infinity, "grammar_score": NaN}'))
    adapter = OpenAIAdapter(CONFIG.openai(), transport=transport)

    ev = run(adapter.evaluate("q", "a"))
    assert ev.category == "good"
    assert ev.score == 5
    assert ev.grammar_score == 5


def test_openai_error_message_is_extracted(run) -> None:
    transport, _ = mock(lambda r: httpx.Response(429, json={"error": {"message": "Rate limit"}}))
    adapter = OpenAIAdapter(CONFIG.openai(), transport=transport)

    with pytest.raises(ProviderError) as excinfo:
        run(adapter.translate("你好"))
    assert excinfo.value.status == 429
    assert "Rate limit" in str(excinfo.value)


def test_openai_translation_is_stripped(run) -> None:
    transport, requests = mock(lambda r: chat_reply("  Hello  \n"))
    adapter = OpenAIAdapter(CONFIG.openai(), transport=transport)

    assert run(adapter.translate("你好")) == "Hello"
    body = json.loads(requests[0].content)
    assert body["temperature"] == 0.3
    assert body["max_tokens"] == 100


def test_transport_error_becomes_provider_error(run) -> None:
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    adapter = OpenAIAdapter(CONFIG.openai(), transport=httpx.MockTransport(boom))
    with pytest.raises(ProviderError) as excinfo:
        run(adapter.evaluate("q", "a"))
    assert excinfo.value.reason == "ConnectError"
    assert excinfo.value.status is None


def test_google_translate_request_and_result(run) -> None:
    transport, requests = mock(
        lambda r: httpx.Response(200, json={"data": {"translations": [{"translatedText": "Hello"}]}})
    )
    adapter = GoogleTranslateAdapter(CONFIG.google_translate(), transport=transport)

    assert run(adapter.translate("你好")) == "Hello"
    (req,) = requests
    assert req.url.params["key"] == "g-key"
    assert json.loads(req.content) == {"q": "你好", "source": "zh", "target": "en", "format": "text"}


def test_google_translate_empty_result_is_an_error(run) -> None:
    transport, _ = mock(lambda r: httpx.Response(200, json={"data": {"translations": []}}))
    adapter = GoogleTranslateAdapter(CONFIG.google_translate(), transport=transport)

    with pytest.raises(ProviderError):
        run(adapter.translate("你好"))


def test_gemini_evaluation(run) -> None:
    reply = {"candidates": [{"content": {"parts": [{"text": '{"type": "poor", "score": 3}'}]}}]}
    transport, requests = mock(lambda r: httpx.Response(200, json=reply))
    adapter = GeminiAdapter(CONFIG.gemini(), transport=transport)

    ev = run(adapter.evaluate("q", "a"))
    assert ev.category == "poor"
    assert ev.score == 3
    assert ev.source == "gemini"
    assert requests[0].headers["x-goog-api-key"] == "gm-key"
    assert requests[0].url.path == "/v1beta/models/gemini-2.0-flash:generateContent"


def test_test_connection_never_raises(run) -> None:
    ok_transport, _ = mock(lambda r: httpx.Response(200, json={"data": {"translations": [{"translatedText": "Hello"}]}}))
    bad_transport, _ = mock(lambda r: httpx.Response(500, text="server down"))

    assert run(GoogleTranslateAdapter(CONFIG.google_translate(), transport=ok_transport).test_connection()) is True
    assert run(GoogleTranslateAdapter(CONFIG.google_translate(), transport=bad_transport).test_connection()) is False
    assert run(ElevenLabsAdapter(ProviderCredentials(), transport=ok_transport).test_connection()) is False


def test_registry_order() -> None:
    registry = build_registry(CONFIG)
    assert [a.name for a in registry.narration] == ["elevenlabs"]
    assert [a.name for a in registry.evaluation] == ["openai", "gemini"]
    assert [a.name for a in registry.translation] == ["google", "openai", "gemini"]
    assert [a.name for a in registry.all()] == ["elevenlabs", "openai", "gemini", "google"]
    assert registry.translation[1] is registry.evaluation[0]


@pytest.mark.parametrize(
    "payload",
    [{"candidates": []}, {"candidates": "nope"}, {"promptFeedback": {"blockReason": "SAFETY"}}],
)
def test_gemini_unexpected_envelope_is_an_error(run, payload) -> None:
    transport, _ = mock(lambda r: httpx.Response(200, json=payload))
    adapter = GeminiAdapter(CONFIG.gemini(), transport=transport)

    with pytest.raises(ProviderError):
        run(adapter.evaluate("q", "a"))
