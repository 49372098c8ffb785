from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Callable, Coroutine, List, Optional

import pytest

from speakpractice.config import Config
from speakpractice.devices import CaptureDevice, PlaybackDevice
from speakpractice.errors import PlaybackError, ProviderError
from speakpractice.models import CaptureResult, Evaluation, Notice, SessionView
from speakpractice.presenter import Presenter


class RecordingPresenter(Presenter):
    def __init__(self) -> None:
        super().__init__()
        self.views: List[SessionView] = []
        self.notices: List[Notice] = []

    def render(self, view: SessionView) -> None:
        self.views.append(view)

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)

    @property
    def messages(self) -> List[str]:
        return [n.message for n in self.notices]


class ScriptedCapture(CaptureDevice):
    """Returns queued results in order; defaults to a fixed transcript."""

    def __init__(self, *results: CaptureResult, available: bool = True) -> None:
        self.results = deque(results)
        self.available = available
        self.listen_calls = 0
        self.stop_calls = 0

    def is_available(self) -> bool:
        return self.available

    async def listen(self, locale: str = "zh-CN") -> CaptureResult:
        self.listen_calls += 1
        if self.results:
            return self.results.popleft()
        return CaptureResult(transcript="我叫小明，我今年二十岁")

    async def stop(self) -> None:
        self.stop_calls += 1


class RecordingPlayback(PlaybackDevice):
    def __init__(self, fail_speak: bool = False, fail_audio: bool = False) -> None:
        self.fail_speak = fail_speak
        self.fail_audio = fail_audio
        self.spoken: List[tuple] = []
        self.audio: List[bytes] = []

    async def speak(self, text: str, locale: str = "zh-CN", rate: float = 0.8) -> None:
        if self.fail_speak:
            raise PlaybackError("speech synthesis unavailable")
        self.spoken.append((text, locale, rate))

    async def play_audio(self, audio: bytes, media_type: str = "audio/mpeg") -> None:
        if self.fail_audio:
            raise PlaybackError("decode failed")
        self.audio.append(audio)


class FakeAdapter:
    """Stands in for any provider adapter; counts calls and can fail."""

    def __init__(
        self,
        name: str,
        *,
        ready: bool = True,
        fail: bool = False,
        result: Any = None,
        delay: float = 0.0,
        tracker: Optional["InFlight"] = None,
    ) -> None:
        self.name = name
        self.ready = ready
        self.fail = fail
        self.result = result
        self.delay = delay
        self.tracker = tracker
        self.calls: List[tuple] = []

    def is_ready(self) -> bool:
        return self.ready

    async def _call(self, *args: Any) -> Any:
        self.calls.append(args)
        if self.tracker:
            self.tracker.enter()
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                raise ProviderError(self.name, 500, "boom")
            return self.result
        finally:
            if self.tracker:
                self.tracker.leave()

    async def synthesize(self, text: str, params: Any = None) -> bytes:
        return await self._call(text) or b"mp3"

    async def evaluate(self, question: str, answer: str) -> Evaluation:
        return await self._call(question, answer) or Evaluation(
            category="good",
            feedback="Great",
            example="我叫张三。",
            score=9,
            grammar_score=9,
            source=self.name,
        )

    async def translate(self, text: str) -> str:
        return await self._call(text) or f"{self.name}:{text}"


class InFlight:
    def __init__(self) -> None:
        self.current = 0
        self.peak = 0

    def enter(self) -> None:
        self.current += 1
        self.peak = max(self.peak, self.current)

    def leave(self) -> None:
        self.current -= 1


@pytest.fixture
def config() -> Config:
    return Config(narration_delay=0.0, complete_delay=0.0, notice_seconds=5.0)


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def playback() -> RecordingPlayback:
    return RecordingPlayback()


@pytest.fixture
def make_adapter() -> Callable[..., FakeAdapter]:
    return FakeAdapter


@pytest.fixture
def make_capture() -> Callable[..., ScriptedCapture]:
    return ScriptedCapture


@pytest.fixture
def in_flight() -> InFlight:
    return InFlight()


@pytest.fixture
def run() -> Callable[[Coroutine], Any]:
    return asyncio.run


@pytest.fixture
def make_playback() -> Callable[..., RecordingPlayback]:
    return RecordingPlayback
