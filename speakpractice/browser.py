"""Browser-backed presenter and devices.

The page holds the actual microphone and speakers: it runs the Web Speech API
for capture and speechSynthesis / <audio> for playback. The server pushes view
snapshots and device commands over Server-Sent Events and receives capture and
playback results back over HTTP.
"""

from __future__ import annotations

import asyncio
import uuid
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional, Tuple

from speakpractice.devices import LOCALE, CaptureDevice, PlaybackDevice
from speakpractice.errors import PlaybackError
from speakpractice.models import CaptureResult, Notice, SessionView
from speakpractice.presenter import Presenter

MAX_CLIPS = 20
PLAYBACK_TIMEOUT = 60.0


class BrowserPresenter(Presenter):
    """Fans every message out to each connected page."""

    def __init__(self):
        super().__init__()
        self._subscribers: List[asyncio.Queue] = []
        self._disconnect_listeners: List[Callable[[], None]] = []
        self.last_view: Optional[Dict[str, Any]] = None

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        if self.last_view is not None:
            queue.put_nowait({"type": "view", **self.last_view})
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue not in self._subscribers:
            return
        self._subscribers.remove(queue)
        if not self._subscribers:
            print("[SESSION] Last page disconnected")
            for listener in list(self._disconnect_listeners):
                listener()

    def add_disconnect_listener(self, listener: Callable[[], None]) -> None:
        """Call ``listener`` whenever the last connected page goes away."""
        self._disconnect_listeners.append(listener)

    def has_subscribers(self) -> bool:
        return bool(self._subscribers)

    def publish(self, kind: str, payload: Dict[str, Any]) -> None:
        message = {"type": kind, **payload}
        for queue in list(self._subscribers):
            queue.put_nowait(message)

    def render(self, view: SessionView) -> None:
        self.last_view = view.to_dict()
        self.publish("view", self.last_view)

    def notify(self, notice: Notice) -> None:
        print(f"[NOTICE] {notice.message}")
        self.publish("notice", notice.to_dict())


class BrowserCapture(CaptureDevice):
    """Capture via the page's speech recognition; results arrive through ``submit``."""

    def __init__(self, presenter: BrowserPresenter):
        self.presenter = presenter
        self._pending: Optional[asyncio.Future] = None
        presenter.add_disconnect_listener(self._page_lost)

    def is_available(self) -> bool:
        return self.presenter.has_subscribers()

    async def listen(self, locale: str = LOCALE) -> CaptureResult:
        loop = asyncio.get_running_loop()
        self._pending = loop.create_future()
        self.presenter.publish("capture", {"action": "start", "locale": locale})
        print(f"[CAPTURE] Listening ({locale})")
        try:
            return await self._pending
        finally:
            self._pending = None

    async def stop(self):
        if not self.presenter.has_subscribers():
            # Nobody left to end the recognition
            self.submit(error="no-speech")
            return
        self.presenter.publish("capture", {"action": "stop"})

    def submit(self, transcript: Optional[str] = None, error: Optional[str] = None) -> bool:
        """Resolve the in-progress listen. Returns False when nothing was waiting."""
        fut = self._pending
        if fut is None or fut.done():
            return False
        if transcript:
            print(f"[CAPTURE] Transcript: {transcript[:50]}{'...' if len(transcript) > 50 else ''}")
        fut.set_result(CaptureResult(transcript=transcript, error=error))
        return True

    def _page_lost(self) -> None:
        if self.submit(error="network"):
            print("[CAPTURE] Page disconnected while listening")


class BrowserPlayback(PlaybackDevice):
    """Sends speech and audio clips to the page and waits until they finish.

    The page reports each playback back through ``finish``; an error report,
    a lost page or no report within ``timeout`` raises PlaybackError.
    """

    def __init__(self, presenter: BrowserPresenter, timeout: float = PLAYBACK_TIMEOUT):
        self.presenter = presenter
        self.timeout = timeout
        self._clips: "OrderedDict[str, Tuple[bytes, str]]" = OrderedDict()
        self._waiting: Dict[str, asyncio.Future] = {}
        presenter.add_disconnect_listener(self._page_lost)

    def is_available(self) -> bool:
        return self.presenter.has_subscribers()

    async def speak(self, text: str, locale: str = LOCALE, rate: float = 0.8):
        await self._play("speak", {"text": text, "locale": locale, "rate": rate})

    async def play_audio(self, audio: bytes, media_type: str = "audio/mpeg"):
        if not self.is_available():
            raise PlaybackError("No browser connected")
        clip_id = uuid.uuid4().hex
        self._clips[clip_id] = (audio, media_type)
        while len(self._clips) > MAX_CLIPS:
            self._clips.popitem(last=False)
        await self._play("audio", {"url": f"/audio/{clip_id}"})

    async def _play(self, kind: str, payload: Dict[str, Any]) -> None:
        if not self.is_available():
            raise PlaybackError("No browser connected")

        playback_id = uuid.uuid4().hex
        fut = asyncio.get_running_loop().create_future()
        self._waiting[playback_id] = fut
        self.presenter.publish(kind, {"id": playback_id, **payload})
        try:
            error = await asyncio.wait_for(fut, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise PlaybackError(f"{kind} playback timed out")
        finally:
            self._waiting.pop(playback_id, None)

        if error:
            raise PlaybackError(f"{kind} playback failed: {error}")

    def finish(self, playback_id: str, error: Optional[str] = None) -> bool:
        """Record the page's report for one playback. False when nothing was waiting."""
        fut = self._waiting.get(playback_id)
        if fut is None or fut.done():
            return False
        fut.set_result(error)
        return True

    def _page_lost(self) -> None:
        for fut in list(self._waiting.values()):
            if not fut.done():
                fut.set_result("page disconnected")

    def get_clip(self, clip_id: str) -> Optional[Tuple[bytes, str]]:
        return self._clips.get(clip_id)
