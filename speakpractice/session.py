"""Practice session controller.

Sequences present -> listen -> evaluate -> review -> advance for one shuffled
prompt set. All provider work goes through the FallbackPolicy and is serialized
by a single lock, so a session never has two provider requests in flight.
"""

from __future__ import annotations

import asyncio
import random
from typing import List, Optional

from speakpractice.config import Config
from speakpractice.devices import LOCALE, CaptureDevice, capture_error_message
from speakpractice.errors import CaptureFailed, NoPromptsProvided
from speakpractice.fallback import FallbackPolicy
from speakpractice.models import (
    CaptureResult,
    Notice,
    Phase,
    PromptSet,
    SessionState,
    SessionView,
)
from speakpractice.presenter import Presenter

COMPLETE_MESSAGE = "Congratulations! You have completed all practice questions."


class SessionController:
    """Owns SessionState and drives it from presenter events."""

    def __init__(
        self,
        presenter: Presenter,
        policy: FallbackPolicy,
        capture: CaptureDevice,
        config: Config,
        rng: Optional[random.Random] = None,
    ):
        self.presenter = presenter
        self.policy = policy
        self.capture = capture
        self.config = config
        self.rng = rng or random.Random()

        self.state: Optional[SessionState] = None
        self.pending: List[str] = []  # setup input, one prompt per line

        self._provider_lock = asyncio.Lock()
        self._narration: Optional[asyncio.Task] = None

        self._bind()

    def _bind(self) -> None:
        p = self.presenter
        p.on("input", self.set_input)
        p.on("clear", self.clear_input)
        p.on("start", self.start)
        p.on("replay", self.replay)
        p.on("translate", self.translate)
        p.on("listen", self.start_listening)
        p.on("stop", self.stop_listening)
        p.on("retry", self.retry)
        p.on("continue", self.continue_)
        p.on("next", self.next_prompt)
        p.on("key", self.handle_key)

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------
    @property
    def phase(self) -> Phase:
        return self.state.phase if self.state else Phase.SETUP

    def view(self) -> SessionView:
        s = self.state
        if s is None:
            return SessionView(
                phase=Phase.SETUP,
                can_start=bool(self.pending),
                pending_prompts=len(self.pending),
            )
        return SessionView(
            phase=s.phase,
            prompt=s.current_prompt,
            index=s.index,
            total=len(s.prompts),
            answer=s.answer,
            evaluation=s.evaluation,
            translation=s.translation,
        )

    def _render(self) -> None:
        self.presenter.render(self.view())

    def _notice(self, message: str) -> None:
        self.presenter.notify(Notice(message, duration=self.config.notice_seconds))

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    async def set_input(self, raw: str) -> int:
        """Validate raw prompt text; returns the number of usable lines."""
        if self.phase is not Phase.SETUP:
            return 0
        self.pending = PromptSet.parse_lines(raw)
        self._render()
        return len(self.pending)

    async def clear_input(self) -> None:
        if self.phase is not Phase.SETUP:
            return
        self.pending = []
        self._render()

    async def start(self, raw: Optional[str] = None) -> bool:
        """Shuffle the prompts once and present the first one."""
        if self.phase is not Phase.SETUP:
            return False
        if raw is not None:
            self.pending = PromptSet.parse_lines(raw)

        try:
            prompts = PromptSet.from_text("\n".join(self.pending))
        except NoPromptsProvided as e:
            self._notice(str(e))
            return False

        self.state = SessionState(prompts=prompts.shuffled(self.rng))
        print(f"[SESSION] Started with {len(prompts)} prompts")
        self._present()
        return True

    # ------------------------------------------------------------------
    # Presenting
    # ------------------------------------------------------------------
    def _present(self) -> None:
        s = self.state
        s.phase = Phase.PRESENTING
        s.clear_answer()
        s.translation = None
        self._render()
        self._narration = asyncio.create_task(self._auto_narrate(s, s.index))

    async def _auto_narrate(self, state: SessionState, index: int) -> None:
        if self.config.narration_delay > 0:
            await asyncio.sleep(self.config.narration_delay)
        # Session reset or moved on while we waited
        if self.state is not state or state.index != index:
            return
        await self._narrate(state.prompts[index])

    async def _narrate(self, text: str) -> None:
        async with self._provider_lock:
            outcome = await self.policy.narrate(text)
        print(f"[SESSION] Narrated via {outcome.source}")
        if outcome.notice:
            self._notice(outcome.notice)

    async def replay(self) -> None:
        if self.phase not in (Phase.PRESENTING, Phase.REVIEWING):
            return
        await self._narrate(self.state.current_prompt)

    async def translate(self) -> Optional[str]:
        if self.phase not in (Phase.PRESENTING, Phase.REVIEWING):
            return None
        s = self.state
        index = s.index

        async with self._provider_lock:
            outcome = await self.policy.translate(s.current_prompt)

        if self.state is s and s.index == index:
            s.translation = outcome.value
            self._render()
        if outcome.notice:
            self._notice(outcome.notice)
        return outcome.value

    # ------------------------------------------------------------------
    # Listening / processing
    # ------------------------------------------------------------------
    async def start_listening(self) -> None:
        if self.phase is not Phase.PRESENTING:
            return
        await self._listen()

    async def stop_listening(self) -> None:
        if self.phase is Phase.LISTENING:
            await self.capture.stop()

    async def _listen(self) -> None:
        s = self.state
        if not self.capture.is_available():
            self._notice(capture_error_message("unavailable"))
            return

        s.phase = Phase.LISTENING
        self._render()

        try:
            result = await self.capture.listen(LOCALE)
        except CaptureFailed as e:
            result = CaptureResult(error=e.code)

        if self.state is not s or s.phase is not Phase.LISTENING:
            return

        if not result.ok:
            code = result.error or "no-speech"
            print(f"[CAPTURE] Listening ended with error: {code}")
            s.phase = Phase.PRESENTING
            self._render()
            self._notice(capture_error_message(code))
            return

        await self._process(result.transcript.strip())

    async def _process(self, transcript: str) -> None:
        s = self.state
        s.answer = transcript
        s.phase = Phase.PROCESSING
        self._render()

        async with self._provider_lock:
            outcome = await self.policy.evaluate(s.current_prompt, transcript)

        s.evaluation = outcome.value
        s.phase = Phase.REVIEWING
        self._render()
        if outcome.notice:
            self._notice(outcome.notice)

    # ------------------------------------------------------------------
    # Reviewing
    # ------------------------------------------------------------------
    async def retry(self) -> None:
        """Listen again for the same prompt."""
        if self.phase is not Phase.REVIEWING:
            return
        s = self.state
        s.clear_answer()
        s.phase = Phase.PRESENTING
        await self._listen()

    async def continue_(self) -> None:
        if self.phase is not Phase.REVIEWING:
            return
        await self._advance()

    async def next_prompt(self) -> None:
        """Skip ahead; also allowed before answering."""
        if self.phase not in (Phase.PRESENTING, Phase.REVIEWING):
            return
        await self._advance()

    async def _advance(self) -> None:
        s = self.state
        if s.is_last:
            await self._complete()
            return
        s.index += 1
        self._present()

    async def _complete(self) -> None:
        s = self.state
        s.phase = Phase.COMPLETE
        self._render()
        self._notice(COMPLETE_MESSAGE)
        print("[SESSION] All prompts completed")

        await asyncio.sleep(self.config.complete_delay)
        if self.state is s:
            self.reset()

    def reset(self) -> None:
        """Discard the session and return to setup; the typed input is kept."""
        self.state = None
        self._render()

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------
    async def handle_key(self, key: str) -> None:
        if self.phase in (Phase.SETUP, Phase.COMPLETE):
            return

        if key == " ":
            if self.phase is Phase.LISTENING:
                await self.stop_listening()
            else:
                await self.start_listening()
        elif key == "ArrowRight":
            await self.next_prompt()
        elif key in ("p", "P"):
            await self.replay()

    # ------------------------------------------------------------------
    async def wait_narration(self) -> None:
        """Wait for the scheduled auto-narration, if any."""
        task = self._narration
        if task is not None and not task.done():
            await task

    async def close(self) -> None:
        task = self._narration
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
