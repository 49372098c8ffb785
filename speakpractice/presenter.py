"""Presentation boundary between the session controller and a UI."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict

from speakpractice.models import Notice, SessionView

Handler = Callable[..., Awaitable[Any]]

EVENTS = (
    "input",
    "clear",
    "start",
    "replay",
    "translate",
    "listen",
    "stop",
    "retry",
    "continue",
    "next",
    "key",
)


class Presenter(ABC):
    """UI surface the controller renders into and receives events from."""

    def __init__(self):
        self._handlers: Dict[str, Handler] = {}

    @abstractmethod
    def render(self, view: SessionView) -> None:
        """Show the current session snapshot."""
        pass

    @abstractmethod
    def notify(self, notice: Notice) -> None:
        """Show a transient message; hide it after ``notice.duration``."""
        pass

    def on(self, event: str, handler: Handler) -> None:
        if event not in EVENTS:
            raise ValueError(f"Unknown event '{event}'. Valid: {', '.join(EVENTS)}")
        self._handlers[event] = handler

    async def dispatch(self, event: str, *args: Any) -> Any:
        """Deliver a UI event to its handler. Unbound events are ignored."""
        handler = self._handlers.get(event)
        if handler is None:
            print(f"[SESSION] No handler for event '{event}'")
            return None
        return await handler(*args)
