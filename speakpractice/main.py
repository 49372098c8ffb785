"""FastAPI backend for spoken question practice."""

import asyncio
import json
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional, Set

import httpx
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, StreamingResponse
from pydantic import BaseModel

from speakpractice.browser import BrowserCapture, BrowserPlayback, BrowserPresenter
from speakpractice.config import Config
from speakpractice.fallback import FallbackPolicy
from speakpractice.providers import ProviderRegistry, build_registry
from speakpractice.session import SessionController

UI_PATH = Path(__file__).parent / "ui.html"

# URL action -> presenter event
ACTIONS = {
    "replay": "replay",
    "translate": "translate",
    "listen": "listen",
    "stop": "stop",
    "retry": "retry",
    "continue": "continue",
    "next": "next",
}


# Request models
class PromptsRequest(BaseModel):
    text: str = ""


class KeyRequest(BaseModel):
    key: str


class CaptureRequest(BaseModel):
    transcript: Optional[str] = None
    error: Optional[str] = None


class PlaybackRequest(BaseModel):
    id: str
    error: Optional[str] = None


async def run_diagnostics(registry: ProviderRegistry) -> None:
    """Test each ready adapter once. Results are only logged."""
    for adapter in registry.all():
        if not adapter.is_ready():
            print(f"[STARTUP] {adapter.name}: not configured")
            continue
        ok = await adapter.test_connection()
        print(f"[STARTUP] {adapter.name}: {'connection test passed' if ok else 'connection test failed'}")


def create_app(
    config: Optional[Config] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    diagnostics: bool = True,
) -> FastAPI:
    config = config or Config.from_env()

    presenter = BrowserPresenter()
    capture = BrowserCapture(presenter)
    playback = BrowserPlayback(presenter)
    registry = build_registry(config, transport=transport)
    policy = FallbackPolicy(registry, playback, config)
    controller = SessionController(presenter, policy, capture, config)

    # Strong references to in-flight event handlers
    tasks: Set[asyncio.Task] = set()

    def schedule(event: str, *args) -> None:
        task = asyncio.create_task(presenter.dispatch(event, *args))
        tasks.add(task)
        task.add_done_callback(tasks.discard)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config.log_status()
        for missing in config.validate():
            print(f"[CONFIG] Missing: {missing}")
        if diagnostics:
            diag = asyncio.create_task(run_diagnostics(registry))
            tasks.add(diag)
            diag.add_done_callback(tasks.discard)
        yield
        await controller.close()
        for task in list(tasks):
            task.cancel()

    app = FastAPI(title="Spoken Question Practice", lifespan=lifespan)

    # CORS for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.presenter = presenter
    app.state.capture = capture
    app.state.playback = playback
    app.state.registry = registry
    app.state.controller = controller

    @app.get("/favicon.ico")
    async def favicon():
        """Return empty favicon to prevent 404 errors."""
        return Response(content="", media_type="image/x-icon")

    @app.get("/", response_class=HTMLResponse)
    async def serve_ui():
        """Serve the practice page."""
        return HTMLResponse(content=UI_PATH.read_text(encoding="utf-8"))

    @app.get("/session")
    async def session_view():
        return controller.view().to_dict()

    @app.post("/session/prompts")
    async def session_prompts(request: PromptsRequest):
        count = await presenter.dispatch("input", request.text)
        return {"prompts": count, "view": controller.view().to_dict()}

    @app.post("/session/clear")
    async def session_clear():
        await presenter.dispatch("clear")
        return controller.view().to_dict()

    @app.post("/session/start")
    async def session_start(request: Optional[PromptsRequest] = None):
        raw = request.text if request and request.text else None
        started = await presenter.dispatch("start", raw)
        return {"started": bool(started), "view": controller.view().to_dict()}

    @app.post("/session/key")
    async def session_key(request: KeyRequest):
        schedule("key", request.key)
        return {"accepted": True}

    @app.post("/session/{action}")
    async def session_action(action: str):
        event = ACTIONS.get(action)
        if event is None:
            raise HTTPException(status_code=404, detail=f"Unknown action '{action}'")
        schedule(event)
        return {"accepted": True, "phase": controller.phase.value}

    @app.post("/capture/result")
    async def capture_result(request: CaptureRequest):
        accepted = capture.submit(transcript=request.transcript, error=request.error)
        return {"accepted": accepted}

    @app.post("/playback/result")
    async def playback_result(request: PlaybackRequest):
        accepted = playback.finish(request.id, error=request.error)
        return {"accepted": accepted}

    @app.get("/audio/{clip_id}")
    async def audio_clip(clip_id: str):
        clip = playback.get_clip(clip_id)
        if clip is None:
            raise HTTPException(status_code=404, detail="Clip not found")
        audio, media_type = clip
        return Response(content=audio, media_type=media_type)

    @app.get("/providers/status")
    async def providers_status():
        return {
            "providers": registry.status(),
            "use_elevenlabs": config.use_elevenlabs,
            "missing": config.validate(),
        }

    @app.get("/session/stream")
    async def session_stream():
        """Stream views, notices and device commands via Server-Sent Events."""
        queue = presenter.subscribe()

        async def event_generator():
            try:
                while True:
                    try:
                        message = await asyncio.wait_for(queue.get(), timeout=15.0)
                        yield f"data: {json.dumps(message, ensure_ascii=False)}\n\n"
                    except asyncio.TimeoutError:
                        # Send heartbeat to keep connection alive
                        yield ": heartbeat\n\n"
            finally:
                presenter.unsubscribe(queue)

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable buffering for nginx
            },
        )

    return app


app = create_app()
