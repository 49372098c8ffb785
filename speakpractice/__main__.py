"""Module entrypoint for `python -m speakpractice`."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Optional, Sequence

from speakpractice.config import ENV_PATH, Config, write_env_template


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="speakpractice", description="Spoken question practice server")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the web app")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    init_env = sub.add_parser("init-env", help="Write a .env with placeholder keys")
    init_env.add_argument("--path", type=Path, default=ENV_PATH)

    sub.add_parser("check", help="Show configuration and test each configured provider")
    return parser


def serve(host: Optional[str], port: Optional[int]) -> int:
    import uvicorn

    config = Config.from_env()
    uvicorn.run(
        "speakpractice.main:app",
        host=host or config.host,
        port=port or config.port,
        log_level="info",
    )
    return 0


def check() -> int:
    from speakpractice.main import run_diagnostics
    from speakpractice.providers import build_registry

    config = Config.from_env()
    config.log_status()
    for missing in config.validate():
        print(f"[CONFIG] Missing: {missing}")
    asyncio.run(run_diagnostics(build_registry(config)))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "init-env":
        return 0 if write_env_template(args.path) else 1
    if args.command == "check":
        return check()
    return serve(getattr(args, "host", None), getattr(args, "port", None))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
