from pathlib import Path

from dotenv import dotenv_values

import speakpractice.__main__ as cli
from speakpractice.config import Config
from speakpractice.providers import build_registry


def test_init_env_writes_placeholders_that_are_not_ready(tmp_path: Path) -> None:
    target = tmp_path / ".env"
    assert cli.main(["init-env", "--path", str(target)]) == 0
    assert cli.main(["init-env", "--path", str(target)]) == 1

    config = Config.from_env({k: v or "" for k, v in dotenv_values(target).items()})
    assert config.elevenlabs_api_key == "sk-elevenlabs-xxxx"
    registry = build_registry(config)
    assert [a.is_ready() for a in registry.all()] == [False, False, False, False]


def test_serve_runs_uvicorn_with_configured_address(monkeypatch) -> None:
    calls = {}

    def fake_run(target, **kwargs):
        calls["target"] = target
        calls.update(kwargs)

    monkeypatch.setattr("uvicorn.run", fake_run)
    assert cli.main(["serve", "--port", "9001"]) == 0
    assert calls["target"] == "speakpractice.main:app"
    assert calls["port"] == 9001


def test_check_runs_diagnostics_without_network_when_unconfigured(monkeypatch, capsys) -> None:
    monkeypatch.setattr(Config, "from_env", classmethod(lambda cls, env=None: Config()))
    assert cli.main(["check"]) == 0
    out = capsys.readouterr().out
    assert "[STARTUP] elevenlabs: not configured" in out
    assert "[STARTUP] openai: not configured" in out
