"""Tests for the sitepulse CLI commands."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from sitepulse.cli import app
from sitepulse_core.reload import ProbeError

runner = CliRunner()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    """Empty cwd/home so only configs written by the test are loaded."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    with patch("sitepulse.cli.configure_logging"):
        yield tmp_path


class _FakeProbe:
    """Stands in for HttpProbe; replays ``script`` and then repeats the last token."""

    script: list = ["A"]
    instances: list["_FakeProbe"] = []

    def __init__(self, base_url: str, path: str = "/ping", timeout: float = 0.8) -> None:
        self.url = base_url.rstrip("/") + path
        self.timeout = timeout
        self.calls = 0
        self.closed = False
        _FakeProbe.instances.append(self)

    async def __call__(self) -> str:
        item = self.script[min(self.calls, len(self.script) - 1)]
        self.calls += 1
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_probe():
    _FakeProbe.instances = []
    with patch("sitepulse.cli.HttpProbe", _FakeProbe):
        yield _FakeProbe


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_init_creates_file(self, _isolated):
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0
        assert (_isolated / "sitepulse.yaml").exists()
        assert "Created" in result.output

    def test_init_refuses_overwrite(self, _isolated):
        (_isolated / "sitepulse.yaml").write_text("log_level: debug\n")
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert (_isolated / "sitepulse.yaml").read_text() == "log_level: debug\n"

    def test_init_force(self, _isolated):
        (_isolated / "sitepulse.yaml").write_text("log_level: debug\n")
        result = runner.invoke(app, ["config", "init", "--force"])
        assert result.exit_code == 0
        assert "restart_policy" in (_isolated / "sitepulse.yaml").read_text()

    def test_show_uses_config_option(self, _isolated):
        cfg = _isolated / "alt.yaml"
        cfg.write_text("timing:\n  restart_policy: reject\n")
        result = runner.invoke(app, ["--config", str(cfg), "config", "show"])
        assert result.exit_code == 0
        assert "reject" in result.output

    def test_invalid_config_exits(self, _isolated):
        cfg = _isolated / "bad.yaml"
        cfg.write_text("reload:\n  interval_ms: 0\n")
        result = runner.invoke(app, ["--config", str(cfg), "config", "show"])
        assert result.exit_code == 1
        assert "Invalid config" in result.output


# ---------------------------------------------------------------------------
# ping
# ---------------------------------------------------------------------------


class TestPingCommand:
    def test_online(self, fake_probe):
        fake_probe.script = ["tok-1"]
        result = runner.invoke(app, ["ping", "http://localhost:4000"])

        assert result.exit_code == 0
        assert "tok-1" in result.output
        assert fake_probe.instances[0].url == "http://localhost:4000/ping"
        assert fake_probe.instances[0].closed

    def test_offline(self, fake_probe):
        fake_probe.script = [ProbeError("http://localhost:4000/ping", "ConnectError")]
        result = runner.invoke(app, ["ping", "http://localhost:4000"])

        assert result.exit_code == 1
        assert "Offline" in result.output


# ---------------------------------------------------------------------------
# watch
# ---------------------------------------------------------------------------


class TestWatchCommand:
    def test_reloads_after_change(self, fake_probe):
        fake_probe.script = ["A", "A", "B"]
        with patch("sitepulse.cli.webbrowser.open") as open_mock:
            result = runner.invoke(
                app,
                ["watch", "http://localhost:4000", "--interval-ms", "5", "--grace-ms", "0", "--no-browser"],
            )

        assert result.exit_code == 0, result.output
        assert "Reloading" in result.output
        open_mock.assert_not_called()
        probe = fake_probe.instances[0]
        assert probe.calls == 3
        assert probe.closed

    def test_opens_browser(self, fake_probe):
        fake_probe.script = ["A", "B"]
        with patch("sitepulse.cli.webbrowser.open") as open_mock:
            result = runner.invoke(
                app,
                ["watch", "http://localhost:4000", "--interval-ms", "5", "--grace-ms", "0", "--browser"],
            )

        assert result.exit_code == 0, result.output
        open_mock.assert_called_once_with("http://localhost:4000")

    def test_rejects_bad_interval(self, fake_probe):
        result = runner.invoke(app, ["watch", "--interval-ms", "0"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_uses_configured_url(self, fake_probe, _isolated):
        (_isolated / "sitepulse.yaml").write_text(
            'reload:\n  url: "http://127.0.0.1:5555"\n  interval_ms: 5\n  grace_delay_ms: 0\n  open_browser: false\n'
        )
        fake_probe.script = ["A", "B"]
        result = runner.invoke(app, ["watch"])

        assert result.exit_code == 0, result.output
        assert fake_probe.instances[0].url == "http://127.0.0.1:5555/ping"


# ---------------------------------------------------------------------------
# serve-ping
# ---------------------------------------------------------------------------


class TestServePingCommand:
    def test_runs_uvicorn_with_endpoint(self, _isolated):
        site = _isolated / "site"
        site.mkdir()
        watcher = MagicMock()
        with (
            patch("sitepulse.cli.SourceChangeWatcher", return_value=watcher) as watcher_cls,
            patch("uvicorn.run") as run_mock,
        ):
            result = runner.invoke(app, ["serve-ping", str(site), "--port", "4100"])

        assert result.exit_code == 0, result.output
        endpoint = run_mock.call_args.args[0]
        assert endpoint.check("/ping")
        assert run_mock.call_args.kwargs["port"] == 4100
        assert Path(watcher_cls.call_args.args[0]) == site
        watcher.start.assert_called_once()
        watcher.stop.assert_called_once()

    def test_missing_directory(self, _isolated):
        result = runner.invoke(app, ["serve-ping", str(_isolated / "nope")])
        assert result.exit_code == 1
        # rich wraps long lines at the terminal width
        assert "not a directory" in " ".join(result.output.split())
