"""CLI entry point for sitepulse."""

from __future__ import annotations

import asyncio
import webbrowser
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.syntax import Syntax

from sitepulse_core.config import ReloadConfig, SitepulseConfig, load_config
from sitepulse_core.config.loader import DEFAULT_CONFIG_TEMPLATE
from sitepulse_core.log import configure_logging
from sitepulse_core.reload import (
    ConsoleNotifier,
    ContentVersion,
    HttpProbe,
    PingEndpoint,
    ProbeError,
    ReloadWatcher,
    SourceChangeWatcher,
)

app = typer.Typer(
    name="sitepulse",
    help="Build step timing and live reload for static-site development.",
)

config_app = typer.Typer(help="Manage sitepulse configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: SitepulseConfig | None = None


def _get_config() -> SitepulseConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to sitepulse.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _reload_settings(
    cfg: SitepulseConfig,
    url: str | None,
    interval_ms: int | None,
    grace_ms: int | None,
) -> ReloadConfig:
    """Overlay command-line values on the configured reload settings."""
    update: dict[str, object] = {}
    if url:
        update["url"] = url
    if interval_ms is not None:
        update["interval_ms"] = interval_ms
    if grace_ms is not None:
        update["grace_delay_ms"] = grace_ms
    return ReloadConfig(**{**cfg.reload.model_dump(), **update})


@app.command()
def ping(
    url: str | None = typer.Argument(None, help="Dev server base URL"),
) -> None:
    """Probe the ping endpoint once and print the content token."""
    cfg = _get_config()
    settings = _reload_settings(cfg, url, None, None)
    probe = HttpProbe(settings.url, path=settings.ping_path, timeout=settings.timeout_ms / 1000.0)

    async def _once() -> str:
        try:
            return await probe()
        finally:
            await probe.aclose()

    try:
        token = asyncio.run(_once())
    except ProbeError as e:
        rprint(f"[red]Offline:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    rprint(f"[green]Online[/green] {probe.url} token={token}")


@app.command()
def watch(
    url: str | None = typer.Argument(None, help="Dev server base URL"),
    interval_ms: int | None = typer.Option(None, "--interval-ms", help="Probe interval"),
    grace_ms: int | None = typer.Option(None, "--grace-ms", help="Delay before reloading"),
    browser: bool | None = typer.Option(
        None, "--browser/--no-browser", help="Open the page in a browser on reload"
    ),
) -> None:
    """Poll the dev server and reload once its content changes."""
    cfg = _get_config()
    configure_logging(cfg.log_level, cfg.log_format)
    try:
        settings = _reload_settings(cfg, url, interval_ms, grace_ms)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    open_browser = settings.open_browser if browser is None else browser

    def _reload() -> None:
        rprint(f"[bold]Reloading[/bold] {settings.url}")
        if open_browser:
            webbrowser.open(settings.url)

    async def _watch_until_reload() -> None:
        probe = HttpProbe(
            settings.url,
            path=settings.ping_path,
            timeout=settings.timeout_ms / 1000.0,
        )
        watcher = ReloadWatcher.from_config(settings, ConsoleNotifier(), _reload, probe=probe)
        try:
            await watcher.run()
        finally:
            await probe.aclose()

    rprint(f"[bold]Watching[/bold] {settings.url}{settings.ping_path} (Ctrl-C to stop)")
    try:
        asyncio.run(_watch_until_reload())
    except KeyboardInterrupt:
        rprint("[dim]Stopped.[/dim]")
        raise typer.Exit(130)


@app.command("serve-ping")
def serve_ping(
    source_dir: str | None = typer.Argument(None, help="Directory whose changes rotate the token"),
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
) -> None:
    """Serve the ping endpoint, rotating its token when sources change."""
    import uvicorn

    cfg = _get_config()
    configure_logging(cfg.log_level, cfg.log_format)
    root = Path(source_dir or cfg.serve.source_dir)
    if not root.is_dir():
        rprint(f"[red]Error:[/red] {root} is not a directory")
        raise typer.Exit(1)

    version = ContentVersion()
    watcher = SourceChangeWatcher(
        root,
        version,
        debounce_seconds=cfg.serve.debounce_ms / 1000.0,
        ignore_dirs=cfg.serve.ignore_dirs,
    )
    endpoint = PingEndpoint(version, path=cfg.reload.ping_path)
    bind_host = host or cfg.serve.host
    bind_port = port or cfg.serve.port

    rprint(f"[bold]Serving[/bold] http://{bind_host}:{bind_port}{endpoint.path} token={version.token}")
    watcher.start()
    try:
        uvicorn.run(endpoint, host=bind_host, port=bind_port, log_level=cfg.log_level.replace("warn", "warning"))
    finally:
        watcher.stop()


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default sitepulse.yaml in current directory."""
    target = Path("sitepulse.yaml")
    if target.exists() and not force:
        rprint("[yellow]sitepulse.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")


if __name__ == "__main__":
    app()
