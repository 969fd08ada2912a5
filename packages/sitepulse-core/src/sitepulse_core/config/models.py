from pydantic import BaseModel, Field
from typing import Literal


class TimingConfig(BaseModel):
    restart_policy: Literal["reset", "reject"] = "reset"
    logger_name: str = "sitepulse.build"


class ReloadConfig(BaseModel):
    url: str = "http://127.0.0.1:2341"
    ping_path: str = "/ping"
    interval_ms: int = Field(default=1000, gt=0)
    grace_delay_ms: int = Field(default=3000, ge=0)
    timeout_ms: int = Field(default=800, gt=0)
    open_browser: bool = True


class ServeConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=2341, gt=0, lt=65536)
    source_dir: str = "."
    debounce_ms: int = Field(default=500, ge=0)
    ignore_dirs: list[str] = Field(default_factory=lambda: [
        ".git", "node_modules", "__pycache__", "public", ".sitepulse"
    ])


class SitepulseConfig(BaseModel):
    timing: TimingConfig = Field(default_factory=TimingConfig)
    reload: ReloadConfig = Field(default_factory=ReloadConfig)
    serve: ServeConfig = Field(default_factory=ServeConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
