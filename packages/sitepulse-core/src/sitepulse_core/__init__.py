"""sitepulse core - build step timing and live-reload instrumentation for static-site tools."""

from sitepulse_core.config import SitepulseConfig, load_config
from sitepulse_core.log import configure_logging
from sitepulse_core.reload import (
    ContentVersion,
    HttpProbe,
    PingEndpoint,
    ReloadWatcher,
    SourceChangeWatcher,
)
from sitepulse_core.timing import BuildReport, StepNotStartedError, StepTimer

__version__ = "0.1.0"

__all__ = [
    "BuildReport",
    "ContentVersion",
    "HttpProbe",
    "PingEndpoint",
    "ReloadWatcher",
    "SitepulseConfig",
    "SourceChangeWatcher",
    "StepNotStartedError",
    "StepTimer",
    "configure_logging",
    "load_config",
]
