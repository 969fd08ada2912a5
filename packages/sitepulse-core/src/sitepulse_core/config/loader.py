"""YAML config loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import SitepulseConfig

logger = logging.getLogger(__name__)


def load_config(cli_path: str | None = None) -> SitepulseConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./sitepulse.yaml"),
        Path.home() / ".sitepulse" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return _check_source_dir(SitepulseConfig(**raw), path)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return SitepulseConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


def _check_source_dir(config: SitepulseConfig, origin: Path) -> SitepulseConfig:
    """Expand ``~`` in ``serve.source_dir`` and warn when the directory is missing.

    A missing directory is not fatal here: only ``serve-ping`` needs it, and
    the command line may point somewhere else.
    """
    source_dir = os.path.expanduser(config.serve.source_dir)
    if source_dir != config.serve.source_dir:
        serve = config.serve.model_copy(update={"source_dir": source_dir})
        config = config.model_copy(update={"serve": serve})
    if not Path(source_dir).is_dir():
        logger.warning("serve.source_dir %s from %s is not a directory", source_dir, origin)
    return config


# Default YAML template for `sitepulse config init`
DEFAULT_CONFIG_TEMPLATE = """\
# sitepulse.yaml

# Build step timing
timing:
  restart_policy: "reset"      # reset | reject
  logger_name: "sitepulse.build"

# Live-reload watcher (client side)
reload:
  url: "http://127.0.0.1:2341"
  ping_path: "/ping"
  interval_ms: 1000
  grace_delay_ms: 3000
  timeout_ms: 800
  open_browser: true

# Ping endpoint + source watcher (server side)
serve:
  host: "127.0.0.1"
  port: 2341
  source_dir: "."
  debounce_ms: 500
  # ignore_dirs: [.git, node_modules, __pycache__, public, .sitepulse]

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
