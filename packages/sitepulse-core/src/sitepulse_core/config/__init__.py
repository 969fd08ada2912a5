from .loader import load_config
from .models import (
    ReloadConfig,
    ServeConfig,
    SitepulseConfig,
    TimingConfig,
)

__all__ = [
    "ReloadConfig",
    "ServeConfig",
    "SitepulseConfig",
    "TimingConfig",
    "load_config",
]
