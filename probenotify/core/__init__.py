"""Core module — config, types, logging."""

from probenotify.core.config import (
    AlertConfig,
    ConditionConfig,
    NotifyConfig,
    ProbeConfig,
    Settings,
    get_settings,
    load_settings,
    reset_settings,
)
from probenotify.core.logging import setup_logging
from probenotify.core.types import Endpoint

__all__ = [
    "AlertConfig",
    "ConditionConfig",
    "Endpoint",
    "NotifyConfig",
    "ProbeConfig",
    "Settings",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
