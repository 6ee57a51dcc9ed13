"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class ConditionConfig(BaseModel):
    """Alert condition — ``failures`` out of the ``total`` most recent attempts."""

    failures: int = Field(default=1, ge=1)
    total: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _failures_within_total(self) -> ConditionConfig:
        if self.failures > self.total:
            raise ValueError(
                f"condition failures ({self.failures}) exceeds total ({self.total})"
            )
        return self


class NotifyConfig(BaseModel):
    """External notification configuration.

    ``command`` is a shell-syntax command line; ``{{field}}`` placeholders are
    replaced with alert fields (``alert``, ``probe``, ``target``,
    ``condition_id``, ``failures``, ``total``, ``since``, ``json`` and
    ``target.label.<name>``).
    """

    command: str = ""


class AlertConfig(BaseModel):
    """A single alerting rule attached to a probe."""

    name: str
    condition: ConditionConfig = ConditionConfig()
    notify: NotifyConfig = NotifyConfig()
    # In-process AlertInfo channel. 0 disables it.
    channel_size: int = Field(default=0, ge=0)
    channel_blocking: bool = False


class ProbeConfig(BaseModel):
    """A probe and the alerts evaluated against its results."""

    name: str
    alerts: list[AlertConfig] = Field(default_factory=list)


class Settings(BaseModel):
    """Root settings container."""

    probes: list[ProbeConfig] = Field(default_factory=list)
    logging: LoggingConfig = LoggingConfig()

    def find_alert(self, probe_name: str, alert_name: str) -> AlertConfig | None:
        """Return the named alert of the named probe, if configured."""
        for probe in self.probes:
            if probe.name != probe_name:
                continue
            for alert in probe.alerts:
                if alert.name == alert_name:
                    return alert
        return None


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
