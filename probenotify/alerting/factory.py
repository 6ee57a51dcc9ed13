"""Convenience factory for wiring alert handlers from settings."""

from __future__ import annotations

from probenotify.alerting.handler import AlertHandler
from probenotify.core.config import Settings


def create_alert_handlers(settings: Settings) -> dict[str, list[AlertHandler]]:
    """Build one AlertHandler per configured alert.

    Returns:
        Mapping of probe name to that probe's handlers.
    """
    handlers: dict[str, list[AlertHandler]] = {}
    for probe in settings.probes:
        handlers[probe.name] = [
            AlertHandler(config=alert, probe_name=probe.name) for alert in probe.alerts
        ]
    return handlers
