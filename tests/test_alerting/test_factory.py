"""Tests for the alert handler factory."""

from __future__ import annotations

from probenotify.alerting.factory import create_alert_handlers
from probenotify.alerting.handler import AlertHandler
from probenotify.core.config import Settings


class TestFactoryWiring:
    def test_no_probes(self) -> None:
        assert create_alert_handlers(Settings()) == {}

    def test_probe_without_alerts(self) -> None:
        settings = Settings(probes=[{"name": "ping"}])  # type: ignore[list-item]
        assert create_alert_handlers(settings) == {"ping": []}

    def test_one_handler_per_alert(self) -> None:
        settings = Settings(
            probes=[
                {  # type: ignore[list-item]
                    "name": "http",
                    "alerts": [
                        {"name": "http-down", "condition": {"failures": 2, "total": 3}},
                        {"name": "http-flaky", "channel_size": 10},
                    ],
                },
                {"name": "dns", "alerts": [{"name": "dns-down"}]},  # type: ignore[list-item]
            ],
        )
        handlers = create_alert_handlers(settings)

        assert set(handlers) == {"http", "dns"}
        assert [h.name for h in handlers["http"]] == ["http-down", "http-flaky"]
        assert all(isinstance(h, AlertHandler) for h in handlers["http"])
        assert all(h.probe_name == "http" for h in handlers["http"])
        assert handlers["http"][0].channel is None
        assert handlers["http"][1].channel is not None
        assert handlers["dns"][0].name == "dns-down"
