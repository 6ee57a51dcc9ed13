"""AlertHandler — per-target failure windows driving the notifier."""

from __future__ import annotations

import asyncio
from collections import deque
from datetime import UTC, datetime

import structlog

from probenotify.alerting.notifier import AlertNotifier
from probenotify.alerting.types import AlertInfo, TargetState
from probenotify.core.config import AlertConfig
from probenotify.core.types import Endpoint

logger = structlog.get_logger(__name__)


class AlertHandler:
    """Evaluates one alert condition against a probe's per-target results.

    A target alerts once ``condition.failures`` of its last
    ``condition.total`` results failed, and stays alerted until the failure
    count in the window drops below the threshold again.

    Results for the same target are evaluated one at a time; different
    targets proceed independently.
    """

    def __init__(
        self,
        config: AlertConfig,
        probe_name: str,
        notifier: AlertNotifier | None = None,
    ) -> None:
        self._config = config
        self._probe_name = probe_name
        if notifier is None:
            channel: asyncio.Queue[AlertInfo] | None = None
            if config.channel_size > 0:
                channel = asyncio.Queue(maxsize=config.channel_size)
            notifier = AlertNotifier(
                name=config.name,
                probe_name=probe_name,
                condition=config.condition,
                notify_config=config.notify,
                channel=channel,
                channel_blocking=config.channel_blocking,
            )
        self._notifier = notifier
        self._states: dict[str, TargetState] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    # ── Properties ────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def probe_name(self) -> str:
        return self._probe_name

    @property
    def notifier(self) -> AlertNotifier:
        return self._notifier

    @property
    def channel(self) -> asyncio.Queue[AlertInfo] | None:
        """In-process AlertInfo feed, if enabled."""
        return self._notifier.channel

    @property
    def states(self) -> dict[str, TargetState]:
        """Shallow copy of the per-target state store, keyed by target."""
        return dict(self._states)

    # ── Evaluation ───────────────────────────────────────────────

    async def record(
        self,
        target: Endpoint,
        success: bool,
        now: datetime | None = None,
    ) -> None:
        """Add one probe result for *target* and alert or resolve as needed."""
        now = now or datetime.now(UTC)
        key = target.key
        lock = self._locks.setdefault(key, asyncio.Lock())

        async with lock:
            state = self._states.get(key)
            if state is None:
                state = TargetState(results=deque(maxlen=self._config.condition.total))
                self._states[key] = state

            state.results.append((now, success))
            failures = state.failures

            if failures >= self._config.condition.failures:
                if state.alerted:
                    return
                if state.failing_since is None:
                    state.failing_since = next(ts for ts, ok in state.results if not ok)
                    state.condition_id = str(int(state.failing_since.timestamp()))
                await self._notifier.notify(target, state, failures)
                return

            if state.alerted:
                logger.info(
                    "alert_resolved",
                    alert=self._config.name,
                    probe=self._probe_name,
                    target=target.name,
                    condition_id=state.condition_id,
                )
            state.reset()

    # ── Lifecycle ────────────────────────────────────────────────

    async def close(self, grace_secs: float = 0.0) -> None:
        await self._notifier.close(grace_secs)
