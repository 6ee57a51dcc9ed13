"""AlertNotifier — audit log, in-process publish and external command dispatch."""

from __future__ import annotations

import asyncio
import shlex

import structlog

from probenotify.alerting.exceptions import AlertFieldsError, CommandParseError
from probenotify.alerting.fields import alert_fields, build_alert_info, format_rfc3339
from probenotify.alerting.templating import substitute_labels
from probenotify.alerting.types import AlertInfo, TargetState
from probenotify.core.config import ConditionConfig, NotifyConfig
from probenotify.core.types import Endpoint

logger = structlog.get_logger(__name__)


def split_command(command: str) -> list[str]:
    """Split *command* with POSIX shell quoting rules.

    Raises:
        CommandParseError: unbalanced quotes or a trailing escape.
    """
    try:
        return shlex.split(command)
    except ValueError as exc:
        raise CommandParseError(str(exc)) from exc


class AlertNotifier:
    """Fires notifications for a single alert rule of a probe.

    Every failure on the notification path ends as a log line; nothing is
    raised back to the caller evaluating target results.

    Launched commands are not awaited. Each one is watched by a supervisor
    task; cancelling that task kills the command if it is still running.
    :meth:`close` cancels every supervisor.
    """

    def __init__(
        self,
        name: str,
        probe_name: str,
        condition: ConditionConfig | None = None,
        notify_config: NotifyConfig | None = None,
        channel: asyncio.Queue[AlertInfo] | None = None,
        channel_blocking: bool = False,
    ) -> None:
        self._name = name
        self._probe_name = probe_name
        self._condition = condition or ConditionConfig()
        self._notify_config = notify_config
        self._channel = channel
        self._channel_blocking = channel_blocking
        self._supervisors: dict[asyncio.Task[None], asyncio.subprocess.Process] = {}

    # ── Properties ────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @property
    def channel(self) -> asyncio.Queue[AlertInfo] | None:
        return self._channel

    @property
    def running_commands(self) -> int:
        """Number of launched commands that have not exited yet."""
        return len(self._supervisors)

    # ── Notification ─────────────────────────────────────────────

    async def notify(
        self,
        target: Endpoint,
        state: TargetState,
        total_failures: int,
    ) -> None:
        """Record that *target* breached the condition and notify about it."""
        logger.warning(
            "alert_fired",
            alert=self._name,
            target=target.name,
            failures=total_failures,
            threshold=self._condition.failures,
            since=format_rfc3339(state.failing_since) if state.failing_since else None,
        )

        state.alerted = True
        info = build_alert_info(
            name=self._name,
            probe_name=self._probe_name,
            total=self._condition.total,
            target=target,
            state=state,
            failures=total_failures,
        )

        await self._publish(info)

        try:
            fields = alert_fields(info)
        except AlertFieldsError as exc:
            logger.error("alert_fields_error", alert=self._name, error=str(exc))
            fields = exc.fields

        if self._notify_config is not None and self._notify_config.command:
            await self.notify_command(self._notify_config.command, fields)

    async def notify_command(
        self,
        command: str,
        fields: dict[str, str],
        dry_run: bool = False,
    ) -> list[str] | None:
        """Render *command* with *fields* and start it.

        Returns the argument vector in dry-run mode, None otherwise.
        """
        command, found_all = substitute_labels(command, fields)
        if not found_all:
            logger.warning(
                "alert_command_substitution_incomplete",
                alert=self._name,
                command=command,
            )

        try:
            argv = split_command(command)
        except CommandParseError as exc:
            logger.error(
                "alert_command_parse_error",
                alert=self._name,
                command=command,
                error=str(exc),
            )
            return None

        if not argv:
            logger.error("alert_command_empty", alert=self._name, command=command)
            return None

        logger.info("alert_command_starting", alert=self._name, command=" ".join(argv))

        if dry_run:
            return argv

        await self._start(argv)
        return None

    # ── Lifecycle ────────────────────────────────────────────────

    async def close(self, grace_secs: float = 0.0) -> None:
        """Stop supervising launched commands.

        Commands still running after *grace_secs* are killed.
        """
        if not self._supervisors:
            return
        if grace_secs > 0:
            await asyncio.wait(list(self._supervisors), timeout=grace_secs)

        supervisors = list(self._supervisors)
        for task in supervisors:
            task.cancel()
        await asyncio.gather(*supervisors, return_exceptions=True)
        self._supervisors.clear()

    # ── Internal ─────────────────────────────────────────────────

    async def _publish(self, info: AlertInfo) -> None:
        if self._channel is None:
            return
        if self._channel_blocking:
            await self._channel.put(info)
            return
        try:
            self._channel.put_nowait(info)
        except asyncio.QueueFull:
            logger.warning(
                "alert_channel_full",
                alert=self._name,
                target=info.target.name,
                maxsize=self._channel.maxsize,
            )

    async def _start(self, argv: list[str]) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(argv[0], *argv[1:])
        except (OSError, ValueError) as exc:
            logger.error(
                "alert_command_start_error",
                alert=self._name,
                path=argv[0],
                args=argv,
                error=str(exc),
            )
            return

        task = asyncio.create_task(self._supervise(proc, argv))
        self._supervisors[task] = proc
        task.add_done_callback(self._reap)

    def _reap(self, task: asyncio.Task[None]) -> None:
        proc = self._supervisors.pop(task, None)
        # A supervisor cancelled before its first step never ran its handler.
        if proc is not None and proc.returncode is None:
            self._kill(proc)

    def _kill(self, proc: asyncio.subprocess.Process) -> bool:
        try:
            proc.kill()
        except ProcessLookupError:
            return False
        logger.info("alert_command_killed", alert=self._name, pid=proc.pid)
        return True

    async def _supervise(self, proc: asyncio.subprocess.Process, argv: list[str]) -> None:
        try:
            returncode = await proc.wait()
        except asyncio.CancelledError:
            if proc.returncode is None and self._kill(proc):
                await proc.wait()
            raise
        logger.debug(
            "alert_command_exited",
            alert=self._name,
            pid=proc.pid,
            path=argv[0],
            returncode=returncode,
        )
