#!/usr/bin/env python3
"""Show the command an alert would run, without running it.

Usage::

    python scripts/preview_notify.py --probe disk --alert disk-full \\
        --target host1 --label zone=us-east1 --failures 5
"""

from __future__ import annotations

import argparse
import asyncio
import shlex
import sys
from datetime import UTC, datetime

from probenotify.alerting.fields import alert_fields, build_alert_info
from probenotify.alerting.notifier import AlertNotifier
from probenotify.alerting.templating import placeholders
from probenotify.alerting.types import TargetState
from probenotify.core.config import load_settings
from probenotify.core.logging import setup_logging
from probenotify.core.types import Endpoint


async def preview(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    setup_logging(level=args.log_level, fmt="console")

    alert = settings.find_alert(args.probe, args.alert)
    if alert is None:
        print(f"alert {args.alert!r} not configured for probe {args.probe!r}", file=sys.stderr)
        return 1
    if not alert.notify.command:
        print(f"alert {args.alert!r} has no notify command", file=sys.stderr)
        return 1

    labels = dict(item.split("=", 1) for item in args.label if "=" in item)
    target = Endpoint(name=args.target, port=args.port, labels=labels)
    failing_since = datetime.now(UTC)
    state = TargetState(
        failing_since=failing_since,
        condition_id=str(int(failing_since.timestamp())),
    )
    info = build_alert_info(
        name=alert.name,
        probe_name=args.probe,
        total=alert.condition.total,
        target=target,
        state=state,
        failures=args.failures if args.failures is not None else alert.condition.failures,
    )
    fields = alert_fields(info)

    missing = [key for key in placeholders(alert.notify.command) if key not in fields]
    if missing:
        print(f"unresolved placeholders: {', '.join(missing)}", file=sys.stderr)

    notifier = AlertNotifier(name=alert.name, probe_name=args.probe, condition=alert.condition)
    argv = await notifier.notify_command(alert.notify.command, fields, dry_run=True)
    if argv is None:
        return 1

    print(shlex.join(argv))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Render an alert's notify command in dry-run mode.",
    )
    parser.add_argument("--config", default=None, help="Path to settings YAML")
    parser.add_argument("--probe", required=True, help="Probe name")
    parser.add_argument("--alert", required=True, help="Alert name")
    parser.add_argument("--target", default="localhost", help="Sample target name")
    parser.add_argument("--port", type=int, default=None, help="Sample target port")
    parser.add_argument(
        "--label",
        action="append",
        default=[],
        help="Sample target label as key=value (repeatable)",
    )
    parser.add_argument(
        "--failures",
        type=int,
        default=None,
        help="Failure count to render (default: condition threshold)",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level override")
    args = parser.parse_args()

    code = asyncio.run(preview(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
