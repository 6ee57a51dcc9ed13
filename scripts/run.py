#!/usr/bin/env python3
"""Feed probe results through the configured alert handlers.

Each input line is ``<probe> <target>[:<port>] ok|fail [label=value ...]``;
blank lines and ``#`` comments are skipped.

Usage::

    # Read results from stdin
    some-prober | python scripts/run.py --config config/settings.yaml

    # Replay a results file
    python scripts/run.py --results results.txt --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from typing import TextIO

import structlog

from probenotify.alerting.factory import create_alert_handlers
from probenotify.alerting.handler import AlertHandler
from probenotify.core.config import load_settings
from probenotify.core.logging import setup_logging
from probenotify.core.types import Endpoint

logger = structlog.get_logger(__name__)


def parse_result_line(line: str) -> tuple[str, Endpoint, bool] | None:
    """Parse one result line; None for blanks, comments and malformed input."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    parts = line.split()
    if len(parts) < 3 or parts[2] not in ("ok", "fail"):
        logger.warning("result_line_malformed", line=line)
        return None

    probe, dst, outcome = parts[:3]
    labels: dict[str, str] = {}
    for item in parts[3:]:
        key, sep, value = item.partition("=")
        if sep:
            labels[key] = value

    name, port = dst, None
    host, sep, port_text = dst.rpartition(":")
    if sep and port_text.isdigit() and host and (":" not in host or host.startswith("[")):
        name, port = host.strip("[]"), int(port_text)

    return probe, Endpoint(name=name, port=port, labels=labels), outcome == "ok"


async def _replay(
    source: TextIO,
    handlers: dict[str, list[AlertHandler]],
    stop_event: asyncio.Event,
) -> int:
    count = 0
    loop = asyncio.get_running_loop()
    while not stop_event.is_set():
        line = await loop.run_in_executor(None, source.readline)
        if not line:
            break
        parsed = parse_result_line(line)
        if parsed is None:
            continue
        probe, target, success = parsed
        for handler in handlers.get(probe, []):
            await handler.record(target, success)
        count += 1
    return count


async def run(args: argparse.Namespace) -> int:
    """Replay results until the input ends or a signal arrives."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    handlers = create_alert_handlers(settings)
    logger.info(
        "alerting_starting",
        probes=len(handlers),
        alerts=sum(len(h) for h in handlers.values()),
    )

    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    source: TextIO = open(args.results) if args.results else sys.stdin
    try:
        count = await _replay(source, handlers, stop_event)
    finally:
        if source is not sys.stdin:
            source.close()

        # ── Graceful shutdown ────────────────────────────────────
        for probe_handlers in handlers.values():
            for handler in probe_handlers:
                await handler.close(args.grace)

    logger.info("alerting_stopped", results=count)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Evaluate probe results against configured alerts.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--results",
        default=None,
        help="Results file to replay (default: stdin)",
    )
    parser.add_argument(
        "--grace",
        type=float,
        default=10.0,
        help="Seconds to let running alert commands finish on exit (default: 10)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
