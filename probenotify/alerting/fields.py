"""Pure functions that turn alert state into AlertInfo records and field maps."""

from __future__ import annotations

import json
from datetime import UTC, datetime

from probenotify.alerting.exceptions import AlertFieldsError
from probenotify.alerting.types import AlertInfo, TargetState
from probenotify.core.types import Endpoint

LABEL_PREFIX = "target.label."

# Stands in for an unset failing-since time.
ZERO_TIME = datetime(1, 1, 1, tzinfo=UTC)

RESERVED_FIELDS: tuple[str, ...] = (
    "alert",
    "probe",
    "target",
    "condition_id",
    "failures",
    "total",
    "since",
)


def format_rfc3339(ts: datetime) -> str:
    """Format *ts* as RFC3339 with second precision; naive times are UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    text = ts.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def build_alert_info(
    *,
    name: str,
    probe_name: str,
    total: int,
    target: Endpoint,
    state: TargetState,
    failures: int,
) -> AlertInfo:
    """Combine the handler's static identity with the target's current state."""
    return AlertInfo(
        name=name,
        probe_name=probe_name,
        condition_id=state.condition_id,
        target=target,
        failures=failures,
        total=total,
        failing_since=state.failing_since or ZERO_TIME,
    )


def alert_fields(info: AlertInfo) -> dict[str, str]:
    """Flatten *info* into the string map used for command substitution.

    The ``json`` entry is the encoding of every other entry.

    Raises:
        AlertFieldsError: JSON encoding failed; ``exc.fields`` has the rest.
    """
    fields: dict[str, str] = {
        "alert": info.name,
        "probe": info.probe_name,
        "target": info.target.dst(),
        "condition_id": info.condition_id,
        "failures": str(info.failures),
        "total": str(info.total),
        "since": format_rfc3339(info.failing_since),
    }

    for key, value in info.target.labels.items():
        fields[LABEL_PREFIX + key] = value

    try:
        encoded = json.dumps(fields, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise AlertFieldsError(
            f"error marshalling alert fields into json: {exc}", dict(fields)
        ) from exc

    fields["json"] = encoded
    return fields
