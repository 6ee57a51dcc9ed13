"""Tests for alert field rendering — reserved keys, labels, json snapshot."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from probenotify.alerting.exceptions import AlertFieldsError
from probenotify.alerting.fields import (
    RESERVED_FIELDS,
    ZERO_TIME,
    alert_fields,
    build_alert_info,
    format_rfc3339,
)
from probenotify.alerting.types import AlertInfo, TargetState
from probenotify.core.types import Endpoint

SINCE = datetime(2023, 5, 1, 12, 30, 45, 123456, tzinfo=UTC)


# ── Helpers ─────────────────────────────────────────────────────


def _info(**kw: object) -> AlertInfo:
    defaults: dict[str, object] = {
        "name": "disk-full",
        "probe_name": "disk",
        "condition_id": "1682944245",
        "target": Endpoint(name="host1", labels={"zone": "us-east1", "role": "db"}),
        "failures": 5,
        "total": 5,
        "failing_since": SINCE,
    }
    defaults.update(kw)
    return AlertInfo(**defaults)  # type: ignore[arg-type]


# ── RFC3339 ─────────────────────────────────────────────────────


class TestFormatRfc3339:
    def test_utc_uses_z(self) -> None:
        assert format_rfc3339(SINCE) == "2023-05-01T12:30:45Z"

    def test_naive_treated_as_utc(self) -> None:
        assert format_rfc3339(datetime(2023, 5, 1, 12, 30, 45)) == "2023-05-01T12:30:45Z"

    def test_offset_preserved(self) -> None:
        ts = datetime(2023, 5, 1, 14, 30, 45, tzinfo=timezone(timedelta(hours=2)))
        assert format_rfc3339(ts) == "2023-05-01T14:30:45+02:00"


# ── Field mapping ───────────────────────────────────────────────


class TestAlertFields:
    def test_reserved_values(self) -> None:
        fields = alert_fields(_info())
        assert fields["alert"] == "disk-full"
        assert fields["probe"] == "disk"
        assert fields["target"] == "host1"
        assert fields["condition_id"] == "1682944245"
        assert fields["failures"] == "5"
        assert fields["total"] == "5"
        assert fields["since"] == "2023-05-01T12:30:45Z"

    def test_exact_key_set(self) -> None:
        fields = alert_fields(_info())
        expected = set(RESERVED_FIELDS) | {
            "target.label.zone",
            "target.label.role",
            "json",
        }
        assert set(fields) == expected

    def test_label_values(self) -> None:
        fields = alert_fields(_info())
        assert fields["target.label.zone"] == "us-east1"
        assert fields["target.label.role"] == "db"

    def test_no_labels(self) -> None:
        fields = alert_fields(_info(target=Endpoint(name="host1")))
        assert set(fields) == set(RESERVED_FIELDS) | {"json"}

    def test_target_uses_destination(self) -> None:
        fields = alert_fields(_info(target=Endpoint(name="host1", port=9313)))
        assert fields["target"] == "host1:9313"

    def test_all_values_are_strings(self) -> None:
        fields = alert_fields(_info())
        assert all(isinstance(v, str) for v in fields.values())

    def test_stable_for_identical_input(self) -> None:
        assert alert_fields(_info()) == alert_fields(_info())

    def test_json_round_trips_without_itself(self) -> None:
        fields = alert_fields(_info())
        decoded = json.loads(fields["json"])
        expected = {k: v for k, v in fields.items() if k != "json"}
        assert decoded == expected
        assert "json" not in decoded

    def test_json_is_compact_and_sorted(self) -> None:
        fields = alert_fields(_info(target=Endpoint(name="h")))
        assert fields["json"].startswith('{"alert":"disk-full","condition_id":')
        assert " " not in fields["json"]

    def test_encoding_failure_carries_partial_fields(self) -> None:
        with patch("probenotify.alerting.fields.json.dumps", side_effect=ValueError("boom")):
            with pytest.raises(AlertFieldsError) as exc_info:
                alert_fields(_info())
        assert exc_info.value.fields["alert"] == "disk-full"
        assert exc_info.value.fields["target.label.zone"] == "us-east1"
        assert "json" not in exc_info.value.fields


# ── AlertInfo construction ──────────────────────────────────────


class TestBuildAlertInfo:
    def test_copies_static_and_dynamic_fields(self) -> None:
        target = Endpoint(name="host1")
        state = TargetState(failing_since=SINCE, condition_id="42")
        info = build_alert_info(
            name="disk-full",
            probe_name="disk",
            total=10,
            target=target,
            state=state,
            failures=7,
        )
        assert info.name == "disk-full"
        assert info.probe_name == "disk"
        assert info.condition_id == "42"
        assert info.target == target
        assert info.failures == 7
        assert info.total == 10
        assert info.failing_since == SINCE

    def test_missing_failing_since_is_zero_time(self) -> None:
        kwargs: dict[str, object] = {
            "name": "a",
            "probe_name": "p",
            "total": 1,
            "target": Endpoint(name="h"),
            "failures": 1,
        }
        first = build_alert_info(state=TargetState(), **kwargs)  # type: ignore[arg-type]
        second = build_alert_info(state=TargetState(), **kwargs)  # type: ignore[arg-type]
        assert first.failing_since == ZERO_TIME
        assert first == second
        assert alert_fields(first)["since"] == "0001-01-01T00:00:00Z"

    def test_alert_info_is_immutable(self) -> None:
        info = _info()
        with pytest.raises(ValidationError):
            info.failures = 1  # type: ignore[misc]
