"""Alert evaluation, field rendering and external command notification."""

from probenotify.alerting.exceptions import AlertFieldsError, AlertingError, CommandParseError
from probenotify.alerting.factory import create_alert_handlers
from probenotify.alerting.fields import alert_fields, build_alert_info, format_rfc3339
from probenotify.alerting.handler import AlertHandler
from probenotify.alerting.notifier import AlertNotifier, split_command
from probenotify.alerting.templating import substitute_labels
from probenotify.alerting.types import AlertInfo, TargetState

__all__ = [
    "AlertFieldsError",
    "AlertHandler",
    "AlertInfo",
    "AlertNotifier",
    "AlertingError",
    "CommandParseError",
    "TargetState",
    "alert_fields",
    "build_alert_info",
    "create_alert_handlers",
    "format_rfc3339",
    "split_command",
    "substitute_labels",
]
