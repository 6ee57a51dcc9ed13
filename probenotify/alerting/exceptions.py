"""Alerting exceptions."""

from __future__ import annotations


class AlertingError(Exception):
    """Base exception for alerting errors."""


class AlertFieldsError(AlertingError):
    """The alert field mapping could not be fully built.

    ``fields`` holds everything computed before the failure, so callers can
    still notify with it.
    """

    def __init__(self, message: str, fields: dict[str, str]) -> None:
        super().__init__(message)
        self.fields = fields


class CommandParseError(AlertingError):
    """A notification command line could not be split into arguments."""
