"""``{{name}}`` placeholder substitution for notification commands."""

from __future__ import annotations

import re
from collections.abc import Mapping

_PLACEHOLDER_RE = re.compile(r"\{\{\s*([^{}\s]+)\s*\}\}")


def substitute_labels(template: str, fields: Mapping[str, str]) -> tuple[str, bool]:
    """Replace every ``{{key}}`` in *template* with ``fields[key]``.

    Unknown keys are left in place verbatim.

    Returns:
        (substituted text, whether every placeholder was resolved)
    """
    found_all = True

    def _replace(match: re.Match[str]) -> str:
        nonlocal found_all
        key = match.group(1)
        if key in fields:
            return fields[key]
        found_all = False
        return match.group(0)

    return _PLACEHOLDER_RE.sub(_replace, template), found_all


def placeholders(template: str) -> list[str]:
    """Keys referenced by *template*, in order of appearance."""
    return _PLACEHOLDER_RE.findall(template)
