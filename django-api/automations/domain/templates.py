"""Message template rendering and the labels templates interpolate."""

import html
import re
from collections.abc import Mapping
from datetime import datetime

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def render_template(template: str, variables: Mapping[str, str]) -> str:
    """Substitute ``{{name}}`` placeholders; unknown names render as an empty string."""
    return _PLACEHOLDER.sub(lambda match: variables.get(match.group(1)) or "", template)


def text_to_html(body: str) -> str:
    return "<p>" + html.escape(body).replace("\n", "<br>") + "</p>"


def date_label(value: datetime) -> str:
    """``Monday, January 1, 2024``"""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def time_label(value: datetime) -> str:
    """``9:05 AM``"""
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value:%M} {suffix}"
