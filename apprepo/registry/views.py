"""External views — what dashboards see of an installation record.

Dashboards never receive stored records directly. Each record is rebuilt
into an :class:`ExternalView` on every query, which leaves the stored
representation free to change.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from apprepo.manifest import launch_url
from apprepo.registry.models import ExternalView, Installation

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def generate_external_view(key: str, install: Installation) -> ExternalView:
    app = install.app or {}
    view = ExternalView(
        id=key,
        install_url=install.install_url,
        install_time=install.install_time,
        launch_url=launch_url(app),
        icons=app.get("icons"),
        name=app.get("name") or None,
        description=app.get("description") or None,
        developer=app.get("developer"),
    )

    widget = app.get("widget")
    if widget is not None:
        view.widget_url = app["base_url"] + (widget.get("path") or "")
        if widget.get("width"):
            view.widget_width = parse_dimension(widget["width"])
        if widget.get("height"):
            view.widget_height = parse_dimension(widget["height"])

    return view


def parse_dimension(value: Any) -> Optional[int]:
    """Read a base-10 integer the lenient way browsers do.

    ``"320px"`` gives 320 and ``"  42"`` gives 42. A value without leading
    digits, or one too large to convert, gives None.
    """
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            return int(value)
        match = _LEADING_INT.match(str(value))
        return int(match.group(1)) if match else None
    except (ValueError, OverflowError):
        # too many digits, or an infinite or NaN float
        return None
