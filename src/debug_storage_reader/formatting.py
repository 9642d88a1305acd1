"""Text helpers for presenting stored values."""
from __future__ import annotations

import json
from typing import Any, Optional

ELLIPSIS = "…"


def format_value(value: Any) -> Optional[str]:
    """Return a display string for ``value`` or ``None`` when it is absent.

    Strings are shown as is, containers as compact JSON and everything else
    through ``str``.
    """

    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, ensure_ascii=False, separators=(", ", ": "))
        except (TypeError, ValueError):
            return repr(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return str(value)


def elide_text(text: Optional[str], max_lines: int = 2, max_chars: int = 160) -> str:
    """Clip ``text`` to ``max_lines`` lines and ``max_chars`` characters.

    An absent value is rendered as ``"None"``.
    """

    if text is None:
        return "None"

    lines = text.splitlines() or [""]
    clipped = "\n".join(lines[:max_lines])
    truncated = len(lines) > max_lines

    if len(clipped) > max_chars:
        clipped = clipped[:max_chars]
        truncated = True

    return clipped + ELLIPSIS if truncated else clipped


__all__ = ["ELLIPSIS", "elide_text", "format_value"]
