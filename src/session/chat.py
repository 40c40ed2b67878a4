"""Plain-text rendering of Minecraft chat components."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any


def chat_text(value: Any) -> str:
    """Render a chat component (JSON text, mapping, or JS proxy) as text.

    Reads `text`, then `translate`, then the first `extra` entry. Plain
    strings that are not JSON come back unchanged.
    """
    if value is None:
        return ""

    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return value
        if isinstance(parsed, Mapping):
            return component_text(parsed) or value
        return str(parsed)

    if isinstance(value, Mapping):
        return component_text(value) or json.dumps(value)

    try:
        text = getattr(value, "text", None) or getattr(value, "translate", None)
    except Exception:
        text = None
    return str(text) if text else str(value)


def component_text(component: Mapping) -> str:
    text = component.get("text") or component.get("translate")
    if text:
        return str(text)
    extra = component.get("extra")
    if isinstance(extra, list) and extra:
        first = extra[0]
        if isinstance(first, Mapping):
            return str(first.get("text", ""))
        return str(first)
    return ""
