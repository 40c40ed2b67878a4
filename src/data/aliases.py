"""
BananaMoney Lite — Console Aliases

Maps a literal leading token to a replacement phrase, keeping any
trailing arguments:

    {"!c": "!click"}   "!c 5"  ->  "!click 5"
    {"!h": "/home"}    "!h"    ->  "/home"
"""

from __future__ import annotations

from collections.abc import Mapping


class AliasResolver:
    """Exact-match substitution on the first whitespace-delimited token."""

    def __init__(self, aliases: Mapping[str, str] | None = None):
        self.aliases: dict[str, str] = dict(aliases or {})

    def resolve(self, text: str) -> str:
        """Return text with its lead token expanded, or unchanged.

        Expansion is single-pass: an alias value is never resolved again.
        """
        if not text:
            return text

        parts = text.split(None, 1)
        if not parts:
            return text
        key = parts[0]
        value = self.aliases.get(key)
        if not value:
            return text

        rest = parts[1] if len(parts) > 1 else ""
        if rest:
            return f"{value} {rest}"
        return value
