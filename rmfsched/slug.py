"""Turn robot and fleet names into slugs."""

from __future__ import annotations

_SLUG_TABLE = {ord(" "): "_", ord("-"): "_"}
_SLUG_TABLE.update({code: chr(code + 32) for code in range(ord("A"), ord("Z") + 1)})


def to_slug(text: str) -> str:
    """Replace spaces and dashes with underscores and lower-case ASCII letters."""
    return text.translate(_SLUG_TABLE)