"""Utility helpers for webformfiller."""

from __future__ import annotations

import re
from typing import Dict, Optional

_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def parse_float_prefix(text: Optional[str]) -> Optional[float]:
    """Parse the leading number of ``text`` the way browsers do (``"15px"`` -> 15.0)."""

    if text is None:
        return None
    match = _FLOAT_PREFIX.match(str(text))
    if not match:
        return None
    return float(match.group(1))


def parse_int_prefix(text: Optional[str]) -> Optional[int]:
    if text is None:
        return None
    match = _INT_PREFIX.match(str(text))
    if not match:
        return None
    return int(match.group(1))


def format_number(value: float) -> str:
    """Render a number without a trailing ``.0`` for integral values."""

    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def collapse_whitespace(text: Optional[str]) -> str:
    return " ".join((text or "").split())


def parse_style(style: Optional[str]) -> Dict[str, str]:
    declarations: Dict[str, str] = {}
    for chunk in (style or "").split(";"):
        if ":" not in chunk:
            continue
        prop, value = chunk.split(":", 1)
        prop = prop.strip().lower()
        if prop:
            declarations[prop] = value.strip()
    return declarations


def render_style(declarations: Dict[str, str]) -> str:
    return "; ".join(f"{prop}: {value}" for prop, value in declarations.items() if value != "")


__all__ = [
    "collapse_whitespace",
    "format_number",
    "parse_float_prefix",
    "parse_int_prefix",
    "parse_style",
    "render_style",
]
