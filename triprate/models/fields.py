"""Shared field coercion for raw form payloads."""

from __future__ import annotations

from typing import Optional, Union

RawNumber = Union[str, float, None]


def numeric_text(v: RawNumber) -> Optional[str]:
    """Keep form numbers as text; JSON numbers become their decimal repr."""
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError("expected a number or numeric string")
    return repr(v)
