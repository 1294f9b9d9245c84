"""Hexadecimal conversion and string padding helpers."""

from __future__ import annotations


def int_to_hex(n: int) -> str:
    """Return the upper-case hexadecimal digits of ``n``.

    Zero yields an empty string, as the digit loop never runs for it.
    """
    if n < 0:
        raise ValueError(f"cannot convert negative value {n} to hex")
    if n == 0:
        return ""
    return format(n, "X")


def hex_to_int(s: str) -> int:
    """Parse a hexadecimal string; an empty string is zero."""
    if not s:
        return 0
    try:
        return int(s, 16)
    except ValueError:
        raise ValueError(f"invalid hexadecimal value: {s!r}") from None


def pad_start(s: str, size: int, fill: str) -> str:
    """Pad ``s`` on the left with ``fill`` up to ``size`` characters."""
    return s.rjust(size, fill)


def pad_end(s: str, size: int, fill: str) -> str:
    """Pad ``s`` on the right with ``fill`` up to ``size`` characters."""
    return s.ljust(size, fill)