"""Floating-point tolerance helpers shared by the flow algorithms."""

from __future__ import annotations

#: Absolute tolerance below which two flow values are considered equal.
DEFAULT_EPSILON = 1e-9


def equal(a: float, b: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    """Return True if ``a`` and ``b`` differ by at most ``epsilon``."""
    return abs(a - b) <= epsilon


def is_zero(value: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    """Return True if ``value`` is within ``epsilon`` of zero."""
    return equal(value, 0.0, epsilon)
