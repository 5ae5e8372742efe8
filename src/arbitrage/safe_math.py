"""
uint256/int256 arithmetic as the contract performs it.

Counters use checked arithmetic and panic on overflow like Solidity 0.8.
Profit figures use saturating conversions instead: an out-of-range result is
clamped to the nearest representable int256 and reported back as clamped,
never wrapped.
"""

from __future__ import annotations

from typing import NamedTuple

from chain.errors import Revert

from .types import INT256_MAX, INT256_MIN, MAX_UINT256

PANIC_ARITHMETIC = 0x11


class Saturated(NamedTuple):
    value: int
    clamped: bool


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > MAX_UINT256:
        raise Revert.panic(PANIC_ARITHMETIC)
    return result


def clamp_int256(value: int) -> Saturated:
    if value > INT256_MAX:
        return Saturated(INT256_MAX, True)
    if value < INT256_MIN:
        return Saturated(INT256_MIN, True)
    return Saturated(value, False)


def to_int256(value: int) -> Saturated:
    """uint256 -> int256, clamping values above INT256_MAX."""
    if value < 0 or value > MAX_UINT256:
        raise ValueError("value is not a uint256")
    return clamp_int256(value)


def signed_delta(after: int, before: int) -> Saturated:
    """Signed difference between two uint256 balances, clamped into int256."""
    for value in (after, before):
        if value < 0 or value > MAX_UINT256:
            raise ValueError("value is not a uint256")
    return clamp_int256(after - before)
