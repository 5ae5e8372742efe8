import pytest

from arbitrage.safe_math import (
    Saturated,
    checked_add,
    clamp_int256,
    signed_delta,
    to_int256,
)
from arbitrage.types import INT256_MAX, INT256_MIN, MAX_UINT256
from chain.errors import Revert
from chain.revert import decode_revert


def test_checked_add_overflow_panics():
    with pytest.raises(Revert) as excinfo:
        checked_add(MAX_UINT256, 1)
    assert decode_revert(excinfo.value.data).panic_code == 0x11


def test_clamp_within_range_is_exact():
    assert clamp_int256(-50) == Saturated(-50, False)


def test_profit_above_int256_max_saturates():
    assert signed_delta(MAX_UINT256, 0) == Saturated(INT256_MAX, True)


def test_loss_below_int256_min_saturates():
    assert signed_delta(0, MAX_UINT256) == Saturated(INT256_MIN, True)


def test_delta_exactly_at_min_is_not_clamped():
    assert signed_delta(0, 2**255) == Saturated(INT256_MIN, False)


def test_signed_delta_rejects_non_uint():
    with pytest.raises(ValueError):
        signed_delta(-1, 0)
    with pytest.raises(ValueError):
        signed_delta(0, MAX_UINT256 + 1)


def test_to_int256_clamps_large_balances():
    assert to_int256(2**255) == Saturated(INT256_MAX, True)
    assert to_int256(10) == Saturated(10, False)
