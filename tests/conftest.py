"""Test configuration for module import paths and simulated-world fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_src_on_path() -> None:
    src_path = Path(__file__).resolve().parents[1] / "src"
    src_value = str(src_path)
    if src_value not in sys.path:
        sys.path.insert(0, src_value)


_ensure_src_on_path()

from chain.state import Chain  # noqa: E402
from chain.token import ERC20Token  # noqa: E402
from config import Settings  # noqa: E402
from core.base_types import Address  # noqa: E402
from deployment import build_world, plan_round_trip  # noqa: E402

ALICE = Address("0x00000000000000000000000000000000000a11ce")
BOB = Address("0x0000000000000000000000000000000000000b0b")
MALLORY = Address("0x000000000000000000000000000000000000bad0")

USDC_UNIT = 10**6


@pytest.fixture
def chain() -> Chain:
    return Chain(chain_id=43114, block_number=100, timestamp=1_700_000_000)


@pytest.fixture
def token(chain: Chain) -> ERC20Token:
    erc20 = ERC20Token("Test Token", "TT", 18)
    chain.deploy(erc20, ALICE)
    chain.transact(ALICE, erc20.mint, ALICE, 1_000 * 10**18)
    return erc20


@pytest.fixture
def world():
    """Avalanche-shaped world; Trader Joe prices WAVAX 2% above Uniswap."""
    return build_world(Settings(), skew_bps=200)


@pytest.fixture
def flat_world():
    """Same pools on both DEXes: every round trip loses the fees."""
    return build_world(Settings(), skew_bps=0)


@pytest.fixture
def plan():
    def _plan(world, amount=300 * USDC_UNIT, **overrides):
        kwargs = plan_round_trip(world, amount, test_mode=overrides.pop("test_mode", False))
        kwargs.update(overrides)
        return kwargs

    return _plan
