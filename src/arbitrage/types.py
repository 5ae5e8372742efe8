"""Storage records of the arbitrage contract."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from core.base_types import ZERO_ADDRESS, Address

MAX_UINT256 = 2**256 - 1
INT256_MAX = 2**255 - 1
INT256_MIN = -(2**255)

# Gas ceiling for each raw swap call.
SWAP_GAS_LIMIT = 3_000_000

EXECUTION_ID_TAG = "FLASH_LOAN_ARBITRAGE"

UNISWAP = "uniswap"
TRADER_JOE = "traderjoe"

ZERO_EXECUTION_ID = b"\x00" * 32


@dataclass
class DexConfig:
    router: Address = ZERO_ADDRESS
    is_enabled: bool = False
    default_fee: int = 0
    max_gas_usage: int = 0
    supported_pools: set[Address] = field(default_factory=set)
    supported_fee_tiers: set[int] = field(default_factory=set)


@dataclass
class PoolConfig:
    is_enabled: bool = False
    fee: int = 0
    min_liquidity: int = 0
    dex_router: Address = ZERO_ADDRESS


@dataclass
class TokenConfig:
    is_enabled: bool = False
    max_amount: int = 0
    min_amount: int = 0
    decimals: int = 0

    @property
    def is_configured(self) -> bool:
        return self.max_amount > 0


@dataclass(frozen=True)
class ArbitrageParams:
    source_token: Address
    target_token: Address
    amount: int
    first_swap_data: bytes
    second_swap_data: bytes
    first_router: Address
    second_router: Address
    test_mode: bool
    expected_first_output: int
    expected_second_output: int
    execution_id: bytes


@dataclass(frozen=True)
class FlashLoanContext:
    """Lives only while its flash loan is in flight."""

    params: ArbitrageParams
    borrowed_amount: int

    @property
    def execution_id(self) -> bytes:
        return self.params.execution_id


@dataclass
class TradeContext:
    source_start_balance: int = 0
    target_start_balance: int = 0
    trade_input_amount: int = 0
    intermediate_amount: int = 0
    trade_final_balance: int = 0
    expected_first_output: int = 0
    actual_first_output: int = 0
    expected_second_output: int = 0
    actual_second_output: int = 0
    executed: bool = False


class TradeContextView(NamedTuple):
    trade_input_amount: int
    trade_final_balance: int
    expected_first_output: int
    actual_first_output: int
    expected_second_output: int
    actual_second_output: int
    executed: bool


class DexConfigView(NamedTuple):
    router: Address
    default_fee: int
    max_gas_usage: int
    is_enabled: bool


class PoolConfigView(NamedTuple):
    is_enabled: bool
    fee: int
    min_liquidity: int
    dex_router: Address


class TokenConfigView(NamedTuple):
    is_enabled: bool
    max_amount: int
    min_amount: int
    decimals: int
