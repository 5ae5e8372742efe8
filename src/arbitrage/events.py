"""Events emitted by the arbitrage contract: the durable audit trail."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from chain.events import Event
from core.base_types import Address


class SwapEventType(IntEnum):
    BEFORE_FIRST_SWAP = 0
    AFTER_FIRST_SWAP = 1
    BEFORE_SECOND_SWAP = 2
    AFTER_SECOND_SWAP = 3


class FlashLoanEventType(IntEnum):
    INITIATED = 0
    COMPLETED = 1
    FAILED = 2


@dataclass(frozen=True)
class DexConfigured(Event):
    signature: ClassVar[str] = "DexConfigured(string,address,uint256,uint256)"

    dex_name: str
    router: Address
    default_fee: int
    max_gas_usage: int


@dataclass(frozen=True)
class PoolConfigured(Event):
    signature: ClassVar[str] = "PoolConfigured(address,uint256,uint256,address)"

    pool: Address
    fee: int
    min_liquidity: int
    dex_router: Address


@dataclass(frozen=True)
class TokenConfigured(Event):
    signature: ClassVar[str] = "TokenConfigured(address,uint256,uint256,uint8)"

    token: Address
    max_amount: int
    min_amount: int
    decimals: int


@dataclass(frozen=True)
class ApprovalUpdated(Event):
    signature: ClassVar[str] = "ApprovalUpdated(address,address,uint256)"

    token: Address
    spender: Address
    new_amount: int


@dataclass(frozen=True)
class ArbitrageExecuted(Event):
    signature: ClassVar[str] = (
        "ArbitrageExecuted(address,address,uint256,uint256,int256,int256,int256,bool)"
    )

    source_token: Address
    target_token: Address
    trade_input_amount: int
    final_account_balance: int
    trade_final_balance: int
    trade_profit: int
    expected_profit: int
    test_mode: bool


@dataclass(frozen=True)
class StateLog(Event):
    signature: ClassVar[str] = "StateLog(bytes32,string,string)"

    execution_id: bytes
    stage: str
    data: str


@dataclass(frozen=True)
class SwapEvent(Event):
    signature: ClassVar[str] = "SwapEvent(bytes32,uint8,string,address,uint256,uint256)"

    execution_id: bytes
    event_type: SwapEventType
    stage: str
    token: Address
    actual_balance: int
    expected_balance: int


@dataclass(frozen=True)
class FlashLoanEvent(Event):
    signature: ClassVar[str] = "FlashLoanEvent(bytes32,uint8,address,uint256,int256)"

    execution_id: bytes
    event_type: FlashLoanEventType
    token: Address
    amount: int
    fee_or_profit: int


@dataclass(frozen=True)
class OwnershipTransferred(Event):
    signature: ClassVar[str] = "OwnershipTransferred(address,address)"

    previous_owner: Address
    new_owner: Address


@dataclass(frozen=True)
class Paused(Event):
    signature: ClassVar[str] = "Paused(address)"

    account: Address


@dataclass(frozen=True)
class Unpaused(Event):
    signature: ClassVar[str] = "Unpaused(address)"

    account: Address
