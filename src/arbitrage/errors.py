"""Custom errors raised by the arbitrage contract (ABI-compatible)."""

from __future__ import annotations

from enum import IntEnum

from chain.errors import ContractError
from chain.revert import register_errors


class SetupErrorCode(IntEnum):
    ZERO_ADDRESS = 1
    EMPTY_NAME = 2
    INVALID_FEE = 3
    DEX_NOT_ENABLED = 4
    ROUTER_NOT_SET = 5
    INVALID_AMOUNTS = 6
    INVALID_DECIMALS = 7
    NOT_CONFIGURED = 8


class DisabledToken(ContractError):
    signature = "DisabledToken()"


class FirstSwapFailed(ContractError):
    signature = "FirstSwapFailed(string)"

    @property
    def reason(self) -> str:
        return self.args_values[0]


class SecondSwapFailed(ContractError):
    signature = "SecondSwapFailed(string)"

    @property
    def reason(self) -> str:
        return self.args_values[0]


class InsufficientProfit(ContractError):
    signature = "InsufficientProfit()"


class InsufficientRepayment(ContractError):
    signature = "InsufficientRepayment()"


class InvalidExecutionId(ContractError):
    signature = "InvalidExecutionId()"


class InvalidSetup(ContractError):
    signature = "InvalidSetup(uint8)"

    def __init__(self, code: SetupErrorCode):
        super().__init__(int(code))

    @property
    def code(self) -> SetupErrorCode:
        return SetupErrorCode(self.args_values[0])


class InvalidTokens(ContractError):
    signature = "InvalidTokens()"


class InvalidVaultAddress(ContractError):
    signature = "InvalidVaultAddress()"


class NoIntermediateTokens(ContractError):
    signature = "NoIntermediateTokens()"


class TestModeShortfall(ContractError):
    signature = "TestModeShortfall()"
    __test__ = False  # not a pytest test class


class UnauthorizedCaller(ContractError):
    signature = "UnauthorizedCaller()"


class ZeroAmount(ContractError):
    signature = "ZeroAmount()"


ALL_ERRORS: tuple[type[ContractError], ...] = (
    DisabledToken,
    FirstSwapFailed,
    SecondSwapFailed,
    InsufficientProfit,
    InsufficientRepayment,
    InvalidExecutionId,
    InvalidSetup,
    InvalidTokens,
    InvalidVaultAddress,
    NoIntermediateTokens,
    TestModeShortfall,
    UnauthorizedCaller,
    ZeroAmount,
)

register_errors(*ALL_ERRORS)
