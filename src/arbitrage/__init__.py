from .contract import CrossDexArbitrage
from .errors import (
    ALL_ERRORS,
    DisabledToken,
    FirstSwapFailed,
    InsufficientProfit,
    InsufficientRepayment,
    InvalidExecutionId,
    InvalidSetup,
    InvalidTokens,
    InvalidVaultAddress,
    NoIntermediateTokens,
    SecondSwapFailed,
    SetupErrorCode,
    TestModeShortfall,
    UnauthorizedCaller,
    ZeroAmount,
)
from .events import (
    ApprovalUpdated,
    ArbitrageExecuted,
    DexConfigured,
    FlashLoanEvent,
    FlashLoanEventType,
    PoolConfigured,
    StateLog,
    SwapEvent,
    SwapEventType,
    TokenConfigured,
)
from .metrics import ContractStats, Metrics
from .orchestrator import derive_execution_id, encode_user_data
from .types import TRADER_JOE, UNISWAP, ArbitrageParams

__all__ = [
    "CrossDexArbitrage",
    "ArbitrageParams",
    "ContractStats",
    "Metrics",
    "derive_execution_id",
    "encode_user_data",
    "UNISWAP",
    "TRADER_JOE",
    "ALL_ERRORS",
    "SetupErrorCode",
    "DisabledToken",
    "FirstSwapFailed",
    "SecondSwapFailed",
    "InsufficientProfit",
    "InsufficientRepayment",
    "InvalidExecutionId",
    "InvalidSetup",
    "InvalidTokens",
    "InvalidVaultAddress",
    "NoIntermediateTokens",
    "TestModeShortfall",
    "UnauthorizedCaller",
    "ZeroAmount",
    "ApprovalUpdated",
    "ArbitrageExecuted",
    "DexConfigured",
    "FlashLoanEvent",
    "FlashLoanEventType",
    "PoolConfigured",
    "StateLog",
    "SwapEvent",
    "SwapEventType",
    "TokenConfigured",
]
