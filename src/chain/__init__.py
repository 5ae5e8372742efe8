from .contract import Contract
from .errors import ChainError, ContractError, OutOfGas, Revert
from .events import Event, LogEntry
from .revert import RevertInfo, RevertKind, decode_revert, register_errors
from .router import SimulatedRouter
from .state import CallResult, Chain
from .token import MAX_UINT256, ERC20Token
from .vault import FlashLoanVault

__all__ = [
    "Chain",
    "CallResult",
    "Contract",
    "Event",
    "LogEntry",
    "ERC20Token",
    "FlashLoanVault",
    "SimulatedRouter",
    "MAX_UINT256",
    "ChainError",
    "Revert",
    "OutOfGas",
    "ContractError",
    "RevertInfo",
    "RevertKind",
    "decode_revert",
    "register_errors",
]
