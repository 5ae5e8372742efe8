"""Chain-level exceptions: reverts and the payloads they carry."""

from __future__ import annotations

import re
from typing import Any, ClassVar

from eth_abi import encode as abi_encode
from eth_utils.crypto import keccak

ERROR_STRING_SELECTOR = keccak(text="Error(string)")[:4]
PANIC_SELECTOR = keccak(text="Panic(uint256)")[:4]

_SIGNATURE_RE = re.compile(r"^(?P<name>[A-Za-z_][A-Za-z0-9_]*)\((?P<args>.*)\)$")


class ChainError(Exception):
    """Base class for chain errors."""


class Revert(ChainError):
    """
    Execution reverted.

    ``data`` is the raw revert payload exactly as the EVM would return it,
    so a failure stays decodable after it crosses call frames.
    """

    def __init__(self, data: bytes = b"", message: str | None = None):
        self.data = bytes(data)
        super().__init__(message or _default_message(self.data))

    @classmethod
    def with_reason(cls, reason: str) -> "Revert":
        """Solidity ``require(cond, reason)`` / ``revert(reason)``."""
        return cls(ERROR_STRING_SELECTOR + abi_encode(["string"], [reason]), reason)

    @classmethod
    def panic(cls, code: int) -> "Revert":
        """Compiler-inserted panic (overflow, division by zero, ...)."""
        return cls(
            PANIC_SELECTOR + abi_encode(["uint256"], [code]),
            f"Panic(0x{code:02x})",
        )


class OutOfGas(Revert):
    """Frame exceeded its gas ceiling; carries no revert data."""

    def __init__(self, gas_limit: int, gas_used: int):
        self.gas_limit = gas_limit
        self.gas_used = gas_used
        super().__init__(b"", f"out of gas ({gas_used} > {gas_limit})")


class ContractError(Revert):
    """
    Custom Solidity error declared by signature.

    Subclasses set ``signature`` (e.g. ``"FirstSwapFailed(string)"``); the
    selector and argument types are derived from it.
    """

    signature: ClassVar[str] = ""

    def __init__(self, *args: Any):
        arg_types = self.arg_types()
        if len(args) != len(arg_types):
            raise TypeError(
                f"{self.signature} expects {len(arg_types)} args, got {len(args)}"
            )
        self.args_values = tuple(args)
        encoded = abi_encode(arg_types, list(args)) if arg_types else b""
        rendered = ", ".join(repr(a) for a in args)
        super().__init__(self.selector() + encoded, f"{self.error_name()}({rendered})")

    @classmethod
    def selector(cls) -> bytes:
        return keccak(text=cls.signature)[:4]

    @classmethod
    def error_name(cls) -> str:
        return _parse_signature(cls.signature)[0]

    @classmethod
    def arg_types(cls) -> list[str]:
        return _parse_signature(cls.signature)[1]


def _parse_signature(signature: str) -> tuple[str, list[str]]:
    match = _SIGNATURE_RE.match(signature)
    if match is None:
        raise ValueError(f"Invalid error signature: {signature!r}")
    args = match.group("args").strip()
    return match.group("name"), [a.strip() for a in args.split(",")] if args else []


def _default_message(data: bytes) -> str:
    if not data:
        return "execution reverted"
    return f"execution reverted: 0x{data.hex()}"
