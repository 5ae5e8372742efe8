"""Classify raw revert payloads into reason strings, panics and custom errors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from .errors import ERROR_STRING_SELECTOR, PANIC_SELECTOR, ContractError

PANIC_REASONS = {
    0x00: "generic compiler panic",
    0x01: "assertion failed",
    0x11: "arithmetic overflow or underflow",
    0x12: "division or modulo by zero",
    0x21: "invalid enum conversion",
    0x22: "corrupt storage byte array",
    0x31: "pop on empty array",
    0x32: "array index out of bounds",
    0x41: "out of memory",
    0x51: "call to zero-initialized function",
}


class RevertKind(Enum):
    REASON_STRING = auto()  # Error(string)
    PANIC_CODE = auto()  # Panic(uint256)
    RAW_SELECTOR = auto()  # custom error or any other 4-byte prefix
    UNKNOWN = auto()  # empty or shorter than a selector


@dataclass(frozen=True)
class RevertInfo:
    kind: RevertKind
    data: bytes
    reason: Optional[str] = None
    panic_code: Optional[int] = None
    selector: Optional[bytes] = None
    name: Optional[str] = None
    args: tuple = ()

    def describe(self) -> str:
        """Human-readable one-liner, used inside wrapped swap errors."""
        if self.kind is RevertKind.REASON_STRING:
            return self.reason or ""
        if self.kind is RevertKind.PANIC_CODE:
            label = PANIC_REASONS.get(self.panic_code, "unknown panic")
            return f"Panic(0x{self.panic_code:02x}): {label}"
        if self.kind is RevertKind.RAW_SELECTOR:
            if self.name:
                rendered = ", ".join(str(a) for a in self.args)
                return f"{self.name}({rendered})"
            return f"Custom error 0x{self.selector.hex()}"
        return "Unknown error"


_KNOWN_ERRORS: dict[bytes, type[ContractError]] = {}


def register_errors(*error_types: type[ContractError]) -> None:
    """Teach the decoder the names and argument layouts of custom errors."""
    for error_type in error_types:
        _KNOWN_ERRORS[error_type.selector()] = error_type


def known_errors() -> dict[bytes, type[ContractError]]:
    return dict(_KNOWN_ERRORS)


def decode_revert(data: bytes) -> RevertInfo:
    data = bytes(data or b"")
    if len(data) < 4:
        return RevertInfo(kind=RevertKind.UNKNOWN, data=data)

    selector, body = data[:4], data[4:]

    if selector == ERROR_STRING_SELECTOR:
        try:
            (reason,) = decode(["string"], body)
        except DecodingError:
            return RevertInfo(kind=RevertKind.RAW_SELECTOR, data=data, selector=selector)
        return RevertInfo(
            kind=RevertKind.REASON_STRING, data=data, reason=reason, selector=selector
        )

    if selector == PANIC_SELECTOR:
        try:
            (code,) = decode(["uint256"], body)
        except DecodingError:
            return RevertInfo(kind=RevertKind.RAW_SELECTOR, data=data, selector=selector)
        return RevertInfo(
            kind=RevertKind.PANIC_CODE, data=data, panic_code=int(code), selector=selector
        )

    error_type = _KNOWN_ERRORS.get(selector)
    if error_type is None:
        return RevertInfo(kind=RevertKind.RAW_SELECTOR, data=data, selector=selector)

    args: tuple = ()
    arg_types = error_type.arg_types()
    if arg_types:
        try:
            args = tuple(decode(arg_types, body))
        except DecodingError:
            args = ()
    return RevertInfo(
        kind=RevertKind.RAW_SELECTOR,
        data=data,
        selector=selector,
        name=error_type.error_name(),
        args=args,
    )
