"""Core type definitions shared by the chain simulator and the arbitrage contract."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from eth_utils.address import is_address, to_checksum_address

_ZERO_HEX = "0x0000000000000000000000000000000000000000"

# Basis-point denominator for fees and rates.
MAX_BPS = 10_000


@dataclass(frozen=True)
class Address:
    """Ethereum address with validation and checksumming."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise TypeError("Address value must be a string")
        if not is_address(self.value):
            raise ValueError("Invalid Ethereum address")
        object.__setattr__(self, "value", to_checksum_address(self.value))

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Address":
        """Build from the trailing 20 bytes of ``raw`` (e.g. a keccak digest)."""
        if len(raw) < 20:
            raise ValueError("need at least 20 bytes for an address")
        return cls("0x" + raw[-20:].hex())

    @classmethod
    def zero(cls) -> "Address":
        return cls(_ZERO_HEX)

    @property
    def checksum(self) -> str:
        return self.value

    @property
    def lower(self) -> str:
        return self.value.lower()

    @property
    def is_zero(self) -> bool:
        return self.lower == _ZERO_HEX

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Address):
            return self.lower == other.lower
        if isinstance(other, str):
            return self.lower == other.lower()
        return False

    def __hash__(self) -> int:
        return hash(self.lower)

    def __str__(self) -> str:
        return self.value


ZERO_ADDRESS = Address.zero()


@dataclass(frozen=True)
class TokenAmount:
    """
    Represents a token amount with proper decimal handling.

    Internally stores raw integer (wei-equivalent).
    Provides human-readable formatting.
    """

    raw: int
    decimals: int
    symbol: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.raw, int):
            raise TypeError("raw must be an int")
        if not isinstance(self.decimals, int) or self.decimals < 0:
            raise ValueError("decimals must be a non-negative integer")

    @classmethod
    def from_human(
        cls, amount: str | Decimal, decimals: int, symbol: str | None = None
    ) -> "TokenAmount":
        """Create from human-readable amount (e.g., '300' USDC)."""
        if isinstance(amount, float):
            raise TypeError("amount must be a string or Decimal, not float")
        if isinstance(amount, str):
            decimal_amount = Decimal(amount)
        elif isinstance(amount, Decimal):
            decimal_amount = amount
        else:
            raise TypeError("amount must be a string or Decimal")

        scale = Decimal(10) ** Decimal(decimals)
        raw_decimal = decimal_amount * scale
        if raw_decimal != raw_decimal.to_integral_value():
            raise ValueError("amount has more precision than decimals allow")
        return cls(raw=int(raw_decimal), decimals=decimals, symbol=symbol)

    @property
    def human(self) -> Decimal:
        """Returns human-readable decimal."""
        scale = Decimal(10) ** Decimal(self.decimals)
        return Decimal(self.raw) / scale

    def __add__(self, other: "TokenAmount") -> "TokenAmount":
        if not isinstance(other, TokenAmount):
            return NotImplemented
        if self.decimals != other.decimals:
            raise ValueError("TokenAmount decimals must match")
        symbol = self.symbol
        if self.symbol != other.symbol:
            symbol = self.symbol or other.symbol
        return TokenAmount(self.raw + other.raw, self.decimals, symbol)

    def __sub__(self, other: "TokenAmount") -> "TokenAmount":
        if not isinstance(other, TokenAmount):
            return NotImplemented
        if self.decimals != other.decimals:
            raise ValueError("TokenAmount decimals must match")
        return TokenAmount(self.raw - other.raw, self.decimals, self.symbol or other.symbol)

    def __str__(self) -> str:
        return f"{self.human} {self.symbol or ''}".strip()
