from __future__ import annotations

from dataclasses import dataclass, replace

from core.base_types import MAX_BPS, Address


@dataclass(frozen=True)
class Token:
    address: Address
    symbol: str
    decimals: int

@dataclass(frozen=True)
class UniswapV2Pair:
    """
    Constant-product pool held by a simulated router.
    All math uses integers only, no floats anywhere.
    """

    address: Address
    token0: Token
    token1: Token
    reserve0: int
    reserve1: int
    fee_bps: int = 30  # 0.30% = 30 basis points

    def __post_init__(self) -> None:
        if self.token0.address == self.token1.address:
            raise ValueError("token0 and token1 must be different")
        if not isinstance(self.reserve0, int) or not isinstance(self.reserve1, int):
            raise TypeError("reserves must be int")
        if self.reserve0 < 0 or self.reserve1 < 0:
            raise ValueError("reserves must be non-negative")
        if not isinstance(self.fee_bps, int):
            raise TypeError("fee_bps must be int")
        if self.fee_bps < 0 or self.fee_bps >= MAX_BPS:
            raise ValueError("fee_bps must be in [0, 10000)")

    def has_token(self, token: Address) -> bool:
        return token in (self.token0.address, self.token1.address)

    def other(self, token: Address) -> Token:
        if token == self.token0.address:
            return self.token1
        if token == self.token1.address:
            return self.token0
        raise ValueError("token not in pair")

    def _reserves_for_input(self, token_in: Address) -> tuple[int, int, bool]:
        if token_in == self.token0.address:
            return self.reserve0, self.reserve1, True
        if token_in == self.token1.address:
            return self.reserve1, self.reserve0, False
        raise ValueError("token_in not in pair")

    def get_amount_out(self, amount_in: int, token_in: Address) -> int:
        """
        Must match Solidity exactly:

        amount_in_with_fee = amount_in * (10000 - fee_bps)
        numerator = amount_in_with_fee * reserve_out
        denominator = reserve_in * 10000 + amount_in_with_fee
        amount_out = numerator // denominator
        """
        if not isinstance(amount_in, int):
            raise TypeError("amount_in must be int")
        if amount_in <= 0:
            raise ValueError("amount_in must be positive")

        reserve_in, reserve_out, _ = self._reserves_for_input(token_in)
        if reserve_in <= 0 or reserve_out <= 0:
            raise ValueError("reserves must be positive")

        amount_in_with_fee = amount_in * (MAX_BPS - self.fee_bps)
        numerator = amount_in_with_fee * reserve_out
        denominator = reserve_in * MAX_BPS + amount_in_with_fee
        return numerator // denominator

    def simulate_swap(self, amount_in: int, token_in: Address) -> tuple["UniswapV2Pair", int]:
        """Returns a NEW pair with updated reserves, plus the amount paid out."""
        amount_out = self.get_amount_out(amount_in, token_in)
        reserve_in, reserve_out, token_in_is_token0 = self._reserves_for_input(token_in)
        if amount_out >= reserve_out:
            raise ValueError("insufficient liquidity for this trade")

        if token_in_is_token0:
            updated = replace(
                self, reserve0=reserve_in + amount_in, reserve1=reserve_out - amount_out
            )
        else:
            updated = replace(
                self, reserve0=reserve_out - amount_out, reserve1=reserve_in + amount_in
            )
        return updated, amount_out
