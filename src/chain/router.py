"""DEX router simulation: constant-product pools behind real swap calldata."""

from __future__ import annotations

import logging
from typing import Callable

from eth_abi import encode as abi_encode

from core.base_types import Address
from pricing.uniswap_v2_pair import Token, UniswapV2Pair

from . import abi
from .contract import Contract
from .errors import Revert
from .token import ERC20Token

logger = logging.getLogger(__name__)

SWAP_HOP_GAS = 90_000


def _pool_key(a: Address, b: Address) -> tuple[str, str]:
    return tuple(sorted((a.lower, b.lower)))  # type: ignore[return-value]


class SimulatedRouter(Contract):
    """
    Router that understands ``swapExactTokensForTokens`` (V2 / Trader Joe)
    and ``exactInputSingle`` (Uniswap V3) payloads.

    The router holds the pool reserves itself; ``seed_pool`` mints them.
    """

    _journal_fields = ("pools",)

    def __init__(self, name: str, hop_gas: int = SWAP_HOP_GAS):
        super().__init__()
        self.name = name
        self.hop_gas = hop_gas
        self.pools: dict[tuple[str, str], UniswapV2Pair] = {}
        self._handlers: dict[bytes, Callable[[bytes], bytes]] = {
            abi.selector(abi.SWAP_EXACT_TOKENS_FOR_TOKENS): self._handle_swap_exact_tokens,
            abi.selector(abi.EXACT_INPUT_SINGLE): self._handle_exact_input_single,
        }

    def seed_pool(
        self,
        pool: Address,
        token_a: ERC20Token,
        token_b: ERC20Token,
        reserve_a: int,
        reserve_b: int,
        fee_bps: int = 30,
    ) -> None:
        chain = self._require_chain()
        pair = UniswapV2Pair(
            address=pool,
            token0=Token(token_a.address, token_a.symbol, token_a.decimals),
            token1=Token(token_b.address, token_b.symbol, token_b.decimals),
            reserve0=reserve_a,
            reserve1=reserve_b,
            fee_bps=fee_bps,
        )
        chain.call(self.address, token_a.mint, self.address, reserve_a)
        chain.call(self.address, token_b.mint, self.address, reserve_b)
        self.pools[_pool_key(token_a.address, token_b.address)] = pair

    def pool_for(self, token_a: Address, token_b: Address) -> UniswapV2Pair:
        pair = self.pools.get(_pool_key(token_a, token_b))
        if pair is None:
            raise Revert.with_reason("Router: no pool for pair")
        return pair

    def get_amounts_out(self, amount_in: int, path: list[Address]) -> list[int]:
        amounts = [amount_in]
        for token_in, token_out in zip(path, path[1:]):
            pair = self.pool_for(token_in, token_out)
            amounts.append(pair.get_amount_out(amounts[-1], token_in))
        return amounts

    def dispatch(self, data: bytes) -> bytes:
        if len(data) < 4:
            raise Revert(b"")
        handler = self._handlers.get(data[:4])
        if handler is None:
            raise Revert(b"")
        return handler(data[4:])

    # -- swaps ------------------------------------------------------------

    def swap_exact_tokens_for_tokens(
        self,
        amount_in: int,
        amount_out_min: int,
        path: list[Address],
        recipient: Address,
        deadline: int,
    ) -> list[int]:
        sender = self.msg_sender
        if len(path) < 2:
            raise Revert.with_reason("Router: INVALID_PATH")
        self._check_deadline(deadline)
        if amount_in <= 0:
            raise Revert.with_reason("Router: INSUFFICIENT_INPUT_AMOUNT")

        amounts = [amount_in]
        for token_in, token_out in zip(path, path[1:]):
            amounts.append(self._swap_hop(token_in, token_out, amounts[-1]))
        if amounts[-1] < amount_out_min:
            raise Revert.with_reason("Router: INSUFFICIENT_OUTPUT_AMOUNT")

        self._settle(sender, path[0], amount_in, path[-1], amounts[-1], recipient)
        return amounts

    def exact_input_single(
        self,
        token_in: Address,
        token_out: Address,
        recipient: Address,
        deadline: int,
        amount_in: int,
        amount_out_minimum: int,
    ) -> int:
        sender = self.msg_sender
        self._check_deadline(deadline)
        if amount_in <= 0:
            raise Revert.with_reason("Router: INSUFFICIENT_INPUT_AMOUNT")
        amount_out = self._swap_hop(token_in, token_out, amount_in)
        if amount_out < amount_out_minimum:
            raise Revert.with_reason("Too little received")
        self._settle(sender, token_in, amount_in, token_out, amount_out, recipient)
        return amount_out

    # -- internals --------------------------------------------------------

    def _handle_swap_exact_tokens(self, body: bytes) -> bytes:
        amount_in, amount_out_min, path, recipient, deadline = abi.decode_args(
            abi.SWAP_EXACT_TOKENS_FOR_TOKENS_TYPES, body
        )
        amounts = self.swap_exact_tokens_for_tokens(
            amount_in,
            amount_out_min,
            [Address(p) for p in path],
            Address(recipient),
            deadline,
        )
        return abi_encode(["uint256[]"], [amounts])

    def _handle_exact_input_single(self, body: bytes) -> bytes:
        ((token_in, token_out, _fee, recipient, deadline, amount_in, amount_out_min, _limit),) = (
            abi.decode_args(abi.EXACT_INPUT_SINGLE_TYPES, body)
        )
        amount_out = self.exact_input_single(
            Address(token_in),
            Address(token_out),
            Address(recipient),
            deadline,
            amount_in,
            amount_out_min,
        )
        return abi_encode(["uint256"], [amount_out])

    def _check_deadline(self, deadline: int) -> None:
        if deadline < self._require_chain().timestamp:
            raise Revert.with_reason("Router: EXPIRED")

    def _swap_hop(self, token_in: Address, token_out: Address, amount_in: int) -> int:
        pair = self.pool_for(token_in, token_out)
        try:
            updated, amount_out = pair.simulate_swap(amount_in, token_in)
        except ValueError as exc:
            raise Revert.with_reason(f"Router: {exc}") from exc
        self.pools[_pool_key(token_in, token_out)] = updated
        self._require_chain().use_gas(self.hop_gas)
        return amount_out

    def _settle(
        self,
        payer: Address,
        token_in: Address,
        amount_in: int,
        token_out: Address,
        amount_out: int,
        recipient: Address,
    ) -> None:
        chain = self._require_chain()
        chain.call(self.address, self._token(token_in).transfer_from, payer, self.address, amount_in)
        chain.call(self.address, self._token(token_out).transfer, recipient, amount_out)
        logger.debug(
            "%s swap %s %s -> %s %s", self.name, amount_in, token_in, amount_out, token_out
        )

    def _token(self, address: Address) -> ERC20Token:
        contract = self._require_chain().code_at(address)
        if not isinstance(contract, ERC20Token):
            raise Revert.with_reason("Router: unknown token")
        return contract
