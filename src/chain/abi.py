"""Calldata helpers: selectors and swap payloads for the supported routers."""

from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode
from eth_abi import encode as abi_encode
from eth_utils.crypto import keccak

from core.base_types import Address

SWAP_EXACT_TOKENS_FOR_TOKENS = (
    "swapExactTokensForTokens(uint256,uint256,address[],address,uint256)"
)
SWAP_EXACT_TOKENS_FOR_TOKENS_TYPES = ["uint256", "uint256", "address[]", "address", "uint256"]

EXACT_INPUT_SINGLE = (
    "exactInputSingle((address,address,uint24,address,uint256,uint256,uint256,uint160))"
)
EXACT_INPUT_SINGLE_TYPES = ["(address,address,uint24,address,uint256,uint256,uint256,uint160)"]


def selector(signature: str) -> bytes:
    return keccak(text=signature)[:4]


def encode_call(signature: str, arg_types: list[str], args: list[Any]) -> bytes:
    return selector(signature) + abi_encode(arg_types, args)


def swap_exact_tokens_for_tokens(
    amount_in: int,
    amount_out_min: int,
    path: Sequence[Address],
    recipient: Address,
    deadline: int,
) -> bytes:
    """Payload for V2-style routers (Trader Joe, Uniswap V2 forks)."""
    if len(path) < 2:
        raise ValueError("path needs at least two tokens")
    return encode_call(
        SWAP_EXACT_TOKENS_FOR_TOKENS,
        SWAP_EXACT_TOKENS_FOR_TOKENS_TYPES,
        [amount_in, amount_out_min, [a.checksum for a in path], recipient.checksum, deadline],
    )


def exact_input_single(
    token_in: Address,
    token_out: Address,
    fee: int,
    recipient: Address,
    deadline: int,
    amount_in: int,
    amount_out_minimum: int,
    sqrt_price_limit_x96: int = 0,
) -> bytes:
    """Payload for the Uniswap V3 SwapRouter single-pool swap."""
    params = (
        token_in.checksum,
        token_out.checksum,
        fee,
        recipient.checksum,
        deadline,
        amount_in,
        amount_out_minimum,
        sqrt_price_limit_x96,
    )
    return encode_call(EXACT_INPUT_SINGLE, EXACT_INPUT_SINGLE_TYPES, [params])


def decode_args(arg_types: list[str], body: bytes) -> tuple:
    return tuple(decode(arg_types, body))
