"""Minimal ERC-20 token for the simulated chain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from core.base_types import Address, TokenAmount

from .contract import Contract
from .errors import Revert
from .events import Event

MAX_UINT256 = 2**256 - 1

TRANSFER_GAS = 30_000
APPROVE_GAS = 25_000


@dataclass(frozen=True)
class Transfer(Event):
    signature: ClassVar[str] = "Transfer(address,address,uint256)"

    sender: Address
    recipient: Address
    value: int


@dataclass(frozen=True)
class Approval(Event):
    signature: ClassVar[str] = "Approval(address,address,uint256)"

    owner: Address
    spender: Address
    value: int


class ERC20Token(Contract):
    """
    ERC-20 with an open ``mint`` faucet.

    ``strict_approve`` mimics tokens (USDT and friends) that refuse to move
    an allowance from one non-zero value straight to another.
    """

    _journal_fields = ("balances", "allowances", "total_supply")

    def __init__(self, name: str, symbol: str, decimals: int = 18, strict_approve: bool = False):
        super().__init__()
        if not 0 <= decimals <= 255:
            raise ValueError("decimals must fit in uint8")
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.strict_approve = strict_approve
        self.balances: dict[Address, int] = {}
        self.allowances: dict[tuple[Address, Address], int] = {}
        self.total_supply = 0

    # views

    def balance_of(self, account: Address) -> int:
        return self.balances.get(account, 0)

    def allowance(self, owner: Address, spender: Address) -> int:
        return self.allowances.get((owner, spender), 0)

    def amount(self, raw: int) -> TokenAmount:
        return TokenAmount(raw=raw, decimals=self.decimals, symbol=self.symbol)

    # mutations (msg.sender aware)

    def transfer(self, recipient: Address, value: int) -> bool:
        self._move(self.msg_sender, recipient, value)
        return True

    def transfer_from(self, owner: Address, recipient: Address, value: int) -> bool:
        spender = self.msg_sender
        current = self.allowance(owner, spender)
        if current != MAX_UINT256:
            if current < value:
                raise Revert.with_reason("ERC20: insufficient allowance")
            self.allowances[(owner, spender)] = current - value
        self._move(owner, recipient, value)
        return True

    def approve(self, spender: Address, value: int) -> bool:
        if not 0 <= value <= MAX_UINT256:
            raise Revert.panic(0x11)
        owner = self.msg_sender
        if spender.is_zero:
            raise Revert.with_reason("ERC20: approve to the zero address")
        if self.strict_approve and value != 0 and self.allowance(owner, spender) != 0:
            raise Revert(b"")
        self._require_chain().use_gas(APPROVE_GAS)
        self.allowances[(owner, spender)] = value
        self._require_chain().emit(Approval(owner, spender, value))
        return True

    def mint(self, recipient: Address, value: int) -> None:
        if recipient.is_zero:
            raise Revert.with_reason("ERC20: mint to the zero address")
        self.total_supply += value
        self.balances[recipient] = self.balance_of(recipient) + value
        self._require_chain().emit(Transfer(Address.zero(), recipient, value))

    def _move(self, sender: Address, recipient: Address, value: int) -> None:
        if value < 0:
            raise Revert.panic(0x11)
        if recipient.is_zero:
            raise Revert.with_reason("ERC20: transfer to the zero address")
        balance = self.balance_of(sender)
        if balance < value:
            raise Revert.with_reason("ERC20: transfer amount exceeds balance")
        self._require_chain().use_gas(TRANSFER_GAS)
        self.balances[sender] = balance - value
        self.balances[recipient] = self.balance_of(recipient) + value
        self._require_chain().emit(Transfer(sender, recipient, value))
