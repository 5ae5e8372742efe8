"""Balancer-style flash-loan lender."""

from __future__ import annotations

import logging
from typing import Sequence

from core.base_types import MAX_BPS, Address

from .contract import Contract
from .errors import Revert
from .token import ERC20Token

logger = logging.getLogger(__name__)


class FlashLoanVault(Contract):
    """
    Lends any token it holds for the duration of one call.

    The recipient's ``receive_flash_loan`` is invoked with ``msg.sender`` set
    to the vault. After the callback the vault's balance of every lent token
    must be back to its pre-loan value plus the fee, otherwise the whole
    loan reverts.
    """

    def __init__(self, fee_bps: int = 0):
        super().__init__()
        if not 0 <= fee_bps < MAX_BPS:
            raise ValueError("fee_bps must be in [0, 10000)")
        self.fee_bps = fee_bps

    def get_flash_loan_fee_percentage(self) -> int:
        return self.fee_bps

    def flash_loan(
        self,
        recipient: Address,
        tokens: Sequence[Address],
        amounts: Sequence[int],
        user_data: bytes,
    ) -> None:
        chain = self._require_chain()
        if len(tokens) != len(amounts):
            raise Revert.with_reason("Vault: input length mismatch")
        if len(set(tokens)) != len(tokens):
            raise Revert.with_reason("Vault: tokens must be unique")

        receiver = chain.code_at(recipient)
        if receiver is None or not hasattr(receiver, "receive_flash_loan"):
            raise Revert.with_reason("Vault: recipient cannot receive flash loans")

        contracts = [self._token(t) for t in tokens]
        pre_balances = [c.balance_of(self.address) for c in contracts]
        fees = [amount * self.fee_bps // MAX_BPS for amount in amounts]

        for token, amount, pre in zip(contracts, amounts, pre_balances):
            if amount > pre:
                raise Revert.with_reason("Vault: insufficient flash loan balance")
            chain.call(self.address, token.transfer, recipient, amount)

        logger.debug("flash loan to %s: %s", recipient, list(zip(tokens, amounts)))
        chain.call(
            self.address,
            receiver.receive_flash_loan,
            list(tokens),
            list(amounts),
            fees,
            bytes(user_data),
        )

        for token, pre, fee in zip(contracts, pre_balances, fees):
            if token.balance_of(self.address) < pre + fee:
                raise Revert.with_reason("Vault: flash loan not repaid")

    def _token(self, address: Address) -> ERC20Token:
        contract = self._require_chain().code_at(address)
        if not isinstance(contract, ERC20Token):
            raise Revert.with_reason("Vault: unknown token")
        return contract
