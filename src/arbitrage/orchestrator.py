"""
Flash-Loan Orchestrator: request a loan, run the engine in its callback, repay.

    Idle -> Requested -> Borrowed -> (ArbitrageSucceeded | ArbitrageFailed)
         -> Repaid | ShortfallCovered | RepaymentFailed

A failure anywhere below the loan request unwinds the lender call as one
frame. The request layer reports that failure (metrics, events, log) and
returns the contract's balance instead of reverting its caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from chain.revert import decode_revert
from chain.vault import FlashLoanVault
from core.base_types import Address

from .access import non_reentrant, when_not_paused
from .errors import (
    DisabledToken,
    InsufficientRepayment,
    InvalidExecutionId,
    InvalidTokens,
    InvalidVaultAddress,
    TestModeShortfall,
    UnauthorizedCaller,
    ZeroAmount,
)
from .events import FlashLoanEvent, FlashLoanEventType, StateLog
from .safe_math import checked_add
from .types import EXECUTION_ID_TAG, ArbitrageParams, FlashLoanContext

if TYPE_CHECKING:
    from .contexts import ExecutionContextStore
    from .metrics import Metrics
    from .registry import ConfigurationRegistry

logger = logging.getLogger(__name__)


def derive_execution_id(
    source_token: Address,
    target_token: Address,
    amount: int,
    first_router: Address,
    second_router: Address,
    timestamp: int,
    block_number: int,
    caller: Address,
) -> bytes:
    """keccak256(abi.encodePacked(...)) over the request and its block."""
    return bytes(
        Web3.solidity_keccak(
            [
                "address",
                "address",
                "uint256",
                "address",
                "address",
                "uint256",
                "uint256",
                "address",
                "string",
            ],
            [
                source_token.checksum,
                target_token.checksum,
                amount,
                first_router.checksum,
                second_router.checksum,
                timestamp,
                block_number,
                caller.checksum,
                EXECUTION_ID_TAG,
            ],
        )
    )


def encode_user_data(execution_id: bytes) -> bytes:
    return abi_encode(["bytes32"], [execution_id])


def decode_user_data(user_data: bytes) -> bytes:
    try:
        (execution_id,) = abi_decode(["bytes32"], bytes(user_data))
    except DecodingError as exc:
        raise InvalidExecutionId() from exc
    return execution_id


class FlashLoanOrchestrator:
    """Mixin for the arbitrage contract; relies on its registry, store and metrics."""

    balancer_vault: Address
    registry: "ConfigurationRegistry"
    contexts: "ExecutionContextStore"
    metrics: "Metrics"

    @non_reentrant
    @when_not_paused
    def execute_flash_loan_arbitrage(
        self,
        source_token: Address,
        target_token: Address,
        amount: int,
        first_swap_data: bytes,
        second_swap_data: bytes,
        first_router: Address,
        second_router: Address,
        test_mode: bool,
        expected_first_output: int,
        expected_second_output: int,
    ) -> int:
        """Borrow ``amount`` of ``source_token`` and run both legs; returns the balance after."""
        if source_token == target_token:
            raise InvalidTokens()
        if amount == 0:
            raise ZeroAmount()
        chain = self._require_chain()
        vault = chain.code_at(self.balancer_vault)
        if self.balancer_vault.is_zero or not isinstance(vault, FlashLoanVault):
            raise InvalidVaultAddress()
        if not self.registry.token(source_token).is_enabled:
            raise DisabledToken()

        execution_id = derive_execution_id(
            source_token,
            target_token,
            amount,
            first_router,
            second_router,
            chain.timestamp,
            chain.block_number,
            self.msg_sender,
        )
        if self.contexts.is_executed(execution_id) or self.contexts.flash_context(execution_id):
            raise InvalidExecutionId()

        params = ArbitrageParams(
            source_token=source_token,
            target_token=target_token,
            amount=amount,
            first_swap_data=bytes(first_swap_data),
            second_swap_data=bytes(second_swap_data),
            first_router=first_router,
            second_router=second_router,
            test_mode=test_mode,
            expected_first_output=expected_first_output,
            expected_second_output=expected_second_output,
            execution_id=execution_id,
        )
        self.contexts.store_flash_context(FlashLoanContext(params=params, borrowed_amount=amount))
        self.metrics.record_flash_loan_requested()
        chain.emit(
            FlashLoanEvent(execution_id, FlashLoanEventType.INITIATED, source_token, amount, 0)
        )
        logger.info(
            "flash loan %s initiated: %s of %s (test_mode=%s)",
            execution_id.hex(),
            amount,
            source_token,
            test_mode,
        )

        result = chain.try_call(
            self.address,
            vault.flash_loan,
            self.address,
            [source_token],
            [amount],
            encode_user_data(execution_id),
        )
        if not result.success:
            reason = decode_revert(result.revert_data).describe()
            self.metrics.record_flash_loan_failure()
            self.contexts.burn(execution_id)
            chain.emit(StateLog(execution_id, "FLASH_LOAN_FAILED", reason))
            chain.emit(
                FlashLoanEvent(execution_id, FlashLoanEventType.FAILED, source_token, amount, 0)
            )
            logger.warning("flash loan %s failed: %s", execution_id.hex(), reason)

        self.contexts.delete_flash_context(execution_id)
        return self._erc20(source_token).balance_of(self.address)

    def receive_flash_loan(
        self,
        tokens: Sequence[Address],
        amounts: Sequence[int],
        fee_amounts: Sequence[int],
        user_data: bytes,
    ) -> None:
        """Lender callback. Only the configured vault may call it."""
        if self.msg_sender != self.balancer_vault:
            raise UnauthorizedCaller()

        execution_id = decode_user_data(user_data)
        context = self.contexts.flash_context(execution_id)
        if context is None:
            raise InvalidExecutionId()
        params = context.params
        if (
            len(tokens) != 1
            or len(amounts) != 1
            or len(fee_amounts) != 1
            or tokens[0] != params.source_token
            or amounts[0] != context.borrowed_amount
        ):
            raise InvalidExecutionId()

        chain = self._require_chain()
        outcome = chain.try_call(self.address, self.execute_arbitrage_wrapper, params)
        if not outcome.success:
            logger.info(
                "arbitrage %s rejected: %s",
                execution_id.hex(),
                decode_revert(outcome.revert_data).describe(),
            )
            raise outcome.error
        profit = outcome.value
        self.metrics.record_flash_loan_success(profit)

        token = self._erc20(params.source_token)
        owed = checked_add(context.borrowed_amount, fee_amounts[0])
        balance = token.balance_of(self.address)
        if balance < owed:
            if not params.test_mode:
                raise InsufficientRepayment()
            shortfall = owed - balance
            pulled = chain.try_call(
                self.address, token.transfer_from, self._owner, self.address, shortfall
            )
            if not pulled.success:
                raise TestModeShortfall()
            chain.emit(StateLog(execution_id, "SHORTFALL_COVERED", f"amount={shortfall}"))
            logger.warning(
                "flash loan %s shortfall of %s covered by owner", execution_id.hex(), shortfall
            )

        chain.call(self.address, token.transfer, self.balancer_vault, owed)
        chain.emit(
            FlashLoanEvent(
                execution_id, FlashLoanEventType.COMPLETED, params.source_token, owed, profit
            )
        )
        logger.info("flash loan %s repaid: %s, profit %s", execution_id.hex(), owed, profit)
        self.contexts.delete_flash_context(execution_id)
