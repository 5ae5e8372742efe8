"""
Arbitrage Engine: two-leg swap execution and signed profit accounting.

Only reachable through ``execute_arbitrage_wrapper`` called by the contract
itself, so a failure inside the engine rolls back as one frame that the
flash-loan callback can observe as a result instead of an exception.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chain.errors import Revert
from chain.revert import decode_revert
from chain.token import ERC20Token
from core.base_types import Address

from .errors import (
    FirstSwapFailed,
    InsufficientProfit,
    InvalidExecutionId,
    NoIntermediateTokens,
    SecondSwapFailed,
    UnauthorizedCaller,
)
from .events import ApprovalUpdated, ArbitrageExecuted, StateLog, SwapEvent, SwapEventType
from .safe_math import Saturated, clamp_int256, signed_delta, to_int256
from .types import MAX_UINT256, SWAP_GAS_LIMIT, ArbitrageParams

if TYPE_CHECKING:
    from .contexts import ExecutionContextStore
    from .metrics import Metrics

logger = logging.getLogger(__name__)


class ArbitrageEngine:
    """Mixin for the arbitrage contract; relies on its chain, store and metrics."""

    contexts: "ExecutionContextStore"
    metrics: "Metrics"

    def execute_arbitrage_wrapper(self, params: ArbitrageParams) -> int:
        if self.msg_sender != self.address:
            raise UnauthorizedCaller()
        return self._execute_arbitrage(params)

    def _execute_arbitrage(self, params: ArbitrageParams) -> int:
        eid = params.execution_id
        if self.contexts.is_executed(eid):
            raise InvalidExecutionId()

        source = self._erc20(params.source_token)
        target = self._erc20(params.target_token)

        # Nested frames may roll storage back, so the trade is written by key.
        source_start = source.balance_of(self.address)
        self.contexts.open_trade(eid)
        self.contexts.record_trade(
            eid,
            source_start_balance=source_start,
            target_start_balance=target.balance_of(self.address),
            trade_input_amount=params.amount,
            expected_first_output=params.expected_first_output,
            expected_second_output=params.expected_second_output,
        )
        self._state_log(eid, "ARBITRAGE_START", f"amount={params.amount} test_mode={params.test_mode}")

        # Leg 1: source -> target
        self._ensure_allowance(source, params.first_router, params.amount)
        target_before = target.balance_of(self.address)
        self._swap_event(
            eid, SwapEventType.BEFORE_FIRST_SWAP, "first swap", target, target_before, 0
        )
        self._run_leg(params.first_router, params.first_swap_data, FirstSwapFailed)
        target_after = target.balance_of(self.address)

        received = target_after - target_before if target_after > target_before else 0
        if received == 0:
            raise NoIntermediateTokens()
        self.contexts.record_trade(eid, intermediate_amount=received, actual_first_output=received)
        self._swap_event(
            eid,
            SwapEventType.AFTER_FIRST_SWAP,
            "first swap",
            target,
            target_after,
            _expected_balance(params.expected_first_output),
        )

        # Leg 2: target -> source
        self._ensure_allowance(target, params.second_router, received)
        source_before = source.balance_of(self.address)
        self._swap_event(
            eid, SwapEventType.BEFORE_SECOND_SWAP, "second swap", source, source_before, 0
        )
        self._run_leg(params.second_router, params.second_swap_data, SecondSwapFailed)
        source_after = source.balance_of(self.address)
        self._swap_event(
            eid,
            SwapEventType.AFTER_SECOND_SWAP,
            "second swap",
            source,
            source_after,
            _expected_balance(params.expected_second_output),
        )

        final_balance = self._clamped(to_int256(source_after), eid, "final balance")
        self.contexts.record_trade(
            eid,
            actual_second_output=self._clamped(
                signed_delta(source_after, source_before), eid, "second output"
            ),
            trade_final_balance=final_balance,
        )

        profit = self._clamped(signed_delta(source_after, source_start), eid, "trade profit")
        expected_profit = self._clamped(
            clamp_int256(params.expected_second_output - params.amount), eid, "expected profit"
        )

        if profit <= 0:
            if not params.test_mode:
                raise InsufficientProfit()
            self._state_log(eid, "TEST_MODE_LOSS", f"profit={profit}")
            logger.warning("test-mode trade %s accepted with profit %s", eid.hex(), profit)

        self.metrics.record_trade(profit)
        self._require_chain().emit(
            ArbitrageExecuted(
                source_token=params.source_token,
                target_token=params.target_token,
                trade_input_amount=params.amount,
                final_account_balance=source_after,
                trade_final_balance=final_balance,
                trade_profit=profit,
                expected_profit=expected_profit,
                test_mode=params.test_mode,
            )
        )
        logger.info(
            "arbitrage %s executed: profit=%s expected=%s", eid.hex(), profit, expected_profit
        )

        self.contexts.mark_executed(eid)
        return profit

    # -- helpers ----------------------------------------------------------

    def _run_leg(self, router: Address, payload: bytes, failure: type[Revert]) -> None:
        result = self._require_chain().raw_call(
            self.address, router, payload, gas=SWAP_GAS_LIMIT
        )
        if not result.success:
            raise failure(decode_revert(result.revert_data).describe())

    def _ensure_allowance(self, token: ERC20Token, spender: Address, amount: int) -> None:
        """Max-approve once; fall back to reset-then-approve for strict tokens."""
        if token.allowance(self.address, spender) >= amount:
            return
        chain = self._require_chain()
        result = chain.try_call(self.address, token.approve, spender, MAX_UINT256)
        if not result.success:
            chain.call(self.address, token.approve, spender, 0)
            chain.call(self.address, token.approve, spender, MAX_UINT256)
        chain.emit(ApprovalUpdated(token.address, spender, MAX_UINT256))

    def _erc20(self, address: Address) -> ERC20Token:
        contract = self._require_chain().code_at(address)
        if not isinstance(contract, ERC20Token):
            raise Revert(b"")
        return contract

    def _clamped(self, result: Saturated, eid: bytes, label: str) -> int:
        if result.clamped:
            self._state_log(eid, "ARITHMETIC_CLAMPED", f"{label}={result.value}")
            logger.warning("%s clamped to %s for %s", label, result.value, eid.hex())
        return result.value

    def _swap_event(
        self,
        eid: bytes,
        event_type: SwapEventType,
        stage: str,
        token: ERC20Token,
        actual: int,
        expected: int,
    ) -> None:
        self._require_chain().emit(
            SwapEvent(eid, event_type, stage, token.address, actual, expected)
        )

    def _state_log(self, eid: bytes, stage: str, data: str) -> None:
        self._require_chain().emit(StateLog(eid, stage, data))


def _expected_balance(expected_output: int) -> int:
    """SwapEvent carries a uint256; an expected loss is reported as zero."""
    return expected_output if expected_output > 0 else 0
