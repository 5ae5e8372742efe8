"""Execution Context Store: per-execution state keyed by execution id."""

from __future__ import annotations

from typing import Optional

from .errors import InvalidExecutionId
from .types import FlashLoanContext, TradeContext, TradeContextView


class ExecutionContextStore:
    """
    Flash-loan contexts are ephemeral: created when a loan is requested and
    dropped as soon as it is repaid or fails. Trade contexts are history and
    stay readable after execution; once ``executed`` is set they are frozen.
    """

    def __init__(self) -> None:
        self.flash_loans: dict[bytes, FlashLoanContext] = {}
        self.trades: dict[bytes, TradeContext] = {}
        self.executed: set[bytes] = set()

    # flash-loan contexts

    def store_flash_context(self, context: FlashLoanContext) -> None:
        if context.execution_id in self.flash_loans:
            raise InvalidExecutionId()
        self.flash_loans[context.execution_id] = context

    def flash_context(self, execution_id: bytes) -> Optional[FlashLoanContext]:
        return self.flash_loans.get(execution_id)

    def delete_flash_context(self, execution_id: bytes) -> None:
        self.flash_loans.pop(execution_id, None)

    # trade contexts

    def open_trade(self, execution_id: bytes) -> None:
        existing = self.trades.get(execution_id)
        if execution_id in self.executed or (existing is not None and existing.executed):
            raise InvalidExecutionId()
        self.trades[execution_id] = TradeContext()

    def record_trade(self, execution_id: bytes, **fields: int) -> None:
        """Write fields of an open trade; the record is looked up on every write."""
        trade = self.trades[execution_id]
        for name, value in fields.items():
            setattr(trade, name, value)

    def trade(self, execution_id: bytes) -> TradeContext:
        return self.trades.get(execution_id) or TradeContext()

    def trade_view(self, execution_id: bytes) -> TradeContextView:
        t = self.trade(execution_id)
        return TradeContextView(
            t.trade_input_amount,
            t.trade_final_balance,
            t.expected_first_output,
            t.actual_first_output,
            t.expected_second_output,
            t.actual_second_output,
            t.executed,
        )

    # replay protection

    def is_executed(self, execution_id: bytes) -> bool:
        return execution_id in self.executed

    def mark_executed(self, execution_id: bytes) -> None:
        trade = self.trades.get(execution_id)
        if trade is not None:
            trade.executed = True
        self.executed.add(execution_id)

    def burn(self, execution_id: bytes) -> None:
        """Spend an id whose execution never produced a trade."""
        self.executed.add(execution_id)
