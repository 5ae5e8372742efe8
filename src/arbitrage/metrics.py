"""Metrics: append-only execution counters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from core.base_types import MAX_BPS

from .safe_math import checked_add


class ContractStats(NamedTuple):
    total_trades: int
    successful_trades: int
    failed_trades: int
    success_rate: int  # bps
    cumulative_profit: int


@dataclass
class Metrics:
    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    total_profit: int = 0
    flash_loan_executions: int = 0
    flash_loan_successful: int = 0
    flash_loan_failed: int = 0
    flash_loan_profit: int = 0

    def record_trade(self, profit: int) -> None:
        """Every accepted trade counts; only a positive profit counts as success."""
        self.total_executions = checked_add(self.total_executions, 1)
        if profit > 0:
            self.successful_executions = checked_add(self.successful_executions, 1)
            self.total_profit = checked_add(self.total_profit, profit)

    def record_flash_loan_requested(self) -> None:
        self.flash_loan_executions = checked_add(self.flash_loan_executions, 1)

    def record_flash_loan_success(self, profit: int) -> None:
        self.flash_loan_successful = checked_add(self.flash_loan_successful, 1)
        if profit > 0:
            self.flash_loan_profit = checked_add(self.flash_loan_profit, profit)

    def record_flash_loan_failure(self) -> None:
        self.flash_loan_failed = checked_add(self.flash_loan_failed, 1)
        self.failed_executions = checked_add(self.failed_executions, 1)

    def stats(self) -> ContractStats:
        rate = 0
        if self.total_executions:
            rate = self.successful_executions * MAX_BPS // self.total_executions
        return ContractStats(
            total_trades=self.total_executions,
            successful_trades=self.successful_executions,
            failed_trades=self.failed_executions,
            success_rate=rate,
            cumulative_profit=self.total_profit,
        )

    def as_tuple(self) -> tuple[int, ...]:
        return (
            self.total_executions,
            self.successful_executions,
            self.failed_executions,
            self.total_profit,
            self.flash_loan_executions,
            self.flash_loan_successful,
            self.flash_loan_failed,
            self.flash_loan_profit,
        )
