"""
CrossDexArbitrage: the flash-loan arbitrage contract.

Combines the access guards, the Configuration Registry, the Execution
Context Store, Metrics, the Flash-Loan Orchestrator and the Arbitrage
Engine into one deployable contract whose storage is journaled as a unit.
"""

from __future__ import annotations

import logging
from typing import Iterable

from chain.errors import Revert
from core.base_types import ZERO_ADDRESS, Address

from .access import Ownable, Pausable, ReentrancyGuard, non_reentrant, only_owner
from .contexts import ExecutionContextStore
from .engine import ArbitrageEngine
from .errors import InvalidSetup, InvalidVaultAddress, SetupErrorCode, ZeroAmount
from .events import (
    ApprovalUpdated,
    DexConfigured,
    PoolConfigured,
    StateLog,
    TokenConfigured,
)
from .metrics import ContractStats, Metrics
from .orchestrator import FlashLoanOrchestrator
from .registry import ConfigurationRegistry
from .types import (
    TRADER_JOE,
    UNISWAP,
    ZERO_EXECUTION_ID,
    DexConfigView,
    PoolConfigView,
    TokenConfigView,
    TradeContextView,
)

logger = logging.getLogger(__name__)


class CrossDexArbitrage(
    FlashLoanOrchestrator, ArbitrageEngine, Ownable, Pausable, ReentrancyGuard
):
    _journal_fields = (
        "_owner",
        "_paused",
        "_status",
        "registry",
        "contexts",
        "metrics",
        "uniswap_router_address",
        "trader_joe_router_address",
    )

    def __init__(self, balancer_vault: Address):
        super().__init__()
        self.balancer_vault = balancer_vault
        self.registry = ConfigurationRegistry()
        self.contexts = ExecutionContextStore()
        self.metrics = Metrics()
        self.uniswap_router_address: Address = ZERO_ADDRESS
        self.trader_joe_router_address: Address = ZERO_ADDRESS

    def on_deploy(self, deployer: Address) -> None:
        if self.balancer_vault.is_zero:
            raise InvalidVaultAddress()
        super().on_deploy(deployer)

    # -- configuration ----------------------------------------------------

    @only_owner
    def configure_dex(
        self,
        name: str,
        router: Address,
        default_fee: int,
        max_gas_usage: int,
        fee_tiers: Iterable[int],
    ) -> None:
        self.registry.configure_dex(name, router, default_fee, max_gas_usage, fee_tiers)
        if name == UNISWAP:
            self.uniswap_router_address = router
        elif name == TRADER_JOE:
            self.trader_joe_router_address = router
        self._require_chain().emit(DexConfigured(name, router, default_fee, max_gas_usage))
        logger.info("dex %s configured: router=%s fee=%s", name, router, default_fee)

    @only_owner
    def configure_pool(self, pool: Address, fee: int, min_liquidity: int, dex_name: str) -> None:
        config = self.registry.configure_pool(pool, fee, min_liquidity, dex_name)
        self._require_chain().emit(PoolConfigured(pool, fee, min_liquidity, config.dex_router))
        logger.info("pool %s configured on %s", pool, dex_name)

    @only_owner
    def configure_token(
        self, token: Address, max_amount: int, min_amount: int, decimals: int
    ) -> None:
        self.registry.configure_token(token, max_amount, min_amount, decimals)
        self._require_chain().emit(TokenConfigured(token, max_amount, min_amount, decimals))
        logger.info("token %s configured: [%s, %s]", token, min_amount, max_amount)

    @only_owner
    def set_dex_enabled(self, name: str, enabled: bool) -> None:
        self.registry.set_dex_enabled(name, enabled)
        stage = "DEX_ENABLED" if enabled else "DEX_DISABLED"
        self._require_chain().emit(StateLog(ZERO_EXECUTION_ID, stage, name))

    @only_owner
    def set_token_enabled(self, token: Address, enabled: bool) -> None:
        self.registry.set_token_enabled(token, enabled)
        stage = "TOKEN_ENABLED" if enabled else "TOKEN_DISABLED"
        self._require_chain().emit(StateLog(ZERO_EXECUTION_ID, stage, token.checksum))

    @only_owner
    def approve_router(self, token: Address, router: Address, amount: int) -> None:
        chain = self._require_chain()
        erc20 = self._erc20(token)
        chain.call(self.address, erc20.approve, router, amount)
        chain.emit(ApprovalUpdated(token, router, amount))

    @only_owner
    def set_router_addresses(self, uniswap_router: Address, trader_joe_router: Address) -> None:
        if uniswap_router.is_zero or trader_joe_router.is_zero:
            raise InvalidSetup(SetupErrorCode.ZERO_ADDRESS)
        self.uniswap_router_address = uniswap_router
        self.trader_joe_router_address = trader_joe_router

    # -- emergency controls -----------------------------------------------

    @only_owner
    def pause(self) -> None:
        self._pause()

    @only_owner
    def unpause(self) -> None:
        self._unpause()

    @only_owner
    def trigger_circuit_breaker(self, reason: str) -> None:
        if not self._paused:
            self._pause(reason)
        self._require_chain().emit(StateLog(ZERO_EXECUTION_ID, "CIRCUIT_BREAKER", reason))

    @only_owner
    @non_reentrant
    def emergency_withdraw(self, token: Address) -> bool:
        erc20 = self._erc20(token)
        balance = erc20.balance_of(self.address)
        if balance == 0:
            return False
        self._require_chain().call(self.address, erc20.transfer, self._owner, balance)
        logger.warning("emergency withdrawal of %s %s to %s", balance, erc20.symbol, self._owner)
        return True

    @only_owner
    @non_reentrant
    def withdraw_funds(self, token: Address, amount: int) -> bool:
        if amount == 0:
            raise ZeroAmount()
        erc20 = self._erc20(token)
        if erc20.balance_of(self.address) < amount:
            raise Revert.with_reason("Insufficient balance")
        self._require_chain().call(self.address, erc20.transfer, self._owner, amount)
        return True

    # -- views ------------------------------------------------------------

    def get_dex_config(self, name: str) -> DexConfigView:
        return self.registry.get_dex_config(name)

    def get_pool_config(self, pool: Address) -> PoolConfigView:
        return self.registry.get_pool_config(pool)

    def get_token_config(self, token: Address) -> TokenConfigView:
        return self.registry.get_token_config(token)

    def is_dex_fee_tier_supported(self, name: str, fee_tier: int) -> bool:
        return self.registry.is_dex_fee_tier_supported(name, fee_tier)

    def get_trade_context(self, execution_id: bytes) -> TradeContextView:
        return self.contexts.trade_view(execution_id)

    def get_contract_stats(self) -> ContractStats:
        return self.metrics.stats()

    def get_metrics(self) -> tuple[int, ...]:
        return self.metrics.as_tuple()

    def executed_trades(self, execution_id: bytes) -> bool:
        return self.contexts.is_executed(execution_id)

    def get_flash_loan_fee_bps(self) -> int:
        return 0

    def verify_flash_loan_configuration(self) -> tuple[Address, int]:
        return self.balancer_vault, self.get_flash_loan_fee_bps()
