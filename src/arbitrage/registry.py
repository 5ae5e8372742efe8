"""
Configuration Registry: per-DEX, per-pool and per-token allow-lists.

Entries are never deleted; disabling is the only way to retract one.
Owner checks live on the contract; the registry only validates arguments
and keeps the records.
"""

from __future__ import annotations

from typing import Iterable

from core.base_types import MAX_BPS, Address

from .errors import InvalidSetup, SetupErrorCode
from .types import (
    DexConfig,
    DexConfigView,
    PoolConfig,
    PoolConfigView,
    TokenConfig,
    TokenConfigView,
)

MAX_TOKEN_DECIMALS = 18


class ConfigurationRegistry:
    def __init__(self) -> None:
        self.dexes: dict[str, DexConfig] = {}
        self.pools: dict[Address, PoolConfig] = {}
        self.tokens: dict[Address, TokenConfig] = {}

    # -- mutations --------------------------------------------------------

    def configure_dex(
        self,
        name: str,
        router: Address,
        default_fee: int,
        max_gas_usage: int,
        fee_tiers: Iterable[int],
    ) -> DexConfig:
        if router.is_zero:
            raise InvalidSetup(SetupErrorCode.ZERO_ADDRESS)
        if not name:
            raise InvalidSetup(SetupErrorCode.EMPTY_NAME)
        tiers = list(fee_tiers)
        if any(tier > MAX_BPS for tier in tiers):
            raise InvalidSetup(SetupErrorCode.INVALID_FEE)

        config = self.dexes.setdefault(name, DexConfig())
        config.router = router
        config.is_enabled = True
        config.default_fee = default_fee
        config.max_gas_usage = max_gas_usage
        config.supported_fee_tiers.update(tiers)
        return config

    def configure_pool(
        self, pool: Address, fee: int, min_liquidity: int, dex_name: str
    ) -> PoolConfig:
        if pool.is_zero:
            raise InvalidSetup(SetupErrorCode.ZERO_ADDRESS)
        dex = self.dexes.get(dex_name)
        if dex is None or not dex.is_enabled:
            raise InvalidSetup(SetupErrorCode.DEX_NOT_ENABLED)
        if fee >= MAX_BPS:
            raise InvalidSetup(SetupErrorCode.INVALID_FEE)
        if dex.router.is_zero:
            raise InvalidSetup(SetupErrorCode.ROUTER_NOT_SET)

        config = PoolConfig(
            is_enabled=True, fee=fee, min_liquidity=min_liquidity, dex_router=dex.router
        )
        self.pools[pool] = config
        dex.supported_pools.add(pool)
        return config

    def configure_token(
        self, token: Address, max_amount: int, min_amount: int, decimals: int
    ) -> TokenConfig:
        if token.is_zero:
            raise InvalidSetup(SetupErrorCode.ZERO_ADDRESS)
        if max_amount <= min_amount:
            raise InvalidSetup(SetupErrorCode.INVALID_AMOUNTS)
        if decimals > MAX_TOKEN_DECIMALS:
            raise InvalidSetup(SetupErrorCode.INVALID_DECIMALS)

        config = TokenConfig(
            is_enabled=True, max_amount=max_amount, min_amount=min_amount, decimals=decimals
        )
        self.tokens[token] = config
        return config

    def set_dex_enabled(self, name: str, enabled: bool) -> None:
        dex = self.dexes.get(name)
        if dex is None or dex.router.is_zero:
            raise InvalidSetup(SetupErrorCode.NOT_CONFIGURED)
        dex.is_enabled = enabled

    def set_token_enabled(self, token: Address, enabled: bool) -> None:
        config = self.tokens.get(token)
        if config is None or not config.is_configured:
            raise InvalidSetup(SetupErrorCode.NOT_CONFIGURED)
        config.is_enabled = enabled

    # -- views ------------------------------------------------------------

    def dex(self, name: str) -> DexConfig:
        return self.dexes.get(name) or DexConfig()

    def pool(self, pool: Address) -> PoolConfig:
        return self.pools.get(pool) or PoolConfig()

    def token(self, token: Address) -> TokenConfig:
        return self.tokens.get(token) or TokenConfig()

    def get_dex_config(self, name: str) -> DexConfigView:
        dex = self.dex(name)
        return DexConfigView(dex.router, dex.default_fee, dex.max_gas_usage, dex.is_enabled)

    def get_pool_config(self, pool: Address) -> PoolConfigView:
        config = self.pool(pool)
        return PoolConfigView(
            config.is_enabled, config.fee, config.min_liquidity, config.dex_router
        )

    def get_token_config(self, token: Address) -> TokenConfigView:
        config = self.token(token)
        return TokenConfigView(
            config.is_enabled, config.max_amount, config.min_amount, config.decimals
        )

    def is_dex_fee_tier_supported(self, name: str, fee_tier: int) -> bool:
        return fee_tier in self.dex(name).supported_fee_tiers

    def is_pool_supported(self, name: str, pool: Address) -> bool:
        return pool in self.dex(name).supported_pools
