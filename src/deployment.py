"""
Deployment and diagnostics for the arbitrage contract on a simulated chain.

In-process versions of the configure/verify/allowance scripts: build an
Avalanche-shaped world, apply the standard configuration, read it back and
report problems, and plan a two-leg round trip for ``simulate``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from eth_utils.crypto import keccak

import config_avalanche as avax
from arbitrage.contract import CrossDexArbitrage
from arbitrage.metrics import ContractStats
from arbitrage.types import TRADER_JOE, UNISWAP, DexConfigView, PoolConfigView, TokenConfigView
from chain import abi
from chain.router import SimulatedRouter
from chain.state import Chain
from chain.token import MAX_UINT256, ERC20Token
from chain.vault import FlashLoanVault
from config import Settings
from core.base_types import Address, TokenAmount

logger = logging.getLogger(__name__)

UNLIMITED_THRESHOLD = 2**255
DEADLINE_SECONDS = avax.TRADE_SETTINGS["DEFAULT_DEADLINE_MINS"] * 60

# Simulated reserves: 1 WAVAX = 25 USDC, 1 BTC.b = 60,000 USDC.
_RESERVES: dict[str, tuple[str, str, str, str]] = {
    "USDC_WAVAX": ("USDC", "2500000", "WAVAX", "100000"),
    "USDC_WBTC": ("USDC", "6000000", "WBTC", "100"),
}
_VAULT_LIQUIDITY = {"USDC": "10000000", "WAVAX": "1000000", "WBTC": "1000"}
_OWNER_FLOAT = {"USDC": "1000"}


def default_owner() -> Address:
    return Address.from_bytes(keccak(text="flash-arb deployer"))


@dataclass
class World:
    chain: Chain
    owner: Address
    tokens: dict[str, ERC20Token]
    vault: FlashLoanVault
    routers: dict[str, SimulatedRouter]
    contract: CrossDexArbitrage

    def token_addresses(self) -> dict[str, Address]:
        return {symbol: token.address for symbol, token in self.tokens.items()}

    def router_addresses(self) -> dict[str, Address]:
        return {name: router.address for name, router in self.routers.items()}


@dataclass
class ConfigReport:
    owner: Address
    paused: bool
    vault: Address
    flash_loan_fee_bps: int
    dexes: dict[str, DexConfigView] = field(default_factory=dict)
    pools: dict[Address, PoolConfigView] = field(default_factory=dict)
    tokens: dict[Address, TokenConfigView] = field(default_factory=dict)
    stats: Optional[ContractStats] = None
    problems: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


@dataclass
class AllowanceRow:
    token: Address
    symbol: str
    owner: Address
    spender: Address
    allowance: int
    unlimited: bool


def _raw(human: str, decimals: int) -> int:
    return TokenAmount.from_human(human, decimals).raw


def _with_slippage(quote: int) -> int:
    tolerance = avax.TRADE_SETTINGS["SLIPPAGE_TOLERANCE"]
    return quote * (10_000 - tolerance) // 10_000


def bootstrap_deployment(
    contract: CrossDexArbitrage,
    owner: Address,
    routers: dict[str, Address],
    tokens: dict[str, Address],
) -> None:
    """Apply the standard DEX, pool and token configuration as ``owner``."""
    chain = contract.chain
    if chain is None:
        raise ValueError("contract is not deployed")

    for name in (UNISWAP, TRADER_JOE):
        settings = avax.DEX_SETTINGS[name]
        chain.transact(
            owner,
            contract.configure_dex,
            name,
            routers[name],
            settings["default_fee"],
            settings["max_gas_usage"],
            settings["fee_tiers"],
        )

    pool_books = {UNISWAP: avax.ADDRESSES["UNISWAP_V3"], TRADER_JOE: avax.ADDRESSES["TRADER_JOE"]}
    min_liquidity = _raw(avax.POOL_MIN_LIQUIDITY, 18)
    for dex_name, pool_key in avax.POOL_ROUTES:
        pool = Address(pool_books[dex_name]["POOLS"][pool_key])
        chain.transact(
            owner,
            contract.configure_pool,
            pool,
            avax.DEX_SETTINGS[dex_name]["pool_fee"],
            min_liquidity,
            dex_name,
        )

    for symbol, limits in avax.TOKEN_LIMITS.items():
        if symbol not in tokens:
            continue
        decimals = avax.TOKEN_CONFIGS[symbol]["decimals"]
        chain.transact(
            owner,
            contract.configure_token,
            tokens[symbol],
            _raw(limits["max"], decimals),
            _raw(limits["min"], decimals),
            decimals,
        )
    logger.info("bootstrap complete for %s", contract.address)


def build_world(
    settings: Optional[Settings] = None,
    skew_bps: int = 200,
    owner: Optional[Address] = None,
) -> World:
    """
    Deploy tokens, a lender vault, two routers and the arbitrage contract.

    The Trader Joe pools price the volatile asset ``skew_bps`` above the
    Uniswap pools, so USDC -> asset on Uniswap -> USDC on Trader Joe is the
    profitable direction when the skew beats both pool fees.
    """
    settings = settings or Settings()
    if not -5_000 < skew_bps < 10_000:
        raise ValueError("skew_bps must be in (-5000, 10000)")
    owner = owner or default_owner()
    chain = Chain(chain_id=settings.chain_id)

    tokens: dict[str, ERC20Token] = {}
    for symbol, meta in avax.TOKEN_CONFIGS.items():
        token = ERC20Token(meta["name"], meta["symbol"], meta["decimals"])
        chain.deploy(token, owner)
        tokens[symbol] = token

    vault = FlashLoanVault(fee_bps=settings.flash_loan_fee_bps)
    chain.deploy(vault, owner)
    for symbol, human in _VAULT_LIQUIDITY.items():
        token = tokens[symbol]
        chain.transact(owner, token.mint, vault.address, _raw(human, token.decimals))

    routers = {UNISWAP: SimulatedRouter("Uniswap V3"), TRADER_JOE: SimulatedRouter("Trader Joe")}
    for router in routers.values():
        chain.deploy(router, owner)
    _seed_pools(chain, owner, tokens, routers, skew_bps)

    contract = CrossDexArbitrage(balancer_vault=vault.address)
    chain.deploy(contract, owner)
    bootstrap_deployment(
        contract,
        owner,
        {name: router.address for name, router in routers.items()},
        {symbol: token.address for symbol, token in tokens.items()},
    )

    # float for test-mode shortfalls, pulled through the owner's allowance
    for symbol, human in _OWNER_FLOAT.items():
        token = tokens[symbol]
        chain.transact(owner, token.mint, owner, _raw(human, token.decimals))
        chain.transact(owner, token.approve, contract.address, MAX_UINT256)

    return World(chain, owner, tokens, vault, routers, contract)


def _seed_pools(
    chain: Chain,
    owner: Address,
    tokens: dict[str, ERC20Token],
    routers: dict[str, SimulatedRouter],
    skew_bps: int,
) -> None:
    pool_books = {UNISWAP: avax.ADDRESSES["UNISWAP_V3"], TRADER_JOE: avax.ADDRESSES["TRADER_JOE"]}
    for pool_key, (quote, quote_human, base, base_human) in _RESERVES.items():
        quote_token, base_token = tokens[quote], tokens[base]
        for name, router in routers.items():
            quote_reserve = _raw(quote_human, quote_token.decimals)
            if name == TRADER_JOE:
                quote_reserve = quote_reserve * (10_000 + skew_bps) // 10_000
            fee = avax.DEX_SETTINGS[name]["pool_fee"]
            chain.transact(
                owner,
                router.seed_pool,
                Address(pool_books[name]["POOLS"][pool_key]),
                quote_token,
                base_token,
                quote_reserve,
                _raw(base_human, base_token.decimals),
                avax.uniswap_fee_to_bps(fee) if name == UNISWAP else fee,
            )


def plan_round_trip(
    world: World,
    amount: int,
    source: str = "USDC",
    target: str = "WAVAX",
    test_mode: bool = False,
) -> dict:
    """
    Keyword arguments for ``execute_flash_loan_arbitrage``: exactInputSingle
    on Uniswap for leg 1, swapExactTokensForTokens on Trader Joe for leg 2.
    Expected outputs come from the routers' current quotes; minimum outputs
    sit SLIPPAGE_TOLERANCE below them.
    """
    if amount <= 0:
        raise ValueError("amount must be positive")
    source_token, target_token = world.tokens[source], world.tokens[target]
    first, second = world.routers[UNISWAP], world.routers[TRADER_JOE]
    deadline = world.chain.timestamp + DEADLINE_SECONDS

    expected_first = first.get_amounts_out(amount, [source_token.address, target_token.address])[-1]
    expected_second = second.get_amounts_out(
        expected_first, [target_token.address, source_token.address]
    )[-1]

    first_leg = abi.exact_input_single(
        source_token.address,
        target_token.address,
        avax.DEX_SETTINGS[UNISWAP]["pool_fee"],
        world.contract.address,
        deadline,
        amount,
        _with_slippage(expected_first),
    )
    second_leg = abi.swap_exact_tokens_for_tokens(
        expected_first,
        _with_slippage(expected_second),
        [target_token.address, source_token.address],
        world.contract.address,
        deadline,
    )
    return {
        "source_token": source_token.address,
        "target_token": target_token.address,
        "amount": amount,
        "first_swap_data": first_leg,
        "second_swap_data": second_leg,
        "first_router": first.address,
        "second_router": second.address,
        "test_mode": test_mode,
        "expected_first_output": expected_first,
        "expected_second_output": expected_second,
    }


def verify_configuration(
    contract: CrossDexArbitrage,
    dex_names: Iterable[str] = (UNISWAP, TRADER_JOE),
    pools: Optional[Iterable[Address]] = None,
    tokens: Optional[Iterable[Address]] = None,
) -> ConfigReport:
    """Read every config back through the views and list what looks wrong."""
    chain = contract.chain
    if chain is None:
        raise ValueError("contract is not deployed")
    vault, fee_bps = contract.verify_flash_loan_configuration()
    report = ConfigReport(
        owner=contract.owner(),
        paused=contract.paused(),
        vault=vault,
        flash_loan_fee_bps=fee_bps,
        stats=contract.get_contract_stats(),
    )

    lender = chain.code_at(vault)
    if not isinstance(lender, FlashLoanVault):
        report.problems.append(f"lender {vault} has no vault code")
    elif lender.get_flash_loan_fee_percentage() != fee_bps:
        report.problems.append(
            f"lender fee {lender.get_flash_loan_fee_percentage()} bps != contract fee {fee_bps} bps"
        )
    if report.paused:
        report.problems.append("contract is paused")

    for name in dex_names:
        view = contract.get_dex_config(name)
        report.dexes[name] = view
        if view.router.is_zero:
            report.problems.append(f"dex {name} is not configured")
        elif not view.is_enabled:
            report.problems.append(f"dex {name} is disabled")

    pool_list = list(pools) if pools is not None else list(contract.registry.pools)
    routers = {view.router for view in report.dexes.values()}
    for pool in pool_list:
        view = contract.get_pool_config(pool)
        report.pools[pool] = view
        if not view.is_enabled:
            report.problems.append(f"pool {pool} is not enabled")
        elif view.dex_router not in routers:
            report.problems.append(f"pool {pool} points at unknown router {view.dex_router}")

    token_list = list(tokens) if tokens is not None else list(contract.registry.tokens)
    for token in token_list:
        view = contract.get_token_config(token)
        report.tokens[token] = view
        if view.max_amount == 0:
            report.problems.append(f"token {token} is not configured")
        elif not view.is_enabled:
            report.problems.append(f"token {token} is disabled")

    for problem in report.problems:
        logger.warning("config check: %s", problem)
    return report


def check_allowances(
    contract: CrossDexArbitrage,
    tokens: Iterable[Address],
    spenders: Iterable[Address],
    owner: Optional[Address] = None,
) -> list[AllowanceRow]:
    """Contract -> spender allowances, plus owner -> contract when ``owner`` is given."""
    chain = contract.chain
    if chain is None:
        raise ValueError("contract is not deployed")
    spender_list = list(spenders)
    rows: list[AllowanceRow] = []
    for token_address in tokens:
        token = chain.code_at(token_address)
        if not isinstance(token, ERC20Token):
            raise ValueError(f"{token_address} is not a token")
        pairs = [(contract.address, spender) for spender in spender_list]
        if owner is not None:
            pairs.append((owner, contract.address))
        for holder, spender in pairs:
            value = token.allowance(holder, spender)
            rows.append(
                AllowanceRow(
                    token=token.address,
                    symbol=token.symbol,
                    owner=holder,
                    spender=spender,
                    allowance=value,
                    unlimited=value >= UNLIMITED_THRESHOLD,
                )
            )
    return rows
