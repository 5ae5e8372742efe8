import pytest

from arbitrage.contract import CrossDexArbitrage
from arbitrage.errors import InvalidSetup, SetupErrorCode
from arbitrage.events import DexConfigured, PoolConfigured, TokenConfigured
from arbitrage.registry import ConfigurationRegistry
from chain.errors import Revert
from chain.vault import FlashLoanVault
from conftest import ALICE, BOB
from core.base_types import ZERO_ADDRESS, Address

ROUTER_A = Address("0x00000000000000000000000000000000000000aa")
ROUTER_B = Address("0x00000000000000000000000000000000000000bb")
POOL = Address("0x00000000000000000000000000000000000000cc")
TOKEN = Address("0x00000000000000000000000000000000000000dd")


@pytest.fixture
def arb(chain):
    vault = FlashLoanVault()
    chain.deploy(vault, ALICE)
    contract = CrossDexArbitrage(balancer_vault=vault.address)
    chain.deploy(contract, ALICE)
    return contract


def _setup_code(excinfo) -> SetupErrorCode:
    assert isinstance(excinfo.value, InvalidSetup)
    return excinfo.value.code


def test_configure_dex_then_read_back(chain, arb):
    chain.transact(ALICE, arb.configure_dex, "uniswap", ROUTER_A, 30, 3_000_000, [100, 500, 3000, 10000])
    assert arb.get_dex_config("uniswap") == (ROUTER_A, 30, 3_000_000, True)
    assert arb.is_dex_fee_tier_supported("uniswap", 3000)
    assert not arb.is_dex_fee_tier_supported("uniswap", 42)
    assert arb.uniswap_router_address == ROUTER_A
    assert chain.events(DexConfigured)[-1] == DexConfigured("uniswap", ROUTER_A, 30, 3_000_000)


def test_trader_joe_updates_convenience_router(chain, arb):
    chain.transact(ALICE, arb.configure_dex, "traderjoe", ROUTER_B, 30, 3_000_000, [30])
    assert arb.trader_joe_router_address == ROUTER_B
    assert arb.uniswap_router_address == ZERO_ADDRESS


def test_other_dex_names_leave_convenience_routers(chain, arb):
    chain.transact(ALICE, arb.configure_dex, "pangolin", ROUTER_B, 30, 1, [30])
    assert arb.uniswap_router_address == ZERO_ADDRESS
    assert arb.trader_joe_router_address == ZERO_ADDRESS


@pytest.mark.parametrize(
    "name, router, tiers, code",
    [
        ("uniswap", ZERO_ADDRESS, [30], SetupErrorCode.ZERO_ADDRESS),
        ("", ROUTER_A, [30], SetupErrorCode.EMPTY_NAME),
        ("uniswap", ROUTER_A, [30, 10_001], SetupErrorCode.INVALID_FEE),
    ],
)
def test_configure_dex_validation(chain, arb, name, router, tiers, code):
    with pytest.raises(InvalidSetup) as excinfo:
        chain.transact(ALICE, arb.configure_dex, name, router, 30, 1, tiers)
    assert _setup_code(excinfo) is code
    assert arb.get_dex_config(name) == (ZERO_ADDRESS, 0, 0, False)


def test_configure_pool_requires_configured_dex(chain, arb):
    with pytest.raises(InvalidSetup) as excinfo:
        chain.transact(ALICE, arb.configure_pool, POOL, 30, 100, "uniswap")
    assert _setup_code(excinfo) is SetupErrorCode.DEX_NOT_ENABLED


def test_configure_pool_requires_enabled_dex(chain, arb):
    chain.transact(ALICE, arb.configure_dex, "uniswap", ROUTER_A, 30, 1, [30])
    chain.transact(ALICE, arb.set_dex_enabled, "uniswap", False)
    with pytest.raises(InvalidSetup) as excinfo:
        chain.transact(ALICE, arb.configure_pool, POOL, 30, 100, "uniswap")
    assert _setup_code(excinfo) is SetupErrorCode.DEX_NOT_ENABLED


def test_configure_pool_validation(chain, arb):
    chain.transact(ALICE, arb.configure_dex, "uniswap", ROUTER_A, 30, 1, [30])
    with pytest.raises(InvalidSetup) as excinfo:
        chain.transact(ALICE, arb.configure_pool, ZERO_ADDRESS, 30, 100, "uniswap")
    assert _setup_code(excinfo) is SetupErrorCode.ZERO_ADDRESS
    with pytest.raises(InvalidSetup) as excinfo:
        chain.transact(ALICE, arb.configure_pool, POOL, 10_000, 100, "uniswap")
    assert _setup_code(excinfo) is SetupErrorCode.INVALID_FEE


def test_configure_pool_binds_current_router(chain, arb):
    chain.transact(ALICE, arb.configure_dex, "uniswap", ROUTER_A, 30, 1, [30])
    chain.transact(ALICE, arb.configure_pool, POOL, 3000, 100, "uniswap")
    assert arb.get_pool_config(POOL) == (True, 3000, 100, ROUTER_A)
    assert arb.registry.is_pool_supported("uniswap", POOL)
    assert chain.events(PoolConfigured)[-1].dex_router == ROUTER_A

    # re-pointing the DEX does not move existing pools
    chain.transact(ALICE, arb.configure_dex, "uniswap", ROUTER_B, 30, 1, [30])
    assert arb.get_pool_config(POOL).dex_router == ROUTER_A


@pytest.mark.parametrize("max_amount, min_amount", [(10, 10), (5, 10), (0, 0)])
def test_configure_token_requires_max_above_min(chain, arb, max_amount, min_amount):
    with pytest.raises(InvalidSetup) as excinfo:
        chain.transact(ALICE, arb.configure_token, TOKEN, max_amount, min_amount, 18)
    assert _setup_code(excinfo) is SetupErrorCode.INVALID_AMOUNTS


def test_configure_token_validation(chain, arb):
    with pytest.raises(InvalidSetup) as excinfo:
        chain.transact(ALICE, arb.configure_token, ZERO_ADDRESS, 10, 1, 18)
    assert _setup_code(excinfo) is SetupErrorCode.ZERO_ADDRESS
    with pytest.raises(InvalidSetup) as excinfo:
        chain.transact(ALICE, arb.configure_token, TOKEN, 10, 1, 19)
    assert _setup_code(excinfo) is SetupErrorCode.INVALID_DECIMALS


def test_configure_token_and_toggle(chain, arb):
    chain.transact(ALICE, arb.configure_token, TOKEN, 1_000, 1, 6)
    assert arb.get_token_config(TOKEN) == (True, 1_000, 1, 6)
    assert chain.events(TokenConfigured)[-1] == TokenConfigured(TOKEN, 1_000, 1, 6)

    chain.transact(ALICE, arb.set_token_enabled, TOKEN, False)
    assert arb.get_token_config(TOKEN).is_enabled is False
    chain.transact(ALICE, arb.set_token_enabled, TOKEN, True)
    assert arb.get_token_config(TOKEN).is_enabled is True


def test_toggles_require_existing_entries(chain, arb):
    with pytest.raises(InvalidSetup) as excinfo:
        chain.transact(ALICE, arb.set_dex_enabled, "uniswap", True)
    assert _setup_code(excinfo) is SetupErrorCode.NOT_CONFIGURED
    with pytest.raises(InvalidSetup) as excinfo:
        chain.transact(ALICE, arb.set_token_enabled, TOKEN, True)
    assert _setup_code(excinfo) is SetupErrorCode.NOT_CONFIGURED


def test_views_are_idempotent(chain, arb):
    chain.transact(ALICE, arb.configure_dex, "uniswap", ROUTER_A, 30, 1, [30])
    chain.transact(ALICE, arb.configure_pool, POOL, 30, 100, "uniswap")
    chain.transact(ALICE, arb.configure_token, TOKEN, 10, 1, 18)
    for view, key in (
        (arb.get_dex_config, "uniswap"),
        (arb.get_pool_config, POOL),
        (arb.get_token_config, TOKEN),
    ):
        assert view(key) == view(key)


def test_configuration_is_owner_only(chain, arb):
    with pytest.raises(Revert, match="caller is not the owner"):
        chain.transact(BOB, arb.configure_dex, "uniswap", ROUTER_A, 30, 1, [30])
    with pytest.raises(Revert, match="caller is not the owner"):
        chain.transact(BOB, arb.configure_token, TOKEN, 10, 1, 18)
    assert arb.get_dex_config("uniswap").is_enabled is False


def test_set_router_addresses(chain, arb):
    with pytest.raises(InvalidSetup):
        chain.transact(ALICE, arb.set_router_addresses, ZERO_ADDRESS, ROUTER_B)
    chain.transact(ALICE, arb.set_router_addresses, ROUTER_A, ROUTER_B)
    assert (arb.uniswap_router_address, arb.trader_joe_router_address) == (ROUTER_A, ROUTER_B)


def test_reconfiguring_dex_merges_fee_tiers():
    registry = ConfigurationRegistry()
    registry.configure_dex("uniswap", ROUTER_A, 30, 1, [1, 5])
    registry.configure_dex("uniswap", ROUTER_A, 30, 1, [30])
    assert registry.dex("uniswap").supported_fee_tiers == {1, 5, 30}
