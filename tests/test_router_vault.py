import pytest

from chain import abi
from chain.contract import Contract
from chain.errors import Revert
from chain.revert import decode_revert
from chain.router import SimulatedRouter
from chain.token import ERC20Token
from chain.vault import FlashLoanVault
from conftest import ALICE, BOB
from core.base_types import Address

POOL = Address("0x00000000000000000000000000000000000000a1")


@pytest.fixture
def pair_world(chain):
    usdc = ERC20Token("USD Coin", "USDC", 6)
    wavax = ERC20Token("Wrapped AVAX", "WAVAX", 18)
    router = SimulatedRouter("test")
    for contract in (usdc, wavax, router):
        chain.deploy(contract, ALICE)
    chain.transact(ALICE, router.seed_pool, POOL, usdc, wavax, 2_500_000 * 10**6, 100_000 * 10**18)
    chain.transact(ALICE, usdc.mint, BOB, 1_000 * 10**6)
    chain.transact(BOB, usdc.approve, router.address, 2**256 - 1)
    return usdc, wavax, router


def test_swap_exact_tokens_for_tokens_payload(chain, pair_world):
    usdc, wavax, router = pair_world
    amount = 100 * 10**6
    quote = router.get_amounts_out(amount, [usdc.address, wavax.address])[-1]
    payload = abi.swap_exact_tokens_for_tokens(
        amount, quote, [usdc.address, wavax.address], BOB, chain.timestamp + 60
    )
    result = chain.raw_call(BOB, router.address, payload)
    assert result.success
    assert wavax.balance_of(BOB) == quote
    assert usdc.balance_of(BOB) == 900 * 10**6


def test_exact_input_single_payload(chain, pair_world):
    usdc, wavax, router = pair_world
    payload = abi.exact_input_single(
        usdc.address, wavax.address, 3000, BOB, chain.timestamp + 60, 50 * 10**6, 1
    )
    assert payload[:4] == abi.selector(abi.EXACT_INPUT_SINGLE)
    result = chain.raw_call(BOB, router.address, payload)
    assert result.success
    assert wavax.balance_of(BOB) > 0


def test_minimum_output_enforced(chain, pair_world):
    usdc, wavax, router = pair_world
    payload = abi.exact_input_single(
        usdc.address, wavax.address, 3000, BOB, chain.timestamp + 60, 50 * 10**6, 10**30
    )
    result = chain.raw_call(BOB, router.address, payload)
    assert not result.success
    assert decode_revert(result.revert_data).reason == "Too little received"
    assert usdc.balance_of(BOB) == 1_000 * 10**6


def test_expired_deadline(chain, pair_world):
    usdc, wavax, router = pair_world
    payload = abi.swap_exact_tokens_for_tokens(
        10**6, 0, [usdc.address, wavax.address], BOB, chain.timestamp - 1
    )
    result = chain.raw_call(BOB, router.address, payload)
    assert decode_revert(result.revert_data).reason == "Router: EXPIRED"


def test_unknown_selector_reverts_empty(chain, pair_world):
    _, _, router = pair_world
    result = chain.raw_call(BOB, router.address, b"\xde\xad\xbe\xef")
    assert not result.success
    assert result.revert_data == b""


def test_swap_without_allowance_fails(chain, pair_world):
    usdc, wavax, router = pair_world
    chain.transact(ALICE, usdc.mint, ALICE, 10**6)
    payload = abi.swap_exact_tokens_for_tokens(
        10**6, 0, [usdc.address, wavax.address], ALICE, chain.timestamp + 60
    )
    result = chain.raw_call(ALICE, router.address, payload)
    assert decode_revert(result.revert_data).reason == "ERC20: insufficient allowance"


def test_path_validation():
    with pytest.raises(ValueError, match="two tokens"):
        abi.swap_exact_tokens_for_tokens(1, 0, [POOL], POOL, 0)


class Borrower(Contract):
    _journal_fields = ("calls",)

    def __init__(self, repay: bool = True) -> None:
        super().__init__()
        self.repay = repay
        self.calls: list[tuple] = []

    def receive_flash_loan(self, tokens, amounts, fee_amounts, user_data) -> None:
        chain = self._require_chain()
        self.calls.append((self.msg_sender, tuple(amounts), tuple(fee_amounts), user_data))
        if self.repay:
            token = chain.code_at(tokens[0])
            chain.call(self.address, token.transfer, self.msg_sender, amounts[0] + fee_amounts[0])


@pytest.fixture
def funded_vault(chain, pair_world):
    usdc, _, _ = pair_world
    vault = FlashLoanVault(fee_bps=5)
    chain.deploy(vault, ALICE)
    chain.transact(ALICE, usdc.mint, vault.address, 1_000_000 * 10**6)
    return vault


def test_flash_loan_round_trip(chain, pair_world, funded_vault):
    usdc, _, _ = pair_world
    borrower = Borrower()
    chain.deploy(borrower, ALICE)
    chain.transact(ALICE, usdc.mint, borrower.address, 10 * 10**6)

    chain.transact(ALICE, funded_vault.flash_loan, borrower.address, [usdc.address], [10_000 * 10**6], b"hi")
    sender, amounts, fees, data = borrower.calls[0]
    assert sender == funded_vault.address
    assert amounts == (10_000 * 10**6,)
    assert fees == (5 * 10**6,)
    assert data == b"hi"
    assert usdc.balance_of(funded_vault.address) == 1_000_005 * 10**6


def test_flash_loan_not_repaid(chain, pair_world, funded_vault):
    usdc, _, _ = pair_world
    borrower = Borrower(repay=False)
    chain.deploy(borrower, ALICE)
    with pytest.raises(Revert, match="not repaid"):
        chain.transact(ALICE, funded_vault.flash_loan, borrower.address, [usdc.address], [10**6], b"")
    assert usdc.balance_of(borrower.address) == 0
    assert borrower.calls == []


def test_flash_loan_validation(chain, pair_world, funded_vault):
    usdc, wavax, _ = pair_world
    borrower = Borrower()
    chain.deploy(borrower, ALICE)
    with pytest.raises(Revert, match="length mismatch"):
        chain.transact(ALICE, funded_vault.flash_loan, borrower.address, [usdc.address], [], b"")
    with pytest.raises(Revert, match="insufficient flash loan balance"):
        chain.transact(ALICE, funded_vault.flash_loan, borrower.address, [wavax.address], [1], b"")
    with pytest.raises(Revert, match="cannot receive"):
        chain.transact(ALICE, funded_vault.flash_loan, BOB, [usdc.address], [1], b"")
