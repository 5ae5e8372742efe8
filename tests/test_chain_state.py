import pytest

from chain.contract import Contract
from chain.errors import ChainError, OutOfGas, Revert
from chain.events import Event
from chain.state import Chain
from chain.token import Approval, ERC20Token, Transfer
from conftest import ALICE, BOB
from core.base_types import Address


class Counter(Contract):
    _journal_fields = ("value", "history")

    def __init__(self) -> None:
        super().__init__()
        self.value = 0
        self.history: list[int] = []

    def bump(self, amount: int) -> int:
        self.value += amount
        self.history.append(amount)
        return self.value

    def bump_then_fail(self, amount: int) -> None:
        self.bump(amount)
        raise Revert.with_reason("nope")

    def whoami(self) -> Address:
        return self.msg_sender

    def burn_gas(self, amount: int) -> None:
        self._require_chain().use_gas(amount)
        self.value += 1

    def nested_try(self, other: "Counter") -> bool:
        result = self._require_chain().try_call(self.address, other.bump_then_fail, 5)
        self.value += 100
        return result.success


class BadDeploy(Contract):
    def on_deploy(self, deployer: Address) -> None:
        raise Revert.with_reason("constructor failed")


@pytest.fixture
def counter(chain: Chain) -> Counter:
    c = Counter()
    chain.deploy(c, ALICE)
    return c


def test_deploy_assigns_distinct_addresses(chain):
    first, second = Counter(), Counter()
    a = chain.deploy(first, ALICE)
    b = chain.deploy(second, ALICE)
    assert a != b
    assert chain.code_at(a) is first
    assert chain.code_at(b) is second


def test_deploy_twice_rejected(chain, counter):
    with pytest.raises(ValueError, match="already deployed"):
        chain.deploy(counter, ALICE)


def test_failed_deploy_leaves_no_code(chain):
    contract = BadDeploy()
    with pytest.raises(Revert):
        chain.deploy(contract, ALICE)
    assert contract.address is None


def test_chain_id_must_be_positive():
    with pytest.raises(ValueError):
        Chain(chain_id=0)


def test_msg_sender_follows_frames(chain, counter):
    assert chain.transact(BOB, counter.whoami) == BOB
    with pytest.raises(ChainError):
        _ = chain.msg_sender


def test_revert_rolls_back_storage(chain, counter):
    chain.transact(ALICE, counter.bump, 1)
    with pytest.raises(Revert, match="nope"):
        chain.transact(ALICE, counter.bump_then_fail, 10)
    assert counter.value == 1
    assert counter.history == [1]


def test_try_call_returns_result_instead_of_raising(chain, counter):
    other = Counter()
    chain.deploy(other, ALICE)
    assert chain.transact(ALICE, counter.nested_try, other) is False
    assert other.value == 0
    assert counter.value == 100


def test_try_call_success_value(chain, counter):
    result = chain.try_call(ALICE, counter.bump, 7)
    assert result.success
    assert result.value == 7
    assert result.error is None


def test_transact_cannot_nest(chain, counter):
    class Nester(Contract):
        def go(self) -> None:
            self._require_chain().transact(self.address, counter.bump, 1)

    nester = Nester()
    chain.deploy(nester, ALICE)
    with pytest.raises(ChainError, match="cannot be nested"):
        chain.transact(ALICE, nester.go)


def test_call_requires_deployed_method(chain):
    with pytest.raises(ChainError, match="not a method"):
        chain.transact(ALICE, Counter().bump, 1)


def test_gas_ceiling(chain, counter):
    result = chain.try_call(ALICE, counter.burn_gas, 1_000, gas=500)
    assert not result.success
    assert isinstance(result.error, OutOfGas)
    assert result.revert_data == b""
    assert counter.value == 0

    ok = chain.try_call(ALICE, counter.burn_gas, 400, gas=500)
    assert ok.success
    assert ok.gas_used == 400


def test_raw_call_to_codeless_address_succeeds(chain):
    result = chain.raw_call(ALICE, BOB, b"\x12\x34\x56\x78")
    assert result.success
    assert result.value == b""


def test_raw_call_without_fallback_reverts(chain, counter):
    result = chain.raw_call(ALICE, counter.address, b"\x12\x34\x56\x78")
    assert not result.success
    assert result.revert_data == b""


def test_events_are_rolled_back_with_the_frame(chain, token):
    before = len(chain.logs)
    with pytest.raises(Revert):
        chain.transact(ALICE, token.transfer, BOB, 10**30)
    assert len(chain.logs) == before

    chain.transact(ALICE, token.transfer, BOB, 5)
    transfers = chain.events(Transfer, address=token.address)
    assert transfers[-1] == Transfer(ALICE, BOB, 5)
    assert chain.logs[-1].block_number == chain.block_number


def test_emit_outside_call_rejected(chain):
    with pytest.raises(ChainError):
        chain.emit(Approval(ALICE, BOB, 1))


def test_mine_advances_block_and_time(chain):
    block, ts = chain.block_number, chain.timestamp
    chain.mine(3, seconds=2)
    assert chain.block_number == block + 3
    assert chain.timestamp == ts + 6
    with pytest.raises(ValueError):
        chain.mine(0)


def test_event_topic_is_keccak_of_signature():
    from eth_utils.crypto import keccak

    assert Transfer.topic() == keccak(text="Transfer(address,address,uint256)")
    assert Event.topic() == keccak(text="")


def test_token_transfer_from_uses_allowance(chain, token):
    chain.transact(ALICE, token.approve, BOB, 100)
    chain.transact(BOB, token.transfer_from, ALICE, BOB, 60)
    assert token.allowance(ALICE, BOB) == 40
    assert token.balance_of(BOB) == 60
    with pytest.raises(Revert, match="insufficient allowance"):
        chain.transact(BOB, token.transfer_from, ALICE, BOB, 41)


def test_strict_approve_token(chain):
    strict = ERC20Token("Tether", "USDT", 6, strict_approve=True)
    chain.deploy(strict, ALICE)
    chain.transact(ALICE, strict.approve, BOB, 5)
    with pytest.raises(Revert):
        chain.transact(ALICE, strict.approve, BOB, 10)
    chain.transact(ALICE, strict.approve, BOB, 0)
    chain.transact(ALICE, strict.approve, BOB, 10)
    assert strict.allowance(ALICE, BOB) == 10
