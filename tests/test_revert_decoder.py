import pytest
from eth_utils.crypto import keccak

from arbitrage.errors import (
    FirstSwapFailed,
    InvalidSetup,
    NoIntermediateTokens,
    SetupErrorCode,
)
from chain.errors import (
    ERROR_STRING_SELECTOR,
    PANIC_SELECTOR,
    ContractError,
    OutOfGas,
    Revert,
)
from chain.revert import RevertKind, decode_revert, known_errors


def test_reason_string():
    info = decode_revert(Revert.with_reason("Router: EXPIRED").data)
    assert info.kind is RevertKind.REASON_STRING
    assert info.reason == "Router: EXPIRED"
    assert info.selector == ERROR_STRING_SELECTOR
    assert info.describe() == "Router: EXPIRED"


def test_error_string_selector_value():
    assert ERROR_STRING_SELECTOR.hex() == "08c379a0"
    assert PANIC_SELECTOR.hex() == "4e487b71"


def test_panic_code():
    info = decode_revert(Revert.panic(0x11).data)
    assert info.kind is RevertKind.PANIC_CODE
    assert info.panic_code == 0x11
    assert info.describe() == "Panic(0x11): arithmetic overflow or underflow"


def test_unknown_panic_code_named_generically():
    info = decode_revert(Revert.panic(0x99).data)
    assert info.describe() == "Panic(0x99): unknown panic"


def test_registered_custom_error_without_args():
    info = decode_revert(NoIntermediateTokens().data)
    assert info.kind is RevertKind.RAW_SELECTOR
    assert info.selector == keccak(text="NoIntermediateTokens()")[:4]
    assert info.name == "NoIntermediateTokens"
    assert info.describe() == "NoIntermediateTokens()"


def test_registered_custom_error_with_args():
    info = decode_revert(FirstSwapFailed("Too little received").data)
    assert info.name == "FirstSwapFailed"
    assert info.args == ("Too little received",)
    assert info.describe() == "FirstSwapFailed(Too little received)"


def test_invalid_setup_carries_code():
    error = InvalidSetup(SetupErrorCode.INVALID_FEE)
    assert error.code is SetupErrorCode.INVALID_FEE
    info = decode_revert(error.data)
    assert info.args == (3,)


def test_unregistered_selector_is_raw():
    data = bytes.fromhex("deadbeef") + b"\x00" * 32
    info = decode_revert(data)
    assert info.kind is RevertKind.RAW_SELECTOR
    assert info.name is None
    assert info.describe() == "Custom error 0xdeadbeef"


@pytest.mark.parametrize("data", [b"", b"\x01\x02"])
def test_short_payload_is_unknown(data):
    info = decode_revert(data)
    assert info.kind is RevertKind.UNKNOWN
    assert info.describe() == "Unknown error"


def test_truncated_reason_string_falls_back_to_raw():
    info = decode_revert(ERROR_STRING_SELECTOR + b"\x00" * 3)
    assert info.kind is RevertKind.RAW_SELECTOR


def test_out_of_gas_has_empty_data():
    error = OutOfGas(100, 150)
    assert error.data == b""
    assert decode_revert(error.data).kind is RevertKind.UNKNOWN


def test_all_contract_errors_registered():
    registry = known_errors()
    assert registry[NoIntermediateTokens.selector()] is NoIntermediateTokens
    assert registry[InvalidSetup.selector()] is InvalidSetup


def test_contract_error_arity_checked():
    with pytest.raises(TypeError, match="expects 1 args"):
        FirstSwapFailed()


def test_contract_error_is_a_revert():
    class Custom(ContractError):
        signature = "Custom(uint256,address)"

    assert Custom.arg_types() == ["uint256", "address"]
    assert Custom.error_name() == "Custom"
    assert isinstance(Custom(1, "0x0000000000000000000000000000000000000001"), Revert)
