"""CLI entrypoint for the flash-loan arbitrage simulator."""

from __future__ import annotations

import argparse
import logging
import sys
from decimal import InvalidOperation
from typing import Optional, Sequence

from arbitrage.errors import ALL_ERRORS
from chain.revert import decode_revert
from config import Settings, load_settings
from core.base_types import TokenAmount
from core.serializer import CanonicalSerializer
from deployment import (
    build_world,
    check_allowances,
    plan_round_trip,
    verify_configuration,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Flash-loan cross-DEX arbitrage simulator")
    subparsers = parser.add_subparsers(dest="command")

    simulate = subparsers.add_parser(
        "simulate", help="Run one flash-loan round trip on a simulated Avalanche world"
    )
    simulate.add_argument(
        "--amount", default=None, help="USDC to borrow, human units (default: TRADE_SIZE)"
    )
    simulate.add_argument(
        "--test-mode",
        action="store_true",
        default=None,
        help="Accept unprofitable trades and cover shortfalls from the owner",
    )
    simulate.add_argument(
        "--skew-bps",
        type=int,
        default=200,
        help="How much richer Trader Joe prices WAVAX than Uniswap, in bps",
    )

    subparsers.add_parser("verify", help="Bootstrap a deployment and verify its configuration")

    decode = subparsers.add_parser("decode-revert", help="Classify raw revert data")
    decode.add_argument("data", help="Revert data as hex")

    subparsers.add_parser("selectors", help="List custom error selectors")

    parser.set_defaults(command="simulate")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entrypoint for `flash-arb`."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        if args.command == "decode-revert":
            info = decode_revert(_parse_hex_data(args.data))
            _print_json(
                {
                    "kind": info.kind,
                    "description": info.describe(),
                    "reason": info.reason,
                    "panic_code": info.panic_code,
                    "selector": info.selector,
                    "name": info.name,
                    "args": list(info.args),
                }
            )
            return

        if args.command == "selectors":
            for error_type in ALL_ERRORS:
                print(f"0x{error_type.selector().hex()} {error_type.signature}")
            return

        if args.command == "verify":
            world = build_world(settings)
            report = verify_configuration(world.contract)
            allowances = check_allowances(
                world.contract,
                world.token_addresses().values(),
                world.router_addresses().values(),
                owner=world.owner,
            )
            _print_json({"report": report, "ok": report.ok, "allowances": allowances})
            return

        if args.command == "simulate":
            _print_json(_simulate(settings, args.amount, args.test_mode, args.skew_bps))
            return
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(2)


def _simulate(
    settings: Settings,
    amount: Optional[str],
    test_mode: Optional[bool],
    skew_bps: int,
) -> dict:
    world = build_world(settings, skew_bps=skew_bps)
    usdc = world.tokens["USDC"]
    raw_amount = _parse_amount(amount or settings.trade_size, usdc.decimals)
    use_test_mode = settings.test_mode if test_mode is None else test_mode

    plan = plan_round_trip(world, raw_amount, test_mode=use_test_mode)
    log_start = len(world.chain.logs)
    balance = world.chain.transact(
        world.owner, world.contract.execute_flash_loan_arbitrage, **plan
    )
    return {
        "amount": usdc.amount(raw_amount),
        "test_mode": use_test_mode,
        "expected_first_output": plan["expected_first_output"],
        "expected_second_output": plan["expected_second_output"],
        "contract_balance": usdc.amount(balance),
        "stats": world.contract.get_contract_stats()._asdict(),
        "metrics": world.contract.get_metrics(),
        "events": [entry.to_record() for entry in world.chain.logs[log_start:]],
    }


def _parse_amount(value: str, decimals: int) -> int:
    try:
        return TokenAmount.from_human(value, decimals).raw
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {value!r}") from exc


def _print_json(payload: object) -> None:
    print(CanonicalSerializer.serialize(payload).decode("utf-8"))


def _parse_hex_data(value: str) -> bytes:
    normalized = value[2:] if value.startswith("0x") else value
    if normalized == "":
        return b""
    try:
        return bytes.fromhex(normalized)
    except ValueError as exc:
        raise ValueError("data must be valid hex") from exc


if __name__ == "__main__":
    main()
