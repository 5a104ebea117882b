"""
Top-level CLI dispatcher: settlement-engine <command> [args...].
Runs in script mode: every command resolves prices fresh (no shared cache).
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, List, Optional

from .._version import __version__
from ..core.errors import SettlementEngineError


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _engine() -> Any:
    from ..engine import SettlementEngine

    return SettlementEngine()


def _cmd_price(args: argparse.Namespace) -> int:
    if args.chain_id is None and not (args.symbol or args.coingecko_id):
        print("price needs a symbol, --coingecko-id or --chain-id", file=sys.stderr)
        return 2
    engine = _engine()
    if args.chain_id is not None:
        result = engine.get_native_price(args.chain_id)
        label = f"chain {args.chain_id}"
    else:
        key = args.coingecko_id or args.symbol
        result = engine.get_cached_price(key, symbol=args.symbol, coingecko_id=args.coingecko_id)
        label = key
    if result is None:
        print(f"Unable to fetch price for {label}", file=sys.stderr)
        return 1
    _print(result.to_dict())
    return 0


def _cmd_fee(args: argparse.Namespace) -> int:
    engine = _engine()
    if args.client_fee is not None:
        result = engine.validate_client_fee(args.user, args.amount, args.chain_id, args.client_fee)
        _print(result.to_dict())
        return 0 if result else 2
    if args.amount is None:
        _print(engine.get_fee_info(args.user, args.chain_id).to_dict())
        return 0
    _print(engine.calculate_user_fee(args.user, args.amount, args.chain_id).to_dict())
    return 0


def _cmd_escrow_amounts(args: argparse.Namespace) -> int:
    engine = _engine()
    if args.fee_percentage is not None:
        breakdown = engine.compute_escrow_amounts(args.amount, args.fee_percentage, args.chain_id)
    elif args.user:
        breakdown = engine.compute_user_escrow_amounts(args.user, args.amount, args.chain_id)
    else:
        print("escrow-amounts needs --fee-percentage or --user", file=sys.stderr)
        return 2
    _print(breakdown.to_dict())
    return 0


def _cmd_convert(args: argparse.Namespace) -> int:
    engine = _engine()
    if args.to_usd:
        _print({"usd_amount": str(engine.convert_smallest_unit_to_usd(args.amount, args.chain_id))})
    elif args.smallest_unit:
        _print({"smallest_unit": str(engine.convert_usd_to_smallest_unit(args.amount, args.chain_id))})
    else:
        _print(engine.convert_usd_to_native(args.amount, args.chain_id).to_dict())
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="settlement-engine",
        description="Escrow settlement engine: prices, fees and chain amounts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="DEBUG logging")
    sub = parser.add_subparsers(dest="command", help="command")

    p = sub.add_parser("price", help="USD price via the provider fallback chain")
    p.add_argument("symbol", nargs="?", default=None, help="Ticker symbol, e.g. ETH")
    p.add_argument("--coingecko-id", default=None)
    p.add_argument("--chain-id", type=int, default=None, help="Price the chain's native currency")
    p.set_defaults(func=_cmd_price)

    p = sub.add_parser("fee", help="User fee tier, fee split, or client fee validation")
    p.add_argument("--user", required=True, help="Wallet address")
    p.add_argument("--chain-id", type=int, required=True)
    p.add_argument("--amount", default=None)
    p.add_argument("--client-fee", default=None, help="Validate this fee against the on-chain tier")
    p.set_defaults(func=_cmd_fee)

    p = sub.add_parser("escrow-amounts", help="Base/fee/total in contract and transaction units")
    p.add_argument("amount")
    p.add_argument("--chain-id", type=int, required=True)
    p.add_argument("--fee-percentage", default=None, help="Fraction, e.g. 0.025 for 2.5%%")
    p.add_argument("--user", default=None, help="Use this wallet's on-chain fee tier")
    p.set_defaults(func=_cmd_escrow_amounts)

    p = sub.add_parser("convert", help="USD <-> native conversion")
    p.add_argument("amount")
    p.add_argument("--chain-id", type=int, required=True)
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--smallest-unit", action="store_true", help="USD -> smallest unit integer")
    mode.add_argument("--to-usd", action="store_true", help="Smallest unit -> USD")
    p.set_defaults(func=_cmd_convert)

    sub.add_parser("api", help="Run the REST API (uvicorn)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args, rest = parser.parse_known_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "api":
        from . import api as api_mod

        return api_mod.main(rest)

    if rest:
        parser.error(f"unrecognized arguments: {' '.join(rest)}")
    os.environ.setdefault("IS_SCRIPT", "1")
    try:
        return args.func(args)
    except SettlementEngineError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
