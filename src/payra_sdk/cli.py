"""
Command-line interface for signing and verifying Payra orders.
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, Iterable, Sequence, Tuple

from .api import (
    DIRECT,
    FORWARD,
    ConfigError,
    OrderClient,
    PayraError,
    create_order_client,
    load_settings,
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def _unsigned(value: str) -> int:
    try:
        number = int(value, 10)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer") from exc
    if number < 0:
        raise argparse.ArgumentTypeError("Value must not be negative")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payra-sdk",
        description="Sign Payra order authorizations and check order payments",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing PAYRA_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Python logging level (default: WARNING)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    sign = commands.add_parser("sign", help="Generate an order authorization signature")
    sign.add_argument("network", help="Network name, e.g. polygon")
    sign.add_argument("token_address", help="ERC-20 token address")
    sign.add_argument("order_id", help="Merchant order identifier")
    sign.add_argument("amount", type=_unsigned, help="Amount in the token's smallest unit")
    sign.add_argument("timestamp", type=_unsigned, help="Unix timestamp in seconds")
    sign.add_argument("payer_address", help="Payer wallet address")

    paid = commands.add_parser("is-paid", help="Check whether an order has been paid")
    paid.add_argument("network")
    paid.add_argument("order_id")
    paid.add_argument(
        "--direct",
        action="store_true",
        help="Query the user-data contract through the gateway instead of the forward contract",
    )

    status = commands.add_parser("status", help="Fetch order status via the forward contract")
    status.add_argument("network")
    status.add_argument("order_id")

    details = commands.add_parser("details", help="Fetch order details via the gateway registry")
    details.add_argument("network")
    details.add_argument("order_id")
    return parser


def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2))


def _run_command(client: OrderClient, args: argparse.Namespace) -> int:
    if args.command == "sign":
        try:
            signature = client.generate_signature(
                args.network,
                args.token_address,
                args.order_id,
                args.amount,
                args.timestamp,
                args.payer_address,
            )
        except PayraError as exc:
            logging.error("Signature generation failed: %s", exc)
            return 1
        _emit({"signature": signature})
        return 0

    if args.command == "is-paid":
        topology = DIRECT if args.direct else FORWARD
        result = client.is_order_paid(args.network, args.order_id, topology=topology)
    elif args.command == "status":
        result = client.get_order_status(args.network, args.order_id)
    else:
        result = client.get_order_details(args.network, args.order_id)

    _emit(result.as_dict())
    return 0 if result.success else 1


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        settings = load_settings(env_file=args.env_file, overrides=overrides)
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    with create_order_client(settings=settings) as client:
        return _run_command(client, args)
