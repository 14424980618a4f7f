"""
Minimal script that signs an order and checks its payment status through the SDK API.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Iterable, Tuple

from payra_sdk import (
    ConfigError,
    OrderClient,
    PayraError,
    create_order_client,
    load_settings,
)


def _override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _build_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sign and verify a Payra order using the SDK API")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing PAYRA_* settings",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument("--network", default="polygon", help="Network name (default: polygon)")
    parser.add_argument(
        "--token-address",
        default="0xc2132D05D31c914a87C6611C10748AEb04B58e8F",
        help="Token the payer will use (default: USDT on Polygon)",
    )
    parser.add_argument("--order-id", default="ORDER-1", help="Merchant order identifier")
    parser.add_argument(
        "--amount",
        type=int,
        default=12340000,
        help="Amount in the token's smallest unit",
    )
    parser.add_argument(
        "--payer-address",
        default="0x1111111111111111111111111111111111111111",
        help="Payer wallet address",
    )
    parser.add_argument(
        "--sign-only",
        action="store_true",
        help="Print the signature and skip the on-chain lookup",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        settings = load_settings(
            env_file=args.env_file,
            overrides=_build_overrides(args.set or ()),
        )
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    with create_order_client(settings=settings) as client:
        return _check_order(client, args)


def _check_order(client: OrderClient, args: argparse.Namespace) -> int:
    try:
        signature = client.generate_signature(
            args.network,
            args.token_address,
            args.order_id,
            args.amount,
            int(time.time()),
            args.payer_address,
        )
    except PayraError as exc:
        logging.error("Signature generation failed: %s", exc)
        return 1
    logging.info("Signature for %s: %s", args.order_id, signature)

    if args.sign_only:
        return 0

    paid = client.is_order_paid(args.network, args.order_id)
    if not paid.success:
        logging.error("isOrderPaid failed: %s", paid.error)
        return 1
    logging.info("Order %s paid: %s", args.order_id, paid.paid)

    status = client.get_order_status(args.network, args.order_id)
    if not status.success:
        logging.error("getOrderStatus failed: %s", status.error)
        return 1

    logging.info(
        "Order %s settled %s of token %s (fee %s) at %s",
        args.order_id,
        status.amount,
        status.token,
        status.fee,
        status.timestamp,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
