"""
Order authorization signatures.

The digest layout is shared with the on-chain verifier and must not drift:

1. ``abi.encode(address token, uint256 merchantId, string orderId,
   uint256 amount, uint256 timestamp, address payer)``
2. ``hash = keccak256(encoded)``
3. ``digest = keccak256("\\x19Ethereum Signed Message:\\n32" || hash)``
4. recoverable secp256k1 signature over ``digest``, serialized as
   ``0x || r (32 bytes) || s (32 bytes) || v (1 byte)``.

No network I/O happens here.
"""

from __future__ import annotations

from typing import Optional, Union

from eth_abi import encode as abi_encode
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_account import Account
from eth_utils import is_hex_address, keccak, to_checksum_address

from .config import NetworkConfig, PayraSettings
from .errors import EncodingError

__all__ = [
    "AUTHORIZATION_TYPES",
    "SIGNED_MESSAGE_PREFIX",
    "authorization_hash",
    "generate_signature",
    "sign_order",
    "signing_digest",
]

AUTHORIZATION_TYPES = ("address", "uint256", "string", "uint256", "uint256", "address")

# "32" is the length of the keccak256 hash being signed, never the input length.
SIGNED_MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n32"


def _checksum(address: str, field_name: str) -> str:
    if not isinstance(address, str) or not is_hex_address(address):
        raise EncodingError(f"{field_name} is not a valid EVM address: {address!r}")
    return to_checksum_address(address)


def _uint(value: Union[int, str], field_name: str) -> int:
    # int() would truncate floats and coerce bools.
    if isinstance(value, bool):
        raise EncodingError(f"{field_name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    text = value.strip() if isinstance(value, str) else ""
    if text.isascii() and text.isdigit():
        return int(text, 10)
    raise EncodingError(f"{field_name} must be an integer or decimal string, got {value!r}")


def authorization_hash(
    token_address: str,
    merchant_id: Union[int, str],
    order_id: str,
    amount: Union[int, str],
    timestamp: Union[int, str],
    payer_address: str,
) -> bytes:
    """Return ``keccak256`` of the ABI-encoded authorization tuple."""
    token = _checksum(token_address, "token_address")
    payer = _checksum(payer_address, "payer_address")
    values = [
        token,
        _uint(merchant_id, "merchant_id"),
        order_id,
        _uint(amount, "amount"),
        _uint(timestamp, "timestamp"),
        payer,
    ]
    try:
        encoded = abi_encode(list(AUTHORIZATION_TYPES), values)
    except (AbiEncodingError, TypeError, ValueError) as exc:
        raise EncodingError(f"Cannot encode authorization payload: {exc}") from exc
    return keccak(encoded)


def signing_digest(message_hash: bytes) -> bytes:
    """Apply the Ethereum signed-message prefix to a 32-byte hash."""
    if len(message_hash) != 32:
        raise EncodingError("Signed-message digest expects a 32-byte hash")
    return keccak(SIGNED_MESSAGE_PREFIX + bytes(message_hash))


def sign_order(
    config: NetworkConfig,
    token_address: str,
    order_id: str,
    amount: Union[int, str],
    timestamp: Union[int, str],
    payer_address: str,
) -> str:
    """
    Sign an order authorization with the network's signing key.

    Raises :class:`ConfigError` when the key or merchant id is missing,
    :class:`InvalidKey` when the key is malformed and :class:`EncodingError`
    when the payload cannot be encoded.
    """
    private_key, merchant_id = config.require_signing()

    message_hash = authorization_hash(
        token_address, merchant_id, order_id, amount, timestamp, payer_address
    )
    signed = Account.unsafe_sign_hash(signing_digest(message_hash), private_key)

    return (
        "0x"
        + signed.r.to_bytes(32, "big").hex()
        + signed.s.to_bytes(32, "big").hex()
        + format(signed.v, "02x")
    )


def generate_signature(
    network: str,
    token_address: str,
    order_id: str,
    amount: Union[int, str],
    timestamp: Union[int, str],
    payer_address: str,
    *,
    settings: Optional[PayraSettings] = None,
) -> str:
    """
    Resolve ``network`` from ``settings`` and sign the order authorization.

    Errors propagate to the caller; there is no result envelope here.
    """
    settings = settings if settings is not None else PayraSettings.from_env()
    return sign_order(
        settings.network(network),
        token_address,
        order_id,
        amount,
        timestamp,
        payer_address,
    )
