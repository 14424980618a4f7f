"""
Error taxonomy shared by the Payra SDK components.

Every exception raised by the SDK derives from :class:`PayraError` and carries
an :class:`ErrorKind` so callers can branch on the failure category instead of
matching message strings.
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "ErrorKind",
    "PayraError",
    "ConfigError",
    "InvalidKey",
    "RpcUnavailable",
    "EncodingError",
    "DecodingError",
    "ContractCallError",
]


class ErrorKind(str, Enum):
    CONFIG = "config"
    INVALID_KEY = "invalid_key"
    RPC_UNAVAILABLE = "rpc_unavailable"
    ENCODING = "encoding"
    DECODING = "decoding"
    CONTRACT_CALL = "contract_call"


class PayraError(Exception):
    """Base class for all SDK errors."""

    kind: ErrorKind = ErrorKind.CONTRACT_CALL


class ConfigError(PayraError):
    """Raised when the network configuration is missing or invalid."""

    kind = ErrorKind.CONFIG


class InvalidKey(PayraError):
    """Raised when the signing key is not a 32-byte hex string."""

    kind = ErrorKind.INVALID_KEY


class RpcUnavailable(PayraError):
    """Raised when the selected RPC endpoint fails its health probe."""

    kind = ErrorKind.RPC_UNAVAILABLE

    def __init__(self, url: str) -> None:
        super().__init__(f"RPC {url} is not responding")
        self.url = url


class EncodingError(PayraError):
    kind = ErrorKind.ENCODING


class DecodingError(PayraError):
    kind = ErrorKind.DECODING


class ContractCallError(PayraError):
    """Raised when ``eth_call`` reverts or the transport fails."""

    kind = ErrorKind.CONTRACT_CALL
