"""
Public, high-level helpers for signing and verifying Payra orders.

Each helper accepts an optional pre-built :class:`PayraSettings`; without one
the settings are assembled from the environment (and ``.env``) on every call.
"""

from __future__ import annotations

from typing import Mapping, Optional, Union

import requests

from .core.client import (
    DIRECT,
    FORWARD,
    OrderClient,
    OrderPaidResult,
    OrderStatus,
    OrderStatusResult,
)
from .core.config import NetworkConfig, PayraSettings, load_settings
from .core.environment import PayraEnvironment, build_environment, load_env_file
from .core.errors import (
    ConfigError,
    ContractCallError,
    DecodingError,
    EncodingError,
    ErrorKind,
    InvalidKey,
    PayraError,
    RpcUnavailable,
)
from .core.rpc import EndpointSelector
from .core.signature import generate_signature as _generate_signature

__all__ = [
    "ConfigError",
    "ContractCallError",
    "DIRECT",
    "DecodingError",
    "EncodingError",
    "ErrorKind",
    "FORWARD",
    "InvalidKey",
    "NetworkConfig",
    "OrderClient",
    "OrderPaidResult",
    "OrderStatus",
    "OrderStatusResult",
    "PayraEnvironment",
    "PayraError",
    "PayraSettings",
    "RpcUnavailable",
    "build_environment",
    "create_order_client",
    "generate_signature",
    "get_order_details",
    "get_order_status",
    "is_order_paid",
    "load_env_file",
    "load_settings",
]


def _resolve_settings(
    settings: Optional[PayraSettings],
    env_file: Optional[str],
    overrides: Optional[Mapping[str, str]],
) -> PayraSettings:
    if settings is not None:
        if overrides:
            raise ValueError(
                "Provide either pre-built PayraSettings or overrides, not both."
            )
        return settings
    return load_settings(env_file=env_file, overrides=overrides)


def create_order_client(
    *,
    settings: Optional[PayraSettings] = None,
    session: Optional[requests.Session] = None,
    selector: Optional[EndpointSelector] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
) -> OrderClient:
    """
    Construct an :class:`OrderClient`.

    Callers can either supply ready-made settings or let the helper assemble
    them from environment data.
    """
    cfg = _resolve_settings(settings, env_file, overrides)
    return OrderClient(cfg, session=session, selector=selector)


def generate_signature(
    network: str,
    token_address: str,
    order_id: str,
    amount: Union[int, str],
    timestamp: Union[int, str],
    payer_address: str,
    *,
    settings: Optional[PayraSettings] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Return the ``0x``-prefixed 65-byte authorization signature for an order.

    Configuration and key errors are raised, not wrapped.
    """
    cfg = _resolve_settings(settings, env_file, overrides)
    return _generate_signature(
        network,
        token_address,
        order_id,
        amount,
        timestamp,
        payer_address,
        settings=cfg,
    )


def _client_or_failure(
    settings: Optional[PayraSettings],
    session: Optional[requests.Session],
    env_file: Optional[str],
    overrides: Optional[Mapping[str, str]],
) -> Union[OrderClient, PayraError]:
    try:
        cfg = _resolve_settings(settings, env_file, overrides)
    except ConfigError as exc:
        return exc
    return OrderClient(cfg, session=session)


def is_order_paid(
    network: str,
    order_id: str,
    *,
    topology: str = FORWARD,
    settings: Optional[PayraSettings] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
) -> OrderPaidResult:
    """Check whether ``order_id`` has been paid on ``network``."""
    client = _client_or_failure(settings, session, env_file, overrides)
    if isinstance(client, PayraError):
        return OrderPaidResult.failure(client)
    with client:
        return client.is_order_paid(network, order_id, topology=topology)


def get_order_status(
    network: str,
    order_id: str,
    *,
    topology: str = FORWARD,
    settings: Optional[PayraSettings] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
) -> OrderStatusResult:
    """Fetch settlement details for ``order_id`` through the forward contract."""
    client = _client_or_failure(settings, session, env_file, overrides)
    if isinstance(client, PayraError):
        return OrderStatusResult.failure(client)
    with client:
        return client.get_order_status(network, order_id, topology=topology)


def get_order_details(
    network: str,
    order_id: str,
    *,
    topology: str = DIRECT,
    settings: Optional[PayraSettings] = None,
    session: Optional[requests.Session] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
) -> OrderStatusResult:
    """Fetch settlement details for ``order_id`` from the user-data contract."""
    client = _client_or_failure(settings, session, env_file, overrides)
    if isinstance(client, PayraError):
        return OrderStatusResult.failure(client)
    with client:
        return client.get_order_details(network, order_id, topology=topology)
