"""
Public facade for the Payra SDK.

The module re-exports the most useful pieces for integrators so they can
``from payra_sdk import ...`` without navigating the package.
"""

from .api import (
    create_order_client,
    generate_signature,
    get_order_details,
    get_order_status,
    is_order_paid,
)
from .core import (
    DIRECT,
    FORWARD,
    ConfigError,
    ContractCallError,
    DecodingError,
    EncodingError,
    ErrorKind,
    InvalidKey,
    NetworkConfig,
    OrderClient,
    OrderPaidResult,
    OrderStatus,
    OrderStatusResult,
    PayraEnvironment,
    PayraError,
    PayraSettings,
    RpcUnavailable,
    build_environment,
    load_env_file,
    load_settings,
)

__all__ = (
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
)
