"""
Core primitives: configuration, ABI codec, RPC pipelines and signatures.
"""

from .abi import FORWARD_INTERFACE, ContractInterface, load_core_interface
from .client import (
    DIRECT,
    FORWARD,
    OrderClient,
    OrderPaidResult,
    OrderStatus,
    OrderStatusResult,
)
from .config import NetworkConfig, PayraSettings, load_settings
from .environment import PayraEnvironment, build_environment, load_env_file
from .errors import (
    ConfigError,
    ContractCallError,
    DecodingError,
    EncodingError,
    ErrorKind,
    InvalidKey,
    PayraError,
    RpcUnavailable,
)
from .pipeline import CallPipeline, DirectPipeline, ForwardingPipeline
from .rpc import (
    EndpointSelector,
    JsonRpcTransport,
    PrioritySelector,
    RandomSelector,
    RoundRobinSelector,
    check_rpc_health,
    select_endpoint,
)
from .signature import authorization_hash, generate_signature, sign_order, signing_digest

__all__ = [
    "CallPipeline",
    "ConfigError",
    "ContractCallError",
    "ContractInterface",
    "DIRECT",
    "DecodingError",
    "DirectPipeline",
    "EncodingError",
    "EndpointSelector",
    "ErrorKind",
    "FORWARD",
    "FORWARD_INTERFACE",
    "ForwardingPipeline",
    "InvalidKey",
    "JsonRpcTransport",
    "NetworkConfig",
    "OrderClient",
    "OrderPaidResult",
    "OrderStatus",
    "OrderStatusResult",
    "PayraEnvironment",
    "PayraError",
    "PayraSettings",
    "PrioritySelector",
    "RandomSelector",
    "RoundRobinSelector",
    "RpcUnavailable",
    "authorization_hash",
    "build_environment",
    "check_rpc_health",
    "generate_signature",
    "load_core_interface",
    "load_env_file",
    "load_settings",
    "select_endpoint",
    "sign_order",
    "signing_digest",
]
