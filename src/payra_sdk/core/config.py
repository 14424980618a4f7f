"""
Configuration objects for the Payra SDK.

:class:`PayraSettings` is built once by the embedding application and passed
to the clients. :class:`NetworkConfig` is resolved from those settings on
every call and never cached, so a live mapping handed to
:meth:`PayraSettings.from_mapping` is re-read by each operation.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from eth_account import Account
from eth_utils import is_hex_address, to_checksum_address

from .environment import PayraEnvironment, build_environment
from .errors import ConfigError, InvalidKey

__all__ = [
    "ConfigError",
    "InvalidKey",
    "NetworkConfig",
    "PayraSettings",
    "load_settings",
    "network_key",
]

DEFAULT_HEALTH_TIMEOUT_SECONDS = 3.0
DEFAULT_RPC_TIMEOUT_SECONDS = 30.0
DEFAULT_SELECTION = "random"
SELECTION_STRATEGIES = ("random", "round-robin", "priority")

_MAX_UINT256 = 2**256 - 1

_SETTING_TO_ENV_KEY = {
    "health_timeout": "PAYRA_HEALTH_TIMEOUT_SECONDS",
    "rpc_timeout": "PAYRA_RPC_TIMEOUT_SECONDS",
    "selection": "PAYRA_RPC_SELECTION",
}


def network_key(network: str, suffix: str) -> str:
    """Return the store key for ``suffix`` on ``network``, e.g. ``PAYRA_POLYGON_MERCHANT_ID``."""
    return f"PAYRA_{network.upper()}_{suffix}"


def _normalize_network(network: Any) -> str:
    if not isinstance(network, str) or not network.strip():
        raise ConfigError("Network name must be a non-empty string")
    return network.strip().upper()


def _normalize_address(raw_address: str, field_name: str) -> str:
    value = raw_address.strip()
    if not value.startswith("0x"):
        value = "0x" + value
    if not is_hex_address(value):
        raise ConfigError(f"{field_name} is not a valid EVM address")

    return to_checksum_address(value)


def _parse_merchant_id(raw_value: str, field_name: str) -> int:
    try:
        merchant_id = int(raw_value, 10)
    except ValueError as exc:
        raise ConfigError(
            f"{field_name} must be a decimal integer, got '{raw_value}'"
        ) from exc
    if not 0 <= merchant_id <= _MAX_UINT256:
        raise ConfigError(f"{field_name} does not fit into uint256")
    return merchant_id


def _normalize_private_key(raw_key: str, network: str) -> str:
    key = raw_key.strip()
    if key.startswith(("0x", "0X")):
        key = key[2:]
    if len(key) != 64 or any(char not in string.hexdigits for char in key):
        raise InvalidKey(f"Invalid private key for {network.lower()}")
    key = "0x" + key.lower()

    # Zero and keys at or above the curve order are well-formed hex but unusable.
    try:
        Account.from_key(key)
    except ValueError as exc:
        raise InvalidKey(f"Invalid private key for {network.lower()}") from exc
    return key


def _positive_float(raw_value: str, field_name: str) -> float:
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise ConfigError(f"{field_name} must be a number, got '{raw_value}'") from exc
    if value <= 0:
        raise ConfigError(f"{field_name} must be greater than zero")
    return value


@dataclass(frozen=True)
class NetworkConfig:
    """
    Everything the SDK knows about a single network.

    All fields are optional at resolution time. Contract addresses are kept as
    configured; the ``require_*`` helpers validate and checksum the subset a
    given operation depends on.
    """

    network: str
    merchant_id: Optional[int] = None
    forward_contract: Optional[str] = None
    gateway_contract: Optional[str] = None
    rpc_urls: Tuple[str, ...] = ()
    signature_key: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_environment(
        cls, environment: PayraEnvironment, network: str
    ) -> "NetworkConfig":
        net = _normalize_network(network)

        merchant_key = network_key(net, "MERCHANT_ID")
        merchant_raw = environment.get(merchant_key)
        merchant_id = (
            _parse_merchant_id(merchant_raw, merchant_key)
            if merchant_raw is not None
            else None
        )

        return cls(
            network=net,
            merchant_id=merchant_id,
            forward_contract=environment.get(
                network_key(net, "CORE_FORWARD_CONTRACT_ADDRESS")
            ),
            gateway_contract=environment.get(
                network_key(net, "OCP_GATEWAY_CONTRACT_ADDRESS")
            ),
            rpc_urls=tuple(environment.numbered(network_key(net, "RPC_URL_"))),
            signature_key=environment.get(network_key(net, "SIGNATURE_KEY")),
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, str], network: str) -> "NetworkConfig":
        return cls.from_environment(PayraEnvironment(variables=values), network)

    def _ensure_present(self, **fields: Optional[object]) -> None:
        suffixes = {
            "merchant_id": "MERCHANT_ID",
            "forward_contract": "CORE_FORWARD_CONTRACT_ADDRESS",
            "gateway_contract": "OCP_GATEWAY_CONTRACT_ADDRESS",
            "signature_key": "SIGNATURE_KEY",
        }
        missing = [
            network_key(self.network, suffixes[name])
            for name, value in fields.items()
            if value is None
        ]
        if missing:
            raise ConfigError(
                f"Missing Payra config for {self.network}: {', '.join(missing)}"
            )

    def require_rpc_urls(self) -> Tuple[str, ...]:
        if not self.rpc_urls:
            raise ConfigError(f"No RPC URLs found for network: {self.network}")
        return self.rpc_urls

    def require_forwarding(self) -> Tuple[int, str]:
        """
        Return ``(merchant_id, forward_contract)`` with the address checksummed.

        Raises :class:`ConfigError` when either value is missing or the address
        is malformed.
        """
        self._ensure_present(
            merchant_id=self.merchant_id, forward_contract=self.forward_contract
        )
        address = _normalize_address(
            self.forward_contract,  # type: ignore[arg-type]
            network_key(self.network, "CORE_FORWARD_CONTRACT_ADDRESS"),
        )
        return self.merchant_id, address  # type: ignore[return-value]

    def require_gateway(self) -> Tuple[int, str]:
        """Return ``(merchant_id, gateway_contract)`` or raise :class:`ConfigError`."""
        self._ensure_present(
            merchant_id=self.merchant_id, gateway_contract=self.gateway_contract
        )
        address = _normalize_address(
            self.gateway_contract,  # type: ignore[arg-type]
            network_key(self.network, "OCP_GATEWAY_CONTRACT_ADDRESS"),
        )
        return self.merchant_id, address  # type: ignore[return-value]

    def require_signing(self) -> Tuple[str, int]:
        """
        Return ``(private_key, merchant_id)`` for the signature engine.

        The key is returned ``0x``-prefixed and lower-cased. A key that is not
        exactly 32 bytes of hex, or is outside the secp256k1 range, raises
        :class:`InvalidKey`.
        """
        self._ensure_present(
            signature_key=self.signature_key, merchant_id=self.merchant_id
        )
        key = _normalize_private_key(self.signature_key, self.network)  # type: ignore[arg-type]
        return key, self.merchant_id  # type: ignore[return-value]


@dataclass(frozen=True)
class PayraSettings:
    """
    Process-wide SDK settings plus the configuration store they came from.
    """

    environment: PayraEnvironment
    health_timeout: float = DEFAULT_HEALTH_TIMEOUT_SECONDS
    rpc_timeout: float = DEFAULT_RPC_TIMEOUT_SECONDS
    selection: str = DEFAULT_SELECTION

    def network(self, network: str) -> NetworkConfig:
        """Resolve the configuration for ``network`` from the current store."""
        return NetworkConfig.from_environment(self.environment, network)

    @classmethod
    def from_mapping(
        cls, values: Union[Mapping[str, str], PayraEnvironment]
    ) -> "PayraSettings":
        environment = (
            values
            if isinstance(values, PayraEnvironment)
            else PayraEnvironment(variables=values)
        )

        health_raw = environment.get(_SETTING_TO_ENV_KEY["health_timeout"])
        rpc_raw = environment.get(_SETTING_TO_ENV_KEY["rpc_timeout"])
        selection = (
            environment.get(_SETTING_TO_ENV_KEY["selection"], DEFAULT_SELECTION) or ""
        ).lower()
        if selection not in SELECTION_STRATEGIES:
            raise ConfigError(
                f"PAYRA_RPC_SELECTION must be one of {', '.join(SELECTION_STRATEGIES)}, "
                f"got '{selection}'"
            )

        return cls(
            environment=environment,
            health_timeout=(
                _positive_float(health_raw, _SETTING_TO_ENV_KEY["health_timeout"])
                if health_raw is not None
                else DEFAULT_HEALTH_TIMEOUT_SECONDS
            ),
            rpc_timeout=(
                _positive_float(rpc_raw, _SETTING_TO_ENV_KEY["rpc_timeout"])
                if rpc_raw is not None
                else DEFAULT_RPC_TIMEOUT_SECONDS
            ),
            selection=selection,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        health_timeout: Optional[float] = None,
        rpc_timeout: Optional[float] = None,
        selection: Optional[str] = None,
    ) -> "PayraSettings":
        merged_overrides: Dict[str, str] = dict(overrides or {})
        for field_name, value in (
            ("health_timeout", health_timeout),
            ("rpc_timeout", rpc_timeout),
            ("selection", selection),
        ):
            if value is not None:
                merged_overrides[_SETTING_TO_ENV_KEY[field_name]] = str(value)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment)


def load_settings(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    health_timeout: Optional[float] = None,
    rpc_timeout: Optional[float] = None,
    selection: Optional[str] = None,
) -> PayraSettings:
    """
    Convenience wrapper that mirrors :meth:`PayraSettings.from_env`.

    Settings can come from environment variables, a ``.env`` file, explicit
    overrides, or any combination of the three.
    """
    return PayraSettings.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        health_timeout=health_timeout,
        rpc_timeout=rpc_timeout,
        selection=selection,
    )
