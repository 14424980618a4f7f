"""
Read-only call pipelines for the two Payra deployment topologies.

``ForwardingPipeline`` wraps the core-contract call in ``forward(bytes)`` and
sends it to the forward contract. ``DirectPipeline`` asks the gateway for the
user-data contract address and calls that contract directly. Both decode the
result with the core function's own output schema, and each step only runs if
the previous one succeeded.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence, Tuple

import requests

from .abi import FORWARD_INTERFACE, ContractInterface, load_core_interface
from .config import NetworkConfig, PayraSettings
from .errors import DecodingError
from .rpc import EndpointSelector, JsonRpcTransport, select_endpoint, selector_for

__all__ = ["CallPipeline", "DirectPipeline", "ForwardingPipeline"]

logger = logging.getLogger(__name__)

USER_DATA_REGISTRY_INDEX = 2


class CallPipeline(ABC):
    """
    Shared plumbing: config resolution, endpoint selection and transport.
    """

    def __init__(
        self,
        settings: PayraSettings,
        *,
        session: Optional[requests.Session] = None,
        selector: Optional[EndpointSelector] = None,
        core: Optional[ContractInterface] = None,
    ) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.selector = selector or selector_for(settings.selection)
        self.core = core or load_core_interface()

    def _connect(self, config: NetworkConfig) -> JsonRpcTransport:
        url = select_endpoint(
            self.session,
            config.network,
            config.require_rpc_urls(),
            self.selector,
            timeout=self.settings.health_timeout,
        )
        logger.debug("Using RPC %s for %s", url, config.network)
        return JsonRpcTransport(self.session, url, timeout=self.settings.rpc_timeout)

    @abstractmethod
    def _contract_address(self, config: NetworkConfig) -> str:
        raise NotImplementedError

    @abstractmethod
    def _execute(
        self, config: NetworkConfig, function: str, args: Sequence[Any]
    ) -> Tuple[Any, ...]:
        raise NotImplementedError

    def call(self, network: str, function: str, args: Sequence[Any]) -> Tuple[Any, ...]:
        """Run ``function(*args)`` on ``network`` and return the decoded outputs."""
        config = self.settings.network(network)
        return self._execute(config, function, args)

    def merchant_call(
        self, network: str, function: str, *args: Any
    ) -> Tuple[Any, ...]:
        """
        Like :meth:`call`, with the network's merchant id as the first argument.
        """
        config = self.settings.network(network)
        return self._execute(config, function, (config.merchant_id, *args))


class ForwardingPipeline(CallPipeline):
    """Route core calls through ``forward(bytes)`` on the forward contract."""

    def _contract_address(self, config: NetworkConfig) -> str:
        _, forward_contract = config.require_forwarding()
        return forward_contract

    def _execute(
        self, config: NetworkConfig, function: str, args: Sequence[Any]
    ) -> Tuple[Any, ...]:
        forward_contract = self._contract_address(config)
        transport = self._connect(config)

        inner = self.core.encode(function, args)
        outer = FORWARD_INTERFACE.encode("forward", [inner])
        raw = transport.call(forward_contract, outer)

        (payload,) = FORWARD_INTERFACE.decode("forward", raw)
        return self.core.decode(function, payload)


class DirectPipeline(CallPipeline):
    """Resolve the user-data contract through the gateway and call it directly."""

    def _contract_address(self, config: NetworkConfig) -> str:
        _, gateway_contract = config.require_gateway()
        return gateway_contract

    def resolve_user_data_contract(
        self, transport: JsonRpcTransport, gateway_contract: str
    ) -> str:
        raw = transport.call(
            gateway_contract, self.core.encode("getRegistryDetails", [])
        )
        registry = self.core.decode("getRegistryDetails", raw)
        if len(registry) <= USER_DATA_REGISTRY_INDEX:
            raise DecodingError("getRegistryDetails returned too few addresses")
        return registry[USER_DATA_REGISTRY_INDEX]

    def _execute(
        self, config: NetworkConfig, function: str, args: Sequence[Any]
    ) -> Tuple[Any, ...]:
        gateway_contract = self._contract_address(config)
        transport = self._connect(config)

        user_data_contract = self.resolve_user_data_contract(transport, gateway_contract)
        logger.debug("Resolved user data contract %s", user_data_contract)

        raw = transport.call(user_data_contract, self.core.encode(function, args))
        return self.core.decode(function, raw)
