"""
JSON-RPC helpers: endpoint selection, liveness probing and read-only calls.

Selection is single-shot. One endpoint is picked, probed with
``eth_blockNumber`` and either used or rejected; there is no fallback to a
second candidate within the same operation.
"""

from __future__ import annotations

import json
import logging
import random
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

import requests
from hexbytes import HexBytes

from .config import DEFAULT_HEALTH_TIMEOUT_SECONDS, DEFAULT_RPC_TIMEOUT_SECONDS
from .errors import ConfigError, ContractCallError, RpcUnavailable

__all__ = [
    "EndpointSelector",
    "JsonRpcTransport",
    "PrioritySelector",
    "RandomSelector",
    "RoundRobinSelector",
    "check_rpc_health",
    "select_endpoint",
    "selector_for",
]

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}


def _rpc_body(method: str, params: Sequence[Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "method": method, "id": 1, "params": list(params)}


class EndpointSelector(ABC):
    """Strategy that picks one RPC URL out of the configured candidates."""

    @abstractmethod
    def select(self, network: str, urls: Sequence[str]) -> str:
        raise NotImplementedError


class RandomSelector(EndpointSelector):
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def select(self, network: str, urls: Sequence[str]) -> str:
        return self._rng.choice(list(urls))


class RoundRobinSelector(EndpointSelector):
    """Cycle through the candidates, keeping one cursor per network."""

    def __init__(self) -> None:
        self._cursors: Dict[str, int] = {}
        self._lock = threading.Lock()

    def select(self, network: str, urls: Sequence[str]) -> str:
        with self._lock:
            index = self._cursors.get(network, 0)
            self._cursors[network] = index + 1
        return urls[index % len(urls)]


class PrioritySelector(EndpointSelector):
    """Always use the first configured endpoint."""

    def select(self, network: str, urls: Sequence[str]) -> str:
        return urls[0]


_SELECTORS = {
    "random": RandomSelector,
    "round-robin": RoundRobinSelector,
    "priority": PrioritySelector,
}


def selector_for(name: str) -> EndpointSelector:
    try:
        return _SELECTORS[name.lower()]()
    except KeyError as exc:
        raise ConfigError(f"Unknown RPC selection strategy '{name}'") from exc


def check_rpc_health(
    session: requests.Session,
    url: str,
    *,
    timeout: float = DEFAULT_HEALTH_TIMEOUT_SECONDS,
) -> bool:
    """
    Return ``True`` when ``url`` answers ``eth_blockNumber`` within ``timeout``.

    The endpoint is healthy only if the request succeeds with HTTP 200 and the
    JSON body carries a string ``result``.
    """
    try:
        response = session.post(
            url,
            json=_rpc_body("eth_blockNumber", []),
            headers=_JSON_HEADERS,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        logger.warning("RPC %s failed: %s", url, exc)
        return False

    if response.status_code != 200:
        logger.warning("RPC %s failed: HTTP %s", url, response.status_code)
        return False

    try:
        payload = response.json()
    except ValueError:
        logger.warning("RPC %s failed: response is not JSON", url)
        return False

    return isinstance(payload, dict) and isinstance(payload.get("result"), str)


def select_endpoint(
    session: requests.Session,
    network: str,
    urls: Sequence[str],
    selector: EndpointSelector,
    *,
    timeout: float = DEFAULT_HEALTH_TIMEOUT_SECONDS,
) -> str:
    """
    Pick one endpoint for ``network`` and confirm it is alive.

    Raises :class:`ConfigError` when no URL is configured and
    :class:`RpcUnavailable` when the chosen URL fails its probe.
    """
    if not urls:
        raise ConfigError(f"No RPC URLs found for network: {network}")

    url = selector.select(network, urls)
    if not check_rpc_health(session, url, timeout=timeout):
        raise RpcUnavailable(url)
    return url


class JsonRpcTransport:
    """
    Minimal ``eth_call`` client bound to one endpoint.
    """

    def __init__(
        self,
        session: requests.Session,
        url: str,
        *,
        timeout: float = DEFAULT_RPC_TIMEOUT_SECONDS,
    ) -> None:
        self.session = session
        self.url = url
        self.timeout = timeout

    def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.post(
                self.url, json=body, headers=_JSON_HEADERS, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise ContractCallError(f"RPC request to {self.url} failed: {exc}") from exc

        if response.status_code != 200:
            raise ContractCallError(
                f"RPC {self.url} responded with {response.status_code}: {response.text}"
            )
        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise ContractCallError(
                f"Failed to parse JSON from RPC {self.url}: {response.text}"
            ) from exc
        if not isinstance(payload, dict):
            raise ContractCallError(f"Unexpected JSON-RPC payload from {self.url}")
        return payload

    def call(self, to: str, data: bytes, *, block: str = "latest") -> HexBytes:
        """
        Execute a read-only ``eth_call`` against ``to`` and return the raw bytes.

        A JSON-RPC ``error`` member (for example a revert) raises
        :class:`ContractCallError` carrying the node's message and revert data.
        """
        params = [{"to": to, "data": "0x" + bytes(data).hex()}, block]
        payload = self._post(_rpc_body("eth_call", params))

        error = payload.get("error")
        if error is not None:
            if isinstance(error, dict):
                message = error.get("message", "execution reverted")
                revert_data = error.get("data")
                if revert_data:
                    message = f"{message} (data: {revert_data})"
            else:
                message = str(error)
            raise ContractCallError(f"eth_call to {to} failed: {message}")

        result = payload.get("result")
        if not isinstance(result, str):
            raise ContractCallError(f"eth_call to {to} returned no result")
        try:
            return HexBytes(result)
        except ValueError as exc:
            raise ContractCallError(
                f"eth_call to {to} returned malformed hex: {result}"
            ) from exc
