"""
Contract ABI codec for the Payra core and forward contracts.

The codec is purely deterministic: it turns a function name plus Python values
into call data (4-byte selector followed by the ABI-encoded arguments) and
turns raw return bytes back into Python values. It never touches the network.
"""

from __future__ import annotations

import json
from importlib import resources
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError as AbiDecodingError
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_utils import keccak, to_checksum_address

from .errors import DecodingError, EncodingError

__all__ = [
    "ContractInterface",
    "FORWARD_ABI",
    "FORWARD_INTERFACE",
    "load_core_interface",
]

FORWARD_ABI: List[Dict[str, Any]] = [
    {
        "type": "function",
        "name": "forward",
        "stateMutability": "payable",
        "inputs": [{"name": "data", "type": "bytes"}],
        "outputs": [{"name": "", "type": "bytes"}],
    }
]


def _canonical_type(param: Mapping[str, Any]) -> str:
    """Expand ``tuple`` parameters into ``(t1,t2,...)`` form, keeping array suffixes."""
    abi_type = param["type"]
    if not abi_type.startswith("tuple"):
        return abi_type
    components = ",".join(_canonical_type(item) for item in param.get("components", []))
    return f"({components}){abi_type[len('tuple'):]}"


def _normalize_value(param: Mapping[str, Any], value: Any) -> Any:
    abi_type = param["type"]
    if abi_type.endswith("]"):
        element = dict(param, type=abi_type[: abi_type.rindex("[")])
        return tuple(_normalize_value(element, item) for item in value)
    if abi_type == "tuple":
        return tuple(
            _normalize_value(component, item)
            for component, item in zip(param["components"], value)
        )
    if abi_type == "address":
        return to_checksum_address(value)
    return value


class ContractInterface:
    """
    Encoder/decoder for the view functions described by a JSON ABI.
    """

    def __init__(self, abi: Sequence[Mapping[str, Any]]) -> None:
        self._functions: Dict[str, Mapping[str, Any]] = {
            entry["name"]: entry for entry in abi if entry.get("type") == "function"
        }

    @property
    def function_names(self) -> Tuple[str, ...]:
        return tuple(self._functions)

    def function(self, name: str) -> Mapping[str, Any]:
        try:
            return self._functions[name]
        except KeyError as exc:
            raise EncodingError(f"Unknown contract function '{name}'") from exc

    def input_types(self, name: str) -> List[str]:
        return [_canonical_type(param) for param in self.function(name)["inputs"]]

    def output_types(self, name: str) -> List[str]:
        return [
            _canonical_type(param) for param in self.function(name).get("outputs", [])
        ]

    def signature(self, name: str) -> str:
        return f"{name}({','.join(self.input_types(name))})"

    def selector(self, name: str) -> bytes:
        return keccak(text=self.signature(name))[:4]

    def encode(self, name: str, args: Sequence[Any]) -> bytes:
        """
        Build call data for ``name`` from ``args``.

        Raises :class:`EncodingError` for unknown functions, a wrong number of
        arguments, or values that do not match the declared types.
        """
        input_types = self.input_types(name)
        args = list(args)
        if len(args) != len(input_types):
            raise EncodingError(
                f"{self.signature(name)} expects {len(input_types)} argument(s), "
                f"got {len(args)}"
            )
        try:
            encoded = abi_encode(input_types, args)
        except (AbiEncodingError, TypeError, ValueError, OverflowError) as exc:
            raise EncodingError(
                f"Cannot encode arguments for {self.signature(name)}: {exc}"
            ) from exc
        return self.selector(name) + encoded

    def decode(self, name: str, raw: bytes) -> Tuple[Any, ...]:
        """
        Decode the return data of ``name``.

        Addresses come back checksummed. Empty, truncated or otherwise
        malformed input raises :class:`DecodingError`.
        """
        try:
            outputs = self.function(name).get("outputs", [])
        except EncodingError as exc:
            raise DecodingError(str(exc)) from exc
        output_types = [_canonical_type(param) for param in outputs]
        if not output_types:
            return tuple()
        if not raw:
            raise DecodingError(f"Empty return data for {self.signature(name)}")
        try:
            decoded = abi_decode(output_types, bytes(raw))
        except (AbiDecodingError, TypeError, ValueError, OverflowError) as exc:
            raise DecodingError(
                f"Cannot decode return data for {self.signature(name)}: {exc}"
            ) from exc
        return tuple(
            _normalize_value(param, value) for param, value in zip(outputs, decoded)
        )


FORWARD_INTERFACE = ContractInterface(FORWARD_ABI)


def load_core_interface() -> ContractInterface:
    """Load the packaged core-contract ABI."""
    source = resources.files("payra_sdk.core").joinpath("contracts").joinpath("payra_abi.json")
    return ContractInterface(json.loads(source.read_text(encoding="utf-8")))
