"""
Order verification client and its result envelopes.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Sequence, Union

import requests
from eth_utils import to_checksum_address

from .abi import ContractInterface, load_core_interface
from .config import PayraSettings
from .errors import DecodingError, ErrorKind, PayraError
from .pipeline import CallPipeline, DirectPipeline, ForwardingPipeline
from .rpc import EndpointSelector, selector_for
from .signature import generate_signature

__all__ = [
    "FORWARD",
    "DIRECT",
    "OrderClient",
    "OrderPaidResult",
    "OrderStatus",
    "OrderStatusResult",
]

FORWARD = "forward"
DIRECT = "direct"


@dataclass(frozen=True)
class OrderStatus:
    paid: bool
    token: str
    amount: int
    fee: int
    timestamp: int

    @classmethod
    def from_decoded(cls, decoded: Sequence[Any]) -> "OrderStatus":
        """
        Build from the decoded ``getOrderStatus``/``getOrderDetails`` output.

        Accepts either the single-tuple return or the five flattened values.
        """
        values = decoded[0] if len(decoded) == 1 else decoded
        try:
            paid, token, amount, fee, timestamp = values
        except (TypeError, ValueError) as exc:
            raise DecodingError(f"Unexpected order status shape: {decoded!r}") from exc
        return cls(
            paid=bool(paid),
            token=to_checksum_address(token),
            amount=int(amount),
            fee=int(fee),
            timestamp=int(timestamp),
        )


@dataclass(frozen=True)
class OrderPaidResult:
    success: bool
    paid: Optional[bool] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def failure(cls, exc: PayraError) -> "OrderPaidResult":
        return cls(success=False, error=str(exc), error_kind=exc.kind)

    def as_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "paid": self.paid, "error": self.error}


@dataclass(frozen=True)
class OrderStatusResult:
    success: bool
    paid: Optional[bool] = None
    token: Optional[str] = None
    amount: Optional[int] = None
    fee: Optional[int] = None
    timestamp: Optional[int] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def from_status(cls, status: OrderStatus) -> "OrderStatusResult":
        return cls(success=True, **asdict(status))

    @classmethod
    def failure(cls, exc: PayraError) -> "OrderStatusResult":
        return cls(success=False, error=str(exc), error_kind=exc.kind)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "paid": self.paid,
            "token": self.token,
            "amount": self.amount,
            "fee": self.fee,
            "timestamp": self.timestamp,
            "error": self.error,
        }


class OrderClient:
    """
    Facade over the signature engine and both call pipelines.

    Network configuration is resolved from ``settings`` on every call.
    Order lookups never raise :class:`PayraError`; failures come back as
    envelopes with ``success=False``. A session created by the client is
    closed by :meth:`close` (or on leaving a ``with`` block); an injected
    session is left to its owner.
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
        self._owns_session = session is None
        self.session = session or requests.Session()
        selector = selector or selector_for(settings.selection)
        core = core or load_core_interface()
        self._pipelines: Dict[str, CallPipeline] = {
            FORWARD: ForwardingPipeline(
                settings, session=self.session, selector=selector, core=core
            ),
            DIRECT: DirectPipeline(
                settings, session=self.session, selector=selector, core=core
            ),
        }

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "OrderClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def pipeline(self, topology: str = FORWARD) -> CallPipeline:
        try:
            return self._pipelines[topology]
        except KeyError as exc:
            raise ValueError(
                f"Unknown topology '{topology}', expected '{FORWARD}' or '{DIRECT}'"
            ) from exc

    def generate_signature(
        self,
        network: str,
        token_address: str,
        order_id: str,
        amount: Union[int, str],
        timestamp: Union[int, str],
        payer_address: str,
    ) -> str:
        return generate_signature(
            network,
            token_address,
            order_id,
            amount,
            timestamp,
            payer_address,
            settings=self.settings,
        )

    def is_order_paid(
        self, network: str, order_id: str, *, topology: str = FORWARD
    ) -> OrderPaidResult:
        pipeline = self.pipeline(topology)
        try:
            (paid,) = pipeline.merchant_call(network, "isOrderPaid", order_id)
        except PayraError as exc:
            logging.error("isOrderPaid failed: %s", exc)
            return OrderPaidResult.failure(exc)
        return OrderPaidResult(success=True, paid=bool(paid))

    def _order_status(
        self, network: str, order_id: str, function: str, topology: str
    ) -> OrderStatusResult:
        pipeline = self.pipeline(topology)
        try:
            decoded = pipeline.merchant_call(network, function, order_id)
            status = OrderStatus.from_decoded(decoded)
        except PayraError as exc:
            logging.error("%s failed: %s", function, exc)
            return OrderStatusResult.failure(exc)
        return OrderStatusResult.from_status(status)

    def get_order_status(
        self, network: str, order_id: str, *, topology: str = FORWARD
    ) -> OrderStatusResult:
        """Settlement details via ``getOrderStatus`` (forward contract by default)."""
        return self._order_status(network, order_id, "getOrderStatus", topology)

    def get_order_details(
        self, network: str, order_id: str, *, topology: str = DIRECT
    ) -> OrderStatusResult:
        """Settlement details via ``getOrderDetails`` (user-data contract by default)."""
        return self._order_status(network, order_id, "getOrderDetails", topology)
