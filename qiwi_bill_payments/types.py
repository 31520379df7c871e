"""Type definitions for QIWI Bill Payments SDK."""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol


def _node(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key)
    return None


@dataclass
class BillAmount:
    """Bill amount as received from QIWI."""
    value: Optional[Any] = None
    currency: Optional[Any] = None


@dataclass
class Notification:
    """
    Bill status notification (webhook body).

    Fields keep their raw JSON values. Any field missing from the payload,
    or set to null, is ``None``.
    """
    bill_id: Optional[Any] = None
    amount: BillAmount = field(default_factory=BillAmount)
    site_id: Optional[Any] = None
    status: Optional[Any] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Notification":
        """Build from a decoded webhook body, tolerating any shape."""
        bill = _node(payload, "bill")
        amount = _node(bill, "amount")
        return cls(
            bill_id=_node(bill, "billId"),
            amount=BillAmount(
                value=_node(amount, "value"),
                currency=_node(amount, "currency"),
            ),
            site_id=_node(bill, "siteId"),
            status=_node(_node(bill, "status"), "value"),
        )


class Logger(Protocol):
    """Logger protocol."""
    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def info(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
