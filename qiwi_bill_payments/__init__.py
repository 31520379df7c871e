"""QIWI Bill Payments SDK for Python."""

from ._version import __version__
from .client import BillPayments, BILLS_URI, CREATE_URI
from .exceptions import BillPaymentsError
from .types import BillAmount, Notification
from .utils.normalize import (
    generate_id,
    get_lifetime_by_day,
    normalize_amount,
    normalize_date
)
from .utils.signature import check_notification_signature

__all__ = [
    "BillPayments",
    "BillPaymentsError",
    "BillAmount",
    "Notification",
    "BILLS_URI",
    "CREATE_URI",
    "check_notification_signature",
    "generate_id",
    "get_lifetime_by_day",
    "normalize_amount",
    "normalize_date"
]
