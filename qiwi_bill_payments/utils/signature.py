"""HMAC signature verification for bill notifications."""

import hmac
import hashlib
from typing import Any, Dict, Union

from ..types import Notification
from .normalize import normalize_amount

VALUE_SEPARATOR = "|"
DEFAULT_ALGORITHM = hashlib.sha256


def _stringify(value: Any) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (str, int, float)):
        return str(value)
    return ""


def canonical_fields(notification_body: Any) -> Dict[str, str]:
    """
    Extract the signed fields of a notification.

    Missing values become empty strings, a missing amount becomes "0".
    """
    notification = Notification.from_payload(notification_body)
    amount = notification.amount.value
    return {
        "billId": _stringify(notification.bill_id),
        "amount.value": normalize_amount(amount) if amount is not None else "0",
        "amount.currency": _stringify(notification.amount.currency),
        "siteId": _stringify(notification.site_id),
        "status": _stringify(notification.status),
    }


def signed_string(fields: Dict[str, str]) -> str:
    """Join field values ordered by field name."""
    return VALUE_SEPARATOR.join(value for _, value in sorted(fields.items()))


def compute_signature(notification_body: Any, merchant_secret: Union[str, bytes]) -> str:
    """Compute the hex HMAC-SHA256 signature of a notification."""
    if isinstance(merchant_secret, str):
        merchant_secret = merchant_secret.encode()
    message = signed_string(canonical_fields(notification_body))
    return hmac.new(merchant_secret, message.encode(), DEFAULT_ALGORITHM).hexdigest()


def check_notification_signature(
    signature: str,
    notification_body: Any,
    merchant_secret: Union[str, bytes]
) -> bool:
    """
    Verify a bill notification signature.

    Args:
        signature: Value of the X-Api-Signature-SHA256 header
        notification_body: Decoded notification JSON
        merchant_secret: Merchant secret key

    Returns:
        True if signature is valid
    """
    if not isinstance(signature, str):
        return False
    if not isinstance(merchant_secret, (str, bytes)):
        return False

    try:
        expected_signature = compute_signature(notification_body, merchant_secret)
        received_signature = signature.encode()
    except (UnicodeEncodeError, ValueError):
        return False

    return hmac.compare_digest(expected_signature.encode(), received_signature)
