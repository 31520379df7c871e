"""QIWI Bill Payments REST API client."""

import json
import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote, urlencode

import httpx

from ._version import __version__
from .exceptions import BillPaymentsError
from .types import Logger
from .utils.normalize import (
    generate_id,
    get_lifetime_by_day,
    normalize_amount,
    normalize_date
)
from .utils.signature import check_notification_signature

GET = "GET"
POST = "POST"
PUT = "PUT"

CREATE_URI = "https://oplata.qiwi.com/create"
BILLS_URI = "https://api.qiwi.com/partner/bill/v1/bills/"

DEFAULT_TIMEOUT = 15.0
DEFAULT_CLIENT_NAME = "python_sdk"


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def _filter_empty(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value not in (None, "", {}, [])}


def _query_pairs(params: Mapping[str, Any], prefix: str = "") -> List[Tuple[str, str]]:
    """Flatten nested params the way form backends expect: ``key[sub]=value``."""
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, Mapping):
            pairs.extend(_query_pairs(value, name))
        elif isinstance(value, (list, tuple)):
            pairs.extend(_query_pairs(dict(enumerate(value)), name))
        elif isinstance(value, bool):
            pairs.append((name, "1" if value else "0"))
        else:
            pairs.append((name, str(value)))
    return pairs


def _build_query(params: Mapping[str, Any]) -> str:
    return urlencode(_query_pairs(params), quote_via=quote)


class BillPayments:
    """
    QIWI Bill Payments client (REST API v3).

    Example:
        >>> billing = BillPayments(key="eyJ2ZXJzaW9uIjoi...")
        >>> bill_id = billing.generate_id()
        >>> bill = billing.create_bill(bill_id, {
        ...     "amount": 200.345,
        ...     "currency": "RUB",
        ...     "expirationDateTime": billing.get_lifetime_by_day(1),
        ... })
        >>> bill["payUrl"]

    See https://developer.qiwi.com/en/bill-payments
    """

    def __init__(
        self,
        key: str = "",
        options: Optional[Dict[str, Any]] = None,
        *,
        bills_url: str = BILLS_URI,
        create_url: str = CREATE_URI,
        client_name: str = DEFAULT_CLIENT_NAME,
        client_version: str = __version__,
        http_client: Optional[httpx.Client] = None,
        logger: Optional[Logger] = None
    ):
        """
        Initialize BillPayments client.

        Args:
            key: Merchant secret key (used as Bearer token)
            options: Extra ``httpx.Client`` options (timeout, proxy, verify, transport, ...)
            bills_url: Bills API base URL
            create_url: Checkout form URL
            client_name: Client name reported in bill custom fields
            client_version: Client version reported in bill custom fields
            http_client: Ready ``httpx.Client`` to use instead of creating one
            logger: Custom logger instance
        """
        if not bills_url:
            raise ValueError("bills_url is required")
        if not create_url:
            raise ValueError("create_url is required")
        if http_client is not None and options:
            raise ValueError("options cannot be combined with http_client")

        self.bills_url = bills_url if bills_url.endswith("/") else bills_url + "/"
        self.create_url = create_url
        self.client_name = client_name
        self.client_version = client_version
        self.logger = logger or logging.getLogger(__name__)

        self._secret_key = str(key or "")
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.Client(
            **{"timeout": DEFAULT_TIMEOUT, **(options or {})}
        )

    def __enter__(self) -> "BillPayments":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self):
        """Close the HTTP client if it was created by this instance."""
        if self._owns_client:
            self._http_client.close()

    def set_key(self, key: str):
        """Replace the merchant secret key. The key cannot be read back."""
        self._secret_key = str(key or "")

    @property
    def has_key(self) -> bool:
        """Whether a secret key is configured."""
        return bool(self._secret_key)

    @property
    def http_client(self) -> httpx.Client:
        """The HTTP client used for API requests."""
        return self._http_client

    @property
    def custom_fields(self) -> Dict[str, str]:
        """Client fingerprint sent with bills and checkout links."""
        return {
            "apiClient": self.client_name,
            "apiClientVersion": self.client_version
        }

    def _merge_custom_fields(self, custom_fields: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        if not custom_fields:
            custom_fields = {}
        if not isinstance(custom_fields, Mapping):
            raise ValueError("customFields must be a mapping")
        return {**custom_fields, **self.custom_fields}

    # Normalization and notification helpers

    def check_notification_signature(
        self,
        signature: str,
        notification_body: Any,
        merchant_secret: str
    ) -> bool:
        """
        Check the signature of a bill status notification.

        Args:
            signature: Value of the X-Api-Signature-SHA256 header
            notification_body: Decoded notification JSON
            merchant_secret: Merchant secret key

        Returns:
            True if the notification is authentic
        """
        return check_notification_signature(signature, notification_body, merchant_secret)

    def get_lifetime_by_day(self, days: int = 45) -> str:
        return get_lifetime_by_day(days)

    def normalize_date(self, date: datetime) -> str:
        return normalize_date(date)

    def normalize_amount(self, amount: Any = 0) -> str:
        return normalize_amount(amount)

    def generate_id(self) -> str:
        return generate_id()

    # Checkout

    def create_payment_form(self, params: Mapping[str, Any]) -> str:
        """
        Build a checkout link.

        Args:
            params: Form parameters: ``publicKey``, ``billId``, ``amount``,
                ``successUrl``, ``customFields`` and other form fields

        Returns:
            Checkout URL
        """
        query = dict(params)
        if query.get("amount") is not None:
            query["amount"] = normalize_amount(query["amount"])
        query["customFields"] = self._merge_custom_fields(query.get("customFields"))
        return f"{self.create_url}?{_build_query(query)}"

    def get_pay_url(self, bill: Mapping[str, Any], success_url: Optional[str]) -> str:
        """
        Add the success redirect URL to a bill payment URL.

        Args:
            bill: Bill data as returned by the API
            success_url: URL to redirect to after payment

        Returns:
            Payment URL
        """
        pay_url = str(bill.get("payUrl") or "")
        if not success_url:
            return pay_url
        separator = "&" if "?" in pay_url else "?"
        return pay_url + separator + _build_query({"successUrl": success_url})

    # Bills API

    def create_bill(self, bill_id: Any, params: Mapping[str, Any]) -> Any:
        """
        Create a bill.

        Args:
            bill_id: Bill identifier, unique per merchant
            params: Bill fields: ``amount``, ``currency``, ``comment``,
                ``expirationDateTime`` (str or datetime), ``extra``,
                ``phone``, ``email``, ``account``, ``customFields``,
                ``successUrl``

        Returns:
            Bill data

        Raises:
            BillPaymentsError: API request failed
        """
        amount = params.get("amount")
        expiration = params.get("expirationDateTime")
        if isinstance(expiration, datetime):
            expiration = normalize_date(expiration)

        body = _filter_empty({
            "amount": _filter_empty({
                "currency": params.get("currency"),
                "value": normalize_amount(amount) if amount is not None else None
            }),
            "comment": params.get("comment"),
            "expirationDateTime": expiration,
            "customer": _filter_empty({
                "phone": params.get("phone"),
                "email": params.get("email"),
                "account": params.get("account")
            }),
            "extra": params.get("extra"),
            "customFields": self._merge_custom_fields(params.get("customFields"))
        })

        bill = self._request(PUT, _segment(bill_id), body)

        success_url = params.get("successUrl")
        if success_url and isinstance(bill, dict) and bill.get("payUrl"):
            bill["payUrl"] = self.get_pay_url(bill, success_url)

        return bill

    def get_bill_info(self, bill_id: Any) -> Any:
        """
        Get bill status and data.

        Raises:
            BillPaymentsError: API request failed
        """
        return self._request(GET, _segment(bill_id))

    def cancel_bill(self, bill_id: Any) -> Any:
        """
        Cancel an unpaid bill.

        Raises:
            BillPaymentsError: API request failed
        """
        return self._request(POST, f"{_segment(bill_id)}/reject")

    def refund(
        self,
        bill_id: Any,
        refund_id: Any,
        amount: Any = "0",
        currency: str = "RUB"
    ) -> Any:
        """
        Refund a paid bill, fully or partially.

        Args:
            bill_id: Bill identifier
            refund_id: Refund identifier, unique per bill
            amount: Refund amount
            currency: Refund currency

        Returns:
            Refund data

        Raises:
            BillPaymentsError: API request failed
        """
        return self._request(PUT, f"{_segment(bill_id)}/refunds/{_segment(refund_id)}", {
            "amount": {
                "currency": currency,
                "value": normalize_amount(amount)
            }
        })

    def get_refund_info(self, bill_id: Any, refund_id: Any) -> Any:
        """
        Get refund status and data.

        Raises:
            BillPaymentsError: API request failed
        """
        return self._request(GET, f"{_segment(bill_id)}/refunds/{_segment(refund_id)}")

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._secret_key}",
            "User-Agent": f"{self.client_name}/{self.client_version}"
        }

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send an API request.

        Returns:
            Decoded JSON body, or True when the body is empty
        """
        if method not in (GET, POST, PUT):
            raise ValueError(f"Not supported method {method}")

        url = self.bills_url + path
        headers = self._headers()
        content = None
        if method != GET:
            headers["Content-Type"] = "application/json;charset=UTF-8"
            content = json.dumps(body or {}, ensure_ascii=False).encode("utf-8")

        start = time.time()
        try:
            response = self._http_client.request(method, url, content=content, headers=headers)
        except httpx.HTTPError as e:
            self.logger.error(f"QIWI API {method} {path} failed: {e}")
            raise BillPaymentsError(str(e) or type(e).__name__) from e

        duration_ms = round((time.time() - start) * 1000, 2)
        self.logger.debug(
            f"QIWI API {method} {path} status={response.status_code} duration={duration_ms}ms"
        )

        if response.status_code >= 400:
            error = BillPaymentsError.from_response(response)
            self.logger.warning(f"QIWI API {method} {path} error: {error.message}")
            raise error

        if not response.content.strip():
            return True

        try:
            return response.json()
        except ValueError as e:
            raise BillPaymentsError(
                "Invalid JSON response",
                status_code=response.status_code,
                response=response
            ) from e
