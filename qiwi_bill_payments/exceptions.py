"""Exceptions raised by the QIWI Bill Payments client."""

from typing import Any, Optional

import httpx


class BillPaymentsError(Exception):
    """
    API request failure.

    Raised on HTTP error statuses, transport errors and malformed
    response bodies. ``status_code`` is ``None`` when no response was
    received.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        response: Optional[httpx.Response] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self._response = response

    @property
    def response(self) -> Optional[httpx.Response]:
        """The HTTP response, if any."""
        return self._response

    @classmethod
    def from_response(cls, response: httpx.Response) -> "BillPaymentsError":
        """Build an error from an HTTP error response."""
        data: Any
        try:
            data = response.json()
        except ValueError:
            data = None

        message = None
        error_code = None
        if isinstance(data, dict):
            for key in ("description", "userMessage", "message"):
                value = data.get(key)
                if isinstance(value, str) and value.strip():
                    message = value.strip()
                    break
            if data.get("errorCode") is not None:
                error_code = str(data["errorCode"])

        if not message:
            message = f"HTTP {response.status_code} {response.reason_phrase}".strip()

        return cls(
            message,
            status_code=response.status_code,
            error_code=error_code,
            response=response
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code!r})"
