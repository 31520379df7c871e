import json

import httpx
import pytest

from qiwi_bill_payments import BillPayments


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps sent requests and replies with a canned response."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.content = b"{}"
        self.error = None
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, content=self.content)

    def reply(self, status_code=200, payload=None, content=None):
        if content is None:
            content = json.dumps(payload if payload is not None else {}).encode()
        self.status_code = status_code
        self.content = content

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def billing(transport):
    client = BillPayments("test-secret-key", {"transport": transport})
    yield client
    client.close()


@pytest.fixture
def notification():
    return {
        "bill": {
            "siteId": "test",
            "billId": "test_bill",
            "amount": {"value": 1, "currency": "RUB"},
            "status": {"value": "PAID"},
        }
    }
