"""Shared pytest fixtures for Cvent client tests."""
from __future__ import annotations

from typing import Any

import pytest

from cvent_soap.data.cvent_api import CventClient

ACCOUNT = "ACME123"
USERNAME = "jdoe"
PASSWORD = "s3cr3t!"

LOGIN_OK = {
    "LoginResult": {
        "LoginSuccess": "true",
        "CventSessionHeader": "sess-abc-123",
        "ServerURL": "https://c5.cvent.com/soap/V200611.ASMX",
    }
}


class FakeTransport:
    """Stands in for ``SoapTransport``: canned response trees per method.

    A response may be a tree, an exception to raise, or a list of either
    consumed one call at a time.
    """

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.endpoint = ""
        self.responses = dict(responses or {})
        self.calls: list[dict[str, Any]] = []
        self.last_request = ""
        self.last_request_headers = ""

    def invoke(self, method, params, headers=None):
        self.calls.append({
            "method": method,
            "params": params,
            "headers": headers,
            "endpoint": self.endpoint,
        })
        self.last_request = repr(params)
        self.last_request_headers = f"SOAPAction: {method}\n"
        response = self.responses.get(method, {})
        if isinstance(response, list):
            response = response.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def methods(self) -> list[str]:
        return [c["method"] for c in self.calls]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport) -> CventClient:
    return CventClient(transport=transport)


@pytest.fixture
def logged_in(transport) -> CventClient:
    transport.responses["Login"] = LOGIN_OK
    c = CventClient(transport=transport)
    c.login(ACCOUNT, USERNAME, PASSWORD)
    return c
