"""
transport.py — SOAP calls against the Cvent V200611 WSDL, through zeep.

``SoapTransport`` loads the WSDL once and binds the service to whichever
endpoint the client currently points at.  Results come back as plain nested
dicts and lists; faults come back as ``SoapFault``.  No Cvent business rules
live here.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

import requests
from lxml import etree
from zeep import Client
from zeep.exceptions import Error, Fault, TransportError, XMLSyntaxError
from zeep.helpers import serialize_object
from zeep.plugins import HistoryPlugin
from zeep.transports import Transport as HttpTransport

logger = logging.getLogger(__name__)

CVENT_NAMESPACE = "http://api.cvent.com/2006-11"
BINDING = f"{{{CVENT_NAMESPACE}}}V200611Soap"


class SoapFault(Exception):
    """A SOAP fault, or a failure that never produced a readable response."""

    def __init__(self, faultcode: str, faultstring: str) -> None:
        super().__init__(faultstring)
        self.faultcode = faultcode
        self.faultstring = faultstring


class MalformedResponse(SoapFault):
    """The response was not a SOAP envelope zeep could read."""

    def __init__(self, message: str) -> None:
        super().__init__("Client", message)


class Transport(Protocol):
    """What ``CventClient`` needs from a transport."""

    endpoint: str
    last_request: str
    last_request_headers: str

    def invoke(
        self,
        method: str,
        params: dict[str, Any],
        headers: dict[str, dict[str, Any]] | None = None,
    ) -> dict[str, Any]: ...


def as_tree(method: str, result: Any) -> dict[str, Any]:
    """Shape a zeep result as ``{"<method>Result": ...}``.

    Every Cvent response holds one result element, which zeep unwraps; the
    name is put back for callers that expect the full response body.
    """
    return {f"{method}Result": serialize_object(result, dict)}


class SoapTransport:
    """Call Cvent operations through a WSDL-driven zeep client.

    ``endpoint`` may be changed between calls; the client does so after a
    login pins the session to another server.  The WSDL itself is read from
    *wsdl* (``<endpoint>?WSDL`` by default) on first use.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
        wsdl: str | None = None,
        client: Client | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self.wsdl = wsdl or f"{endpoint}?WSDL"
        self.history = HistoryPlugin()
        self._session = session
        self._client = client
        self.last_request = ""
        self.last_request_headers = ""

    def _get_client(self) -> Client:
        if self._client is None:
            http = HttpTransport(
                session=self._session or requests.Session(),
                timeout=self.timeout,
                operation_timeout=self.timeout,
            )
            logger.debug("Loading WSDL %s", self.wsdl)
            self._client = Client(self.wsdl, transport=http, plugins=[self.history])
        return self._client

    def invoke(
        self,
        method: str,
        params: dict[str, Any],
        headers: dict[str, dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Call *method* with the body in ``params[method]``.

        Raises:
            SoapFault: For SOAP faults, HTTP failures and unreadable replies.
        """
        body = params.get(method, params)
        logger.debug("Calling %s at %s", method, self.endpoint)
        try:
            service = self._get_client().create_service(BINDING, self.endpoint)
            operation = getattr(service, method)
            result = operation(**body, _soapheaders=headers) if headers else operation(**body)
        except Fault as e:
            raise SoapFault(str(e.code or ""), str(e.message or "")) from e
        except TransportError as e:
            raise SoapFault("HTTP", f"HTTP {e.status_code} from {self.endpoint}") from e
        except XMLSyntaxError as e:
            raise MalformedResponse(f"Unparseable SOAP response: {e}") from e
        except Error as e:
            raise SoapFault("Client", str(e)) from e
        except requests.RequestException as e:
            raise SoapFault("HTTP", f"Request to {self.endpoint} failed: {e}") from e
        finally:
            self._record_sent()
        return as_tree(method, result)

    def _record_sent(self) -> None:
        try:
            sent = self.history.last_sent
        except IndexError:
            return
        if not sent:
            return
        self.last_request = etree.tostring(
            sent["envelope"], encoding="unicode", pretty_print=True,
        )
        self.last_request_headers = "".join(
            f"{k}: {v}\n" for k, v in (sent.get("http_headers") or {}).items()
        )
