"""
cvent_api.py — Cvent SOAP API client shared by the CLI, sync script and MCP server.

Handles login and the session header, Search / Retrieve / DescribeCvObject
calls and translation of SOAP faults into typed errors.  Response reshaping
lives in ``core.normalize``; the wire format in ``data.transport``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from cvent_soap.core.errors import (
    AuthenticationError,
    AuthorizationFailure,
    AuthorizationLockout,
    TransportFault,
    fault_class,
    scrub,
)
from cvent_soap.core.filters import Filter
from cvent_soap.core.normalize import as_list, build_record_set, effective_fields, is_blank
from cvent_soap.core.objects import DEFAULT_OBJECT_TYPES, CvObjectType, validate_object_name
from cvent_soap.data.settings import DEFAULT_TIMEOUT, CventSettings
from cvent_soap.data.transport import SoapFault, SoapTransport, Transport

logger = logging.getLogger(__name__)

PRODUCTION_URL = "https://api.cvent.com/soap/V200611.ASMX"
SANDBOX_URL = "https://sandbox-api.cvent.com/soap/V200611.ASMX"

SEARCH_TYPES = ("AndSearch", "OrSearch")

ACCESS_DENIED = "Access is denied."
LOCKED_OUT = "Your account has been locked out"


@dataclass
class FieldSchema:
    """Field definitions of one object type, as returned by DescribeCvObject."""

    name: str
    fields: list[dict[str, Any]] = field(default_factory=list)
    custom_fields: list[dict[str, Any]] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def field_names(self) -> list[str]:
        return [f["Name"] for f in self.fields if not is_blank(f.get("Name"))]

    @property
    def custom_field_names(self) -> list[str]:
        return [f["Name"] for f in self.custom_fields if not is_blank(f.get("Name"))]

    def names(self, include_custom: bool = True) -> list[str]:
        """Standard field names, then custom field names when requested."""
        if include_custom:
            return self.field_names + self.custom_field_names
        return self.field_names

    def as_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict for the schema cache."""
        return {
            "name": self.name,
            "fields": self.fields,
            "custom_fields": self.custom_fields,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FieldSchema:
        return cls(
            name=data["name"],
            fields=list(data.get("fields", [])),
            custom_fields=list(data.get("custom_fields", [])),
        )


def _is_true(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _login_error(error_message: Any, secrets: list[str], found: str) -> AuthenticationError:
    """Build the error for a failed login, with *secrets* redacted."""
    if error_message == ACCESS_DENIED:
        return AuthorizationFailure(scrub(
            "Access is denied. Please check your Account Number, Username, Password "
            "and that your request is coming from an approved IP address",
            secrets,
        ))
    if not is_blank(error_message) and str(error_message).startswith(LOCKED_OUT):
        return AuthorizationLockout(scrub("Account Locked", secrets))
    if is_blank(error_message):
        message = "Error authenticating with Cvent. No error message was received.\n"
    else:
        message = f"Error authenticating with Cvent. {found}\nError Message: {error_message}\n"
    return AuthenticationError(scrub(message, secrets))


class CventClient:
    """Client for one Cvent account session.

    Not safe for concurrent use: the session token and pinned server URL
    are plain instance state.
    """

    def __init__(
        self,
        sandbox: bool = False,
        transport: Transport | None = None,
        object_types: Iterable[str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.sandbox = sandbox
        self.base_url = SANDBOX_URL if sandbox else PRODUCTION_URL
        self.object_types = (
            frozenset(object_types) if object_types is not None else DEFAULT_OBJECT_TYPES
        )
        self.timeout = timeout
        self._transport = transport
        self._session_header: str | None = None
        self._server_url: str | None = None

    # ── Session / transport ──────────────────────────────────────────────────

    @property
    def endpoint(self) -> str:
        """The session-pinned server after login, otherwise the base URL."""
        return self._server_url or self.base_url

    @property
    def is_authenticated(self) -> bool:
        return self._session_header is not None

    def _get_transport(self) -> Transport:
        if self._transport is None:
            self._transport = SoapTransport(self.endpoint, timeout=self.timeout)
        else:
            self._transport.endpoint = self.endpoint
        return self._transport

    def call(
        self,
        method: str,
        params: dict[str, Any],
        secrets: Iterable[str] = (),
    ) -> dict[str, Any]:
        """Invoke a remote method with the session header attached.

        Any *secrets* are redacted from the resulting error, and the raw
        fault is then not chained to it.

        Raises:
            TransportFault: Or one of its subclasses, for any SOAP fault.
        """
        secrets = [s for s in secrets if s]
        transport = self._get_transport()
        headers = None
        if self._session_header:
            headers = {"CventSessionHeader": {"CventSessionValue": self._session_header}}
        logger.debug("Calling %s on %s", method, transport.endpoint)
        try:
            return transport.invoke(method, params, headers)
        except SoapFault as fault:
            error = self._translate_fault(method, fault, transport, secrets)
            if not secrets:
                raise error from fault
        # Raised outside the handler so the unredacted fault is not its context.
        raise error

    def _translate_fault(
        self,
        method: str,
        fault: SoapFault,
        transport: Transport,
        secrets: list[str],
    ) -> TransportFault:
        message = (
            "Error with Cvent API. Exception occurred.\n"
            f"faultcode: {fault.faultcode}\n"
            f"Message: {fault.faultstring}\n"
        )
        sent_headers = getattr(transport, "last_request_headers", "")
        sent_request = getattr(transport, "last_request", "")
        # Credential-bearing requests are never echoed back.
        if (sent_headers or sent_request) and not secrets:
            message += f"Sent Headers:\n{sent_headers}Sent Request:\n{sent_request}\n"
        hidden = secrets + ([self._session_header] if self._session_header else [])
        message = scrub(message, hidden)

        if secrets:
            logger.warning("Cvent %s fault (%s)", method, fault.faultcode)
        else:
            logger.warning("Cvent %s fault: %s (%s)", method, fault.faultstring, fault.faultcode)
        error_cls = fault_class(fault.faultstring)
        return error_cls(
            message,
            faultcode=fault.faultcode,
            fault_message=scrub(fault.faultstring or "", hidden),
        )

    def validate_object_name(self, object_type: str | CvObjectType) -> str:
        """Return the wire name of *object_type* or raise ``InvalidObjectName``."""
        return validate_object_name(object_type, self.object_types)

    # ── Login ────────────────────────────────────────────────────────────────

    def login(self, account_number: str, username: str, password: str) -> bool:
        """Authenticate and pin the session to the server Cvent hands back.

        Returns:
            ``True`` on success.

        Raises:
            AuthorizationFailure: Bad credentials or unapproved source IP.
            AuthorizationLockout: Too many failed attempts.
            AuthenticationError: Any other failure.  The message never
                contains the account number, username or password.
        """
        secrets = [str(account_number), str(username), str(password)]
        fault_message = None
        try:
            result = self.call("Login", {
                "Login": {
                    "AccountNumber": account_number,
                    "UserName": username,
                    "Password": password,
                }
            }, secrets=secrets)
        except TransportFault as e:
            fault_message = e.fault_message or ""
        if fault_message is not None:
            raise _login_error(fault_message, secrets, "The login call failed.")

        login_result = result.get("LoginResult") if isinstance(result, dict) else None
        if not isinstance(login_result, dict):
            login_result = {}

        session_header = login_result.get("CventSessionHeader")
        if _is_true(login_result.get("LoginSuccess")) and not is_blank(session_header):
            self._session_header = str(session_header)
            server_url = login_result.get("ServerURL")
            self._server_url = str(server_url) if not is_blank(server_url) else None
            logger.debug("Logged in to Cvent; session pinned to %s", self.endpoint)
            return True

        raise _login_error(login_result.get("ErrorMessage"), secrets, "An error message was found.")

    # ── Search / Retrieve ────────────────────────────────────────────────────

    def search(
        self,
        object_type: str | CvObjectType,
        filters: Iterable[Filter | dict[str, Any]] | Filter | dict[str, Any] = (),
        search_type: str = "AndSearch",
    ) -> list[str]:
        """Return the ids of every *object_type* record matching *filters*.

        ``Filter`` items are serialised; raw predicate dicts are passed
        through as given.  The result is always a list, even for a single
        match.

        Raises:
            InvalidObjectName: Before any call, for unknown object types.
            InvalidOperator: Before any call, for an unresolvable operator.
            InvalidSearchFilter: If Cvent rejects the predicate.
        """
        name = self.validate_object_name(object_type)
        if search_type not in SEARCH_TYPES:
            raise ValueError(f"search_type must be one of {SEARCH_TYPES}, got {search_type!r}")
        if isinstance(filters, (Filter, dict)):
            filters = [filters]
        predicates = [f.as_dict() if isinstance(f, Filter) else f for f in filters]

        result = self.call("Search", {
            "Search": {
                "ObjectType": name,
                "CvSearchObject": {
                    "SearchType": search_type,
                    "Filter": predicates,
                },
            }
        })
        search_result = result.get("SearchResult")
        ids = search_result.get("Id") if isinstance(search_result, dict) else None
        return as_list(ids)

    def retrieve(
        self,
        object_type: str | CvObjectType,
        ids: str | Iterable[str],
        fields: Iterable[str] = ("Id",),
        always_flat: bool = True,
    ) -> dict[str, dict[str, Any]]:
        """Fetch *fields* for one or several record ids.

        Returns:
            ``{record_id: {field: value}}`` in the order Cvent returned the
            records.  ``Id`` is always included; fields Cvent did not send
            are ``""``.  With ``always_flat=False`` records that resolve
            ``Answer`` also carry an ``"Answer Array"`` question -> answer map.
        """
        name = self.validate_object_name(object_type)
        id_list = [ids] if isinstance(ids, str) else list(ids)
        wanted = effective_fields(fields)
        if not id_list:
            return {}

        result = self.call("Retrieve", {
            "Retrieve": {
                "ObjectType": name,
                "Ids": {"Id": id_list},
            }
        })
        retrieve_result = result.get("RetrieveResult")
        raw_objects = retrieve_result.get("CvObject") if isinstance(retrieve_result, dict) else None
        return build_record_set(raw_objects, wanted, always_flat)

    def search_and_retrieve(
        self,
        object_type: str | CvObjectType,
        filters: Iterable[Filter | dict[str, Any]] | Filter | dict[str, Any] = (),
        fields: Iterable[str] = ("Id",),
        search_type: str = "AndSearch",
        always_flat: bool = True,
    ) -> dict[str, dict[str, Any]]:
        """``retrieve(search(...))``: the search completes before any retrieve."""
        ids = self.search(object_type, filters, search_type)
        return self.retrieve(object_type, ids, fields, always_flat)

    # ── Describe ─────────────────────────────────────────────────────────────

    def describe_object(self, object_type: str | CvObjectType) -> FieldSchema:
        """Fetch the field schema of *object_type*."""
        name = self.validate_object_name(object_type)
        result = self.call("DescribeCvObject", {
            "DescribeCvObject": {
                "ObjectTypes": {"ObjectType": [name]},
            }
        })
        outer = result.get("DescribeCvObjectResult")
        inner = outer.get("DescribeCvObjectResult") if isinstance(outer, dict) else None
        described = [d for d in as_list(inner) if isinstance(d, dict)]
        raw = described[0] if described else {}
        return FieldSchema(
            name=str(raw.get("Name") or name),
            fields=[f for f in as_list(raw.get("Field")) if isinstance(f, dict)],
            custom_fields=[f for f in as_list(raw.get("CustomField")) if isinstance(f, dict)],
            raw=raw,
        )

    def describe_object_fields(
        self,
        object_type: str | CvObjectType,
        include_custom: bool = True,
    ) -> list[str]:
        """Standard field names, then custom field names when requested."""
        return self.describe_object(object_type).names(include_custom)


def connect(settings: CventSettings, transport: Transport | None = None) -> CventClient:
    """Build a client from *settings* and log in."""
    client = CventClient(sandbox=settings.sandbox, transport=transport, timeout=settings.timeout)
    client.login(settings.account_number, settings.username, settings.password)
    return client
