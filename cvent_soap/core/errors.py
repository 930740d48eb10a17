"""
errors.py — Exception hierarchy and vendor fault classification.

Faults raised by the SOAP transport are mapped to typed exceptions through an
explicit table of known Cvent fault messages.  Anything not in the table
surfaces as a plain ``TransportFault``.
"""
from __future__ import annotations

from enum import Enum

REDACTED = "[REDACTED]"


class CventError(Exception):
    """Base class for every error raised by this package."""


# ── Transport faults ─────────────────────────────────────────────────────────

class TransportFault(CventError):
    """A remote call failed.

    ``str(exc)`` is the full diagnostic text (fault code, message and the last
    request sent).  The raw vendor message is kept on ``fault_message``.
    """

    def __init__(self, message: str, faultcode: str = "", fault_message: str = "") -> None:
        super().__init__(message)
        self.faultcode = faultcode
        self.fault_message = fault_message


class InvalidSearchFilter(TransportFault):
    """Cvent rejected the search filter (``INVALID_SEARCH_FILTER``)."""


class InvalidSessionFault(TransportFault):
    """The session header is missing, expired or unknown."""


class InvalidIdFault(TransportFault):
    """One of the ids passed to Retrieve does not exist."""


class InvalidObjectTypeFault(TransportFault):
    """Cvent does not recognise the object type sent."""


class CallLimitExceeded(TransportFault):
    """The account's daily API call allowance is used up."""


class MaxRecordsExceeded(TransportFault):
    """Too many ids in a single Retrieve."""


class FaultKind(str, Enum):
    INVALID_SEARCH_FILTER = "INVALID_SEARCH_FILTER"
    INVALID_SESSION = "INVALID_SESSION"
    INVALID_ID = "INVALID_ID"
    INVALID_OBJECT_TYPE = "INVALID_OBJECT_TYPE"
    CALL_LIMIT_EXCEEDED = "CALL_LIMIT_EXCEEDED"
    MAX_RECORDS_EXCEEDED = "MAX_RECORDS_EXCEEDED"
    GENERIC = "GENERIC"


# Substring of the upper-cased fault message -> kind.  Checked in order.
FAULT_MESSAGES: tuple[tuple[str, FaultKind], ...] = (
    ("INVALID_SESSION", FaultKind.INVALID_SESSION),
    ("SESSION_HEADER", FaultKind.INVALID_SESSION),
    ("INVALID_ID", FaultKind.INVALID_ID),
    ("INVALID_OBJECT_TYPE", FaultKind.INVALID_OBJECT_TYPE),
    ("CALL_LIMIT", FaultKind.CALL_LIMIT_EXCEEDED),
    ("CALL LIMIT", FaultKind.CALL_LIMIT_EXCEEDED),
    ("MAX_RECORDS", FaultKind.MAX_RECORDS_EXCEEDED),
    ("MAXIMUM NUMBER OF RECORDS", FaultKind.MAX_RECORDS_EXCEEDED),
)

FAULT_CLASSES: dict[FaultKind, type[TransportFault]] = {
    FaultKind.INVALID_SEARCH_FILTER: InvalidSearchFilter,
    FaultKind.INVALID_SESSION: InvalidSessionFault,
    FaultKind.INVALID_ID: InvalidIdFault,
    FaultKind.INVALID_OBJECT_TYPE: InvalidObjectTypeFault,
    FaultKind.CALL_LIMIT_EXCEEDED: CallLimitExceeded,
    FaultKind.MAX_RECORDS_EXCEEDED: MaxRecordsExceeded,
    FaultKind.GENERIC: TransportFault,
}


def classify_fault(fault_message: str) -> FaultKind:
    """Map a vendor fault message to a ``FaultKind``.

    ``INVALID_SEARCH_FILTER`` must match exactly; the rest of the table is a
    case-insensitive substring match.  Unknown messages give ``GENERIC``.
    """
    if fault_message == FaultKind.INVALID_SEARCH_FILTER.value:
        return FaultKind.INVALID_SEARCH_FILTER
    upper = (fault_message or "").upper()
    for needle, kind in FAULT_MESSAGES:
        if needle in upper:
            return kind
    return FaultKind.GENERIC


def fault_class(fault_message: str) -> type[TransportFault]:
    return FAULT_CLASSES[classify_fault(fault_message)]


# ── Client-side validation ───────────────────────────────────────────────────

class InvalidOperator(CventError, ValueError):
    """A filter operator has no vendor equivalent."""


class InvalidObjectName(CventError, ValueError):
    """The object type is not in the client's whitelist."""


# ── Authentication ───────────────────────────────────────────────────────────

class AuthenticationError(CventError):
    """Login failed.  The message never contains the supplied credentials."""


class AuthorizationFailure(AuthenticationError):
    """Cvent answered ``Access is denied.``"""


class AuthorizationLockout(AuthenticationError):
    """The account is temporarily locked after repeated failures."""


def scrub(text: str, secrets: list[str] | tuple[str, ...]) -> str:
    """Replace every non-empty secret in *text* with ``[REDACTED]``.

    Longer secrets are replaced first so a secret that contains another one
    is not left half-visible.
    """
    for secret in sorted((s for s in secrets if s), key=len, reverse=True):
        text = text.replace(secret, REDACTED)
    return text
