"""
objects.py — Known Cvent object types and whitelist validation.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable

from cvent_soap.core.errors import InvalidObjectName


class CvObjectType(str, Enum):
    GUEST = "Guest"
    INVITEE = "Invitee"
    REGISTRATION = "Registration"
    EVENT_PARAMETERS = "EventParameters"
    EVENT_DETAIL = "EventDetail"
    EVENT_EMAIL_HISTORY = "EventEmailHistory"
    TRANSACTION = "Transaction"
    TRAVEL = "Travel"
    BUDGET = "Budget"
    BUDGET_ITEM = "BudgetItem"
    EVENT_QUESTION = "EventQuestion"
    TABLE_ASSIGNMENT = "TableAssignment"
    EVENT = "Event"
    SURVEY = "Survey"
    CONTACT = "Contact"
    SPEAKER = "Speaker"
    SESSION = "Session"
    EMARKETING = "eMarketing"
    ADMINISTRATION = "Administration"
    USER = "User"


DEFAULT_OBJECT_TYPES: frozenset[str] = frozenset(t.value for t in CvObjectType)


def object_name(object_type: str | CvObjectType) -> str:
    """Return the wire name for an enum member or plain string."""
    if isinstance(object_type, CvObjectType):
        return object_type.value
    return str(object_type)


def validate_object_name(
    object_type: str | CvObjectType,
    allowed: Iterable[str] = DEFAULT_OBJECT_TYPES,
) -> str:
    """Return the wire name of *object_type* if it is whitelisted.

    Raises:
        InvalidObjectName: If the name is not in *allowed*.
    """
    name = object_name(object_type)
    if name not in allowed:
        raise InvalidObjectName(f"'{name}' is not a valid Cvent object")
    return name
