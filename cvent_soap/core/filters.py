"""
filters.py — Search predicates for the Cvent ``Search`` call.

A ``Filter`` is built without validation; the operator is resolved to its
vendor spelling only when the filter is serialised with ``as_dict()``.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from cvent_soap.core.errors import InvalidOperator

OPERATORS = (
    "Equals",
    "Not Equal to",
    "Less than",
    "Greater than",
    "Less than or Equal to",
    "Greater than or Equal to",
    "Contains",
    "Does not Contain",
    "Starts with",
    "Includes",
    "Excludes",
)

# lower-cased alias -> vendor operator
OPERATOR_ALIASES: dict[str, str] = {
    "=": "Equals",
    "==": "Equals",
    "===": "Equals",
    "equal": "Equals",
    "!=": "Not Equal to",
    "<>": "Not Equal to",
    "not equal": "Not Equal to",
    "<": "Less than",
    "less": "Less than",
    ">": "Greater than",
    "greater": "Greater than",
    "<=": "Less than or Equal to",
    ">=": "Greater than or Equal to",
    "in": "Includes",
    "not in": "Excludes",
}
OPERATOR_ALIASES.update({op.lower(): op for op in OPERATORS})

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_MISSING = object()


def normalise_operator(operator: Any) -> str:
    """Resolve *operator* to a vendor operator name.

    Raises:
        InvalidOperator: If the token matches no operator or alias.
    """
    key = str(operator).strip().lower()
    try:
        return OPERATOR_ALIASES[key]
    except KeyError:
        raise InvalidOperator(f"Invalid operator value: {operator!r}") from None


def coerce_value(value: Any) -> Any:
    """Convert dates and datetimes to UTC ``YYYY-MM-DD HH:MM:SS`` strings.

    Naive datetimes are taken to be UTC already.  Sequences are coerced item
    by item; every other value is returned untouched.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day).strftime(DATETIME_FORMAT)
    if is_sequence(value):
        return [coerce_value(v) for v in value]
    return value


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


class Filter:
    """One ``(field, operator, value)`` search predicate.

    ``Filter("EventCode", "ABC123")`` is shorthand for an ``Equals``
    comparison; ``Filter("EventStartDate", ">", datetime(...))`` is the
    general form.
    """

    __slots__ = ("_field", "_operator", "_value")

    def __init__(self, field: str, operator: Any, value: Any = _MISSING) -> None:
        if value is _MISSING:
            operator, value = "=", operator
        object.__setattr__(self, "_field", field)
        object.__setattr__(self, "_operator", operator)
        object.__setattr__(self, "_value", value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Filter is immutable")

    @property
    def field(self) -> str:
        return self._field

    @property
    def operator(self) -> Any:
        return self._operator

    @property
    def value(self) -> Any:
        return self._value

    def operator_name(self) -> str:
        return normalise_operator(self._operator)

    def as_dict(self) -> dict[str, Any]:
        """Serialise to the ``Filter`` element of a ``CvSearchObject``.

        Raises:
            InvalidOperator: If the operator cannot be resolved.
        """
        value = coerce_value(self._value)
        if isinstance(value, list):
            key, value = "ValueArray", {"Value": value}
        else:
            key = "Value"
        return {
            "Field": self._field,
            "Operator": self.operator_name(),
            key: value,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Filter):
            return NotImplemented
        return (self._field, self._operator, self._value) == (
            other._field, other._operator, other._value,
        )

    def __hash__(self) -> int:
        return hash((self._field, str(self._operator)))

    def __repr__(self) -> str:
        return f"Filter({self._field!r}, {self._operator!r}, {self._value!r})"
