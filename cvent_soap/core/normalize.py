"""
normalize.py — Reshape loosely-typed Cvent response trees.

Cvent collapses one-element lists into a bare value, stores custom fields in
a side list and nests survey answers two levels deep.  Everything here works
on the plain ``dict``/``list``/``str`` trees produced by the transport, with
no I/O.
"""
from __future__ import annotations

from typing import Any, Iterable

ANSWER_FIELD = "Answer"
ANSWER_ARRAY_SUFFIX = " Array"


def as_list(value: Any) -> list[Any]:
    """Unify the vendor's string-or-object-or-array ambiguity.

    ``None`` gives ``[]``, a list is returned as a list, anything else is
    wrapped in a one-element list.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def is_blank(value: Any) -> bool:
    """True for ``None``, empty strings and empty containers."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def effective_fields(fields: Iterable[str] | str | None) -> list[str]:
    """Return *fields* as a new list that is guaranteed to contain ``Id``."""
    if fields is None:
        result = []
    elif isinstance(fields, str):
        result = [fields]
    else:
        result = list(fields)
    if "Id" not in result:
        result.append("Id")
    return result


# ── Survey answers ───────────────────────────────────────────────────────────

def format_answer(parts: Any) -> str:
    """Join the answer parts of one survey detail into a single string."""
    answer = ""
    for part in as_list(parts):
        if not isinstance(part, dict):
            if not is_blank(part):
                answer += f"{part}, "
            continue
        if not is_blank(part.get("AnswerText")):
            answer += f"{part['AnswerText']}, "
        if not is_blank(part.get("AnswerPart")):
            answer += f"{part['AnswerPart']}: "
            if not is_blank(part.get("AnswerOther")):
                answer += str(part["AnswerOther"])
    if answer.endswith(", "):
        answer = answer[:-2]
    return answer


def synthesize_answers(survey_details: Any) -> tuple[str, dict[str, str]]:
    """Build the human-readable ``Answer`` block and a question -> answer map.

    Each detail contributes::

        Question:
        <QuestionText>
        Response:
        <answer>

    Blocks are separated by a blank line; trailing whitespace is trimmed.
    """
    text = ""
    by_question: dict[str, str] = {}
    for detail in as_list(survey_details):
        if not isinstance(detail, dict):
            continue
        question = detail.get("QuestionText") or ""
        answer = format_answer(detail.get("Answer"))
        text += f"Question:\n{question}\nResponse:\n{answer}\n\n"
        by_question[question] = answer
    return text.rstrip(), by_question


# ── Record resolution ────────────────────────────────────────────────────────

def custom_field_value(raw: dict[str, Any], field: str) -> Any:
    """Return the ``FieldValue`` of the first custom field named *field*."""
    for custom in as_list(raw.get("CustomFieldDetail")):
        if isinstance(custom, dict) and custom.get("FieldName") == field:
            return custom.get("FieldValue")
    return None


def build_record(
    raw: dict[str, Any],
    fields: Iterable[str],
    always_flat: bool = True,
) -> dict[str, Any]:
    """Resolve *fields* against one returned CvObject.

    Precedence, first non-blank wins: direct attribute, custom field side
    list, then for ``Answer`` the synthesized survey summary.  Fields found
    nowhere resolve to ``""``.
    """
    record: dict[str, Any] = {}
    for field in fields:
        if not field:
            continue
        value = raw.get(field)
        if is_blank(value):
            value = custom_field_value(raw, field)
        if is_blank(value) and field == ANSWER_FIELD and not is_blank(raw.get("EventSurveyDetail")):
            value, by_question = synthesize_answers(raw["EventSurveyDetail"])
            if not always_flat:
                record[field + ANSWER_ARRAY_SUFFIX] = by_question
        record[field] = "" if is_blank(value) else value
    return record


def build_record_set(
    raw_objects: Any,
    fields: Iterable[str] | str | None,
    always_flat: bool = True,
) -> dict[str, dict[str, Any]]:
    """Key every resolved record by its ``Id``, keeping response order.

    Objects without an ``Id`` cannot be keyed and are skipped.
    """
    wanted = effective_fields(fields)
    records: dict[str, dict[str, Any]] = {}
    for raw in as_list(raw_objects):
        if not isinstance(raw, dict) or is_blank(raw.get("Id")):
            continue
        record = build_record(raw, wanted, always_flat)
        records[record["Id"]] = record
    return records
