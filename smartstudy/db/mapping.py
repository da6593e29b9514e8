"""
Translation between backend column names and local record field names.

Services and the Supabase store use snake_case columns (``user_id``,
``created_at``); the local store keeps the camelCase shape (``userId``,
``createdAt``).  Conversion is recursive so nested question records
(``correct_answer`` / ``correctAnswer``) follow the same rule.
"""
import re
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_local_record(value: Any) -> Any:
    """Column-named record (or list of them) -> local field names"""
    if isinstance(value, dict):
        return {to_camel(k): to_local_record(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_local_record(v) for v in value]
    return value


def from_local_record(value: Any) -> Any:
    """Local field-named record (or list of them) -> column names"""
    if isinstance(value, dict):
        return {to_snake(k): from_local_record(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_local_record(v) for v in value]
    return value
