"""
Shared helpers for SmartStudy data models
"""
import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Fresh unique record id"""
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """Current UTC time as a fixed-width ISO-8601 string (sorts lexically)"""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")
