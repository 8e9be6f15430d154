from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

NOT_AVAILABLE = "N/A"


def format_id(record_id: Any) -> str:
    """Display form of a record id, e.g. 42 -> '#00042'."""
    if not record_id:
        return NOT_AVAILABLE
    return f"#{str(record_id).zfill(5)}"


def _to_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        raw = value.strip()
        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def format_date(value: Any) -> str:
    d = _to_date(value)
    return d.isoformat() if d else NOT_AVAILABLE


def format_date_for_input(value: Any) -> str:
    """YYYY-MM-DD for the edit form; blank when missing or unparsable."""
    d = _to_date(value)
    return d.isoformat() if d else ""
