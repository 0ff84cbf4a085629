import hashlib
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Any, Dict, Iterable, Optional

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def generate_etag(event_id: Any, updated_at: datetime) -> str:
    """
    Fingerprint an event version.

    Depends only on the identifier and the modification time, so the
    same pair always yields the same value and any change to updated_at
    yields a new one.
    """
    millis = (_as_utc(updated_at) - _EPOCH) // timedelta(milliseconds=1)
    digest = hashlib.sha1(f"{event_id}:{millis}".encode("utf-8")).hexdigest()
    return f'"{digest}"'

def format_last_modified(updated_at: datetime) -> str:
    """Format a timestamp as an HTTP date, e.g. 'Mon, 19 Oct 2026 10:00:00 GMT'."""
    return format_datetime(_as_utc(updated_at).replace(microsecond=0), usegmt=True)

def latest_event(events: Iterable[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    latest = None
    for event in events:
        if latest is None or event["updated_at"] > latest["updated_at"]:
            latest = event
    return latest

def is_not_modified(if_none_match: Optional[str], etag: str) -> bool:
    # Exact comparison only; weak validators and lists are not interpreted.
    return bool(if_none_match) and if_none_match == etag

def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
