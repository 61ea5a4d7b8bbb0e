import uuid
from datetime import datetime
from typing import Container, Optional


# Helper functions
def generate_id(prefix: str, taken: Container[str] = ()) -> str:
    """Random '<prefix>-<uuid4 hex>' id not present in taken."""
    while True:
        candidate = f'{prefix}-{uuid.uuid4().hex}'
        if candidate not in taken:
            return candidate


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parses an ISO date or timestamp. Returns None when it cannot.

    Offsets are dropped so the result compares with naive local times.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def timestamp(now: datetime) -> str:
    return now.isoformat(timespec='milliseconds')
