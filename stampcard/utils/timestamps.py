"""
Timestamp parsing shared by the API and the CLI.

Stored timestamps are naive UTC. A caller-supplied ``as_of`` keeps its
offset so dashboard days and months follow the caller's clock.
"""
from datetime import datetime
from typing import Optional

from .exceptions import ValidationError


def parse_timestamp(raw: Optional[str], field: str = 'as_of') -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp, keeping any UTC offset.

    Returns None for an empty value. A trailing 'Z' is read as UTC.

    Raises:
        ValidationError: If the value is not an ISO-8601 timestamp
    """
    if raw is None or not str(raw).strip():
        return None
    text = str(raw).strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 timestamp", field)
