"""
Request parsing shared by the API blueprints.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from flask import request

from ..utils.exceptions import ValidationError
from ..utils.timestamps import parse_timestamp

MAX_PAGE_SIZE = 200


def parse_limit(default: int, name: str = 'limit') -> int:
    """Read a positive page size from the query string, capped at MAX_PAGE_SIZE."""
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", name)
    if value < 1:
        raise ValidationError(f"{name} must be at least 1", name)
    return min(value, MAX_PAGE_SIZE)


def parse_as_of(name: str = 'as_of') -> Optional[datetime]:
    """Read an optional ISO-8601 timestamp; None means now. Any offset is kept."""
    return parse_timestamp(request.args.get(name), name)


def json_body() -> Dict[str, Any]:
    """The request's JSON object; an absent or unparseable body is empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("JSON body must be an object")
    return data
