from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BeforeValidator


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO 8601 datetime string into naive UTC.

    Timestamps are stored as naive UTC, so aware values are converted and
    stripped of their offset.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            raise ValueError(f"Invalid datetime format: {value}")
    else:
        raise ValueError(f"Expected datetime, got {type(value).__name__}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


UtcDateTime = Annotated[datetime | None, BeforeValidator(parse_datetime)]
