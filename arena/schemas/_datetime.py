import datetime
from typing import Optional

def to_naive_utc(value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    """Timestamps are stored as naive UTC; aware inputs are converted first."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value
