# core/utils.py
from datetime import datetime, timezone


def utcnow():
    """Timezone-aware current time, used as the column default for timestamps."""
    return datetime.now(timezone.utc)
