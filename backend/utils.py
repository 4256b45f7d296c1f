from datetime import datetime
import pytz

from config import TIMEZONE

LOCAL_TZ = pytz.timezone(TIMEZONE)


def now_local() -> datetime:
    """Get current time in the configured timezone."""
    return datetime.now(pytz.UTC).astimezone(LOCAL_TZ)
