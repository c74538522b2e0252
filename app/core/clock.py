from datetime import date, datetime
from typing import Optional

import pytz


class BookingClock:
    """Wall-clock source for "today" and "now" in the deployment timezone.

    With no timezone configured the server's local clock is used. Values are
    naive, matching the naive HH:MM times stored for appointments.
    """

    def __init__(self, timezone_name: Optional[str] = None):
        self.timezone_name = timezone_name
        self._tz = pytz.timezone(timezone_name) if timezone_name else None

    def now(self) -> datetime:
        if self._tz is None:
            return datetime.now()
        return datetime.now(self._tz).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()

    def __repr__(self):
        return f"<BookingClock(tz={self.timezone_name or 'local'})>"
