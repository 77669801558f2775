from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple


def local_now() -> datetime:
    """Naive local wall-clock time used for every persisted timestamp."""
    return datetime.now()


def day_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Half-open [start, end) range covering the calendar day of ``now``."""
    now = now or local_now()
    start = datetime.combine(now.date(), time.min)
    return start, start + timedelta(days=1)


def month_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Half-open [start, end) range covering the calendar month of ``now``."""
    now = now or local_now()
    start = datetime(now.year, now.month, 1)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1)
    else:
        end = datetime(now.year, now.month + 1, 1)
    return start, end


def date_range_bounds(
    date_from: Optional[date], date_to: Optional[date]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Turn inclusive calendar dates into half-open datetime bounds."""
    start = datetime.combine(date_from, time.min) if date_from else None
    end = datetime.combine(date_to, time.min) + timedelta(days=1) if date_to else None
    return start, end
