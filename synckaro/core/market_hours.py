"""Indian equity market session (NSE/BSE)."""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

IST = timezone(timedelta(hours=5, minutes=30), name="IST")

MARKET_OPEN = time(9, 15)
MARKET_CLOSE = time(15, 30)

# Exchange holidays that fall on weekdays are the ones that matter
MARKET_HOLIDAYS = frozenset(date.fromisoformat(d) for d in [
    # 2024
    "2024-01-26", "2024-03-08", "2024-03-29", "2024-04-11", "2024-04-17",
    "2024-06-17", "2024-08-15", "2024-08-26", "2024-10-02", "2024-10-31",
    "2024-11-01", "2024-11-15", "2024-11-25", "2024-12-25",
    # 2025
    "2025-01-26", "2025-03-14", "2025-04-18", "2025-08-15", "2025-10-02",
    "2025-10-20", "2025-10-21", "2025-12-25",
    # 2026
    "2026-01-26", "2026-03-03", "2026-04-03", "2026-08-15", "2026-10-02",
    "2026-11-08", "2026-11-09", "2026-12-25",
    # 2027
    "2027-01-26", "2027-03-22", "2027-03-26", "2027-08-15", "2027-10-02",
    "2027-10-26", "2027-10-27", "2027-12-25",
    # 2028
    "2028-01-26", "2028-03-10", "2028-04-14", "2028-08-15", "2028-10-02",
    "2028-11-13", "2028-11-14", "2028-12-25",
    # 2029
    "2029-01-26", "2029-02-28", "2029-03-30", "2029-08-15", "2029-10-02",
    "2029-11-02", "2029-11-03", "2029-12-25",
    # 2030
    "2030-01-26", "2030-03-19", "2030-04-19", "2030-08-15", "2030-10-02",
    "2030-10-23", "2030-10-24", "2030-12-25",
])


def to_ist(moment: Optional[datetime] = None) -> datetime:
    """Convert a moment to IST. Naive datetimes are treated as UTC."""
    if moment is None:
        return datetime.now(IST)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(IST)


def is_holiday(day: date) -> bool:
    return day in MARKET_HOLIDAYS


def is_market_open(now: Optional[datetime] = None) -> tuple[bool, str]:
    """Check if the Indian stock market is open.

    Args:
        now: Moment to check; defaults to the current time.

    Returns:
        Tuple of (is_open, status_message).
    """
    ist = to_ist(now)

    if ist.weekday() >= 5:  # Saturday = 5, Sunday = 6
        return False, "Market closed (Weekend). Next open: Monday 9:15 AM"

    if is_holiday(ist.date()):
        return False, "Market closed (Exchange holiday)"

    current = ist.time()
    if current < MARKET_OPEN:
        return False, "Market opens at 9:15 AM (Pre-market)"
    # Closing time itself is outside the session
    if current >= MARKET_CLOSE:
        return False, "Market closed for today (Post-market)"
    return True, "Market is OPEN"


def is_trading_hours(now: Optional[datetime] = None) -> bool:
    """Whether ``now`` falls within 9:15-15:30 IST on a trading day."""
    return is_market_open(now)[0]


def market_status(now: Optional[datetime] = None) -> dict:
    """Get detailed market status.

    Returns:
        Dictionary with market status information.
    """
    is_open, message = is_market_open(now)
    ist = to_ist(now)
    return {
        "is_open": is_open,
        "message": message,
        "current_time": ist.strftime("%H:%M:%S"),
        "date": ist.strftime("%Y-%m-%d"),
        "day": ist.strftime("%A"),
    }
