"""
Revenue and activity aggregation

Dates are compared as naive local datetimes so "today" means the operator's
calendar day. ISO-8601 strings with an offset (usually a trailing "Z") and BSON
dates, which pymongo hands back as naive UTC datetimes, are converted to local
time. ISO strings without an offset are taken as local already.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from database import count_documents, get_documents
from schemas import CONTACTS, ENROLLMENTS, DashboardData, PaymentStats, PaymentStatus, coerce_amount

logger = logging.getLogger(__name__)

RECENT_DAYS = 7
SUCCESS: PaymentStatus = "success"


def current_time() -> datetime:
    return datetime.now()


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Unparseable timestamp %r", value)
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def payment_windows(now: datetime) -> Dict[str, datetime]:
    """Start of each calendar window containing `now`. Weeks start on Sunday."""
    today = datetime(now.year, now.month, now.day)
    # weekday(): Monday=0 .. Sunday=6
    days_since_sunday = (today.weekday() + 1) % 7
    return {
        "today": today,
        "tomorrow": today + timedelta(days=1),
        "week": today - timedelta(days=days_since_sunday),
        "month": datetime(now.year, now.month, 1),
        "year": datetime(now.year, 1, 1),
    }


def _payment(enrollment: Dict[str, Any]) -> Dict[str, Any]:
    return enrollment.get("paymentInfo") or {}


def is_successful(enrollment: Dict[str, Any]) -> bool:
    return _payment(enrollment).get("paymentStatus") == SUCCESS


def _amount(enrollment: Dict[str, Any]):
    return coerce_amount(_payment(enrollment).get("amount"))


def payment_stats(enrollments: Iterable[Dict[str, Any]], now: Optional[datetime] = None) -> PaymentStats:
    windows = payment_windows(now or current_time())
    stats = PaymentStats()
    for enrollment in enrollments:
        if not is_successful(enrollment):
            continue
        paid_at = parse_timestamp(_payment(enrollment).get("paymentDate"))
        if paid_at is None:
            continue
        amount = _amount(enrollment)
        if windows["today"] <= paid_at < windows["tomorrow"]:
            stats.today += amount
        if paid_at >= windows["week"]:
            stats.thisWeek += amount
        if paid_at >= windows["month"]:
            stats.thisMonth += amount
        if paid_at >= windows["year"]:
            stats.thisYear += amount
    return stats


def total_revenue(enrollments: Iterable[Dict[str, Any]], since: Optional[datetime] = None):
    total = 0
    for enrollment in enrollments:
        if not is_successful(enrollment):
            continue
        if since is not None:
            paid_at = parse_timestamp(_payment(enrollment).get("paymentDate"))
            if paid_at is None or paid_at < since:
                continue
        total += _amount(enrollment)
    return total


def recent_cutoff(now: datetime) -> datetime:
    return now - timedelta(days=RECENT_DAYS)


def count_since(timestamps: Iterable[Any], cutoff: datetime) -> int:
    count = 0
    for value in timestamps:
        ts = parse_timestamp(value)
        if ts is not None and ts >= cutoff:
            count += 1
    return count


def dashboard_data(database, now: Optional[datetime] = None) -> DashboardData:
    """Recompute the dashboard summary from both collections."""
    now = now or current_time()
    cutoff = recent_cutoff(now)

    contacts: List[Dict[str, Any]] = get_documents(CONTACTS, database=database)
    enrollments: List[Dict[str, Any]] = get_documents(ENROLLMENTS, database=database)

    return DashboardData(
        totalContacts=count_documents(CONTACTS, database=database),
        totalEnrollments=count_documents(ENROLLMENTS, database=database),
        totalRevenue=total_revenue(enrollments),
        recentContacts=count_since((c.get("submittedAt") for c in contacts), cutoff),
        recentEnrollments=count_since(((e.get("invoiceInfo") or {}).get("enrollmentDate") for e in enrollments), cutoff),
        recentRevenue=total_revenue(enrollments, since=cutoff),
        paymentStats=payment_stats(enrollments, now),
    )
