"""Booking normalization and dashboard aggregation.

Everything in this module is synchronous and side-effect free: the same
snapshot and the same ``now`` always give the same aggregate. Malformed
fields fall back to defaults instead of raising, so a bad row can never drop
out of the snapshot or break the dashboard.
"""

from app.models.booking_models import BookingAggregate, BookingRecord, DailyRevenuePoint
from dateutil import parser as date_parser
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Mapping, Optional
import math

# field priority lists, first non-null value wins
AMOUNT_FIELDS = ("amount", "totalAmount", "customerFare")
STATUS_FIELDS = ("status", "bookingStatus")
STATUS_LABEL_FIELDS = ("status", "bookingStatus", "state")
TIMESTAMP_FIELDS = ("bookingDateTime", "createdAt", "date")
CUSTOMER_FIELDS = ("customerName", "customer", "customerId")
DRIVER_FIELDS = ("driverName", "driver")

COMPLETED_STATUS = "completed"
REVENUE_WINDOW_DAYS = 7

# reference dates for detecting strings without a complete calendar date
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def _first_present(data: Mapping[str, Any], fields: Iterable[str]) -> Any:
    for field in fields:
        value = data.get(field)
        if value is not None:
            return value
    return None


def coerce_number(value: Any) -> float:
    """Numeric coercion with 0 for anything that is not a finite number"""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def resolve_amount(data: Mapping[str, Any]) -> float:
    return coerce_number(_first_present(data, AMOUNT_FIELDS))


def resolve_status(data: Mapping[str, Any]) -> str:
    status = _first_present(data, STATUS_FIELDS)
    return "" if status is None else str(status).strip().lower()


def to_zone(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Aware datetime in the dashboard zone (server local zone when tz is None).

    Naive values are read as wall-clock time in that same zone.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=tz) if tz is not None else value.astimezone()
    return value.astimezone(tz)


def _parse_full_date(text: str) -> Optional[datetime]:
    # dateutil fills missing year/month/day from `default`; a string that carries
    # a full date parses the same under two different defaults
    first = date_parser.parse(text, default=_DEFAULT_A)
    second = date_parser.parse(text, default=_DEFAULT_B)
    if first.date() != second.date():
        return None
    return first


def parse_timestamp(raw: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Decode any of the timestamp encodings the booking apps write.

    Accepts platform timestamp mappings ({"seconds": ..} / {"_seconds": ..}),
    datetime and date objects, epoch milliseconds and date strings.
    Returns None for anything unparseable.
    """
    if raw is None or isinstance(raw, bool):
        return None

    try:
        if isinstance(raw, dict):
            seconds = raw.get("seconds", raw.get("_seconds"))
            if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
                return None
            nanos = coerce_number(raw.get("nanoseconds", raw.get("_nanoseconds")))
            parsed = datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
        elif isinstance(raw, datetime):
            parsed = raw
        elif isinstance(raw, date):
            parsed = datetime(raw.year, raw.month, raw.day)
        elif isinstance(raw, (int, float)):
            if not math.isfinite(raw):
                return None
            parsed = datetime.fromtimestamp(raw / 1000, tz=timezone.utc)
        elif isinstance(raw, str):
            text = raw.strip()
            if not text:
                return None
            parsed = _parse_full_date(text)
            if parsed is None:
                return None
        else:
            return None
        return to_zone(parsed, tz)
    except (ValueError, OverflowError, OSError):
        # dateutil's ParserError is a ValueError subclass
        return None


def resolve_timestamp(data: Mapping[str, Any], tz: Optional[tzinfo] = None) -> Optional[datetime]:
    return parse_timestamp(_first_present(data, TIMESTAMP_FIELDS), tz)


def normalize_booking(data: Mapping[str, Any], tz: Optional[tzinfo] = None) -> BookingRecord:
    """Build a typed BookingRecord from a raw booking row"""
    booked_at = resolve_timestamp(data, tz)
    raw_id = data.get("id")
    record_id = "" if raw_id is None else str(raw_id)

    status_label = _first_present(data, STATUS_LABEL_FIELDS)
    customer = _first_present(data, CUSTOMER_FIELDS)
    driver = _first_present(data, DRIVER_FIELDS)
    if driver is None:
        driver = "Assigned" if data.get("driverId") else "Unassigned"

    return BookingRecord(
        id=record_id,
        booking_id=str(data.get("bookingId") or record_id),
        amount=resolve_amount(data),
        status=resolve_status(data),
        status_label="Unknown" if status_label is None else str(status_label),
        booked_at=booked_at,
        sort_key_ms=int(booked_at.timestamp() * 1000) if booked_at else 0,
        customer="Unknown" if customer is None else str(customer),
        driver=str(driver),
        data=dict(data),
    )


def today_in_zone(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> date:
    if now is None:
        now = datetime.now(timezone.utc)
    return to_zone(now, tz).date()


def revenue_window(today: date) -> List[str]:
    """ISO keys for the 6 days before today plus today, oldest first"""
    return [(today - timedelta(days=offset)).isoformat() for offset in range(REVENUE_WINDOW_DAYS - 1, -1, -1)]


def _money(amounts: List[float]) -> float:
    # fsum is correctly rounded, so the result does not depend on input order
    return round(math.fsum(amounts), 2)


def compute_booking_aggregate(
    bookings: Iterable[BookingRecord],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> BookingAggregate:
    """Recompute every dashboard statistic from one booking snapshot"""
    today = today_in_zone(now, tz)
    records = list(bookings)

    todays_count = 0
    todays_amounts: List[float] = []
    completed_amounts: List[float] = []
    daily_amounts: Dict[str, List[float]] = {key: [] for key in revenue_window(today)}
    badge_count = 0

    for booking in records:
        if booking.status == COMPLETED_STATUS:
            completed_amounts.append(booking.amount)
        else:
            badge_count += 1

        if booking.booked_at is None:
            continue

        booked_on = booking.booked_at.date()
        if booked_on == today:
            todays_count += 1
            todays_amounts.append(booking.amount)

        # independent of the "today" check, today's slot is part of the window too
        day_key = booked_on.isoformat()
        if day_key in daily_amounts:
            daily_amounts[day_key].append(booking.amount)

    # sorted() is stable with reverse=True, equal keys keep snapshot order
    recent = sorted(records, key=lambda booking: booking.sort_key_ms, reverse=True)

    return BookingAggregate(
        generated_for=today,
        todays_count=todays_count,
        todays_revenue=_money(todays_amounts),
        total_completed_revenue=_money(completed_amounts),
        badge_count=badge_count,
        daily_revenue_7=[DailyRevenuePoint(date=key, revenue=_money(amounts)) for key, amounts in daily_amounts.items()],
        recent_bookings=recent,
    )


def empty_aggregate(now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> BookingAggregate:
    return compute_booking_aggregate([], now=now, tz=tz)
