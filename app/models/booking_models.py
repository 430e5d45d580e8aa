from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional
from datetime import date, datetime


# =====================================
# NORMALIZED BOOKING + AGGREGATE MODELS
# =====================================


class BookingRecord(BaseModel):
    """A booking row after field-priority normalization"""

    model_config = ConfigDict(frozen=True)

    id: str
    booking_id: str
    amount: float = 0.0
    status: str = ""  # lower-cased, trimmed; used for classification
    status_label: str = "Unknown"  # as stored; used for display and filtering
    booked_at: Optional[datetime] = None
    sort_key_ms: int = 0
    customer: str = "Unknown"
    driver: str = "Unassigned"
    data: Dict[str, Any] = {}


class DailyRevenuePoint(BaseModel):
    """One calendar day of the 7 day revenue series"""

    model_config = ConfigDict(frozen=True)

    date: str  # Format: "YYYY-MM-DD"
    revenue: float


class BookingAggregate(BaseModel):
    """Dashboard statistics derived from one booking snapshot"""

    model_config = ConfigDict(frozen=True)

    generated_for: date
    todays_count: int
    todays_revenue: float
    total_completed_revenue: float
    badge_count: int
    daily_revenue_7: List[DailyRevenuePoint]  # oldest first, today last
    recent_bookings: List[BookingRecord]  # newest first


class BookingsView(BaseModel):
    """What consumers of the bookings subscription read"""

    model_config = ConfigDict(frozen=True)

    raw_bookings: List[Dict[str, Any]]
    aggregate: BookingAggregate
    is_loading: bool
    last_error: Optional[str] = None


# =====================================
# DASHBOARD RESPONSE MODELS
# =====================================


class DashboardStatsResponse(BaseModel):
    """Aggregate without the booking listing"""

    generated_for: date
    total_bookings: int
    todays_count: int
    todays_revenue: float
    total_completed_revenue: float
    badge_count: int
    daily_revenue_7: List[DailyRevenuePoint]
    is_loading: bool
    last_error: Optional[str] = None


# =====================================
# BOOKINGS TABLE MODELS
# =====================================


class BookingTableStats(BaseModel):
    total_bookings: int
    active_bookings: int
    total_completed_revenue: float


class BookingListResponse(BaseModel):
    bookings: List[BookingRecord]
    stats: BookingTableStats
    is_loading: bool
    last_error: Optional[str] = None


class BookingChatMessage(BaseModel):
    id: str
    message: str = ""
    sender_id: Optional[str] = None
    sender_role: Optional[str] = None
    type: Optional[str] = None
    timestamp: Optional[datetime] = None


class BookingDetailResponse(BaseModel):
    booking: BookingRecord
    chats: List[BookingChatMessage] = []
