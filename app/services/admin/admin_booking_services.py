from supabase import AsyncClient
from app.configs.app_settings import settings
from app.models.booking_models import (
    BookingChatMessage,
    BookingDetailResponse,
    BookingListResponse,
    BookingRecord,
    BookingTableStats,
)
from app.services.booking_aggregator import COMPLETED_STATUS, parse_timestamp
from app.services.booking_feed_services import BookingsState
from app.custom_error import BookingNotFoundError, ServerError
from typing import Any, Dict, List, Optional
import logging
import math

logger = logging.getLogger(__name__)

ALL_STATUSES = "All"
ACTIVE_STATUS = "active"
CANCELLED_STATUS = "Cancelled"


class AdminBookingService:
    """Bookings table for the admin dashboard.

    Reads come from the live bookings snapshot held by BookingsState, so listing
    and searching never hit the database. Writes go straight to Supabase and
    reach the snapshot through the realtime feed.
    """

    def __init__(self, supabase_client: AsyncClient, bookings_state: BookingsState):
        self.supabase_client = supabase_client
        self.bookings_state = bookings_state

    def _current_bookings(self) -> List[BookingRecord]:
        # recent_bookings holds every booking of the snapshot, newest first
        return list(self.bookings_state.view.aggregate.recent_bookings)

    # =====================================
    # LISTING
    # =====================================

    def list_bookings(self, status: Optional[str] = ALL_STATUSES, search: Optional[str] = None) -> BookingListResponse:
        """Filter the current snapshot by status label and free-text search"""
        view = self.bookings_state.view
        bookings = self._current_bookings()

        filtered = bookings
        if status and status != ALL_STATUSES:
            wanted = status.strip().lower()
            filtered = [b for b in filtered if b.status_label.strip().lower() == wanted]

        if search:
            needle = search.lower()
            filtered = [
                b for b in filtered if needle in b.booking_id.lower() or needle in b.customer.lower() or needle in b.driver.lower()
            ]

        return BookingListResponse(
            bookings=filtered,
            stats=self._table_stats(bookings),
            is_loading=view.is_loading,
            last_error=view.last_error,
        )

    def _table_stats(self, bookings: List[BookingRecord]) -> BookingTableStats:
        completed_revenue = math.fsum(b.amount for b in bookings if b.status == COMPLETED_STATUS)
        return BookingTableStats(
            total_bookings=len(bookings),
            active_bookings=sum(1 for b in bookings if b.status == ACTIVE_STATUS),
            total_completed_revenue=round(completed_revenue, 2),
        )

    # =====================================
    # DETAIL
    # =====================================

    def _find_booking(self, booking_id: str) -> BookingRecord:
        for booking in self._current_bookings():
            if booking.id == booking_id:
                return booking
        raise BookingNotFoundError()

    async def get_booking_detail(self, booking_id: str) -> BookingDetailResponse:
        """One booking from the snapshot together with its chat thread"""
        booking = self._find_booking(booking_id)
        try:
            chats = await self._get_booking_chats(booking_id)
            return BookingDetailResponse(booking=booking, chats=chats)

        except Exception as e:
            logger.error(f"Error fetching booking detail for {booking_id}: {str(e)}")
            raise ServerError(f"Failed to fetch booking chat: {str(e)}")

    async def _get_booking_chats(self, booking_id: str) -> List[BookingChatMessage]:
        table = settings.BOOKING_CHATS_TABLE
        try:
            result = await self.supabase_client.table(table).select("*").eq("booking_id", booking_id).order("timestamp").execute()
        except Exception as e:
            logger.warning(f"Ordered chat query failed for booking {booking_id}, falling back to unordered: {str(e)}")
            result = await self.supabase_client.table(table).select("*").eq("booking_id", booking_id).execute()

        return [self._to_chat_message(row) for row in result.data or []]

    def _to_chat_message(self, row: Dict[str, Any]) -> BookingChatMessage:
        def first(*fields: str) -> Optional[Any]:
            for field in fields:
                if row.get(field) is not None:
                    return row[field]
            return None

        sender_id = first("senderId", "sender", "from")
        sender_role = first("senderRole", "role")
        return BookingChatMessage(
            id=str(row.get("id", "")),
            message=str(first("message", "text", "msg") or ""),
            sender_id=None if sender_id is None else str(sender_id),
            sender_role=None if sender_role is None else str(sender_role),
            type=None if row.get("type") is None else str(row["type"]),
            timestamp=parse_timestamp(first("timestamp", "createdAt"), self.bookings_state.tz),
        )

    # =====================================
    # WRITES
    # =====================================

    async def cancel_booking(self, booking_id: str) -> bool:
        """Mark a booking as cancelled"""
        try:
            result = await self.supabase_client.table(settings.BOOKINGS_TABLE).update({"status": CANCELLED_STATUS}).eq("id", booking_id).execute()

            if not result.data:
                raise BookingNotFoundError()

            logger.info(f"✅ Booking {booking_id} cancelled")
            return True

        except Exception as e:
            logger.error(f"Error cancelling booking {booking_id}: {str(e)}")
            if isinstance(e, BookingNotFoundError):
                raise e
            raise ServerError(f"Failed to cancel booking: {str(e)}")
