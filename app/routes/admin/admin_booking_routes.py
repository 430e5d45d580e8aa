from fastapi import APIRouter, Depends, Query
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.user_auth import get_current_admin_id
from app.routes.admin.admin_dashboard_routes import get_bookings_state
from app.services.admin.admin_booking_services import ALL_STATUSES, AdminBookingService
from app.services.booking_feed_services import BookingsState
from app.models.booking_models import BookingDetailResponse, BookingListResponse
from typing import Optional

admin_booking_router = APIRouter(prefix="/admin/bookings", tags=["Admin"], dependencies=[Depends(get_current_admin_id)])


async def get_admin_booking_service(
    supabase_client: AsyncClient = Depends(get_supabase_client),
    bookings_state: BookingsState = Depends(get_bookings_state),
) -> AdminBookingService:
    """Dependency to get AdminBookingService instance"""
    return AdminBookingService(supabase_client, bookings_state)


# =====================================
# BOOKINGS TABLE ENDPOINTS
# =====================================


@admin_booking_router.get("", response_model=BookingListResponse)
async def list_bookings(
    status: str = Query(ALL_STATUSES, description="Status label to keep, or All"),
    search: Optional[str] = Query(None, description="Matches booking id, customer or driver"),
    booking_service: AdminBookingService = Depends(get_admin_booking_service),
):
    """Bookings table with status filter, search and table stats"""
    return booking_service.list_bookings(status, search)


# --------------------------------------------------------------


@admin_booking_router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking_detail(booking_id: str, booking_service: AdminBookingService = Depends(get_admin_booking_service)):
    """Booking detail with its chat thread"""
    return await booking_service.get_booking_detail(booking_id)


# --------------------------------------------------------------


@admin_booking_router.put("/{booking_id}/cancel", response_model=bool)
async def cancel_booking(booking_id: str, booking_service: AdminBookingService = Depends(get_admin_booking_service)):
    """Mark a booking as cancelled"""
    return await booking_service.cancel_booking(booking_id)
