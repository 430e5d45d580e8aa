from fastapi import APIRouter, Depends, Query, Request
from app.models.booking_models import BookingRecord, BookingsView, DashboardStatsResponse
from app.services.booking_feed_services import BookingsState
from app.utils.user_auth import get_current_admin_id
from typing import List

admin_dashboard_router = APIRouter(prefix="/admin/dashboard", tags=["Admin"], dependencies=[Depends(get_current_admin_id)])


async def get_bookings_state(request: Request) -> BookingsState:
    """Dependency to get the app wide BookingsState fed by the lifespan subscription"""
    return request.app.state.bookings_state


# =====================================
# DASHBOARD ENDPOINTS
# =====================================


@admin_dashboard_router.get("", response_model=BookingsView)
async def get_dashboard(bookings_state: BookingsState = Depends(get_bookings_state)):
    """Raw bookings, derived aggregate and feed health in one read"""
    return bookings_state.view


# --------------------------------------------------------------


@admin_dashboard_router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(bookings_state: BookingsState = Depends(get_bookings_state)):
    """Stat cards and the 7 day revenue sparkline"""
    view = bookings_state.view
    aggregate = view.aggregate
    return DashboardStatsResponse(
        generated_for=aggregate.generated_for,
        total_bookings=len(view.raw_bookings),
        todays_count=aggregate.todays_count,
        todays_revenue=aggregate.todays_revenue,
        total_completed_revenue=aggregate.total_completed_revenue,
        badge_count=aggregate.badge_count,
        daily_revenue_7=aggregate.daily_revenue_7,
        is_loading=view.is_loading,
        last_error=view.last_error,
    )


# --------------------------------------------------------------


@admin_dashboard_router.get("/recent", response_model=List[BookingRecord])
async def get_recent_bookings(
    limit: int = Query(5, ge=1, le=100, description="Number of bookings"),
    bookings_state: BookingsState = Depends(get_bookings_state),
):
    """Newest bookings for the dashboard feed"""
    return bookings_state.view.aggregate.recent_bookings[:limit]
