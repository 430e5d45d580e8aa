from supabase import AsyncClient
from app.configs.app_settings import settings
from app.models.booking_models import BookingAggregate, BookingsView
from app.services.booking_aggregator import compute_booking_aggregate, empty_aggregate, normalize_booking, today_in_zone
from contextlib import asynccontextmanager
from datetime import datetime, tzinfo
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Set
from zoneinfo import ZoneInfo
import asyncio
import logging
import uuid

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[Dict[str, Any]]], None]
ErrorCallback = Callable[[str], None]
Unsubscribe = Callable[[], Awaitable[None]]

# realtime channel states that mean the live feed is gone
FAILED_CHANNEL_STATES = {"CHANNEL_ERROR", "TIMED_OUT"}


def get_dashboard_timezone() -> Optional[tzinfo]:
    """Configured dashboard zone, None for the server's local zone"""
    if not settings.DASHBOARD_TIMEZONE:
        return None
    return ZoneInfo(settings.DASHBOARD_TIMEZONE)


# =====================================
# UPSTREAM: SNAPSHOT SOURCE
# =====================================


class SupabaseBookingSnapshotSource:
    """Whole-table booking snapshots pushed on every realtime change"""

    def __init__(self, supabase_client: AsyncClient, table: Optional[str] = None, order_field: Optional[str] = None):
        self.supabase_client = supabase_client
        self.table = table or settings.BOOKINGS_TABLE
        self.order_field = order_field or settings.BOOKINGS_ORDER_FIELD

    async def fetch_snapshot(self) -> List[Dict[str, Any]]:
        """Every booking row, newest first when the order column exists"""
        try:
            result = await self.supabase_client.table(self.table).select("*").order(self.order_field, desc=True).execute()
        except Exception as e:
            logger.warning(f"Ordered {self.table} query failed, falling back to unordered: {str(e)}")
            result = await self.supabase_client.table(self.table).select("*").execute()
        return list(result.data or [])

    async def subscribe(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> Unsubscribe:
        """Start delivering snapshots; the returned coroutine function stops them"""
        delivery_lock = asyncio.Lock()
        pending: Set[asyncio.Task] = set()
        closed = False

        async def deliver() -> None:
            # one snapshot at a time, each one a fresh full read
            async with delivery_lock:
                if closed:
                    return
                try:
                    rows = await self.fetch_snapshot()
                except Exception as e:
                    logger.error(f"Error fetching {self.table} snapshot: {str(e)}")
                    on_error(f"Failed to load bookings: {str(e)}")
                    return
                if closed:
                    return
                try:
                    on_snapshot(rows)
                except Exception as e:
                    logger.error(f"Error applying {self.table} snapshot: {str(e)}")
                    on_error(f"Failed to process bookings: {str(e)}")

        def on_change(payload: Dict[str, Any]) -> None:
            task = asyncio.ensure_future(deliver())
            pending.add(task)
            task.add_done_callback(pending.discard)

        def on_channel_state(state: Any, error: Optional[Exception] = None) -> None:
            state_name = str(getattr(state, "value", state))
            if state_name in FAILED_CHANNEL_STATES:
                logger.error(f"{self.table} realtime channel {state_name}: {error}")
                on_error(f"Live bookings feed {state_name.lower()}: {error}" if error else f"Live bookings feed {state_name.lower()}")
            else:
                logger.info(f"{self.table} realtime channel {state_name}")

        channel = self.supabase_client.channel(f"{self.table.lower()}-snapshots-{uuid.uuid4().hex[:8]}")
        try:
            channel.on_postgres_changes("*", schema="public", table=self.table, callback=on_change)
            await channel.subscribe(on_channel_state)
        except Exception as e:
            # the initial snapshot below still gives the dashboard data, just not live
            logger.error(f"Error opening {self.table} realtime channel: {str(e)}")
            on_error(f"Failed to subscribe to bookings: {str(e)}")

        await deliver()

        async def unsubscribe() -> None:
            nonlocal closed
            if closed:
                return
            closed = True
            for task in list(pending):
                task.cancel()
            try:
                await self.supabase_client.remove_channel(channel)
                logger.info(f"✅ {self.table} realtime channel removed")
            except Exception as e:
                logger.warning(f"Error removing {self.table} realtime channel: {str(e)}")

        return unsubscribe


# =====================================
# DOWNSTREAM: READ-ONLY VIEW
# =====================================


class BookingsState:
    """Latest snapshot and its aggregate.

    Only the subscription callbacks write; they build a complete new BookingsView
    and swap it in with a single assignment, so readers never see half an update.
    Reading after the dashboard day has changed recomputes the aggregate from the
    stored rows, so "today" and the 7 day window follow the clock between snapshots.
    """

    def __init__(self, tz: Optional[tzinfo] = None, clock: Callable[[], Optional[datetime]] = lambda: None):
        self.tz = tz
        self.clock = clock
        self._view = BookingsView(raw_bookings=[], aggregate=empty_aggregate(now=clock(), tz=tz), is_loading=True)

    @property
    def view(self) -> BookingsView:
        now = self.clock()
        current = self._view
        if current.aggregate.generated_for != today_in_zone(now, self.tz):
            current = BookingsView(
                raw_bookings=current.raw_bookings,
                aggregate=self._aggregate(current.raw_bookings, now),
                is_loading=current.is_loading,
                last_error=current.last_error,
            )
            self._view = current
            logger.info(f"Dashboard day rolled over to {current.aggregate.generated_for}, aggregate recomputed")
        return current

    def _aggregate(self, rows: List[Dict[str, Any]], now: Optional[datetime]) -> BookingAggregate:
        records = [normalize_booking(row, self.tz) for row in rows]
        return compute_booking_aggregate(records, now=now, tz=self.tz)

    def apply_snapshot(self, rows: List[Dict[str, Any]]) -> None:
        aggregate = self._aggregate(rows, self.clock())
        self._view = BookingsView(raw_bookings=list(rows), aggregate=aggregate, is_loading=False)
        logger.debug(f"Bookings snapshot applied: {len(rows)} rows, {aggregate.badge_count} pending")

    def apply_error(self, message: str) -> None:
        previous = self._view
        self._view = BookingsView(
            raw_bookings=previous.raw_bookings,
            aggregate=previous.aggregate,
            is_loading=False,
            last_error=message,
        )


@asynccontextmanager
async def bookings_subscription(source: SupabaseBookingSnapshotSource, state: BookingsState) -> AsyncIterator[BookingsState]:
    """Hold one snapshot subscription for as long as the block runs"""
    unsubscribe = await source.subscribe(state.apply_snapshot, state.apply_error)
    try:
        yield state
    finally:
        await unsubscribe()
