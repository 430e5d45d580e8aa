from supabase import AsyncClient
from app.configs.app_settings import settings
from app.models.driver_models import (
    DriverListResponse,
    DriverRequestListResponse,
    DriverRequestResponse,
    DriverResponse,
    DriverStatus,
    DriverStatusUpdateResponse,
    RequestLocation,
)
from app.services.booking_aggregator import coerce_number, parse_timestamp
from app.services.booking_feed_services import get_dashboard_timezone
from app.utils.avatar_utils import name_to_gradient
from app.custom_error import DriverNotFoundError, ServerError
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


def _first_filled(data: Dict[str, Any], *fields: str, default: Any = "") -> Any:
    """First non-empty value; driver documents leave blank strings behind"""
    for field in fields:
        if data.get(field):
            return data[field]
    return default


class AdminDriverService:
    def __init__(self, supabase_client: AsyncClient):
        self.supabase_client = supabase_client

    # =====================================
    # DRIVER ROSTER
    # =====================================

    def _to_driver(self, row: Dict[str, Any]) -> DriverResponse:
        name = str(_first_filled(row, "name", "fullName", default="Unknown"))
        joined = _first_filled(row, "createdAt", "joinedAt", default=None)
        trips = coerce_number(row.get("trips")) or coerce_number(row.get("totalTrips"))

        return DriverResponse(
            id=str(row.get("id", "")),
            name=name,
            phone=str(_first_filled(row, "mobileNumber", "phone", "mobile")),
            email=str(_first_filled(row, "email")),
            vehicle=str(_first_filled(row, "vehicle", "vehicleType", default="-")),
            plate=str(_first_filled(row, "licenceNumber", "vehicleNo", "vehiclePlate", "plate", default="-")),
            status=str(_first_filled(row, "driverStatus", "status", "currentStatus", default=DriverStatus.PENDING.value)),
            joined_at=parse_timestamp(joined, get_dashboard_timezone()),
            trips=int(trips),
            notes=str(_first_filled(row, "notes", "note")),
            avatar_gradient=name_to_gradient(name),
            driver_image=str(_first_filled(row, "driverImage", "photoURL")),
            id_card_image=str(_first_filled(row, "idCardImage")),
            id_card_back_image=str(_first_filled(row, "idCardBackImage")),
            licence_image=str(_first_filled(row, "licenceImage")),
            licence_back_image=str(_first_filled(row, "licenceBackImage")),
        )

    async def list_drivers(self, search: Optional[str] = None) -> DriverListResponse:
        """All drivers by name, optionally narrowed by a search term"""
        try:
            result = await self.supabase_client.table(settings.DRIVERS_TABLE).select("*").order("name").execute()
            drivers = [self._to_driver(row) for row in result.data or []]

            if search:
                needle = search.lower()
                drivers = [
                    d
                    for d in drivers
                    if needle in d.name.lower() or search in d.phone or needle in d.vehicle.lower() or needle in d.plate.lower()
                ]

            return DriverListResponse(drivers=drivers, total=len(drivers))

        except Exception as e:
            logger.error(f"Error fetching drivers: {str(e)}")
            raise ServerError(f"Failed to fetch drivers: {str(e)}")

    # --------------------------------------------------------------

    async def toggle_driver_status(self, driver_id: str) -> DriverStatusUpdateResponse:
        """Flip a driver between Active and Offline"""
        try:
            result = await self.supabase_client.table(settings.DRIVERS_TABLE).select("*").eq("id", driver_id).execute()

            if not result.data:
                raise DriverNotFoundError()

            current = self._to_driver(result.data[0]).status
            new_status = DriverStatus.OFFLINE.value if current == DriverStatus.ACTIVE.value else DriverStatus.ACTIVE.value

            await self.supabase_client.table(settings.DRIVERS_TABLE).update({"driverStatus": new_status, "status": new_status}).eq(
                "id", driver_id
            ).execute()

            logger.info(f"✅ Driver {driver_id} status changed {current} -> {new_status}")
            return DriverStatusUpdateResponse(id=driver_id, status=new_status)

        except Exception as e:
            logger.error(f"Error updating driver status: {str(e)}")
            if isinstance(e, DriverNotFoundError):
                raise e
            raise ServerError(f"Failed to update driver status: {str(e)}")

    # --------------------------------------------------------------

    async def delete_driver(self, driver_id: str) -> bool:
        """Remove a driver record"""
        try:
            result = await self.supabase_client.table(settings.DRIVERS_TABLE).delete().eq("id", driver_id).execute()

            if not result.data:
                raise DriverNotFoundError()

            logger.info(f"🗑️ Driver {driver_id} deleted")
            return True

        except Exception as e:
            logger.error(f"Error deleting driver: {str(e)}")
            if isinstance(e, DriverNotFoundError):
                raise e
            raise ServerError(f"Failed to delete driver: {str(e)}")

    # =====================================
    # DRIVER REQUESTS
    # =====================================

    def _to_location(self, raw: Any) -> RequestLocation:
        if not isinstance(raw, dict):
            return RequestLocation()
        latitude = raw.get("latitude", raw.get("lat"))
        longitude = raw.get("longitude", raw.get("lng"))
        return RequestLocation(
            address=raw.get("address") or None,
            latitude=None if latitude is None else coerce_number(latitude),
            longitude=None if longitude is None else coerce_number(longitude),
        )

    def _to_request(self, row: Dict[str, Any]) -> DriverRequestResponse:
        def optional_str(field: str) -> Optional[str]:
            value = row.get(field)
            return None if value in (None, "") else str(value)

        fare = row.get("fare")
        distance = row.get("distanceinKM", row.get("distanceKm"))
        payment_confirmed = row.get("driverPaymentConfirmed")

        return DriverRequestResponse(
            id=str(row.get("id", "")),
            status=str(row.get("status") or ""),
            fare=None if fare in (None, "") else coerce_number(fare),
            distance_km=None if distance in (None, "") else coerce_number(distance),
            created_at=parse_timestamp(row.get("createdAt"), get_dashboard_timezone()),
            pickup=self._to_location(row.get("pickupLocation")),
            dropoff=self._to_location(row.get("dropOfLocation")),
            customer_id=optional_str("customerId"),
            customer_name=optional_str("customerName"),
            customer_mobile=optional_str("customerMobileNumber"),
            driver_id=optional_str("driverId"),
            driver_name=optional_str("driverName"),
            driver_vehicle_number=optional_str("driverVehicleNumber"),
            driver_payment_confirmed=None if payment_confirmed is None else bool(payment_confirmed),
        )

    @staticmethod
    def _request_belongs_to(request: DriverRequestResponse, driver_id: Optional[str], driver_name: Optional[str]) -> bool:
        # an id on both sides decides; otherwise fall back to a name match
        if request.driver_id and driver_id:
            return request.driver_id.lower() == driver_id.lower()
        if request.driver_name and driver_name:
            return driver_name.lower() in request.driver_name.lower()
        return False

    async def _fetch_requests(self) -> List[DriverRequestResponse]:
        table = settings.DRIVER_REQUESTS_TABLE
        try:
            result = await self.supabase_client.table(table).select("*").order("createdAt", desc=True).execute()
        except Exception as e:
            logger.warning(f"Ordered {table} query failed, falling back to unordered: {str(e)}")
            result = await self.supabase_client.table(table).select("*").execute()
        return [self._to_request(row) for row in result.data or []]

    async def list_driver_requests(self) -> DriverRequestListResponse:
        """Every ride request, newest first"""
        try:
            requests = await self._fetch_requests()
            return DriverRequestListResponse(requests=requests, total=len(requests))

        except Exception as e:
            logger.error(f"Error fetching driver requests: {str(e)}")
            raise ServerError(f"Failed to fetch driver requests: {str(e)}")

    # --------------------------------------------------------------

    async def list_requests_for_driver(self, driver_id: str) -> DriverRequestListResponse:
        """Ride requests matched to one driver by id, or by name when the request has no driver id"""
        try:
            result = await self.supabase_client.table(settings.DRIVERS_TABLE).select("*").eq("id", driver_id).execute()

            if not result.data:
                raise DriverNotFoundError()

            driver = self._to_driver(result.data[0])
            requests = [r for r in await self._fetch_requests() if self._request_belongs_to(r, driver.id, driver.name)]
            return DriverRequestListResponse(requests=requests, total=len(requests))

        except Exception as e:
            logger.error(f"Error fetching requests for driver {driver_id}: {str(e)}")
            if isinstance(e, DriverNotFoundError):
                raise e
            raise ServerError(f"Failed to fetch driver requests: {str(e)}")
