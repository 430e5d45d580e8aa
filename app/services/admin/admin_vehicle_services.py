from supabase import AsyncClient
from app.configs.app_settings import settings
from app.models.vehicle_models import (
    FareEstimate,
    VehicleBookingResponse,
    VehicleListResponse,
    VehiclePricingUpdate,
    VehicleResponse,
    VehicleSort,
)
from app.services.booking_aggregator import coerce_number, parse_timestamp
from app.services.booking_feed_services import get_dashboard_timezone
from app.custom_error import ServerError, VehicleNotFoundError
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

# fallback fares in AED when a car carries no pricing of its own
TYPE_PRICING: Dict[str, Tuple[float, float]] = {
    "Comfort / Hala Taxi": (8.0, 2.0),
    "Executive": (18.0, 3.5),
    "Electric": (8.0, 1.8),
    "Premier": (16.0, 3.2),
    "Eco-friendly": (8.0, 1.9),
    "Hala Max": (18.0, 4.0),
    "Max 6": (18.0, 3.8),
}
DEFAULT_PRICING: Tuple[float, float] = (10.0, 2.5)

DEFAULT_DISTANCE_KM = 5.0
ALL_CATEGORIES = "All"
UNKNOWN_CAR_TYPE = "Unknown"
PENDING_BOOKING_STATUS = "pending"


def pricing_for_type(car_type: Optional[str]) -> Tuple[float, float]:
    """(base fare, price per km) for a car type"""
    if not car_type:
        return DEFAULT_PRICING
    return TYPE_PRICING.get(car_type, DEFAULT_PRICING)


def resolve_pricing(row: Dict[str, Any]) -> Tuple[float, float, bool]:
    """Stored baseFare/pricePerKm when present, else the car type defaults"""
    default_base, default_per_km = pricing_for_type(row.get("carType"))
    base_fare = row.get("baseFare")
    price_per_km = row.get("pricePerKm")
    custom = base_fare is not None or price_per_km is not None
    return (
        default_base if base_fare is None else coerce_number(base_fare),
        default_per_km if price_per_km is None else coerce_number(price_per_km),
        custom,
    )


def estimate_fare(vehicle_id: str, row: Dict[str, Any], distance_km: float = DEFAULT_DISTANCE_KM) -> FareEstimate:
    """base fare + price per km * distance"""
    base_fare, price_per_km, _ = resolve_pricing(row)
    return FareEstimate(
        vehicle_id=vehicle_id,
        base_fare=base_fare,
        price_per_km=price_per_km,
        distance_km=distance_km,
        total=round(base_fare + price_per_km * distance_km, 2),
    )


class AdminVehicleService:
    def __init__(self, supabase_client: AsyncClient):
        self.supabase_client = supabase_client

    def _to_vehicle(self, row: Dict[str, Any], owners: Dict[str, Dict[str, Any]]) -> VehicleResponse:
        base_fare, price_per_km, custom = resolve_pricing(row)
        customer_id = row.get("customerId")
        owner = owners.get(str(customer_id)) if customer_id is not None else None

        return VehicleResponse(
            id=str(row.get("id", "")),
            brand=str(row.get("brand") or ""),
            brand_image=row.get("brandImage") or None,
            car_type=str(row.get("carType") or UNKNOWN_CAR_TYPE),
            city=str(row.get("city") or ""),
            color=str(row.get("color") or ""),
            fuel_type=str(row.get("fuelType") or ""),
            plate=str(row.get("plate") or row.get("registration") or ""),
            customer_id=None if customer_id is None else str(customer_id),
            owner_name=(owner or {}).get("fullName") or None,
            owner_contact=(owner or {}).get("email") or (owner or {}).get("phoneNumber") or None,
            base_fare=base_fare,
            price_per_km=price_per_km,
            custom_pricing=custom,
            created_at=parse_timestamp(row.get("createdAt"), get_dashboard_timezone()),
        )

    async def _owners_by_id(self) -> Dict[str, Dict[str, Any]]:
        # cars point at either the customer row id or its customerId field
        result = await self.supabase_client.table(settings.CUSTOMERS_TABLE).select("*").execute()
        owners: Dict[str, Dict[str, Any]] = {}
        for customer in result.data or []:
            for key in (customer.get("id"), customer.get("customerId")):
                if key is not None:
                    owners.setdefault(str(key), customer)
        return owners

    async def _get_vehicle_row(self, vehicle_id: str) -> Dict[str, Any]:
        result = await self.supabase_client.table(settings.VEHICLES_TABLE).select("*").eq("id", vehicle_id).execute()
        if not result.data:
            raise VehicleNotFoundError()
        return result.data[0]

    # =====================================
    # VEHICLE LISTING
    # =====================================

    async def list_vehicles(
        self,
        search: Optional[str] = None,
        category: Optional[str] = ALL_CATEGORIES,
        sort: VehicleSort = VehicleSort.RECOMMENDED,
        customer_id: Optional[str] = None,
    ) -> VehicleListResponse:
        """Registered cars with owners, narrowed by search, car type and owner, optionally sorted by per km price"""
        try:
            result = await self.supabase_client.table(settings.VEHICLES_TABLE).select("*").order("createdAt", desc=True).execute()
            owners = await self._owners_by_id()
            vehicles = [self._to_vehicle(row, owners) for row in result.data or []]

            categories = [ALL_CATEGORIES]
            for vehicle in vehicles:
                if vehicle.car_type not in categories:
                    categories.append(vehicle.car_type)

            if customer_id:
                vehicles = [v for v in vehicles if v.customer_id == customer_id]

            if category and category != ALL_CATEGORIES:
                vehicles = [v for v in vehicles if v.car_type == category]

            needle = (search or "").strip().lower()
            if needle:
                vehicles = [v for v in vehicles if self._matches(v, needle)]

            if sort == VehicleSort.PRICE_ASC:
                vehicles = sorted(vehicles, key=lambda v: v.price_per_km)
            elif sort == VehicleSort.PRICE_DESC:
                vehicles = sorted(vehicles, key=lambda v: v.price_per_km, reverse=True)

            return VehicleListResponse(vehicles=vehicles, total=len(vehicles), categories=categories)

        except Exception as e:
            logger.error(f"Error fetching vehicles: {str(e)}")
            raise ServerError(f"Failed to fetch vehicles: {str(e)}")

    @staticmethod
    def _matches(vehicle: VehicleResponse, needle: str) -> bool:
        fields = [vehicle.brand, vehicle.car_type, vehicle.city, vehicle.color, vehicle.plate, vehicle.id, vehicle.owner_name or ""]
        return any(needle in field.lower() for field in fields)

    # =====================================
    # PRICING
    # =====================================

    async def update_pricing(self, vehicle_id: str, pricing: VehiclePricingUpdate) -> VehicleResponse:
        """Store a custom base fare and per km price on one car"""
        try:
            result = (
                await self.supabase_client.table(settings.VEHICLES_TABLE)
                .update({"baseFare": pricing.base_fare, "pricePerKm": pricing.price_per_km})
                .eq("id", vehicle_id)
                .execute()
            )

            if not result.data:
                raise VehicleNotFoundError()

            logger.info(f"✅ Vehicle {vehicle_id} pricing set to {pricing.base_fare} + {pricing.price_per_km}/km")
            return self._to_vehicle(result.data[0], {})

        except Exception as e:
            logger.error(f"Error updating vehicle pricing: {str(e)}")
            if isinstance(e, VehicleNotFoundError):
                raise e
            raise ServerError(f"Failed to update vehicle pricing: {str(e)}")

    # --------------------------------------------------------------

    async def get_fare_estimate(self, vehicle_id: str, distance_km: float = DEFAULT_DISTANCE_KM) -> FareEstimate:
        try:
            row = await self._get_vehicle_row(vehicle_id)
            return estimate_fare(vehicle_id, row, distance_km)

        except Exception as e:
            logger.error(f"Error estimating fare for vehicle {vehicle_id}: {str(e)}")
            if isinstance(e, VehicleNotFoundError):
                raise e
            raise ServerError(f"Failed to estimate fare: {str(e)}")

    # =====================================
    # WRITES
    # =====================================

    async def create_booking(self, vehicle_id: str, distance_km: float = DEFAULT_DISTANCE_KM) -> VehicleBookingResponse:
        """Open a pending booking for a car at its estimated fare"""
        try:
            row = await self._get_vehicle_row(vehicle_id)
            fare = estimate_fare(vehicle_id, row, distance_km)

            booking = {
                "vehicleId": vehicle_id,
                "brand": row.get("brand"),
                "carType": row.get("carType"),
                "customerId": row.get("customerId"),
                "distanceKm": distance_km,
                "totalFare": fare.total,
                "amount": fare.total,
                "status": PENDING_BOOKING_STATUS,
                "createdAt": datetime.now(timezone.utc).isoformat(),
            }
            result = await self.supabase_client.table(settings.BOOKINGS_TABLE).insert(booking).execute()

            if not result.data:
                raise ServerError("Failed to create booking: no row returned")

            booking_id = str(result.data[0].get("id", ""))
            logger.info(f"✅ Booking {booking_id} created for vehicle {vehicle_id} at {fare.total}")
            return VehicleBookingResponse(booking_id=booking_id, fare=fare)

        except Exception as e:
            logger.error(f"Error creating booking for vehicle {vehicle_id}: {str(e)}")
            if isinstance(e, (VehicleNotFoundError, ServerError)):
                raise e
            raise ServerError(f"Failed to create booking: {str(e)}")

    # --------------------------------------------------------------

    async def delete_vehicle(self, vehicle_id: str) -> bool:
        """Remove a car"""
        try:
            result = await self.supabase_client.table(settings.VEHICLES_TABLE).delete().eq("id", vehicle_id).execute()

            if not result.data:
                raise VehicleNotFoundError()

            logger.info(f"🗑️ Vehicle {vehicle_id} deleted")
            return True

        except Exception as e:
            logger.error(f"Error deleting vehicle: {str(e)}")
            if isinstance(e, VehicleNotFoundError):
                raise e
            raise ServerError(f"Failed to delete vehicle: {str(e)}")
