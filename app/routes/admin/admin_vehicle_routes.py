from fastapi import APIRouter, Depends, Query
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.user_auth import get_current_admin_id
from app.services.admin.admin_vehicle_services import ALL_CATEGORIES, DEFAULT_DISTANCE_KM, AdminVehicleService
from app.models.vehicle_models import (
    FareEstimate,
    VehicleBookingRequest,
    VehicleBookingResponse,
    VehicleListResponse,
    VehiclePricingUpdate,
    VehicleResponse,
    VehicleSort,
)
from typing import Optional

admin_vehicle_router = APIRouter(prefix="/admin/vehicles", tags=["Admin"], dependencies=[Depends(get_current_admin_id)])


async def get_admin_vehicle_service(supabase_client: AsyncClient = Depends(get_supabase_client)) -> AdminVehicleService:
    """Dependency to get AdminVehicleService instance"""
    return AdminVehicleService(supabase_client)


# =====================================
# VEHICLE ENDPOINTS
# =====================================


@admin_vehicle_router.get("", response_model=VehicleListResponse)
async def list_vehicles(
    search: Optional[str] = Query(None, description="Matches brand, type, city, color, plate, id or owner"),
    category: str = Query(ALL_CATEGORIES, description="Car type to keep, or All"),
    sort: VehicleSort = Query(VehicleSort.RECOMMENDED),
    customer_id: Optional[str] = Query(None, description="Only cars owned by this customer"),
    vehicle_service: AdminVehicleService = Depends(get_admin_vehicle_service),
):
    """Registered cars with their owners and pricing"""
    return await vehicle_service.list_vehicles(search, category, sort, customer_id)


# --------------------------------------------------------------


@admin_vehicle_router.put("/{vehicle_id}/pricing", response_model=VehicleResponse)
async def update_vehicle_pricing(
    vehicle_id: str,
    pricing: VehiclePricingUpdate,
    vehicle_service: AdminVehicleService = Depends(get_admin_vehicle_service),
):
    """Set a custom base fare and per km price"""
    return await vehicle_service.update_pricing(vehicle_id, pricing)


# --------------------------------------------------------------


@admin_vehicle_router.get("/{vehicle_id}/fare-estimate", response_model=FareEstimate)
async def get_fare_estimate(
    vehicle_id: str,
    distance_km: float = Query(DEFAULT_DISTANCE_KM, gt=0),
    vehicle_service: AdminVehicleService = Depends(get_admin_vehicle_service),
):
    """Fare for a trip of the given length"""
    return await vehicle_service.get_fare_estimate(vehicle_id, distance_km)


# --------------------------------------------------------------


@admin_vehicle_router.post("/{vehicle_id}/bookings", response_model=VehicleBookingResponse)
async def create_vehicle_booking(
    vehicle_id: str,
    booking_request: VehicleBookingRequest,
    vehicle_service: AdminVehicleService = Depends(get_admin_vehicle_service),
):
    """Open a pending booking for this car"""
    return await vehicle_service.create_booking(vehicle_id, booking_request.distance_km)


# --------------------------------------------------------------


@admin_vehicle_router.delete("/{vehicle_id}", response_model=bool)
async def delete_vehicle(vehicle_id: str, vehicle_service: AdminVehicleService = Depends(get_admin_vehicle_service)):
    """Remove a car"""
    return await vehicle_service.delete_vehicle(vehicle_id)
