from fastapi import APIRouter, Depends, Query
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.user_auth import get_current_admin_id
from app.services.admin.admin_driver_services import AdminDriverService
from app.models.driver_models import DriverListResponse, DriverRequestListResponse, DriverStatusUpdateResponse
from typing import Optional

admin_driver_router = APIRouter(prefix="/admin/drivers", tags=["Admin"], dependencies=[Depends(get_current_admin_id)])


async def get_admin_driver_service(supabase_client: AsyncClient = Depends(get_supabase_client)) -> AdminDriverService:
    """Dependency to get AdminDriverService instance"""
    return AdminDriverService(supabase_client)


@admin_driver_router.get("", response_model=DriverListResponse)
async def list_drivers(
    search: Optional[str] = Query(None, description="Matches name, phone, vehicle or plate"),
    driver_service: AdminDriverService = Depends(get_admin_driver_service),
):
    """Driver roster"""
    return await driver_service.list_drivers(search)


# --------------------------------------------------------------


@admin_driver_router.get("/requests", response_model=DriverRequestListResponse)
async def list_driver_requests(driver_service: AdminDriverService = Depends(get_admin_driver_service)):
    """All ride requests, newest first"""
    return await driver_service.list_driver_requests()


# --------------------------------------------------------------


@admin_driver_router.get("/{driver_id}/requests", response_model=DriverRequestListResponse)
async def list_requests_for_driver(driver_id: str, driver_service: AdminDriverService = Depends(get_admin_driver_service)):
    """Ride requests matched to one driver"""
    return await driver_service.list_requests_for_driver(driver_id)


# --------------------------------------------------------------


@admin_driver_router.put("/{driver_id}/toggle-status", response_model=DriverStatusUpdateResponse)
async def toggle_driver_status(driver_id: str, driver_service: AdminDriverService = Depends(get_admin_driver_service)):
    """Switch a driver between Active and Offline"""
    return await driver_service.toggle_driver_status(driver_id)


# --------------------------------------------------------------


@admin_driver_router.delete("/{driver_id}", response_model=bool)
async def delete_driver(driver_id: str, driver_service: AdminDriverService = Depends(get_admin_driver_service)):
    """Remove a driver"""
    return await driver_service.delete_driver(driver_id)
