from fastapi import APIRouter, Depends, Query
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.user_auth import get_current_admin_id
from app.services.admin.admin_customer_services import AdminCustomerService
from app.models.customer_models import CustomerListResponse
from typing import Optional

admin_customer_router = APIRouter(prefix="/admin/customers", tags=["Admin"], dependencies=[Depends(get_current_admin_id)])


async def get_admin_customer_service(supabase_client: AsyncClient = Depends(get_supabase_client)) -> AdminCustomerService:
    """Dependency to get AdminCustomerService instance"""
    return AdminCustomerService(supabase_client)


@admin_customer_router.get("", response_model=CustomerListResponse)
async def list_customers(
    search: Optional[str] = Query(None, description="Matches name, email, phone or customer id"),
    customer_service: AdminCustomerService = Depends(get_admin_customer_service),
):
    """Customer listing, newest first"""
    return await customer_service.list_customers(search)
