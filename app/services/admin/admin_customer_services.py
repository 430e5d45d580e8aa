from supabase import AsyncClient
from app.configs.app_settings import settings
from app.models.customer_models import CustomerListResponse, CustomerResponse
from app.services.booking_aggregator import parse_timestamp
from app.services.booking_feed_services import get_dashboard_timezone
from app.utils.avatar_utils import name_to_gradient
from app.custom_error import ServerError
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

GENDER_LABELS = {
    "male": "Male",
    "female": "Female",
    "other": "Other",
    "prefer_not_to_say": "Prefer not to say",
}


class AdminCustomerService:
    def __init__(self, supabase_client: AsyncClient):
        self.supabase_client = supabase_client

    def _to_customer(self, row: Dict[str, Any]) -> CustomerResponse:
        full_name = str(row.get("fullName") or "")
        phone = row.get("phoneNumber") or row.get("phone") or row.get("phoneNo") or ""
        gender = row.get("gender")

        return CustomerResponse(
            id=str(row.get("id", "")),
            customer_id=str(row.get("customerId") or row.get("id", "")),
            full_name=full_name,
            email=str(row.get("email") or ""),
            phone=str(phone),
            gender=GENDER_LABELS.get(gender, str(gender)) if gender else "—",
            profile_image=row.get("profileImage") or None,
            joined_at=parse_timestamp(row.get("joinedAt"), get_dashboard_timezone()),
            avatar_gradient=name_to_gradient(full_name),
        )

    async def list_customers(self, search: Optional[str] = None) -> CustomerListResponse:
        """Customers, newest first, optionally narrowed by a search term"""
        try:
            result = await self.supabase_client.table(settings.CUSTOMERS_TABLE).select("*").order("joinedAt", desc=True).execute()
            customers = [self._to_customer(row) for row in result.data or []]

            needle = (search or "").strip().lower()
            if needle:
                customers = [
                    c
                    for c in customers
                    if needle in c.full_name.lower() or needle in c.email.lower() or needle in c.phone.lower() or needle in c.customer_id.lower()
                ]

            return CustomerListResponse(customers=customers, total=len(customers))

        except Exception as e:
            logger.error(f"Error fetching customers: {str(e)}")
            raise ServerError(f"Failed to fetch customers: {str(e)}")
