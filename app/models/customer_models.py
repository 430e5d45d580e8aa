from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class CustomerResponse(BaseModel):
    id: str
    customer_id: str
    full_name: str = ""
    email: str = ""
    phone: str = ""
    gender: str = "—"
    profile_image: Optional[str] = None
    joined_at: Optional[datetime] = None
    avatar_gradient: str


class CustomerListResponse(BaseModel):
    customers: List[CustomerResponse]
    total: int
