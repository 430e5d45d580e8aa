from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from enum import Enum


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class RewardResponse(BaseModel):
    id: str
    reward_id: Optional[str] = None
    title: str = ""
    subtitle: str = ""
    description: str = ""
    image_url: Optional[str] = None
    discount_type: Optional[str] = None
    discount_value: Optional[float] = None
    discount_label: str = "—"
    button_text: Optional[str] = None
    is_active: bool = False
    created_at: Optional[datetime] = None


class RewardListResponse(BaseModel):
    rewards: List[RewardResponse]
    total: int
    active: int
