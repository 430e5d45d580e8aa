from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum


class VehicleSort(str, Enum):
    RECOMMENDED = "recommended"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"


class VehicleResponse(BaseModel):
    """customer_cars row with resolved pricing and owner"""

    id: str
    brand: str = ""
    brand_image: Optional[str] = None
    car_type: str = "Unknown"
    city: str = ""
    color: str = ""
    fuel_type: str = ""
    plate: str = ""
    customer_id: Optional[str] = None
    owner_name: Optional[str] = None
    owner_contact: Optional[str] = None
    base_fare: float
    price_per_km: float
    custom_pricing: bool = False  # False when the fare comes from the car type table
    created_at: Optional[datetime] = None


class VehicleListResponse(BaseModel):
    vehicles: List[VehicleResponse]
    total: int
    categories: List[str]  # "All" first, then every car type seen


# =====================================
# PRICING + BOOKING REQUEST MODELS
# =====================================


class VehiclePricingUpdate(BaseModel):
    base_fare: float = Field(..., ge=0)
    price_per_km: float = Field(..., ge=0)


class FareEstimate(BaseModel):
    vehicle_id: str
    base_fare: float
    price_per_km: float
    distance_km: float
    total: float


class VehicleBookingRequest(BaseModel):
    distance_km: float = Field(5.0, gt=0)


class VehicleBookingResponse(BaseModel):
    booking_id: str
    fare: FareEstimate
