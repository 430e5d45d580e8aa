from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from enum import Enum


class DriverStatus(str, Enum):
    ACTIVE = "Active"
    OFFLINE = "Offline"
    PENDING = "Pending"


class DriverResponse(BaseModel):
    """Driver row normalized for the roster table"""

    id: str
    name: str
    phone: str = ""
    email: str = ""
    vehicle: str = "-"
    plate: str = "-"
    status: str = DriverStatus.PENDING.value
    joined_at: Optional[datetime] = None
    trips: int = 0
    notes: str = ""
    avatar_gradient: str

    # document images
    driver_image: str = ""
    id_card_image: str = ""
    id_card_back_image: str = ""
    licence_image: str = ""
    licence_back_image: str = ""


class DriverListResponse(BaseModel):
    drivers: List[DriverResponse]
    total: int


class DriverStatusUpdateResponse(BaseModel):
    id: str
    status: str


# =====================================
# DRIVER REQUEST MODELS
# =====================================


class RequestLocation(BaseModel):
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class DriverRequestResponse(BaseModel):
    """Ride request offered to a driver"""

    id: str
    status: str = ""
    fare: Optional[float] = None
    distance_km: Optional[float] = None
    created_at: Optional[datetime] = None
    pickup: RequestLocation = RequestLocation()
    dropoff: RequestLocation = RequestLocation()
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_mobile: Optional[str] = None
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    driver_vehicle_number: Optional[str] = None
    driver_payment_confirmed: Optional[bool] = None


class DriverRequestListResponse(BaseModel):
    requests: List[DriverRequestResponse]
    total: int
