"""Pydantic schemas for request/response validation"""

from app.schemas.auth import (
    Token,
    TokenPayload,
    RefreshRequest,
    RegisterRequest,
    UserCreate,
    UserResponse,
)
from app.schemas.restaurant import (
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantResponse,
    RestaurantSettingsUpdate,
    RestaurantSettingsResponse,
    TimeSlotResponse,
    DashboardResponse,
)
from app.schemas.table import (
    TableCreate,
    TableUpdate,
    TableStatusUpdate,
    TableResponse,
    TableAvailabilityResponse,
)
from app.schemas.reservation import (
    ReservationCreate,
    ReservationStatusUpdate,
    ReservationCancel,
    DepositRecord,
    ReservationResponse,
    ReservationListResponse,
)
from app.schemas.waitlist import (
    WaitlistEntryCreate,
    WaitlistStatusUpdate,
    WaitlistEntryResponse,
    WaitlistSummary,
)

__all__ = [
    "Token",
    "TokenPayload",
    "RefreshRequest",
    "RegisterRequest",
    "UserCreate",
    "UserResponse",
    "RestaurantCreate",
    "RestaurantUpdate",
    "RestaurantResponse",
    "RestaurantSettingsUpdate",
    "RestaurantSettingsResponse",
    "TimeSlotResponse",
    "DashboardResponse",
    "TableCreate",
    "TableUpdate",
    "TableStatusUpdate",
    "TableResponse",
    "TableAvailabilityResponse",
    "ReservationCreate",
    "ReservationStatusUpdate",
    "ReservationCancel",
    "DepositRecord",
    "ReservationResponse",
    "ReservationListResponse",
    "WaitlistEntryCreate",
    "WaitlistStatusUpdate",
    "WaitlistEntryResponse",
    "WaitlistSummary",
]
