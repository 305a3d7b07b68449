"""Database models"""

from app.models.restaurant import Restaurant, RestaurantSettings, StaffContact
from app.models.table import Table, TableStatus
from app.models.reservation import Reservation, ReservationStatus
from app.models.waitlist import WaitlistEntry, WaitlistStatus, WaitlistPriority
from app.models.audit import AuditLog
from app.models.user import User, UserRole

__all__ = [
    "Restaurant",
    "RestaurantSettings",
    "StaffContact",
    "Table",
    "TableStatus",
    "Reservation",
    "ReservationStatus",
    "WaitlistEntry",
    "WaitlistStatus",
    "WaitlistPriority",
    "AuditLog",
    "User",
    "UserRole",
]
