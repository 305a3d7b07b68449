"""User model for customers and restaurant staff"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from app.database import Base


class UserRole(str, enum.Enum):
    """User roles for RBAC"""
    CUSTOMER = "customer"
    STAFF = "staff"
    RESTAURANT_ADMIN = "restaurant_admin"
    SUPER_ADMIN = "super_admin"


class User(Base):
    """Platform users"""
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Only staff and restaurant admins belong to a restaurant
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"))

    # Authentication
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # Profile
    full_name = Column(String(255))
    phone = Column(String(20))

    # Role
    role = Column(Enum(UserRole), default=UserRole.CUSTOMER)

    # Status
    is_active = Column(Boolean, default=True)
    is_verified = Column(Boolean, default=False)

    # Tokens
    refresh_token = Column(String(500))

    # Timestamps
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    restaurant = relationship("Restaurant", back_populates="users")
    reservations = relationship("Reservation", back_populates="customer")

    def has_permission(self, required_role: UserRole) -> bool:
        """Check if user has at least the required role level"""
        role_hierarchy = {
            UserRole.CUSTOMER: 1,
            UserRole.STAFF: 2,
            UserRole.RESTAURANT_ADMIN: 3,
            UserRole.SUPER_ADMIN: 4,
        }
        return role_hierarchy.get(self.role, 0) >= role_hierarchy.get(required_role, 0)

    def can_manage_restaurant(self, restaurant_id, required_role: UserRole = UserRole.STAFF) -> bool:
        """Staff or admin of the given restaurant, or a super admin"""
        if self.role == UserRole.SUPER_ADMIN:
            return True
        return self.restaurant_id == restaurant_id and self.has_permission(required_role)
