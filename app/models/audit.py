"""Audit log model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class AuditLog(Base):
    """Audit trail for reservation, table and deposit changes"""
    __tablename__ = "audit_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"))

    # Actor information
    actor_id = Column(UUID(as_uuid=True))  # User ID or null for system
    actor_type = Column(String(50))  # customer, staff, restaurant_admin, super_admin, system

    # Action details
    action = Column(String(100), nullable=False)  # reservation_status_changed, table_status_set, etc.
    resource_type = Column(String(50))  # reservation, table
    resource_id = Column(UUID(as_uuid=True))

    # Change data
    data_json = Column(JSON)  # {"before": {...}, "after": {...}}

    created_at = Column(DateTime, default=datetime.utcnow)


def audit_entry(action, resource_type, resource_id, restaurant_id, actor=None, before=None, after=None, **extra):
    """Build an AuditLog row for the given change"""
    data = {"before": before, "after": after}
    data.update(extra)
    return AuditLog(
        restaurant_id=restaurant_id,
        actor_id=actor.id if actor is not None else None,
        actor_type=actor.role.value if actor is not None else "system",
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        data_json=data,
    )
