"""Table schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field

from app.models.table import TableStatus


class TableCreate(BaseModel):
    """Create table request"""
    number: int = Field(..., ge=1)
    capacity: int = Field(..., ge=1)
    zone: str = "main"
    shape: str = "round"
    position_x: int = 0
    position_y: int = 0
    width: int = 80
    height: int = 80


class TableUpdate(BaseModel):
    """Update table request"""
    number: Optional[int] = Field(None, ge=1)
    capacity: Optional[int] = Field(None, ge=1)
    zone: Optional[str] = None
    shape: Optional[str] = None
    position_x: Optional[int] = None
    position_y: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None


class TableStatusUpdate(BaseModel):
    """Staff override of a table's status"""
    status: TableStatus


class TableResponse(BaseModel):
    """Table response"""
    id: UUID
    restaurant_id: UUID
    number: int
    capacity: int
    status: TableStatus
    zone: Optional[str]
    shape: Optional[str]
    position_x: Optional[int]
    position_y: Optional[int]
    width: Optional[int]
    height: Optional[int]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TableAvailabilityResponse(TableResponse):
    """Table labelled for a requested slot"""
    availability_status: str
    is_selectable: bool
