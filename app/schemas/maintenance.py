"""
Maintenance Request Schemas
"""
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.maintenance import MaintenanceCategory, MaintenancePriority, MaintenanceStatus


class MaintenanceRequestCreate(BaseModel):
    tenant_id: Optional[UUID] = None
    room_number: str = Field(..., min_length=1, max_length=20)
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=3)
    category: MaintenanceCategory = MaintenanceCategory.OTHER
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    scheduled_date: Optional[date] = None
    notes: Optional[str] = None


class MaintenanceRequestUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=3)
    category: Optional[MaintenanceCategory] = None
    priority: Optional[MaintenancePriority] = None
    assigned_to: Optional[str] = None
    scheduled_date: Optional[date] = None
    cost: Optional[float] = Field(None, ge=0)
    feedback: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    notes: Optional[str] = None


class MaintenanceStatusUpdate(BaseModel):
    status: MaintenanceStatus
    assigned_to: Optional[str] = None
    cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class MaintenanceRequestResponse(BaseModel):
    id: UUID
    tenant_id: Optional[UUID] = None
    room_number: str
    title: str
    description: str
    category: MaintenanceCategory
    priority: MaintenancePriority
    status: MaintenanceStatus
    assigned_to: Optional[str] = None
    scheduled_date: Optional[date] = None
    completed_date: Optional[date] = None
    cost: Optional[float] = None
    feedback: Optional[str] = None
    rating: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
