"""
Room Pydantic Schemas - API Request/Response Models
"""
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.room import RoomType, RoomStatus, RoomMaintenanceStatus


class RoomBase(BaseModel):
    room_number: str = Field(..., min_length=1, max_length=20)
    floor: int = Field(0, ge=0, le=5)
    room_type: RoomType
    monthly_rent: float = Field(..., ge=0)
    security_deposit: float = Field(0.0, ge=0)
    amenities: List[str] = []
    description: Optional[str] = None


class RoomCreate(RoomBase):
    # Derived from room_type when omitted
    capacity: Optional[int] = Field(None, ge=1, le=4)
    status: Optional[RoomStatus] = None
    current_electricity_reading: Optional[float] = Field(None, ge=0)


class RoomUpdate(BaseModel):
    room_number: Optional[str] = Field(None, min_length=1, max_length=20)
    floor: Optional[int] = Field(None, ge=0, le=5)
    room_type: Optional[RoomType] = None
    capacity: Optional[int] = Field(None, ge=1, le=4)
    monthly_rent: Optional[float] = Field(None, ge=0)
    security_deposit: Optional[float] = Field(None, ge=0)
    status: Optional[RoomStatus] = None
    amenities: Optional[List[str]] = None
    description: Optional[str] = None


class RoomResponse(RoomBase):
    id: UUID
    capacity: int
    current_occupancy: int
    status: RoomStatus
    current_electricity_reading: Optional[float] = None
    maintenance_status: RoomMaintenanceStatus
    maintenance_type: Optional[str] = None
    maintenance_description: Optional[str] = None
    maintenance_scheduled_date: Optional[date] = None
    maintenance_completed_date: Optional[date] = None
    last_maintenance_date: Optional[date] = None
    maintenance_cost: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RoomListResponse(BaseModel):
    rooms: List[RoomResponse]
    total_count: int
    total_pages: int
    current_page: int


class RoomAllocateRequest(BaseModel):
    tenant_id: UUID


class RoomDeallocateRequest(BaseModel):
    tenant_id: UUID
    move_out: bool = False


class RoomMaintenanceUpdate(BaseModel):
    maintenance_status: RoomMaintenanceStatus
    maintenance_type: Optional[str] = Field(None, max_length=100)
    maintenance_description: Optional[str] = None
    maintenance_scheduled_date: Optional[date] = None
    maintenance_completed_date: Optional[date] = None
    maintenance_cost: Optional[float] = Field(None, ge=0)


class MeterReadingUpdate(BaseModel):
    reading: float = Field(..., ge=0)


class RoomOccupant(BaseModel):
    id: UUID
    name: str
    mobile: str

    model_config = {"from_attributes": True}


class RoomOccupancyResponse(BaseModel):
    room_number: str
    capacity: Optional[int] = None
    count: int
    occupants: List[RoomOccupant]


class ReconcileResponse(BaseModel):
    rooms_checked: int
    rooms_updated: int
    orphan_tenants: List[str]
    over_capacity_rooms: List[str]
