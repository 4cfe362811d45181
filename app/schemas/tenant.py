"""
Tenant Pydantic Schemas - API Request/Response Models
"""
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.tenant import TenantStatus


def _clean_mobile(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    digits = "".join(c for c in value if c.isdigit())
    if len(digits) < 10:
        raise ValueError("Mobile number must have at least 10 digits")
    return digits


class TenantBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    mobile: str
    email: Optional[str] = None
    room_number: Optional[str] = None
    joining_date: date
    monthly_rent: float = Field(..., ge=0)
    security_deposit: float = Field(0.0, ge=0)
    has_food: bool = False
    electricity_joining_reading: float = Field(0.0, ge=0)
    notes: Optional[str] = None


class TenantCreate(TenantBase):
    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v):
        return _clean_mobile(v)


class TenantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    mobile: Optional[str] = None
    email: Optional[str] = None
    room_number: Optional[str] = None
    joining_date: Optional[date] = None
    monthly_rent: Optional[float] = Field(None, ge=0)
    security_deposit: Optional[float] = Field(None, ge=0)
    has_food: Optional[bool] = None
    electricity_joining_reading: Optional[float] = Field(None, ge=0)
    last_electricity_reading: Optional[float] = Field(None, ge=0)
    status: Optional[TenantStatus] = None
    notes: Optional[str] = None

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v):
        return _clean_mobile(v)


class TenantResponse(TenantBase):
    id: UUID
    status: TenantStatus
    last_electricity_reading: Optional[float] = None
    notice_given: bool = False
    notice_date: Optional[date] = None
    departure_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TenantNoticeRequest(BaseModel):
    notice_date: Optional[date] = None
    departure_date: Optional[date] = None


class TenantImportRequest(BaseModel):
    tenants: List[TenantCreate]


class TenantImportResult(BaseModel):
    imported: int = 0
    skipped: int = 0
    failed: int = 0
