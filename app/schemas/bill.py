"""
Billing & Payment Request/Response Schemas
"""
from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.bill import BillStatus, PaymentMethod
from app.services.reminder_service import ReminderState


# ==================== Bills ====================

class BillChargeInput(BaseModel):
    tenant_id: UUID
    other_charges: float = Field(0.0, ge=0)
    adjustments: float = Field(0.0, ge=0)


class BillGenerateRequest(BaseModel):
    billing_month: str = Field(..., pattern=r"^\d{4}-(0[1-9]|1[0-2])$", examples=["2024-06"])
    electricity_rate: Optional[float] = Field(None, ge=0)
    due_date: Optional[date] = None
    overwrite: bool = False
    # room_number -> current meter reading
    readings: Dict[str, float] = {}
    charges: List[BillChargeInput] = []

    @field_validator("readings")
    @classmethod
    def validate_readings(cls, v):
        for room_number, reading in v.items():
            if reading < 0:
                raise ValueError(f"Reading for room {room_number} cannot be negative")
        return v


class BillGenerateResponse(BaseModel):
    success: bool = True
    billing_month: str
    generated: int
    updated: int
    skipped: int
    failed: int
    processed: int


class BillUpdate(BaseModel):
    other_charges: Optional[float] = Field(None, ge=0)
    adjustments: Optional[float] = Field(None, ge=0)
    due_date: Optional[date] = None


class BillResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    tenant_name: str
    room_number: Optional[str] = None
    billing_month: str
    rent_amount: float
    electricity_previous_reading: float
    electricity_current_reading: float
    electricity_units: float
    electricity_rate: float
    occupant_count: int
    electricity_amount: float
    other_charges: float
    adjustments: float
    total_amount: float
    amount_paid: float
    balance_due: float
    due_date: date
    status: BillStatus
    payment_method: Optional[PaymentMethod] = None
    reminder_count: int
    last_reminder_sent: Optional[datetime] = None
    generated_date: date

    model_config = {"from_attributes": True}


# ==================== Payments ====================

class PaymentCreate(BaseModel):
    bill_id: UUID
    amount: float = Field(..., gt=0)
    payment_method: PaymentMethod
    transaction_id: Optional[str] = Field(None, max_length=255)
    payment_date: Optional[date] = None
    notes: Optional[str] = None


class PaymentRecordResponse(BaseModel):
    id: UUID
    bill_id: UUID
    tenant_id: UUID
    amount: float
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    payment_date: date
    notes: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class BillDetailResponse(BillResponse):
    payments: List[PaymentRecordResponse] = []


class PaymentRecordedResponse(BaseModel):
    success: bool = True
    payment: PaymentRecordResponse
    bill: BillResponse


# ==================== Reminders ====================

class ReminderResponse(BaseModel):
    bill_id: UUID
    tenant_id: UUID
    tenant_name: str
    room_number: Optional[str] = None
    mobile: str
    billing_month: str
    amount_due: float
    due_date: date
    days_overdue: int
    reminder_count: int
    state: ReminderState
    message: str
    whatsapp_url: Optional[str] = None

    model_config = {"from_attributes": True}


class ReminderPassResponse(BaseModel):
    success: bool = True
    sent: List[ReminderResponse]
    failed: List[ReminderResponse]
    skipped: int
    overdue_updated: int
