from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.visitor import IdProofType, VisitorStatus


class VisitorCheckIn(BaseModel):
    tenant_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=10, max_length=20)
    purpose: str = Field(..., min_length=1, max_length=255)
    id_proof_type: Optional[IdProofType] = None
    id_proof_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class VisitorCheckOut(BaseModel):
    notes: Optional[str] = None


class VisitorResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    room_number: Optional[str] = None
    name: str
    phone: str
    purpose: str
    id_proof_type: Optional[IdProofType] = None
    id_proof_number: Optional[str] = None
    check_in_time: datetime
    check_out_time: Optional[datetime] = None
    status: VisitorStatus
    notes: Optional[str] = None

    model_config = {"from_attributes": True}
