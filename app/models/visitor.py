from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from sqlalchemy import String, DateTime, ForeignKey, Text, Enum as SQLEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin, utcnow


class VisitorStatus(str, Enum):
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class IdProofType(str, Enum):
    AADHAR = "aadhar"
    PAN = "pan"
    DRIVING_LICENSE = "driving_license"
    PASSPORT = "passport"
    VOTER_ID = "voter_id"


class Visitor(Base, TimestampMixin):
    __tablename__ = "visitors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)
    room_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    purpose: Mapped[str] = mapped_column(String(255), nullable=False)
    id_proof_type: Mapped[Optional[IdProofType]] = mapped_column(SQLEnum(IdProofType), nullable=True)
    id_proof_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    check_in_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    check_out_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[VisitorStatus] = mapped_column(SQLEnum(VisitorStatus), default=VisitorStatus.CHECKED_IN, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
