"""
Tenant Model - PG residents
Never hard-deleted; move-out is a status change.
"""
from datetime import date
from enum import Enum
from typing import Optional
import uuid

from sqlalchemy import String, Float, Date, Boolean, Text, Enum as SQLEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class TenantStatus(str, Enum):
    ACTIVE = "active"
    ADJUST = "adjust"  # awaiting reassignment
    INACTIVE = "inactive"


class Tenant(Base, TimestampMixin):
    __tablename__ = "tenants"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Tenant details
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Room assignment, by room number
    room_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)

    # Occupancy & rent
    joining_date: Mapped[date] = mapped_column(Date, nullable=False)
    monthly_rent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    security_deposit: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    has_food: Mapped[bool] = mapped_column(Boolean, default=False)

    # Electricity meter baseline
    electricity_joining_reading: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    last_electricity_reading: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Status & notice
    status: Mapped[TenantStatus] = mapped_column(SQLEnum(TenantStatus), nullable=False, default=TenantStatus.ACTIVE, index=True)
    notice_given: Mapped[bool] = mapped_column(Boolean, default=False)
    notice_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    departure_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def previous_electricity_reading(self) -> float:
        """Baseline for the next bill: last billed reading, else the move-in reading"""
        if self.last_electricity_reading is not None:
            return self.last_electricity_reading
        return self.electricity_joining_reading or 0.0
