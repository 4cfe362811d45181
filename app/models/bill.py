"""
Billing Models
Monthly bills (rent + electricity) and the payment records applied to them
"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional
import uuid

from sqlalchemy import (
    String, Integer, Float, Date, DateTime, Text, ForeignKey,
    UniqueConstraint, Enum as SQLEnum, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin, utcnow


class BillStatus(str, Enum):
    """Bill status enum"""
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    PARTIAL = "partial"


class PaymentMethod(str, Enum):
    """Payment method enum"""
    CASH = "cash"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"


class Bill(Base, TimestampMixin):
    """One billing-month charge statement for one tenant"""
    __tablename__ = "bills"
    __table_args__ = (
        UniqueConstraint("tenant_id", "billing_month", name="uq_bills_tenant_month"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)

    # Snapshots at generation time
    tenant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    room_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)

    billing_month: Mapped[str] = mapped_column(String(7), nullable=False, index=True)  # YYYY-MM

    # Charges
    rent_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    electricity_previous_reading: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    electricity_current_reading: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    electricity_units: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    electricity_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    occupant_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    electricity_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    other_charges: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    adjustments: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Collection
    amount_paid: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    balance_due: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[BillStatus] = mapped_column(SQLEnum(BillStatus), nullable=False, default=BillStatus.PENDING, index=True)
    payment_method: Mapped[Optional[PaymentMethod]] = mapped_column(SQLEnum(PaymentMethod), nullable=True)

    # Reminders
    reminder_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_reminder_sent: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    generated_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)

    payments: Mapped[List["PaymentRecord"]] = relationship(
        back_populates="bill", cascade="all, delete-orphan", order_by="PaymentRecord.payment_date"
    )


class PaymentRecord(Base):
    """A single collection against a bill"""
    __tablename__ = "payment_records"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    bill_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("bills.id"), nullable=False, index=True)
    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tenants.id"), nullable=False, index=True)

    amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(SQLEnum(PaymentMethod), nullable=False)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    bill: Mapped["Bill"] = relationship(back_populates="payments")
