"""
Bill Composer

Responsibilities:
  • compose_bill          : rent + electricity + other charges - adjustments
  • generate_bills        : one bill per active tenant per billing month (idempotent by key)
  • refresh_bill_status   : pending → overdue once the due date has passed unpaid
  • apply_payment / revert_payment : keep amount_paid, balance_due and status in step

Status transitions are plain functions called before persistence, never ORM hooks.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFound, ValidationFailed
from app.models.bill import Bill, BillStatus, PaymentMethod, PaymentRecord
from app.models.room import Room
from app.models.tenant import Tenant, TenantStatus
from app.services.electricity_service import apportion_electricity
from app.services.occupancy_service import load_occupancy

logger = logging.getLogger(__name__)

BILLING_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def business_date(now: Optional[datetime] = None) -> date:
    """Calendar day (server local time) used by every due-date and reminder check."""
    if now is None:
        return date.today()
    return now.astimezone().date()


@dataclass(frozen=True)
class BillAmounts:
    rent_amount: float
    electricity_amount: float
    other_charges: float
    adjustments: float
    total_amount: float
    amount_paid: float
    balance_due: float
    status: BillStatus


@dataclass
class BillGenerationSummary:
    billing_month: str
    generated: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def processed(self) -> int:
        return self.generated + self.updated + self.skipped + self.failed


# ── Pure composition / status rules ──────────────────────────────────────────

def validate_billing_month(billing_month: str) -> str:
    if not billing_month or not BILLING_MONTH_RE.match(billing_month):
        raise ValidationFailed("Billing month must be in YYYY-MM format")
    return billing_month


def compute_total(rent: float, electricity: float, other_charges: float = 0.0, adjustments: float = 0.0) -> float:
    return round((rent or 0.0) + (electricity or 0.0) + (other_charges or 0.0) - (adjustments or 0.0), 2)


def compose_bill(
    rent: float,
    electricity_amount: float,
    other_charges: float = 0.0,
    adjustments: float = 0.0,
) -> BillAmounts:
    """Amounts for a freshly generated bill: nothing paid, status pending."""
    electricity_amount = round(electricity_amount or 0.0, 2)
    total = compute_total(rent, electricity_amount, other_charges, adjustments)
    return BillAmounts(
        rent_amount=rent or 0.0,
        electricity_amount=electricity_amount,
        other_charges=other_charges or 0.0,
        adjustments=adjustments or 0.0,
        total_amount=total,
        amount_paid=0.0,
        balance_due=total,
        status=BillStatus.PENDING,
    )


def derive_payment_status(amount_paid: float, balance_due: float) -> BillStatus:
    if balance_due <= 0:
        return BillStatus.PAID
    if amount_paid > 0:
        return BillStatus.PARTIAL
    return BillStatus.PENDING


def refresh_bill_status(bill: Bill, today: Optional[date] = None) -> bool:
    """Promote pending → overdue when the due date has passed with a balance. Returns True if changed."""
    today = today or business_date()
    if bill.status == BillStatus.PENDING and bill.due_date < today and bill.balance_due > 0:
        bill.status = BillStatus.OVERDUE
        return True
    return False


def apply_payment(bill: Bill, amount: float, method: Optional[PaymentMethod] = None) -> Bill:
    if amount <= 0:
        raise ValidationFailed("Payment amount must be greater than zero")
    bill.amount_paid = round((bill.amount_paid or 0.0) + amount, 2)
    bill.balance_due = round(bill.total_amount - bill.amount_paid, 2)
    bill.status = derive_payment_status(bill.amount_paid, bill.balance_due)
    if method is not None:
        bill.payment_method = method
    return bill


def revert_payment(bill: Bill, amount: float, today: Optional[date] = None) -> Bill:
    bill.amount_paid = round(max(0.0, (bill.amount_paid or 0.0) - amount), 2)
    bill.balance_due = round(bill.total_amount - bill.amount_paid, 2)
    bill.status = derive_payment_status(bill.amount_paid, bill.balance_due)
    refresh_bill_status(bill, today)
    return bill


def update_bill_charges(
    bill: Bill,
    other_charges: Optional[float] = None,
    adjustments: Optional[float] = None,
    today: Optional[date] = None,
) -> Bill:
    """Edit the variable parts of a bill and recompose its totals."""
    if other_charges is not None:
        bill.other_charges = other_charges
    if adjustments is not None:
        bill.adjustments = adjustments
    bill.total_amount = compute_total(bill.rent_amount, bill.electricity_amount, bill.other_charges, bill.adjustments)
    bill.balance_due = round(bill.total_amount - (bill.amount_paid or 0.0), 2)
    bill.status = derive_payment_status(bill.amount_paid or 0.0, bill.balance_due)
    refresh_bill_status(bill, today)
    return bill


# ── Generation ────────────────────────────────────────────────────────────────

def _existing_bill(db: Session, tenant_id: uuid.UUID, billing_month: str) -> Optional[Bill]:
    return (
        db.query(Bill)
        .filter(Bill.tenant_id == tenant_id, Bill.billing_month == billing_month)
        .first()
    )


def _apply_amounts(bill: Bill, amounts: BillAmounts, keep_paid: bool) -> None:
    bill.rent_amount = amounts.rent_amount
    bill.electricity_amount = amounts.electricity_amount
    bill.other_charges = amounts.other_charges
    bill.adjustments = amounts.adjustments
    bill.total_amount = amounts.total_amount
    if keep_paid:
        bill.balance_due = round(bill.total_amount - (bill.amount_paid or 0.0), 2)
        bill.status = derive_payment_status(bill.amount_paid or 0.0, bill.balance_due)
    else:
        bill.amount_paid = amounts.amount_paid
        bill.balance_due = amounts.balance_due
        bill.status = amounts.status


def generate_bills(
    db: Session,
    billing_month: str,
    rate: Optional[float] = None,
    readings: Optional[Dict[str, float]] = None,
    charges: Optional[Dict[str, Tuple[float, float]]] = None,
    due_date: Optional[date] = None,
    overwrite: bool = False,
    today: Optional[date] = None,
) -> BillGenerationSummary:
    """
    Generate bills for every active tenant for billing_month.

    readings: room_number -> current meter reading for this run
    charges:  tenant_id   -> (other_charges, adjustments)

    A tenant already billed for the month is skipped unless overwrite=True,
    in which case the bill is recomposed in place (payments are kept).
    Per-tenant failures are logged and counted; the run never aborts early.
    """
    validate_billing_month(billing_month)
    rate = settings.ELECTRICITY_RATE if rate is None else rate
    if rate < 0:
        raise ValidationFailed("Electricity rate cannot be negative")
    readings = readings or {}
    charges = charges or {}
    today = today or business_date()
    due_date = due_date or today + timedelta(days=settings.BILL_DUE_DAYS)

    summary = BillGenerationSummary(billing_month=billing_month)
    occupancy = load_occupancy(db)
    rooms = {room.room_number: room for room in db.query(Room).all()}

    # Record the supplied meter readings on the rooms first
    for room_number, reading in readings.items():
        room = rooms.get(room_number)
        if room is not None and reading is not None:
            room.current_electricity_reading = reading
    db.commit()

    tenants = (
        db.query(Tenant)
        .filter(Tenant.status == TenantStatus.ACTIVE)
        .order_by(Tenant.room_number, Tenant.name)
        .all()
    )
    logger.info(f"[BILLING] Generating {billing_month} bills for {len(tenants)} active tenants (rate={rate})")

    for tenant in tenants:
        tenant_id = tenant.id
        tenant_name = tenant.name
        try:
            existing = _existing_bill(db, tenant_id, billing_month)
            if existing and not overwrite:
                summary.skipped += 1
                continue

            room_number = tenant.room_number
            room = rooms.get(room_number) if room_number else None
            occupant_count = occupancy[room_number].count if room_number in occupancy else 1

            previous = existing.electricity_previous_reading if existing else tenant.previous_electricity_reading
            current = readings.get(room_number) if room_number else None
            if current is None and room is not None:
                current = room.current_electricity_reading
            if current is None:
                current = previous

            charge = apportion_electricity(current, previous, occupant_count, rate)
            other_charges, adjustments = charges.get(str(tenant_id), (0.0, 0.0))
            amounts = compose_bill(tenant.monthly_rent, charge.amount, other_charges, adjustments)

            bill = existing or Bill(
                id=uuid.uuid4(),
                tenant_id=tenant_id,
                billing_month=billing_month,
                generated_date=today,
            )
            bill.tenant_name = tenant_name
            bill.room_number = room_number
            bill.electricity_previous_reading = charge.previous_reading
            bill.electricity_current_reading = charge.current_reading
            bill.electricity_units = charge.units
            bill.electricity_rate = charge.rate
            bill.occupant_count = charge.occupant_count
            bill.due_date = due_date
            _apply_amounts(bill, amounts, keep_paid=existing is not None)
            refresh_bill_status(bill, today)

            if existing is None:
                db.add(bill)
            tenant.last_electricity_reading = current

            db.commit()
            if existing is None:
                summary.generated += 1
            else:
                summary.updated += 1
        except IntegrityError:
            # Another run inserted the same (tenant, month) first
            db.rollback()
            summary.skipped += 1
            logger.warning(f"[BILLING] Bill for {tenant_name} / {billing_month} already exists, skipped")
        except Exception as exc:
            db.rollback()
            summary.failed += 1
            logger.error(f"[BILLING] Error generating bill for {tenant_name}: {exc}")

    logger.info(
        f"[BILLING] {billing_month}: generated={summary.generated} updated={summary.updated} "
        f"skipped={summary.skipped} failed={summary.failed}"
    )
    return summary


# ── Reads & collections ───────────────────────────────────────────────────────

def get_bill(db: Session, bill_id: uuid.UUID) -> Bill:
    bill = db.query(Bill).filter(Bill.id == bill_id).first()
    if not bill:
        raise NotFound("Bill not found")
    return bill


def refresh_overdue_bills(db: Session, today: Optional[date] = None) -> int:
    """Promote every pending bill past its due date. Returns how many changed."""
    today = today or business_date()
    bills = (
        db.query(Bill)
        .filter(Bill.status == BillStatus.PENDING, Bill.due_date < today, Bill.balance_due > 0)
        .all()
    )
    changed = sum(1 for bill in bills if refresh_bill_status(bill, today))
    if changed:
        db.commit()
        logger.info(f"[BILLING] Marked {changed} bills overdue")
    return changed


def refresh_on_read(db: Session, bills: List[Bill], today: Optional[date] = None) -> List[Bill]:
    today = today or business_date()
    if any([refresh_bill_status(bill, today) for bill in bills]):
        db.commit()
    return bills


def record_payment(
    db: Session,
    bill: Bill,
    amount: float,
    method: PaymentMethod,
    transaction_id: Optional[str] = None,
    payment_date: Optional[date] = None,
    notes: Optional[str] = None,
) -> PaymentRecord:
    apply_payment(bill, amount, method)
    record = PaymentRecord(
        id=uuid.uuid4(),
        bill_id=bill.id,
        tenant_id=bill.tenant_id,
        amount=amount,
        payment_method=method,
        transaction_id=transaction_id,
        payment_date=payment_date or business_date(),
        notes=notes,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info(f"[BILLING] Payment of {amount} recorded for bill {bill.id} ({bill.status.value})")
    return record


def delete_payment(db: Session, record: PaymentRecord, today: Optional[date] = None) -> Bill:
    bill = record.bill
    record_id = record.id
    revert_payment(bill, record.amount, today)
    db.delete(record)
    db.commit()
    db.refresh(bill)
    logger.info(f"[BILLING] Payment {record_id} removed from bill {bill.id} ({bill.status.value})")
    return bill
