"""
Payment & Billing Routes
Bills (generation, status refresh, receipts), payment records and reminders
"""
from datetime import date
from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database import get_db
from app.models.bill import Bill, BillStatus, PaymentMethod, PaymentRecord
from app.models.tenant import Tenant
from app.schemas.bill import (
    BillGenerateRequest, BillGenerateResponse, BillUpdate, BillResponse, BillDetailResponse,
    PaymentCreate, PaymentRecordResponse, PaymentRecordedResponse,
    ReminderResponse, ReminderPassResponse,
)
from app.services import billing_service, reminder_service
from app.services.receipt_service import receipt_filename, render_bill_pdf

router = APIRouter()
logger = logging.getLogger(__name__)


# ==================== PAYMENT RECORDS ====================

@router.get("/", response_model=List[PaymentRecordResponse])
def list_payments(
    tenant_id: Optional[UUID] = None,
    payment_method: Optional[PaymentMethod] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    query = db.query(PaymentRecord)
    if tenant_id:
        query = query.filter(PaymentRecord.tenant_id == tenant_id)
    if payment_method:
        query = query.filter(PaymentRecord.payment_method == payment_method)
    if date_from:
        query = query.filter(PaymentRecord.payment_date >= date_from)
    if date_to:
        query = query.filter(PaymentRecord.payment_date <= date_to)
    return query.order_by(desc(PaymentRecord.payment_date), desc(PaymentRecord.created_at)).offset(skip).limit(limit).all()


@router.post("/", response_model=PaymentRecordedResponse, status_code=status.HTTP_201_CREATED)
def create_payment(payment_in: PaymentCreate, db: Session = Depends(get_db)):
    """Record a collection against a bill"""
    bill = billing_service.get_bill(db, payment_in.bill_id)
    record = billing_service.record_payment(
        db,
        bill,
        amount=payment_in.amount,
        method=payment_in.payment_method,
        transaction_id=payment_in.transaction_id,
        payment_date=payment_in.payment_date,
        notes=payment_in.notes,
    )
    db.refresh(bill)
    return {"success": True, "payment": record, "bill": bill}


@router.get("/stats")
def get_payment_stats(
    billing_month: Optional[str] = Query(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$"),
    db: Session = Depends(get_db),
):
    """Collection summary, for one billing month or overall"""
    query = db.query(Bill)
    if billing_month:
        query = query.filter(Bill.billing_month == billing_month)
    bills = billing_service.refresh_on_read(db, query.all())

    total_billed = round(sum(b.total_amount for b in bills), 2)
    total_collected = round(sum(b.amount_paid for b in bills), 2)
    by_status = {s.value: sum(1 for b in bills if b.status == s) for s in BillStatus}
    return {
        "billing_month": billing_month,
        "total_bills": len(bills),
        "total_billed": total_billed,
        "total_collected": total_collected,
        "total_outstanding": round(sum(max(b.balance_due, 0.0) for b in bills), 2),
        "total_electricity": round(sum(b.electricity_amount for b in bills), 2),
        "collection_rate": round(total_collected / total_billed * 100, 1) if total_billed else 0.0,
        **by_status,
    }


@router.get("/tenant/{tenant_id}")
def get_tenant_payments(tenant_id: UUID, db: Session = Depends(get_db)):
    """Bills and payment records of one tenant"""
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")

    bills = db.query(Bill).filter(Bill.tenant_id == tenant_id).order_by(desc(Bill.billing_month)).all()
    bills = billing_service.refresh_on_read(db, bills)
    payments = db.query(PaymentRecord).filter(PaymentRecord.tenant_id == tenant_id)\
        .order_by(desc(PaymentRecord.payment_date)).all()
    return {
        "tenant_id": str(tenant.id),
        "tenant_name": tenant.name,
        "bills": [BillResponse.model_validate(b) for b in bills],
        "payments": [PaymentRecordResponse.model_validate(p) for p in payments],
        "total_due": round(sum(max(b.balance_due, 0.0) for b in bills), 2),
        "total_paid": round(sum(p.amount for p in payments), 2),
    }


# ==================== BILLS ====================

@router.get("/bills", response_model=List[BillResponse])
def list_bills(
    billing_month: Optional[str] = None,
    bill_status: Optional[BillStatus] = Query(None, alias="status"),
    tenant_id: Optional[UUID] = None,
    room_number: Optional[str] = None,
    skip: int = 0,
    limit: int = 200,
    db: Session = Depends(get_db),
):
    """List bills; overdue statuses are refreshed before filtering"""
    billing_service.refresh_overdue_bills(db)

    query = db.query(Bill)
    if billing_month:
        query = query.filter(Bill.billing_month == billing_month)
    if bill_status:
        query = query.filter(Bill.status == bill_status)
    if tenant_id:
        query = query.filter(Bill.tenant_id == tenant_id)
    if room_number:
        query = query.filter(Bill.room_number == room_number)
    return query.order_by(desc(Bill.billing_month), Bill.room_number, Bill.tenant_name).offset(skip).limit(limit).all()


@router.post("/bills/generate", response_model=BillGenerateResponse)
def generate_bills(body: BillGenerateRequest, db: Session = Depends(get_db)):
    summary = billing_service.generate_bills(
        db,
        billing_month=body.billing_month,
        rate=body.electricity_rate,
        readings=body.readings,
        charges={str(c.tenant_id): (c.other_charges, c.adjustments) for c in body.charges},
        due_date=body.due_date,
        overwrite=body.overwrite,
    )
    return {
        "success": True,
        "billing_month": summary.billing_month,
        "generated": summary.generated,
        "updated": summary.updated,
        "skipped": summary.skipped,
        "failed": summary.failed,
        "processed": summary.processed,
    }


@router.post("/bills/refresh-status")
def refresh_bill_statuses(db: Session = Depends(get_db)):
    updated = billing_service.refresh_overdue_bills(db)
    return {"success": True, "updated": updated}


@router.get("/bills/{bill_id}", response_model=BillDetailResponse)
def get_bill(bill_id: UUID, db: Session = Depends(get_db)):
    bill = billing_service.get_bill(db, bill_id)
    billing_service.refresh_on_read(db, [bill])
    return bill


@router.put("/bills/{bill_id}", response_model=BillResponse)
def update_bill(bill_id: UUID, body: BillUpdate, db: Session = Depends(get_db)):
    bill = billing_service.get_bill(db, bill_id)
    if body.due_date is not None:
        bill.due_date = body.due_date
    billing_service.update_bill_charges(bill, body.other_charges, body.adjustments)
    db.commit()
    db.refresh(bill)
    logger.info(f"[BILLING] Bill {bill.id} updated: total={bill.total_amount} balance={bill.balance_due}")
    return bill


@router.get("/bills/{bill_id}/receipt.pdf")
def download_bill_receipt(bill_id: UUID, db: Session = Depends(get_db)):
    bill = billing_service.get_bill(db, bill_id)
    billing_service.refresh_on_read(db, [bill])
    buf = render_bill_pdf(bill)
    return StreamingResponse(
        buf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{receipt_filename(bill)}"'},
    )


# ==================== REMINDERS ====================

@router.get("/reminders", response_model=List[ReminderResponse])
def preview_reminders(db: Session = Depends(get_db)):
    """Reminders that would go out now (nothing is recorded)"""
    return reminder_service.collect_due_reminders(db, settings.reminder_config())


@router.post("/reminders/send", response_model=ReminderPassResponse)
def send_reminders(db: Session = Depends(get_db)):
    """Run a reminder pass now and return the WhatsApp links"""
    result = reminder_service.run_reminder_pass(db, settings.reminder_config())
    return {
        "success": True,
        "sent": result.sent,
        "failed": result.failed,
        "skipped": result.skipped,
        "overdue_updated": result.overdue_updated,
    }


# ==================== PAYMENT RECORD DELETE ====================

@router.delete("/{payment_id}", response_model=BillResponse)
def delete_payment(payment_id: UUID, db: Session = Depends(get_db)):
    """Remove a payment record and roll the bill back"""
    record = db.query(PaymentRecord).filter(PaymentRecord.id == payment_id).first()
    if not record:
        raise HTTPException(status_code=404, detail="Payment not found")
    return billing_service.delete_payment(db, record)
