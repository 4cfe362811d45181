"""
Dashboard Routes - at-a-glance counts for the residency
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.bill import Bill, BillStatus
from app.models.maintenance import MaintenanceRequest, MaintenanceStatus, MaintenancePriority
from app.models.room import Room, RoomStatus
from app.models.tenant import Tenant, TenantStatus
from app.models.visitor import Visitor, VisitorStatus
from app.services.billing_service import business_date, refresh_overdue_bills

router = APIRouter()
logger = logging.getLogger(__name__)

OPEN_MAINTENANCE = (MaintenanceStatus.PENDING, MaintenanceStatus.ASSIGNED, MaintenanceStatus.IN_PROGRESS)


@router.get("/overview")
def get_overview(db: Session = Depends(get_db)):
    """Tenants, rooms, current-month collections and maintenance in one call"""
    refresh_overdue_bills(db)
    current_month = business_date().strftime("%Y-%m")

    tenants = db.query(Tenant).all()
    active = [t for t in tenants if t.status == TenantStatus.ACTIVE]

    rooms = db.query(Room).all()
    total_beds = sum(r.capacity for r in rooms)
    beds_taken = sum(r.current_occupancy for r in rooms)

    month_bills = db.query(Bill).filter(Bill.billing_month == current_month).all()
    billed = round(sum(b.total_amount for b in month_bills), 2)
    collected = round(sum(b.amount_paid for b in month_bills), 2)
    overdue_bills = db.query(Bill).filter(Bill.status == BillStatus.OVERDUE).all()

    maintenance = db.query(MaintenanceRequest).filter(MaintenanceRequest.status.in_(OPEN_MAINTENANCE)).all()

    return {
        "success": True,
        "tenants": {
            "total": len(tenants),
            "active": len(active),
            "awaiting_room": sum(1 for t in tenants if t.status == TenantStatus.ADJUST),
            "on_notice": sum(1 for t in active if t.notice_given),
        },
        "rooms": {
            "total": len(rooms),
            "occupied": sum(1 for r in rooms if r.status == RoomStatus.OCCUPIED),
            "available": sum(1 for r in rooms if r.status == RoomStatus.AVAILABLE),
            "maintenance": sum(1 for r in rooms if r.status == RoomStatus.MAINTENANCE),
            "reserved": sum(1 for r in rooms if r.status == RoomStatus.RESERVED),
            "total_beds": total_beds,
            "occupied_beds": beds_taken,
            "occupancy_rate": round(beds_taken / total_beds * 100, 1) if total_beds else 0.0,
        },
        "collections": {
            "billing_month": current_month,
            "billed": billed,
            "collected": collected,
            "pending": round(billed - collected, 2),
            "paid_bills": sum(1 for b in month_bills if b.status == BillStatus.PAID),
            "unpaid_bills": sum(1 for b in month_bills if b.status != BillStatus.PAID),
            "overdue_bills": len(overdue_bills),
            "overdue_amount": round(sum(b.balance_due for b in overdue_bills), 2),
        },
        "maintenance": {
            "open": len(maintenance),
            "urgent": sum(1 for m in maintenance if m.priority == MaintenancePriority.URGENT),
        },
        "visitors": {
            "checked_in": db.query(Visitor).filter(Visitor.status == VisitorStatus.CHECKED_IN).count(),
        },
    }
