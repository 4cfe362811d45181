"""
Visitor Log Routes
"""
from datetime import datetime, time, timezone
from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationFailed
from app.database import get_db
from app.models.tenant import Tenant, TenantStatus
from app.models.visitor import Visitor, VisitorStatus
from app.schemas.visitor import VisitorCheckIn, VisitorCheckOut, VisitorResponse

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_visitor(db: Session, visitor_id: UUID) -> Visitor:
    visitor = db.query(Visitor).filter(Visitor.id == visitor_id).first()
    if not visitor:
        raise HTTPException(status_code=404, detail="Visitor not found")
    return visitor


@router.get("/", response_model=List[VisitorResponse])
def list_visitors(
    visitor_status: Optional[VisitorStatus] = Query(None, alias="status"),
    room_number: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    query = db.query(Visitor)
    if visitor_status:
        query = query.filter(Visitor.status == visitor_status)
    if room_number:
        query = query.filter(Visitor.room_number == room_number)
    return query.order_by(desc(Visitor.check_in_time)).offset(skip).limit(limit).all()


@router.get("/stats")
def get_visitor_stats(db: Session = Depends(get_db)):
    today_start = datetime.combine(datetime.now(timezone.utc).date(), time.min, tzinfo=timezone.utc)
    total = db.query(Visitor).count()
    active = db.query(Visitor).filter(Visitor.status == VisitorStatus.CHECKED_IN).count()
    today = db.query(Visitor).filter(Visitor.check_in_time >= today_start).count()
    return {
        "total": total,
        "active": active,
        "checked_out": total - active,
        "today": today,
    }


@router.get("/active", response_model=List[VisitorResponse])
def list_active_visitors(db: Session = Depends(get_db)):
    return db.query(Visitor)\
        .filter(Visitor.status == VisitorStatus.CHECKED_IN)\
        .order_by(desc(Visitor.check_in_time))\
        .all()


@router.get("/tenant/{tenant_id}", response_model=List[VisitorResponse])
def list_tenant_visitors(tenant_id: UUID, db: Session = Depends(get_db)):
    return db.query(Visitor)\
        .filter(Visitor.tenant_id == tenant_id)\
        .order_by(desc(Visitor.check_in_time))\
        .all()


@router.post("/checkin", response_model=VisitorResponse, status_code=status.HTTP_201_CREATED)
def check_in(visitor_in: VisitorCheckIn, db: Session = Depends(get_db)):
    tenant = db.query(Tenant).filter(Tenant.id == visitor_in.tenant_id).first()
    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")
    if tenant.status != TenantStatus.ACTIVE:
        raise ValidationFailed("Visitors can only be checked in for active tenants")

    visitor = Visitor(
        **visitor_in.model_dump(),
        room_number=tenant.room_number,
        status=VisitorStatus.CHECKED_IN,
    )
    db.add(visitor)
    db.commit()
    db.refresh(visitor)
    logger.info(f"[VISITORS] {visitor.name} checked in to see {tenant.name} (room {tenant.room_number or '-'})")
    return visitor


@router.put("/{visitor_id}/checkout", response_model=VisitorResponse)
def check_out(visitor_id: UUID, body: Optional[VisitorCheckOut] = None, db: Session = Depends(get_db)):
    visitor = _get_visitor(db, visitor_id)
    if visitor.status == VisitorStatus.CHECKED_OUT:
        raise ValidationFailed("Visitor already checked out")
    visitor.status = VisitorStatus.CHECKED_OUT
    visitor.check_out_time = datetime.now(timezone.utc)
    if body and body.notes:
        visitor.notes = body.notes
    db.commit()
    db.refresh(visitor)
    return visitor


@router.get("/{visitor_id}", response_model=VisitorResponse)
def get_visitor(visitor_id: UUID, db: Session = Depends(get_db)):
    return _get_visitor(db, visitor_id)


@router.delete("/{visitor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_visitor(visitor_id: UUID, db: Session = Depends(get_db)):
    visitor = _get_visitor(db, visitor_id)
    db.delete(visitor)
    db.commit()
    return None
