"""
Tenant Routes
Tenant records, room assignment, notice and bulk import
"""
from datetime import date
from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ResidencyError
from app.database import get_db
from app.models.tenant import Tenant, TenantStatus
from app.schemas.tenant import (
    TenantCreate, TenantUpdate, TenantResponse,
    TenantNoticeRequest, TenantImportRequest, TenantImportResult,
)
from app.services.occupancy_service import (
    allocate_tenant, deallocate_tenant, get_room_by_number, release_bed,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_tenant(db: Session, tenant_id: UUID) -> Tenant:
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return tenant


def _place_in_room(db: Session, tenant: Tenant, room_number: str) -> None:
    room = get_room_by_number(db, room_number)
    if room is None:
        raise NotFound(f"Room {room_number} not found")
    allocate_tenant(db, room, tenant)


def _add_tenant(db: Session, tenant_in: TenantCreate) -> Tenant:
    """Insert a tenant and, when a room is given, allocate the bed (commits)."""
    data = tenant_in.model_dump()
    room_number = data.pop("room_number", None)
    tenant = Tenant(**data, status=TenantStatus.ACTIVE)
    db.add(tenant)
    db.flush()
    if room_number:
        _place_in_room(db, tenant, room_number)
    else:
        db.commit()
    db.refresh(tenant)
    return tenant


# ==================== LISTING & STATS ====================

@router.get("/", response_model=List[TenantResponse])
def list_tenants(
    tenant_status: Optional[TenantStatus] = Query(None, alias="status"),
    room_number: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    query = db.query(Tenant)
    if tenant_status:
        query = query.filter(Tenant.status == tenant_status)
    if room_number:
        query = query.filter(Tenant.room_number == room_number)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Tenant.name.ilike(like), Tenant.mobile.ilike(like), Tenant.room_number.ilike(like)))
    return query.order_by(Tenant.room_number, Tenant.name).offset(skip).limit(limit).all()


@router.get("/stats")
def get_tenant_stats(db: Session = Depends(get_db)):
    tenants = db.query(Tenant).all()
    active = [t for t in tenants if t.status == TenantStatus.ACTIVE]
    this_month = date.today().replace(day=1)
    return {
        "total": len(tenants),
        "active": len(active),
        "adjust": sum(1 for t in tenants if t.status == TenantStatus.ADJUST),
        "inactive": sum(1 for t in tenants if t.status == TenantStatus.INACTIVE),
        "with_food": sum(1 for t in active if t.has_food),
        "notice_given": sum(1 for t in active if t.notice_given),
        "new_this_month": sum(1 for t in tenants if t.joining_date and t.joining_date >= this_month),
        "total_monthly_rent": sum(t.monthly_rent for t in active),
        "total_security_deposit": sum(t.security_deposit for t in active),
    }


@router.get("/room/{room_number}", response_model=List[TenantResponse])
def list_room_tenants(room_number: str, db: Session = Depends(get_db)):
    """Active tenants currently in a room"""
    return db.query(Tenant).filter(
        Tenant.room_number == room_number,
        Tenant.status == TenantStatus.ACTIVE,
    ).order_by(Tenant.name).all()


# ==================== CRUD ====================

@router.post("/", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(tenant_in: TenantCreate, db: Session = Depends(get_db)):
    tenant = _add_tenant(db, tenant_in)
    logger.info(f"[TENANTS] Created tenant {tenant.name} (room {tenant.room_number or '-'})")
    return tenant


@router.post("/import", response_model=TenantImportResult)
def import_tenants(body: TenantImportRequest, db: Session = Depends(get_db)):
    """Bulk import. Existing tenants (same name and mobile) are skipped."""
    result = TenantImportResult()
    for tenant_in in body.tenants:
        exists = db.query(Tenant).filter(
            Tenant.name == tenant_in.name,
            Tenant.mobile == tenant_in.mobile,
        ).first()
        if exists:
            result.skipped += 1
            continue
        try:
            _add_tenant(db, tenant_in)
            result.imported += 1
        except ResidencyError as exc:
            db.rollback()
            result.failed += 1
            logger.error(f"[TENANTS] Import failed for {tenant_in.name}: {exc.detail}")
        except Exception as exc:
            db.rollback()
            result.failed += 1
            logger.error(f"[TENANTS] Import failed for {tenant_in.name}: {exc}")

    logger.info(f"[TENANTS] Import: imported={result.imported} skipped={result.skipped} failed={result.failed}")
    return result


@router.get("/{tenant_id}", response_model=TenantResponse)
def get_tenant(tenant_id: UUID, db: Session = Depends(get_db)):
    return _get_tenant(db, tenant_id)


@router.put("/{tenant_id}", response_model=TenantResponse)
def update_tenant(tenant_id: UUID, tenant_update: TenantUpdate, db: Session = Depends(get_db)):
    tenant = _get_tenant(db, tenant_id)
    data = tenant_update.model_dump(exclude_unset=True)
    new_status = data.pop("status", None)
    room_given = "room_number" in data
    new_room = data.pop("room_number", None)

    for key, value in data.items():
        setattr(tenant, key, value)

    if new_status == TenantStatus.ACTIVE:
        tenant.status = TenantStatus.ACTIVE
    elif new_status is not None and new_status != tenant.status:
        release_bed(db, tenant, new_status)

    if room_given and new_room != tenant.room_number:
        if new_room:
            _place_in_room(db, tenant, new_room)
        else:
            old_room = get_room_by_number(db, tenant.room_number)
            if old_room is not None:
                deallocate_tenant(db, old_room, tenant)
            else:
                release_bed(db, tenant, TenantStatus.ADJUST)

    db.commit()
    db.refresh(tenant)
    return tenant


@router.delete("/{tenant_id}", response_model=TenantResponse)
def delete_tenant(tenant_id: UUID, db: Session = Depends(get_db)):
    """Soft delete: tenant becomes inactive and the bed is released"""
    tenant = _get_tenant(db, tenant_id)
    release_bed(db, tenant, TenantStatus.INACTIVE)
    tenant.departure_date = tenant.departure_date or date.today()
    db.commit()
    db.refresh(tenant)
    logger.info(f"[TENANTS] Tenant {tenant.name} moved out")
    return tenant


@router.post("/{tenant_id}/notice", response_model=TenantResponse)
def give_notice(tenant_id: UUID, body: TenantNoticeRequest, db: Session = Depends(get_db)):
    tenant = _get_tenant(db, tenant_id)
    tenant.notice_given = True
    tenant.notice_date = body.notice_date or date.today()
    if body.departure_date:
        tenant.departure_date = body.departure_date
    db.commit()
    db.refresh(tenant)
    return tenant
