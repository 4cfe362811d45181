"""
Maintenance Request Routes
"""
from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound
from app.database import get_db
from app.models.maintenance import (
    MaintenanceRequest, MaintenanceStatus, MaintenancePriority, MaintenanceCategory,
)
from app.models.tenant import Tenant
from app.schemas.maintenance import (
    MaintenanceRequestCreate, MaintenanceRequestUpdate,
    MaintenanceStatusUpdate, MaintenanceRequestResponse,
)
from app.services.maintenance_service import change_status
from app.services.occupancy_service import get_room_by_number

router = APIRouter()
logger = logging.getLogger(__name__)

OPEN_STATUSES = (MaintenanceStatus.PENDING, MaintenanceStatus.ASSIGNED, MaintenanceStatus.IN_PROGRESS)


def _get_request(db: Session, request_id: UUID) -> MaintenanceRequest:
    request = db.query(MaintenanceRequest).filter(MaintenanceRequest.id == request_id).first()
    if not request:
        raise HTTPException(status_code=404, detail="Maintenance request not found")
    return request


@router.get("/", response_model=List[MaintenanceRequestResponse])
def list_requests(
    request_status: Optional[MaintenanceStatus] = Query(None, alias="status"),
    priority: Optional[MaintenancePriority] = None,
    category: Optional[MaintenanceCategory] = None,
    room_number: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    query = db.query(MaintenanceRequest)
    if request_status:
        query = query.filter(MaintenanceRequest.status == request_status)
    if priority:
        query = query.filter(MaintenanceRequest.priority == priority)
    if category:
        query = query.filter(MaintenanceRequest.category == category)
    if room_number:
        query = query.filter(MaintenanceRequest.room_number == room_number)
    return query.order_by(desc(MaintenanceRequest.created_at)).offset(skip).limit(limit).all()


@router.get("/stats")
def get_maintenance_stats(db: Session = Depends(get_db)):
    requests = db.query(MaintenanceRequest).all()
    completed = [r for r in requests if r.status == MaintenanceStatus.COMPLETED]
    ratings = [r.rating for r in completed if r.rating]
    return {
        "total": len(requests),
        "open": sum(1 for r in requests if r.status in OPEN_STATUSES),
        "by_status": {s.value: sum(1 for r in requests if r.status == s) for s in MaintenanceStatus},
        "by_priority": {p.value: sum(1 for r in requests if r.priority == p) for p in MaintenancePriority},
        "by_category": {c.value: sum(1 for r in requests if r.category == c) for c in MaintenanceCategory},
        "urgent_open": sum(1 for r in requests if r.priority == MaintenancePriority.URGENT and r.status in OPEN_STATUSES),
        "total_cost": round(sum(r.cost or 0.0 for r in completed), 2),
        "average_rating": round(sum(ratings) / len(ratings), 1) if ratings else None,
    }


@router.get("/tenant/{tenant_id}", response_model=List[MaintenanceRequestResponse])
def list_tenant_requests(tenant_id: UUID, db: Session = Depends(get_db)):
    return db.query(MaintenanceRequest)\
        .filter(MaintenanceRequest.tenant_id == tenant_id)\
        .order_by(desc(MaintenanceRequest.created_at))\
        .all()


@router.post("/", response_model=MaintenanceRequestResponse, status_code=status.HTTP_201_CREATED)
def create_request(request_in: MaintenanceRequestCreate, db: Session = Depends(get_db)):
    if get_room_by_number(db, request_in.room_number) is None:
        raise NotFound(f"Room {request_in.room_number} not found")
    if request_in.tenant_id and not db.query(Tenant).filter(Tenant.id == request_in.tenant_id).first():
        raise NotFound("Tenant not found")

    request = MaintenanceRequest(**request_in.model_dump(), status=MaintenanceStatus.PENDING)
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(f"[MAINTENANCE] New {request.priority.value} request for room {request.room_number}: {request.title}")
    return request


@router.get("/{request_id}", response_model=MaintenanceRequestResponse)
def get_request(request_id: UUID, db: Session = Depends(get_db)):
    return _get_request(db, request_id)


@router.put("/{request_id}", response_model=MaintenanceRequestResponse)
def update_request(request_id: UUID, request_update: MaintenanceRequestUpdate, db: Session = Depends(get_db)):
    request = _get_request(db, request_id)
    for key, value in request_update.model_dump(exclude_unset=True).items():
        setattr(request, key, value)
    db.commit()
    db.refresh(request)
    return request


@router.put("/{request_id}/status", response_model=MaintenanceRequestResponse)
def update_request_status(request_id: UUID, body: MaintenanceStatusUpdate, db: Session = Depends(get_db)):
    request = _get_request(db, request_id)
    change_status(request, body.status, assigned_to=body.assigned_to, cost=body.cost)
    if body.notes:
        request.notes = body.notes
    db.commit()
    db.refresh(request)
    return request


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_request(request_id: UUID, db: Session = Depends(get_db)):
    request = _get_request(db, request_id)
    db.delete(request)
    db.commit()
    return None
