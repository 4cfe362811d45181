"""
Room Routes
Inventory, allocation, maintenance and meter readings
"""
from datetime import date
from math import ceil
from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationFailed
from app.database import get_db
from app.models.room import Room, RoomType, RoomStatus, RoomMaintenanceStatus
from app.models.tenant import Tenant, TenantStatus
from app.schemas.room import (
    RoomCreate, RoomUpdate, RoomResponse, RoomListResponse,
    RoomAllocateRequest, RoomDeallocateRequest, RoomMaintenanceUpdate,
    MeterReadingUpdate, RoomOccupancyResponse, ReconcileResponse,
)
from app.services.occupancy_service import (
    allocate_tenant, apply_occupancy, capacity_for_type, count_occupants,
    deallocate_tenant, load_occupancy, reconcile_rooms,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_room(db: Session, room_id: UUID) -> Room:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return room


def _get_tenant(db: Session, tenant_id: UUID) -> Tenant:
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")
    return tenant


def _check_requested_status(requested: Optional[RoomStatus]) -> Optional[RoomStatus]:
    # available/occupied always follow occupancy
    if requested is not None and requested not in (RoomStatus.RESERVED, RoomStatus.MAINTENANCE):
        raise ValidationFailed(
            f"Room status '{requested.value}' is derived from occupancy; only reserved or maintenance can be requested"
        )
    return requested


def _derive_status(db: Session, room: Room, requested: Optional[RoomStatus] = None) -> None:
    """Recount occupancy and derive status, honouring a reserved/maintenance request."""
    if requested == RoomStatus.MAINTENANCE:
        room.maintenance_status = RoomMaintenanceStatus.IN_PROGRESS
    elif requested == RoomStatus.RESERVED:
        room.status = RoomStatus.RESERVED
    apply_occupancy(room, count_occupants(db, room.room_number))


# ==================== LISTING & STATS ====================

@router.get("/", response_model=RoomListResponse)
def list_rooms(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    search: Optional[str] = None,
    floor: Optional[int] = Query(None, ge=0, le=5),
    room_type: Optional[RoomType] = Query(None, alias="type"),
    room_status: Optional[RoomStatus] = Query(None, alias="status"),
    maintenance_status: Optional[RoomMaintenanceStatus] = None,
    db: Session = Depends(get_db),
):
    """List rooms with filters and pagination"""
    query = db.query(Room)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Room.room_number.ilike(like), Room.description.ilike(like)))
    if floor is not None:
        query = query.filter(Room.floor == floor)
    if room_type:
        query = query.filter(Room.room_type == room_type)
    if room_status:
        query = query.filter(Room.status == room_status)
    if maintenance_status:
        query = query.filter(Room.maintenance_status == maintenance_status)

    total = query.count()
    rooms = query.order_by(Room.room_number).offset((page - 1) * limit).limit(limit).all()
    return {
        "rooms": rooms,
        "total_count": total,
        "total_pages": ceil(total / limit) if total else 0,
        "current_page": page,
    }


@router.get("/available", response_model=List[RoomResponse])
def list_available_rooms(db: Session = Depends(get_db)):
    """Rooms with at least one free bed and no maintenance in progress"""
    return db.query(Room).filter(
        Room.status == RoomStatus.AVAILABLE,
        Room.current_occupancy < Room.capacity,
        Room.maintenance_status != RoomMaintenanceStatus.IN_PROGRESS,
    ).order_by(Room.room_number).all()


@router.get("/stats")
def get_room_stats(db: Session = Depends(get_db)):
    rooms = db.query(Room).all()

    floor_stats = {f: {"total": 0, "occupied": 0, "available": 0, "maintenance": 0} for f in range(6)}
    type_stats = {t.value: {"total": 0, "occupied": 0, "available": 0} for t in RoomType}
    status_counts = {s.value: 0 for s in RoomStatus}
    maintenance_stats = {m.value: 0 for m in RoomMaintenanceStatus}

    for room in rooms:
        status_counts[room.status.value] += 1
        maintenance_stats[room.maintenance_status.value] += 1
        floor = floor_stats[min(max(room.floor, 0), 5)]
        floor["total"] += 1
        if room.status.value in floor:
            floor[room.status.value] += 1
        kind = type_stats[room.room_type.value]
        kind["total"] += 1
        if room.status.value in kind:
            kind[room.status.value] += 1

    total_capacity = sum(r.capacity for r in rooms)
    beds_taken = sum(r.current_occupancy for r in rooms)
    return {
        "total": len(rooms),
        **status_counts,
        "total_capacity": total_capacity,
        "current_occupancy": beds_taken,
        "vacant_beds": total_capacity - beds_taken,
        "occupancy_rate": round(beds_taken / total_capacity * 100, 1) if total_capacity else 0.0,
        "potential_revenue": sum(r.monthly_rent * r.current_occupancy for r in rooms),
        "floor_stats": floor_stats,
        "type_stats": type_stats,
        "maintenance_stats": maintenance_stats,
    }


@router.get("/occupancy", response_model=List[RoomOccupancyResponse])
def get_occupancy(db: Session = Depends(get_db)):
    """Occupants per room, derived from active tenants"""
    occupancy = load_occupancy(db)
    capacities = {r.room_number: r.capacity for r in db.query(Room).all()}
    return [
        {
            "room_number": room_number,
            "capacity": capacities.get(room_number),
            "count": entry.count,
            "occupants": entry.occupants,
        }
        for room_number, entry in sorted(occupancy.items())
    ]


@router.post("/reconcile", response_model=ReconcileResponse)
def reconcile(db: Session = Depends(get_db)):
    """Recompute occupancy and status of every room"""
    return reconcile_rooms(db)


@router.get("/floor/{floor}", response_model=List[RoomResponse])
def list_rooms_by_floor(floor: int, db: Session = Depends(get_db)):
    if floor < 0 or floor > 5:
        raise ValidationFailed("Floor must be between 0 and 5")
    return db.query(Room).filter(Room.floor == floor).order_by(Room.room_number).all()


# ==================== CRUD ====================

@router.post("/", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(room_in: RoomCreate, db: Session = Depends(get_db)):
    if db.query(Room).filter(Room.room_number == room_in.room_number).first():
        raise ValidationFailed(f"Room {room_in.room_number} already exists")

    data = room_in.model_dump()
    data["capacity"] = data["capacity"] or capacity_for_type(room_in.room_type)
    requested_status = _check_requested_status(data.pop("status"))
    room = Room(**data, status=RoomStatus.AVAILABLE)
    db.add(room)
    _derive_status(db, room, requested_status)
    db.commit()
    db.refresh(room)
    logger.info(f"[ROOMS] Created room {room.room_number} ({room.room_type.value}, capacity {room.capacity})")
    return room


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: UUID, db: Session = Depends(get_db)):
    return _get_room(db, room_id)


@router.put("/{room_id}", response_model=RoomResponse)
def update_room(room_id: UUID, room_update: RoomUpdate, db: Session = Depends(get_db)):
    room = _get_room(db, room_id)
    data = room_update.model_dump(exclude_unset=True)

    new_number = data.get("room_number")
    if new_number and new_number != room.room_number:
        if db.query(Room).filter(Room.room_number == new_number).first():
            raise ValidationFailed(f"Room {new_number} already exists")
        if count_occupants(db, room.room_number):
            raise ValidationFailed("Cannot renumber a room with active tenants")

    if "room_type" in data and "capacity" not in data:
        data["capacity"] = capacity_for_type(data["room_type"])
    if "capacity" in data and data["capacity"] < count_occupants(db, room.room_number):
        raise ValidationFailed("Capacity cannot be lower than current occupancy")

    requested_status = _check_requested_status(data.pop("status", None))
    for key, value in data.items():
        setattr(room, key, value)

    _derive_status(db, room, requested_status)

    db.commit()
    db.refresh(room)
    return room


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(room_id: UUID, db: Session = Depends(get_db)):
    room = _get_room(db, room_id)
    if count_occupants(db, room.room_number):
        raise ValidationFailed("Cannot delete a room with active tenants")
    db.delete(room)
    db.commit()
    logger.info(f"[ROOMS] Deleted room {room.room_number}")
    return None


# ==================== ALLOCATION ====================

@router.post("/{room_id}/allocate", response_model=RoomResponse)
def allocate(room_id: UUID, body: RoomAllocateRequest, db: Session = Depends(get_db)):
    room = _get_room(db, room_id)
    tenant = _get_tenant(db, body.tenant_id)
    return allocate_tenant(db, room, tenant)


@router.post("/{room_id}/deallocate", response_model=RoomResponse)
def deallocate(room_id: UUID, body: RoomDeallocateRequest, db: Session = Depends(get_db)):
    room = _get_room(db, room_id)
    tenant = _get_tenant(db, body.tenant_id)
    return deallocate_tenant(db, room, tenant, move_out=body.move_out)


# ==================== MAINTENANCE & METER ====================

@router.put("/{room_id}/maintenance", response_model=RoomResponse)
def update_room_maintenance(room_id: UUID, body: RoomMaintenanceUpdate, db: Session = Depends(get_db)):
    room = _get_room(db, room_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        setattr(room, key, value)

    if body.maintenance_status == RoomMaintenanceStatus.COMPLETED:
        completed = body.maintenance_completed_date or date.today()
        room.maintenance_completed_date = completed
        room.last_maintenance_date = completed

    apply_occupancy(room, count_occupants(db, room.room_number))
    db.commit()
    db.refresh(room)
    logger.info(f"[ROOMS] Room {room.room_number} maintenance -> {room.maintenance_status.value} ({room.status.value})")
    return room


@router.put("/{room_id}/meter-reading", response_model=RoomResponse)
def update_meter_reading(room_id: UUID, body: MeterReadingUpdate, db: Session = Depends(get_db)):
    """Record the room sub-meter reading used by the next bill run"""
    room = _get_room(db, room_id)
    room.current_electricity_reading = body.reading
    db.commit()
    db.refresh(room)
    return room
