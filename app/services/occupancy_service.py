"""
Occupancy Aggregator

Rooms do not own an authoritative occupant list: occupancy is always derived
from active tenants carrying a room number. Room status is derived explicitly
through derive_room_status() before a room is persisted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationFailed
from app.models.room import Room, RoomType, RoomStatus, RoomMaintenanceStatus
from app.models.tenant import Tenant, TenantStatus

logger = logging.getLogger(__name__)

ROOM_TYPE_CAPACITY = {
    RoomType.SINGLE: 1,
    RoomType.DOUBLE: 2,
    RoomType.TRIPLE: 3,
    RoomType.QUAD: 4,
}


@dataclass
class RoomOccupancy:
    occupants: List[Tenant] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.occupants)


@dataclass
class ReconcileReport:
    rooms_checked: int = 0
    rooms_updated: int = 0
    orphan_tenants: List[str] = field(default_factory=list)  # tenant ids pointing at unknown rooms
    over_capacity_rooms: List[str] = field(default_factory=list)


# ── Pure helpers ──────────────────────────────────────────────────────────────

def capacity_for_type(room_type: RoomType) -> int:
    return ROOM_TYPE_CAPACITY[RoomType(room_type)]


def aggregate_occupancy(tenants: Iterable[Tenant]) -> Dict[str, RoomOccupancy]:
    """Group active tenants by room number. Tenants without a room are ignored."""
    rooms: Dict[str, RoomOccupancy] = {}
    for tenant in tenants:
        if tenant.status != TenantStatus.ACTIVE or not tenant.room_number:
            continue
        rooms.setdefault(tenant.room_number, RoomOccupancy()).occupants.append(tenant)
    return rooms


def derive_room_status(
    occupancy: int,
    capacity: int,
    current_status: Optional[RoomStatus] = None,
    maintenance_status: Optional[RoomMaintenanceStatus] = None,
) -> RoomStatus:
    if maintenance_status == RoomMaintenanceStatus.IN_PROGRESS:
        return RoomStatus.MAINTENANCE
    if occupancy <= 0:
        return RoomStatus.AVAILABLE
    if occupancy >= capacity:
        return RoomStatus.OCCUPIED
    if current_status == RoomStatus.RESERVED:
        return RoomStatus.RESERVED
    return RoomStatus.AVAILABLE


def apply_occupancy(room: Room, occupancy: int) -> None:
    """Set occupancy (clamped to capacity) and re-derive status"""
    room.current_occupancy = max(0, min(occupancy, room.capacity))
    room.status = derive_room_status(
        room.current_occupancy, room.capacity, room.status, room.maintenance_status
    )


# ── Database operations ───────────────────────────────────────────────────────

def active_tenants(db: Session) -> List[Tenant]:
    return db.query(Tenant).filter(Tenant.status == TenantStatus.ACTIVE).all()


def load_occupancy(db: Session) -> Dict[str, RoomOccupancy]:
    return aggregate_occupancy(active_tenants(db))


def count_occupants(db: Session, room_number: str) -> int:
    return (
        db.query(Tenant)
        .filter(Tenant.room_number == room_number, Tenant.status == TenantStatus.ACTIVE)
        .count()
    )


def get_room_by_number(db: Session, room_number: str) -> Optional[Room]:
    return db.query(Room).filter(Room.room_number == room_number).first()


def refresh_room(db: Session, room: Room) -> Room:
    db.flush()
    apply_occupancy(room, count_occupants(db, room.room_number))
    return room


def allocate_tenant(db: Session, room: Room, tenant: Tenant) -> Room:
    """Place a tenant into a room, enforcing capacity and maintenance rules."""
    if tenant.status == TenantStatus.INACTIVE:
        raise ValidationFailed("Tenant is inactive")
    if tenant.room_number == room.room_number and tenant.status == TenantStatus.ACTIVE:
        raise ValidationFailed("Tenant is already allocated to this room")
    if room.status == RoomStatus.MAINTENANCE or room.maintenance_status == RoomMaintenanceStatus.IN_PROGRESS:
        raise ValidationFailed("Room is under maintenance")
    if count_occupants(db, room.room_number) >= room.capacity:
        raise ValidationFailed("Room is at full capacity")

    previous_room_number = tenant.room_number
    moved = previous_room_number is not None or tenant.last_electricity_reading is not None
    tenant.room_number = room.room_number
    tenant.status = TenantStatus.ACTIVE
    if moved:
        # Sub-meters are per room: the baseline restarts on the new room's meter
        tenant.last_electricity_reading = room.current_electricity_reading
    refresh_room(db, room)

    if previous_room_number and previous_room_number != room.room_number:
        previous_room = get_room_by_number(db, previous_room_number)
        if previous_room:
            refresh_room(db, previous_room)

    db.commit()
    db.refresh(room)
    logger.info(f"[ROOMS] Allocated tenant {tenant.id} to room {room.room_number} ({room.current_occupancy}/{room.capacity})")
    return room


def deallocate_tenant(db: Session, room: Room, tenant: Tenant, move_out: bool = False) -> Room:
    """Remove a tenant from a room. Tenant goes to 'adjust', or 'inactive' on move-out."""
    if tenant.room_number != room.room_number:
        raise NotFound("Tenant not found in this room")

    tenant.room_number = None
    tenant.status = TenantStatus.INACTIVE if move_out else TenantStatus.ADJUST
    refresh_room(db, room)

    db.commit()
    db.refresh(room)
    logger.info(f"[ROOMS] Deallocated tenant {tenant.id} from room {room.room_number} (move_out={move_out})")
    return room


def release_bed(db: Session, tenant: Tenant, status: TenantStatus = TenantStatus.INACTIVE) -> None:
    """Clear the tenant's room and recount the room it leaves. Caller commits."""
    room = get_room_by_number(db, tenant.room_number) if tenant.room_number else None
    tenant.room_number = None
    tenant.status = status
    if room is not None:
        refresh_room(db, room)


def reconcile_rooms(db: Session) -> ReconcileReport:
    """Recompute occupancy/status of every room from active tenants."""
    report = ReconcileReport()
    occupancy = load_occupancy(db)
    rooms = db.query(Room).all()
    known = {room.room_number for room in rooms}

    for room in rooms:
        report.rooms_checked += 1
        count = occupancy.get(room.room_number, RoomOccupancy()).count
        if count > room.capacity:
            report.over_capacity_rooms.append(room.room_number)
        before = (room.current_occupancy, room.status)
        apply_occupancy(room, count)
        if (room.current_occupancy, room.status) != before:
            report.rooms_updated += 1

    for room_number, entry in occupancy.items():
        if room_number not in known:
            report.orphan_tenants.extend(str(t.id) for t in entry.occupants)

    db.commit()
    logger.info(
        f"[ROOMS] Reconciled {report.rooms_checked} rooms, updated {report.rooms_updated}, "
        f"orphans={len(report.orphan_tenants)}, over_capacity={len(report.over_capacity_rooms)}"
    )
    return report
