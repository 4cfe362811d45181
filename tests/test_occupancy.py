from types import SimpleNamespace

import pytest

from app.core.exceptions import NotFound, ValidationFailed
from app.models.room import RoomMaintenanceStatus, RoomStatus, RoomType
from app.models.tenant import TenantStatus
from app.services.occupancy_service import (
    aggregate_occupancy, allocate_tenant, capacity_for_type, deallocate_tenant,
    derive_room_status, reconcile_rooms,
)


def _tenant(name, room_number, status=TenantStatus.ACTIVE):
    return SimpleNamespace(name=name, room_number=room_number, status=status)


def test_aggregate_counts_only_active_tenants_with_rooms():
    tenants = [
        _tenant("A", "101"),
        _tenant("B", "101"),
        _tenant("C", "102"),
        _tenant("D", None),
        _tenant("E", "101", TenantStatus.INACTIVE),
        _tenant("F", "102", TenantStatus.ADJUST),
    ]
    occupancy = aggregate_occupancy(tenants)
    assert set(occupancy) == {"101", "102"}
    assert occupancy["101"].count == 2
    assert [t.name for t in occupancy["102"].occupants] == ["C"]


def test_aggregate_empty():
    assert aggregate_occupancy([]) == {}


@pytest.mark.parametrize(
    "occupancy,capacity,current,maintenance,expected",
    [
        (0, 2, RoomStatus.OCCUPIED, RoomMaintenanceStatus.NONE, RoomStatus.AVAILABLE),
        (2, 2, RoomStatus.AVAILABLE, RoomMaintenanceStatus.NONE, RoomStatus.OCCUPIED),
        (1, 2, RoomStatus.AVAILABLE, RoomMaintenanceStatus.NONE, RoomStatus.AVAILABLE),
        (1, 2, RoomStatus.RESERVED, RoomMaintenanceStatus.NONE, RoomStatus.RESERVED),
        (2, 2, RoomStatus.OCCUPIED, RoomMaintenanceStatus.IN_PROGRESS, RoomStatus.MAINTENANCE),
        (0, 1, RoomStatus.MAINTENANCE, RoomMaintenanceStatus.COMPLETED, RoomStatus.AVAILABLE),
    ],
)
def test_derive_room_status(occupancy, capacity, current, maintenance, expected):
    assert derive_room_status(occupancy, capacity, current, maintenance) == expected


def test_capacity_for_type():
    assert [capacity_for_type(t) for t in RoomType] == [1, 2, 3, 4]


def test_allocate_until_full(db_session, make_room, make_tenant):
    room = make_room("101", RoomType.DOUBLE)
    first = make_tenant("Amit")
    second = make_tenant("Bhavesh", mobile="9876500001")
    third = make_tenant("Chetan", mobile="9876500002")

    allocate_tenant(db_session, room, first)
    assert room.current_occupancy == 1
    assert room.status == RoomStatus.AVAILABLE

    allocate_tenant(db_session, room, second)
    assert room.current_occupancy == 2
    assert room.status == RoomStatus.OCCUPIED

    with pytest.raises(ValidationFailed):
        allocate_tenant(db_session, room, third)
    assert room.current_occupancy <= room.capacity


def test_allocate_rejects_same_room_and_maintenance(db_session, make_room, make_tenant):
    room = make_room("102", RoomType.TRIPLE)
    tenant = make_tenant("Dinesh", room_number="102")
    with pytest.raises(ValidationFailed):
        allocate_tenant(db_session, room, tenant)

    repair = make_room("103", RoomType.SINGLE, maintenance_status=RoomMaintenanceStatus.IN_PROGRESS)
    other = make_tenant("Esha", mobile="9876500003")
    with pytest.raises(ValidationFailed):
        allocate_tenant(db_session, repair, other)


def test_allocate_rejects_inactive_tenant(db_session, make_room, make_tenant):
    room = make_room("104", RoomType.SINGLE)
    tenant = make_tenant("Farhan", status=TenantStatus.INACTIVE)
    with pytest.raises(ValidationFailed):
        allocate_tenant(db_session, room, tenant)


def test_move_between_rooms_recounts_both(db_session, make_room, make_tenant):
    old = make_room("201", RoomType.SINGLE)
    new = make_room("202", RoomType.DOUBLE)
    tenant = make_tenant("Gita", room_number="201")
    db_session.refresh(old)
    assert old.status == RoomStatus.OCCUPIED

    allocate_tenant(db_session, new, tenant)
    db_session.refresh(old)
    assert old.current_occupancy == 0
    assert old.status == RoomStatus.AVAILABLE
    assert new.current_occupancy == 1


def test_deallocate_sets_adjust_or_inactive(db_session, make_room, make_tenant):
    room = make_room("301", RoomType.DOUBLE)
    a = make_tenant("Harsh", room_number="301")
    b = make_tenant("Isha", room_number="301", mobile="9876500004")

    deallocate_tenant(db_session, room, a)
    assert a.status == TenantStatus.ADJUST
    assert a.room_number is None
    assert room.current_occupancy == 1

    deallocate_tenant(db_session, room, b, move_out=True)
    assert b.status == TenantStatus.INACTIVE
    assert room.current_occupancy == 0
    assert room.status == RoomStatus.AVAILABLE


def test_deallocate_unknown_tenant(db_session, make_room, make_tenant):
    room = make_room("302")
    tenant = make_tenant("Jay")
    with pytest.raises(NotFound):
        deallocate_tenant(db_session, room, tenant)


def test_reconcile_fixes_drift_and_reports(db_session, make_room, make_tenant):
    room = make_room("401", RoomType.SINGLE, current_occupancy=1, status=RoomStatus.OCCUPIED)
    make_tenant("Kiran", room_number="999")
    make_tenant("Lata", room_number="402", mobile="9876500005")
    make_tenant("Manoj", room_number="402", mobile="9876500006")
    make_room("402", RoomType.SINGLE)

    report = reconcile_rooms(db_session)
    db_session.refresh(room)

    assert report.rooms_checked == 2
    assert room.current_occupancy == 0
    assert room.status == RoomStatus.AVAILABLE
    assert len(report.orphan_tenants) == 1
    assert report.over_capacity_rooms == ["402"]
