from app.models.room import Room, RoomType


def _payload(name="Ravi Kumar", mobile="9876543210", room_number=None, **extra):
    payload = {
        "name": name,
        "mobile": mobile,
        "joining_date": "2024-01-15",
        "monthly_rent": 8000,
        "security_deposit": 8000,
        "electricity_joining_reading": 1000,
    }
    if room_number:
        payload["room_number"] = room_number
    payload.update(extra)
    return payload


def test_create_tenant_allocates_room(client, make_room, db_session):
    make_room("101", RoomType.DOUBLE)
    response = client.post("/api/tenants/", json=_payload(room_number="101"))
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["status"] == "active"
    assert body["room_number"] == "101"

    room = db_session.query(Room).filter(Room.room_number == "101").one()
    assert room.current_occupancy == 1


def test_create_tenant_unknown_room(client):
    response = client.post("/api/tenants/", json=_payload(room_number="999"))
    assert response.status_code == 404
    assert client.get("/api/tenants/").json() == []


def test_create_tenant_full_room(client, make_room, make_tenant):
    make_room("101", RoomType.SINGLE)
    make_tenant("Existing", room_number="101")
    response = client.post("/api/tenants/", json=_payload(room_number="101", mobile="9876500001"))
    assert response.status_code == 400


def test_mobile_is_normalised_and_validated(client):
    ok = client.post("/api/tenants/", json=_payload(mobile="98765 43210"))
    assert ok.json()["mobile"] == "9876543210"
    bad = client.post("/api/tenants/", json=_payload(name="Short", mobile="12345"))
    assert bad.status_code == 422


def test_soft_delete_releases_bed(client, make_room, db_session):
    make_room("101", RoomType.SINGLE)
    tenant = client.post("/api/tenants/", json=_payload(room_number="101")).json()

    response = client.delete(f"/api/tenants/{tenant['id']}")
    assert response.status_code == 200
    assert response.json()["status"] == "inactive"
    assert response.json()["room_number"] is None

    # Still retrievable: never hard-deleted
    assert client.get(f"/api/tenants/{tenant['id']}").status_code == 200
    room = db_session.query(Room).filter(Room.room_number == "101").one()
    assert room.current_occupancy == 0


def test_update_moves_tenant_between_rooms(client, make_room, db_session):
    make_room("101", RoomType.SINGLE)
    make_room("102", RoomType.DOUBLE)
    tenant = client.post("/api/tenants/", json=_payload(room_number="101")).json()

    response = client.put(f"/api/tenants/{tenant['id']}", json={"room_number": "102", "monthly_rent": 7000})
    assert response.status_code == 200
    assert response.json()["room_number"] == "102"
    assert response.json()["monthly_rent"] == 7000

    rooms = {r.room_number: r for r in db_session.query(Room).all()}
    assert rooms["101"].current_occupancy == 0
    assert rooms["102"].current_occupancy == 1


def test_update_status_adjust_frees_room(client, make_room):
    make_room("101", RoomType.SINGLE)
    tenant = client.post("/api/tenants/", json=_payload(room_number="101")).json()
    response = client.put(f"/api/tenants/{tenant['id']}", json={"status": "adjust"})
    assert response.json()["status"] == "adjust"
    assert response.json()["room_number"] is None


def test_notice(client):
    tenant = client.post("/api/tenants/", json=_payload()).json()
    response = client.post(f"/api/tenants/{tenant['id']}/notice", json={"departure_date": "2024-07-31"})
    body = response.json()
    assert body["notice_given"] is True
    assert body["notice_date"] is not None
    assert body["departure_date"] == "2024-07-31"


def test_filters_stats_and_room_listing(client, make_room, make_tenant):
    from app.models.tenant import TenantStatus

    make_room("101", RoomType.DOUBLE)
    make_tenant("Ravi", room_number="101", has_food=True)
    make_tenant("Sunil", room_number="101", mobile="9876500001")
    make_tenant("Old", mobile="9876500002", status=TenantStatus.INACTIVE)

    active = client.get("/api/tenants/", params={"status": "active"}).json()
    assert {t["name"] for t in active} == {"Ravi", "Sunil"}

    search = client.get("/api/tenants/", params={"search": "sun"}).json()
    assert [t["name"] for t in search] == ["Sunil"]

    in_room = client.get("/api/tenants/room/101").json()
    assert len(in_room) == 2

    stats = client.get("/api/tenants/stats").json()
    assert stats["total"] == 3
    assert stats["active"] == 2
    assert stats["inactive"] == 1
    assert stats["with_food"] == 1


def test_import_counts_only(client, make_room):
    make_room("101", RoomType.SINGLE)
    body = {"tenants": [
        _payload("A", "9000000001", room_number="101"),
        _payload("B", "9000000002", room_number="101"),   # room full
        _payload("C", "9000000003", room_number="404"),   # unknown room
        _payload("D", "9000000004"),
    ]}
    first = client.post("/api/tenants/import", json=body).json()
    assert first == {"imported": 2, "skipped": 0, "failed": 2}

    again = client.post("/api/tenants/import", json=body).json()
    assert again["skipped"] == 2
    assert again["imported"] == 0
