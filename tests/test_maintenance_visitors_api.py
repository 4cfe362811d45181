from app.models.room import RoomType
from app.models.tenant import TenantStatus


def _request(client, room_number="101", **extra):
    payload = {
        "room_number": room_number,
        "title": "Leaking tap",
        "description": "Bathroom tap leaking since morning",
        "category": "plumbing",
        "priority": "high",
    }
    payload.update(extra)
    return client.post("/api/maintenance/", json=payload)


# ── Maintenance ───────────────────────────────────────────────────────────────

def test_maintenance_lifecycle(client, make_room, make_tenant):
    make_room("101", RoomType.SINGLE)
    tenant = make_tenant("Ravi", room_number="101")
    created = _request(client, tenant_id=str(tenant.id))
    assert created.status_code == 201
    request_id = created.json()["id"]
    assert created.json()["status"] == "pending"

    no_assignee = client.put(f"/api/maintenance/{request_id}/status", json={"status": "assigned"})
    assert no_assignee.status_code == 400

    assigned = client.put(f"/api/maintenance/{request_id}/status", json={"status": "assigned", "assigned_to": "Suresh"})
    assert assigned.json()["assigned_to"] == "Suresh"

    skipped = client.put(f"/api/maintenance/{request_id}/status", json={"status": "completed"})
    assert skipped.status_code == 400

    client.put(f"/api/maintenance/{request_id}/status", json={"status": "in_progress"})
    done = client.put(f"/api/maintenance/{request_id}/status", json={"status": "completed", "cost": 350})
    assert done.json()["status"] == "completed"
    assert done.json()["completed_date"] is not None
    assert done.json()["cost"] == 350

    terminal = client.put(f"/api/maintenance/{request_id}/status", json={"status": "cancelled"})
    assert terminal.status_code == 400

    rated = client.put(f"/api/maintenance/{request_id}", json={"rating": 5, "feedback": "Quick fix"})
    assert rated.json()["rating"] == 5

    mine = client.get(f"/api/maintenance/tenant/{tenant.id}").json()
    assert len(mine) == 1


def test_maintenance_validation(client, make_room):
    assert _request(client, room_number="999").status_code == 404
    make_room("101")
    assert _request(client, title="x").status_code == 422
    created = _request(client).json()
    assert client.put(f"/api/maintenance/{created['id']}", json={"rating": 9}).status_code == 422


def test_maintenance_stats_and_filters(client, make_room):
    make_room("101")
    _request(client)
    _request(client, priority="urgent", category="electrical", title="No power")
    stats = client.get("/api/maintenance/stats").json()
    assert stats["total"] == 2
    assert stats["open"] == 2
    assert stats["urgent_open"] == 1
    assert stats["by_category"]["electrical"] == 1

    urgent = client.get("/api/maintenance/", params={"priority": "urgent"}).json()
    assert [r["title"] for r in urgent] == ["No power"]


def test_delete_maintenance_request(client, make_room):
    make_room("101")
    created = _request(client).json()
    assert client.delete(f"/api/maintenance/{created['id']}").status_code == 204
    assert client.get(f"/api/maintenance/{created['id']}").status_code == 404


# ── Visitors ──────────────────────────────────────────────────────────────────

def _checkin(client, tenant_id, name="Mohan"):
    return client.post("/api/visitors/checkin", json={
        "tenant_id": str(tenant_id),
        "name": name,
        "phone": "9123456789",
        "purpose": "Family visit",
        "id_proof_type": "aadhar",
        "id_proof_number": "1234-5678-9012",
    })


def test_visitor_checkin_checkout(client, make_room, make_tenant):
    make_room("101")
    tenant = make_tenant("Ravi", room_number="101")

    checked_in = _checkin(client, tenant.id)
    assert checked_in.status_code == 201
    visitor = checked_in.json()
    assert visitor["room_number"] == "101"
    assert visitor["status"] == "checked_in"

    assert len(client.get("/api/visitors/active").json()) == 1

    out = client.put(f"/api/visitors/{visitor['id']}/checkout")
    assert out.status_code == 200
    assert out.json()["status"] == "checked_out"
    assert out.json()["check_out_time"] is not None

    twice = client.put(f"/api/visitors/{visitor['id']}/checkout")
    assert twice.status_code == 400

    stats = client.get("/api/visitors/stats").json()
    assert stats["total"] == 1
    assert stats["active"] == 0
    assert stats["checked_out"] == 1

    assert len(client.get(f"/api/visitors/tenant/{tenant.id}").json()) == 1


def test_visitor_requires_active_tenant(client, make_tenant):
    inactive = make_tenant("Gone", status=TenantStatus.INACTIVE)
    assert _checkin(client, inactive.id).status_code == 400
    assert _checkin(client, "00000000-0000-0000-0000-000000000000").status_code == 404


def test_delete_visitor(client, make_tenant):
    tenant = make_tenant("Ravi")
    visitor = _checkin(client, tenant.id).json()
    assert client.delete(f"/api/visitors/{visitor['id']}").status_code == 204
    assert client.get(f"/api/visitors/{visitor['id']}").status_code == 404
