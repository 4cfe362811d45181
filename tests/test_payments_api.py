from datetime import date, timedelta

from app.models.bill import Bill, BillStatus
from app.models.room import RoomType


def _generate(client, month="2024-06", **extra):
    body = {"billing_month": month}
    body.update(extra)
    response = client.post("/api/payments/bills/generate", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def _setup_double(make_room, make_tenant):
    make_room("201", RoomType.DOUBLE)
    make_tenant("Anil", room_number="201", electricity_joining_reading=1000)
    make_tenant("Bala", room_number="201", mobile="9876500010", electricity_joining_reading=1000)


def test_generate_bills_via_api(client, make_room, make_tenant):
    _setup_double(make_room, make_tenant)
    summary = _generate(client, readings={"201": 1100}, electricity_rate=12)
    assert summary["generated"] == 2
    assert summary["processed"] == 2

    bills = client.get("/api/payments/bills", params={"billing_month": "2024-06"}).json()
    assert len(bills) == 2
    assert all(b["electricity_amount"] == 600 for b in bills)
    assert all(b["total_amount"] == 8600 for b in bills)

    again = _generate(client, readings={"201": 1100}, electricity_rate=12)
    assert again["generated"] == 0
    assert again["skipped"] == 2


def test_generate_rejects_bad_month_and_negative_reading(client):
    assert client.post("/api/payments/bills/generate", json={"billing_month": "2024-13"}).status_code == 422
    bad = client.post("/api/payments/bills/generate", json={"billing_month": "2024-06", "readings": {"101": -5}})
    assert bad.status_code == 422


def test_other_charges_and_adjustments(client, make_room, make_tenant):
    make_room("101", RoomType.SINGLE)
    tenant = make_tenant("Chirag", room_number="101")
    _generate(client, charges=[{"tenant_id": str(tenant.id), "other_charges": 500, "adjustments": 200}])

    bill = client.get("/api/payments/bills").json()[0]
    assert bill["total_amount"] == 8000 + 500 - 200

    updated = client.put(f"/api/payments/bills/{bill['id']}", json={"adjustments": 0})
    assert updated.json()["total_amount"] == 8500
    assert updated.json()["balance_due"] == 8500


def test_record_and_delete_payment(client, make_room, make_tenant):
    make_room("101", RoomType.SINGLE)
    make_tenant("Deepak", room_number="101")
    _generate(client, due_date=(date.today() + timedelta(days=5)).isoformat())
    bill = client.get("/api/payments/bills").json()[0]

    partial = client.post("/api/payments/", json={"bill_id": bill["id"], "amount": 3000, "payment_method": "upi", "transaction_id": "UPI123"})
    assert partial.status_code == 201
    assert partial.json()["bill"]["status"] == "partial"
    assert partial.json()["bill"]["balance_due"] == 5000

    full = client.post("/api/payments/", json={"bill_id": bill["id"], "amount": 5000, "payment_method": "cash"})
    assert full.json()["bill"]["status"] == "paid"

    detail = client.get(f"/api/payments/bills/{bill['id']}").json()
    assert len(detail["payments"]) == 2

    records = client.get("/api/payments/").json()
    assert len(records) == 2

    reverted = client.delete(f"/api/payments/{full.json()['payment']['id']}")
    assert reverted.status_code == 200
    assert reverted.json()["status"] == "partial"
    assert reverted.json()["balance_due"] == 5000


def test_payment_validation(client, make_room, make_tenant):
    missing = client.post("/api/payments/", json={
        "bill_id": "00000000-0000-0000-0000-000000000000", "amount": 100, "payment_method": "cash",
    })
    assert missing.status_code == 404

    zero = client.post("/api/payments/", json={
        "bill_id": "00000000-0000-0000-0000-000000000000", "amount": 0, "payment_method": "cash",
    })
    assert zero.status_code == 422


def test_overdue_refreshed_on_read(client, make_room, make_tenant, db_session):
    make_room("101", RoomType.SINGLE)
    make_tenant("Esha", room_number="101")
    yesterday = date.today() - timedelta(days=1)
    _generate(client, due_date=yesterday.isoformat())

    # Generation itself already promotes a bill whose due date has passed
    bill = db_session.query(Bill).one()
    bill.status = BillStatus.PENDING
    db_session.commit()

    listing = client.get("/api/payments/bills").json()
    assert listing[0]["status"] == "overdue"

    overdue_only = client.get("/api/payments/bills", params={"status": "overdue"}).json()
    assert len(overdue_only) == 1


def test_refresh_status_endpoint(client, make_room, make_tenant, db_session):
    make_room("101", RoomType.SINGLE)
    make_tenant("Farah", room_number="101")
    _generate(client, due_date=(date.today() + timedelta(days=1)).isoformat())
    bill = db_session.query(Bill).one()
    bill.due_date = date.today() - timedelta(days=2)
    db_session.commit()

    response = client.post("/api/payments/bills/refresh-status")
    assert response.json() == {"success": True, "updated": 1}


def test_stats_and_tenant_history(client, make_room, make_tenant):
    make_room("101", RoomType.SINGLE)
    tenant = make_tenant("Gopal", room_number="101")
    _generate(client, due_date=(date.today() + timedelta(days=5)).isoformat())
    bill = client.get("/api/payments/bills").json()[0]
    client.post("/api/payments/", json={"bill_id": bill["id"], "amount": 2000, "payment_method": "upi"})

    stats = client.get("/api/payments/stats", params={"billing_month": "2024-06"}).json()
    assert stats["total_bills"] == 1
    assert stats["total_billed"] == 8000
    assert stats["total_collected"] == 2000
    assert stats["total_outstanding"] == 6000
    assert stats["partial"] == 1

    history = client.get(f"/api/payments/tenant/{tenant.id}").json()
    assert history["total_paid"] == 2000
    assert history["total_due"] == 6000
    assert len(history["bills"]) == 1


def test_receipt_pdf(client, make_room, make_tenant):
    make_room("101", RoomType.SINGLE)
    make_tenant("Hari", room_number="101")
    _generate(client)
    bill = client.get("/api/payments/bills").json()[0]
    client.post("/api/payments/", json={"bill_id": bill["id"], "amount": 1000, "payment_method": "cash"})

    response = client.get(f"/api/payments/bills/{bill['id']}/receipt.pdf")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "bill_101_2024-06.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_reminder_preview_and_send(client, make_room, make_tenant):
    make_room("101", RoomType.SINGLE)
    make_tenant("Ravi", room_number="101", mobile="9876543210")
    _generate(client, due_date=(date.today() + timedelta(days=3)).isoformat())

    preview = client.get("/api/payments/reminders").json()
    assert len(preview) == 1
    assert preview[0]["whatsapp_url"].startswith("https://wa.me/919876543210?text=")
    assert preview[0]["state"] == "pending"

    sent = client.post("/api/payments/reminders/send").json()
    assert len(sent["sent"]) == 1
    assert sent["sent"][0]["reminder_count"] == 1
    assert sent["sent"][0]["state"] == "reminder_sent"

    assert client.get("/api/payments/reminders").json() == []


def test_receipt_pdf_with_markup_characters_in_residency_details(client, make_room, make_tenant, monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "RESIDENCY_NAME", "Shiv & Shiva <PG>")
    monkeypatch.setattr(settings, "RESIDENCY_ADDRESS", "Plot 7 <Near Temple> & Market Road")
    make_room("101", RoomType.SINGLE)
    make_tenant("Isha", room_number="101")
    _generate(client)
    bill = client.get("/api/payments/bills").json()[0]

    response = client.get(f"/api/payments/bills/{bill['id']}/receipt.pdf")
    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
