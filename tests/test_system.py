from datetime import date, timedelta

from app.core.config import Settings
from app.models.room import RoomType


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] in ("healthy", "degraded")
    assert body["scheduler"] == "stopped"


def test_version(client):
    assert client.get("/api/version").json()["api_version"] == "1.0.0"


def test_reminder_config_from_settings():
    settings = Settings(REMINDER_DAYS=[1, 3, 3, 0], MAX_REMINDERS=2, LATE_FEE_PERCENT=10)
    config = settings.reminder_config()
    assert config.reminder_days == (3, 1)
    assert config.max_reminders == 2
    assert config.late_fee_percent == 10


def test_dashboard_overview(client, make_room, make_tenant):
    make_room("101", RoomType.DOUBLE)
    make_room("102", RoomType.SINGLE)
    make_tenant("Ravi", room_number="101")

    month = date.today().strftime("%Y-%m")
    client.post("/api/payments/bills/generate", json={
        "billing_month": month,
        "due_date": (date.today() + timedelta(days=5)).isoformat(),
    })

    overview = client.get("/api/dashboard/overview").json()
    assert overview["tenants"]["active"] == 1
    assert overview["rooms"]["total"] == 2
    assert overview["rooms"]["total_beds"] == 3
    assert overview["rooms"]["occupied_beds"] == 1
    assert overview["collections"]["billing_month"] == month
    assert overview["collections"]["billed"] == 8000
    assert overview["collections"]["unpaid_bills"] == 1
    assert overview["maintenance"]["open"] == 0


def test_scheduler_start_stop():
    from app.services.scheduler import JOB_ID, start_scheduler, stop_scheduler, scheduler_running

    scheduler = start_scheduler(poll_minutes=60)
    try:
        assert scheduler_running()
        assert start_scheduler() is scheduler
        assert scheduler.get_job(JOB_ID) is not None
    finally:
        stop_scheduler()
    assert not scheduler_running()
