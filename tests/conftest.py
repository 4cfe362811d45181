import os

# Must be set before the app (and its settings singleton) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REMINDER_SCHEDULER_ENABLED"] = "false"

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app import models  # noqa: E402,F401
from app.database import get_db  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import app  # noqa: E402
from app.models.room import Room, RoomType  # noqa: E402
from app.models.tenant import Tenant, TenantStatus  # noqa: E402
from app.services.occupancy_service import capacity_for_type, refresh_room  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session):
    def override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_room(db_session):
    def _make(room_number="101", room_type=RoomType.DOUBLE, monthly_rent=8000.0, **kwargs):
        room = Room(
            room_number=room_number,
            floor=kwargs.pop("floor", int(room_number[0]) if room_number[0].isdigit() else 0),
            room_type=room_type,
            capacity=kwargs.pop("capacity", capacity_for_type(room_type)),
            monthly_rent=monthly_rent,
            **kwargs,
        )
        db_session.add(room)
        db_session.commit()
        db_session.refresh(room)
        return room

    return _make


@pytest.fixture()
def make_tenant(db_session):
    def _make(name="Ravi Kumar", room_number=None, mobile="9876543210", monthly_rent=8000.0, **kwargs):
        tenant = Tenant(
            name=name,
            mobile=mobile,
            room_number=room_number,
            joining_date=kwargs.pop("joining_date", date(2024, 1, 1)),
            monthly_rent=monthly_rent,
            status=kwargs.pop("status", TenantStatus.ACTIVE),
            **kwargs,
        )
        db_session.add(tenant)
        db_session.commit()
        if room_number:
            room = db_session.query(Room).filter(Room.room_number == room_number).first()
            if room is not None:
                refresh_room(db_session, room)
                db_session.commit()
        db_session.refresh(tenant)
        return tenant

    return _make
