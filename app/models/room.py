"""
Room Model - Inventory, occupancy and maintenance tracking
"""
from datetime import date
from enum import Enum
from typing import List, Optional
import uuid

from sqlalchemy import String, Integer, Float, Date, Text, JSON, Enum as SQLEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class RoomType(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    QUAD = "quad"


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    RESERVED = "reserved"


class RoomMaintenanceStatus(str, Enum):
    NONE = "none"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Room(Base, TimestampMixin):
    __tablename__ = "rooms"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    room_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    floor: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    room_type: Mapped[RoomType] = mapped_column(SQLEnum(RoomType), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    current_occupancy: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    monthly_rent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    security_deposit: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[RoomStatus] = mapped_column(SQLEnum(RoomStatus), nullable=False, default=RoomStatus.AVAILABLE, index=True)
    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Shared sub-meter; last value recorded for the room
    current_electricity_reading: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Maintenance sub-record
    maintenance_status: Mapped[RoomMaintenanceStatus] = mapped_column(
        SQLEnum(RoomMaintenanceStatus), nullable=False, default=RoomMaintenanceStatus.NONE
    )
    maintenance_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    maintenance_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    maintenance_scheduled_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    maintenance_completed_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    last_maintenance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    maintenance_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
