from app.services import (
    billing_service,
    electricity_service,
    maintenance_service,
    occupancy_service,
    receipt_service,
    reminder_service,
)

__all__ = [
    "billing_service",
    "electricity_service",
    "maintenance_service",
    "occupancy_service",
    "receipt_service",
    "reminder_service",
]
