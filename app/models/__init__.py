# Import all models so they're registered with Base
from app.models.room import Room, RoomType, RoomStatus, RoomMaintenanceStatus
from app.models.tenant import Tenant, TenantStatus
from app.models.bill import Bill, BillStatus, PaymentRecord, PaymentMethod
from app.models.maintenance import MaintenanceRequest, MaintenanceStatus, MaintenancePriority, MaintenanceCategory
from app.models.visitor import Visitor, VisitorStatus, IdProofType

__all__ = [
    "Room",
    "RoomType",
    "RoomStatus",
    "RoomMaintenanceStatus",
    "Tenant",
    "TenantStatus",
    "Bill",
    "BillStatus",
    "PaymentRecord",
    "PaymentMethod",
    "MaintenanceRequest",
    "MaintenanceStatus",
    "MaintenancePriority",
    "MaintenanceCategory",
    "Visitor",
    "VisitorStatus",
    "IdProofType",
]
