"""
Maintenance request lifecycle: pending -> assigned -> in_progress -> completed / cancelled
"""
import logging
from datetime import date
from typing import Optional

from app.core.exceptions import ValidationFailed
from app.models.maintenance import MAINTENANCE_TRANSITIONS, MaintenanceRequest, MaintenanceStatus

logger = logging.getLogger(__name__)


def can_transition(current: MaintenanceStatus, target: MaintenanceStatus) -> bool:
    return target in MAINTENANCE_TRANSITIONS.get(MaintenanceStatus(current), set())


def change_status(
    request: MaintenanceRequest,
    target: MaintenanceStatus,
    assigned_to: Optional[str] = None,
    cost: Optional[float] = None,
    today: Optional[date] = None,
) -> MaintenanceRequest:
    if request.status == target:
        raise ValidationFailed(f"Request is already {target.value}")
    if not can_transition(request.status, target):
        raise ValidationFailed(f"Cannot move request from {request.status.value} to {target.value}")

    if assigned_to:
        request.assigned_to = assigned_to
    if target == MaintenanceStatus.ASSIGNED and not request.assigned_to:
        raise ValidationFailed("assigned_to is required to assign a request")
    if cost is not None:
        request.cost = cost
    if target == MaintenanceStatus.COMPLETED:
        request.completed_date = today or date.today()

    logger.info(f"[MAINTENANCE] Request {request.id}: {request.status.value} -> {target.value}")
    request.status = target
    return request
