from app.api.routes.rooms import router as rooms_router
from app.api.routes.tenants import router as tenants_router
from app.api.routes.payments import router as payments_router
from app.api.routes.maintenance import router as maintenance_router
from app.api.routes.visitors import router as visitors_router
from app.api.routes.dashboard import router as dashboard_router

__all__ = [
    "rooms_router",
    "tenants_router",
    "payments_router",
    "maintenance_router",
    "visitors_router",
    "dashboard_router",
]
