# Work Orders API Routers
from .orders import router as orders_router
from .services import router as services_router
from .files import router as files_router
from .tickets import router as tickets_router

__all__ = ["orders_router", "services_router", "files_router", "tickets_router"]
