# -*- coding: utf-8 -*-
"""
Work Orders - Main FastAPI Application
Orders, service catalog and ticket PDF storage for the work-order editor
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workorders.api import files_router, orders_router, services_router, tickets_router
from workorders.config import Settings, get_settings
from workorders.services.order_store import OrderStore
from workorders.services.service_catalog import ServiceCatalog
from workorders.services.ticket_storage import TicketStorage

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events"""
    settings = app.state.settings
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION}...")
    logger.info(f"Data dir: {settings.DATA_DIR}, uploads: {settings.UPLOAD_DIR}")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")


def create_app(settings: Settings = None) -> FastAPI:
    """Build the application with stores bound to the configured directories"""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Заказ-наряды автосервиса: заказы, услуги, PDF",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.orders = OrderStore(settings.DATA_DIR)
    app.state.services = ServiceCatalog(settings.DATA_DIR)
    app.state.tickets = TicketStorage(settings.UPLOAD_DIR)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(orders_router, prefix="/api")
    app.include_router(services_router, prefix="/api")
    app.include_router(files_router, prefix="/api")
    app.include_router(tickets_router, prefix="/api")

    @app.get("/health", tags=["system"])
    async def health_check():
        """Health check endpoint"""
        return {"status": "ok", "service": "workorders"}

    return app


app = create_app()
