from contextlib import asynccontextmanager
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from garage_admin.config import get_settings
from garage_admin.dependencies.services import get_backend_client_cached, get_notification_poller_cached

# Import routers directly from submodules
from garage_admin.health import router as health_router
from garage_admin.overview import router as overview_router
from garage_admin.routes.customers import router as customers_router
from garage_admin.routes.expenses import router as expenses_router
from garage_admin.routes.inventory import router as inventory_router
from garage_admin.routes.invoices import router as invoices_router
from garage_admin.routes.jobs import router as jobs_router
from garage_admin.routes.notifications import router as notifications_router
from garage_admin.routes.reports import router as reports_router
from garage_admin.routes.suppliers import router as suppliers_router
from garage_admin.routes.technicians import router as technicians_router


def configure_logging() -> None:
    """Ensure application logs use the INFO level by default."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    else:
        root_logger.setLevel(logging.INFO)

# Configure logging as soon as the module is loaded
configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events.
    """
    # --- Startup Logic ---
    settings = get_settings()

    settings_snapshot = settings.model_dump(exclude={"backend_token"})
    logger.info("Application settings on startup: %s", settings_snapshot)

    # Initialize shared resources
    client = get_backend_client_cached()
    poller = get_notification_poller_cached()
    await poller.start()
    logger.info("Application startup complete.")

    try:
        yield  # The application is now running
    finally:
        # --- Shutdown Logic ---
        await poller.stop()
        logger.info("Closing garage backend client connection.")
        await client.close()
        logger.info("Application shutdown complete.")


# --- Application Setup ---

settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    redirect_slashes=False
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin).rstrip("/") for origin in settings.cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Include Routers ---

app.include_router(customers_router, prefix="/api", tags=["customers"])
app.include_router(technicians_router, prefix="/api", tags=["technicians"])
app.include_router(jobs_router, prefix="/api", tags=["jobs"])
app.include_router(invoices_router, prefix="/api", tags=["invoices"])
app.include_router(inventory_router, prefix="/api", tags=["inventory"])
app.include_router(suppliers_router, prefix="/api", tags=["suppliers"])
app.include_router(expenses_router, prefix="/api", tags=["expenses"])
app.include_router(reports_router, prefix="/api", tags=["reports"])
app.include_router(notifications_router, prefix="/api", tags=["notifications"])
app.include_router(health_router)
app.include_router(overview_router)


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    settings = get_settings()
    uvicorn.run("garage_admin.main:app", host=settings.host, port=settings.port)
