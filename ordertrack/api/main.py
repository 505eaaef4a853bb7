"""
Ordertrack API - Main FastAPI Application.

Provides logistics query endpoints and the order status sync endpoints.
"""

import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ordertrack import __version__
from ordertrack.config import Settings, load_settings
from ordertrack.db import DatabaseConnection
from ordertrack.errors import OrderTrackError
from ordertrack.logistics.client import TrackingClient
from ordertrack.logistics.provider import DeliveryTrackerProvider
from ordertrack.sync.order_source import OrderSourceClient
from ordertrack.sync.order_store import OrderStore
from ordertrack.sync.reconciler import OrderReconciler
from ordertrack.utils.logging import setup_logging

# Load environment variables
load_dotenv()

# Configure logging early
setup_logging("ordertrack-api")


def _init_database(settings: Settings) -> DatabaseConnection | None:
    """Initialize database connection if configured."""
    if not settings.database_configured:
        print("   Database: Not configured (DATABASE_URL / INSTANCE_CONNECTION_NAME)")
        return None

    try:
        if settings.database_url:
            db = DatabaseConnection.from_url(settings.database_url)
        else:
            db = DatabaseConnection.from_cloud_sql(
                instance_connection_name=settings.instance_connection_name,
                db_name=settings.db_name,
                db_user=settings.db_user,
            )
        print("   Database: Connected")
        return db
    except Exception as e:
        print(f"   Database: Failed to connect - {e}")
        return None


def _init_order_source(settings: Settings) -> OrderSourceClient | None:
    if not settings.order_query_api_url:
        print("   Order source: Not configured (ORDER_QUERY_API_URL not set)")
        return None

    print(f"   Order source: {settings.order_query_api_url}")
    return OrderSourceClient(
        url=settings.order_query_api_url,
        token=settings.order_api_token,
        timeout=settings.order_api_timeout,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    settings = load_settings()
    print("🚀 Starting Ordertrack API...")
    print(f"   Environment: {os.getenv('GOOGLE_CLOUD_PROJECT', 'local')}")

    provider = DeliveryTrackerProvider(
        api_url=settings.tracking_api_url,
        api_key=settings.tracking_api_key,
        timeout=settings.tracking_timeout,
    )
    tracking_client = TrackingClient(provider)
    order_source = _init_order_source(settings)
    db = _init_database(settings)

    app.state.settings = settings
    app.state.tracking_client = tracking_client
    app.state.reconciler = None
    if db is not None:
        app.state.reconciler = OrderReconciler(
            order_source=order_source,
            tracking_client=tracking_client,
            store=OrderStore(db),
            concurrency_limit=settings.sync_concurrency,
        )

    yield

    # Shutdown
    await provider.close()
    if order_source is not None:
        await order_source.close()
    if db is not None:
        db.close()
        print("   Database: Connection closed")

    print("👋 Shutting down Ordertrack API...")


# OpenAPI tag descriptions (shown in /docs and /openapi.json)
OPENAPI_TAGS = [
    {
        "name": "logistics",
        "description": "Single and batch waybill status queries",
    },
    {
        "name": "sync",
        "description": "Scheduled and manual order status reconciliation",
    },
    {
        "name": "system",
        "description": "System health and information endpoints",
    },
]

# Create FastAPI application
app = FastAPI(
    title="Ordertrack API",
    description=(
        "Order logistics tracking service.\n\n"
        "Queries carrier status for waybills and reconciles pending orders "
        "against live carrier status.\n\n"
        "**Authentication:** Scheduled sync endpoints require "
        "`Authorization: Bearer <CRON_SECRET>`."
    ),
    version=__version__,
    lifespan=lifespan,
    openapi_tags=OPENAPI_TAGS,
)

# Configure CORS for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(OrderTrackError)
async def order_track_error_handler(request: Request, exc: OrderTrackError):
    """Render domain errors as {"success": false, "message": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            return "Request body is not valid JSON"
        field = ".".join(str(loc) for loc in error.get("loc", ()) if loc != "body")
        parts.append(f"{field}: {error['msg']}" if field else error["msg"])
    return "Invalid request: " + "; ".join(parts)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
):
    """Render malformed request bodies and parameters as 400 domain errors."""
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": _validation_message(exc)},
    )


@app.get("/", tags=["system"], operation_id="getServiceInfo")
async def root():
    """Return basic information about the API service."""
    return {
        "service": "Ordertrack API",
        "version": __version__,
        "status": "operational",
        "description": "Order logistics tracking and status reconciliation",
    }


@app.get("/health", tags=["system"], operation_id="healthCheck")
async def health_check():
    """Check service health status."""
    return {
        "status": "healthy",
        "service": "ordertrack-api",
        "environment": os.getenv("GOOGLE_CLOUD_PROJECT", "local"),
    }


# Import and include routers
from ordertrack.api.routes import logistics, sync

app.include_router(logistics.router, prefix="/api", tags=["logistics"])
app.include_router(sync.router, prefix="/api", tags=["sync"])
