# car_rental/main.py

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from car_rental.config import ALLOWED_ORIGINS
from car_rental.logging_config import setup_logging
from car_rental.middleware import RequestIDMiddleware
from car_rental.routes.admin_bookings import router as admin_bookings_router
from car_rental.routes.admin_catalog import router as admin_catalog_router
from car_rental.routes.admin_content import router as admin_content_router
from car_rental.routes.admin_payments import router as admin_payments_router
from car_rental.routes.admin_pricing import router as admin_pricing_router
from car_rental.routes.auth import router as auth_router
from car_rental.routes.bookings import router as bookings_router
from car_rental.routes.catalog import router as catalog_router
from car_rental.routes.customers import router as customers_router
from car_rental.routes.health import router as health_router
from car_rental.routes.metrics import router as metrics_router
from car_rental.routes.pages import router as pages_router
from car_rental.routes.payments import router as payments_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Car Rental API",
    description="Booking, pricing, payment and back-office API for the car rental site",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)


def validation_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """Group pydantic error messages by field name."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        field = ".".join(loc) or "request"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return errors


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> Any:
    errors = validation_errors(exc)
    logger.info("request_validation_failed", path=request.url.path, fields=sorted(errors))
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


# Register routers. Pages stay last: /{locale}/blog/{slug} also matches /api/blog/recent
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(customers_router, prefix="/api", tags=["Customers"])
app.include_router(bookings_router, prefix="/api", tags=["Bookings"])
app.include_router(payments_router, prefix="/api", tags=["Payments"])
app.include_router(catalog_router, prefix="/api", tags=["Catalog"])
app.include_router(admin_bookings_router, prefix="/api/admin", tags=["Admin"])
app.include_router(admin_pricing_router, prefix="/api/admin", tags=["Admin"])
app.include_router(admin_catalog_router, prefix="/api/admin", tags=["Admin"])
app.include_router(admin_content_router, prefix="/api/admin", tags=["Admin"])
app.include_router(admin_payments_router, prefix="/api/admin", tags=["Admin"])
app.include_router(pages_router, tags=["Pages"])


@app.on_event("startup")
def startup_event() -> None:
    """Initialize application on startup."""
    from car_rental.db.engine import engine
    from car_rental.db.writers.settings import ensure_settings_row

    logger.info("FastAPI application starting up...")

    # Document counters live on the settings row
    with engine.begin() as conn:
        ensure_settings_row(conn)

    logger.info("FastAPI application initialized")
