"""
FastAPI application factory.

* Builds the shared session store, backend client and repositories.
* Registers the owner, driver, customer and account screens.
* Maps every ``ClientError`` to a JSON error body with its redirect.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from fleetdesk.api.dependencies import error_response
from fleetdesk.api.middleware import limiter
from fleetdesk.api.routes import auth, customer, driver, health, owner
from fleetdesk.config import Settings, settings
from fleetdesk.domain.errors import ClientError
from fleetdesk.domain.pricing import PricingCalculator
from fleetdesk.infrastructure.http_client import ApiClient
from fleetdesk.infrastructure.repositories import (
    AuthRepository,
    BookingRepository,
    UserRepository,
    VehicleRepository,
)
from fleetdesk.infrastructure.session import SessionStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close the backend connection pool on shutdown."""
    yield
    await app.state.api.aclose()


def create_app(
    app_settings: Optional[Settings] = None,
    http: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    cfg = app_settings or settings
    logging.basicConfig(level=cfg.log_level)

    app = FastAPI(
        title="Fleetdesk",
        description=(
            "Role-based front end for a vehicle rental backend.  Owners "
            "manage their fleet and accept bookings, drivers run trips, "
            "and customers browse, price and book vehicles."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    session = SessionStore(cfg.session_file)
    api = ApiClient(cfg, session, http=http)

    app.state.settings = cfg
    app.state.session = session
    app.state.api = api
    app.state.bookings = BookingRepository(api, session)
    app.state.vehicles = VehicleRepository(api)
    app.state.users = UserRepository(api)
    app.state.auth = AuthRepository(api, session)
    app.state.pricing = PricingCalculator(cfg.tax_rate, cfg.service_fee_rate)

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError):
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
        return error_response(exc)

    # Routers
    app.include_router(health.router, prefix="/api/v1")
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(owner.router, prefix="/api/v1")
    app.include_router(driver.router, prefix="/api/v1")
    app.include_router(customer.router, prefix="/api/v1")

    return app
