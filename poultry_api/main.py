import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from poultry_api.config import settings
from poultry_api.database import engine
from poultry_api.middleware.exceptions import register_exception_handlers
from poultry_api.middleware.rate_limit import RateLimitMiddleware
from poultry_api.middleware.request_logging import RequestLoggingMiddleware
from poultry_api.middleware.security import SecurityHeadersMiddleware
from poultry_api.routers import batches, breeds, customers, farms, health, houses, orders, users
from poultry_api.utils.redis_client import close_redis

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("poultry_api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release pooled connections on shutdown."""
    logger.info(f"Poultry Farm API starting ({settings.environment})")
    try:
        yield
    finally:
        await close_redis()
        await engine.dispose()
        logger.info("Poultry Farm API stopped")


app = FastAPI(
    title="Poultry Farm API",
    description="Farms, houses, flocks, customers and orders for poultry operations",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (last added runs outermost) ─────────────────
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(RateLimitMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Access log (outermost - also sees rate-limited responses)
app.add_middleware(RequestLoggingMiddleware)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(breeds.router, prefix="/api/breeds", tags=["breeds"])
app.include_router(farms.router, prefix="/api/farms", tags=["farms"])

# Farm-scoped (require ownership of {farm_id})
app.include_router(houses.router, prefix="/api/farms/{farm_id}/houses", tags=["houses"])
app.include_router(batches.router, prefix="/api/farms/{farm_id}/batches", tags=["batches"])
app.include_router(customers.router, prefix="/api/farms/{farm_id}/customers", tags=["customers"])
app.include_router(orders.router, prefix="/api/farms/{farm_id}/orders", tags=["orders"])
