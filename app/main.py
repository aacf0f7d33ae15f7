import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.core.config import settings
from app.core.exceptions import GatewayError
from app.core.rate_limit import limiter
from app.db.connection import close_db, init_db
from app.routers.auth.auth_router import router as auth_router
from app.routers.dashboard.dashboard_router import router as dashboard_router
from app.routers.orders.orders_router import router as orders_router
from app.routers.wallets.wallets_router import router as wallets_router
from app.routers.api_keys.api_keys_router import router as api_keys_router
from app.routers.admin.admin_router import router as admin_router
from app.routers.merchant_api.merchant_api_router import router as merchant_api_router
from app.routers.notifications.notifications_router import router as notifications_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Schema statements are idempotent
    init_db()
    logger.info(f"Database ready ({settings.DATABASE_TYPE})")

    yield

    close_db()
    logger.info(f"{settings.APP_NAME} shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description="B2B USDT payout gateway: merchant onboarding, payout orders and admin moderation",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code},
    )


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, prefix="/auth", tags=["authentication"])
app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
app.include_router(orders_router, prefix="/orders", tags=["orders"])
app.include_router(wallets_router, prefix="/wallets", tags=["wallets"])
app.include_router(api_keys_router, prefix="/api-keys", tags=["api-keys"])
app.include_router(admin_router, prefix="/admin", tags=["admin"])
app.include_router(merchant_api_router, prefix="/v1", tags=["merchant-api"])
app.include_router(notifications_router, prefix="/notifications", tags=["notifications"])


@app.get("/")
def read_root():
    return {"message": f"Welcome to {settings.APP_NAME}"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
