import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings
from app.database import async_session, check_db_connection
from app.middleware.audit_auto import install_audit_listeners, set_audit_context
from app.routers.audit import router as audit_router
from app.routers.regulation import router as regulation_router
from app.routers.regulation_status import router as regulation_status_router
from app.services.errors import RegulationError
from app.services.notifier import get_notifier
from app.services.regulation_types import seed_regulation_types

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Regulation types must exist before the first regulation is created
    if settings.SEED_REGULATION_TYPES:
        async with async_session() as s:
            created = await seed_regulation_types(s)
        logger.info("Regulation types seeded: %s", ", ".join(created) or "none missing")
    yield
    await get_notifier().drain()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── Install automatic audit logging ──
install_audit_listeners()


class AuditContextMiddleware(BaseHTTPMiddleware):
    """Set per-request audit context (user, IP) for automatic audit logging."""

    async def dispatch(self, request: Request, call_next):
        user_id_header = request.headers.get("X-User-Id")
        ip = request.client.host if request.client else None
        set_audit_context(
            user_id=int(user_id_header) if user_id_header and user_id_header.isdigit() else None,
            ip_address=ip,
        )
        return await call_next(request)


app.add_middleware(AuditContextMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RegulationError)
async def regulation_error_handler(request: Request, exc: RegulationError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(regulation_router)
app.include_router(regulation_status_router)
app.include_router(audit_router)


@app.get("/health")
async def health():
    """Health check — verifies API is running and database is reachable."""
    try:
        await check_db_connection()
        db_status = "connected"
    except Exception as exc:
        db_status = f"error: {exc}"

    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": db_status,
    }
