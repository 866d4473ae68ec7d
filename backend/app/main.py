import logging
import traceback
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.config import settings
from app.database import engine, async_session
from app.middleware.logging_config import configure_logging

configure_logging(settings.log_level, settings.log_format)

from app.api.permissions import router as permissions_router  # noqa: E402
from app.api.permission_admin import router as permission_admin_router  # noqa: E402
from app.api.metrics import router as metrics_router  # noqa: E402
from app.auth.errors import BootstrapSeedError  # noqa: E402
from app.services.permission_store import PermissionStore  # noqa: E402
from app.services.registry_bootstrap import RegistryBootstrapper  # noqa: E402

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: verify DB connection
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))

    if settings.bootstrap_registry_on_startup:
        async with async_session() as session:
            try:
                await RegistryBootstrapper(session).initialize_registry()
            except BootstrapSeedError:
                logger.exception("Registry bootstrap on startup failed")
                raise
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Case Portal Permissions",
    description="Frontend element permission resolution for the case-management portal",
    version="0.1.0",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────────────────────────────
origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

# ── Security headers middleware ──────────────────────────────────────────────
from app.middleware.security_headers import SecurityHeadersMiddleware  # noqa: E402

app.add_middleware(SecurityHeadersMiddleware)

# ── Rate limiting middleware ─────────────────────────────────────────────────
from app.middleware.rate_limit import RateLimitMiddleware  # noqa: E402

app.add_middleware(RateLimitMiddleware)

# ── Request context middleware (request ID + timing) ─────────────────────────
from app.middleware.request_context import RequestContextMiddleware  # noqa: E402

app.add_middleware(RequestContextMiddleware)

# ── Prometheus metrics middleware ────────────────────────────────────────────
from app.middleware.metrics import PrometheusMiddleware  # noqa: E402

app.add_middleware(PrometheusMiddleware)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return detailed error info in development mode so 500s are debuggable."""
    tb = traceback.format_exc()
    logger.error(
        "Unhandled %s on %s %s: %s\n%s",
        type(exc).__name__, request.method, request.url.path, exc, tb,
    )
    detail = f"{type(exc).__name__}: {exc}"
    if settings.environment == "development":
        return JSONResponse(
            status_code=500,
            content={"detail": detail, "traceback": tb.splitlines()[-5:]},
        )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


# Register API routers
app.include_router(permissions_router)
app.include_router(permission_admin_router)
app.include_router(metrics_router)


@app.get("/api/health")
async def health_check():
    components: dict = {}

    try:
        async with async_session() as session:
            elements = await PermissionStore(session).count_elements()
        components["database"] = {"status": "connected"}
        # An empty registry means every grant-table check denies
        components["registry"] = {"status": "seeded" if elements else "empty", "elements": elements}
    except Exception as exc:
        components["database"] = {"status": "disconnected", "error": str(exc)}

    try:
        r = aioredis.from_url(settings.redis_url, decode_responses=True)
        await r.ping()
        await r.aclose()
        components["redis"] = {"status": "connected"}
    except Exception as exc:
        components["redis"] = {"status": "disconnected", "error": str(exc)}

    db_ok = components["database"]["status"] == "connected"
    redis_ok = components["redis"]["status"] == "connected"
    registry_ok = components.get("registry", {}).get("status") == "seeded"

    if db_ok and redis_ok and registry_ok:
        overall = "healthy"
    elif not db_ok:
        overall = "unhealthy"
    else:
        overall = "degraded"

    return {
        "status": overall,
        "environment": settings.environment,
        "components": components,
    }
