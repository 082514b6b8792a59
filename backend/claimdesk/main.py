import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from claimdesk.config import settings
from claimdesk.database import check_connection, engine
from claimdesk.middleware.logging_config import configure_logging

configure_logging(settings.log_level, settings.log_format)

from claimdesk.api.claims import router as claims_router  # noqa: E402
from claimdesk.api.imports import router as imports_router  # noqa: E402
from claimdesk.api.patients import router as patients_router  # noqa: E402
from claimdesk.api.pharmacies import router as pharmacies_router  # noqa: E402
from claimdesk.middleware.request_context import RequestContextMiddleware  # noqa: E402

logger = logging.getLogger("claimdesk")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await check_connection()
    logger.info("Database reachable, starting in %s mode", settings.environment)
    yield
    await engine.dispose()


app = FastAPI(
    title="ClaimDesk Billing Import",
    description="Claims billing CSV import, column mapping and claim review",
    version="0.1.0",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────────────────────────────
origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "X-Request-ID"],
)

# ── Request context middleware (request ID + timing) ─────────────────────────
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return the exception summary in development so 500s are debuggable."""
    tb = traceback.format_exc()
    logger.error(
        "Unhandled %s on %s %s: %s\n%s",
        type(exc).__name__, request.method, request.url.path, exc, tb,
    )
    if settings.environment == "development":
        return JSONResponse(
            status_code=500,
            content={"detail": f"{type(exc).__name__}: {exc}", "traceback": tb.splitlines()[-5:]},
        )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


app.include_router(imports_router)
app.include_router(claims_router)
app.include_router(patients_router)
app.include_router(pharmacies_router)


@app.get("/api/health")
async def health_check():
    try:
        await check_connection()
        database = {"status": "connected"}
    except Exception as exc:
        database = {"status": "disconnected", "error": str(exc)}

    return {
        "status": "healthy" if database["status"] == "connected" else "unhealthy",
        "environment": settings.environment,
        "components": {"database": database},
    }
