"""
Main FastAPI application for the Rankify backend.
Handles CORS, request logging middleware, lifespan events, and router registration.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rankify import __version__
from rankify.config import settings
from rankify.platform.client import PlatformClient
from rankify.platform.http import HttpPlatform
from rankify.routers import auth, health, resumes

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Startup / shutdown helpers
# ---------------------------------------------------------------------------

async def _connect_platform(client: PlatformClient, handle: HttpPlatform) -> bool:
    """
    Probe the platform host and bind the handle only if it answers.
    Never raises. An unreachable host leaves the handle unbound, and the
    readiness detector reports the load timeout.
    """
    if await handle.ping():
        client.locator.bind(handle)
        logger.info("✓ Platform reachable at %s", handle.base_url)
        return True

    logger.warning(
        "⚠ Platform at %s is not reachable — platform calls will fail until it is",
        handle.base_url,
    )
    return False


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting Rankify backend …")
    logger.info("=" * 60)

    client = PlatformClient()
    handle = HttpPlatform()
    app.state.platform = client

    # 1: Platform (optional; logs warnings but continues)
    await _connect_platform(client, handle)

    # 2: Readiness wait + initial auth status check
    client.initialize()

    logger.info("=" * 60)
    logger.info("  Rankify backend ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Health     : http://%s:%d/api/health", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("Shutting down Rankify backend …")
    await client.close()
    client.locator.unbind()
    await handle.aclose()
    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Rankify API",
    description=(
        "**Rankify** — AI feedback for your resume, matched to the job you want.\n\n"
        "Sign in with the hosted platform, upload a resume PDF with the job "
        "details, and get an ATS score with improvement tips.\n\n"
        "Key endpoints:\n"
        "- `POST /api/auth/sign-in` — sign in on the platform\n"
        "- `POST /api/resumes/analyze` — upload a resume and start its analysis\n"
        "- `GET  /api/resumes/analyze/{run_id}` — analysis progress\n"
        "- `GET  /api/resumes` — stored resumes with feedback\n"
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.
    """
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    # Skip noisy polling from the frontend
    if request.url.path not in ("/api/health/", "/") and not request.url.path.startswith(
        "/api/resumes/analyze/"
    ):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Global exception handler
# ---------------------------------------------------------------------------

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a structured JSON error for any unhandled exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc),
            "path": str(request.url.path),
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,   prefix="/api/health",  tags=["Health"])
app.include_router(auth.router,     prefix="/api/auth",    tags=["Auth"])
app.include_router(resumes.router,  prefix="/api/resumes", tags=["Resumes"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root — returns basic service info."""
    return {
        "name": "Rankify API",
        "version": __version__,
        "description": "Resume Review Backend",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "auth": "/api/auth",
            "resumes": "/api/resumes",
            "analyze": "/api/resumes/analyze",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rankify.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
