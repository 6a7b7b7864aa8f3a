import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, APIRouter, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime, timezone

from app.core.config import settings
from app.api.v1 import bank_returns, meta
from app.services.bank.returns import registered_layouts

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def log_layout_registry() -> None:
    """
    Log the registered bank layouts at startup.

    This helps diagnose "bank not recognized" reports in production.
    """
    layouts = [f"{layout.bank_code}:{layout.layout_tag}" for layout in registered_layouts()]
    logger.info("Bank return layouts registered: %s", layouts)

    routes = [route.path for route in bank_returns.router.routes]
    logger.info("Router mount confirmed: /api/v1/bank-returns, routes=%s", routes)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events.

    Startup:
    - Log layout registry and router status for diagnostics

    Shutdown:
    - Nothing to release; the decoder keeps no state between requests
    """
    log_layout_registry()

    yield

    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware - must be added FIRST to ensure headers on all responses including errors
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to ensure JSON responses with proper CORS headers.

    Note: HTTPException is handled by FastAPI's default handler and will
    not reach this handler, preserving intended status codes.
    """
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
        },
    )

# API v1 router
api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(bank_returns.router, prefix="/bank-returns", tags=["bank-returns"])
api_v1_router.include_router(meta.router, tags=["metadata"])

app.include_router(api_v1_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    The decoder has no external dependencies, so the service is healthy
    when the layout registry is loaded and the staging directory is set.
    """
    layout_count = len(registered_layouts())
    health = {
        "status": "healthy" if layout_count else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {
            "layouts": {"status": "healthy" if layout_count else "unhealthy", "count": layout_count},
            "upload_dir": {"status": "healthy", "path": settings.UPLOAD_DIR},
        },
    }
    status_code = 200 if layout_count else 503
    return JSONResponse(status_code=status_code, content=health)
