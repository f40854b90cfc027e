from fastapi import FastAPI, Request
import uuid
import time

from app.api import api_router
from app.core.config import settings
from app.core.logging import setup_logging
from app.db.init_db import init_db

# Setup structured logging
logger = setup_logging("app", settings.LOG_LEVEL)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Flight Price Alerts operational API.

    Price checks run in Celery workers; this API exposes health checks,
    manual price-check triggers and cached airport search.
    """,
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = str(uuid.uuid4())
    logger.info(
        "Request started",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
        },
    )

    request.state.request_id = request_id

    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time

    response.headers["X-Request-ID"] = request_id

    logger.info(
        "Request completed",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(process_time * 1000),
        },
    )

    return response


# Include API router
app.include_router(api_router)


# Root endpoint
@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}"}


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    """Create database tables on application startup."""
    init_db()
