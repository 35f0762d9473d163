from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
import time
import logging
import os

from .api.deps import ScheduleFailure
from .api.v1.appointments import router as appointments_router
from .api.v1.blocks import router as blocks_router
from .api.v1.patients import router as patients_router
from .api.v1.physicians import router as physicians_router
from .core.config import settings
from .core.database import SessionLocal, get_db, init_db
from .repositories.sql import SqlProfileDirectory, SqlScheduleStore
from .scheduling.manager import ScheduleManager, SchedulingPolicy
from .schemas.scheduling import AppointmentResponse, SlotResponse

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Appointment scheduling and conflict resolution for clinics",
    openapi_url="/api/v1/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Middleware setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Only add TrustedHostMiddleware in production, not in testing
if not os.getenv("TESTING"):
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1", "*.localhost", "testserver"]
    )

# Custom middleware for request logging and timing
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # Log request
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.4f}s"
    )

    return response

# Exception handlers
@app.exception_handler(ScheduleFailure)
async def schedule_failure_handler(request: Request, exc: ScheduleFailure):
    result = exc.result
    content = {
        "error": result.error_code,
        "message": result.message
    }
    if result.conflicts:
        content["conflicts"] = [
            AppointmentResponse.model_validate(appointment).model_dump(mode="json")
            for appointment in result.conflicts
        ]
    if result.alternatives:
        content["alternatives"] = [
            SlotResponse.model_validate(slot).model_dump(mode="json")
            for slot in result.alternatives
        ]
    return JSONResponse(status_code=exc.status_code, content=content)

@app.exception_handler(404)
async def not_found_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "message": "The requested resource was not found",
            "path": str(request.url.path)
        }
    )

@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error(f"Internal server error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred"
        }
    )

# Include routers
app.include_router(appointments_router, prefix="/api/v1")
app.include_router(patients_router, prefix="/api/v1")
app.include_router(physicians_router, prefix="/api/v1")
app.include_router(blocks_router, prefix="/api/v1")

def build_schedule_manager() -> ScheduleManager:
    """Wire the scheduling engine to the SQL store and profile tables."""
    return ScheduleManager(
        profiles=SqlProfileDirectory(SessionLocal),
        store=SqlScheduleStore(SessionLocal),
        policy=SchedulingPolicy.from_settings(settings)
    )

# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info("Starting Clinic Scheduler...")

    # Check database connection
    db_url = settings.get_database_url
    db_type = "PostgreSQL" if "postgresql" in db_url else "SQLite" if "sqlite" in db_url else "Unknown"
    logger.info(f"Using {db_type} database")

    # Initialize database
    try:
        init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    app.state.schedule_manager = build_schedule_manager()
    logger.info("Application startup complete")

@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    logger.info("Shutting down Clinic Scheduler...")

# Health check endpoint
@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint."""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        database = "unavailable"
    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "timestamp": time.time(),
        "version": settings.VERSION
    }

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Welcome to the Clinic Scheduler API",
        "version": settings.VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health",
        "endpoints": {
            "appointments": "/api/v1/appointments",
            "patients": "/api/v1/patients",
            "physicians": "/api/v1/physicians",
            "unavailable_blocks": "/api/v1/unavailable-blocks"
        }
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clinic_scheduler.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
