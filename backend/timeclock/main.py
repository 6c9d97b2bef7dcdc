import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from timeclock.core.config import settings
from timeclock.core.exceptions import TimeClockError
from timeclock.api import auth, punches, corrections
from timeclock.api import admin as admin_api
from timeclock.api import settings as settings_api
from timeclock.api import time_off as time_off_api

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def init_database():
    """Create tables and seed the settings row and a first admin on startup."""
    from timeclock.core.database import engine, Base, SessionLocal
    from timeclock.models import Employee, CompanySettings  # noqa: F401  ensure tables registered
    from timeclock.services.geofence import get_company_settings

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        get_company_settings(db)

        if db.query(Employee).count() == 0:
            db.add(Employee(name="Administrator", pin="0000", is_admin=True, is_active=True))
            logger.warning("No employees found; created Administrator with PIN 0000 (change it)")

        db.commit()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Error seeding data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run database init on startup."""
    init_database()
    yield


# Disable API docs in production
docs_url = "/docs" if settings.ENVIRONMENT != "production" else None
redoc_url = "/redoc" if settings.ENVIRONMENT != "production" else None

app = FastAPI(
    title=settings.APP_NAME,
    description="Employee time clock - punches, corrections and time off",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url,
)


# Domain errors carry their own status and a stable code for the kiosk
@app.exception_handler(TimeClockError)
async def timeclock_exception_handler(request, exc: TimeClockError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


# Global exception handler - always return JSON (never plain text)
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error("Unhandled exception: %s", exc, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal error: {str(exc)}"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


# CORS - kiosk frontend + local dev
allowed_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
]
frontend_url = settings.FRONTEND_URL or os.environ.get("FRONTEND_URL", "")
if frontend_url and frontend_url not in allowed_origins:
    allowed_origins.append(frontend_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(punches.router)
app.include_router(corrections.router)
app.include_router(time_off_api.router)
app.include_router(admin_api.router)
app.include_router(settings_api.router)


@app.get("/api/health")
def health():
    return {"status": "ok", "app": settings.APP_NAME}
