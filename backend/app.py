# backend/app.py
from datetime import datetime
import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from .errors import (
    AvailabilityError,
    FormatError,
    NotFoundError,
    OverlapError,
    PersistenceError,
    RangeError,
    ValidationError,
)
from .models import ROLE_SCHEDULER, SessionLocal, Teacher, init_db
from .routes.auth import router as auth_router
from .routes.availability import router as availability_router
from .routes.scheduler import router as scheduler_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_SCHEDULER_EMAIL = os.getenv("DEFAULT_SCHEDULER_EMAIL", "scheduler@example.com")
DEFAULT_SCHEDULER_PASSWORD = os.getenv("DEFAULT_SCHEDULER_PASSWORD", "Schedule2025!")

app = FastAPI(title="Teacher Availability Portal")
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.include_router(auth_router)
app.include_router(availability_router)
app.include_router(scheduler_router)

# Allow calls from the separately served frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------- Domain errors -> HTTP ----------

ERROR_STATUS = {
    FormatError: 400,
    RangeError: 400,
    NotFoundError: 404,
    OverlapError: 409,
    ValidationError: 422,
    PersistenceError: 500,
}


@app.exception_handler(AvailabilityError)
async def availability_error_handler(request: Request, exc: AvailabilityError):
    status_code = next(
        (code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)), 400
    )
    content = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, ValidationError):
        content["violations"] = exc.violations
    return JSONResponse(status_code=status_code, content=content)


# ---------- FastAPI lifecycle ----------

@app.on_event("startup")
def startup_event():
    # make sure tables exist
    init_db()

    # Create default scheduler account if none exists
    from .auth import hash_password

    db = SessionLocal()
    try:
        scheduler_count = db.query(Teacher).filter_by(role=ROLE_SCHEDULER).count()
        if scheduler_count == 0:
            scheduler = Teacher(
                id="SCHEDULER",
                name="Scheduler",
                email=DEFAULT_SCHEDULER_EMAIL.lower(),
                role=ROLE_SCHEDULER,
                password_hash=hash_password(DEFAULT_SCHEDULER_PASSWORD),
                active=True
            )
            db.add(scheduler)
            db.commit()
            logger.warning(f"[Startup] Created default scheduler account: {DEFAULT_SCHEDULER_EMAIL}")
    finally:
        db.close()


@app.get("/api/health")
def health_check():
    return {"status": "ok", "message": "Server is running", "timestamp": datetime.utcnow().isoformat()}
