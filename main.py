"""
Exam Portal API: main application
FastAPI application for exam administration: accounts, exams and quizzes,
timed attempts, results, certificates and notifications.
"""

from dotenv import load_dotenv
load_dotenv()

import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from database.database import Base, engine, get_db
from database import models  # noqa: F401  registers tables on Base.metadata
from routers import auth, exams, quizzes, results, student
from services import certificate
from services.errors import ExamPortalError

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s  %(levelname)s  %(message)s",
)
log = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _cors_origins():
    raw = os.getenv("CORS_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create tables."""
    Base.metadata.create_all(bind=engine)
    log.info("[STARTUP] schema ready")
    yield


app = FastAPI(
    title="Exam Portal API",
    description="Exam administration, timed attempts, grading and certificates",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Error envelope ────────────────────────────────────────────────────────────

@app.exception_handler(ExamPortalError)
async def portal_error_handler(request: Request, exc: ExamPortalError):
    return _error(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    return _error(400, "; ".join(messages) or "Invalid request")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.error(f"[ERROR] {request.method} {request.url.path} failed", exc_info=exc)
    return _error(500, "Server error")


# ─── Routers ───────────────────────────────────────────────────────────────────

app.include_router(auth.router)       # /auth/*
app.include_router(exams.router)      # /exams/*
app.include_router(quizzes.router)    # /admin/exams/*/quizzes, /admin/quizzes/*
app.include_router(results.router)    # /results/*
app.include_router(student.router)    # /student/exams/*, /student/notifications/*

# Rendered certificates
os.makedirs(certificate.CERTIFICATE_DIR, exist_ok=True)
app.mount(certificate.CERTIFICATE_URL_PREFIX, StaticFiles(directory=certificate.CERTIFICATE_DIR), name="pdfs")


@app.get("/")
def root():
    return {
        "name": "Exam Portal API",
        "version": "1.0.0",
        "endpoints": {
            "docs": "/docs",
            "auth": "/auth",
            "exams": "/exams",
            "quizzes": "/admin/quizzes",
            "results": "/results",
            "student": "/student",
        },
    }


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except Exception:
        log.warning("[HEALTH] database ping failed", exc_info=True)
        database = "unavailable"
    return {"status": "healthy" if database == "ok" else "degraded", "database": database}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
