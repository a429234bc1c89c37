# backend/academy/main.py

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import structlog

from academy import __version__, auth, config
from academy.errors import AdvisoryError, ConflictError, InvalidRequestError, NotFoundError
from academy.logging_config import configure_logging

# Import routers
from academy.routers import (
    assessments,
    attendance,
    batches,
    dashboard,
    drills,
    progress_summaries,
    sessions,
    students,
    training_plans,
)

configure_logging()
logger = structlog.get_logger(__name__)

# ---------------------------
# FastAPI app initialization
# ---------------------------
app = FastAPI(
    title="Tennis Academy Manager",
    description="Backend API for managing academy batches, students, sessions, and AI coaching advice.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# ---------------------------
# CORS setup (allow frontend domains)
# ---------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# ---------------------------
# Error responses: {"message": ..., "error"?: ...}
# ---------------------------
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None)
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request data", "error": errors}
    )

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": str(exc)})

@app.exception_handler(InvalidRequestError)
async def invalid_request_handler(request: Request, exc: InvalidRequestError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)})

@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)})

@app.exception_handler(AdvisoryError)
async def advisory_error_handler(request: Request, exc: AdvisoryError):
    logger.warning("advisory_request_failed", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"message": "AI advisor is unavailable", "error": str(exc)}
    )

# ---------------------------
# Include routers
# ---------------------------
routers = [
    auth.router,
    students.router,
    batches.router,
    sessions.router,
    attendance.router,
    assessments.router,
    training_plans.router,
    progress_summaries.router,
    drills.router,
    dashboard.router,
]

for r in routers:
    app.include_router(r)

# ---------------------------
# Root endpoint
# ---------------------------
@app.get("/", tags=["Root"])
def root():
    return {"message": "Welcome to the Tennis Academy API"}
