from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .api.v1.api import router as api_router
from .core.config import settings
from .core.errors import ConflictError, TaskTrackerError
from .core.logging_setup import setup_logging
from .db.session import create_db_and_tables

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL, sql_echo=settings.SQL_ECHO)
    # Create tables on startup
    create_db_and_tables()
    logger.info("%s started", settings.PROJECT_NAME)
    yield

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="REST API for users, tasks and tags with optimistic locking and ad-hoc search",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware to allow requests from the frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(TaskTrackerError)
async def task_tracker_error_handler(request: Request, exc: TaskTrackerError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    body = {"detail": exc.detail}
    if isinstance(exc, ConflictError):
        body["attempts"] = exc.attempts
    return JSONResponse(status_code=exc.status_code, content=body)

# Include API routers
app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
def read_root():
    return {"message": settings.PROJECT_NAME}

@app.get("/health")
def health_check():
    return {"status": "healthy"}
