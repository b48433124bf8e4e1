import time
import traceback

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.core.config import settings
from app.core.logging_config import setup_logging, get_logger, RequestLogger
from app.core.middleware import SecurityHeadersMiddleware
from app.core.rate_limit import limiter
from app.db.database import Base, engine
from app.api.routes import auth, users, documents, reading_sessions, quiz, user_data, user_settings

# Initialize logging first (auto-determines level based on environment)
setup_logging(
    app_name="chapterflux",
    log_level=settings.log_level,  # Empty = auto (DEBUG in dev, WARNING in prod)
    environment=settings.environment,
    enable_console=True,
    enable_file=settings.log_to_file,
)

logger = get_logger(__name__)
request_logger = RequestLogger(get_logger("chapterflux.requests"))

logger.info("Starting ChapterFlux API...")

# Create database tables
from app import models  # noqa: F401,E402 - registers every model on Base.metadata
Base.metadata.create_all(bind=engine)
logger.info("Database tables created/verified")

# Lightweight schema migration for databases created before the unique indexes existed
from sqlalchemy import inspect as sa_inspect, text  # noqa: E402

_UNIQUE_INDEXES = [
    # (table, columns, index name)
    ("achievements", ["user_id", "type"], "uq_achievements_user_type"),
    ("reading_streaks", ["user_id"], "uq_reading_streaks_user"),
]


def _apply_unique_migration(conn, inspector):
    """Deduplicate rows and add the unique indexes the analytics rely on (idempotent)."""
    table_names = inspector.get_table_names()
    for table, cols, index_name in _UNIQUE_INDEXES:
        if table not in table_names:
            continue
        existing = {idx["name"] for idx in inspector.get_indexes(table) if idx.get("name")}
        existing |= {uc["name"] for uc in inspector.get_unique_constraints(table) if uc.get("name")}
        if index_name in existing:
            continue
        col_list = ", ".join(cols)
        # Keep the earliest row of each duplicate group
        deleted = conn.execute(text(
            f"DELETE FROM {table} WHERE id NOT IN ("
            f"SELECT MIN(id) FROM {table} GROUP BY {col_list})"
        )).rowcount
        conn.execute(text(f"CREATE UNIQUE INDEX IF NOT EXISTS {index_name} ON {table}({col_list})"))
        logger.info(f"Added unique index {index_name} on {table} (removed {deleted} duplicates)")
    conn.commit()


with engine.connect() as conn:
    inspector = sa_inspect(engine)
    if "users" in inspector.get_table_names():
        existing_cols = {c["name"] for c in inspector.get_columns("users")}
        for column, ddl in [
            ("bio", "VARCHAR(500)"),
            ("location", "VARCHAR(100)"),
            ("website", "VARCHAR(255)"),
            ("interests", "JSON"),
            ("preferences", "JSON"),
        ]:
            if column not in existing_cols:
                conn.execute(text(f"ALTER TABLE users ADD COLUMN {column} {ddl}"))
                logger.info(f"Added '{column}' column to users")
        conn.commit()
    if "data_exports" in inspector.get_table_names():
        if "pdf" not in {c["name"] for c in inspector.get_columns("data_exports")}:
            # Tables from before PDF exports; pending rows are dropped
            conn.execute(text("DROP TABLE data_exports"))
            conn.commit()
            models.DataExport.__table__.create(bind=engine)
            logger.info("Recreated data_exports for PDF exports")
    _apply_unique_migration(conn, inspector)


app = FastAPI(
    title=settings.app_name,
    description="Reading progress tracking and analytics for ChapterFlux",
    version="0.1.0",
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed request fields as 400 with field-level detail."""
    logger.info(f"Invalid input on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid input", "errors": jsonable_encoder(exc.errors())},
    )


# Global exception handler: logs full tracebacks for 500 errors
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions, log full traceback, return 500."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}\n"
        f"{traceback.format_exc()}"
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing."""
    start_time = time.time()
    client_ip = request.client.host if request.client else "unknown"

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    request_logger.log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=duration_ms,
        client_ip=client_ip,
        user_id=getattr(request.state, "user_id", None),
    )
    return response


# CORS middleware: restrict origins (never use wildcard with credentials)
if settings.allowed_origins:
    cors_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
elif settings.environment == "production":
    cors_origins = [settings.frontend_url]
else:
    cors_origins = ["http://localhost:3000", settings.frontend_url]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.add_middleware(SecurityHeadersMiddleware)

app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(documents.router, prefix="/api")
app.include_router(reading_sessions.router, prefix="/api")
app.include_router(quiz.router, prefix="/api")
app.include_router(user_data.router, prefix="/api")
app.include_router(user_settings.router, prefix="/api")

logger.info("API routes registered at /api")


@app.get("/health")
def health_check():
    logger.debug("Health check requested")
    return {"status": "healthy"}


@app.get("/")
def root():
    return {"message": "ChapterFlux API", "app": settings.app_name, "docs": "/docs"}


@app.on_event("startup")
async def startup_event():
    from app.services.scheduler import register_jobs, start_scheduler

    register_jobs()
    start_scheduler()
    logger.info("ChapterFlux API started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    from app.services.scheduler import stop_scheduler
    stop_scheduler()
    logger.info("ChapterFlux API shutting down")
