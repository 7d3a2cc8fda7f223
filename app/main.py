from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from datetime import datetime, timezone
import logging

# Load environment variables as early as possible
load_dotenv()

from .core.config import settings
from .database import create_db_and_tables
from .exceptions import (
    PersistenceUnavailable,
    ServiceUnavailable,
    http_exception_handler,
    persistence_unavailable_handler,
    service_unavailable_handler,
)
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, SecurityMiddleware, StreamAwareGZipMiddleware
from .routers import appointments_router, assistant_router, doctors_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.storage_ok = True
    app.state.storage_error = None
    if settings.STORAGE_BACKEND.lower() == "sql":
        try:
            create_db_and_tables()
            logger.info("Appointment storage initialized")
        except Exception as e:
            # Do not crash the app; report via health endpoint
            app.state.storage_ok = False
            app.state.storage_error = str(e)
            logger.exception("Appointment storage initialization failed")
    yield
    logger.info(f"Shutting down {settings.APP_NAME}...")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url=("/docs" if settings.DOCS_ENABLED else None),
    redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
)

app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(PersistenceUnavailable, persistence_unavailable_handler)
app.add_exception_handler(ServiceUnavailable, service_unavailable_handler)

app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityMiddleware)
app.add_middleware(
    StreamAwareGZipMiddleware,
    minimum_size=settings.GZIP_MIN_SIZE,
    skip_paths=["/appointments/events"],
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(appointments_router.router)
app.include_router(doctors_router.router)
app.include_router(assistant_router.router)

@app.get("/health")
def health_check():
    return {
        "status": "healthy" if getattr(app.state, "storage_ok", True) else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "storage": {
            "backend": settings.STORAGE_BACKEND,
            "ok": getattr(app.state, "storage_ok", True),
            "error": getattr(app.state, "storage_error", None),
        },
        "ai": {
            "gemini_configured": bool(settings.GEMINI_API_KEY),
            "model": settings.GEMINI_MODEL,
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=1,
        log_level=settings.LOG_LEVEL.lower()
    )
