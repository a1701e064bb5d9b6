"""
FastAPI Main Application
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from vidvault.config import get_settings
from vidvault.database import close_db, get_engine, init_db
from vidvault.middleware.access_gate import AccessGateMiddleware, AccessRules
from vidvault.utils.logger import setup_logger

settings = get_settings()
setup_logger("vidvault", logging.DEBUG if settings.debug else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database engine on startup and dispose it on shutdown"""
    init_db(settings.database_url)
    if not settings.media_host_cloud_name:
        logger.warning("MEDIA_HOST_CLOUD_NAME is not set; client uploads will fail")
    yield
    close_db()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Upload videos to a hosted media service and keep their metadata",
    lifespan=lifespan,
)

# Middleware added last runs first: the gate sees requests after CORS
app.add_middleware(AccessGateMiddleware, rules=AccessRules.from_settings(settings))
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Landing endpoint"""
    return {
        "message": "VidVault Media Uploader API",
        "version": settings.app_version,
        "status": "running"
    }


@app.get("/health")
def health_check():
    """Health check endpoint with database status"""
    health = {"status": "healthy", "version": settings.app_version, "dependencies": {}}

    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        health["dependencies"]["database"] = {"status": "ok"}
    except (RuntimeError, SQLAlchemyError) as e:
        health["dependencies"]["database"] = {"status": "error", "message": str(e)}
        health["status"] = "degraded"

    return health


# Include routers
from vidvault.api.videos import router as videos_router  # noqa: E402
from vidvault.api.media import router as media_router  # noqa: E402

app.include_router(videos_router)
app.include_router(media_router)
