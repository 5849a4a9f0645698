"""
FastAPI application entry point.

Sets up the app, lifespan (DB connect/disconnect), CORS, logging, error
handlers and includes API routers. Document parsing and script generation run
via BackgroundTasks.add_task() so uploads and generation requests return
immediately while the work continues; clients poll for the outcome.

All I/O (DB with Motor, Groq HTTP calls) is non-blocking so one process can
handle many concurrent requests. Parsing and disk access run in a thread pool
(asyncio.to_thread) so they don't block the event loop.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api import documents, podcasts, projects
from app.config import get_settings
from app.database import close_mongo_connection, connect_to_mongo
from app.errors import register_exception_handlers

# Configure logging - single place for log format and level
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context: runs on startup and shutdown.
    We use it to connect to MongoDB at start and disconnect at end.
    """
    # Startup
    await connect_to_mongo()
    settings = get_settings()
    # Warn if JWT secret looks like a placeholder (causes 401 on every request)
    secret = settings.supabase_jwt_secret or ""
    if not secret:
        logger.warning("SUPABASE_JWT_SECRET is not set. HS256 tokens will be rejected.")
    elif len(secret) < 32 or "secret key" in secret.lower() or "your-" in secret.lower():
        logger.warning(
            "SUPABASE_JWT_SECRET looks like a placeholder. Get the real value from: "
            "Supabase Dashboard → Project Settings → API → JWT Secret (long random string)."
        )
    if not settings.groq_api_key:
        logger.warning("GROQ_API_KEY is not set. Podcast generation will fail.")
    yield
    # Shutdown
    await close_mongo_connection()


def create_application() -> FastAPI:
    """Factory for the FastAPI app. Keeps main.py clean and testable."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Turn uploaded documents into two-host podcast scripts.",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS - allow the dashboard frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Restrict in production to your frontend origin
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Auth is a dependency (get_current_user) used by every router
    app.include_router(documents.router, prefix="/api/documents", tags=["documents"])
    app.include_router(projects.router, prefix="/api/projects", tags=["projects"])
    app.include_router(podcasts.router, prefix="/api/podcasts", tags=["podcasts"])

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    # Public URLs handed out by BlobStorage resolve here
    storage_path = Path(settings.storage_dir)
    storage_path.mkdir(parents=True, exist_ok=True)
    app.mount("/storage", StaticFiles(directory=storage_path), name="storage")
    logger.info("Storage directory ready: %s", storage_path.resolve())

    return app


app = create_application()
