"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from autobrowse.config import get_settings
from autobrowse.db import close_db, init_db
from autobrowse.library import close_library, init_library

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await init_db()
    await init_library()
    logger.info("DB ready at %s", settings.db_abs_path)
    yield
    await close_library()
    await close_db()
    logger.info("Library stopped, DB closed")


app = FastAPI(
    title="autobrowse",
    version="0.1.0",
    lifespan=lifespan,
)

# Routers
from autobrowse.auth import router as auth_router  # noqa: E402
from autobrowse.routes_library import router as library_router  # noqa: E402

app.include_router(auth_router)
app.include_router(library_router)


@app.get("/health")
async def health():
    """Simple health-check endpoint."""
    return JSONResponse({"status": "ok", "version": app.version})
