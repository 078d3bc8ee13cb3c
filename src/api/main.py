import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from src.api.deps import get_config
from src.rules.loader import load_definitions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    config = get_config()

    # Load settings definitions on startup (fail-fast)
    try:
        definitions = load_definitions(config.definitions_dir)
        logger.info(
            "Loaded %d settings definitions from %s", len(definitions), config.definitions_dir
        )
    except Exception as e:
        logger.critical("Settings definitions failed to load: %s", e)
        sys.exit(1)

    yield
    # Shutdown cleanup if needed


app = FastAPI(
    title="Plugin Settings Framework API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import admin_settings  # noqa: E402

app.include_router(admin_settings.router, prefix="/api/admin/settings", tags=["Admin Settings"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
