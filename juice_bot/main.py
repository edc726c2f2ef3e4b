# Load environment variables FIRST, before any module imports that need them
from dotenv import load_dotenv
load_dotenv()

import logging
import os
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import CORS_ORIGINS, DIRECTORY_FAIL_ON_STARTUP_ERROR
from . import db as db_module
from .directory_cache import directory_cache
from .logging_config import setup_logging
from .middleware import RequestIDMiddleware
from .routes import (
    admin_deliveries_router,
    admin_directory_router,
    chat_router,
    legacy_chat_router,
    limiter,
)

# Configure logging at module load time
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables and load the client directory."""
    db_module.init_db()
    db = db_module.SessionLocal()
    try:
        directory_cache.load_from_db(db, fail_on_error=DIRECTORY_FAIL_ON_STARTUP_ERROR)
    finally:
        db.close()
    if not directory_cache.is_loaded:
        logger.warning("Starting without a client directory; chat endpoints will answer 503")
    yield


app = FastAPI(
    title="Juice Bot API",
    description="Turns drivers' delivery messages into recorded deliveries and returns",
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Health", "description": "Health check endpoints"},
        {"name": "Chat", "description": "Delivery message parsing and recording"},
        {"name": "Admin - Deliveries", "description": "Admin endpoints for recorded deliveries"},
        {"name": "Admin - Directory", "description": "Admin endpoints for the client directory"},
    ],
)

# Add request ID middleware (before other middleware)
app.add_middleware(RequestIDMiddleware)

# Add rate limit exception handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Health ----------


@app.get("/health", tags=["Health"])
def health() -> Dict[str, str]:
    """Health check endpoint. Returns ok if the service is running."""
    return {"status": "ok"}


# ---------- Routers ----------

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(chat_router)
api_v1_router.include_router(admin_deliveries_router)
api_v1_router.include_router(admin_directory_router)

app.include_router(api_v1_router)

# Also mount at root for backward compatibility
app.include_router(chat_router)
app.include_router(admin_deliveries_router)
app.include_router(admin_directory_router)
app.include_router(legacy_chat_router)


def run(host: str = "0.0.0.0", port: int = None, reload: bool = False) -> None:
    """Run the API with uvicorn (PORT env var, default 8000)."""
    import uvicorn

    if port is None:
        port = int(os.getenv("PORT", "8000"))
    logger.info("Starting Juice Bot API on %s:%d", host, port)
    uvicorn.run("juice_bot.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
