"""
Admin Directory Routes for Juice Bot
====================================

Endpoints:
----------
- POST /admin/directory/refresh: Reload the client directory from the database
- GET /admin/directory/status: Cache status (loaded, last refresh, counts)

Refresh after importing new clients or abbreviations with
juice_bot.seed_directory so the parser picks them up without a restart.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import verify_admin_credentials
from ..db import get_db
from ..directory_cache import directory_cache
from ..schemas.directory import DirectoryRefreshResponse, DirectoryStatusOut


logger = logging.getLogger(__name__)

admin_directory_router = APIRouter(prefix="/admin/directory", tags=["Admin - Directory"])


@admin_directory_router.post("/refresh", response_model=DirectoryRefreshResponse)
def refresh_directory(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> DirectoryRefreshResponse:
    """
    Reload clients and abbreviations from the database.

    A failed reload keeps the previous directory and reports status "error".
    """
    logger.info("Manual directory refresh triggered by admin")
    try:
        directory_cache.load_from_db(db, fail_on_error=True)
    except RuntimeError as e:
        return DirectoryRefreshResponse(
            status="error",
            message=str(e),
            directory=DirectoryStatusOut(**directory_cache.get_status()),
        )

    return DirectoryRefreshResponse(
        status="ok",
        message="Directory refreshed successfully",
        directory=DirectoryStatusOut(**directory_cache.get_status()),
    )


@admin_directory_router.get("/status", response_model=DirectoryStatusOut)
def directory_status(
    _admin: str = Depends(verify_admin_credentials),
) -> DirectoryStatusOut:
    return DirectoryStatusOut(**directory_cache.get_status())
