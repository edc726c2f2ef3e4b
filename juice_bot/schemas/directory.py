"""
Directory Schemas for Juice Bot
===============================

Responses of the directory admin endpoints.
"""

from typing import Dict, Optional

from pydantic import BaseModel


class DirectoryStatusOut(BaseModel):
    is_loaded: bool
    last_refresh: Optional[str] = None
    counts: Dict[str, int]


class DirectoryRefreshResponse(BaseModel):
    status: str
    message: str
    directory: DirectoryStatusOut
