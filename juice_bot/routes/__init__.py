"""
Routes Package for Juice Bot
============================

API route definitions organized by domain. Each module defines a FastAPI
APIRouter with related endpoints grouped together.

**Driver-Facing Routes:**
- chat.py: Message parsing and recording (plus the legacy /api/chat webhook)

**Admin Routes (require authentication):**
- admin_deliveries.py: Recorded deliveries and returns
- admin_directory.py: Client directory refresh and status

Router Registration:
--------------------
Routers are registered in main.py under two prefixes:
1. /api/v1/* - Versioned API (recommended)
2. /* - Root paths for backward compatibility

The legacy webhook router is only mounted at the root.

Error Handling:
---------------
Routes raise HTTPException for error conditions:
- 401: Unauthorized (invalid credentials)
- 404: Not found (invalid ID)
- 422: Validation error (e.g. message too long)
- 429: Too many requests (rate limited)
- 503: Service unavailable (directory not loaded, admin not configured)
"""

from .chat import chat_router, legacy_chat_router, limiter
from .admin_deliveries import admin_deliveries_router
from .admin_directory import admin_directory_router

__all__ = [
    "chat_router",
    "legacy_chat_router",
    "limiter",
    "admin_deliveries_router",
    "admin_directory_router",
]
