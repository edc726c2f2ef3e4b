"""
Configuration Module for Juice Bot
==================================

This module centralizes all configuration settings, environment variables, and
constants used throughout the Juice Bot application. Values are parsed and
typed at module load time so configuration errors surface at startup.

Configuration Categories:
-------------------------
- **Message Parsing**: Fuzzy matching tolerance for client abbreviations and
  the bound on suffix re-parsing passes.

- **Directory Loading**: Whether a failure to load the client directory at
  startup should abort the server.

- **Rate Limiting**: Controls API request throttling on the chat endpoints.

- **Input Validation**: Maximum length of an incoming order message.

- **CORS Settings**: Cross-Origin Resource Sharing configuration.

- **Admin Access**: Credentials for the delivery and directory admin endpoints.

Environment Variables:
----------------------
- FUZZY_MATCH_MAX_DISTANCE: Max edit distance for client abbreviations (default: 2)
- SUFFIX_MAX_PASSES: Max re-parse passes on a client line suffix (default: 3)
- MAX_ITEM_QUANTITY: Largest quantity accepted on one line item (default: 9999)
- DIRECTORY_FAIL_ON_STARTUP_ERROR: Abort startup if the directory fails to load (default: "false")
- RATE_LIMIT_CHAT: Chat endpoint rate limit (default: "30 per minute")
- RATE_LIMIT_ENABLED: Enable/disable rate limiting (default: "true")
- MAX_MESSAGE_LENGTH: Max order message length (default: 4000)
- CURRENCY: Currency label used in delivery summaries (default: "TND")
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")
- ADMIN_USERNAME: Admin username (default: "admin")
- ADMIN_PASSWORD: Admin password (required for admin access)

Usage:
------
    from juice_bot.config import (
        FUZZY_MATCH_MAX_DISTANCE,
        MAX_MESSAGE_LENGTH,
        RATE_LIMIT_CHAT,
    )
"""

import os
from typing import List


# =============================================================================
# Message Parsing Configuration
# =============================================================================
# Client abbreviations typed on a phone are often one or two keystrokes off.
# Anything further than this distance from every known abbreviation is not
# treated as a client.

FUZZY_MATCH_MAX_DISTANCE: int = int(os.getenv("FUZZY_MATCH_MAX_DISTANCE", "2"))

# A client line may carry a trailing suffix ("aziz surgelé 25cl"); the suffix is
# re-parsed at most this many times.
SUFFIX_MAX_PASSES: int = int(os.getenv("SUFFIX_MAX_PASSES", "3"))

# Larger quantities on a line are treated as typos and dropped, like zero.
MAX_ITEM_QUANTITY: int = int(os.getenv("MAX_ITEM_QUANTITY", "9999"))


# =============================================================================
# Directory Loading Configuration
# =============================================================================
# The client/product directory is loaded from the database at startup.
# By default a failure is logged and the server still starts; /chat/message
# then answers 503 until an admin triggers a refresh.

DIRECTORY_FAIL_ON_STARTUP_ERROR: bool = (
    os.getenv("DIRECTORY_FAIL_ON_STARTUP_ERROR", "false").lower() == "true"
)


# =============================================================================
# Rate Limiting Configuration
# =============================================================================
# Uses slowapi with in-memory storage (use Redis for multi-worker prod).

RATE_LIMIT_CHAT: str = os.getenv("RATE_LIMIT_CHAT", "30 per minute")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


def get_rate_limit_chat() -> str:
    """
    Return the current chat rate limit.

    This function allows dynamic override in tests without modifying
    the module-level constant.

    Returns:
        Rate limit string in "X per Y" format
    """
    return RATE_LIMIT_CHAT


# =============================================================================
# Input Validation Configuration
# =============================================================================

# Maximum allowed message length in characters. A day's deliveries for a
# whole route fit comfortably in this.
MAX_MESSAGE_LENGTH: int = int(os.getenv("MAX_MESSAGE_LENGTH", "4000"))


# =============================================================================
# Delivery Summary Configuration
# =============================================================================

CURRENCY: str = os.getenv("CURRENCY", "TND")


# =============================================================================
# CORS Configuration
# =============================================================================
# Format: comma-separated list of origins. Default "*" allows all origins
# (suitable for development only).

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]


# =============================================================================
# Admin Authentication Configuration
# =============================================================================
# Credentials for HTTP Basic Auth on admin endpoints.
# ADMIN_PASSWORD must be set in production for admin access to work.

ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")
