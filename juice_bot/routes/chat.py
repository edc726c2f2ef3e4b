"""
Chat Routes for Juice Bot
=========================

Endpoints that receive the delivery messages drivers type on their phones.

Endpoints:
----------
- POST /chat/parse: Parse a message and return the orders (nothing recorded)
- POST /chat/message: Parse a message and record the orders as deliveries
- POST /api/chat: Legacy webhook used by the messaging integration

Message Flow:
-------------
1. The message is split into lines and run through the parser against the
   current directory snapshot
2. Parsed orders are validated and recorded (one Delivery per order)
3. A confirmation text is built for the driver

A message that yields no order is not an error: /chat/message answers with
status "empty" and records nothing.

Rate Limiting:
--------------
All chat endpoints are rate limited per client IP (default: 30/minute).

Directory:
----------
Parsing needs the client directory. Until it has been loaded (at startup or
through POST /admin/directory/refresh) these endpoints answer 503.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from ..config import RATE_LIMIT_ENABLED, get_rate_limit_chat
from ..db import get_db
from ..directory_cache import directory_cache
from ..parsing import Directory, MessageParser
from ..schemas.chat import (
    ChatMessageRequest,
    ChatMessageResponse,
    LegacyChatRequest,
    LegacyChatResponse,
    ParseRequest,
    ParseResponse,
    RecordedDeliveryOut,
)
from ..services.deliveries import (
    DeliveryBatchResult,
    format_delivery_message,
    record_orders,
)


logger = logging.getLogger(__name__)

# Router definitions
chat_router = APIRouter(prefix="/chat", tags=["Chat"])
legacy_chat_router = APIRouter(prefix="/api", tags=["Chat"])

NO_ORDER_MESSAGE = "Aucune commande reconnue dans le message."


# =============================================================================
# Rate Limiting Setup
# =============================================================================

# In-memory storage; use a Redis storage_uri for multi-worker deployments
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)


# =============================================================================
# Helper Functions
# =============================================================================

def get_loaded_directory() -> Directory:
    """Dependency: the current directory snapshot, or 503 before first load."""
    if not directory_cache.is_loaded:
        raise HTTPException(
            status_code=503,
            detail="Client directory not loaded. Refresh it via /admin/directory/refresh.",
        )
    return directory_cache.get_directory()


def _process_message(
    db: Session,
    directory: Directory,
    message: str,
    user_id: Optional[str],
) -> tuple:
    orders = MessageParser(directory).parse(message)
    if not orders:
        logger.info("No order recognized in message from %s", user_id or "anonymous")
        return orders, DeliveryBatchResult()
    return orders, record_orders(db, orders, source_message=message, created_by=user_id)


# =============================================================================
# Chat Endpoints
# =============================================================================

@chat_router.post("/parse", response_model=ParseResponse)
@limiter.limit(get_rate_limit_chat)
def parse_only(
    request: Request,
    req: ParseRequest,
    directory: Directory = Depends(get_loaded_directory),
) -> ParseResponse:
    """Parse a message and return the orders without recording them."""
    orders = MessageParser(directory).parse(req.message)
    return ParseResponse(orders=orders, count=len(orders))


@chat_router.post("/message", response_model=ChatMessageResponse)
@limiter.limit(get_rate_limit_chat)
def chat_message(
    request: Request,
    req: ChatMessageRequest,
    db: Session = Depends(get_db),
    directory: Directory = Depends(get_loaded_directory),
) -> ChatMessageResponse:
    """Parse a message and record every order it contains."""
    orders, result = _process_message(db, directory, req.message, req.user_id)
    if not result.deliveries:
        return ChatMessageResponse(status="empty", message=NO_ORDER_MESSAGE, orders=orders)

    return ChatMessageResponse(
        status="success",
        message=format_delivery_message(result),
        orders=orders,
        deliveries=[
            RecordedDeliveryOut(
                delivery_id=d.delivery_id,
                delivery_ref=d.delivery_ref,
                client_id=d.client_id,
                client_name=d.client_name,
                order_type=d.order_type.value,
                total_price=d.total_price,
                item_count=d.item_count,
                skipped_products=d.skipped_products,
            )
            for d in result.deliveries
        ],
    )


@legacy_chat_router.post("/chat", response_model=LegacyChatResponse)
@limiter.limit(get_rate_limit_chat)
def legacy_chat(
    request: Request,
    req: LegacyChatRequest,
    db: Session = Depends(get_db),
    directory: Directory = Depends(get_loaded_directory),
) -> LegacyChatResponse:
    """Webhook alias of /chat/message answering with the confirmation text only."""
    _, result = _process_message(db, directory, req.message, req.user_id)
    if not result.deliveries:
        return LegacyChatResponse(data=NO_ORDER_MESSAGE)
    return LegacyChatResponse(data=format_delivery_message(result))
