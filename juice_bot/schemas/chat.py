"""
Chat Schemas for Juice Bot
==========================

Pydantic models for the message endpoints. Drivers send their delivery
notes as free text; the API answers with the parsed orders and, for
/chat/message, the deliveries recorded from them.

Endpoint Coverage:
------------------
- POST /chat/parse: Parse a message without recording anything
- POST /chat/message: Parse and record a message
- POST /api/chat: Legacy webhook body ({"message", "userId"})

Validation:
-----------
- Message length is constrained by MAX_MESSAGE_LENGTH (default: 4000 chars).
- An empty message is valid and yields no orders.

Usage:
------
    @router.post("/message", response_model=ChatMessageResponse)
    def chat_message(req: ChatMessageRequest, db: Session = Depends(get_db)):
        ...
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import MAX_MESSAGE_LENGTH
from ..parsing.schemas import ParsedOrder


class ParseRequest(BaseModel):
    message: str = Field(
        ...,
        max_length=MAX_MESSAGE_LENGTH,
        description=f"Delivery message (max {MAX_MESSAGE_LENGTH} characters)",
    )


class ParseResponse(BaseModel):
    """Orders parsed from a message, in message order."""
    orders: List[ParsedOrder]
    count: int


class ChatMessageRequest(BaseModel):
    """
    Request body for POST /chat/message.

    Attributes:
        message: The driver's delivery message
        user_id: Sender identifier, stored on recorded deliveries
    """
    message: str = Field(
        ...,
        max_length=MAX_MESSAGE_LENGTH,
        description=f"Delivery message (max {MAX_MESSAGE_LENGTH} characters)",
    )
    user_id: Optional[str] = None


class RecordedDeliveryOut(BaseModel):
    delivery_id: int
    delivery_ref: str
    client_id: Optional[str] = None
    client_name: str
    order_type: str
    total_price: float
    item_count: int
    skipped_products: List[str] = []


class ChatMessageResponse(BaseModel):
    """
    Response from POST /chat/message.

    Attributes:
        status: "success" when at least one order was recorded, else "empty"
        message: Confirmation text for the driver
        orders: Parsed orders
        deliveries: Deliveries recorded from those orders
    """
    status: Literal["success", "empty"]
    message: str
    orders: List[ParsedOrder] = []
    deliveries: List[RecordedDeliveryOut] = []


class LegacyChatRequest(BaseModel):
    """Webhook body used by the messaging integration."""
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., max_length=MAX_MESSAGE_LENGTH)
    user_id: Optional[str] = Field(None, alias="userId")


class LegacyChatResponse(BaseModel):
    data: str
