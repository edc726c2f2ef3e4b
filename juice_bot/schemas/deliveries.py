"""
Delivery Schemas for Juice Bot
==============================

Pydantic models for recorded deliveries in the admin interface.

Endpoint Coverage:
------------------
- GET /admin/deliveries: List deliveries with pagination and filtering
- GET /admin/deliveries/{id}: Get one delivery with its items

Order Types:
------------
- **delivery**: Products dropped at the client (status "delivered")
- **return**: Products taken back from the client (status "returned")
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class DeliveryItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: str
    quantity: int
    unit_price: float
    line_total: float


class DeliverySummaryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    delivery_ref: str
    client_id: Optional[str] = None
    client_name: str
    order_type: str
    status: str
    total_price: float
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class DeliveryDetailOut(DeliverySummaryOut):
    source_message: Optional[str] = None
    items: List[DeliveryItemOut] = []


class DeliveryListResponse(BaseModel):
    items: List[DeliverySummaryOut]
    page: int
    page_size: int
    total: int
    has_next: bool
