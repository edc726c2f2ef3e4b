"""
Admin Deliveries Routes for Juice Bot
=====================================

Admin endpoints for reviewing the deliveries and returns recorded from
driver messages.

Endpoints:
----------
- GET /admin/deliveries: List deliveries with pagination and filtering
- GET /admin/deliveries/{id}: Get one delivery with its line items

Authentication:
---------------
All endpoints require admin authentication via HTTP Basic Auth.

Filtering:
----------
- ?order_type=delivery - Only deliveries
- ?order_type=return - Only returns
- No order_type parameter - Both

Pagination:
-----------
Uses page/page_size parameters (?page=1&page_size=10 by default) and
returns the total count and a has_next flag.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import verify_admin_credentials
from ..db import get_db
from ..models import Delivery
from ..parsing.constants import OrderType
from ..schemas.deliveries import (
    DeliveryDetailOut,
    DeliveryListResponse,
    DeliverySummaryOut,
)


logger = logging.getLogger(__name__)

# Router definition
admin_deliveries_router = APIRouter(prefix="/admin/deliveries", tags=["Admin - Deliveries"])


@admin_deliveries_router.get("", response_model=DeliveryListResponse)
def list_deliveries(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
    order_type: Optional[OrderType] = Query(
        None,
        description="Filter by type: delivery, return, or leave empty for all",
    ),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
) -> DeliveryListResponse:
    """
    Return a paginated list of recorded deliveries, newest first.

    Requires admin authentication.
    """
    query = db.query(Delivery)
    if order_type is not None:
        query = query.filter(Delivery.order_type == order_type.value)

    total = query.count()
    offset = (page - 1) * page_size

    deliveries = (
        query.order_by(Delivery.created_at.desc(), Delivery.id.desc())
        .offset(offset)
        .limit(page_size)
        .all()
    )
    items = [DeliverySummaryOut.model_validate(d) for d in deliveries]

    return DeliveryListResponse(
        items=items,
        page=page,
        page_size=page_size,
        total=total,
        has_next=offset + len(items) < total,
    )


@admin_deliveries_router.get("/{delivery_id}", response_model=DeliveryDetailOut)
def get_delivery_detail(
    delivery_id: int,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> DeliveryDetailOut:
    """Get one delivery with its line items and the message it came from."""
    delivery = db.query(Delivery).filter(Delivery.id == delivery_id).first()
    if not delivery:
        raise HTTPException(status_code=404, detail="Delivery not found")
    return DeliveryDetailOut.model_validate(delivery)
