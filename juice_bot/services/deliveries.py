"""
Delivery Recording Service for Juice Bot
========================================

This module is the sink for orders produced by the message parser. Each
parsed order becomes one Delivery row with its DeliveryItems, priced from
the products table.

Key Functions:
--------------
- validate_orders: Reject orders without a client or without items
- record_orders: Price and persist a batch of parsed orders
- format_delivery_message: Confirmation text for the driver

Pricing:
--------
- unit_price comes from Product.unit_price for the item's product id
- line_total = unit_price * quantity
- total_price is computed per order, from that order's lines only
- an unknown product id is logged and skipped; the order is still
  recorded (possibly with a zero total) so the operator sees it

References:
-----------
Each delivery gets a human-readable reference:
    LIV-20260115-1a2b3c4d   (delivery)
    RET-20260115-9f8e7d6c   (return)
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import config
from ..models import Delivery, DeliveryItem, Product
from ..parsing.constants import OrderType
from ..parsing.schemas import ParsedOrder


logger = logging.getLogger(__name__)

DELIVERY_REF_PREFIX = "LIV"
RETURN_REF_PREFIX = "RET"

STATUS_DELIVERED = "delivered"
STATUS_RETURNED = "returned"


class InvalidOrderError(ValueError):
    """A parsed order is missing its client or its items."""


@dataclass
class RecordedDelivery:
    delivery_id: int
    delivery_ref: str
    client_id: Optional[str]
    client_name: str
    order_type: OrderType
    total_price: float
    item_count: int
    skipped_products: List[str] = field(default_factory=list)


@dataclass
class DeliveryBatchResult:
    deliveries: List[RecordedDelivery] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.deliveries)

    @property
    def total_price(self) -> float:
        return round(sum(d.total_price for d in self.deliveries), 3)


def generate_delivery_ref(order_type: OrderType, now: Optional[datetime] = None) -> str:
    prefix = RETURN_REF_PREFIX if order_type == OrderType.RETURN else DELIVERY_REF_PREFIX
    now = now or datetime.now()
    return f"{prefix}-{now:%Y%m%d}-{uuid.uuid4().hex[:8]}"


def validate_orders(orders: Iterable[ParsedOrder]) -> None:
    """
    Raise InvalidOrderError for any order without a client or items.

    ParsedOrder enforces this on construction; this guards orders built
    without validation (model_construct) before anything is written.
    """
    for index, order in enumerate(orders):
        if order.client is None:
            raise InvalidOrderError(f"Order {index} has no client")
        if not order.items:
            raise InvalidOrderError(f"Order {index} for {order.client.id} has no items")


def _load_prices(db: Session, orders: List[ParsedOrder]) -> dict:
    product_ids = {item.product_id for order in orders for item in order.items}
    if not product_ids:
        return {}
    products = db.query(Product).filter(Product.id.in_(product_ids)).all()
    return {p.id: p.unit_price for p in products}


def record_orders(
    db: Session,
    orders: List[ParsedOrder],
    source_message: Optional[str] = None,
    created_by: Optional[str] = None,
) -> DeliveryBatchResult:
    """
    Persist parsed orders as deliveries/returns.

    Args:
        db: Database session
        orders: Orders from the message parser
        source_message: Raw message the orders came from (kept for audit)
        created_by: Identifier of the sender, if known

    Returns:
        DeliveryBatchResult with one RecordedDelivery per order

    Raises:
        InvalidOrderError: If any order lacks a client or items
    """
    validate_orders(orders)
    result = DeliveryBatchResult()
    if not orders:
        return result

    prices = _load_prices(db, orders)
    pending = []

    for order in orders:
        is_return = order.type == OrderType.RETURN
        delivery = Delivery(
            delivery_ref=generate_delivery_ref(order.type),
            client_id=order.client.id,
            client_name=order.client.name,
            order_type=order.type.value,
            status=STATUS_RETURNED if is_return else STATUS_DELIVERED,
            source_message=source_message,
            created_by=created_by,
        )

        total = 0.0
        skipped = []
        for item in order.items:
            unit_price = prices.get(item.product_id)
            if unit_price is None:
                logger.warning(
                    "Unknown product %s for client %s; item skipped",
                    item.product_id, order.client.id,
                )
                skipped.append(item.product_id)
                continue
            line_total = round(unit_price * item.quantity, 3)
            total += line_total
            delivery.items.append(
                DeliveryItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    line_total=line_total,
                )
            )

        delivery.total_price = round(total, 3)
        db.add(delivery)
        pending.append((delivery, order, skipped))

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Failed to record %d order(s); rolled back", len(orders))
        raise

    for delivery, order, skipped in pending:
        db.refresh(delivery)
        result.deliveries.append(
            RecordedDelivery(
                delivery_id=delivery.id,
                delivery_ref=delivery.delivery_ref,
                client_id=delivery.client_id,
                client_name=delivery.client_name,
                order_type=order.type,
                total_price=delivery.total_price,
                item_count=len(delivery.items),
                skipped_products=skipped,
            )
        )
        logger.info(
            "Recorded %s %s for %s: %d items, total %.3f",
            order.type.value, delivery.delivery_ref, delivery.client_name,
            len(delivery.items), delivery.total_price,
        )

    return result


def format_delivery_message(result: DeliveryBatchResult) -> str:
    """
    Build the confirmation sent back to the driver, one block per order:

        Livraison LIV-20260115-1a2b3c4d créée pour Aziz
        Total: 12.500 TND
    """
    blocks = []
    for recorded in result.deliveries:
        label = "Retour" if recorded.order_type == OrderType.RETURN else "Livraison"
        blocks.append(
            f"{label} {recorded.delivery_ref} créée pour {recorded.client_name}\n"
            f"Total: {recorded.total_price:.3f} {config.CURRENCY}"
        )
    return "\n".join(blocks)
