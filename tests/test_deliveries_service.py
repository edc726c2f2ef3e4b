"""
Tests for recording parsed orders as deliveries.
"""
import re

import pytest

from juice_bot.models import Delivery, DeliveryItem
from juice_bot.parsing import Client, LineItem, OrderType, ParsedOrder
from juice_bot.services.deliveries import (
    DeliveryBatchResult,
    InvalidOrderError,
    format_delivery_message,
    generate_delivery_ref,
    record_orders,
    validate_orders,
)

AZIZ = Client(id="C00001", name="Aziz Market", default_format="1")
KARIM = Client(id="C00002", name="Karim Superette", default_format="5")


def _order(client, items, order_type=OrderType.DELIVERY):
    return ParsedOrder(
        client=client,
        items=[LineItem(product_id=p, quantity=q) for p, q in items],
        type=order_type,
    )


def test_generate_delivery_ref():
    assert re.fullmatch(r"LIV-\d{8}-[0-9a-f]{8}", generate_delivery_ref(OrderType.DELIVERY))
    assert re.fullmatch(r"RET-\d{8}-[0-9a-f]{8}", generate_delivery_ref(OrderType.RETURN))


def test_validate_orders_rejects_missing_client_or_items():
    no_client = ParsedOrder.model_construct(client=None, items=[LineItem(product_id="C1L", quantity=1)])
    no_items = ParsedOrder.model_construct(client=AZIZ, items=[], type=OrderType.DELIVERY)

    with pytest.raises(InvalidOrderError):
        validate_orders([no_client])
    with pytest.raises(InvalidOrderError):
        validate_orders([no_items])
    validate_orders([_order(AZIZ, [("C1L", 1)])])


def test_invalid_order_error_is_a_value_error():
    assert issubclass(InvalidOrderError, ValueError)


def test_record_orders_prices_each_order(db_session):
    orders = [
        _order(AZIZ, [("C1L", 3), ("M1LS", 2)]),
        _order(KARIM, [("F5L", 1)]),
    ]
    result = record_orders(db_session, orders, source_message="aziz\n3 0\nkarim\n1")

    assert result.count == 2
    aziz, karim = result.deliveries
    # 3 x 4.5 + 2 x 4.8
    assert aziz.total_price == pytest.approx(23.1)
    assert karim.total_price == pytest.approx(20.0)
    assert result.total_price == pytest.approx(43.1)
    assert aziz.delivery_ref.startswith("LIV-")

    stored = db_session.query(Delivery).order_by(Delivery.id).all()
    assert [d.client_id for d in stored] == ["C00001", "C00002"]
    assert stored[0].status == "delivered"
    assert stored[0].source_message == "aziz\n3 0\nkarim\n1"
    assert {(i.product_id, i.quantity, i.line_total) for i in stored[0].items} == {
        ("C1L", 3, 13.5),
        ("M1LS", 2, 9.6),
    }


def test_record_return(db_session):
    result = record_orders(db_session, [_order(AZIZ, [("C1L", 1)], OrderType.RETURN)], created_by="driver-7")

    recorded = result.deliveries[0]
    assert recorded.order_type == OrderType.RETURN
    assert recorded.delivery_ref.startswith("RET-")

    delivery = db_session.get(Delivery, recorded.delivery_id)
    assert delivery.status == "returned"
    assert delivery.order_type == "return"
    assert delivery.created_by == "driver-7"


def test_unknown_products_are_skipped(db_session, caplog):
    result = record_orders(db_session, [_order(AZIZ, [("ZZ1L", 4), ("C1L", 1)])])

    recorded = result.deliveries[0]
    assert recorded.skipped_products == ["ZZ1L"]
    assert recorded.item_count == 1
    assert recorded.total_price == pytest.approx(4.5)
    assert "ZZ1L" in caplog.text


def test_order_with_only_unknown_products_is_still_recorded(db_session):
    result = record_orders(db_session, [_order(AZIZ, [("ZZ1L", 4)])])

    assert result.deliveries[0].total_price == 0.0
    assert db_session.query(Delivery).count() == 1
    assert db_session.query(DeliveryItem).count() == 0


def test_record_nothing(db_session):
    assert record_orders(db_session, []).count == 0
    assert db_session.query(Delivery).count() == 0


def test_format_delivery_message(db_session):
    result = record_orders(db_session, [
        _order(AZIZ, [("C1L", 3)]),
        _order(KARIM, [("F5L", 1)], OrderType.RETURN),
    ])
    aziz, karim = result.deliveries

    assert format_delivery_message(result) == (
        f"Livraison {aziz.delivery_ref} créée pour Aziz Market\n"
        "Total: 13.500 TND\n"
        f"Retour {karim.delivery_ref} créée pour Karim Superette\n"
        "Total: 20.000 TND"
    )


def test_format_delivery_message_uses_configured_currency(monkeypatch, db_session):
    import juice_bot.config as config_mod

    monkeypatch.setattr(config_mod, "CURRENCY", "EUR")
    result = record_orders(db_session, [_order(AZIZ, [("C1L", 1)])])
    assert format_delivery_message(result).endswith("Total: 4.500 EUR")


def test_format_empty_batch():
    assert format_delivery_message(DeliveryBatchResult()) == ""
