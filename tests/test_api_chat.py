"""
Tests for the chat endpoints and app-level middleware.
"""
from juice_bot.config import MAX_MESSAGE_LENGTH
from juice_bot.directory_cache import directory_cache


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_directory_loaded_at_startup(client):
    assert directory_cache.is_loaded
    assert "aziz" in directory_cache.get_directory().client_abbreviations


# ---- /chat/parse ----


def test_parse_returns_orders(client):
    resp = client.post("/chat/parse", json={"message": "aziz\n3 4\nretour karim\n2 6"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 2

    first, second = data["orders"]
    assert first["client"]["id"] == "C00001"
    assert first["client"]["name"] == "Aziz Market"
    assert first["type"] == "delivery"
    assert first["items"] == [
        {"product_id": "C1L", "quantity": 3},
        {"product_id": "M1L", "quantity": 4},
    ]
    assert second["type"] == "return"
    assert second["items"][0] == {"product_id": "F5L", "quantity": 2}


def test_parse_does_not_record(client, admin_auth):
    client.post("/chat/parse", json={"message": "aziz\n1"})
    resp = client.get("/admin/deliveries", auth=admin_auth)
    assert resp.json()["total"] == 0


def test_parse_under_api_v1(client):
    resp = client.post("/api/v1/chat/parse", json={"message": "karim\n2 6"})
    assert resp.status_code == 200
    assert resp.json()["count"] == 1


def test_parse_empty_message(client):
    resp = client.post("/chat/parse", json={"message": ""})
    assert resp.status_code == 200
    assert resp.json() == {"orders": [], "count": 0}


def test_message_too_long_returns_422(client):
    resp = client.post("/chat/parse", json={"message": "1" * (MAX_MESSAGE_LENGTH + 1)})
    assert resp.status_code == 422


def test_missing_message_returns_422(client):
    resp = client.post("/chat/message", json={"user_id": "driver-1"})
    assert resp.status_code == 422


# ---- /chat/message ----


def test_message_records_deliveries(client):
    resp = client.post("/chat/message", json={"message": "aziz\n3 4\nkarim\n2 6", "user_id": "driver-1"})
    assert resp.status_code == 200
    data = resp.json()

    assert data["status"] == "success"
    assert len(data["orders"]) == 2
    assert len(data["deliveries"]) == 2

    aziz, karim = data["deliveries"]
    assert aziz["client_id"] == "C00001"
    assert aziz["order_type"] == "delivery"
    # 3 x 4.5 + 4 x 4.5
    assert aziz["total_price"] == 31.5
    assert aziz["item_count"] == 2
    assert karim["total_price"] == 160.0

    assert data["message"] == (
        f"Livraison {aziz['delivery_ref']} créée pour Aziz Market\n"
        "Total: 31.500 TND\n"
        f"Livraison {karim['delivery_ref']} créée pour Karim Superette\n"
        "Total: 160.000 TND"
    )


def test_message_without_orders_is_empty(client):
    resp = client.post("/chat/message", json={"message": "bonjour, rien aujourd'hui"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "empty"
    assert data["orders"] == []
    assert data["deliveries"] == []


def test_message_with_oversized_quantity(client):
    resp = client.post("/chat/message", json={"message": "aziz\n99999999999999999999 mj\n1 1"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "success"
    assert data["deliveries"][0]["item_count"] == 2
    assert data["deliveries"][0]["total_price"] == 9.0


def test_message_return(client):
    resp = client.post("/chat/message", json={"message": "retour aziz\n1"})
    data = resp.json()
    assert data["deliveries"][0]["order_type"] == "return"
    assert data["deliveries"][0]["delivery_ref"].startswith("RET-")
    assert data["message"].startswith("Retour ")


def test_message_503_when_directory_not_loaded(client):
    directory_cache.clear()
    resp = client.post("/chat/message", json={"message": "aziz\n1"})
    assert resp.status_code == 503
    resp = client.post("/chat/parse", json={"message": "aziz\n1"})
    assert resp.status_code == 503


# ---- legacy webhook ----


def test_legacy_chat(client, admin_auth):
    resp = client.post("/api/chat", json={"message": "aziz\n1", "userId": "whatsapp:+216"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data.startswith("Livraison LIV-")
    assert data.endswith("Total: 4.500 TND")

    listing = client.get("/admin/deliveries", auth=admin_auth).json()
    assert listing["items"][0]["created_by"] == "whatsapp:+216"


def test_legacy_chat_no_order(client):
    resp = client.post("/api/chat", json={"message": "merci"})
    assert resp.status_code == 200
    assert resp.json() == {"data": "Aucune commande reconnue dans le message."}


# ---- middleware ----


def test_request_id_generated(client):
    resp = client.get("/health")
    assert resp.headers.get("X-Request-ID")


def test_request_id_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"


# ---- rate limiting ----


def test_rate_limit_returns_429_when_exceeded(client, monkeypatch):
    import juice_bot.config as config_mod
    from juice_bot.routes.chat import limiter

    monkeypatch.setattr(config_mod, "RATE_LIMIT_CHAT", "2 per minute")
    limiter.enabled = True
    limiter.reset()

    try:
        assert client.post("/chat/parse", json={"message": "aziz\n1"}).status_code == 200
        assert client.post("/chat/parse", json={"message": "aziz\n1"}).status_code == 200
        assert client.post("/chat/parse", json={"message": "aziz\n1"}).status_code == 429
    finally:
        limiter.enabled = False
        limiter.reset()


def test_rate_limit_can_be_disabled(client, monkeypatch):
    import juice_bot.config as config_mod
    from juice_bot.routes.chat import limiter

    limiter.enabled = False
    monkeypatch.setattr(config_mod, "RATE_LIMIT_CHAT", "1 per minute")

    for _ in range(5):
        assert client.post("/chat/parse", json={"message": "aziz\n1"}).status_code == 200
