"""
Tests for the bot webhook and admin endpoints, against the SQLite-backed app.
"""

USER = {"id": 7, "username": "vendedor1", "first_name": "Ana"}


def send_text(client, text, user=USER):
    return client.post("/bot/events", json={"user": user, "text": text})


def press(client, action, message_id=None, user=USER):
    return client.post("/bot/events", json={"user": user, "action": action, "message_id": message_id})


def button_actions(body):
    return [button["action"] for prompt in body["prompts"] for row in prompt["buttons"] for button in row]


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["catalog"]["products"] == 3
    assert body["catalog"]["in_stock"] == 2


def test_start_command(client):
    resp = send_text(client, "/start")

    assert resp.status_code == 200
    body = resp.json()
    assert "¡Hola Ana!" in body["prompts"][0]["text"]
    assert "nuevo_pedido" in button_actions(body)
    assert body["notice"] is None


def test_full_order_over_http(client):
    body = send_text(client, "granjas").json()
    assert "sel_cli:GRANJAS DEL SUR" in button_actions(body)

    body = press(client, "sel_cli:GRANJAS DEL SUR", message_id=99).json()
    assert body["notice"] == "✅ GRANJAS DEL SUR"
    assert body["prompts"][0]["edit_message_id"] == 99

    body = send_text(client, "10 bolsa 8x12 negra").json()
    assert "prod_ok:0:BOL812N" in button_actions(body)

    body = press(client, "prod_ok:0:BOL812N", message_id=100).json()
    assert "precio_normal:0" in button_actions(body)

    body = press(client, "precio_normal:0", message_id=101).json()
    assert "orden_confirmar" in button_actions(body)
    assert "prod_remove:0" in button_actions(body)

    body = press(client, "orden_confirmar", message_id=102).json()
    assert "orden_sin_nota" in button_actions(body)

    body = press(client, "orden_sin_nota", message_id=103).json()
    assert body["notice"] == "✅ Orden #1 creada"
    assert body["prompts"][0]["edit_message_id"] == 103

    resp = client.get("/admin/orders/1")
    assert resp.status_code == 200
    order = resp.json()
    assert order["client_name"] == "GRANJAS DEL SUR"
    assert order["status"] == "pendiente"
    assert order["total"] == 800.0
    assert order["chat_user_id"] == 7
    assert [i["code"] for i in order["items"]] == ["BOL812N"]

    counts = client.get("/admin/orders/status-counts").json()
    assert counts == {"counts": [{"status": "pendiente", "count": 1}], "total": 1}


def test_users_have_separate_sessions(client):
    send_text(client, "/pedido")
    other = {"id": 8, "first_name": "Luis"}

    body = press(client, "orden_confirmar", user=other).json()

    assert body["notice"] == "Sesión expirada"


def test_unknown_action(client):
    body = press(client, "no_existe:1").json()

    assert body["notice"] == "Acción no reconocida"
    assert body["prompts"] == []


def test_event_requires_exactly_one_payload(client):
    both = client.post("/bot/events", json={"user": USER, "text": "hola", "action": "cmd_ayuda"})
    neither = client.post("/bot/events", json={"user": USER})

    assert both.status_code == 422
    assert neither.status_code == 422


def test_event_text_too_long(client):
    resp = send_text(client, "x" * 4001)

    assert resp.status_code == 422  # Validation error


def test_event_requires_user(client):
    resp = client.post("/bot/events", json={"text": "hola"})

    assert resp.status_code == 422


def test_rate_limit_returns_429_when_exceeded(client, monkeypatch):
    """Test that rate limiting returns 429 when limit is exceeded."""
    import sales_bot.config as config_mod
    from sales_bot.routes import limiter

    # Set a very restrictive rate limit for testing via the callable
    monkeypatch.setattr(config_mod, "RATE_LIMIT_BOT", "2 per minute")

    limiter.enabled = True
    limiter.reset()

    try:
        assert send_text(client, "/ayuda").status_code == 200
        assert send_text(client, "/ayuda").status_code == 200

        # Third request from the same user should be rate limited
        assert send_text(client, "/ayuda").status_code == 429

        # Another user has their own budget
        assert send_text(client, "/ayuda", user={"id": 8}).status_code == 200
    finally:
        # Cleanup - disable rate limiting for other tests
        limiter.enabled = False
        limiter.reset()


def test_rate_limit_can_be_disabled(client, monkeypatch):
    import sales_bot.config as config_mod

    monkeypatch.setattr(config_mod, "RATE_LIMIT_BOT", "1 per minute")

    for _ in range(5):
        assert send_text(client, "/ayuda").status_code == 200


def test_admin_order_not_found(client):
    resp = client.get("/admin/orders/999")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Order not found"


def test_admin_status_counts_empty(client):
    assert client.get("/admin/orders/status-counts").json() == {"counts": [], "total": 0}


def test_admin_catalog_reload(client, session_factory):
    from sales_bot.models import Product

    db = session_factory()
    db.add(Product(code="VAS10", description="VASO DESECHABLE 10 OZ", stock=200, price=25.0))
    db.commit()
    db.close()

    body = client.post("/admin/catalog/reload").json()

    assert body["reloaded"] is True
    assert body["products"] == 4
    assert body["in_stock"] == 3
    assert body["last_refresh"] is not None
