"""
Tests for order announcements and the order assembler.
"""
import asyncio
import logging

import requests

from sales_bot.services.notifications import WebhookOrderNotifier
from sales_bot.tasks import ChatUser, ConfirmedItem, OrderAssembler, OrderSession, SessionStep
from sales_bot.tasks.order_assembler import build_order_record

from conftest import FakeNotifier, FakeOrders


class FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeHttp:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json, timeout))
        if self.error:
            raise self.error
        return self.response


ORDER = {"id": 7, "client_name": "GRANJAS DEL SUR", "total": 945.0}


class TestWebhookOrderNotifier:

    def test_mock_mode_without_url(self, caplog):
        notifier = WebhookOrderNotifier(url="", http=FakeHttp())

        with caplog.at_level(logging.INFO, logger="sales_bot.services.notifications"):
            result = notifier.order_created(ORDER)

        assert result == {"status": "sent", "order_id": 7, "mock": True}
        assert notifier.http.calls == []
        assert any("MOCK NOTIFY" in r.message for r in caplog.records)

    def test_posts_order_to_webhook(self):
        http = FakeHttp()
        notifier = WebhookOrderNotifier(url="https://example.test/hook", timeout=2, http=http)

        result = notifier.order_created(ORDER)

        assert result["status"] == "sent"
        assert result["mock"] is False
        assert http.calls == [
            ("https://example.test/hook", {"event": "order_created", "order": ORDER}, 2),
        ]

    def test_webhook_failure_is_reported_not_raised(self):
        http = FakeHttp(error=requests.ConnectionError("refused"))
        notifier = WebhookOrderNotifier(url="https://example.test/hook", http=http)

        result = notifier.order_created(ORDER)

        assert result["status"] == "error"
        assert "refused" in result["error"]

    def test_http_error_status(self):
        http = FakeHttp(response=FakeResponse(500))
        notifier = WebhookOrderNotifier(url="https://example.test/hook", http=http)

        assert notifier.order_created(ORDER)["status"] == "error"

    def test_listeners_called_and_isolated(self):
        notifier = WebhookOrderNotifier(url="")
        received = []

        def broken(order):
            raise RuntimeError("listener bug")

        notifier.subscribe(broken)
        notifier.subscribe(received.append)

        notifier.order_created(ORDER)

        assert received == [ORDER]


def finished_session():
    return OrderSession(
        step=SessionStep.WAITING_NOTE,
        client="ABARROTES LUPITA",
        raw_input_log="4 vaso\n2 camiseta",
        confirmed_items=[
            ConfirmedItem(code="VAS10", description="VASO DESECHABLE 10 OZ", quantity=4, price=25.0, stock=200),
            ConfirmedItem(code="CAMT40B", description="CAMISETA T-40 BLANCA", quantity=2, price=40.0,
                          original_price=45.0, stock=3),
        ],
    )


USER = ChatUser(id=9, username="vendedor2", first_name="Luis")


class TestOrderAssembler:

    def test_build_order_record(self):
        record = build_order_record(finished_session(), "urgente", USER)

        assert record["total"] == 180.0
        assert record["subtotal"] == 180.0
        assert record["products_text"] == "4 VASO DESECHABLE 10 OZ\n2 CAMISETA T-40 BLANCA"
        assert record["chat_display_name"] == "Luis"
        assert record["raw_input"] == "4 vaso\n2 camiseta"
        assert '"original_price": 45.0' in record["products_json"]

    def test_finalize_persists_and_notifies(self):
        orders, notifier = FakeOrders(), FakeNotifier()

        order_id = asyncio.run(OrderAssembler(orders, notifier).finalize(finished_session(), "  urgente ", USER))

        assert order_id == 1
        assert orders.records[0]["notes"] == "urgente"
        assert notifier.orders[0]["id"] == 1

    def test_notifier_failure_does_not_undo_order(self):
        class BrokenNotifier:
            def order_created(self, order):
                raise RuntimeError("boom")

        orders = FakeOrders()

        assert asyncio.run(OrderAssembler(orders, BrokenNotifier()).finalize(finished_session(), "", USER)) == 1
        assert len(orders.records) == 1
