"""
Order notification service.

Announces every committed order. Subscribed in-process listeners (for
example a dashboard feed) are called first; then, when ORDER_WEBHOOK_URL is
configured, the order is POSTed there as JSON. Without a webhook the
notifier runs in mock mode and only logs.

A failed announcement never affects the order itself: errors are logged and
reported in the returned result dict.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from ..config import ORDER_WEBHOOK_URL, WEBHOOK_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

OrderListener = Callable[[Dict[str, Any]], None]


class WebhookOrderNotifier:
    """OrderNotifier that fans out to listeners and an optional webhook."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: float = WEBHOOK_TIMEOUT_SECONDS,
        http: Any = requests,
    ):
        """
        Args:
            url: Webhook receiving the order JSON; defaults to ORDER_WEBHOOK_URL.
            timeout: HTTP timeout in seconds.
            http: Object with a requests-compatible post(); injected in tests.
        """
        self.url = ORDER_WEBHOOK_URL if url is None else url
        self.timeout = timeout
        self.http = http
        self._listeners: List[OrderListener] = []

    def is_webhook_configured(self) -> bool:
        return bool(self.url)

    def subscribe(self, listener: OrderListener) -> None:
        self._listeners.append(listener)

    def order_created(self, order: Dict[str, Any]) -> Dict[str, Any]:
        order_id = order.get("id")

        for listener in list(self._listeners):
            try:
                listener(order)
            except Exception as e:
                logger.warning("Order listener failed for order #%s: %s", order_id, e)

        if not self.is_webhook_configured():
            # Mock mode - just log the order
            logger.info("MOCK NOTIFY: order #%s created (total %s)", order_id, order.get("total"))
            return {"status": "sent", "order_id": order_id, "mock": True}

        try:
            response = self.http.post(
                self.url,
                json={"event": "order_created", "order": order},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Order webhook failed for order #%s: %s", order_id, e)
            return {"status": "error", "order_id": order_id, "mock": False, "error": str(e)}

        logger.info("Order #%s announced to webhook", order_id)
        return {"status": "sent", "order_id": order_id, "mock": False}
