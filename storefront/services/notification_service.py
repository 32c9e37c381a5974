# storefront/services/notification_service.py
from typing import Callable, Optional

from fastapi.encoders import jsonable_encoder

from storefront.services.broadcast import Broadcaster
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# schedule(fn, *args): runs fn later, off the caller's path (BackgroundTasks.add_task)
Schedule = Callable[..., None]


def enqueue_order_messages(order_event: dict) -> None:
    """Hands the outbound messages to celery, nobody waits for the result."""
    from storefront.tasks.messages import send_order_messages_task

    send_order_messages_task.delay(order_event)


class EventNotifier:
    """
    Side effects of a committed order.

    Publications are handed to `schedule` and never run on the caller's
    path. Nothing here may fail the caller: every publication is logged and
    swallowed on error.
    """

    def __init__(
        self,
        broadcaster: Broadcaster,
        schedule: Schedule,
        dispatch_messages: Callable[[dict], None] = enqueue_order_messages,
    ):
        self.broadcaster = broadcaster
        self.schedule = schedule
        self.dispatch_messages = dispatch_messages

    def order_placed(self, order: dict, customer: dict, stock_levels: dict[int, int]) -> dict:
        event = self._new_order_event(order, customer)

        # one batch, so listeners see the stock updates before the order
        events = [
            ("stock_update", {"product_id": product_id, "stock": stock})
            for product_id, stock in stock_levels.items()
        ]
        events.append(("new_order", event))

        self.schedule(self._deliver, events, jsonable_encoder(event))
        return event

    def order_status_changed(self, order: dict) -> None:
        payload = {"order_id": order["id"], "user_id": order["user_id"], "status": order["status"]}
        self.schedule(self._deliver, [("order_status", payload)])

    def stock_changed(self, product_id: int, stock: int) -> None:
        self.schedule(self._deliver, [("stock_update", {"product_id": product_id, "stock": stock})])

    def _deliver(self, events: list[tuple[str, dict]], order_event: Optional[dict] = None) -> None:
        for event, payload in events:
            self._publish(event, payload)

        if order_event is None:
            return
        try:
            self.dispatch_messages(order_event)
        except Exception as e:
            logger.error(f"Could not enqueue WhatsApp messages for order {order_event.get('order_id')}: {e}")

    def _publish(self, event: str, payload: dict) -> None:
        try:
            self.broadcaster.publish(event, payload)
        except Exception as e:
            logger.warning(f"Broadcast of {event} failed: {e}")

    @staticmethod
    def _new_order_event(order: dict, customer: dict) -> dict:
        items = order["items"]
        return {
            "order_id": order["id"],
            "customer_name": customer.get("name"),
            "customer_email": customer.get("email"),
            "customer_phone": customer.get("phone") or "N/A",
            "total": order["total"],
            "item_count": len(items),
            "total_quantity": sum(i["quantity"] for i in items),
            "items": [
                {"product_name": i["product_name"], "quantity": i["quantity"], "price": i["price"]}
                for i in items
            ],
            "shipping_address": order["shipping_address"],
            "created_at": order["created_at"],
            "message": f"New order from {customer.get('name')} - {order['total']}",
        }
