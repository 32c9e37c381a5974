from datetime import datetime, timezone
from decimal import Decimal
import json

from storefront.services.broadcast import encode_event
from storefront.services.notification_service import EventNotifier


def _order(**overrides):
    order = {
        "id": 42,
        "user_id": 7,
        "status": "pending",
        "total": Decimal("250.00"),
        "shipping_address": "12 MG Road, Pune, 411001",
        "shipping_info": {},
        "created_at": datetime(2026, 1, 5, 10, 30, tzinfo=timezone.utc),
        "items": [
            {"id": 1, "product_id": 3, "product_name": "Brake Pads", "quantity": 2, "price": Decimal("100.00"), "cost_price": Decimal("60")},
            {"id": 2, "product_id": 4, "product_name": "Fuse", "quantity": 1, "price": Decimal("50.00"), "cost_price": Decimal("20")},
        ],
    }
    order.update(overrides)
    return order


CUSTOMER = {"name": "Ravi", "email": "ravi@example.com", "phone": None}


class TestOrderPlaced:
    def test_stock_updates_then_new_order(self, notifier, broadcaster):
        notifier.order_placed(_order(), CUSTOMER, {3: 8, 4: 0})

        assert [name for name, _ in broadcaster.events] == ["stock_update", "stock_update", "new_order"]
        assert broadcaster.named("stock_update") == [
            {"product_id": 3, "stock": 8},
            {"product_id": 4, "stock": 0},
        ]

    def test_new_order_payload(self, notifier, broadcaster):
        event = notifier.order_placed(_order(), CUSTOMER, {})

        assert broadcaster.named("new_order") == [event]
        assert event["order_id"] == 42
        assert event["customer_phone"] == "N/A"
        assert event["item_count"] == 2
        assert event["total_quantity"] == 3
        assert event["shipping_address"] == "12 MG Road, Pune, 411001"
        assert event["message"] == "New order from Ravi - 250.00"

    def test_dispatched_event_is_json_ready(self, notifier, dispatcher):
        notifier.order_placed(_order(), CUSTOMER, {})

        sent = dispatcher.calls[0]
        json.dumps(sent)
        assert sent["order_id"] == 42
        assert sent["items"][0]["product_name"] == "Brake Pads"

    def test_broadcast_failure_is_swallowed(self, notifier, broadcaster, dispatcher):
        broadcaster.should_fail = True

        notifier.order_placed(_order(), CUSTOMER, {3: 8})

        assert len(dispatcher.calls) == 1

    def test_dispatch_failure_is_swallowed(self, notifier, broadcaster, dispatcher):
        dispatcher.should_fail = True

        notifier.order_placed(_order(), CUSTOMER, {})

        assert broadcaster.named("new_order")


class TestOtherEvents:
    def test_status_change(self, notifier, broadcaster):
        notifier.order_status_changed(_order(status="completed"))

        assert broadcaster.events == [
            ("order_status", {"order_id": 42, "user_id": 7, "status": "completed"})
        ]

    def test_stock_changed(self, notifier, broadcaster):
        notifier.stock_changed(5, 17)
        assert broadcaster.events == [("stock_update", {"product_id": 5, "stock": 17})]

    def test_default_dispatcher_is_celery(self, broadcaster):
        from storefront.services.notification_service import enqueue_order_messages

        assert EventNotifier(broadcaster, lambda fn, *args: None).dispatch_messages is enqueue_order_messages


class TestScheduling:
    def test_nothing_is_published_before_the_scheduled_run(self, broadcaster, dispatcher):
        scheduled = []
        notifier = EventNotifier(broadcaster, lambda fn, *args: scheduled.append((fn, args)), dispatcher)

        event = notifier.order_placed(_order(), CUSTOMER, {3: 8})

        assert event["order_id"] == 42
        assert broadcaster.events == []
        assert dispatcher.calls == []

        for fn, args in scheduled:
            fn(*args)

        assert [name for name, _ in broadcaster.events] == ["stock_update", "new_order"]
        assert dispatcher.calls[0]["order_id"] == 42

    def test_status_and_stock_events_are_scheduled(self, broadcaster):
        scheduled = []
        notifier = EventNotifier(broadcaster, lambda fn, *args: scheduled.append((fn, args)))

        notifier.order_status_changed(_order(status="cancelled"))
        notifier.stock_changed(3, 1)

        assert broadcaster.events == []
        assert len(scheduled) == 2


def test_encode_event_handles_decimals_and_dates():
    raw = encode_event("new_order", {"total": Decimal("10.50"), "created_at": datetime(2026, 1, 5, tzinfo=timezone.utc)})

    data = json.loads(raw)
    assert data["event"] == "new_order"
    assert data["payload"]["total"] == 10.5
    assert data["payload"]["created_at"].startswith("2026-01-05")
