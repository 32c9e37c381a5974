from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.data.models import OrderItemModel, OrderModel
from storefront.services.admin_service import AdminService


@pytest.fixture()
def add_order(db):
    def _add(total, status="completed", age=timedelta(0), cost="0"):
        order = OrderModel(
            user_id=7,
            status=status,
            total=Decimal(total),
            created_at=datetime.now(timezone.utc) - age,
        )
        order.items = [
            OrderItemModel(product_name="Brake Pads", quantity=1, price=Decimal(total), cost_price=Decimal(cost))
        ]
        db.add(order)
        db.commit()
        return order

    return _add


def _day(age):
    return (datetime.now(timezone.utc) - age).date().isoformat()


class TestRevenueChart:
    def test_groups_completed_orders_per_day(self, db, add_order):
        add_order("200.00")
        add_order("50.25")
        add_order("100.00", age=timedelta(days=1))

        chart = AdminService(db).revenue_chart(days=7)

        assert chart == [
            {"date": _day(timedelta(days=1)), "revenue": Decimal("100.00")},
            {"date": _day(timedelta(0)), "revenue": Decimal("250.25")},
        ]

    def test_ignores_other_statuses_and_old_orders(self, db, add_order):
        add_order("70.00", status="pending")
        add_order("30.00", status="cancelled")
        add_order("999.00", age=timedelta(days=30))

        assert AdminService(db).revenue_chart(days=7) == []
        assert AdminService(db).revenue_chart(days=31)[0]["revenue"] == Decimal("999.00")


class TestStats:
    def test_profit_uses_line_snapshot_of_completed_orders(self, db, add_order):
        add_order("200.00", cost="120.00")
        add_order("80.00", status="pending", cost="10.00")

        stats = AdminService(db).get_stats()

        assert stats["total_orders"] == 2
        assert stats["total_revenue"] == Decimal("200.00")
        assert stats["total_cost"] == Decimal("120.00")
        assert stats["total_profit"] == Decimal("80.00")
        assert stats["profit_margin"] == Decimal("40.00")

    def test_empty_store(self, db):
        stats = AdminService(db).get_stats()

        assert stats["total_revenue"] == Decimal("0.00")
        assert stats["profit_margin"] == Decimal("0.00")
        assert stats["low_stock_products"] == []
