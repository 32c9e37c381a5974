# storefront/services/admin_service.py
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.utils.settings import LOW_STOCK_THRESHOLD

CENT = Decimal("0.01")


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class AdminService:
    """
    Dashboard figures.

    Revenue and cost only count completed orders and only use the values
    frozen on the line items (price, cost_price), never the live product.
    """

    def __init__(self, db: Session):
        self.orders = OrderRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)

    def get_stats(self, low_stock_threshold: int = LOW_STOCK_THRESHOLD) -> Dict[str, Any]:
        total_users = self.users.count_users()
        active_users = self.orders.count_customers()
        by_status = self.orders.count_by_status()

        revenue = Decimal("0")
        cost = Decimal("0")
        for item in self.orders.items_for_status("completed"):
            revenue += Decimal(str(item.price)) * item.quantity
            cost += Decimal(str(item.cost_price or 0)) * item.quantity

        profit = revenue - cost
        margin = (profit / revenue * 100) if revenue > 0 else Decimal("0")

        low_stock = self.products.low_stock(low_stock_threshold)

        return {
            "total_users": total_users,
            "active_users": active_users,
            "inactive_users": max(total_users - active_users, 0),
            "total_orders": sum(by_status.values()),
            "pending_orders": by_status.get("pending", 0),
            "completed_orders": by_status.get("completed", 0),
            "cancelled_orders": by_status.get("cancelled", 0),
            "total_revenue": _round(revenue),
            "total_cost": _round(cost),
            "total_profit": _round(profit),
            "profit_margin": _round(margin),
            "low_stock_products": [
                {"id": p.id, "name": p.name, "category": p.category, "stock": p.stock}
                for p in low_stock
            ],
            "low_stock_count": len(low_stock),
        }

    def revenue_chart(self, days: int = 7) -> List[Dict[str, Any]]:
        """Revenue of completed orders per day, oldest first, days without sales left out."""
        since = datetime.now(timezone.utc) - timedelta(days=days)

        by_day = defaultdict(lambda: Decimal("0"))
        for order in self.orders.orders_since("completed", since):
            by_day[order.created_at.date().isoformat()] += Decimal(str(order.total))

        return [{"date": day, "revenue": _round(by_day[day])} for day in sorted(by_day)]
