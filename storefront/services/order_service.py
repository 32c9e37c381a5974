# storefront/services/order_service.py
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel, ORDER_STATUSES
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import (
    EmptyCartError,
    ForbiddenError,
    InvalidProductError,
    InvalidStatusError,
    NotFoundError,
    StorageFailureError,
)
from storefront.domain.schemas import Principal, ShippingInfo
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.inventory_service import InventoryLedger
from storefront.services.notification_service import EventNotifier
from storefront.services.pricing import snapshot_product
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def shipping_address_line(shipping: ShippingInfo | None) -> str:
    if not shipping:
        return "N/A"
    return f"{shipping.address}, {shipping.city}, {shipping.pincode}"


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "total": order.total,
        "shipping_address": order.shipping_address,
        "shipping_info": dict(order.shipping_info or {}),
        "created_at": order.created_at,
        "items": [
            {
                "id": i.id,
                "product_id": i.product_id,
                "product_name": i.product_name,
                "quantity": i.quantity,
                "price": i.price,
                "cost_price": i.cost_price,
            }
            for i in order.items
        ],
    }


class OrderService:
    """
    Order placement and order queries.

    place_order is the only use case that writes to products, carts and
    orders in one transaction.
    """

    def __init__(self, db: Session, notifier: EventNotifier):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.product_repo = ProductRepo(db)
        self.user_repo = UserRepo(db)
        self.ledger = InventoryLedger(db)
        self.notifier = notifier

    # commands
    def place_order(self, user_id: int, shipping_info: ShippingInfo | None = None) -> Dict[str, Any]:
        """
        Use case: turn the user's cart into an order.

        1. load cart (EmptyCartError)
        2. lock and re-resolve every product (InvalidProductError)
        3. check stock for every line before touching anything (InsufficientStockError)
        4. per line: price snapshot, stock reservation, line total
        5. order + line items
        6. delete cart
        7. commit, otherwise roll back everything including stock
        """
        logger.info(f"Placing order for user {user_id}")

        try:
            order, stock_levels, customer = self._place_order_tx(user_id, shipping_info)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Order creation failed for user {user_id}: {e}")
            raise StorageFailureError() from e
        except Exception as e:
            self.db.rollback()
            logger.info(f"Order for user {user_id} rejected: {e}")
            raise

        result = order_to_dict(order)
        logger.info(f"Order {order.id} created for user {user_id}, total {order.total}")

        # after commit only, notification problems never reach the caller
        self.notifier.order_placed(result, customer, stock_levels)

        return result

    def _place_order_tx(self, user_id: int, shipping_info: ShippingInfo | None):
        cart = self.cart_repo.get_cart_by_user(user_id)
        items = self.cart_repo.get_cart_items(cart.id) if cart else []

        if not items:
            raise EmptyCartError()

        products = self.product_repo.lock_products(i.product_id for i in items)

        for item in items:
            if item.product_id not in products:
                raise InvalidProductError(item.product_id)

        for item in items:
            self.ledger.check_available(products[item.product_id], item.quantity)

        total = Decimal("0.00")
        lines = []
        stock_levels = {}
        for item in items:
            product = products[item.product_id]
            snapshot = snapshot_product(product)
            stock_levels[product.id] = self.ledger.reserve(product.id, item.quantity)
            total += snapshot.line_total(item.quantity)
            lines.append((product.id, item.quantity, snapshot))

        order = OrderModel(
            user_id=user_id,
            status="pending",
            total=total,
            shipping_address=shipping_address_line(shipping_info),
            shipping_info=shipping_info.model_dump() if shipping_info else {},
        )
        order.items = [
            OrderItemModel(
                product_id=product_id,
                quantity=quantity,
                price=snapshot.sell_price,
                cost_price=snapshot.cost_price,
                product_name=snapshot.name,
            )
            for product_id, quantity, snapshot in lines
        ]
        self.repo.add_order(order)

        self.cart_repo.delete_cart(cart)
        logger.info(f"Cart of user {user_id} cleared")

        return order, stock_levels, self._customer(user_id, shipping_info)

    def set_status(self, order_id: int, status: str, principal: Principal) -> Dict[str, Any]:
        """
        Use case: change order status (owner or admin).
        Cancelling does not return stock to inventory.
        """
        if status not in ORDER_STATUSES:
            raise InvalidStatusError(status, ORDER_STATUSES)

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")

        if not principal.is_admin and order.user_id != principal.user_id:
            raise ForbiddenError("Not authorized to update this order")

        try:
            self.repo.update_order_status(order, status)
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Status update of order {order_id} failed: {e}")
            raise StorageFailureError("Order status update failed") from e

        logger.info(f"Order {order_id} status set to {status} by user {principal.user_id}")

        result = order_to_dict(order)
        self.notifier.order_status_changed(result)
        return result

    # queries
    def list_orders(self, principal: Principal) -> List[Dict[str, Any]]:
        """Admins see every order, users only their own."""
        user_id = None if principal.is_admin else principal.user_id
        return [order_to_dict(o) for o in self.repo.list_orders(user_id=user_id)]

    def recent_orders(self, limit: int = 5) -> List[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_orders(limit=limit)]

    def get_order(self, order_id: int, principal: Principal) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFoundError("Order not found")

        if not principal.is_admin and order.user_id != principal.user_id:
            raise ForbiddenError("Not authorized to view this order")

        return order_to_dict(order)

    def _customer(self, user_id: int, shipping_info: ShippingInfo | None) -> dict:
        # shipping contact first, profile as fallback
        user = self.user_repo.get_user(user_id)
        customer = {
            "name": user.name if user else None,
            "email": user.email if user else None,
            "phone": user.phone if user else None,
        }
        if shipping_info:
            for key in customer:
                customer[key] = getattr(shipping_info, key) or customer[key]
        return customer
