# storefront/services/order_messages.py
import re
from datetime import datetime


def _short_id(order_id) -> str:
    return str(order_id)[-8:]


def _items_list(items: list[dict]) -> str:
    return "\n".join(
        f"{i}. {item['product_name']} - Qty: {item['quantity']} - {item['price']}"
        for i, item in enumerate(items, start=1)
    )


def _order_time(created_at) -> str:
    if isinstance(created_at, str):
        try:
            created_at = datetime.fromisoformat(created_at)
        except ValueError:
            return created_at
    return created_at.strftime("%d/%m/%Y, %H:%M:%S") if created_at else "N/A"


def compose_admin_summary(order: dict) -> str:
    return "\n".join(
        [
            "*New Order Received!*",
            "",
            "*Order Details:*",
            f"Order ID: #{_short_id(order['order_id'])}",
            "",
            "*Customer:*",
            f"Name: {order.get('customer_name') or 'N/A'}",
            f"Phone: {order.get('customer_phone') or 'N/A'}",
            f"Email: {order.get('customer_email') or 'N/A'}",
            "",
            "*Items:*",
            _items_list(order["items"]),
            "",
            f"*Total Amount:* {order['total']}",
            "",
            "*Delivery Address:*",
            order.get("shipping_address") or "N/A",
            "",
            f"Order Time: {_order_time(order.get('created_at'))}",
            "",
            "View order details in admin panel.",
        ]
    )


def compose_customer_confirmation(order: dict) -> str:
    return "\n".join(
        [
            "*Order Confirmed!*",
            "",
            f"Dear {order.get('customer_name') or 'Customer'},",
            "",
            "Thank you for your order!",
            "",
            f"*Order ID:* #{_short_id(order['order_id'])}",
            "",
            "*Items:*",
            _items_list(order["items"]),
            "",
            f"*Total:* {order['total']}",
            "",
            "*Delivery Address:*",
            order.get("shipping_address") or "N/A",
            "",
            "We will contact you shortly to confirm your order.",
            "",
            "Thank you for shopping with us!",
        ]
    )


def customer_whatsapp_address(phone: str | None, country_code: str) -> str | None:
    """Last 10 digits with the country code, None for a missing or short number."""
    digits = re.sub(r"\D", "", phone or "")
    if len(digits) < 10:
        return None
    return f"whatsapp:{country_code}{digits[-10:]}"
