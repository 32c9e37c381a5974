# storefront/tasks/messages.py
import requests

from storefront.celery_worker import celery_app
from storefront.services.messaging_client import MessagingClient
from storefront.services.order_messages import (
    compose_admin_summary,
    compose_customer_confirmation,
    customer_whatsapp_address,
)
from storefront.utils.settings import ADMIN_WHATSAPP_NUMBER, WHATSAPP_COUNTRY_CODE
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="storefront.tasks.messages.send_order_messages_task")
def send_order_messages_task(order: dict, client: MessagingClient | None = None):
    """
    Admin summary + customer confirmation for a placed order.
    Best effort: the order is already committed, errors are only logged.
    """
    client = client or MessagingClient()

    if not client.is_configured:
        logger.info(f"WhatsApp notifications disabled, skipping order {order.get('order_id')}")
        return {"order_id": order.get("order_id"), "status": "skipped", "sent": []}

    sent = []
    try:
        if ADMIN_WHATSAPP_NUMBER:
            client.send(f"whatsapp:{ADMIN_WHATSAPP_NUMBER}", compose_admin_summary(order))
            sent.append("admin")
            logger.info(f"WhatsApp order summary sent to admin for order {order['order_id']}")

        customer = customer_whatsapp_address(order.get("customer_phone"), WHATSAPP_COUNTRY_CODE)
        if customer:
            client.send(customer, compose_customer_confirmation(order))
            sent.append("customer")
            logger.info(f"WhatsApp confirmation sent to customer for order {order['order_id']}")

    except requests.RequestException as e:
        logger.error(f"WhatsApp notification failed for order {order.get('order_id')}: {e}")
        return {"order_id": order.get("order_id"), "status": "failed", "sent": sent, "error": str(e)}

    return {"order_id": order.get("order_id"), "status": "sent", "sent": sent}
