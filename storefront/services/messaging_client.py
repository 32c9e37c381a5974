# storefront/services/messaging_client.py
import requests

from storefront.utils.retry import http_retry
from storefront.utils.settings import (
    TWILIO_ACCOUNT_SID,
    TWILIO_AUTH_TOKEN,
    TWILIO_WHATSAPP_NUMBER,
    TWILIO_API_URL,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class MessagingClient:
    """Outbound WhatsApp messages through the Twilio REST API."""

    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
        base_url: str | None = None,
        timeout: int = 5,
    ):
        self.account_sid = account_sid or TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or TWILIO_AUTH_TOKEN
        self.from_number = from_number or TWILIO_WHATSAPP_NUMBER
        self.base_url = (base_url or TWILIO_API_URL).rstrip("/")
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token)

    @http_retry()
    def send(self, to: str, body: str) -> dict:
        url = f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"
        logger.info(f"MessagingClient POST {url} to {to}")

        resp = requests.post(
            url,
            data={"From": f"whatsapp:{self.from_number}", "To": to, "Body": body},
            auth=(self.account_sid, self.auth_token),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()
