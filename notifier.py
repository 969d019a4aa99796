"""
Forward new orders to the shop admin over the WhatsApp Cloud API
"""

from typing import Optional

import requests
import structlog

from config import Settings
from errors import UpstreamError
from schemas import Order

logger = structlog.get_logger()


def format_order_text(order: Order) -> str:
    return (
        f"New order:\n{order.productTitle} - {order.price or ''}\n"
        f"Size: {order.size or ''}\n"
        f"From: {order.customerPhone or 'web buyer'}"
    )


class WhatsAppNotifier:
    """Sends a text summary and, when the order has one, its image by link."""

    def __init__(
        self,
        phone_number_id: str,
        access_token: str,
        recipient: str,
        api_base: str = "https://graph.facebook.com",
        api_version: str = "v17.0",
        timeout: Optional[float] = 10.0,
    ):
        self.phone_number_id = phone_number_id
        self.access_token = access_token
        self.recipient = recipient
        self.api_base = api_base.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "WhatsAppNotifier":
        return cls(
            phone_number_id=settings.phone_number_id,
            access_token=settings.access_token,
            recipient=settings.admin_number,
            api_base=settings.whatsapp_api_base,
            api_version=settings.whatsapp_api_version,
            timeout=settings.whatsapp_timeout,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/{self.api_version}/{self.phone_number_id}/messages"

    def notify(self, order: Order) -> None:
        if not (self.phone_number_id and self.access_token and self.recipient):
            raise UpstreamError("WhatsApp credentials are not configured")

        self._send({
            "messaging_product": "whatsapp",
            "to": self.recipient,
            "type": "text",
            "text": {"body": format_order_text(order)},
        })

        # WhatsApp fetches the image itself from the link
        if order.imageUrl:
            self._send({
                "messaging_product": "whatsapp",
                "to": self.recipient,
                "type": "image",
                "image": {
                    "link": order.imageUrl,
                    "caption": f"{order.productTitle} - {order.price or ''}",
                },
            })

    def _send(self, payload: dict) -> None:
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(
                self.endpoint, json=payload, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            detail = e.response.text if e.response is not None else str(e)
            logger.error(
                "whatsapp_send_failed",
                message_type=payload["type"],
                error=str(e),
                response=detail,
            )
            raise UpstreamError(f"WhatsApp API request failed: {e}") from e

        logger.info("whatsapp_message_sent", message_type=payload["type"])
