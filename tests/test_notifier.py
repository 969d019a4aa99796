from datetime import datetime, timezone

import pytest
import requests

from errors import UpstreamError
from notifier import WhatsAppNotifier, format_order_text
from schemas import Order


def make_order(**extra):
    fields = {
        "id": "1700000000000-abcdefg",
        "productTitle": "Red Jacket",
        "price": "$50",
        "receivedAt": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    fields.update(extra)
    return Order(**fields)


@pytest.fixture
def notifier_():
    return WhatsAppNotifier("1234567890", "test-token", "250700000001", timeout=5)


def test_text_summary_defaults():
    text = format_order_text(make_order())
    assert text == "New order:\nRed Jacket - $50\nSize: \nFrom: web buyer"


def test_text_only_when_no_image(notifier_, whatsapp):
    notifier_.notify(make_order(size="M", customerPhone="250700000000"))

    assert whatsapp.message_types == ["text"]
    call = whatsapp.calls[0]
    assert call["url"] == "https://graph.facebook.com/v17.0/1234567890/messages"
    assert call["headers"]["Authorization"] == "Bearer test-token"
    assert call["timeout"] == 5
    assert call["json"]["to"] == "250700000001"
    assert call["json"]["messaging_product"] == "whatsapp"
    assert call["json"]["text"]["body"] == (
        "New order:\nRed Jacket - $50\nSize: M\nFrom: 250700000000"
    )


def test_image_sent_as_second_message(notifier_, whatsapp):
    notifier_.notify(make_order(imageUrl="https://shop.example/red.jpg"))

    assert whatsapp.message_types == ["text", "image"]
    assert whatsapp.calls[1]["json"]["image"] == {
        "link": "https://shop.example/red.jpg",
        "caption": "Red Jacket - $50",
    }


def test_error_status_raises_upstream_error(notifier_, whatsapp):
    whatsapp.status_code = 401
    with pytest.raises(UpstreamError):
        notifier_.notify(make_order(imageUrl="https://shop.example/red.jpg"))
    # no image call after the text message failed
    assert whatsapp.message_types == ["text"]


def test_transport_error_raises_upstream_error(notifier_, whatsapp):
    whatsapp.error = requests.ConnectionError("connection refused")
    with pytest.raises(UpstreamError):
        notifier_.notify(make_order())


def test_missing_credentials_do_not_call_out(whatsapp):
    with pytest.raises(UpstreamError):
        WhatsAppNotifier("", "", "").notify(make_order())
    assert whatsapp.calls == []
