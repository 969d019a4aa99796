"""
Public endpoints: order submission and health check
"""

import time

import structlog
from fastapi import APIRouter, Depends, Request

from config import Settings, get_settings
from dependencies import get_notifier, get_order_store
from errors import UpstreamError
from notifier import WhatsAppNotifier
from order_store import OrderStore
from schemas import OrderCreate, utcnow
from security import require_order_secret

logger = structlog.get_logger()

router = APIRouter()

STARTED_AT = time.monotonic()


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Liveness probe"""
    return {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "uptime": time.monotonic() - STARTED_AT,
        "environment": settings.environment,
    }


@router.post("/api/order", dependencies=[Depends(require_order_secret)])
def create_order(
    order: OrderCreate,
    request: Request,
    store: OrderStore = Depends(get_order_store),
    notifier: WhatsAppNotifier = Depends(get_notifier),
):
    """
    Store an order from the website and forward it to the admin on WhatsApp.

    The order is saved before forwarding, so it stays stored even when the
    notification fails.
    """
    logger.info(
        "order_received",
        product_title=order.productTitle,
        price=order.price,
        size=order.size,
        customer_phone=order.customerPhone,
        has_image=bool(order.imageUrl),
        ip=request.client.host if request.client else None,
    )

    record = store.append(order.model_dump(exclude_none=True))

    try:
        notifier.notify(record)
    except UpstreamError as e:
        logger.error(
            "order_forward_error",
            order_id=record.id,
            error=str(e),
            product_title=record.productTitle,
        )
        raise

    logger.info("order_created", order_id=record.id)
    return {"ok": True}
