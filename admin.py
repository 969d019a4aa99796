"""
Admin endpoints for orders and product images

Every route here sits behind the shared-secret gate.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, UploadFile

from dependencies import get_image_store, get_order_store
from errors import ValidationError
from image_store import MAX_IMAGE_BYTES, ImageStore
from order_store import OrderStore
from security import require_order_secret

logger = structlog.get_logger()

router = APIRouter(prefix="/admin", dependencies=[Depends(require_order_secret)])


@router.get("/orders")
def list_orders(store: OrderStore = Depends(get_order_store)):
    return {"orders": [o.to_record() for o in store.list()]}


@router.post("/orders/{order_id}/process")
def toggle_order_processed(order_id: str, store: OrderStore = Depends(get_order_store)):
    """Mark an order processed, or back to unprocessed"""
    order = store.toggle_processed(order_id)
    logger.info("order_toggled", order_id=order_id, processed=order.processed)
    return {"ok": True, "order": order.to_record()}


@router.delete("/orders/{order_id}")
def delete_order(order_id: str, store: OrderStore = Depends(get_order_store)):
    removed = store.delete(order_id)
    logger.info("order_deleted", order_id=order_id)
    return {"ok": True, "removed": removed.to_record()}


@router.get("/images")
def list_images(images: ImageStore = Depends(get_image_store)):
    return {"images": [img.to_record() for img in images.list()]}


@router.post("/images/upload")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    images: ImageStore = Depends(get_image_store),
):
    if image is None:
        raise ValidationError("No image file provided")

    # One byte past the cap is enough to tell the upload is too large
    data = await image.read(MAX_IMAGE_BYTES + 1)
    saved = images.save(image.filename or "", image.content_type or "", data)
    return {"ok": True, "image": saved.to_record()}


@router.delete("/images/{filename}")
def delete_image(filename: str, images: ImageStore = Depends(get_image_store)):
    images.delete(filename)
    return {"ok": True, "deleted": filename}
