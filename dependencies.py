"""
FastAPI dependencies wiring handlers to the stores and the forwarder
"""

from fastapi import Depends

from config import Settings, get_settings
from image_store import ImageStore
from notifier import WhatsAppNotifier
from order_store import JsonFileOrderStore, OrderStore

IMAGES_PATH = "/images"


def get_order_store(settings: Settings = Depends(get_settings)) -> OrderStore:
    return JsonFileOrderStore(settings.orders_file)


def get_image_store(settings: Settings = Depends(get_settings)) -> ImageStore:
    return ImageStore(settings.images_dir, public_path=IMAGES_PATH)


def get_notifier(settings: Settings = Depends(get_settings)) -> WhatsAppNotifier:
    return WhatsAppNotifier.from_settings(settings)
