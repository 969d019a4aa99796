"""
Order persistence

Handlers talk to the ``OrderStore`` interface; ``JsonFileOrderStore`` keeps the
whole collection in one JSON array file and rewrites it on every change.
"""

import json
import os
import stat
import tempfile
from abc import ABC, abstractmethod
from typing import List, Union

import structlog
from pydantic import ValidationError as ModelValidationError

from errors import NotFound, StorageError
from schemas import Order, generate_order_id, utcnow

logger = structlog.get_logger()


class OrderStore(ABC):

    @abstractmethod
    def append(self, fields: dict) -> Order:
        """Create an order from submitted fields and persist it."""

    @abstractmethod
    def list(self) -> List[Order]:
        ...

    @abstractmethod
    def toggle_processed(self, order_id: str) -> Order:
        ...

    @abstractmethod
    def delete(self, order_id: str) -> Order:
        ...


class JsonFileOrderStore(OrderStore):
    """
    Read-modify-write over a JSON array file.

    Nothing is cached between calls. There is no locking either: two
    concurrent writers can interleave and the last rewrite wins. Each rewrite
    replaces the file in one step, so readers never see a partial array.
    """

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> List[Union[Order, dict]]:
        """
        Stored entries, in file order.

        Entries that are not valid orders are kept as raw JSON values so a
        rewrite writes them back untouched.
        """
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.loads(f.read() or "[]")
            if not isinstance(data, list):
                raise ValueError("orders file does not hold a JSON array")
        except (OSError, ValueError) as e:
            logger.warning("order_store_unreadable", path=self.path, error=str(e))
            return []

        entries = []
        for position, item in enumerate(data):
            try:
                entries.append(Order.model_validate(item))
            except ModelValidationError as e:
                logger.warning(
                    "order_record_invalid",
                    path=self.path,
                    position=position,
                    error=str(e),
                )
                entries.append(item)
        return entries

    def _file_mode(self) -> int:
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except OSError:
            return 0o644

    def _save(self, entries: List[Union[Order, dict]]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        records = [e.to_record() if isinstance(e, Order) else e for e in entries]
        mode = self._file_mode()
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=directory, suffix=".tmp", delete=False
            ) as tmp:
                tmp_path = tmp.name
                json.dump(records, tmp, indent=2, ensure_ascii=False)
            # NamedTemporaryFile creates 0600 files
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("order_store_write_failed", path=self.path, error=str(e))
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError(f"Could not write orders: {e}") from e

    @staticmethod
    def _index_of(entries: List[Union[Order, dict]], order_id: str) -> int:
        for idx, entry in enumerate(entries):
            if isinstance(entry, Order) and entry.id == order_id:
                return idx
        raise NotFound("not found")

    def append(self, fields: dict) -> Order:
        values = dict(fields)
        values.setdefault("id", generate_order_id())
        values.setdefault("processed", False)
        values["receivedAt"] = utcnow()
        order = Order(**values)

        entries = self._load()
        entries.append(order)
        self._save(entries)
        return order

    def list(self) -> List[Order]:
        return [e for e in self._load() if isinstance(e, Order)]

    def toggle_processed(self, order_id: str) -> Order:
        entries = self._load()
        order = entries[self._index_of(entries, order_id)]
        order.toggle_processed()
        self._save(entries)
        return order

    def delete(self, order_id: str) -> Order:
        entries = self._load()
        removed = entries.pop(self._index_of(entries, order_id))
        self._save(entries)
        return removed
