# -*- coding: utf-8 -*-
"""
Order Store Service
JSON file storage for work orders served by the orders API
"""
import json
import logging
from pathlib import Path
from typing import List, Optional

from workorders.models import Order, OrderDraft
from workorders.services.drafts import draft_fields, today_string
from workorders.services.status import settle_stored_status

logger = logging.getLogger(__name__)

ID_WIDTH = 6


def next_order_id(orders: List[Order]) -> str:
    """Max numeric id + 1, zero-padded: 41 existing -> '000042'"""
    highest = 0
    for order in orders:
        if order.id and order.id.isdigit():
            highest = max(highest, int(order.id))
    return str(highest + 1).zfill(ID_WIDTH)


class OrderStore:
    """All orders in a single orders.json"""

    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / "orders.json"
        self._ensure_file()

    def _ensure_file(self):
        """Ensure data directory and file exist"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.write_text("[]", encoding="utf-8")

    def _read(self) -> List[Order]:
        self._ensure_file()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except ValueError as e:
            logger.error(f"Error reading {self.path}: {e}")
            raise
        return [Order.model_validate(item) for item in raw]

    def _write(self, orders: List[Order]):
        data = [order.model_dump(by_alias=True, mode="json") for order in orders]
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def list_orders(self) -> List[Order]:
        return self._read()

    def get_order(self, order_id: str) -> Optional[Order]:
        for order in self._read():
            if order.id == order_id:
                return order
        return None

    def create_order(self, payload: OrderDraft) -> Order:
        """
        Create an order with the next free id

        Args:
            payload: Order fields; a client-sent id is ignored

        Returns:
            Stored order with settled status
        """
        orders = self._read()
        data = draft_fields(payload)
        data["id"] = next_order_id(orders)
        data.setdefault("date", today_string())
        order = Order.model_validate(data)
        order.status = settle_stored_status(order)

        orders.append(order)
        self._write(orders)
        logger.info(f"Created order: {order.id}")
        return order

    def update_order(self, order_id: str, payload: OrderDraft) -> Optional[Order]:
        """
        Merge payload over the stored order; absent / null fields keep
        their stored value

        Returns:
            Updated order or None if not found
        """
        orders = self._read()
        for index, current in enumerate(orders):
            if current.id != order_id:
                continue
            data = current.model_dump()
            data.update(draft_fields(payload))
            data["id"] = current.id
            updated = Order.model_validate(data)
            updated.status = settle_stored_status(updated)

            orders[index] = updated
            self._write(orders)
            logger.info(f"Updated order: {order_id} ({updated.status.value})")
            return updated
        return None

    def delete_order(self, order_id: str) -> bool:
        """Delete an order; ticket files are removed separately"""
        orders = self._read()
        remaining = [order for order in orders if order.id != order_id]
        if len(remaining) == len(orders):
            return False
        self._write(remaining)
        logger.info(f"Deleted order: {order_id}")
        return True
