# -*- coding: utf-8 -*-
"""
Draft Storage & Reconciler

A draft is an unsaved local copy of an order edit, kept so that a page
reload or a second tab does not silently drop the user's work. Drafts
live in a plain key-value string store keyed by ``order-draft-<id|new>``.
"""
import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from pydantic import ValidationError

from workorders.models import Order, OrderDraft
from workorders.services.pricing import parse_input_number
from workorders.services.status import derive_status, has_content

logger = logging.getLogger(__name__)

DRAFT_KEY_PREFIX = "order-draft-"
NEW_ORDER_KEY = "new"

# Array fields are replaced wholesale, never merged element-by-element
COLLECTION_FIELDS = ("services", "parts", "payments")
DISCOUNT_FIELDS = ("discount_percent", "discount_amount")

DraftInput = Union[OrderDraft, Dict[str, Any], None]


def today_string() -> str:
    """Today's date in display format"""
    return datetime.now().strftime("%d.%m.%Y")


# ==================== Storage ====================


class DraftStore(Protocol):
    """Key-value string storage for drafts"""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class InMemoryDraftStore:
    """Draft store kept in process memory"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self):
        return list(self._items)


class FileDraftStore:
    """Draft store with one JSON file per key"""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9_-]", "_", key)
        return self.directory / f"{safe_key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._get_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self._get_path(key).write_text(value, encoding="utf-8")

    def remove(self, key: str) -> None:
        path = self._get_path(key)
        if path.exists():
            path.unlink()


class DraftCache:
    """JSON drafts on top of a DraftStore"""

    def __init__(self, store: DraftStore):
        self.store = store

    @staticmethod
    def key(order_id: Optional[str]) -> str:
        return f"{DRAFT_KEY_PREFIX}{order_id or NEW_ORDER_KEY}"

    def load(self, order_id: Optional[str]) -> Optional[OrderDraft]:
        """
        Read a draft.

        Returns:
            OrderDraft, or None if missing or unreadable
        """
        try:
            raw = self.store.get(self.key(order_id))
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read draft {self.key(order_id)}: {e}")
            return None
        if not raw:
            return None
        try:
            return OrderDraft.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.error(f"Failed to parse draft {self.key(order_id)}: {e}")
            return None

    def save(self, order_id: Optional[str], draft: Union[Order, OrderDraft]) -> None:
        payload = draft.model_dump(by_alias=True, mode="json", exclude_none=True)
        self.store.set(self.key(order_id), json.dumps(payload, ensure_ascii=False))

    def clear(self, order_id: Optional[str]) -> None:
        self.store.remove(self.key(order_id))


# ==================== Reconciler ====================


def empty_order(today: Optional[str] = None) -> Order:
    """Blank order skeleton dated today"""
    return Order(date=today or today_string())


def draft_fields(draft: OrderDraft) -> Dict[str, Any]:
    """Fields the draft actually defines"""
    overrides = draft.model_dump(exclude_none=True)
    overrides.pop("id", None)
    for field in DISCOUNT_FIELDS:
        if field in overrides:
            value = parse_input_number(overrides[field])
            if value is None:
                del overrides[field]
            else:
                overrides[field] = value
    return overrides


def reconcile(
    server_order: Optional[Order],
    local_draft: DraftInput,
    today: Optional[str] = None,
    has_explicit_status: bool = False,
) -> Order:
    """
    Merge server order with a locally cached draft.

    - no draft, or a draft without content: server order wins
    - both: draft scalars win; services / parts / payments are taken
      from the draft only when it defines them
    - no server order: a meaningful draft becomes the working order,
      otherwise an empty skeleton dated today

    Inputs are not mutated; the returned order has its status derived,
    or kept as merged when `has_explicit_status` is set.
    """
    draft = OrderDraft.model_validate(local_draft) if isinstance(local_draft, dict) else local_draft
    meaningful = draft is not None and has_content(draft)

    if server_order is not None and not meaningful:
        merged = server_order.model_copy(deep=True)
    elif server_order is not None:
        base = server_order.model_dump()
        base.update(draft_fields(draft))
        merged = Order.model_validate(base)
    elif meaningful:
        base = draft_fields(draft)
        base.setdefault("date", today or today_string())
        merged = Order.model_validate(base)
    else:
        merged = empty_order(today)

    merged.status = derive_status(merged, has_explicit_status=has_explicit_status)
    return merged
