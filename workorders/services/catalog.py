# -*- coding: utf-8 -*-
"""
Service name hints for line-item autocomplete
"""
import json
import logging
from typing import List, Optional

from workorders.services.drafts import DraftStore
from workorders.services.orders_client import OrdersApiError, OrdersClient

logger = logging.getLogger(__name__)

SERVICE_CACHE_KEY = "service-hints-cache"

DEFAULT_SERVICES = [
    # Диагностика
    "Компьютерная диагностика",
    "Диагностика ЭЛ. оборудования",
    "Диагностика ЭЛ. проводки",
    "Диагностика впускного тракта",
    "Диагностика выпускного тракта",
    # Ремонт
    "Ремонт трапеции",
    "Ремонт фар",
    "Ремонт кондиционера",
    "Ремонт зажигания",
    "Ремонт щитка приборов",
    "Ремонт печки",
    "Ремонт стеклоподъемника",
    "Ремонт замка",
    # Замена
    "Замена свечей",
    "Замена форсунок",
    "Замена катушек",
    "Замена моторчика",
    "Замена трапеции",
    "Замена фар",
    "Замена ремня",
    "Замена вентилятора",
    "Замена радиатора",
    "Замена стеклоподъемника",
    "Замена щитка приборов",
    "Замена замка",
    # Установка
    "Установка магнитолы",
    "Установка камеры з/в",
]


class ServiceHints:
    """Service names from the server, cached locally, defaults as last resort"""

    def __init__(self, client: OrdersClient, store: DraftStore):
        self.client = client
        self.store = store
        self.names: List[str] = list(DEFAULT_SERVICES)

    def _cached(self) -> Optional[List[str]]:
        raw = self.store.get(SERVICE_CACHE_KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Service hints cache is corrupt, ignoring")
            return None
        if not isinstance(data, list):
            return None
        names = [str(name) for name in data if str(name).strip()]
        return names or None

    async def refresh(self) -> List[str]:
        """Reload names from the server; on failure use cache or defaults"""
        try:
            names = await self.client.search_services()
        except OrdersApiError as e:
            logger.warning(f"Service hints not loaded, using cache: {e.message}")
            self.names = self._cached() or list(DEFAULT_SERVICES)
            return self.names

        self.names = names or list(DEFAULT_SERVICES)
        self.store.set(SERVICE_CACHE_KEY, json.dumps(self.names, ensure_ascii=False))
        return self.names

    def suggest(self, query: str = "", limit: int = 8) -> List[str]:
        """Case-insensitive substring match; empty query gives the first names"""
        source = self.names or DEFAULT_SERVICES
        q = (query or "").strip().lower()
        if q:
            source = [name for name in source if q in name.lower()]
        return source[:limit]
