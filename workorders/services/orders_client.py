# -*- coding: utf-8 -*-
"""
Orders API Client - persistence collaborator of the work-order editor
"""
import json
import logging
from typing import Optional, Dict, Any, List

import httpx

from workorders.config import Settings, get_settings
from workorders.models import Order, TicketUpload

logger = logging.getLogger(__name__)


class OrdersApiError(Exception):
    """Orders API Error"""
    def __init__(self, message: str, status_code: int = None, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class OrderNotFoundError(OrdersApiError):
    """Order id is unknown to the server (404)"""


class ApiTimeoutError(OrdersApiError):
    """Request did not complete in time"""


class OrdersClient:
    """Client for the orders / files / services HTTP API"""

    def __init__(
        self,
        base_url: str = None,
        token: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = (base_url or self.settings.API_URL).rstrip("/")
        self.token = token if token is not None else self.settings.API_TOKEN
        self.timeout = timeout or self.settings.API_TIMEOUT
        self._transport = transport

    def _get_headers(self) -> dict:
        """Get request headers"""
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: dict = None,
        params: dict = None,
        files: dict = None,
        timeout: float = None,
    ) -> Any:
        """Make HTTP request; no automatic retry, retries are user-initiated"""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        timeout = timeout or self.timeout
        headers = self._get_headers()

        kwargs: Dict[str, Any] = {"headers": headers, "params": params}
        if files is not None:
            kwargs["files"] = files
        elif data is not None:
            headers["Content-Type"] = "application/json; charset=utf-8"
            kwargs["content"] = json.dumps(data, ensure_ascii=False).encode("utf-8")

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"Orders API timeout: {method} {url}")
            raise ApiTimeoutError("Request timeout", details={"url": url}) from e
        except httpx.HTTPError as e:
            logger.error(f"Orders API connection error: {method} {url}: {e}")
            raise OrdersApiError(str(e) or type(e).__name__, details={"url": url}) from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = (
                (body.get("detail") or body.get("error")) if isinstance(body, dict) else None
            ) or f"HTTP error: {response.status_code}"
            if response.status_code == 404:
                raise OrderNotFoundError(str(message), 404, body if isinstance(body, dict) else {})
            logger.error(f"Orders API HTTP error: {response.status_code} {method} {url}")
            raise OrdersApiError(str(message), response.status_code, body if isinstance(body, dict) else {})

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise OrdersApiError("Invalid JSON response", response.status_code) from e

    # ==================== Orders ====================

    async def fetch_order(self, order_id: str, timeout: float = None) -> Order:
        """Get order by id"""
        data = await self._request("GET", f"api/orders/{order_id}", timeout=timeout)
        return Order.model_validate(data)

    async def list_orders(self) -> List[Order]:
        """Get all orders"""
        data = await self._request("GET", "api/orders")
        return [Order.model_validate(item) for item in data or []]

    async def create_order(self, order: Order) -> Order:
        """Create order, server assigns the id"""
        payload = order.model_dump(by_alias=True, mode="json", exclude={"id"})
        data = await self._request("POST", "api/orders", data=payload)
        return Order.model_validate(data)

    async def update_order(self, order_id: str, order: Order) -> Order:
        """Update order; raises OrderNotFoundError if id is unknown"""
        payload = order.model_dump(by_alias=True, mode="json")
        data = await self._request("PUT", f"api/orders/{order_id}", data=payload)
        return Order.model_validate(data)

    async def delete_order(self, order_id: str) -> bool:
        """Delete order"""
        await self._request("DELETE", f"api/orders/{order_id}")
        return True

    # ==================== Services catalog ====================

    async def search_services(self, query: str = None) -> List[str]:
        """Get service names for autocomplete"""
        params = {"q": query.strip()} if query and query.strip() else None
        data = await self._request("GET", "api/services", params=params)
        return [str(name) for name in data or []]

    # ==================== Ticket files ====================

    async def upload_ticket_pdf(
        self, order_id: str, content: bytes, filename: str = None
    ) -> TicketUpload:
        """Upload ticket PDF for an order"""
        filename = filename or f"ticket-{order_id}.pdf"
        files = {"file": (filename, content, "application/pdf")}
        data = await self._request("POST", f"api/files/tickets/{order_id}/pdf", files=files)
        return TicketUpload.model_validate(data)

    async def delete_ticket_pdfs(self, order_id: str) -> int:
        """Delete all ticket PDFs stored for an order"""
        data = await self._request("DELETE", f"api/tickets/{order_id}")
        return int((data or {}).get("deleted", 0))
