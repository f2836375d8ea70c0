# -*- coding: utf-8 -*-
"""
Order Lifecycle Controller

Holds the work order being edited and drives load / edit / save /
payment / status flows against the orders API, the local draft cache
and the ticket publisher. Runs on a single asyncio loop; the only
suspension points are the awaited HTTP calls.

Phases:
    IDLE -> LOADING -> READY | ERROR
    IDLE -> SAVING  -> SAVED | ERROR
Calls that need the network are rejected while LOADING or SAVING.
"""
import asyncio
import json
import logging
import time
from enum import Enum
from typing import Any, Iterable, List, Optional, Union

from pydantic import BaseModel, ValidationError

from workorders.config import Settings, get_settings
from workorders.models import (
    LineItem, Order, OrderDraft, Payment, PaymentMethod, Totals, WorkStatus,
)
from workorders.services.drafts import DraftCache, empty_order, reconcile, today_string
from workorders.services.orders_client import (
    ApiTimeoutError, OrderNotFoundError, OrdersApiError, OrdersClient,
)
from workorders.services.pricing import (
    compute_totals, due_amount, paid_total, parse_input_number,
)
from workorders.services.scheduler import Debouncer
from workorders.services.status import derive_status, is_manual_status
from workorders.services.tickets import TicketPublication, TicketPublishError, TicketPublisher

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Не удалось загрузить заказ. Проверьте соединение и обновите страницу."
LOAD_TIMEOUT_MESSAGE = "Не удалось загрузить заказ. Попробуйте обновить."
SAVE_FAILED_MESSAGE = "Не удалось сохранить заказ"
DELETE_FAILED_MESSAGE = "Не удалось удалить заказ"
TICKET_NO_ORDER_MESSAGE = "Сохраните заказ перед генерацией PDF"

EDITABLE_FIELDS = frozenset({
    "date",
    "company",
    "customer",
    "phone",
    "car",
    "gov_number",
    "vin_number",
    "mileage",
    "reason",
    "services",
    "parts",
})


class ControllerPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


BUSY_PHASES = (ControllerPhase.LOADING, ControllerPhase.SAVING)


class LineKind(str, Enum):
    SERVICES = "services"
    PARTS = "parts"


class ControllerBusyError(Exception):
    """Another network operation is still in flight"""


class PaymentOutcome(BaseModel):
    """Result of a payment action; payment and ticket succeed independently"""
    order: Optional[Order] = None
    payment: Optional[Payment] = None
    ticket: Optional[TicketPublication] = None
    ticket_error: Optional[str] = None

    @property
    def saved(self) -> bool:
        return self.order is not None


def _now_ms() -> int:
    return int(time.time() * 1000)


class OrderLifecycleController:
    """Stateful editor of a single work order"""

    def __init__(
        self,
        client: OrdersClient,
        drafts: DraftCache,
        tickets: TicketPublisher,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.drafts = drafts
        self.tickets = tickets
        self.settings = settings or get_settings()

        self.order: Order = empty_order()
        self.phase = ControllerPhase.IDLE
        # drafts are written only once the initial load has finished
        self.hydrated = False

        self.load_error: Optional[str] = None
        self.save_error: Optional[str] = None
        self.ticket_error: Optional[str] = None
        self.ticket_pdf_fallback: Optional[bytes] = None

        # Set by change_status(); automatic derivation keeps the chosen status
        self._status_pinned = False
        self._last_saved = ""
        self._save_seq = 0
        self._last_id = 0

        delay = self.settings.AUTOSAVE_DELAY
        self._autosave = Debouncer(delay) if delay else None

    # ==================== State ====================

    @property
    def order_id(self) -> Optional[str]:
        return self.order.id

    @property
    def busy(self) -> bool:
        return self.phase in BUSY_PHASES

    def _enter(self, phase: ControllerPhase) -> None:
        if self.busy:
            raise ControllerBusyError(f"Operation rejected, controller is {self.phase.value}")
        self.phase = phase

    @staticmethod
    def _snapshot(order: Order) -> str:
        return json.dumps(order.model_dump(by_alias=True, mode="json"), sort_keys=True, ensure_ascii=False)

    def is_dirty(self) -> bool:
        """Current order differs from the last state known to the server"""
        return self._snapshot(self.order) != self._last_saved

    def totals(self) -> Totals:
        return compute_totals(
            self.order.services,
            self.order.parts,
            self.order.discount_percent,
            self.order.discount_amount,
        )

    def paid(self) -> float:
        return paid_total(self.order.payments)

    def due(self) -> float:
        return due_amount(self.totals().total, self.order.payments)

    def _next_id(self, existing: Iterable[int] = ()) -> int:
        """Millisecond timestamp id, bumped to stay unique"""
        candidate = max([_now_ms(), self._last_id + 1, *(i + 1 for i in existing)])
        self._last_id = candidate
        return candidate

    # ==================== Load ====================

    async def load(self, order_id: Optional[str] = None) -> Order:
        """
        Load an order for editing.

        A new order (None / "new") starts from an empty skeleton and never
        picks up a cached draft. An existing order is fetched with a
        timeout and merged with its draft; on failure the draft (or an
        empty skeleton) is used and `load_error` is set.
        """
        self._enter(ControllerPhase.LOADING)
        self.hydrated = False
        self.load_error = None
        self.save_error = None
        self._status_pinned = False
        if self._autosave:
            self._autosave.cancel()

        try:
            if not order_id or order_id == "new":
                self.order = empty_order()
                self._last_saved = ""
            else:
                order_id = str(order_id)
                draft = self.drafts.load(order_id)
                server = await self._fetch(order_id)
                # a manual correction stored on the server stays explicit
                self._status_pinned = server is not None and is_manual_status(server)
                merged = reconcile(server, draft, has_explicit_status=self._status_pinned)
                if server is None:
                    merged.id = order_id
                    self._last_saved = ""
                else:
                    self._last_saved = self._snapshot(server)
                self.order = merged
        finally:
            self.hydrated = True
            self.phase = ControllerPhase.ERROR if self.load_error else ControllerPhase.READY

        logger.info(f"Order {self.order.id or 'new'} loaded, status {self.order.status.value}")
        return self.order

    async def _fetch(self, order_id: str) -> Optional[Order]:
        timeout = self.settings.LOAD_TIMEOUT
        try:
            return await asyncio.wait_for(
                self.client.fetch_order(order_id, timeout=timeout), timeout=timeout
            )
        except (asyncio.TimeoutError, ApiTimeoutError):
            logger.warning(f"Order {order_id} load timed out after {timeout}s, using local data")
            self.load_error = LOAD_TIMEOUT_MESSAGE
        except (OrdersApiError, ValidationError) as e:
            logger.error(f"Order {order_id} load failed: {e}")
            self.load_error = LOAD_FAILED_MESSAGE
        return None

    async def refresh(self) -> Optional[Order]:
        """
        Re-fetch the order from the server.

        The result is dropped if a save completed or the order was edited
        while the request was in flight.
        """
        if not self.hydrated or not self.order.id:
            return None
        seq = self._save_seq
        started = self._snapshot(self.order)
        timeout = self.settings.LOAD_TIMEOUT
        try:
            server = await asyncio.wait_for(
                self.client.fetch_order(self.order.id, timeout=timeout), timeout=timeout
            )
        except (asyncio.TimeoutError, OrdersApiError, ValidationError) as e:
            logger.warning(f"Order {self.order.id} refresh failed: {e}")
            return None

        if self._save_seq != seq or self._snapshot(self.order) != started:
            logger.info(f"Order {self.order.id} refresh discarded, newer local state")
            return None
        if self.is_dirty():
            return None
        self._status_pinned = self._status_pinned or is_manual_status(server)
        server.status = derive_status(server, has_explicit_status=self._status_pinned)
        self.order = server
        self._last_saved = self._snapshot(server)
        return self.order

    # ==================== Draft ====================

    def persist_draft(self) -> bool:
        """Write the editable state to the draft cache (only once hydrated)"""
        if not self.hydrated:
            return False
        draft = OrderDraft.model_validate(self.order.model_dump(exclude={"pdf_url", "pdf_path"}))
        try:
            self.drafts.save(self.order.id, draft)
        except OSError as e:
            logger.error(f"Failed to save draft for order {self.order.id or 'new'}: {e}")
            return False
        return True

    # ==================== Editing ====================

    def _after_change(self) -> None:
        self.order.status = derive_status(self.order, has_explicit_status=self._status_pinned)
        self.persist_draft()
        self._schedule_autosave()

    def update_fields(self, **changes: Any) -> Order:
        """Set editable order fields, e.g. update_fields(customer="Ivanov")"""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
        data = self.order.model_dump()
        data.update(changes)
        self.order = Order.model_validate(data)
        self._after_change()
        return self.order

    def set_discount(self, percent: Union[str, float, None] = None, amount: Union[str, float, None] = None) -> Totals:
        """Set discount inputs; invalid or empty input means no discount"""
        data = self.order.model_dump()
        if percent is not None:
            data["discount_percent"] = parse_input_number(percent) or 0.0
        if amount is not None:
            data["discount_amount"] = parse_input_number(amount) or 0.0
        self.order = Order.model_validate(data)
        self._after_change()
        return self.totals()

    def _items(self, kind: Union[LineKind, str]) -> List[LineItem]:
        return list(getattr(self.order, LineKind(kind).value))

    def _set_items(self, kind: Union[LineKind, str], items: List[LineItem]) -> None:
        self.order = self.order.model_copy(update={LineKind(kind).value: items})
        self._after_change()

    def add_line_item(
        self, kind: Union[LineKind, str], title: str = "", qty: float = 1, price: float = 0
    ) -> LineItem:
        items = self._items(kind)
        existing = [i.id for i in self.order.services] + [i.id for i in self.order.parts]
        item = LineItem(id=self._next_id(existing), title=title.strip(), qty=qty, price=price)
        self._set_items(kind, items + [item])
        return item

    def edit_line_item(
        self,
        kind: Union[LineKind, str],
        item_id: int,
        title: Optional[str] = None,
        qty: Union[str, float, None] = None,
        price: Union[str, float, None] = None,
    ) -> Optional[LineItem]:
        """
        Inline edit of a row.

        Clearing the title removes the row. Returns the edited row, or
        None if it was removed or not found.
        """
        items = self._items(kind)
        for index, item in enumerate(items):
            if item.id != item_id:
                continue
            new_title = item.title if title is None else title.strip()
            if not new_title:
                del items[index]
                self._set_items(kind, items)
                return None
            edited = item.model_copy(update={
                "title": new_title,
                "qty": item.qty if qty is None else (parse_input_number(qty) or 0.0),
                "price": item.price if price is None else (parse_input_number(price) or 0.0),
            })
            items[index] = edited
            self._set_items(kind, items)
            return edited
        return None

    def delete_line_item(self, kind: Union[LineKind, str], item_id: int) -> bool:
        items = self._items(kind)
        remaining = [i for i in items if i.id != item_id]
        if len(remaining) == len(items):
            return False
        self._set_items(kind, remaining)
        return True

    # ==================== Autosave ====================

    def _schedule_autosave(self) -> None:
        if self._autosave is None or not self.hydrated or not self.order.id:
            return
        if not self.is_dirty():
            return
        try:
            self._autosave.schedule(self._run_autosave)
        except RuntimeError:
            # no running event loop, edits are saved explicitly
            pass

    async def _run_autosave(self) -> None:
        if self.busy:
            self._autosave.schedule(self._run_autosave)
            return
        if self.is_dirty():
            await self.save()

    async def flush_autosave(self) -> None:
        if self._autosave:
            await self._autosave.flush()

    # ==================== Save ====================

    async def _create_or_update(self, payload: Order) -> Order:
        if not payload.id:
            created = await self.client.create_order(payload)
            logger.info(f"Order created: {created.id}")
            return created
        try:
            return await self.client.update_order(payload.id, payload)
        except OrderNotFoundError:
            logger.warning(f"Order {payload.id} not found on update, creating it")
            created = await self.client.create_order(payload)
            logger.info(f"Order {payload.id} re-created as {created.id}")
            return created

    async def _save(
        self,
        explicit_status: Optional[WorkStatus] = None,
        explicit_payments: Optional[List[Payment]] = None,
    ) -> Optional[Order]:
        status = explicit_status or derive_status(self.order, has_explicit_status=self._status_pinned)
        payments = list(explicit_payments) if explicit_payments is not None else list(self.order.payments)
        started = self._snapshot(self.order)
        payload = self.order.model_copy(update={"status": status, "payments": payments}, deep=True)

        self.save_error = None
        try:
            saved = await self._create_or_update(payload)
        except (OrdersApiError, ValidationError) as e:
            logger.error(f"Order {payload.id or 'new'} save failed: {e}")
            self.save_error = SAVE_FAILED_MESSAGE
            return None

        previous_id = self.order.id
        if self._snapshot(self.order) == started:
            self.order = saved.model_copy(deep=True)
        else:
            # edits made while the request was in flight are kept
            self.order = self.order.model_copy(update={
                "id": saved.id,
                "date": saved.date,
                "status": saved.status,
                "payments": saved.payments,
                "pdf_url": saved.pdf_url,
                "pdf_path": saved.pdf_path,
            })
        self._last_saved = self._snapshot(saved)
        self._save_seq += 1

        if previous_id != saved.id:
            # a draft under the placeholder / vanished id is stale now
            self.drafts.clear(previous_id)
        self.persist_draft()
        return saved

    async def save(
        self,
        explicit_status: Optional[WorkStatus] = None,
        explicit_payments: Optional[List[Payment]] = None,
    ) -> Optional[Order]:
        """
        Create or update the order.

        Args:
            explicit_status: Status override, wins over automatic derivation
            explicit_payments: Payments to send instead of the current ones

        Returns:
            Saved order, or None on failure (see `save_error`)
        """
        self._enter(ControllerPhase.SAVING)
        saved = None
        try:
            saved = await self._save(explicit_status, explicit_payments)
            return saved
        finally:
            self.phase = ControllerPhase.SAVED if saved is not None else ControllerPhase.ERROR

    async def change_status(self, next_status: Union[WorkStatus, str]) -> Optional[Order]:
        """Explicit status change from the status menu, saved immediately"""
        next_status = WorkStatus(next_status)
        if next_status == self.order.status:
            return self.order
        saved = await self.save(explicit_status=next_status)
        if saved is not None:
            self._status_pinned = True
            logger.info(f"Order {saved.id} status set to {next_status.value}")
        return saved

    # ==================== Payment ====================

    async def _publish_ticket(self, order: Order) -> Optional[TicketPublication]:
        self.ticket_error = None
        self.ticket_pdf_fallback = None
        try:
            publication = await self.tickets.publish(order)
        except TicketPublishError as e:
            logger.error(f"Ticket for order {order.id} failed: {e.message}")
            self.ticket_error = e.message
            self.ticket_pdf_fallback = e.pdf_bytes
            return None

        was_clean = not self.is_dirty()
        self.order = self.order.model_copy(update={
            "pdf_url": publication.order.pdf_url,
            "pdf_path": publication.order.pdf_path,
        })
        if was_clean:
            self._last_saved = self._snapshot(self.order)
        return publication

    async def _pay(self, method: PaymentMethod, amount: float) -> PaymentOutcome:
        payment = Payment(
            id=self._next_id(p.id for p in self.order.payments),
            date=self.order.date or today_string(),
            method=method.value,
            amount=amount,
        )
        saved = await self._save(WorkStatus.PAYED, [*self.order.payments, payment])
        if saved is None:
            return PaymentOutcome()
        self._status_pinned = False
        logger.info(f"Order {saved.id} paid: {amount} ({method.value})")

        publication = await self._publish_ticket(saved)
        return PaymentOutcome(
            order=self.order,
            payment=payment,
            ticket=publication,
            ticket_error=self.ticket_error,
        )

    async def accept_payment(
        self, method: Union[PaymentMethod, str], amount_input: Union[str, float, None] = None
    ) -> PaymentOutcome:
        """
        Accept a payment for the outstanding balance.

        Blank, invalid or non-positive input pays the full due amount.
        "later" defers: the order becomes PENDING_PAYMENT, no payment is
        recorded and no ticket is generated. A real payment saves the
        order as PAYED and then publishes the ticket once; a ticket
        failure does not undo the payment.
        """
        method = PaymentMethod(method)
        self._enter(ControllerPhase.SAVING)
        outcome = PaymentOutcome()
        try:
            if method == PaymentMethod.LATER:
                saved = await self._save(WorkStatus.PENDING_PAYMENT, self.order.payments)
                if saved is not None:
                    self._status_pinned = False
                    logger.info(f"Order {saved.id} payment deferred")
                outcome = PaymentOutcome(order=saved)
                return outcome

            due = self.due()
            value = parse_input_number(amount_input)
            amount = value if value is not None and value > 0 else due
            outcome = await self._pay(method, amount)
            return outcome
        finally:
            self.phase = ControllerPhase.SAVED if outcome.saved else ControllerPhase.ERROR

    async def confirm_pending_payment(
        self, method: Union[PaymentMethod, str] = PaymentMethod.CASH
    ) -> PaymentOutcome:
        """Settle a PENDING_PAYMENT order for its full due amount"""
        method = PaymentMethod(method)
        if method == PaymentMethod.LATER:
            method = PaymentMethod.CASH
        self._enter(ControllerPhase.SAVING)
        outcome = PaymentOutcome()
        try:
            outcome = await self._pay(method, self.due())
            return outcome
        finally:
            self.phase = ControllerPhase.SAVED if outcome.saved else ControllerPhase.ERROR

    async def retry_ticket(self) -> Optional[TicketPublication]:
        """Generate and upload the ticket again after a failure"""
        if not self.order.id:
            self.ticket_error = TICKET_NO_ORDER_MESSAGE
            return None
        self._enter(ControllerPhase.SAVING)
        publication = None
        try:
            publication = await self._publish_ticket(self.order)
            return publication
        finally:
            self.phase = ControllerPhase.SAVED if publication is not None else ControllerPhase.ERROR

    # ==================== Delete ====================

    async def delete(self) -> bool:
        """Delete the order, its ticket PDFs and its draft"""
        order_id = self.order.id
        if self._autosave:
            self._autosave.cancel()
        if not order_id:
            self.drafts.clear(None)
            self.order = empty_order()
            self._last_saved = ""
            return True

        self._enter(ControllerPhase.SAVING)
        deleted = False
        try:
            try:
                await self.client.delete_order(order_id)
            except OrderNotFoundError:
                logger.warning(f"Order {order_id} already deleted on server")
            except OrdersApiError as e:
                logger.error(f"Order {order_id} delete failed: {e}")
                self.save_error = DELETE_FAILED_MESSAGE
                return False

            try:
                removed = await self.client.delete_ticket_pdfs(order_id)
                logger.info(f"Order {order_id} deleted with {removed} ticket file(s)")
            except OrdersApiError as e:
                logger.warning(f"Ticket files of order {order_id} not removed: {e}")

            self.drafts.clear(order_id)
            self.hydrated = False
            self.order = empty_order()
            self._last_saved = ""
            deleted = True
            return True
        finally:
            self.phase = ControllerPhase.SAVED if deleted else ControllerPhase.ERROR
