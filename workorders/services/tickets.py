# -*- coding: utf-8 -*-
"""
Ticket Service - renders the order ticket PDF and stores it on the server
"""
import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import BaseModel
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from workorders.models import LineItem, Order, Ticket, TicketLine, TicketUpload
from workorders.services.orders_client import OrdersApiError, OrdersClient
from workorders.services.pricing import compute_totals, paid_total

logger = logging.getLogger(__name__)

DEFAULT_FONT = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"
TICKET_FONT = "TicketSans"


class TicketPublishError(Exception):
    """Ticket could not be generated or uploaded"""
    def __init__(self, message: str, pdf_bytes: Optional[bytes] = None):
        self.message = message
        # Rendered document, if rendering succeeded, for saving locally
        self.pdf_bytes = pdf_bytes
        super().__init__(self.message)


class TicketPublication(BaseModel):
    """Result of a successful publish"""
    upload: TicketUpload
    order: Order


def ticket_filename(order_id: str) -> str:
    return f"ticket-{order_id}.pdf"


def _ticket_lines(items: List[LineItem]) -> List[TicketLine]:
    return [
        TicketLine(title=item.title, qty=item.qty, price=item.price, sum=item.qty * item.price)
        for item in items
    ]


def build_ticket(order: Order, issued_at: Optional[str] = None) -> Ticket:
    """Map an order to its printable ticket"""
    totals = compute_totals(
        order.services, order.parts, order.discount_percent, order.discount_amount
    )
    return Ticket(
        number=order.id or "",
        issued_at=issued_at or datetime.now().isoformat(timespec="seconds"),
        customer_name=order.customer,
        company=order.company,
        phone=order.phone or "",
        vehicle=order.car,
        gov_number=order.gov_number or "",
        vin_number=order.vin_number or "",
        mileage=order.mileage,
        reason=order.reason,
        services=_ticket_lines(order.services),
        parts=_ticket_lines(order.parts),
        services_total=totals.services_total,
        parts_total=totals.parts_total,
        discount_percent=order.discount_percent,
        discount_value=totals.discount_value,
        total=totals.total,
        paid=paid_total(order.payments),
    )


# ==================== PDF rendering ====================


def format_money(value: float) -> str:
    """2300.5 -> '2 300,50'"""
    return f"{value:,.2f}".replace(",", " ").replace(".", ",")


def _register_font(font_path: Optional[Path]) -> tuple:
    """Register a TTF font with Cyrillic glyphs, fall back to Helvetica"""
    if not font_path:
        return DEFAULT_FONT, DEFAULT_FONT_BOLD
    if TICKET_FONT in pdfmetrics.getRegisteredFontNames():
        return TICKET_FONT, TICKET_FONT
    try:
        pdfmetrics.registerFont(TTFont(TICKET_FONT, str(font_path)))
        return TICKET_FONT, TICKET_FONT
    except Exception as e:
        logger.warning(f"Ticket font {font_path} not loaded, using {DEFAULT_FONT}: {e}")
        return DEFAULT_FONT, DEFAULT_FONT_BOLD


def render_ticket_pdf(ticket: Ticket, font_path: Optional[Path] = None) -> bytes:
    """Render ticket as a plain A4 PDF"""
    font, font_bold = _register_font(font_path)
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(f"Заказ-наряд № {ticket.number}")
    width, height = A4
    left, right = 15 * mm, width - 15 * mm
    y = height - 20 * mm

    def line(text: str, size: int = 10, bold: bool = False, amount: str = None):
        nonlocal y
        if y < 20 * mm:
            pdf.showPage()
            y = height - 20 * mm
        pdf.setFont(font_bold if bold else font, size)
        pdf.drawString(left, y, text)
        if amount:
            pdf.drawRightString(right, y, amount)
        y -= size * 0.5 * mm + 2 * mm

    def table(title: str, rows: List[TicketLine], subtotal: float):
        nonlocal y
        if not rows:
            return
        line(title, 12, bold=True)
        for i, row in enumerate(rows, start=1):
            line(
                f"{i}. {row.title}",
                amount=f"{row.qty:g} x {format_money(row.price)} = {format_money(row.sum)}",
            )
        line(f"Итого: {format_money(subtotal)}", 10, bold=True)
        y -= 2 * mm

    issued = ticket.issued_at[:10]
    line(f"Заказ-наряд № {ticket.number} от {issued}", 16, bold=True)
    y -= 3 * mm
    if ticket.company:
        line(f"Организация: {ticket.company}")
    line(f"Заказчик: {ticket.customer_name}")
    if ticket.phone:
        line(f"Телефон: {ticket.phone}")
    line(f"Автомобиль: {ticket.vehicle}")
    if ticket.gov_number:
        line(f"Гос. номер: {ticket.gov_number}")
    if ticket.vin_number:
        line(f"VIN: {ticket.vin_number}")
    if ticket.mileage:
        line(f"Пробег: {ticket.mileage:g}")
    if ticket.reason:
        line(f"Причина обращения: {ticket.reason}")
    y -= 4 * mm

    table("Работы", ticket.services, ticket.services_total)
    table("Запчасти", ticket.parts, ticket.parts_total)

    if ticket.discount_value > 0:
        label = f"Скидка ({ticket.discount_percent:g}%)" if ticket.discount_percent else "Скидка"
        line(f"{label}: {format_money(ticket.discount_value)}")
    line(f"Всего к оплате: {format_money(ticket.total)}", 12, bold=True)
    line(f"Оплачено: {format_money(ticket.paid)}")

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


# ==================== Publishing ====================


class TicketPublisher:
    """Generates the ticket PDF, uploads it and stamps its url on the order"""

    def __init__(
        self,
        client: OrdersClient,
        renderer: Optional[Callable[[Ticket], bytes]] = None,
        font_path: Optional[Path] = None,
    ):
        self.client = client
        self.font_path = font_path
        self.renderer = renderer or (lambda ticket: render_ticket_pdf(ticket, self.font_path))

    def render(self, order: Order, issued_at: Optional[str] = None) -> bytes:
        """Render ticket PDF for an order without uploading"""
        return self.renderer(build_ticket(order, issued_at))

    async def publish(self, order: Order, issued_at: Optional[str] = None) -> TicketPublication:
        """
        Generate, upload and attach the ticket PDF.

        Args:
            order: Saved order (must have an id)
            issued_at: Issue timestamp, defaults to now

        Returns:
            TicketPublication with the upload location and the updated order

        Raises:
            TicketPublishError: on render / upload / update failure
        """
        if not order.id:
            raise TicketPublishError("Сохраните заказ перед генерацией PDF")

        try:
            content = self.render(order, issued_at)
        except Exception as e:
            logger.error(f"Ticket render failed for order {order.id}: {e}")
            raise TicketPublishError("Не удалось сформировать PDF") from e

        try:
            upload = await self.client.upload_ticket_pdf(order.id, content, ticket_filename(order.id))
            stamped = order.model_copy(
                update={"pdf_url": upload.url, "pdf_path": upload.path or upload.url}
            )
            updated = await self.client.update_order(order.id, stamped)
        except OrdersApiError as e:
            logger.error(f"Ticket upload failed for order {order.id}: {e.message}")
            raise TicketPublishError(
                "Не удалось загрузить PDF на сервер. Скачайте файл локально.",
                pdf_bytes=content,
            ) from e

        logger.info(f"Ticket uploaded for order {order.id}: {upload.url}")
        return TicketPublication(upload=upload, order=updated)
