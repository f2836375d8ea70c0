# Work Orders Pydantic Models
from .order import (
    Order, OrderDraft, LineItem, Payment, Totals, TicketUpload,
    WorkStatus, PaymentMethod,
)
from .ticket import Ticket, TicketLine, StoredTicket
from .service import ServiceRecord, ServiceName
from .report import (
    RevenueReport, MonthlyRevenue, ServiceRevenue, CompanySummary, CompanyOrder,
)

__all__ = [
    # Order
    "Order",
    "OrderDraft",
    "LineItem",
    "Payment",
    "Totals",
    "TicketUpload",
    "WorkStatus",
    "PaymentMethod",
    # Ticket
    "Ticket",
    "TicketLine",
    "StoredTicket",
    # Service catalog
    "ServiceRecord",
    "ServiceName",
    # Reports
    "RevenueReport",
    "MonthlyRevenue",
    "ServiceRevenue",
    "CompanySummary",
    "CompanyOrder",
]
