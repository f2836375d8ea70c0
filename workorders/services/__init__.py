# Work Orders Services
from .pricing import compute_totals, parse_input_number, paid_total, due_amount
from .status import derive_status, settle_stored_status, has_content, is_manual_status
from .drafts import DraftCache, FileDraftStore, InMemoryDraftStore, reconcile
from .orders_client import OrdersClient, OrdersApiError, OrderNotFoundError, ApiTimeoutError
from .tickets import TicketPublisher, TicketPublishError, render_ticket_pdf
from .lifecycle import OrderLifecycleController, ControllerBusyError, ControllerPhase
from .reports import revenue_summary, orders_by_company

__all__ = [
    # Pricing / status
    "compute_totals",
    "parse_input_number",
    "paid_total",
    "due_amount",
    "derive_status",
    "settle_stored_status",
    "has_content",
    "is_manual_status",
    # Drafts
    "DraftCache",
    "FileDraftStore",
    "InMemoryDraftStore",
    "reconcile",
    # API client
    "OrdersClient",
    "OrdersApiError",
    "OrderNotFoundError",
    "ApiTimeoutError",
    # Tickets
    "TicketPublisher",
    "TicketPublishError",
    "render_ticket_pdf",
    # Controller
    "OrderLifecycleController",
    "ControllerBusyError",
    "ControllerPhase",
    # Reports
    "revenue_summary",
    "orders_by_company",
]
