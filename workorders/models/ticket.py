# -*- coding: utf-8 -*-
"""
Ticket (Акт / счёт) Pydantic Models
"""
from typing import Optional, List
from pydantic import BaseModel, Field


class TicketLine(BaseModel):
    """Printable line item"""
    title: str = Field("", description="Name")
    qty: float = Field(0.0, description="Quantity")
    price: float = Field(0.0, description="Price per unit")
    sum: float = Field(0.0, description="qty * price")


class Ticket(BaseModel):
    """Printable snapshot of a paid order"""
    number: str = Field(..., description="Order number")
    issued_at: str = Field(..., description="Issue timestamp (ISO)")

    customer_name: str = Field("", description="Customer name")
    company: str = Field("", description="Company name")
    phone: str = Field("", description="Customer phone")
    vehicle: str = Field("", description="Car make / model")
    gov_number: str = Field("", description="License plate")
    vin_number: str = Field("", description="VIN")
    mileage: Optional[float] = Field(None, description="Mileage")
    reason: str = Field("", description="Reason for visit")

    services: List[TicketLine] = Field(default_factory=list)
    parts: List[TicketLine] = Field(default_factory=list)

    # Totals
    services_total: float = 0.0
    parts_total: float = 0.0
    discount_percent: Optional[float] = None
    discount_value: float = 0.0
    total: float = 0.0
    paid: float = 0.0


class StoredTicket(BaseModel):
    """Ticket PDF file in uploads storage"""
    name: str
    ticket_id: Optional[str] = None
    size: int = 0
    mtime: str = ""
    url: str = ""
