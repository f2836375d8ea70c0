# -*- coding: utf-8 -*-
"""
Work Order (Заказ-наряд) Pydantic Models
"""
from enum import Enum
from typing import Optional, List, Union
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class WorkStatus(str, Enum):
    """Order work status"""
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAYED = "PAYED"


class PaymentMethod(str, Enum):
    """Payment method; LATER is the deferred sentinel, never summed as paid"""
    CASH = "cash"
    CARD = "card"
    LATER = "later"


class LineItem(BaseModel):
    """Service or part row in order"""
    id: int = Field(..., description="Row id, unique within order")
    title: str = Field("", description="Service / part name")
    qty: float = Field(1.0, description="Quantity")
    price: float = Field(0.0, description="Price per unit")


class Payment(BaseModel):
    """Payment record, append-only"""
    id: int = Field(..., description="Payment id")
    date: str = Field("", description="Display date (dd.mm.YYYY)")
    method: str = Field(PaymentMethod.CASH.value, description="cash / card / later")
    amount: float = Field(0.0, description="Paid amount")


class Order(BaseModel):
    """Work order as stored by the orders API"""
    id: Optional[str] = Field(None, description="Zero-padded number issued by server")
    date: Optional[str] = Field(None, description="Order date (dd.mm.YYYY)")

    # Customer info
    company: str = Field("", description="Company name")
    customer: str = Field("", description="Customer name")
    phone: Optional[str] = Field(None, description="Customer phone")

    # Car info
    car: str = Field("", description="Car make / model")
    gov_number: Optional[str] = Field(None, description="License plate")
    vin_number: Optional[str] = Field(None, description="VIN")
    mileage: Optional[float] = Field(None, description="Mileage at service")

    reason: str = Field("", description="Reason for visit")
    status: WorkStatus = Field(WorkStatus.NEW, description="Work status")

    # Tabular parts
    services: List[LineItem] = Field(default_factory=list, description="Services performed")
    parts: List[LineItem] = Field(default_factory=list, description="Parts sold")
    payments: List[Payment] = Field(default_factory=list, description="Payments received")

    # Discount applies to services only
    discount_percent: Optional[float] = Field(None, description="Discount, percent")
    discount_amount: Optional[float] = Field(None, description="Discount, currency units")

    # Ticket PDF
    pdf_url: Optional[str] = Field(None, description="Ticket PDF url")
    pdf_path: Optional[str] = Field(None, description="Ticket PDF storage path")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class OrderDraft(BaseModel):
    """Locally cached partial order edit"""
    id: Optional[str] = None
    date: Optional[str] = None
    company: Optional[str] = None
    customer: Optional[str] = None
    phone: Optional[str] = None
    car: Optional[str] = None
    gov_number: Optional[str] = None
    vin_number: Optional[str] = None
    mileage: Optional[float] = None
    reason: Optional[str] = None
    status: Optional[WorkStatus] = None
    services: Optional[List[LineItem]] = None
    parts: Optional[List[LineItem]] = None
    payments: Optional[List[Payment]] = None
    # Older drafts kept the raw input strings
    discount_percent: Optional[Union[float, str]] = None
    discount_amount: Optional[Union[float, str]] = None
    pdf_url: Optional[str] = None
    pdf_path: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"


class Totals(BaseModel):
    """Order totals"""
    services_total: float = Field(0.0, description="Sum of services")
    parts_total: float = Field(0.0, description="Sum of parts")
    discount_value: float = Field(0.0, description="Applied discount")
    total: float = Field(0.0, description="Total to pay")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class TicketUpload(BaseModel):
    """Stored ticket PDF location"""
    url: str = Field(..., description="Download url")
    path: Optional[str] = Field(None, description="Path relative to uploads dir")
