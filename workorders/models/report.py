# -*- coding: utf-8 -*-
"""
Report Pydantic Models - revenue and companies views
"""
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .order import WorkStatus
from .ticket import StoredTicket


class MonthlyRevenue(BaseModel):
    """Revenue of one calendar month"""
    month: str = Field(..., description="YYYY-MM")
    label: str = Field("", description="Month name and year")
    revenue: float = Field(0.0, description="Order totals after discount")
    services: float = Field(0.0, description="Services before discount")
    parts: float = Field(0.0, description="Parts")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ServiceRevenue(BaseModel):
    """Revenue earned by one service title"""
    title: str
    revenue: float = 0.0


class RevenueReport(BaseModel):
    """Paid orders within a date range"""
    date_from: Optional[str] = Field(None, description="Range start, inclusive")
    date_to: Optional[str] = Field(None, description="Range end, inclusive")
    count: int = Field(0, description="Number of paid orders")
    total: float = Field(0.0, description="Sum of order totals")
    cash: float = Field(0.0, description="Received in cash")
    card: float = Field(0.0, description="Received by card")
    months: List[MonthlyRevenue] = Field(default_factory=list, description="Oldest month first")
    services: List[ServiceRevenue] = Field(default_factory=list, description="Highest revenue first")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CompanyOrder(BaseModel):
    """Order row of the companies view"""
    id: Optional[str] = None
    date: Optional[str] = None
    customer: str = ""
    car: str = ""
    status: WorkStatus = WorkStatus.NEW
    amount: float = Field(0.0, description="Paid sum, or the order total if nothing is paid")
    ticket_url: Optional[str] = Field(None, description="First ticket PDF of the order")
    tickets: List[StoredTicket] = Field(default_factory=list)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CompanySummary(BaseModel):
    """Orders of one company"""
    name: str
    order_count: int = 0
    payed: int = Field(0, description="Orders in PAYED")
    in_progress: int = Field(0, description="Orders in IN_PROGRESS or PENDING_PAYMENT")
    total: float = Field(0.0, description="Sum of order amounts")
    orders: List[CompanyOrder] = Field(default_factory=list)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
