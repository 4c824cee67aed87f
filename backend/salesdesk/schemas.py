"""Pydantic schemas for records, pages and analytics results."""

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class RecordBase(BaseModel):
    """Minimal shape every stored record carries; entity fields pass through."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., min_length=1)
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PageMeta(_CamelModel):
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0, alias="totalPages")


class Page(_CamelModel):
    data: List[Dict[str, Any]]
    meta: PageMeta


class RevenuePoint(_CamelModel):
    month: str
    revenue: float
    orders: int
    target: float = Field(..., description="display-only target, not a persisted figure")


class TrendPoint(_CamelModel):
    period: str
    customers: int
    enquiries: int
    quotations: int
    orders: int


class FunnelStage(_CamelModel):
    stage: str
    count: int
    percentage: int
    value: float


class CategoryPerformance(_CamelModel):
    category: str
    revenue: float
    orders: int


class KPIs(_CamelModel):
    total_revenue: float = Field(..., alias="totalRevenue")
    average_order_value: float = Field(..., alias="averageOrderValue")
    conversion_rate: int = Field(..., alias="conversionRate")
    quotation_win_rate: int = Field(..., alias="quotationWinRate")
    customer_growth: int = Field(..., alias="customerGrowth")
    total_customers: int = Field(..., alias="totalCustomers")
    total_orders: int = Field(..., alias="totalOrders")


class PipelineSnapshot(_CamelModel):
    new_enquiries: int = Field(0, alias="newEnquiries")
    in_progress_enquiries: int = Field(0, alias="inProgressEnquiries")
    sent_quotations: int = Field(0, alias="sentQuotations")
    accepted_quotations: int = Field(0, alias="acceptedQuotations")
    pending_orders: int = Field(0, alias="pendingOrders")
    processing_orders: int = Field(0, alias="processingOrders")


class SalesStats(_CamelModel):
    total_customers: int = Field(0, alias="totalCustomers")
    total_enquiries: int = Field(0, alias="totalEnquiries")
    total_quotations: int = Field(0, alias="totalQuotations")
    total_orders: int = Field(0, alias="totalOrders")
    total_revenue: float = Field(0, alias="totalRevenue")
    pending_dispatches: int = Field(0, alias="pendingDispatches")
    overdue_invoices: int = Field(0, alias="overdueInvoices")
    active_returns: int = Field(0, alias="activeReturns")


class StatusBreakdown(_CamelModel):
    entity: str
    total: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict, alias="byStatus")
    total_value: float = Field(0, alias="totalValue")
