"""Headline sales statistics for the dashboard cards."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from ..collection_service import Clock, SalesCollections, parse_timestamp, utc_now
from ..schemas import SalesStats, StatusBreakdown
from .analytics import sum_amounts

logger = logging.getLogger(__name__)

EXPECTED_STATUSES: Dict[str, Tuple[str, ...]] = {
    "customers": ("active", "inactive", "potential"),
    "enquiries": ("new", "in-progress", "closed"),
    "quotations": ("draft", "sent", "accepted", "rejected"),
    "sales_orders": ("pending", "processing", "ready-to-ship", "delivered"),
}
PENDING_DISPATCH_STATUSES = {"ready-to-ship", "processing"}
CLOSED_RETURN_STATUSES = {"completed", "rejected", "closed"}


class SalesStatsService:
    def __init__(self, collections: SalesCollections, clock: Optional[Clock] = None):
        self.collections = collections
        self.clock = clock or utc_now

    def _count_overdue_invoices(self) -> int:
        now = self.clock()
        overdue = 0
        for invoice in self.collections.invoices.get_all():
            status = invoice.get("status")
            if status == "overdue":
                overdue += 1
                continue
            due = parse_timestamp(invoice.get("dueDate"))
            if status == "pending" and due is not None and due < now:
                overdue += 1
        return overdue

    def overview(self) -> SalesStats:
        try:
            orders = self.collections.sales_orders.get_all()
            returns = self.collections.returns.get_all()
            return SalesStats(
                total_customers=len(self.collections.customers.get_all()),
                total_enquiries=len(self.collections.enquiries.get_all()),
                total_quotations=len(self.collections.quotations.get_all()),
                total_orders=len(orders),
                total_revenue=sum_amounts(orders),
                pending_dispatches=sum(1 for order in orders if order.get("status") in PENDING_DISPATCH_STATUSES),
                overdue_invoices=self._count_overdue_invoices(),
                active_returns=sum(1 for item in returns if item.get("status") not in CLOSED_RETURN_STATUSES),
            )
        except Exception:
            logger.exception("Error calculating sales statistics")
            return SalesStats()

    def status_breakdown(self, entity: str) -> StatusBreakdown:
        statuses = EXPECTED_STATUSES[entity]
        try:
            records = self.collections[entity].get_all()
            return StatusBreakdown(
                entity=entity,
                total=len(records),
                by_status={
                    status: sum(1 for record in records if record.get("status") == status) for status in statuses
                },
                total_value=sum_amounts(records) if entity == "sales_orders" else 0,
            )
        except Exception:
            logger.exception("Error calculating %s statistics", entity)
            return StatusBreakdown(entity=entity, by_status={status: 0 for status in statuses})
