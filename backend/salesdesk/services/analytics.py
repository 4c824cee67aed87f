"""Derived sales analytics, recomputed from the collections on every call."""

from __future__ import annotations

import logging
import math
from collections import OrderedDict
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Iterable, List, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from ..collection_service import Clock, SalesCollections, parse_timestamp, utc_now
from ..config import MAX_TARGET_FACTOR, MIN_TARGET_FACTOR, get_settings
from ..schemas import (
    CategoryPerformance,
    FunnelStage,
    KPIs,
    PipelineSnapshot,
    RevenuePoint,
    TrendPoint,
)

logger = logging.getLogger(__name__)

MONEY_FIELDS = ("total", "totalAmount")
ENQUIRY_VALUE_FIELDS = ("estimatedValue",) + MONEY_FIELDS
FALLBACK_CATEGORY = "General Services"
LINE_ITEM_CATEGORY = "General"


def to_number(value: Any) -> Optional[float]:
    """Coerce a finite number or numeric string; anything else is ``None``."""

    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def record_amount(record: Mapping[str, Any], fields: Sequence[str] = MONEY_FIELDS) -> float:
    """Read a monetary value from the first usable field, else 0.

    Producers disagree on ``total`` versus ``totalAmount``; a zero or
    unreadable value falls through to the next name.
    """

    for name in fields:
        amount = to_number(record.get(name))
        if amount:
            return amount
    return 0.0


def sum_amounts(records: Iterable[Mapping[str, Any]], fields: Sequence[str] = MONEY_FIELDS) -> float:
    return sum(record_amount(record, fields) for record in records)


def _count_status(records: Iterable[Mapping[str, Any]], status: str) -> int:
    return sum(1 for record in records if record.get("status") == status)


def _shift_month(year: int, month: int, offset: int) -> tuple:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


class AnalyticsEngine:
    def __init__(
        self,
        collections: SalesCollections,
        clock: Optional[Clock] = None,
        timezone: Optional[tzinfo] = None,
        target_factor: Optional[float] = None,
    ):
        settings = get_settings()
        self.collections = collections
        self.clock = clock or utc_now
        self.tz = timezone or ZoneInfo(settings.timezone)
        if target_factor is None:
            target_factor = settings.revenue_target_factor
        elif not MIN_TARGET_FACTOR <= target_factor <= MAX_TARGET_FACTOR:
            raise ValueError(
                f"target_factor must be between {MIN_TARGET_FACTOR} and {MAX_TARGET_FACTOR}, got {target_factor}"
            )
        self.target_factor = target_factor

    def _local(self, value: Any) -> Optional[datetime]:
        parsed = parse_timestamp(value)
        return parsed.astimezone(self.tz) if parsed else None

    def _created_between(self, records: Iterable[Mapping[str, Any]], start: datetime, end: datetime) -> int:
        count = 0
        for record in records:
            created = parse_timestamp(record.get("createdAt"))
            if created is not None and start < created <= end:
                count += 1
        return count

    def monthly_revenue(self, months: int = 12) -> List[RevenuePoint]:
        orders = self.collections.sales_orders.get_all()
        now = self.clock().astimezone(self.tz)

        buckets = OrderedDict()
        for offset in range(months - 1, -1, -1):
            buckets[_shift_month(now.year, now.month, -offset)] = []
        for order in orders:
            created = self._local(order.get("createdAt"))
            if created is None:
                logger.debug("Order %s has no readable createdAt, left out of revenue trend", order.get("id"))
                continue
            bucket = buckets.get((created.year, created.month))
            if bucket is not None:
                bucket.append(order)

        points = []
        for (year, month), month_orders in buckets.items():
            revenue = sum_amounts(month_orders)
            target = max(round(revenue * self.target_factor, 2), revenue)
            points.append(
                RevenuePoint(
                    month=date(year, month, 1).strftime("%b %Y"),
                    revenue=revenue,
                    orders=len(month_orders),
                    target=target,
                )
            )
        return points

    def weekly_trend(self, weeks: int = 8) -> List[TrendPoint]:
        customers = self.collections.customers.get_all()
        enquiries = self.collections.enquiries.get_all()
        quotations = self.collections.quotations.get_all()
        orders = self.collections.sales_orders.get_all()
        now = self.clock()

        points = []
        for offset in range(weeks - 1, -1, -1):
            end = now - timedelta(days=7 * offset)
            start = end - timedelta(days=7)
            points.append(
                TrendPoint(
                    period=f"Week {weeks - offset}",
                    customers=self._created_between(customers, start, end),
                    enquiries=self._created_between(enquiries, start, end),
                    quotations=self._created_between(quotations, start, end),
                    orders=self._created_between(orders, start, end),
                )
            )
        return points

    def conversion_funnel(self) -> List[FunnelStage]:
        stages = (
            ("Enquiries", self.collections.enquiries.get_all(), ENQUIRY_VALUE_FIELDS),
            ("Quotations", self.collections.quotations.get_all(), MONEY_FIELDS),
            ("Orders", self.collections.sales_orders.get_all(), MONEY_FIELDS),
            ("Invoices", self.collections.invoices.get_all(), MONEY_FIELDS),
        )

        funnel = []
        previous: Optional[int] = None
        for name, records, value_fields in stages:
            count = len(records)
            if previous is None:
                percentage = 100
            elif previous == 0:
                percentage = 0
            else:
                percentage = round(count / previous * 100)
            funnel.append(
                FunnelStage(stage=name, count=count, percentage=percentage, value=sum_amounts(records, value_fields))
            )
            previous = count
        return funnel

    def category_performance(self, limit: int = 6) -> List[CategoryPerformance]:
        categories = OrderedDict()

        def _add(category: str, revenue: float) -> None:
            entry = categories.setdefault(category, {"revenue": 0.0, "orders": 0})
            entry["revenue"] += revenue
            entry["orders"] += 1

        for order in self.collections.sales_orders.get_all():
            items = order.get("items")
            lines = [item for item in items if isinstance(item, dict)] if isinstance(items, list) else []
            if not lines:
                _add(FALLBACK_CATEGORY, record_amount(order))
                continue
            for item in lines:
                category = item.get("category") or item.get("description") or LINE_ITEM_CATEGORY
                quantity = to_number(item.get("quantity")) or 1
                unit_price = to_number(item.get("unitPrice")) or 0
                _add(str(category), quantity * unit_price)

        ranked = sorted(categories.items(), key=lambda entry: -entry[1]["revenue"])
        return [
            CategoryPerformance(category=name, revenue=data["revenue"], orders=data["orders"])
            for name, data in ranked[:limit]
        ]

    def kpis(self) -> KPIs:
        customers = self.collections.customers.get_all()
        enquiries = self.collections.enquiries.get_all()
        quotations = self.collections.quotations.get_all()
        orders = self.collections.sales_orders.get_all()

        total_revenue = sum_amounts(orders)
        order_count = len(orders)
        now = self.clock().astimezone(self.tz)
        new_customers = 0
        for customer in customers:
            created = self._local(customer.get("createdAt"))
            if created is not None and (created.year, created.month) == (now.year, now.month):
                new_customers += 1

        return KPIs(
            total_revenue=total_revenue,
            average_order_value=total_revenue / order_count if order_count else 0,
            conversion_rate=round(order_count / len(enquiries) * 100) if enquiries else 0,
            quotation_win_rate=round(order_count / len(quotations) * 100) if quotations else 0,
            customer_growth=new_customers,
            total_customers=len(customers),
            total_orders=order_count,
        )

    def pipeline(self) -> PipelineSnapshot:
        enquiries = self.collections.enquiries.get_all()
        quotations = self.collections.quotations.get_all()
        orders = self.collections.sales_orders.get_all()
        return PipelineSnapshot(
            new_enquiries=_count_status(enquiries, "new"),
            in_progress_enquiries=_count_status(enquiries, "in-progress"),
            sent_quotations=_count_status(quotations, "sent"),
            accepted_quotations=_count_status(quotations, "accepted"),
            pending_orders=_count_status(orders, "pending"),
            processing_orders=_count_status(orders, "processing"),
        )
