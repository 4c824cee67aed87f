import pytest

from conftest import NOW
from salesdesk.services.stats import SalesStatsService


def test_overview_counts(collections):
    collections.customers.add({"name": "Acme"})
    collections.enquiries.add({"subject": "pumps"})
    collections.quotations.add({"customer": "Acme"})
    collections.sales_orders.add({"status": "processing", "total": 120})
    collections.sales_orders.add({"status": "ready-to-ship", "totalAmount": 80})
    collections.sales_orders.add({"status": "delivered", "total": 50})
    collections.invoices.add({"status": "overdue"})
    collections.invoices.add({"status": "pending", "dueDate": "2026-03-01"})
    collections.invoices.add({"status": "pending", "dueDate": "2026-04-01"})
    collections.invoices.add({"status": "paid", "dueDate": "2026-01-01"})
    collections.returns.add({"status": "requested"})
    collections.returns.add({"status": "completed"})

    stats = SalesStatsService(collections, clock=lambda: NOW).overview()

    assert stats.total_customers == 1
    assert stats.total_enquiries == 1
    assert stats.total_quotations == 1
    assert stats.total_orders == 3
    assert stats.total_revenue == 250
    assert stats.pending_dispatches == 2
    assert stats.overdue_invoices == 2
    assert stats.active_returns == 1


def test_status_breakdown(collections):
    for status in ("pending", "pending", "delivered", "cancelled"):
        collections.sales_orders.add({"status": status, "total": 10})

    breakdown = SalesStatsService(collections).status_breakdown("sales_orders")

    assert breakdown.total == 4
    assert breakdown.by_status == {"pending": 2, "processing": 0, "ready-to-ship": 0, "delivered": 1}
    assert breakdown.total_value == 40


def test_status_breakdown_unknown_entity(collections):
    with pytest.raises(KeyError):
        SalesStatsService(collections).status_breakdown("dispatches")


def test_overview_degrades_to_zeroes(collections, monkeypatch, caplog):
    def _boom():
        raise RuntimeError("boom")

    monkeypatch.setattr(collections.sales_orders, "get_all", _boom)
    stats = SalesStatsService(collections).overview()
    assert stats.total_orders == 0
    assert stats.total_revenue == 0
    assert "Error calculating sales statistics" in caplog.text
