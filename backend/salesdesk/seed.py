"""Generate and load CSV seed orders for the sales-order collection."""

from __future__ import annotations

import csv
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .collection_service import SalesCollections, parse_timestamp
from .services.analytics import to_number

logger = logging.getLogger(__name__)


STATUSES = ["pending", "processing", "ready-to-ship", "delivered"]
CUSTOMERS = ["Acme Co", "Globex", "Initech", "Umbrella", "Stark Industries", "Wayne Enterprises"]
SEED_FIELDS = ["orderNumber", "customerName", "status", "total", "createdAt"]


@dataclass
class ImportStats:
    created: int = 0
    skipped: int = 0


def generate_rows(count: int = 100, now: Optional[datetime] = None, seed: int = 42) -> List[Dict[str, str]]:
    """Mock sales orders spread over the last year, deterministic per ``seed``."""

    rng = random.Random(seed)
    now = now or datetime.now(timezone.utc)
    rows = []
    for idx in range(1, count + 1):
        created = now - timedelta(days=rng.randint(0, 364), hours=rng.randint(0, 20))
        rows.append(
            {
                "orderNumber": f"SO-SEED-{idx:04d}",
                "customerName": rng.choice(CUSTOMERS),
                "status": rng.choices(STATUSES, weights=[3, 3, 2, 5])[0],
                "total": f"{rng.uniform(49, 1299):.2f}",
                "createdAt": created.isoformat(timespec="seconds"),
            }
        )
    return rows


def write_csv(rows: List[Dict[str, str]], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=SEED_FIELDS)
        writer.writeheader()
        writer.writerows(rows)


def parse_row(row: Dict[str, str]) -> Dict[str, Any]:
    order: Dict[str, Any] = {
        "orderNumber": row["orderNumber"],
        "customerName": row.get("customerName") or "",
        "status": row.get("status") or "pending",
        "total": to_number(row.get("total")) or 0.0,
    }
    created = parse_timestamp(row.get("createdAt"))
    if created is not None:
        order["createdAt"] = created.isoformat()
    return order


def import_csv(csv_path: Path, collections: SalesCollections) -> ImportStats:
    stats = ImportStats()
    orders = collections.sales_orders
    existing = {record.get("orderNumber") for record in orders.get_all() if record.get("orderNumber")}
    with csv_path.open(newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        for row in reader:
            order_number = row["orderNumber"]
            if order_number in existing:
                stats.skipped += 1
                continue
            orders.add(parse_row(row))
            existing.add(order_number)
            stats.created += 1
    logger.info("Imported %d orders from %s, skipped %d duplicates", stats.created, csv_path, stats.skipped)
    return stats
