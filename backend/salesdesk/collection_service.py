"""Per-entity collection services built from one configuration type."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from .config import get_settings
from .query import filter_records, paginate
from .record_store import Record, RecordStore
from .schemas import Page

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 value, returning ``None`` when it cannot be read."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class CollectionSpec:
    name: str
    collection_key: str
    id_prefix: str
    number_field: str
    search_fields: Tuple[str, ...]
    filter_fields: Tuple[str, ...] = ("status",)
    # additional business numbers stamped on add: field name -> prefix
    extra_numbers: Tuple[Tuple[str, str], ...] = ()


COLLECTION_SPECS: Tuple[CollectionSpec, ...] = (
    CollectionSpec(
        name="customers",
        collection_key="sales_customers",
        id_prefix="CUST",
        number_field="customerCode",
        search_fields=("name", "email", "company", "customerCode"),
    ),
    CollectionSpec(
        name="enquiries",
        collection_key="sales_enquiries",
        id_prefix="ENQ",
        number_field="enquiryNumber",
        search_fields=("customerName", "subject", "description", "company"),
        filter_fields=("status", "priority"),
    ),
    CollectionSpec(
        name="quotations",
        collection_key="sales_quotations",
        id_prefix="QT",
        number_field="quotationNumber",
        search_fields=("quotationNumber", "customer", "subject"),
    ),
    CollectionSpec(
        name="sales_orders",
        collection_key="sales_sales_orders",
        id_prefix="SO",
        number_field="orderNumber",
        search_fields=("orderNumber", "customerName", "quotationRef"),
    ),
    CollectionSpec(
        name="invoices",
        collection_key="sales_invoices",
        id_prefix="INV",
        number_field="invoiceNumber",
        search_fields=("invoiceNumber", "customer"),
    ),
    CollectionSpec(
        name="dispatches",
        collection_key="sales_dispatches",
        id_prefix="DISP",
        number_field="dispatchNumber",
        search_fields=("dispatchNumber", "orderNumber", "customer"),
        extra_numbers=(("trackingNumber", "TRK"),),
    ),
    CollectionSpec(
        name="returns",
        collection_key="sales_returns",
        id_prefix="RET",
        number_field="returnNumber",
        search_fields=("returnNumber", "orderNumber", "customer"),
    ),
)


def next_business_number(records: List[Record], field_name: str, prefix: str) -> str:
    """Return ``PREFIX-00001`` style numbers, one past the highest in use."""

    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")
    highest = 0
    for record in records:
        match = pattern.match(str(record.get(field_name) or ""))
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}-{highest + 1:05d}"


class CollectionService:
    def __init__(self, spec: CollectionSpec, store: RecordStore, clock: Optional[Clock] = None):
        self.spec = spec
        self.store = store
        self.clock = clock or utc_now

    @property
    def key(self) -> str:
        return self.spec.collection_key

    def _now(self) -> str:
        return self.clock().isoformat()

    def add(self, data: Mapping[str, Any]) -> Record:
        records = self.store.get_collection(self.key)
        now = self._now()
        payload: Dict[str, Any] = dict(data)
        payload.setdefault("createdAt", now)
        payload["updatedAt"] = payload["createdAt"]
        if not payload.get(self.spec.number_field):
            payload[self.spec.number_field] = next_business_number(
                records, self.spec.number_field, self.spec.id_prefix
            )
        for field_name, prefix in self.spec.extra_numbers:
            if not payload.get(field_name):
                payload[field_name] = next_business_number(records, field_name, prefix)
        record = self.store.add_record(self.key, payload)
        logger.debug("Added %s %s (%s)", self.spec.name, record["id"], payload[self.spec.number_field])
        return record

    def update(self, record_id: str, patch: Mapping[str, Any]) -> Optional[Record]:
        current = self.get(record_id)
        if current is None:
            return None
        stamp = self.clock()
        created = parse_timestamp(current.get("createdAt"))
        if created is not None and stamp < created:
            stamp = created
        # the creation instant is fixed once the record exists
        changes = {name: value for name, value in patch.items() if name != "createdAt"}
        return self.store.update_record(self.key, record_id, {**changes, "updatedAt": stamp.isoformat()})

    def delete(self, record_id: str) -> bool:
        return self.store.delete_record(self.key, record_id)

    def get(self, record_id: str) -> Optional[Record]:
        for record in self.store.get_collection(self.key):
            if record.get("id") == record_id:
                return record
        return None

    def search(
        self,
        term: str = "",
        status_filter: str = "all",
        page: int = 1,
        limit: Optional[int] = None,
        **extra_filters: str,
    ) -> Page:
        unknown = set(extra_filters) - set(self.spec.filter_fields)
        if unknown:
            raise ValueError(f"{self.spec.name} cannot be filtered by {', '.join(sorted(unknown))}")
        filters = {"status": status_filter, **extra_filters}
        filtered = filter_records(self.get_all(), term, self.spec.search_fields, filters)
        if limit is None:
            limit = get_settings().default_page_size
        return paginate(filtered, page, limit)

    def get_all(self) -> List[Record]:
        return self.store.get_collection(self.key)


@dataclass
class SalesCollections:
    customers: CollectionService
    enquiries: CollectionService
    quotations: CollectionService
    sales_orders: CollectionService
    invoices: CollectionService
    dispatches: CollectionService
    returns: CollectionService
    _by_name: Dict[str, CollectionService] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self._by_name = {service.spec.name: service for service in self}

    def __iter__(self) -> Iterator[CollectionService]:
        yield from (
            self.customers,
            self.enquiries,
            self.quotations,
            self.sales_orders,
            self.invoices,
            self.dispatches,
            self.returns,
        )

    def __getitem__(self, name: str) -> CollectionService:
        return self._by_name[name]


def build_collections(store: RecordStore, clock: Optional[Clock] = None) -> SalesCollections:
    services = {spec.name: CollectionService(spec, store, clock) for spec in COLLECTION_SPECS}
    return SalesCollections(**services)
