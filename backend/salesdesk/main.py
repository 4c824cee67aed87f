"""Application wiring: storage medium, collection services and analytics."""

from dataclasses import dataclass
from typing import Optional

from .collection_service import Clock, SalesCollections, build_collections
from .config import get_settings
from .database import init_db
from .logging_config import setup_logging
from .record_store import RecordStore
from .services.analytics import AnalyticsEngine
from .services.stats import SalesStatsService
from .storage import KeyValueStorage, SqlKeyValueStorage


@dataclass
class SalesDesk:
    store: RecordStore
    collections: SalesCollections
    analytics: AnalyticsEngine
    stats: SalesStatsService


def create_app(storage: Optional[KeyValueStorage] = None, clock: Optional[Clock] = None) -> SalesDesk:
    """Build every service once, over ``storage`` or the configured database."""

    settings = get_settings()
    setup_logging()
    if storage is None:
        init_db()
        storage = SqlKeyValueStorage(origin=settings.storage_origin)

    store = RecordStore(storage)
    collections = build_collections(store, clock)
    return SalesDesk(
        store=store,
        collections=collections,
        analytics=AnalyticsEngine(collections, clock=clock),
        stats=SalesStatsService(collections, clock=clock),
    )
