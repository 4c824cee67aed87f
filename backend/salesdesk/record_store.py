"""Generic record persistence over a key-value medium.

The store is the only component that touches the medium. Each collection is
kept as a JSON array under its own key. Reads never raise: a missing value
is an empty collection, and a value that cannot be decoded is logged and
also treated as empty. Writes never raise either: a failed write is logged
and the last persisted state stays authoritative.
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set

from ulid import ULID

from .storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class LoadState(str, enum.Enum):
    OK = "ok"
    MISSING = "missing"
    CORRUPT = "corrupt"


@dataclass
class LoadResult:
    state: LoadState
    records: List[Record] = field(default_factory=list)
    detail: Optional[str] = None


class RecordStore:
    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def load_collection(self, key: str) -> LoadResult:
        try:
            raw = self.storage.get_item(key)
        except StorageError as exc:
            return LoadResult(LoadState.CORRUPT, detail=str(exc))

        if raw is None:
            return LoadResult(LoadState.MISSING)
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            return LoadResult(LoadState.CORRUPT, detail=f"invalid JSON: {exc}")
        if not isinstance(payload, list):
            return LoadResult(LoadState.CORRUPT, detail=f"expected a JSON array, got {type(payload).__name__}")
        for item in payload:
            if not isinstance(item, dict):
                return LoadResult(LoadState.CORRUPT, detail=f"expected JSON objects, found {type(item).__name__}")
        return LoadResult(LoadState.OK, records=payload)

    def get_collection(self, key: str) -> List[Record]:
        result = self.load_collection(key)
        if result.state is LoadState.CORRUPT:
            logger.warning("Collection %s is unreadable, treating as empty: %s", key, result.detail)
        elif result.state is LoadState.MISSING:
            logger.debug("Collection %s has no stored data yet", key)
        return result.records

    def set_collection(self, key: str, records: Sequence[Mapping[str, Any]]) -> bool:
        try:
            raw = json.dumps(list(records), ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.error("Could not serialize collection %s, write dropped: %s", key, exc)
            return False
        try:
            self.storage.set_item(key, raw)
        except StorageError as exc:
            logger.error("Could not persist collection %s, write dropped: %s", key, exc)
            return False
        return True

    def clear_collection(self, key: str) -> None:
        try:
            self.storage.remove_item(key)
        except StorageError as exc:
            logger.error("Could not clear collection %s: %s", key, exc)

    def generate_id(self, existing: Optional[Set[str]] = None) -> str:
        taken = existing or set()
        while True:
            candidate = str(ULID()).lower()
            if candidate not in taken:
                return candidate

    def add_record(self, key: str, record: Mapping[str, Any]) -> Record:
        records = self.get_collection(key)
        existing_ids = {str(item.get("id")) for item in records}
        stored = {**record, "id": self.generate_id(existing_ids)}
        records.append(stored)
        if not self.set_collection(key, records):
            logger.warning("Record %s was not added to %s", stored["id"], key)
        return stored

    def update_record(self, key: str, record_id: str, patch: Mapping[str, Any]) -> Optional[Record]:
        records = self.get_collection(key)
        for index, item in enumerate(records):
            if item.get("id") == record_id:
                changes = {name: value for name, value in patch.items() if name != "id"}
                merged = {**item, **changes}
                records[index] = merged
                if not self.set_collection(key, records):
                    logger.warning("Update of %s in %s was not persisted", record_id, key)
                return merged
        return None

    def delete_record(self, key: str, record_id: str) -> bool:
        records = self.get_collection(key)
        remaining = [item for item in records if item.get("id") != record_id]
        if len(remaining) == len(records):
            return False
        if not self.set_collection(key, remaining):
            logger.warning("Delete of %s from %s was not persisted", record_id, key)
            return False
        return True
