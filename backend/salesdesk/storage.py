"""Key-value media the record store persists collections into."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import database
from .models import StorageEntry


class StorageError(Exception):
    """Raised when the medium cannot read or persist a value."""


class StorageQuotaExceeded(StorageError):
    """Raised when a write would push the medium past its quota."""


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        ...


class MemoryKeyValueStorage:
    """Dict-backed medium, mainly for tests.

    ``quota_bytes`` caps the total size of all stored values; a write that
    would exceed it raises :class:`StorageQuotaExceeded` and leaves the
    previous value in place.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self._items: Dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._items.items() if k != key)
            if used + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageQuotaExceeded(f"writing {key!r} exceeds quota of {self.quota_bytes} bytes")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items)


class SqlKeyValueStorage:
    """Durable medium backed by the ``storage_entries`` table.

    Every key lives under an ``origin`` so several installations can share
    one database without seeing each other's collections. Each write runs in
    its own transaction.
    """

    def __init__(self, origin: str = "local", session_factory: Optional[Callable[[], Session]] = None):
        self.origin = origin
        self._session_factory = session_factory

    def _session(self) -> Session:
        factory = self._session_factory or database.SessionLocal
        return factory()

    def get_item(self, key: str) -> Optional[str]:
        try:
            with self._session() as db:
                return db.scalar(
                    select(StorageEntry.value).where(
                        StorageEntry.origin == self.origin, StorageEntry.key == key
                    )
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to read {key!r}: {exc.__class__.__name__}") from exc

    def set_item(self, key: str, value: str) -> None:
        try:
            with self._session() as db, db.begin():
                entry = db.get(StorageEntry, (self.origin, key))
                if entry is None:
                    db.add(StorageEntry(origin=self.origin, key=key, value=value))
                else:
                    entry.value = value
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to write {key!r}: {exc.__class__.__name__}") from exc

    def remove_item(self, key: str) -> None:
        try:
            with self._session() as db, db.begin():
                entry = db.get(StorageEntry, (self.origin, key))
                if entry is not None:
                    db.delete(entry)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to remove {key!r}: {exc.__class__.__name__}") from exc

    def keys(self) -> List[str]:
        try:
            with self._session() as db:
                rows = db.scalars(
                    select(StorageEntry.key).where(StorageEntry.origin == self.origin).order_by(StorageEntry.key)
                ).all()
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to list keys: {exc.__class__.__name__}") from exc
        return list(rows)
