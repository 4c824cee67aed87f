"""SQLAlchemy models."""

from sqlalchemy import Column, DateTime, String, Text, func

from .database import Base


class StorageEntry(Base):
    """One serialized collection, keyed by origin and collection key."""

    __tablename__ = "storage_entries"

    origin = Column(String(128), primary_key=True, default="local")
    key = Column(String(128), primary_key=True, index=True)
    value = Column(Text, nullable=False, default="[]")
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<StorageEntry origin={self.origin!r} key={self.key!r} size={len(self.value or '')}>"
