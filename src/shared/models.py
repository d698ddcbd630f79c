import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Uuid


def utcnow() -> datetime:
    """Naive UTC timestamp, the storage convention for every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UUIDMixin:
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

class TimestampMixin:
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

class AuditMixin(UUIDMixin, TimestampMixin):
    """Combines UUID and Timestamps for standard entities."""
    pass
