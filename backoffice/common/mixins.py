"""
Common mixins for back-office models
"""
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.sql import func
from uuid import uuid4


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Mixin for models that need timestamp tracking"""

    # Python-side defaults: the values are available right after flush (async sessions cannot lazy-load them)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)


class BaseMixin(TimestampMixin):
    """UUID primary key + timestamps for most business models"""

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4, index=True)
