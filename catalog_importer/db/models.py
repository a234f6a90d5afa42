"""
SQLAlchemy ORM Models
Database table definitions using SQLAlchemy ORM.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the TIMESTAMP columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _new_job_id() -> str:
    return str(uuid.uuid4())


class JobStatus(str, Enum):
    """Import job states. COMPLETED and FAILED are terminal."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ShopSubscription(Base):
    """
    Shop subscription model.

    One row per shop. Tracks the plan, the trial window and the
    monthly import counter used for quota accounting.
    """
    __tablename__ = 'shop_subscriptions'

    shop = Column(String(255), primary_key=True,
                  comment='Shop domain, e.g. example.myshopify.com')
    plan = Column(String(32), nullable=False, default='TRIAL',
                  comment='TRIAL, TRIAL_EXPIRED, STARTER, GROWTH, UNLIMITED')
    trial_used = Column(Boolean, nullable=False, default=False)
    import_count = Column(Integer, nullable=False, default=0,
                          comment='Imports reserved in the current billing period')
    period_start = Column(DateTime, nullable=False, default=utcnow,
                          comment='Start of the current billing period')
    trial_ends_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<ShopSubscription(shop={self.shop}, plan={self.plan}, import_count={self.import_count})>"


class ImportJob(Base):
    """
    Import job model.

    One row per product import attempt. Written only by the import worker
    (after the PENDING row is created), read by the job poller.
    """
    __tablename__ = 'import_jobs'

    id = Column(String(36), primary_key=True, default=_new_job_id)
    shop = Column(String(255), nullable=False, index=True)
    product_title = Column(Text, nullable=False,
                           comment='Denormalized for display')
    status = Column(String(16), nullable=False, default=JobStatus.PENDING.value, index=True)
    source_url = Column(Text, nullable=False)
    product_id = Column(String(255), nullable=True,
                        comment='Remote product id, set once COMPLETED')
    error_message = Column(Text, nullable=True,
                           comment='Plain-language reason when FAILED')

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_import_jobs_shop_created', 'shop', 'created_at'),
    )

    def __repr__(self):
        return f"<ImportJob(id={self.id}, shop={self.shop}, status={self.status})>"

    @property
    def is_finished(self) -> bool:
        """Check if the job reached a terminal state."""
        return self.status in (JobStatus.COMPLETED.value, JobStatus.FAILED.value)
