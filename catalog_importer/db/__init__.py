"""
Database ORM Models
SQLAlchemy ORM models and session helpers.
"""

from .models import Base, ImportJob, JobStatus, ShopSubscription, utcnow
from .session import get_engine, get_session_factory, init_db, session_scope

__all__ = [
    "Base",
    "ImportJob",
    "JobStatus",
    "ShopSubscription",
    "utcnow",
    "get_engine",
    "get_session_factory",
    "init_db",
    "session_scope",
]
