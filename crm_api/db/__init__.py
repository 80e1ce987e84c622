"""Database package: async SQLAlchemy engine, session factory, Base, column types."""
from crm_api.db.base import Base, async_session_factory, engine, get_db
from crm_api.db.types import UTCDateTime

__all__ = ["Base", "UTCDateTime", "async_session_factory", "engine", "get_db"]
