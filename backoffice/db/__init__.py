"""Database package"""

from backoffice.db.session import AsyncSessionLocal, engine, get_db
from backoffice.models.base import Base

__all__ = ["Base", "AsyncSessionLocal", "engine", "get_db"]
