"""
Database package for the MAGE local store.

Provides SQLAlchemy models and session management.
"""

from .models import Base, Location, ServerSetting, User
from .session import create_engine, create_session_maker, drop_db, init_db

__all__ = [
    "Base",
    "Location",
    "ServerSetting",
    "User",
    "create_engine",
    "create_session_maker",
    "drop_db",
    "init_db",
]
