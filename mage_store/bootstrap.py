"""
Store bootstrap utilities.

Provides shared setup for logging, database tables and the server settings store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mage_store.config import get_settings
from mage_store.db.session import create_engine, create_session_maker, init_db
from mage_store.services.server_config import ServerConfig

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | int | None = None) -> None:
    """
    Set up logging for the store.

    Args:
        level: Log level; defaults to the configured ``log_level``.

    """
    if level is None:
        level = get_settings().log_level
    logging.basicConfig(level=level, format=LOG_FORMAT)


async def open_store(
    database_url: str | None = None,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession], ServerConfig]:
    """
    Create the engine, ensure tables exist and load the server settings.

    Returns the engine (caller disposes it), the session maker used for
    location access, and the process-wide ServerConfig instance.
    """
    engine = create_engine(database_url)
    await init_db(engine)
    session_maker = create_session_maker(engine)
    server_config = await ServerConfig.open(session_maker)
    return engine, session_maker, server_config
