"""
Server settings store.

Holds the process-wide ``serverUrl`` and ``currentEventId`` values. Writes are
optimistic: the in-memory value changes immediately, and the durable copy is
written in a background task whose outcome is reported once, either through
an optional completion callback or by awaiting the handle ``set`` returns.

Ordering:
    Every write is stamped with a monotonically increasing write sequence,
    seeded from the largest sequence already persisted. Durable writes to one
    key are serialized, and a stored row is only replaced by a write with a
    larger stamp. Completions never touch in-memory state, so a late
    completion for an older write cannot clobber a newer value.

    Stamps are only comparable within one instance, so exactly one
    ServerConfig may write to a given database at a time.

Usage:
    config = await ServerConfig.open(session_maker)

    config.set_server_url("https://mage.example.com")
    config.server_url  # "https://mage.example.com", right away

    def on_saved(saved: bool, error: PersistenceFailure | None) -> None:
        ...

    handle = config.set_current_event_id(7, on_saved)
    outcome = await handle  # SaveOutcome(saved=True, error=None)
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from mage_store.core.exceptions import (
    ConfigurationError,
    DatabaseError,
    ErrorCodes,
    PersistenceFailure,
)
from mage_store.db.models import ServerSetting
from mage_store.schemas.enums import ServerSettingKey

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

SaveCompletion = Callable[[bool, PersistenceFailure | None], None]

_http_url_adapter: TypeAdapter[AnyHttpUrl] = TypeAdapter(AnyHttpUrl)


@dataclass(frozen=True)
class SaveOutcome:
    """Result of one durable write."""

    saved: bool
    error: PersistenceFailure | None = None


class ServerConfig:
    """
    Process-wide server settings with acknowledged durable writes.

    Construct one instance with :meth:`open` and pass it to whatever needs the
    server URL or the current event. Only one instance may be open per
    database, since write stamps from separate instances are not ordered
    against each other. All writes must be issued from the thread running
    the event loop.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker
        self._values: dict[ServerSettingKey, Any] = dict.fromkeys(ServerSettingKey)
        self._sequence = 0
        self._locks = {key: asyncio.Lock() for key in ServerSettingKey}
        self._pending: set[asyncio.Task[SaveOutcome]] = set()

    @classmethod
    async def open(cls, session_maker: async_sessionmaker[AsyncSession]) -> ServerConfig:
        """Create the store and load the persisted values."""
        config = cls(session_maker)
        await config.reload()
        return config

    async def reload(self) -> None:
        """
        Replace in-memory values with the persisted ones.

        Only safe while no saves are in flight.

        Raises:
            DatabaseError: If the settings table cannot be read.

        """
        try:
            async with self._session_maker() as session:
                rows = (await session.execute(select(ServerSetting))).scalars().all()
        except SQLAlchemyError as e:
            logger.exception("Failed to load server settings")
            msg = f"Failed to load server settings: {e}"
            raise DatabaseError(msg, ErrorCodes.DB_QUERY_FAILED) from e

        for row in rows:
            try:
                key = ServerSettingKey(row.key)
            except ValueError:
                logger.warning("Ignoring unknown server setting %r", row.key)
                continue
            self._values[key] = row.value_json
            self._sequence = max(self._sequence, row.write_sequence)

        logger.debug("Loaded %d server settings (write sequence %d)", len(rows), self._sequence)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: ServerSettingKey | str) -> Any:
        """Current in-memory value for ``key``, or None if never set."""
        return self._values[self._coerce_key(key)]

    @property
    def server_url(self) -> str | None:
        return self._values[ServerSettingKey.SERVER_URL]

    @property
    def current_event_id(self) -> int | None:
        return self._values[ServerSettingKey.CURRENT_EVENT_ID]

    @property
    def pending_saves(self) -> int:
        """Number of durable writes still in flight."""
        return len(self._pending)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set(
        self,
        key: ServerSettingKey | str,
        value: Any,
        completion: SaveCompletion | None = None,
    ) -> asyncio.Task[SaveOutcome]:
        """
        Set ``key`` to ``value`` and persist it in the background.

        The in-memory value is updated before this returns. ``completion``,
        if given, is called exactly once with ``(saved, error)`` after the
        durable write finishes; it is never called before ``set`` returns.

        Args:
            key: Setting to write.
            value: New value; None clears the setting.
            completion: Optional callback for the persistence outcome.

        Returns:
            Task resolving to a SaveOutcome. Awaiting it does not raise
            unless the task itself is cancelled.

        Raises:
            ConfigurationError: If the key is unknown or the value invalid.
            RuntimeError: If called without a running event loop.

        """
        key = self._coerce_key(key)
        value = self._validate(key, value)
        loop = asyncio.get_running_loop()

        self._sequence += 1
        sequence = self._sequence
        self._values[key] = value

        task = loop.create_task(self._persist(key, value, sequence), name=f"save-{key}-{sequence}")
        self._pending.add(task)
        task.add_done_callback(functools.partial(self._on_saved, key, sequence, completion))
        return task

    def set_server_url(
        self,
        server_url: str | None,
        completion: SaveCompletion | None = None,
    ) -> asyncio.Task[SaveOutcome]:
        return self.set(ServerSettingKey.SERVER_URL, server_url, completion)

    def set_current_event_id(
        self,
        event_id: int | None,
        completion: SaveCompletion | None = None,
    ) -> asyncio.Task[SaveOutcome]:
        return self.set(ServerSettingKey.CURRENT_EVENT_ID, event_id, completion)

    async def flush(self) -> None:
        """Wait until every in-flight save has finished and reported."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _persist(self, key: ServerSettingKey, value: Any, sequence: int) -> SaveOutcome:
        async with self._locks[key]:
            try:
                async with self._session_maker() as session:
                    row = await session.get(ServerSetting, key.value)
                    if row is None:
                        session.add(ServerSetting(key=key.value, value_json=value, write_sequence=sequence))
                    elif row.write_sequence < sequence:
                        row.value_json = value
                        row.write_sequence = sequence
                    else:
                        logger.debug(
                            "Skipping stale write %d for %s (stored write %d)",
                            sequence,
                            key,
                            row.write_sequence,
                        )
                        return SaveOutcome(saved=True)
                    await session.commit()
            except Exception as e:
                msg = f"Failed to persist {key}: {e}"
                failure = PersistenceFailure(msg, ErrorCodes.DB_SAVE_FAILED, {"key": str(key), "write_sequence": sequence})
                failure.__cause__ = e
                return SaveOutcome(saved=False, error=failure)

        logger.debug("Persisted %s (write %d)", key, sequence)
        return SaveOutcome(saved=True)

    def _on_saved(
        self,
        key: ServerSettingKey,
        sequence: int,
        completion: SaveCompletion | None,
        task: asyncio.Task[SaveOutcome],
    ) -> None:
        self._pending.discard(task)

        if task.cancelled():
            msg = f"Save of {key} was cancelled"
            outcome = SaveOutcome(
                saved=False,
                error=PersistenceFailure(msg, ErrorCodes.DB_SAVE_CANCELLED, {"key": str(key), "write_sequence": sequence}),
            )
        else:
            outcome = task.result()

        if completion is None:
            if not outcome.saved:
                logger.warning("Could not persist %s (write %d): %s", key, sequence, outcome.error)
            return

        try:
            completion(outcome.saved, outcome.error)
        except Exception:
            logger.exception("Save completion for %s (write %d) raised", key, sequence)

    @staticmethod
    def _coerce_key(key: ServerSettingKey | str) -> ServerSettingKey:
        try:
            return ServerSettingKey(key)
        except ValueError as e:
            msg = f"Unknown server setting: {key!r}"
            raise ConfigurationError(msg, ErrorCodes.CONFIG_UNKNOWN_KEY, {"key": key}) from e

    @staticmethod
    def _validate(key: ServerSettingKey, value: Any) -> Any:
        if value is None:
            return None

        if key is ServerSettingKey.SERVER_URL:
            if not isinstance(value, str):
                msg = f"serverUrl must be a string, got {type(value).__name__}"
                raise ConfigurationError(msg, ErrorCodes.CONFIG_INVALID, {"key": str(key)})
            try:
                _http_url_adapter.validate_python(value)
            except PydanticValidationError as e:
                msg = f"serverUrl is not an http(s) URL: {value!r}"
                raise ConfigurationError(msg, ErrorCodes.CONFIG_INVALID, {"key": str(key)}) from e
            return value

        if isinstance(value, bool) or not isinstance(value, int):
            msg = f"currentEventId must be an integer, got {type(value).__name__}"
            raise ConfigurationError(msg, ErrorCodes.CONFIG_INVALID, {"key": str(key)})
        return value
