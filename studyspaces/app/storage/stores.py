"""Versioned key-value stores and the JSON documents kept in them.

Every value carries a version token that starts at 1 and increases on each
write. Writers pass the version they read; a mismatch means somebody else
wrote in between and raises :class:`ConcurrentWriteError`. Version 0 stands
for "key does not exist yet".
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Generic, NamedTuple, Protocol, TypeVar

import pydantic
import sqlalchemy
import sqlalchemy.exc
from sqlmodel import Session, select

from .. import settings
from .models import KeyValueEntry

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


class VersionedValue(NamedTuple):
    value: str
    version: int


class ConcurrentWriteError(Exception):
    """Raised when a key changed between read and write."""

    def __init__(self, key: str, expected_version: int) -> None:
        super().__init__(
            f'Key {key!r} is no longer at version {expected_version}'
        )
        self.key = key
        self.expected_version = expected_version


class KeyValueStore(Protocol):
    """Minimal storage capability the check-in engine depends on."""

    def read(self, key: str) -> VersionedValue | None: ...

    def write(self, key: str, value: str, expected_version: int) -> int: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Implementations
# ---------------------------------------------------------------------------


class MemoryKeyValueStore:
    """Dict-backed store, used for embedding and tests."""

    def __init__(self) -> None:
        self._data: dict[str, VersionedValue] = {}

    def read(self, key: str) -> VersionedValue | None:
        return self._data.get(key)

    def write(self, key: str, value: str, expected_version: int) -> int:
        current = self._data.get(key)
        current_version = current.version if current else 0
        if current_version != expected_version:
            raise ConcurrentWriteError(key, expected_version)
        self._data[key] = VersionedValue(value, current_version + 1)
        return current_version + 1

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqlKeyValueStore:
    """Store backed by the ``kv_entry`` table, one row per key."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def read(self, key: str) -> VersionedValue | None:
        entry = self.session.exec(
            select(KeyValueEntry)
            .where(KeyValueEntry.key == key)
            .execution_options(populate_existing=True)
        ).first()
        if entry is None:
            return None
        return VersionedValue(entry.value, entry.version)

    def write(self, key: str, value: str, expected_version: int) -> int:
        now = datetime.now(UTC)
        if expected_version == 0:
            statement = sqlalchemy.insert(KeyValueEntry).values(
                key=key, value=value, version=1, updated_at=now
            )
            try:
                self.session.connection().execute(statement)
                self.session.commit()
            except sqlalchemy.exc.IntegrityError:
                self.session.rollback()
                raise ConcurrentWriteError(key, expected_version) from None
            return 1

        statement = (
            sqlalchemy.update(KeyValueEntry)
            .where(KeyValueEntry.key == key)  # type: ignore[arg-type]
            .where(KeyValueEntry.version == expected_version)  # type: ignore[arg-type]
            .values(value=value, version=expected_version + 1, updated_at=now)
        )
        result = self.session.connection().execute(statement)
        if result.rowcount != 1:
            self.session.rollback()
            raise ConcurrentWriteError(key, expected_version)
        self.session.commit()
        return expected_version + 1

    def delete(self, key: str) -> None:
        self.session.connection().execute(
            sqlalchemy.delete(KeyValueEntry).where(KeyValueEntry.key == key)  # type: ignore[arg-type]
        )
        self.session.commit()


# ---------------------------------------------------------------------------
# JSON documents
# ---------------------------------------------------------------------------


class JsonDocument(Generic[T]):
    """A pydantic-typed JSON value stored under a single key.

    Missing or undecodable data loads as ``default()``. Writes go through
    :meth:`update`, which retries the whole read-modify-write when another
    writer got there first.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        adapter: pydantic.TypeAdapter[T],
        default: Callable[[], T],
        retries: int | None = None,
    ) -> None:
        self.store = store
        self.key = key
        self.adapter = adapter
        self.default = default
        self.retries = settings.WRITE_RETRIES if retries is None else retries

    def _decode(self, stored: VersionedValue | None) -> T:
        if stored is None:
            return self.default()
        try:
            return self.adapter.validate_json(stored.value)
        except pydantic.ValidationError as e:
            logger.warning(
                'Discarding unreadable document %r (version %d): %s',
                self.key,
                stored.version,
                e.error_count(),
            )
            return self.default()

    def _encode(self, value: T) -> str:
        return self.adapter.dump_json(value, by_alias=True).decode()

    def load(self) -> T:
        """Return the stored value, or the default."""
        return self._decode(self.store.read(self.key))

    def save(self, value: T) -> None:
        """Overwrite the stored value (last write wins)."""
        for attempt in range(self.retries + 1):
            stored = self.store.read(self.key)
            version = stored.version if stored else 0
            try:
                self.store.write(self.key, self._encode(value), version)
                return
            except ConcurrentWriteError:
                if attempt == self.retries:
                    raise

    def update(self, mutate: Callable[[T], R]) -> R:
        """Apply ``mutate`` to a fresh copy of the value and write it back.

        ``mutate`` may modify the value in place; its return value is passed
        through. The mutation is re-run on a re-read value after a conflict.
        """
        for attempt in range(self.retries + 1):
            stored = self.store.read(self.key)
            version = stored.version if stored else 0
            value = self._decode(stored)
            result = mutate(value)
            try:
                self.store.write(self.key, self._encode(value), version)
                return result
            except ConcurrentWriteError:
                if attempt == self.retries:
                    raise
                logger.info(
                    'Conflict writing %r at version %d, retrying', self.key, version
                )
        raise AssertionError('unreachable')

    def clear(self) -> None:
        """Remove the stored value."""
        self.store.delete(self.key)
