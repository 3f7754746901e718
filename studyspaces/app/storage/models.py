"""Models for the key-value document store."""

import datetime
from datetime import UTC

from sqlmodel import Field, SQLModel


class KeyValueEntry(SQLModel, table=True):
    """One JSON document stored under a string key."""

    __tablename__ = 'kv_entry'  # type: ignore[misc]

    key: str = Field(primary_key=True, max_length=200)
    value: str
    version: int = Field(default=1)
    updated_at: datetime.datetime = Field(
        default_factory=lambda: datetime.datetime.now(UTC)
    )
