"""SQLite storage backend.

Persists key-value pairs in a single SQLite table through a synchronous
SQLAlchemy engine so that cached responses and the bearer token survive
process restarts.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import structlog
from sqlalchemy import DateTime, String, Text, create_engine, delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from cinesense.exceptions import StorageError
from cinesense.storage.base import KeyValueStorage

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for storage tables."""
    pass


class KeyValueRecord(Base):
    """One stored key and its serialized value."""

    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(
        String(1024),
        primary_key=True,
        comment="Storage key",
    )
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Serialized value",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
        comment="Timestamp of the last write",
    )


class SQLiteStorage(KeyValueStorage):
    """Durable storage backed by a SQLite file.

    Example:
        ```python
        storage = SQLiteStorage("~/.cinesense/cache.db")
        storage.set("greeting", "hello")
        storage.get("greeting")  # "hello"
        ```
    """

    def __init__(self, path: Union[str, Path] = ":memory:", *, echo: bool = False) -> None:
        """Initialize the storage and create the table if needed.

        Args:
            path: Database file path, or ":memory:" for a throwaway database
            echo: Log emitted SQL
        """
        if str(path) == ":memory:":
            url = "sqlite://"
            self.path: Optional[Path] = None
        else:
            self.path = Path(path).expanduser()
            self.path.parent.mkdir(parents=True, exist_ok=True)
            url = f"sqlite:///{self.path}"

        self._engine = create_engine(url, echo=echo)
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not initialize storage at {path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        try:
            with Session(self._engine) as session:
                return session.scalar(
                    select(KeyValueRecord.value).where(KeyValueRecord.key == key)
                )
        except SQLAlchemyError as e:
            raise StorageError(f"Storage read failed for {key!r}: {e}") from e

    def set(self, key: str, value: str) -> None:
        stmt = insert(KeyValueRecord).values(key=key, value=value, updated_at=_utcnow())
        stmt = stmt.on_conflict_do_update(
            index_elements=[KeyValueRecord.key],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )
        try:
            with Session(self._engine) as session, session.begin():
                session.execute(stmt)
        except SQLAlchemyError as e:
            raise StorageError(f"Storage write failed for {key!r}: {e}") from e

    def delete(self, key: str) -> None:
        self.delete_many([key])

    def delete_many(self, keys: list[str]) -> None:
        if not keys:
            return
        try:
            with Session(self._engine) as session, session.begin():
                session.execute(delete(KeyValueRecord).where(KeyValueRecord.key.in_(keys)))
        except SQLAlchemyError as e:
            raise StorageError(f"Storage delete failed: {e}") from e

    def get_all_keys(self) -> list[str]:
        try:
            with Session(self._engine) as session:
                return list(session.scalars(select(KeyValueRecord.key)))
        except SQLAlchemyError as e:
            raise StorageError(f"Storage key listing failed: {e}") from e

    def clear_all(self) -> None:
        try:
            with Session(self._engine) as session, session.begin():
                session.execute(delete(KeyValueRecord))
        except SQLAlchemyError as e:
            raise StorageError(f"Storage clear failed: {e}") from e

    def close(self) -> None:
        self._engine.dispose()
        logger.debug("storage_closed", path=str(self.path) if self.path else ":memory:")
